import logging
import sys
import threading

from pydantic import ValidationError

from api_client import build_store
from config_loader import load_config
from logging_formatter import logging_formatter
from watcher import start_watcher

logger = logging.getLogger("main")

def main(config_path: str = "config.yaml") -> int:
    logging_formatter()

    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        logger.error("action=config_failed path=%s error=%s", config_path, e)
        return 1

    logging_formatter(config.log_level)

    watcher = start_watcher(
        config_dir=config.config_dir,
        cluster_name=config.cluster_name,
        store=build_store(config.store),
        poll_interval=config.poll_interval_seconds
    )

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logger.info("action=keyboard_interrupt")
    finally:
        watcher.stop()

    return 0

if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
