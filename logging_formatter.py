import logging
import sys

def logging_formatter(level=logging.INFO):
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)

    if not root.handlers:
        root.addHandler(handler)

    # per-request connection chatter
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))
