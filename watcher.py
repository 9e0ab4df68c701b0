import logging
import os
import threading
from enum import Enum
from threading import Thread
from typing import Callable, List, Optional, Protocol

from api_client import ConfigStoreClient
from filename_pattern import FilenamePatternError, WatchedFile, extract_key, matches
from seen_set import SeenSet

logger = logging.getLogger("watcher")

SLEEP_BETWEEN_CHECK = 2.0
THREAD_NAME = "Input Config Loader"

class WatcherState(Enum):
    SCANNING = "scanning"
    FOR_EACH_FILE = "for_each_file"
    SLEEPING = "sleeping"
    STOPPED = "stopped"

class ConfigDirectory(Protocol):
    def list_names(self) -> List[str]:
        ...

    def read_text(self, name: str) -> str:
        ...

    def absolute_path(self, name: str) -> str:
        ...

class LocalConfigDirectory:
    def __init__(self, path: str):
        self.path = os.path.abspath(path)

    def list_names(self) -> List[str]:
        with os.scandir(self.path) as entries:
            return [entry.name for entry in entries if entry.is_file()]

    def read_text(self, name: str) -> str:
        # platform default encoding
        with open(self.absolute_path(name), "r") as fp:
            return fp.read()

    def absolute_path(self, name: str) -> str:
        return os.path.join(self.path, name)

class InputConfigWatcher:
    """Polls a directory for input.config-<service>.json files and registers
    each new one with the config store.

    A path is marked seen once its service key is known to the store, either
    because it already existed or because create succeeded. Everything else
    leaves the path unmarked, so the whole attempt is repeated next cycle.
    """

    def __init__(self,
                 directory: ConfigDirectory,
                 store: ConfigStoreClient,
                 cluster_name: str,
                 poll_interval: float = SLEEP_BETWEEN_CHECK,
                 stop_event: Optional[threading.Event] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        self.directory = directory
        self.store = store
        self.cluster_name = cluster_name
        self.poll_interval = poll_interval
        self.stop_event = stop_event or threading.Event()
        self._sleep = sleep
        self.seen = SeenSet()
        self.state = WatcherState.SCANNING

    def _scan(self) -> Optional[List[WatchedFile]]:
        self.state = WatcherState.SCANNING
        try:
            names = self.directory.list_names()
        except OSError as e:
            logger.warning(
                "action=list_failed dir=%s error=%s",
                getattr(self.directory, "path", None), e
            )
            return None

        return [
            WatchedFile(path=self.directory.absolute_path(name), filename=name)
            for name in names
            if matches(name)
        ]

    def _handle_file(self, watched: WatchedFile) -> bool:
        if self.seen.contains(watched.path):
            return False

        try:
            key = extract_key(watched.filename)
        except FilenamePatternError as e:
            logger.warning(
                "action=skip reason=bad_file_name path=%s error=%s",
                watched.path, e
            )
            return False

        try:
            content = self.directory.read_text(watched.filename)

            if self.store.exists_input_config(self.cluster_name, key):
                logger.info(
                    "action=already_registered service=%s path=%s",
                    key, watched.path
                )
            else:
                self.store.create_input_config(self.cluster_name, key, content)
                logger.info(
                    "action=registered service=%s cluster=%s path=%s",
                    key, self.cluster_name, watched.path
                )
        except Exception as e:
            logger.warning(
                "action=register_failed path=%s error=%s",
                watched.path, e, exc_info=True
            )
            return False

        self.seen.add(watched.path)
        return True

    def run_cycle(self) -> List[str]:
        """List the directory once and try every new matching file.

        Returns the paths marked seen during this cycle.
        """
        marked = []
        files = self._scan()
        if files is None:
            return marked

        self.state = WatcherState.FOR_EACH_FILE
        for watched in files:
            if self._handle_file(watched):
                marked.append(watched.path)

        return marked

    def sleep_interval(self):
        self.state = WatcherState.SLEEPING

        if self._sleep is None:
            self.stop_event.wait(self.poll_interval)
            return

        try:
            self._sleep(self.poll_interval)
        except InterruptedError as e:
            logger.debug("action=sleep_interrupted error=%s", e)

    def run(self, max_cycles: Optional[int] = None):
        cycles = 0

        while not self.stop_event.is_set():
            if max_cycles is not None and cycles >= max_cycles:
                break

            try:
                self.run_cycle()
            except Exception:
                logger.exception("action=cycle_failed")

            cycles += 1
            self.sleep_interval()

        self.state = WatcherState.STOPPED
        logger.info("action=watcher_stopped cycles=%d seen=%d", cycles, len(self.seen))

    def stop(self):
        self.stop_event.set()

def start_watcher(
        config_dir: str,
        cluster_name: str,
        store: ConfigStoreClient,
        poll_interval: float = SLEEP_BETWEEN_CHECK
) -> InputConfigWatcher:
    watcher = InputConfigWatcher(
        LocalConfigDirectory(config_dir),
        store,
        cluster_name,
        poll_interval=poll_interval
    )

    Thread(target=watcher.run, name=THREAD_NAME, daemon=True).start()
    logger.info(
        "action=start_watcher path=%s cluster=%s interval=%.1f",
        config_dir, cluster_name, poll_interval
    )
    return watcher
