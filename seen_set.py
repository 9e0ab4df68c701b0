from typing import Set

class SeenSet:
    """Absolute paths already registered during this process lifetime.

    Only the watcher loop touches it, so there is no locking.
    """

    def __init__(self):
        self._paths: Set[str] = set()

    def contains(self, path: str) -> bool:
        return path in self._paths

    def add(self, path: str):
        self._paths.add(path)

    def __contains__(self, path: str) -> bool:
        return self.contains(path)

    def __len__(self) -> int:
        return len(self._paths)
