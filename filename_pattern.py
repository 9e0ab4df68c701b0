import re
from dataclasses import dataclass
from typing import Optional

PREFIX = "input.config-"
SUFFIX = ".json"

# must accept a subset of what matches() accepts
_KEY_PATTERN = re.compile(r"^input\.config-(.+)\.json$")

class FilenamePatternError(ValueError):
    pass

@dataclass(frozen=True)
class WatchedFile:
    path: str
    filename: str
    key: Optional[str] = None

def matches(filename: str) -> bool:
    return filename.startswith(PREFIX) and filename.endswith(SUFFIX)

def extract_key(filename: str) -> str:
    m = _KEY_PATTERN.match(filename)
    if m is None:
        raise FilenamePatternError(f"no service key in file name: {filename}")
    return m.group(1)
