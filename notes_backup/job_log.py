"""
Per-job log files.

Each backup job appends timestamped lines to its own log file inside the
job's log folder. The file is opened and closed on every write so no handle
is held between steps.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Tuple, Union

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class JobLogWriter:
    """Base class for job log writers."""

    def append(self, path: Union[str, Path], line: str) -> None:
        """Append one line to the log at path."""
        raise NotImplementedError


class FileJobLog(JobLogWriter):
    """Appends timestamped lines to log files on disk."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now, encoding: str = "utf-8"):
        self.clock = clock
        self.encoding = encoding

    def format_line(self, line: str) -> str:
        return f"{self.clock().strftime(TIMESTAMP_FORMAT)} - {line}"

    def append(self, path: Union[str, Path], line: str) -> None:
        with open(path, "a", encoding=self.encoding) as f:
            f.write(self.format_line(line) + "\n")


class MemoryJobLog(JobLogWriter):
    """Keeps log lines in memory instead of writing files."""

    def __init__(self):
        self.entries: List[Tuple[Path, str]] = []

    def append(self, path: Union[str, Path], line: str) -> None:
        self.entries.append((Path(path), line))

    def lines_for(self, path: Union[str, Path]) -> List[str]:
        path = Path(path)
        return [line for entry_path, line in self.entries if entry_path == path]
