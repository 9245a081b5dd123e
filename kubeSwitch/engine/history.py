# kubeSwitch/engine/history.py
"""
Append-only switch history.

Every successful switch appends one `<unix-seconds> <name> <namespace>` line.
Lookups for "previous" walk the file backwards block by block, so only the
tail that is actually needed gets read.
"""
import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from kubeSwitch.constants import HISTORY_BLOCK_SIZE, HISTORY_FILE_NAME
from kubeSwitch.errors import StoreError

logger = logging.getLogger(__name__)


class ReverseLineReader:
    """
    Iterates over the lines of a file from last to first.

    Blocks of `block_size` bytes are read from the end of the file; the partial
    line at the start of each block is carried over to the next (earlier) block.
    The file is opened when iteration starts and closed when it ends.
    """

    def __init__(self, path: str, block_size: int = HISTORY_BLOCK_SIZE):
        if block_size <= 0:
            raise ValueError("block_size must be positive")
        self.path = path
        self.block_size = block_size

    def __iter__(self) -> Iterator[str]:
        with open(self.path, "rb") as stream:
            stream.seek(0, os.SEEK_END)
            position = stream.tell()
            remainder = b""
            while position > 0:
                read_size = min(self.block_size, position)
                position -= read_size
                stream.seek(position)
                block = stream.read(read_size) + remainder
                lines = block.split(b"\n")
                remainder = lines.pop(0)
                for line in reversed(lines):
                    yield line.decode("utf-8", errors="replace")
            yield remainder.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class HistoryEntry:
    timestamp: int
    name: str
    namespace: str

    def to_line(self) -> str:
        return f"{self.timestamp} {self.name} {self.namespace}\n"


class HistoryJournal:
    """
    The history file.

    Args:
        path: Location of the history file.
        clock: Returns the current time in seconds; injectable for tests.
    """

    def __init__(self, path: str, clock: Callable[[], float] = time.time,
                 block_size: int = HISTORY_BLOCK_SIZE):
        self.path = path
        self.clock = clock
        self.block_size = block_size

    @classmethod
    def default_path(cls, home: str) -> str:
        return os.path.join(home, HISTORY_FILE_NAME)

    def append(self, name: str, namespace: str) -> HistoryEntry:
        """Appends one entry and flushes it."""
        entry = HistoryEntry(timestamp=int(self.clock()), name=name, namespace=namespace)
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(entry.to_line())
                f.flush()
        except OSError as e:
            raise StoreError("write content to history file", self.path, e.strerror) from e
        logger.debug(f"History: recorded {entry.name} {entry.namespace}")
        return entry

    def entries(self) -> Iterator[HistoryEntry]:
        """
        Yields valid entries newest first.

        Malformed lines are skipped. A missing history file yields nothing.
        """
        reader = ReverseLineReader(self.path, self.block_size)
        try:
            for line in reader:
                entry = self.parse_line(line)
                if entry is None:
                    if line.strip():
                        logger.debug(f"History: skipping malformed line {line!r}")
                    continue
                yield entry
        except FileNotFoundError:
            logger.debug(f"History file '{self.path}' does not exist yet")
            return
        except OSError as e:
            raise StoreError("read history file", self.path, e.strerror) from e

    @staticmethod
    def parse_line(line: str) -> Optional[HistoryEntry]:
        """Parses `<timestamp> <name> <namespace>`; returns None for anything else."""
        line = line.strip()
        if not line:
            return None
        fields = line.split(" ")
        if len(fields) != 3:
            return None
        timestamp, name, namespace = fields
        if not name or not namespace:
            return None
        try:
            seconds = int(timestamp)
        except ValueError:
            return None
        return HistoryEntry(timestamp=seconds, name=name, namespace=namespace)
