"""Filesystem clients the benchmark writes through."""

import logging
import os
import threading
from typing import Protocol

logger = logging.getLogger(__name__)


class Writer(Protocol):
    """Protocol for an open file. ``write`` raises ``OSError`` on failure."""

    def write(self, data: bytes) -> int:
        ...

    def close(self) -> None:
        ...


class Client(Protocol):
    """Protocol for storage backends."""

    def create(self, path: str) -> Writer:
        ...


class LocalClient:
    """Writes files below ``root`` on the local disk, creating parent directories."""

    def __init__(self, root: str = "./fsbench-data"):
        self.root = root
        os.makedirs(self.root, exist_ok=True)
        logger.info(f"Local filesystem client rooted at {self.root}")

    def create(self, path: str) -> Writer:
        full_path = os.path.join(self.root, path)
        parent = os.path.dirname(full_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        # unbuffered: every write reaches the filesystem before it is timed
        return open(full_path, "wb", buffering=0)


class MemoryFile:
    def __init__(self, path: str):
        self.path = path
        self.data = bytearray()
        self.closed = False

    def write(self, data: bytes) -> int:
        if self.closed:
            raise OSError(f"write to closed file {self.path}")
        self.data.extend(data)
        return len(data)

    def close(self) -> None:
        self.closed = True

    def __len__(self) -> int:
        return len(self.data)


class MemoryClient:
    """Keeps every created file in a dict, keyed by path."""

    def __init__(self):
        self.files: dict[str, MemoryFile] = {}
        self._lock = threading.Lock()

    def create(self, path: str) -> Writer:
        f = MemoryFile(path)
        with self._lock:
            if path in self.files:
                logger.debug(f"Overwriting in-memory file {path}")
            self.files[path] = f
        return f

    def sizes(self) -> dict[str, int]:
        with self._lock:
            return {path: len(f) for path, f in self.files.items()}
