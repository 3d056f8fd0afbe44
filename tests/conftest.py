"""Shared pytest fixtures and fake filesystem clients."""

import threading
import time

import pytest

from fsbench.fs import MemoryClient, MemoryFile


class StepClock:
    """Deterministic clock: every call returns the current time, then advances by ``step``."""

    def __init__(self, step: float = 1.0, start: float = 0.0):
        self.t = start
        self.step = step

    def __call__(self) -> float:
        t = self.t
        self.t += self.step
        return t


class RecordingWriter:
    def __init__(self, fail_on_write: int | None = None):
        self.chunks = []
        self.close_calls = 0
        self.fail_on_write = fail_on_write

    def write(self, data: bytes) -> int:
        if self.fail_on_write is not None and len(self.chunks) + 1 == self.fail_on_write:
            raise OSError("disk full")
        self.chunks.append(data)
        return len(data)

    def close(self) -> None:
        self.close_calls += 1


class FailingClient:
    """Wraps a client and fails the ``fail_on``-th call to ``create``."""

    def __init__(self, inner, fail_on: int, exc: Exception | None = None):
        self.inner = inner
        self.fail_on = fail_on
        self.exc = exc or OSError("permission denied")
        self.calls = 0

    def create(self, path: str):
        self.calls += 1
        if self.calls == self.fail_on:
            raise self.exc
        return self.inner.create(path)


class FailingWriteClient:
    """Every created file fails on its ``fail_on_write``-th write."""

    def __init__(self, fail_on_write: int):
        self.fail_on_write = fail_on_write
        self.writers = []

    def create(self, path: str):
        w = RecordingWriter(fail_on_write=self.fail_on_write)
        self.writers.append(w)
        return w


class SlowFile(MemoryFile):
    def __init__(self, path: str, delay: float):
        super().__init__(path)
        self.delay = delay

    def write(self, data: bytes) -> int:
        time.sleep(self.delay)
        return super().write(data)


class SlowClient(MemoryClient):
    """In-memory client whose writes sleep, so runs overlap with the test."""

    def __init__(self, delay: float = 0.002):
        super().__init__()
        self.delay = delay

    def create(self, path: str):
        f = SlowFile(path, self.delay)
        with self._lock:
            self.files[path] = f
        return f


@pytest.fixture
def memory_client():
    return MemoryClient()


@pytest.fixture
def slow_client():
    return SlowClient()


@pytest.fixture
def step_clock():
    return StepClock()
