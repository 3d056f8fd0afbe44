from dataclasses import dataclass
from typing import Any, Optional, Union
from collections.abc import Callable


@dataclass(frozen=True)
class Status:
    duration: float  # seconds covered by the samples
    bytes: int
    samples: int
    avg_rate: float  # bytes / duration
    peak_rate: float  # highest rate between two consecutive samples


@dataclass
class Summary:
    workers: int
    files: int
    errors: int
    bytes: int
    duration: float
    avg_rate: float
    throughput: float
    samples: int
    peak_rate: float
    p50: float | None
    p90: float | None
    p99: float | None
    min: float | None
    max: float | None


# Worker loop outcomes


@dataclass(frozen=True)
class Completed:
    pass


@dataclass(frozen=True)
class CompletedWithErrors:
    errors: int


@dataclass(frozen=True)
class Aborted:
    reason: str
    error: Optional[BaseException] = None


WorkerOutcome = Union[Completed, CompletedWithErrors, Aborted]

# Progress callback: (files completed so far, total files, worker id)
ProgressCallback = Callable[[int, int, int], None]

# Metrics callback: callable accepting the summary dict
MetricsCallback = Callable[[dict[str, Any]], None]
