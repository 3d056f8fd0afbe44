__all__ = [
    "AggregatedStatus",
    "BenchmarkConfig",
    "BenchmarkRunner",
    "RandomNameGenerator",
    "RateSampler",
    "Worker",
    "compute_summary",
    "render_rate_histogram",
    "render_summary",
]


from .config import BenchmarkConfig
from .core import BenchmarkRunner
from .metrics import AggregatedStatus, compute_summary
from .rendering import render_rate_histogram, render_summary
from .sampling import RateSampler
from .utils import RandomNameGenerator
from .worker import Worker
