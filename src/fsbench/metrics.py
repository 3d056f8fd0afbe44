import logging
import uuid
from collections import Counter
from collections.abc import Iterable

from .errors import MergeError
from .models import MetricsCallback, Status, Summary

logger = logging.getLogger(__name__)


class AggregatedStatus:
    """
    Running totals of many file writes.

    ``fold`` ingests one file's Status and is only called by the worker that
    owns the instance, so there is no locking. ``merge`` absorbs another
    accumulator once its owner has finished. A merge is a one-time ownership
    transfer: each instance has a unique id, remembers every id it absorbed,
    and refuses to absorb any of them again.

    ``avg_rate`` is always derived from ``total_bytes / total_duration``.
    """

    def __init__(self, name: str = "") -> None:
        self.uid = uuid.uuid4().hex
        self.name = name
        self.files_completed = 0
        self.errors = 0
        self.total_bytes = 0
        self.total_duration = 0.0
        self.samples = 0
        self.peak_rate = 0.0
        # per-file average rate (bytes/s, truncated) -> number of files
        self.histogram: Counter[int] = Counter()
        self._absorbed: set[str] = set()

    @property
    def avg_rate(self) -> float:
        if self.total_duration <= 0:
            return 0.0
        return self.total_bytes / self.total_duration

    def fold(self, status: Status) -> None:
        self.files_completed += 1
        self.total_bytes += status.bytes
        self.total_duration += status.duration
        self.samples += status.samples
        if status.peak_rate > self.peak_rate:
            self.peak_rate = status.peak_rate
        self.histogram[int(status.avg_rate)] += 1

    def record_error(self) -> None:
        self.errors += 1

    def merge(self, other: "AggregatedStatus") -> None:
        if other is self:
            raise MergeError(f"cannot merge '{self.name}' into itself")
        incoming = {other.uid} | other._absorbed
        seen = self._absorbed | {self.uid}
        if incoming & seen:
            raise MergeError(
                f"'{other.name or other.uid}' was already merged into '{self.name or self.uid}'"
            )

        self.files_completed += other.files_completed
        self.errors += other.errors
        self.total_bytes += other.total_bytes
        self.total_duration += other.total_duration
        self.samples += other.samples
        self.peak_rate = max(self.peak_rate, other.peak_rate)
        self.histogram.update(other.histogram)
        self._absorbed |= incoming
        logger.debug(
            f"Merged '{other.name}' into '{self.name}': files={self.files_completed}, "
            f"errors={self.errors}, bytes={self.total_bytes}"
        )

    @classmethod
    def snapshot(cls, sources: Iterable["AggregatedStatus"], name: str = "snapshot") -> "AggregatedStatus":
        """
        Sum the scalar counters of live accumulators.

        Histograms are left out so that the sources can keep folding while
        this runs. Only ``files_completed`` is guaranteed to be current.
        """
        snap = cls(name)
        for s in sources:
            snap.files_completed += s.files_completed
            snap.errors += s.errors
            snap.total_bytes += s.total_bytes
            snap.total_duration += s.total_duration
            snap.samples += s.samples
            snap.peak_rate = max(snap.peak_rate, s.peak_rate)
        return snap

    def __repr__(self) -> str:
        return (
            f"AggregatedStatus(name={self.name!r}, files={self.files_completed}, "
            f"errors={self.errors}, bytes={self.total_bytes}, "
            f"duration={self.total_duration:.3f}s, avg_rate={self.avg_rate:.0f})"
        )


def histogram_percentile(histogram: Counter[int], p: float) -> float | None:
    n = sum(histogram.values())
    if n == 0:
        return None
    target = max(0, min(n - 1, int(p * (n - 1))))
    seen = 0
    for rate in sorted(histogram):
        seen += histogram[rate]
        if seen > target:
            return float(rate)
    return float(max(histogram))


def compute_summary(
    status: AggregatedStatus,
    workers: int,
    metrics_callback: MetricsCallback | None = None,
) -> Summary:
    logger.debug(
        f"Computing summary: files={status.files_completed}, errors={status.errors}, workers={workers}"
    )

    # Durations add up across concurrent workers; dividing by the worker count
    # approximates wall-clock time.
    secs = status.total_duration / workers if workers > 0 else 0.0
    throughput = status.total_bytes / secs if secs > 0 else 0.0
    hist = status.histogram

    summary_dict = {
        "workers": workers,
        "files": status.files_completed,
        "errors": status.errors,
        "bytes": status.total_bytes,
        "duration": status.total_duration,
        "avg_rate": status.avg_rate,
        "throughput": throughput,
        "samples": status.samples,
        "peak_rate": status.peak_rate,
        "p50": histogram_percentile(hist, 0.50),
        "p90": histogram_percentile(hist, 0.90),
        "p99": histogram_percentile(hist, 0.99),
        "min": float(min(hist)) if hist else None,
        "max": float(max(hist)) if hist else None,
    }

    if metrics_callback:
        metrics_callback(summary_dict)

    if not status.files_completed:
        logger.warning("No files completed. Summary has no rate data.")
    else:
        logger.info(
            f"Summary computed: files={status.files_completed}, errors={status.errors}, "
            f"bytes={status.total_bytes}, throughput={throughput:.0f} B/s"
        )

    return Summary(**summary_dict)
