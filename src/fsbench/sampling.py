import logging
from collections.abc import Callable

from .fs import Writer
from .models import Status
from .utils import now

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_PERIOD_S = 0.1


class RateSampler:
    """
    Measures the transfer rate of one write session.

    Every write is forwarded to the wrapped writer. A sample of the cumulative
    byte count is taken once ``sample_period`` seconds have passed since the
    previous one; the peak rate is the highest rate seen between two
    consecutive samples. Closing closes the writer, then takes a last sample
    and freezes ``status()``.
    """

    def __init__(
        self,
        writer: Writer,
        sample_period: float = DEFAULT_SAMPLE_PERIOD_S,
        clock: Callable[[], float] = now,
        name: str = "",
    ) -> None:
        assert sample_period >= 0
        self.writer = writer
        self.sample_period = sample_period
        self.clock = clock
        self.name = name

        self._start_t = clock()
        self._end_t: float | None = None
        self._bytes = 0
        self._samples = 0
        self._peak_rate = 0.0
        self._last_t = self._start_t
        self._last_bytes = 0

    @property
    def closed(self) -> bool:
        return self._end_t is not None

    def write(self, block: bytes) -> int:
        if self.closed:
            raise ValueError(f"write on closed sampler '{self.name}'")
        # OSError from the writer propagates untouched
        n = self.writer.write(block)
        self._bytes += n
        t = self.clock()
        if t - self._last_t >= self.sample_period:
            self._sample(t)
        return n

    def _sample(self, t: float) -> None:
        dt = t - self._last_t
        if dt <= 0:
            return
        rate = (self._bytes - self._last_bytes) / dt
        if rate > self._peak_rate:
            self._peak_rate = rate
        self._samples += 1
        self._last_t = t
        self._last_bytes = self._bytes
        logger.debug(f"Sampler '{self.name}' sample #{self._samples}: {rate:.0f} B/s")

    def close(self) -> None:
        if self.closed:
            return
        # the writer's final flush belongs to the measured duration
        try:
            self.writer.close()
        finally:
            t = self.clock()
            self._sample(t)
            self._end_t = t

    def status(self) -> Status:
        end = self._end_t if self._end_t is not None else self.clock()
        duration = max(0.0, end - self._start_t)
        avg_rate = self._bytes / duration if duration > 0 else 0.0
        return Status(
            duration=duration,
            bytes=self._bytes,
            samples=self._samples,
            avg_rate=avg_rate,
            peak_rate=self._peak_rate,
        )

    def __enter__(self) -> "RateSampler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
