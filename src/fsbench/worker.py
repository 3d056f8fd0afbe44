import logging
import random
from collections.abc import Callable

from .config import BenchmarkConfig
from .errors import CreateError, FsbenchError, WriteError
from .fs import Client
from .metrics import AggregatedStatus
from .models import Aborted, Completed, CompletedWithErrors, WorkerOutcome
from .sampling import DEFAULT_SAMPLE_PERIOD_S, RateSampler
from .utils import RandomNameGenerator

logger = logging.getLogger(__name__)


class Worker:
    """
    Writes ``times`` files through ``client``, one after another.

    ``config`` must already be normalized (positive block size, resolved
    ``max_file_size``). Each file's Status is folded into ``self.status``,
    which only this worker mutates until ``run`` returns.
    """

    def __init__(
        self,
        worker_id: int,
        client: Client,
        config: BenchmarkConfig,
        times: int,
        rng: random.Random | None = None,
        should_stop: Callable[[], bool] | None = None,
        on_file_done: Callable[[int], None] | None = None,
        sample_period: float = DEFAULT_SAMPLE_PERIOD_S,
    ) -> None:
        self.worker_id = worker_id
        self.client = client
        self.config = config
        self.times = times
        self.rng = rng or random.Random()
        self.names = RandomNameGenerator(random.Random(self.rng.getrandbits(64)))
        self.should_stop = should_stop
        self.on_file_done = on_file_done
        self.sample_period = sample_period

        self.block = bytes(config.block_size)
        self.status = AggregatedStatus(name=f"W{worker_id}")

    def run(self) -> WorkerOutcome:
        logger.debug(f"[W{self.worker_id}] Starting, {self.times} files assigned")
        for i in range(self.times):
            if self.should_stop and self.should_stop():
                logger.info(f"[W{self.worker_id}] Stop requested after {i} of {self.times} files")
                return Aborted("cancelled")

            try:
                self._write_file()
            except FsbenchError as e:
                self.status.record_error()
                if not self.config.continue_on_error:
                    logger.error(f"[W{self.worker_id}] {e}; aborting remaining iterations")
                    return Aborted(str(e), e)
                logger.warning(f"[W{self.worker_id}] {e}; moving on")

        logger.debug(f"[W{self.worker_id}] Finished: {self.status}")
        if self.status.errors:
            return CompletedWithErrors(self.status.errors)
        return Completed()

    def _write_file(self) -> None:
        path = self.names.path(self.config.directory_depth)
        expected = self.file_size()

        try:
            writer = self.client.create(path)
        except OSError as e:
            raise CreateError(path, f"cannot create {path}: {e}") from e

        size = 0
        try:
            with RateSampler(
                writer, sample_period=self.sample_period, name=path
            ) as flow:
                # at least one block, even for an empty target
                while True:
                    n = flow.write(self.block)
                    if n <= 0:
                        raise WriteError(path, f"short write on {path} after {size} bytes")
                    size += n
                    if size >= expected:
                        break
        except OSError as e:
            raise WriteError(path, f"write failed for {path} after {size} bytes: {e}") from e

        self.status.fold(flow.status())
        logger.debug(f"[W{self.worker_id}] Wrote {path} ({size} bytes)")
        if self.on_file_done:
            self.on_file_done(self.worker_id)

    def file_size(self) -> int:
        c = self.config
        if c.min_file_size == c.max_file_size:
            return c.min_file_size

        steps = (c.max_file_size - c.min_file_size) // c.block_size
        if steps <= 0:
            return c.min_file_size
        return c.min_file_size + self.rng.randrange(steps) * c.block_size
