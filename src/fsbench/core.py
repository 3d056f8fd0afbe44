import asyncio
import enum
import logging
import random
import threading
from concurrent.futures import ThreadPoolExecutor

from .config import BenchmarkConfig, partition
from .errors import ConfigError
from .fs import Client
from .metrics import AggregatedStatus
from .models import Aborted, ProgressCallback, WorkerOutcome
from .sampling import DEFAULT_SAMPLE_PERIOD_S
from .worker import Worker

from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn, MofNCompleteColumn


logger = logging.getLogger(__name__)


class RunnerState(enum.Enum):
    IDLE = "idle"
    INITIALIZED = "initialized"
    RUNNING = "running"
    COMPLETED = "completed"


class BenchmarkRunner:
    def __init__(
        self,
        client: Client,
        config: BenchmarkConfig,
        progress_callback: ProgressCallback | None = None,
        use_progress_bar: bool = False,
        sample_period: float = DEFAULT_SAMPLE_PERIOD_S,
    ) -> None:
        self.client = client
        self.config = config
        self.progress_callback = progress_callback
        self.use_progress_bar = use_progress_bar
        self.sample_period = sample_period

        self.state = RunnerState.IDLE
        self.assignments: list[int] = []
        self.workers: list[Worker] = []
        self.outcomes: list[WorkerOutcome] = []
        self.final: AggregatedStatus | None = None

        self._stop = threading.Event()
        self._progress_lock = threading.Lock()
        self._progress = None
        self._task_id = None

    # ────────────────────────────────
    # Initialization
    # ────────────────────────────────

    def init(self) -> None:
        if self.state is not RunnerState.IDLE:
            raise RuntimeError(f"init() called in state {self.state.value}")

        self.config = self.config.normalized()
        c = self.config
        if c.block_size <= 0:
            raise ConfigError(f"block_size must be positive, got {c.block_size}")

        self.assignments = partition(c.files, c.workers)
        master = random.Random(c.seed)
        self.workers = [
            Worker(
                worker_id=i,
                client=self.client,
                config=c,
                times=times,
                rng=random.Random(master.getrandbits(64)),
                should_stop=self._stop.is_set,
                on_file_done=self._file_done,
                sample_period=self.sample_period,
            )
            for i, times in enumerate(self.assignments)
        ]
        self.state = RunnerState.INITIALIZED
        logger.info(
            f"Initialized benchmark: workers={c.workers}, files={c.files}, "
            f"block_size={c.block_size}, file_size={c.min_file_size}..{c.max_file_size}, "
            f"depth={c.directory_depth}"
        )

    # ────────────────────────────────
    # Progress
    # ────────────────────────────────

    def status(self) -> AggregatedStatus:
        """Point-in-time progress. Only ``files_completed`` is guaranteed current."""
        return AggregatedStatus.snapshot(w.status for w in self.workers)

    def _file_done(self, worker_id: int) -> None:
        # runs on the worker thread
        if self._progress is not None and self._task_id is not None:
            self._progress.advance(self._task_id)
        if self.progress_callback:
            # counts only grow, so summing under the lock keeps reports ordered
            with self._progress_lock:
                completed = sum(w.status.files_completed for w in self.workers)
                self.progress_callback(completed, self.config.files, worker_id)

    def cancel(self) -> None:
        """Ask workers to stop after their current file."""
        if not self._stop.is_set():
            logger.info("Cancellation requested")
        self._stop.set()

    # ────────────────────────────────
    # Main Runner
    # ────────────────────────────────

    async def run(self) -> AggregatedStatus:
        if self.state is RunnerState.IDLE:
            self.init()
        if self.state is not RunnerState.INITIALIZED:
            raise RuntimeError(f"run() called in state {self.state.value}")

        self.state = RunnerState.RUNNING
        logger.info(f"Starting {self.config.files} files with {len(self.workers)} workers")

        if self.use_progress_bar:
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
            )
            self._progress.start()
            self._task_id = self._progress.add_task("[cyan]Writing...", total=self.config.files)

        loop = asyncio.get_running_loop()
        try:
            with ThreadPoolExecutor(
                max_workers=len(self.workers), thread_name_prefix="fsbench-worker"
            ) as pool:
                futures = [loop.run_in_executor(pool, w.run) for w in self.workers]
                results = await asyncio.gather(*futures, return_exceptions=True)
        finally:
            if self._progress is not None:
                self._progress.stop()

        self.outcomes = []
        for w, result in zip(self.workers, results):
            if isinstance(result, BaseException):
                logger.error(f"[W{w.worker_id}] Crashed: {result!r}", exc_info=result)
                w.status.record_error()
                result = Aborted(f"unexpected error: {result!r}", result)
            self.outcomes.append(result)

        # every worker has returned; nothing folds any more
        final = AggregatedStatus(name="total")
        for w in self.workers:
            final.merge(w.status)

        self.final = final
        self.state = RunnerState.COMPLETED
        logger.info(
            f"Run completed: {final.files_completed} files, {final.errors} errors, "
            f"{final.total_bytes} bytes"
        )
        return final
