import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

KB = 1024
MB = 1024 * KB
GB = 1024 * MB

MAX_BLOCK_SIZE = 1 * GB


class BenchmarkConfig(BaseModel):
    """Benchmark parameters, fixed for the whole run"""

    model_config = ConfigDict(frozen=True)

    workers: int = Field(4, gt=0)
    files: int = Field(100, gt=0)  # total across all workers
    block_size: int = Field(0, ge=0)  # 0: use min_file_size
    min_file_size: int = Field(1 * MB, ge=0)
    max_file_size: Optional[int] = Field(None, ge=0)  # None: same as min_file_size
    directory_depth: int = Field(0, ge=0)
    continue_on_error: bool = False
    seed: Optional[int] = None

    @model_validator(mode="after")
    def _check_sizes(self) -> "BenchmarkConfig":
        if self.max_file_size is not None and self.max_file_size < self.min_file_size:
            raise ValueError(
                f"max_file_size ({self.max_file_size}) is smaller than min_file_size ({self.min_file_size})"
            )
        return self

    @property
    def fixed_size(self) -> bool:
        return self.max_file_size is None or self.max_file_size == self.min_file_size

    def normalized(self) -> "BenchmarkConfig":
        """Resolve defaults: block size falls back to the file size and is capped at 1 GiB."""
        block_size = self.block_size or self.min_file_size
        if block_size > MAX_BLOCK_SIZE:
            logger.info(f"Block size {block_size} clamped to {MAX_BLOCK_SIZE}")
            block_size = MAX_BLOCK_SIZE
        if block_size <= 0:
            raise ConfigError("block_size must be positive (set it or use a non-zero file size)")

        max_file_size = self.min_file_size if self.max_file_size is None else self.max_file_size
        return self.model_copy(update={"block_size": block_size, "max_file_size": max_file_size})


def load_config(**kwargs: Any) -> BenchmarkConfig:
    """Build a config, turning validation failures into ConfigError."""
    try:
        return BenchmarkConfig(**kwargs)
    except ValidationError as e:
        raise ConfigError(str(e)) from e


def partition(total: int, workers: int) -> list[int]:
    """Split ``total`` files over ``workers``; the first ``total % workers`` get one extra."""
    if workers <= 0:
        raise ConfigError(f"workers must be positive, got {workers}")
    if total < 0:
        raise ConfigError(f"files must not be negative, got {total}")
    base, extra = divmod(total, workers)
    return [base + 1 if i < extra else base for i in range(workers)]
