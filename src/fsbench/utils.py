import logging
import os
import random
import signal
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

# ────────────────────────────────
# Time Helpers
# ────────────────────────────────


def now() -> float:
    return time.perf_counter()


# ────────────────────────────────
# Random Names
# ────────────────────────────────

DIRECTORY_LENGTH = 2
FILENAME_LENGTH = 32
FILE_EXTENSION = ".zero"

LETTERS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
LETTER_IDX_BITS = 6  # 6 bits to represent a letter index
LETTER_IDX_MASK = (1 << LETTER_IDX_BITS) - 1
LETTER_IDX_MAX = 63 // LETTER_IDX_BITS  # letter indices fitting in 63 bits


class RandomNameGenerator:
    """
    Random letter strings for file and directory names.

    Each instance owns its random source, so one generator per worker needs
    no locking. A single 63-bit draw is sliced into 6-bit indices; indices
    past the alphabet are rejected to keep the distribution uniform.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        filename_length: int = FILENAME_LENGTH,
        directory_length: int = DIRECTORY_LENGTH,
        extension: str = FILE_EXTENSION,
    ) -> None:
        self.rng = rng or random.Random()
        self.filename_length = filename_length
        self.directory_length = directory_length
        self.extension = extension

    def generate(self, length: int) -> str:
        out = [""] * length
        i = length - 1
        cache, remain = self.rng.getrandbits(63), LETTER_IDX_MAX
        while i >= 0:
            if remain == 0:
                cache, remain = self.rng.getrandbits(63), LETTER_IDX_MAX
            idx = cache & LETTER_IDX_MASK
            if idx < len(LETTERS):
                out[i] = LETTERS[idx]
                i -= 1
            cache >>= LETTER_IDX_BITS
            remain -= 1
        return "".join(out)

    def path(self, depth: int) -> str:
        return nest_name(
            self.generate(self.filename_length),
            depth,
            self.directory_length,
            self.extension,
        )


def nest_name(
    name: str,
    depth: int,
    segment_length: int = DIRECTORY_LENGTH,
    extension: str = FILE_EXTENSION,
) -> str:
    """
    Peel up to ``depth`` leading segments off ``name`` as directories.

    Nesting stops early once the remainder is no longer than one segment.
    """
    segments = []
    rest = name
    for _ in range(depth):
        if len(rest) <= segment_length:
            logger.debug(f"Name {name!r} too short for depth {depth}, stopped at {len(segments)}")
            break
        segments.append(rest[:segment_length])
        rest = rest[segment_length:]
    return os.path.join(*segments, rest + extension)


# ────────────────────────────────
# Signal Handling
# ────────────────────────────────


class GracefulKiller:
    def __init__(self, on_kill: Callable[[], None] | None = None):
        self.on_kill = on_kill
        signal.signal(signal.SIGINT, self.exit_gracefully)
        signal.signal(signal.SIGTERM, self.exit_gracefully)

    def exit_gracefully(self, signum, frame):
        logger.warning("Received shutdown signal. Finishing in-flight files...")
        if self.on_kill:
            self.on_kill()
