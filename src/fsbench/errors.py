"""Exception classes raised by the benchmark engine."""


class FsbenchError(Exception):
    """
    Base exception class for all fsbench errors.
    """
    pass


class ConfigError(FsbenchError):
    """
    Raised when a benchmark configuration is invalid. Surfaces before any
    worker starts.
    """
    pass


class CreateError(FsbenchError):
    """
    Raised when a file (or one of its parent directories) cannot be created.
    """

    def __init__(self, path: str, message: str = "") -> None:
        self.path = path
        super().__init__(message or f"cannot create {path}")


class WriteError(FsbenchError):
    """
    Raised when a write fails mid-file. Bytes already written stay on disk.
    """

    def __init__(self, path: str, message: str = "") -> None:
        self.path = path
        super().__init__(message or f"write failed for {path}")


class MergeError(FsbenchError):
    """
    Raised when an aggregated status is merged more than once into the same
    accumulator.
    """
    pass
