# fsbench/logging_config.py
import logging
import sys
import threading

# Workers log from their own threads, so the thread name goes in every line.
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)-18s | %(name)-18s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _log_thread_exception(args: threading.ExceptHookArgs) -> None:
    if args.exc_type is SystemExit:
        return
    thread = args.thread.name if args.thread else "unknown"
    logging.getLogger("fsbench").error(
        f"Uncaught exception in thread {thread}",
        exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
    )


def _log_main_exception(exc_type, exc_value, exc_traceback) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logging.getLogger("fsbench").critical(
        "Benchmark aborted", exc_info=(exc_type, exc_value, exc_traceback)
    )


def setup_logging(level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """
    Configure the root logger for a benchmark run.

    Console output goes to stderr so the summary printed on stdout stays
    clean. With ``log_file`` every record is also appended to that file.
    Crashes on the main thread and on worker threads are both logged.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    sys.excepthook = _log_main_exception
    threading.excepthook = _log_thread_exception

    root = logging.getLogger()
    if log_file:
        root.info(f"Logging to file: {log_file}")
    return root
