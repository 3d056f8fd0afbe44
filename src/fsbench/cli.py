#!/usr/bin/env python3
# cli.py — command line front end for fsbench

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from fsbench.config import load_config
from fsbench.core import BenchmarkRunner
from fsbench.errors import ConfigError
from fsbench.fs import LocalClient, MemoryClient
from fsbench.logging_config import setup_logging
from fsbench.metrics import compute_summary
from fsbench.rendering import render_rate_histogram, render_summary
from fsbench.utils import GracefulKiller


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {n}")
    return n


def parse_args(argv=None):
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="fsbench: concurrent filesystem write benchmark",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Workload
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=_env_int("FSBENCH_WORKERS", 4),
        help="Number of workers to run concurrently",
    )
    parser.add_argument(
        "-f",
        "--files",
        type=int,
        default=_env_int("FSBENCH_FILES", 100),
        help="Total number of files to write, split across workers",
    )
    parser.add_argument(
        "-b",
        "--block-size",
        type=int,
        default=_env_int("FSBENCH_BLOCK_SIZE", 0),
        help="Bytes per write call (0: the file size, max. 1GB)",
    )
    parser.add_argument(
        "-s",
        "--file-size",
        type=int,
        default=_env_int("FSBENCH_FILE_SIZE", 1048576),
        help="Size of the files to be written (minimum size when --max-file-size is set)",
    )
    parser.add_argument(
        "--max-file-size",
        type=int,
        default=None,
        help="Upper bound for random file sizes (default: fixed --file-size)",
    )
    parser.add_argument(
        "-d",
        "--directory-depth",
        type=int,
        default=_env_int("FSBENCH_DIRECTORY_DEPTH", 0),
        help="Number of directories created for each file, to avoid huge flat directories",
    )
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Keep a worker going after a failed file instead of stopping it",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for file names and sizes",
    )

    # Target
    parser.add_argument(
        "-o",
        "--output-dir",
        default=os.getenv("FSBENCH_OUTPUT_DIR", "./fsbench-data"),
        help="Directory the files are written into",
    )
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Write to an in-memory filesystem instead of disk",
    )

    # Output & Logging
    parser.add_argument(
        "--histogram-bins",
        type=_positive_int,
        default=20,
        help="Number of bins in the per-file rate histogram",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional file to write logs to (e.g., fsbench.log)",
    )

    return parser.parse_args(argv)


async def run(argv=None) -> int:
    args = parse_args(argv)

    log_level = "DEBUG" if args.debug else "INFO"
    setup_logging(level=log_level, log_file=args.log_file)

    try:
        config = load_config(
            workers=args.workers,
            files=args.files,
            block_size=args.block_size,
            min_file_size=args.file_size,
            max_file_size=args.max_file_size,
            directory_depth=args.directory_depth,
            continue_on_error=args.continue_on_error,
            seed=args.seed,
        )
        client = MemoryClient() if args.memory else LocalClient(args.output_dir)
        runner = BenchmarkRunner(client, config, use_progress_bar=not args.no_progress)
        runner.init()
    except ConfigError as e:
        logging.error(f"Invalid configuration: {e}")
        return 2

    GracefulKiller(on_kill=runner.cancel)

    logging.info(
        f"Target: {'memory' if args.memory else args.output_dir} | "
        f"Workers: {config.workers} | Files: {config.files}"
    )

    status = await runner.run()
    summary = compute_summary(status, runner.config.workers)

    print(render_summary(summary))
    print()
    print(render_rate_histogram(status.histogram, args.histogram_bins))

    return 1 if status.errors else 0


def main():
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
