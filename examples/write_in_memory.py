"""
Quick sanity run: a small benchmark against the in-memory filesystem.
Run: uv run examples/write_in_memory.py
"""
import asyncio
import os

from fsbench import BenchmarkConfig, BenchmarkRunner, compute_summary, render_rate_histogram, render_summary
from fsbench.fs import MemoryClient


async def main():
    config = BenchmarkConfig(
        workers=4,
        files=int(os.getenv("FSBENCH_FILES", "40")),
        block_size=64 * 1024,
        min_file_size=256 * 1024,
        max_file_size=1024 * 1024,
        directory_depth=2,
        seed=7,
    )
    client = MemoryClient()
    runner = BenchmarkRunner(client, config, use_progress_bar=True)
    status = await runner.run()

    print(render_summary(compute_summary(status, config.workers)))
    print()
    print(render_rate_histogram(status.histogram, bins=16))
    print(f"\n{len(client.files)} files in memory")

if __name__ == "__main__":
    asyncio.run(main())
