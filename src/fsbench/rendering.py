from collections import Counter

from rich.filesize import decimal

from .models import Summary


def human_rate(rate: float) -> str:
    return f"{decimal(int(rate))}/s"


def render_rate_histogram(histogram: Counter[int], bins: int = 20) -> str:
    if not histogram:
        return "No rate data."
    bins = max(1, bins)
    lo, hi = min(histogram), max(histogram)
    if hi <= lo:
        return f"Histogram: single value {human_rate(lo)} ({histogram[lo]})"

    width = 40
    counts = [0] * bins
    for rate, n in histogram.items():
        j = int((rate - lo) / (hi - lo) * bins)
        if j == bins:
            j -= 1
        counts[j] += n

    peak = max(counts)
    lines = []
    for i, c in enumerate(counts):
        left = lo + (hi - lo) * (i / bins)
        right = lo + (hi - lo) * ((i + 1) / bins)
        bar = "#" * max(1, int((c / peak) * width)) if c else ""
        lines.append(f"{human_rate(left):>12} - {human_rate(right):>12} | {bar} ({c})")
    return "Per-file Rate Histogram\n" + "\n".join(lines)


def render_summary(summary: Summary) -> str:
    lines = [
        "Summary:",
        f"  - Files: {summary.files}",
        f"  - Errors: {summary.errors}",
        f"  - Size: {decimal(summary.bytes)}",
        f"  - Speed: {human_rate(summary.throughput)}",
    ]
    if summary.p50 is not None:
        lines.append(
            f"  - Per-file rate: p50 {human_rate(summary.p50)}, "
            f"p90 {human_rate(summary.p90)}, p99 {human_rate(summary.p99)}"
        )
        lines.append(f"  - Peak rate: {human_rate(summary.peak_rate)}")
    return "\n".join(lines)
