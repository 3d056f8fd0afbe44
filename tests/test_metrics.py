import pytest

from fsbench.errors import MergeError
from fsbench.metrics import AggregatedStatus, compute_summary, histogram_percentile
from fsbench.models import Status


def make_status(nbytes: int, duration: float, peak: float = 0.0, samples: int = 1) -> Status:
    return Status(
        duration=duration,
        bytes=nbytes,
        samples=samples,
        avg_rate=nbytes / duration,
        peak_rate=peak,
    )


def folded(name: str, *statuses: Status, errors: int = 0) -> AggregatedStatus:
    agg = AggregatedStatus(name)
    for s in statuses:
        agg.fold(s)
    for _ in range(errors):
        agg.record_error()
    return agg


def totals(agg: AggregatedStatus):
    return (agg.files_completed, agg.errors, agg.total_bytes, agg.samples, agg.peak_rate)


def test_fold_accumulates_and_derives_rate():
    agg = AggregatedStatus()
    assert agg.avg_rate == 0.0

    agg.fold(make_status(1000, 1.0, peak=1500, samples=3))
    agg.fold(make_status(3000, 0.5, peak=8000, samples=2))

    assert agg.files_completed == 2
    assert agg.total_bytes == 4000
    assert agg.total_duration == pytest.approx(1.5)
    assert agg.samples == 5
    assert agg.peak_rate == 8000
    assert agg.avg_rate == pytest.approx(4000 / 1.5)
    assert agg.histogram == {1000: 1, 6000: 1}


def test_avg_rate_is_read_only():
    agg = AggregatedStatus()
    with pytest.raises(AttributeError):
        agg.avg_rate = 5


def test_merge_recomputes_rate_from_totals():
    a = folded("a", make_status(1000, 1.0))  # 1000 B/s
    b = folded("b", make_status(9000, 1.0), make_status(9000, 1.0))  # 9000 B/s
    a.merge(b)
    # naive average of the two rates would be 5000
    assert a.avg_rate == pytest.approx(19000 / 3.0)
    assert a.avg_rate == pytest.approx(a.total_bytes / a.total_duration)


def test_merge_is_commutative():
    s1, s2 = make_status(100, 0.1), make_status(700, 0.3)

    x = folded("x", s1, errors=1)
    x.merge(folded("y", s2))
    y = folded("y", s2)
    y.merge(folded("x", s1, errors=1))

    assert totals(x) == totals(y)
    assert x.total_duration == pytest.approx(y.total_duration)
    assert x.histogram == y.histogram


def test_merge_is_associative():
    s = [make_status(100 * (i + 1), 0.1 * (i + 1), peak=i) for i in range(6)]

    def abc():
        return folded("a", s[0], s[1]), folded("b", s[2], s[3], errors=2), folded("c", s[4], s[5])

    a, b, c = abc()
    left = AggregatedStatus("left")
    left.merge(a)
    left.merge(b)
    left.merge(c)

    a, b, c = abc()
    b.merge(c)
    right = AggregatedStatus("right")
    right.merge(a)
    right.merge(b)

    assert totals(left) == totals(right)
    assert left.total_duration == pytest.approx(right.total_duration)
    assert left.avg_rate == pytest.approx(right.avg_rate)
    assert left.histogram == right.histogram


def test_merging_same_source_twice_is_rejected():
    total = AggregatedStatus("total")
    w = folded("w0", make_status(4096, 0.01))
    total.merge(w)
    with pytest.raises(MergeError):
        total.merge(w)
    assert total.files_completed == 1
    assert total.total_bytes == 4096


def test_merging_already_absorbed_source_is_rejected():
    a = folded("a", make_status(10, 1.0))
    b = folded("b", make_status(20, 1.0))
    b.merge(a)

    total = AggregatedStatus("total")
    total.merge(a)
    with pytest.raises(MergeError):
        total.merge(b)  # b already contains a

    with pytest.raises(MergeError):
        a.merge(total)  # total already contains a


def test_merge_into_itself_is_rejected():
    a = folded("a", make_status(10, 1.0))
    with pytest.raises(MergeError):
        a.merge(a)


def test_snapshot_sums_counters_without_touching_sources():
    a = folded("a", make_status(100, 1.0), errors=1)
    b = folded("b", make_status(300, 1.0), make_status(300, 1.0))
    snap = AggregatedStatus.snapshot([a, b])

    assert snap.files_completed == 3
    assert snap.errors == 1
    assert snap.total_bytes == 700
    assert snap.avg_rate == pytest.approx(700 / 3.0)
    assert not snap.histogram
    # sources can still be merged afterwards
    total = AggregatedStatus()
    total.merge(a)
    total.merge(b)
    assert total.files_completed == 3


def test_histogram_percentile():
    hist = {10: 5, 20: 4, 1000: 1}
    assert histogram_percentile(hist, 0.0) == 10
    assert histogram_percentile(hist, 0.5) == 10
    assert histogram_percentile(hist, 0.6) == 20
    assert histogram_percentile(hist, 1.0) == 1000
    assert histogram_percentile({}, 0.5) is None


def test_compute_summary_divides_duration_by_workers():
    agg = folded("t", make_status(4000, 2.0), make_status(4000, 2.0))
    captured = {}
    summary = compute_summary(agg, workers=2, metrics_callback=captured.update)

    assert summary.files == 2
    assert summary.bytes == 8000
    assert summary.avg_rate == pytest.approx(2000)
    # 4 worker-seconds over 2 workers: 2 wall-clock seconds
    assert summary.throughput == pytest.approx(4000)
    assert summary.p50 == 2000
    assert summary.min == summary.max == 2000
    assert captured["throughput"] == pytest.approx(4000)


def test_compute_summary_empty():
    agg = AggregatedStatus()
    agg.record_error()
    summary = compute_summary(agg, workers=3)
    assert summary.files == 0
    assert summary.errors == 1
    assert summary.throughput == 0.0
    assert summary.p50 is None
