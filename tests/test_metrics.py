import pytest

from ossim.errors import InvariantViolation, StatisticsUnavailable
from ossim.metrics import StatisticsCollector
from ossim.process import ProcessState


def finish(p, start, end):
    p.remaining_burst = 0
    p.start_time = start
    p.end_time = end
    p.cpu_id = 0
    p.state = ProcessState.TERMINATED
    return p


def test_record_computes_turnaround_and_response_ratio(make_process):
    stats = StatisticsCollector(expected=1)
    report = stats.record(finish(make_process(1, 2, 2), 5, 6))
    assert report.turnaround == 4
    assert report.response_ratio == pytest.approx(2.0)
    assert report.waiting == 3


def test_summary_waits_for_every_process(make_process):
    stats = StatisticsCollector(expected=2)
    stats.record(finish(make_process(1, 4, 1), 1, 4))
    with pytest.raises(StatisticsUnavailable):
        stats.summary()
    stats.record(finish(make_process(2, 2, 2), 5, 6))
    summary = stats.summary()
    assert summary["processes"] == 2
    assert summary["avg_turnaround"] == pytest.approx(3.5)
    assert summary["avg_response_ratio"] == pytest.approx((3 / 4 + 4 / 2) / 2)


def test_record_rejects_unfinished_or_repeated(make_process):
    stats = StatisticsCollector(expected=1)
    p = make_process(1, 3, 1)
    with pytest.raises(InvariantViolation):
        stats.record(p)
    finish(p, 1, 3)
    stats.record(p)
    with pytest.raises(InvariantViolation):
        stats.record(p)


def test_record_rejects_start_before_arrival(make_process):
    stats = StatisticsCollector(expected=1)
    with pytest.raises(InvariantViolation):
        stats.record(finish(make_process(1, 2, 3), 2, 4))


def test_gantt_merges_contiguous_ticks(make_process):
    stats = StatisticsCollector()
    a, b = make_process(1, 3, 1), make_process(2, 2, 1)
    for now, p in enumerate([a, a, b, b, a], start=1):
        stats.record_tick(0, p, now)
    stats.record_tick(0, None, 6)
    assert stats.gantt() == [
        {"pid": 1, "cpu": 0, "start": 0, "end": 2},
        {"pid": 1, "cpu": 0, "start": 4, "end": 5},
        {"pid": 2, "cpu": 0, "start": 2, "end": 4},
    ]
    assert stats.utilization == pytest.approx(5 / 6)


def test_format_report_lists_processes(make_process):
    stats = StatisticsCollector(expected=1)
    stats.record(finish(make_process(1, 4, 1, name="prog.asm"), 1, 4))
    text = stats.format_report("FCFS")
    assert "METRICS REPORT (FCFS)" in text
    assert "prog.asm" in text
    assert "Average Turnaround Time: 3.0000" in text
