import pytest

from healthwatch.memory_info import MemoryInfo
from healthwatch.memory_summary import MemorySummaryReporter
from healthwatch.notify import Notifier


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def make_reporter(current=None, transport=None):
    sent = []
    notifier = Notifier(transport=transport or (lambda s, m, l: sent.append((s, m, l))))
    clock = Clock()
    reporter = MemorySummaryReporter(notifier, current_info=current, clock=clock)
    return reporter, notifier, clock, sent


def info(status, usage):
    return MemoryInfo(memory_status=status, used_memory_percentage=usage)


def test_record_counts_events_and_peak():
    reporter, notifier, _, _ = make_reporter()
    reporter.record(info("warning", 82.0))
    reporter.record(info("critical", 93.5))
    reporter.record(info("normal", 40.0))
    assert reporter.warning_events == 1
    assert reporter.critical_events == 1
    assert reporter.peak_usage == 93.5
    assert notifier.history == []


def test_report_sent_after_interval_and_counters_reset():
    reporter, notifier, clock, sent = make_reporter()
    reporter.record(info("warning", 82.0))
    clock.now = reporter.interval
    reporter.record(info("critical", 91.0))
    assert len(notifier.history) == 1
    assert sent[0][0] == "Memory Usage Summary Report"
    assert sent[0][2] == "info"
    assert "<th>Warning Events</th><td>1</td>" in sent[0][1]
    assert "<th>Critical Events</th><td>1</td>" in sent[0][1]
    assert (reporter.warning_events, reporter.critical_events, reporter.peak_usage) == (0, 0, 0.0)


def test_no_second_report_until_next_interval():
    reporter, notifier, clock, _ = make_reporter()
    clock.now = reporter.interval
    reporter.record(info("normal", 30.0))
    reporter.record(info("normal", 30.0))
    assert len(notifier.history) == 1


def test_report_period_default():
    reporter, _, _, _ = make_reporter()
    assert "Last 24 hours" in reporter.build_report()


def test_urgent_recommendation():
    reporter, _, _, _ = make_reporter()
    for _ in range(6):
        reporter.record(info("critical", 95.0))
    assert "URGENT ACTION RECOMMENDED" in reporter.build_report()


def test_action_recommendation():
    reporter, _, _, _ = make_reporter()
    for _ in range(11):
        reporter.record(info("warning", 85.0))
    report = reporter.build_report()
    assert "ACTION RECOMMENDED:" in report
    assert "URGENT" not in report


def test_healthy_recommendation():
    reporter, _, _, _ = make_reporter()
    assert "SYSTEM HEALTHY" in reporter.build_report()


def test_current_status_row():
    reporter, _, _, _ = make_reporter(current=lambda: info("warning", 85.0))
    report = reporter.build_report()
    assert "Current Memory Status" in report
    assert "warning (85.00%)" in report


def test_transport_failure_does_not_raise():
    def broken(subject, message, level):
        raise ConnectionError("down")

    reporter, _, _, _ = make_reporter(transport=broken)
    reporter.record(info("critical", 99.0))
    assert reporter.send_report() is False
    assert reporter.critical_events == 0


def test_invalid_interval():
    with pytest.raises(ValueError):
        MemorySummaryReporter(Notifier(), interval=0)