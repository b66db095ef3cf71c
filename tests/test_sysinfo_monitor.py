import threading
from datetime import datetime, timezone

import pytest

from healthwatch.system_info import SystemInfo
from healthwatch.sysinfo_monitor import SystemInfoMonitor, build_sysinfo_message


def sample_info():
    return SystemInfo(
        uptime="1 days, 2 hours, 3 minutes",
        current_time="2024-01-02T03:04:05+00:00",
        process_count=12,
        hostname="testhost",
        os="linux",
        platform="debian",
        platform_version="12",
        kernel_version="6.1.0",
        ip_addresses=["192.0.2.10"],
    )


def test_build_sysinfo_message_fields():
    info = sample_info()
    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    message = build_sysinfo_message(info, stamp)
    assert message["metric_type"] == "sysinfo"
    assert message["meta"]["source"] == "sysinfo_monitor"
    assert message["meta"]["version"] == "1.0"
    assert message["metrics_data"]["system_info"] == info.to_dict()
    assert message["meta"]["timestamp"] == stamp.isoformat()


def test_check_publishes_and_stores():
    published = []
    info = sample_info()
    monitor = SystemInfoMonitor(published.append, collector=lambda: info)
    assert monitor.check() is info
    assert monitor.last_info is info
    assert published[0]["metrics_data"]["system_info"]["hostname"] == info.hostname


def test_check_failure_returns_none():
    published = []

    def failing():
        raise RuntimeError("failed to get uptime")

    monitor = SystemInfoMonitor(published.append, collector=failing)
    assert monitor.check() is None
    assert published == []


def test_invalid_interval_rejected():
    with pytest.raises(ValueError):
        SystemInfoMonitor(interval=0)


def test_start_stop_cycle():
    seen = threading.Event()
    published = []

    def publish(message):
        published.append(message)
        seen.set()

    monitor = SystemInfoMonitor(publish, collector=sample_info, interval=60)
    monitor.start()
    try:
        assert seen.wait(5)
        assert monitor.is_running is True
        with pytest.raises(RuntimeError, match="already running"):
            monitor.start()
    finally:
        monitor.stop()
    assert monitor.is_running is False
    assert published[0]["metric_type"] == "sysinfo"


def test_stop_when_not_running_is_harmless():
    monitor = SystemInfoMonitor(collector=sample_info)
    monitor.stop()
    assert monitor.is_running is False