from pathlib import Path

import pytest

from healthwatch.settings import ResourceThresholds, Settings, ThrottlingSettings


@pytest.fixture
def thresholds():
    return ResourceThresholds(warning_threshold=70.0, critical_threshold=90.0)


@pytest.mark.parametrize(
    "usage, expected",
    [
        (90.0, "critical"),
        (99.5, "critical"),
        (89.99, "warning"),
        (70.0, "warning"),
        (69.99, "normal"),
        (0.0, "normal"),
    ],
)
def test_classify_boundaries(thresholds, usage, expected):
    assert thresholds.classify(usage) == expected


def test_critical_wins_when_thresholds_equal():
    same = ResourceThresholds(warning_threshold=50.0, critical_threshold=50.0)
    assert same.classify(50.0) == "critical"


@pytest.mark.parametrize("interval", [0, -10])
def test_non_positive_interval_rejected(interval):
    with pytest.raises(ValueError):
        ResourceThresholds(check_interval=interval)


def test_throttling_default_cooldown():
    assert ThrottlingSettings().cooldown_period == 300


def test_from_mapping_reads_sections():
    settings = Settings.from_mapping(
        {
            "cpu": {"check_interval": 5, "warning_threshold": 60.0},
            "throttling": {"enabled": True, "max_warnings_per_day": 2},
            "email_enabled": True,
            "log_dir": "/tmp/hw-logs",
        }
    )
    assert settings.cpu.check_interval == 5
    assert settings.cpu.warning_threshold == 60.0
    assert settings.throttling.enabled is True
    assert settings.throttling.max_warnings_per_day == 2
    assert settings.email_enabled is True
    assert settings.log_dir == Path("/tmp/hw-logs")
    assert settings.memory == ResourceThresholds()


def test_mapping_round_trip():
    original = Settings(
        memory=ResourceThresholds(check_interval=15, critical_threshold=95.0),
        throttling=ThrottlingSettings(enabled=True, warning_window=10),
    )
    assert Settings.from_mapping(original.to_mapping()) == original


def test_unknown_top_level_key_rejected():
    with pytest.raises(ValueError):
        Settings.from_mapping({"gpu": {}})


def test_unknown_section_key_rejected():
    with pytest.raises(ValueError):
        Settings.from_mapping({"disk": {"threshold": 10}})


def test_invalid_interval_in_mapping_rejected():
    with pytest.raises(ValueError):
        Settings.from_mapping({"memory": {"check_interval": 0}})