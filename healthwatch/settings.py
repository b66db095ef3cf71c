"""Monitoring thresholds, notification throttling and overall settings."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

NORMAL = "normal"
WARNING = "warning"
CRITICAL = "critical"


def _build(cls: type, data: Mapping[str, Any]) -> Any:
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    return cls(**data)


@dataclass
class ResourceThresholds:
    """Check interval and usage thresholds for one monitored resource."""

    enabled: bool = True
    check_interval: int = 60
    warning_threshold: float = 80.0
    critical_threshold: float = 90.0

    def __post_init__(self) -> None:
        if self.check_interval <= 0:
            raise ValueError(f"check interval must be positive: {self.check_interval}")

    def classify(self, usage: float) -> str:
        """Return ``"critical"``, ``"warning"`` or ``"normal"`` for a usage percentage."""
        if usage >= self.critical_threshold:
            return CRITICAL
        if usage >= self.warning_threshold:
            return WARNING
        return NORMAL


@dataclass
class ThrottlingSettings:
    """Anti-spam settings for notifications; zero means "use the handler default"."""

    enabled: bool = False
    cooldown_period: int = 300
    critical_threshold: int = 0
    max_warnings_per_day: int = 0
    aggregation_period: int = 0
    warning_window: int = 0


@dataclass
class Settings:
    """All settings the monitors read."""

    cpu: ResourceThresholds = field(default_factory=ResourceThresholds)
    memory: ResourceThresholds = field(default_factory=ResourceThresholds)
    disk: ResourceThresholds = field(default_factory=ResourceThresholds)
    throttling: ThrottlingSettings = field(default_factory=ThrottlingSettings)
    email_enabled: bool = False
    log_dir: Path = Path("logs")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        """Build settings from a nested mapping such as a parsed config file."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"unknown settings keys: {', '.join(sorted(unknown))}")
        kwargs: dict[str, Any] = {}
        for name in ("cpu", "memory", "disk"):
            if name in data:
                kwargs[name] = _build(ResourceThresholds, data[name])
        if "throttling" in data:
            kwargs["throttling"] = _build(ThrottlingSettings, data["throttling"])
        if "email_enabled" in data:
            kwargs["email_enabled"] = bool(data["email_enabled"])
        if "log_dir" in data:
            kwargs["log_dir"] = Path(data["log_dir"])
        return cls(**kwargs)

    def to_mapping(self) -> dict[str, Any]:
        """Return the settings as plain nested data."""
        result = asdict(self)
        result["log_dir"] = str(self.log_dir)
        return result