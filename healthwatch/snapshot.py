"""One-shot collection of all server metrics, with a command-line entry point."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import psutil

from .cpu_info import CPUInfo, collect_cpu_info
from .disk_info import StorageInfo, TotalStorage, collect_storage_info
from .memory_info import MemoryInfo, collect_memory_info
from .settings import Settings
from .system_info import SystemInfo, collect_system_info

_COLLECTION_ERRORS = (OSError, RuntimeError, ValueError, psutil.Error)


@dataclass
class ServerMetrics:
    """Everything known about the server at one moment; unavailable parts are ``None``."""

    timestamp: datetime = field(default_factory=lambda: datetime.now().astimezone())
    cpu: Optional[CPUInfo] = None
    memory: Optional[MemoryInfo] = None
    partitions: Optional[list[StorageInfo]] = None
    total_storage: Optional[TotalStorage] = None
    system_info: Optional[SystemInfo] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the metrics as plain JSON-ready data, leaving out what is missing."""
        data: dict[str, Any] = {"timestamp": self.timestamp.isoformat()}
        if self.cpu is not None:
            data["cpu"] = self.cpu.to_dict()
        if self.memory is not None:
            data["memory"] = self.memory.to_dict()
        if self.partitions is not None:
            disk: dict[str, Any] = {}
            if self.partitions:
                disk["partitions"] = [part.to_dict() for part in self.partitions]
            if self.total_storage is not None:
                disk["total_storage"] = asdict(self.total_storage)
            data["disk"] = disk
        if self.system_info is not None:
            data["system_info"] = self.system_info.to_dict()
        return data


def collect_server_metrics(settings: Settings) -> ServerMetrics:
    """Collect every metric; a part that cannot be read is left empty."""
    metrics = ServerMetrics()
    try:
        metrics.cpu = collect_cpu_info(
            settings.cpu.warning_threshold, settings.cpu.critical_threshold
        )
    except _COLLECTION_ERRORS:
        pass
    try:
        metrics.memory = collect_memory_info(
            settings.memory.warning_threshold, settings.memory.critical_threshold
        )
    except _COLLECTION_ERRORS:
        pass
    try:
        metrics.partitions, metrics.total_storage = collect_storage_info()
    except _COLLECTION_ERRORS:
        pass
    try:
        metrics.system_info = collect_system_info()
    except _COLLECTION_ERRORS:
        pass
    return metrics


def _load_settings(path: Optional[Path]) -> Settings:
    if path is None:
        return Settings()
    with path.open(encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError("settings file must hold a JSON object")
    return Settings.from_mapping(data)


def main(argv: Optional[list[str]] = None) -> int:
    """Print a JSON snapshot of the server's metrics."""
    parser = argparse.ArgumentParser(
        prog="healthwatch", description="Print a snapshot of server metrics as JSON."
    )
    parser.add_argument("--config", type=Path, help="JSON settings file")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation")
    args = parser.parse_args(argv)

    try:
        settings = _load_settings(args.config)
    except (OSError, ValueError, TypeError) as exc:
        print(f"healthwatch: cannot load settings: {exc}", file=sys.stderr)
        return 2

    metrics = collect_server_metrics(settings)
    print(json.dumps(metrics.to_dict(), indent=args.indent))
    return 0