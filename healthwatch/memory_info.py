"""System memory and swap statistics."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import psutil

from .settings import ResourceThresholds

_JSON_NAMES = {
    "used_memory_percentage": "used_memory_percent",
    "free_memory_percentage": "free_memory_percent",
    "swap_used_percentage": "swap_used_percent",
}


@dataclass
class MemoryInfo:
    """Physical memory and swap usage, in bytes and percentages."""

    total_memory: int = 0
    used_memory: int = 0
    free_memory: int = 0
    available_memory: int = 0
    used_memory_percentage: float = 0.0
    free_memory_percentage: float = 0.0
    memory_status: str = ""
    cached_memory: int = 0
    buffer_memory: int = 0
    active_memory: int = 0
    inactive_memory: int = 0
    shared_memory: int = 0
    swap_total: int = 0
    swap_used: int = 0
    swap_free: int = 0
    swap_used_percentage: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Return the information as plain JSON-ready data."""
        return {_JSON_NAMES.get(key, key): value for key, value in asdict(self).items()}


def collect_memory_info(warning_threshold: float, critical_threshold: float) -> MemoryInfo:
    """Read current memory statistics and classify usage against the thresholds."""
    vm = psutil.virtual_memory()
    used_pct = float(vm.percent)
    thresholds = ResourceThresholds(
        warning_threshold=warning_threshold, critical_threshold=critical_threshold
    )
    info = MemoryInfo(
        total_memory=int(vm.total),
        used_memory=int(vm.used),
        free_memory=int(vm.free),
        available_memory=int(vm.available),
        used_memory_percentage=used_pct,
        free_memory_percentage=100 - used_pct,
        memory_status=thresholds.classify(used_pct),
        cached_memory=int(getattr(vm, "cached", 0)),
        buffer_memory=int(getattr(vm, "buffers", 0)),
        active_memory=int(getattr(vm, "active", 0)),
        inactive_memory=int(getattr(vm, "inactive", 0)),
        shared_memory=int(getattr(vm, "shared", 0)),
    )

    try:
        swap = psutil.swap_memory()
    except (OSError, RuntimeError):
        swap = None
    if swap is not None:
        info.swap_total = int(swap.total)
        info.swap_used = int(swap.used)
        info.swap_free = int(swap.free)
        if swap.total > 0:
            info.swap_used_percentage = swap.used / swap.total * 100
    return info