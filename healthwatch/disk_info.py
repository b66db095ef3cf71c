"""Partition usage, disk I/O counters and aggregated storage totals."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Mapping, Optional

import psutil

log = logging.getLogger(__name__)

_EXTERNAL_PREFIXES = ("/media/", "/mnt/", "/run/media/")
_NETWORK_FILESYSTEMS = ("nfs", "cifs", "smbfs", "ftpfs", "sshfs")
_DEV_PREFIX = "/dev/"


@dataclass
class DiskIOInfo:
    """Cumulative I/O counters of one block device."""

    read_count: int = 0
    write_count: int = 0
    read_bytes: int = 0
    write_bytes: int = 0
    read_time: int = 0
    write_time: int = 0
    io_time: int = 0
    weighted_io: int = 0
    read_bytes_ps: float = 0.0
    write_bytes_ps: float = 0.0


@dataclass
class StorageInfo:
    """Capacity and usage of one mounted partition."""

    device: str = ""
    mount_point: str = ""
    file_system: str = ""
    total: int = 0
    used: int = 0
    free: int = 0
    usage: float = 0.0
    is_readonly: bool = False
    is_external: bool = False
    io: Optional[DiskIOInfo] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the information as plain JSON-ready data; ``io`` is left out when unknown."""
        data = asdict(self)
        if self.io is None:
            del data["io"]
        return data


@dataclass
class TotalStorage:
    """Storage totals, combined and split into internal and external devices."""

    total_capacity: int = 0
    total_used: int = 0
    total_free: int = 0
    usage_percent: float = 0.0
    total_capacity_internal: int = 0
    total_used_internal: int = 0
    total_free_internal: int = 0
    total_device_internal: int = 0
    total_usage_percent_internal: float = 0.0
    total_capacity_external: int = 0
    total_used_external: int = 0
    total_free_external: int = 0
    total_device_external: int = 0
    total_usage_percent_external: float = 0.0


def is_external_mount(mount_point: str, device: str) -> bool:
    """Guess whether a partition lives on an external, removable or network device."""
    if mount_point.startswith(_EXTERNAL_PREFIXES):
        return True
    if any(fs in device for fs in _NETWORK_FILESYSTEMS):
        return True
    # Heuristic: partitions of /dev/sd* disks are often removable.
    return "/dev/sd" in device and len(device) > 8


def disk_base_name(device: str) -> str:
    """Return the disk name of a ``/dev/`` partition path with the partition number cut off."""
    if not device.startswith(_DEV_PREFIX):
        return device
    name = device[len(_DEV_PREFIX):]
    for index, char in enumerate(name):
        if char.isdigit():
            return name[:index] or name
    return name


def _percent(part: int, whole: int) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def summarize_storage(partitions: Iterable[StorageInfo]) -> Optional[TotalStorage]:
    """Aggregate partitions into totals; ``None`` when there is no internal storage."""
    totals = TotalStorage()
    for part in partitions:
        if part.total <= 0:
            continue
        if part.is_external:
            totals.total_capacity_external += part.total
            totals.total_used_external += part.used
            totals.total_free_external += part.free
            totals.total_device_external += 1
        else:
            totals.total_capacity_internal += part.total
            totals.total_used_internal += part.used
            totals.total_free_internal += part.free
            totals.total_device_internal += 1

    if totals.total_device_internal == 0 or totals.total_capacity_internal == 0:
        return None

    totals.total_capacity = totals.total_capacity_internal + totals.total_capacity_external
    totals.total_used = totals.total_used_internal + totals.total_used_external
    totals.total_free = totals.total_free_internal + totals.total_free_external
    totals.usage_percent = _percent(totals.total_used, totals.total_capacity)
    totals.total_usage_percent_internal = _percent(
        totals.total_used_internal, totals.total_capacity_internal
    )
    totals.total_usage_percent_external = _percent(
        totals.total_used_external, totals.total_capacity_external
    )
    return totals


def _io_from_counters(counters: Any) -> DiskIOInfo:
    read_bytes = int(counters.read_bytes)
    write_bytes = int(counters.write_bytes)
    return DiskIOInfo(
        read_count=int(counters.read_count),
        write_count=int(counters.write_count),
        read_bytes=read_bytes,
        write_bytes=write_bytes,
        read_time=int(getattr(counters, "read_time", 0)),
        write_time=int(getattr(counters, "write_time", 0)),
        io_time=int(getattr(counters, "busy_time", 0)),
        weighted_io=int(getattr(counters, "weighted_io", 0)),
        read_bytes_ps=read_bytes / 1024,
        write_bytes_ps=write_bytes / 1024,
    )


def _find_io(counters: Mapping[str, Any], device: str) -> Optional[DiskIOInfo]:
    short = disk_base_name(device)
    if short in counters:
        return _io_from_counters(counters[short])
    for name in sorted(counters):
        if name.startswith(short):
            return _io_from_counters(counters[name])
    return None


def _read_io_counters() -> Optional[Mapping[str, Any]]:
    try:
        return psutil.disk_io_counters(perdisk=True) or {}
    except (OSError, RuntimeError) as exc:
        log.warning("error getting disk I/O counters: %s", exc)
        return None


def collect_storage_info() -> tuple[list[StorageInfo], Optional[TotalStorage]]:
    """List mounted partitions with usage and I/O data, plus their totals."""
    partitions = psutil.disk_partitions(all=True)
    counters = _read_io_counters()

    entries: list[StorageInfo] = []
    for part in partitions:
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except OSError as exc:
            log.warning("error getting usage for partition %s: %s", part.mountpoint, exc)
            continue
        if usage.total <= 0:
            continue
        io_info = _find_io(counters, part.device) if counters else None
        entries.append(
            StorageInfo(
                device=part.device,
                mount_point=part.mountpoint,
                file_system=part.fstype,
                total=int(usage.total),
                used=int(usage.used),
                free=int(usage.free),
                usage=float(usage.percent),
                is_readonly="ro" in part.opts.split(","),
                is_external=is_external_mount(part.mountpoint, part.device),
                io=io_info,
            )
        )
    return entries, summarize_storage(entries)