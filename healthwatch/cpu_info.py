"""CPU description and usage sampling."""

from __future__ import annotations

import platform
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Iterable

import psutil

from .settings import ResourceThresholds

_CPUINFO_PATH = Path("/proc/cpuinfo")
_DMI_DIR = Path("/sys/class/dmi/id")
_SAMPLE_INTERVAL = 0.5
_TIME_FIELDS = ("user", "system", "idle", "nice", "iowait", "irq", "softirq", "steal")
_HYPERVISOR_KEYWORDS = (
    ("kvm", "kvm"),
    ("qemu", "kvm"),
    ("vmware", "vmware"),
    ("virtualbox", "vbox"),
    ("xen", "xen"),
    ("microsoft", "hyperv"),
)
_BYTE_UNITS = (
    (1024**5, "PB"),
    (1024**4, "TB"),
    (1024**3, "GB"),
    (1024**2, "MB"),
    (1024, "KB"),
    (1, "B"),
)


@dataclass
class CPUInfo:
    """CPU model, topology and usage statistics."""

    model_name: str = ""
    cores: int = 0
    threads: int = 0
    clock_speed: float = 0.0
    usage: float = 0.0
    core_usage: list[float] = field(default_factory=list)
    cache_size: int = 0
    is_virtual: bool = False
    hypervisor: str = ""
    cpu_status: str = ""
    vendor_id: str = ""
    family: str = ""
    stepping: int = 0
    flags: list[str] = field(default_factory=list)
    physical_id: str = ""
    microcode: str = ""
    architecture: str = ""
    min_frequency: float = 0.0
    max_frequency: float = 0.0
    cpu_times: dict[str, float] = field(default_factory=dict)
    temperature: float = 0.0
    processor_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Return the information as plain JSON-ready data."""
        return asdict(self)

    def usage_distribution(self) -> tuple[float, float, float]:
        """Return user, system and idle time as percentages of their sum."""
        user = self.cpu_times.get("user", 0.0)
        system = self.cpu_times.get("system", 0.0)
        idle = self.cpu_times.get("idle", 0.0)
        total = user + system + idle
        if total > 0:
            return user / total * 100, system / total * 100, idle / total * 100
        return user, system, idle


@dataclass(frozen=True)
class _Entry:
    model_name: str = ""
    cores: int = 1
    mhz: float = 0.0
    cache_size: int = 0
    vendor_id: str = ""
    family: str = ""
    stepping: int = 0
    physical_id: str = ""
    microcode: str = ""
    flags: tuple[str, ...] = ()


def count_processors(physical_ids: Iterable[str]) -> int:
    """Count distinct physical processor packages."""
    return len(set(physical_ids))


def format_bytes(num_bytes: int) -> str:
    """Format a byte count compactly, e.g. ``1.50KB`` or ``2GB``."""
    if num_bytes < 0:
        raise ValueError(f"byte count must not be negative: {num_bytes}")
    if num_bytes == 0:
        return "0B"
    for size, unit in _BYTE_UNITS:
        if num_bytes >= size:
            text = f"{num_bytes / size:.2f}"
            if text.endswith(".00"):
                text = text[:-3]
            return text + unit
    return "0B"


def _first_int(value: str, default: int = 0) -> int:
    try:
        return int(value.split()[0])
    except (ValueError, IndexError):
        return default


def _float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def _parse_cpuinfo(text: str) -> list[_Entry]:
    entries = []
    for block in re.split(r"\n\s*\n", text):
        values: dict[str, str] = {}
        for line in block.splitlines():
            key, sep, value = line.partition(":")
            if sep:
                values[key.strip().lower()] = value.strip()
        if "processor" not in values:
            continue
        entries.append(
            _Entry(
                model_name=values.get("model name", ""),
                cores=_first_int(values.get("cpu cores", ""), 1),
                mhz=_float(values.get("cpu mhz", "")),
                cache_size=_first_int(values.get("cache size", "")),
                vendor_id=values.get("vendor_id", ""),
                family=values.get("cpu family", ""),
                stepping=_first_int(values.get("stepping", "")),
                physical_id=values.get("physical id", ""),
                microcode=values.get("microcode", ""),
                flags=tuple((values.get("flags") or values.get("features", "")).split()),
            )
        )
    return entries


def _read_entries() -> list[_Entry]:
    try:
        text = _CPUINFO_PATH.read_text(encoding="utf-8", errors="replace")
    except OSError:
        text = ""
    entries = _parse_cpuinfo(text)
    if entries:
        return entries
    logical = psutil.cpu_count(logical=True)
    if not logical:
        return []
    physical = psutil.cpu_count(logical=False) or logical
    model = platform.processor()
    return [_Entry(model_name=model, cores=physical, physical_id="0") for _ in range(logical)]


def _dmi_hypervisor() -> str:
    text = ""
    for name in ("product_name", "sys_vendor"):
        try:
            text += (_DMI_DIR / name).read_text(encoding="utf-8", errors="replace").lower()
        except OSError:
            continue
    for keyword, system in _HYPERVISOR_KEYWORDS:
        if keyword in text:
            return system
    return ""


def _virtualization(flags: Iterable[str]) -> tuple[str, str]:
    """Return the hypervisor name and role (``"guest"`` inside a VM)."""
    if "hypervisor" not in set(flags):
        return "", ""
    return _dmi_hypervisor(), "guest"


def _base_info(entries: list[_Entry]) -> CPUInfo:
    if not entries:
        raise RuntimeError("no CPU information available")
    first = entries[0]
    system, role = _virtualization(first.flags)
    return CPUInfo(
        model_name=first.model_name,
        cores=first.cores,
        threads=len(entries),
        is_virtual=role == "guest",
        hypervisor=system,
        vendor_id=first.vendor_id,
        family=first.family,
        stepping=first.stepping,
        physical_id=first.physical_id,
        microcode=first.microcode,
        architecture=platform.machine(),
        processor_count=count_processors(entry.physical_id for entry in entries),
    )


def _clock_mhz(entry: _Entry) -> float:
    if entry.mhz > 0:
        return entry.mhz
    try:
        freq = psutil.cpu_freq()
    except (OSError, RuntimeError, NotImplementedError):
        return 0.0
    return float(freq.current) if freq and freq.current else 0.0


def collect_cpu_info(warning_threshold: float, critical_threshold: float) -> CPUInfo:
    """Sample CPU usage and describe the processor; raises RuntimeError without CPU data."""
    entries = _read_entries()
    info = _base_info(entries)

    with ThreadPoolExecutor(max_workers=2) as pool:
        total_future = pool.submit(psutil.cpu_percent, interval=_SAMPLE_INTERVAL)
        per_core_future = pool.submit(
            psutil.cpu_percent, interval=_SAMPLE_INTERVAL, percpu=True
        )
        times = psutil.cpu_times(percpu=False)
        total_usage = float(total_future.result())
        per_core = [float(value) for value in per_core_future.result()]

    thresholds = ResourceThresholds(
        warning_threshold=warning_threshold, critical_threshold=critical_threshold
    )
    mhz = _clock_mhz(entries[0])
    info.clock_speed = mhz / 1000.0
    info.max_frequency = mhz / 1000.0 if mhz > 0 else 0.0
    info.min_frequency = 0.0
    info.usage = total_usage
    info.core_usage = per_core
    info.cache_size = entries[0].cache_size
    info.cpu_status = thresholds.classify(total_usage)
    info.cpu_times = {name: float(getattr(times, name, 0.0)) for name in _TIME_FIELDS}
    info.temperature = 0.0
    return info


def collect_cpu_core_info() -> CPUInfo:
    """Describe the processor without sampling usage."""
    return _base_info(_read_entries())