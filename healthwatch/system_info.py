"""General host information: uptime, OS, kernel and addresses."""

from __future__ import annotations

import ipaddress
import platform
import socket
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

import psutil

from .units import format_uptime

_IP_FAMILIES = (socket.AF_INET, socket.AF_INET6)
_BROADCAST = ipaddress.IPv4Address("255.255.255.255")


@dataclass
class SystemInfo:
    """Uptime, identity and addresses of the host."""

    uptime: str = ""
    current_time: str = ""
    process_count: int = 0
    hostname: str = ""
    os: str = ""
    platform: str = ""
    platform_version: str = ""
    kernel_version: str = ""
    ip_addresses: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the information as plain JSON-ready data."""
        return asdict(self)


def _is_global_unicast(address: ipaddress._BaseAddress) -> bool:
    return not (
        address.is_unspecified
        or address.is_loopback
        or address.is_multicast
        or address.is_link_local
        or address == _BROADCAST
    )


def _is_loopback_interface(stats: Any) -> bool:
    flags = getattr(stats, "flags", "") or ""
    return "loopback" in flags.split(",")


def ip_addresses() -> list[str]:
    """Return the global unicast addresses of interfaces that are up and not loopback."""
    addrs = psutil.net_if_addrs()
    stats = psutil.net_if_stats()
    result = []
    for name, entries in addrs.items():
        iface = stats.get(name)
        if iface is None or not iface.isup or _is_loopback_interface(iface):
            continue
        for entry in entries:
            if entry.family not in _IP_FAMILIES:
                continue
            try:
                address = ipaddress.ip_address(entry.address.split("%", 1)[0])
            except ValueError:
                continue
            if _is_global_unicast(address):
                result.append(str(address))
    return result


def _os_release() -> dict[str, str]:
    try:
        return platform.freedesktop_os_release()
    except OSError:
        return {}


def collect_system_info() -> SystemInfo:
    """Gather host information; raises RuntimeError when a part cannot be read."""
    try:
        uptime_seconds = max(0, int(time.time() - psutil.boot_time()))
    except (OSError, RuntimeError) as exc:
        raise RuntimeError(f"failed to get uptime: {exc}") from exc
    try:
        process_count = len(psutil.pids())
    except (OSError, RuntimeError) as exc:
        raise RuntimeError(f"failed to get host info: {exc}") from exc
    try:
        addresses = ip_addresses()
    except (OSError, RuntimeError) as exc:
        raise RuntimeError(f"failed to get IP addresses: {exc}") from exc

    release = _os_release()
    return SystemInfo(
        uptime=format_uptime(uptime_seconds),
        current_time=datetime.now().astimezone().isoformat(timespec="seconds"),
        process_count=process_count,
        hostname=socket.gethostname(),
        os=platform.system().lower(),
        platform=release.get("ID", ""),
        platform_version=release.get("VERSION_ID", ""),
        kernel_version=platform.release(),
        ip_addresses=addresses,
    )