import re
import socket
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from healthwatch.system_info import SystemInfo, collect_system_info, ip_addresses


def _addr(family, address):
    return SimpleNamespace(family=family, address=address, netmask=None, broadcast=None, ptp=None)


def _stats(isup=True, flags="up,running"):
    return SimpleNamespace(isup=isup, duplex=0, speed=0, mtu=1500, flags=flags)


def test_ip_addresses_filters_interfaces_and_addresses():
    addrs = {
        "lo": [_addr(socket.AF_INET, "127.0.0.1")],
        "eth0": [
            _addr(socket.AF_INET, "192.168.1.10"),
            _addr(socket.AF_INET6, "fe80::1%eth0"),
            _addr(socket.AF_INET6, "2001:db8::5"),
            _addr(socket.AF_INET, "169.254.3.4"),
            _addr(socket.AF_INET, "0.0.0.0"),
        ],
        "eth1": [_addr(socket.AF_INET, "10.0.0.7")],
    }
    stats = {
        "lo": _stats(flags="up,loopback,running"),
        "eth0": _stats(),
        "eth1": _stats(isup=False),
    }
    with patch("psutil.net_if_addrs", return_value=addrs), patch(
        "psutil.net_if_stats", return_value=stats
    ):
        result = ip_addresses()
    assert result == ["192.168.1.10", "2001:db8::5"]


def test_ip_addresses_skips_broadcast_and_multicast():
    addrs = {
        "eth0": [
            _addr(socket.AF_INET, "255.255.255.255"),
            _addr(socket.AF_INET, "224.0.0.1"),
            _addr(socket.AF_INET, "203.0.113.9"),
        ]
    }
    with patch("psutil.net_if_addrs", return_value=addrs), patch(
        "psutil.net_if_stats", return_value={"eth0": _stats()}
    ):
        assert ip_addresses() == ["203.0.113.9"]


def test_collect_system_info_reads_host():
    info = collect_system_info()
    assert re.fullmatch(r"\d+ days, \d+ hours, \d+ minutes", info.uptime)
    assert info.hostname == socket.gethostname()
    assert info.process_count > 0
    assert datetime.fromisoformat(info.current_time).tzinfo is not None


def test_collect_system_info_wraps_uptime_error():
    with patch("psutil.boot_time", side_effect=OSError("no boot time")):
        with pytest.raises(RuntimeError, match="failed to get uptime"):
            collect_system_info()


def test_system_info_to_dict_keys():
    data = SystemInfo(hostname="box", ip_addresses=["10.0.0.1"]).to_dict()
    assert data["hostname"] == "box"
    assert data["ip_addresses"] == ["10.0.0.1"]
    assert set(data) == {
        "uptime", "current_time", "process_count", "hostname", "os",
        "platform", "platform_version", "kernel_version", "ip_addresses",
    }