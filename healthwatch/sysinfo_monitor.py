"""Periodic collection and publication of general host information."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Optional

import psutil

from .system_info import SystemInfo, collect_system_info

log = logging.getLogger(__name__)

Publisher = Callable[[dict[str, Any]], None]
Collector = Callable[[], SystemInfo]

DEFAULT_INTERVAL = 1.0
_COLLECTION_ERRORS = (OSError, RuntimeError, ValueError, psutil.Error)


def build_sysinfo_message(info: SystemInfo, timestamp: datetime) -> dict[str, Any]:
    """Build the message broadcast to system information subscribers."""
    return {
        "metric_type": "sysinfo",
        "metrics_data": {
            "system_info": {
                "uptime": info.uptime,
                "current_time": info.current_time,
                "process_count": info.process_count,
                "hostname": info.hostname,
                "os": info.os,
                "platform": info.platform,
                "platform_version": info.platform_version,
                "kernel_version": info.kernel_version,
                "ip_addresses": list(info.ip_addresses),
            }
        },
        "meta": {
            "timestamp": timestamp.isoformat(),
            "last_update_time": timestamp.isoformat(timespec="seconds"),
            "source": "sysinfo_monitor",
            "version": "1.0",
        },
    }


class SystemInfoMonitor:
    """Collects host information at a fixed interval in a background thread."""

    def __init__(
        self,
        publisher: Optional[Publisher] = None,
        collector: Collector = collect_system_info,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive: {interval}")
        self._publish = publisher
        self._collect = collector
        self.interval = float(interval)
        self._lock = threading.Lock()
        self._last_info: Optional[SystemInfo] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def last_info(self) -> Optional[SystemInfo]:
        """The most recently collected host information."""
        with self._lock:
            return self._last_info

    @property
    def is_running(self) -> bool:
        """Whether the background thread is active."""
        with self._lock:
            return self._thread is not None

    def start(self) -> None:
        """Start periodic collection; the first runs immediately."""
        with self._lock:
            if self._thread is not None:
                raise RuntimeError("system info monitor is already running")
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name="sysinfo-monitor",
                daemon=True,
            )
            self._thread.start()

    def stop(self) -> None:
        """Stop periodic collection; does nothing when not running."""
        with self._lock:
            thread, self._thread = self._thread, None
            self._stop_event.set()
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join()
        log.info("system info monitor stopped")

    def _run(self, stop_event: threading.Event) -> None:
        while True:
            try:
                self.check()
            except Exception:  # keep the monitoring thread alive
                log.exception("system info check failed")
            if stop_event.wait(self.interval):
                return

    def check(self) -> Optional[SystemInfo]:
        """Collect and publish once; returns the information, or None if it failed."""
        try:
            info = self._collect()
        except _COLLECTION_ERRORS as exc:
            log.error("failed to get system info: %s", exc)
            return None
        with self._lock:
            self._last_info = info
        if self._publish is not None:
            self._publish(build_sysinfo_message(info, datetime.now().astimezone()))
        return info