"""Periodic summary reports of memory usage."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from .memory_info import MemoryInfo
from .notify import (
    AlertType,
    Notifier,
    TableRow,
    create_alert_html,
    create_table,
    default_styles,
    server_info_html,
)

log = logging.getLogger(__name__)

DEFAULT_INTERVAL = 24 * 3600.0
REPORT_SUBJECT = "Memory Usage Summary Report"

_URGENT = """
<div style="background-color: #f2dede; border-left: 5px solid #d9534f; padding: 10px; margin: 10px 0;">
<p><b>URGENT ACTION RECOMMENDED:</b> Multiple critical memory events detected.
Consider increasing system memory, identifying memory leaks, or optimizing application memory usage.</p>
</div>"""

_ACTION = """
<div style="background-color: #fcf8e3; border-left: 5px solid #faebcc; padding: 10px; margin: 10px 0;">
<p><b>ACTION RECOMMENDED:</b> Frequent memory warnings detected.
Monitor memory-intensive applications and consider optimization if the trend continues.</p>
</div>"""

_HEALTHY = """
<div style="background-color: #dff0d8; border-left: 5px solid #3c763d; padding: 10px; margin: 10px 0;">
<p><b>SYSTEM HEALTHY:</b> Memory usage appears to be within normal parameters.</p>
</div>"""


class MemorySummaryReporter:
    """Counts memory events and sends a summary once per reporting interval."""

    def __init__(
        self,
        notifier: Notifier,
        current_info: Optional[Callable[[], Optional[MemoryInfo]]] = None,
        clock: Callable[[], float] = time.monotonic,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"reporting interval must be positive: {interval}")
        self._notifier = notifier
        self._current_info = current_info or (lambda: None)
        self._clock = clock
        self.interval = float(interval)
        self.warning_events = 0
        self.critical_events = 0
        self.peak_usage = 0.0
        self._last_report = clock()
        self._lock = threading.RLock()

    def record(self, info: MemoryInfo) -> None:
        """Count one observation and send a report when the interval has passed."""
        with self._lock:
            self.peak_usage = max(self.peak_usage, info.used_memory_percentage)
            if info.memory_status == "warning":
                self.warning_events += 1
            elif info.memory_status == "critical":
                self.critical_events += 1
            if self._clock() - self._last_report >= self.interval:
                self.send_report()

    def _recommendation(self) -> str:
        if self.critical_events > 5:
            return _URGENT
        if self.warning_events > 10:
            return _ACTION
        return _HEALTHY

    def build_report(self) -> str:
        """Render the summary report as HTML from the current counters."""
        with self._lock:
            rows = [
                TableRow("Reporting Period", f"Last {int(self.interval // 3600)} hours"),
                TableRow("Warning Events", str(self.warning_events)),
                TableRow("Critical Events", str(self.critical_events)),
                TableRow("Peak Memory Usage", f"{self.peak_usage:.2f}%"),
            ]
            current = self._current_info()
            if current is not None:
                rows.append(
                    TableRow(
                        "Current Memory Status",
                        f"{current.memory_status} ({current.used_memory_percentage:.2f}%)",
                    )
                )
            style = default_styles()[AlertType.NORMAL]
            return create_alert_html(
                AlertType.NORMAL,
                style,
                "MEMORY USAGE SUMMARY REPORT",
                False,
                create_table(rows),
                server_info_html(),
                "<p>This is an automated summary of memory usage activity.</p>"
                + self._recommendation(),
            )

    def send_report(self) -> bool:
        """Send the report and reset the counters; returns whether delivery succeeded."""
        with self._lock:
            self._last_report = self._clock()
            message = self.build_report()
            delivered = True
            try:
                self._notifier.send(REPORT_SUBJECT, message, "info")
            except Exception as exc:  # any transport failure must not stop monitoring
                log.error("failed to send memory summary report: %s", exc)
                delivered = False
            self.warning_events = 0
            self.critical_events = 0
            self.peak_usage = 0.0
            return delivered