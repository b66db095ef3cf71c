"""Alert policy for CPU usage: escalation, aggregation, throttling and daily limits."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from .cpu_alert_content import (
    aggregated_content,
    critical_content,
    normal_content,
    render_cpu_table,
    warning_content,
)
from .cpu_info import CPUInfo
from .notify import (
    AlertType,
    Notifier,
    create_alert_html,
    default_styles,
    load_average,
    server_info_html,
)
from .settings import Settings

log = logging.getLogger(__name__)

Clock = Callable[[], datetime]
LoadSource = Callable[[], Optional[Sequence[float]]]

DEFAULT_CRITICAL_THROTTLE_COUNT = 3
DEFAULT_WARNING_ESCALATION = 5
DEFAULT_MAX_WARNINGS_PER_DAY = 5
DEFAULT_AGGREGATION_INTERVAL = timedelta(minutes=5)
DEFAULT_WARNING_THROTTLE_WINDOW = timedelta(minutes=30)
DEFAULT_COOLDOWN_SECONDS = 300


def _now() -> datetime:
    return datetime.now().astimezone()


class CPUAlertHandler:
    """Decides which CPU status observations become notifications, and sends them."""

    def __init__(
        self,
        settings: Settings,
        notifier: Optional[Notifier] = None,
        clock: Clock = _now,
        load_source: LoadSource = load_average,
    ) -> None:
        self.settings = settings
        self.notifier = notifier if notifier is not None else Notifier()
        self.clock = clock
        self._load_source = load_source

        throttling = settings.throttling
        self.critical_throttle_count = DEFAULT_CRITICAL_THROTTLE_COUNT
        self.warning_escalation = DEFAULT_WARNING_ESCALATION
        self.max_warnings_per_day = DEFAULT_MAX_WARNINGS_PER_DAY
        self.aggregation_interval = DEFAULT_AGGREGATION_INTERVAL
        self.warning_throttle_window = DEFAULT_WARNING_THROTTLE_WINDOW
        self.cooldown = timedelta(seconds=DEFAULT_COOLDOWN_SECONDS)
        if throttling.enabled:
            if throttling.critical_threshold > 0:
                self.critical_throttle_count = throttling.critical_threshold
            if throttling.max_warnings_per_day > 0:
                self.max_warnings_per_day = throttling.max_warnings_per_day
            if throttling.aggregation_period > 0:
                self.aggregation_interval = timedelta(minutes=throttling.aggregation_period)
            self.cooldown = timedelta(seconds=throttling.cooldown_period)

        now = clock()
        self.warning_count = 0
        self.current_critical_count = 0
        self.warnings_sent_today = 0
        self.suppressed_warning_count = 0
        self.suppressed_critical_count = 0
        self.pending_warnings: list[CPUInfo] = []
        self.last_aggregation_time = now
        self.last_day_reset = now
        self.last_warning_alert_time: Optional[datetime] = None
        self.last_critical_alert_time: Optional[datetime] = None
        self.last_normal_alert_time: Optional[datetime] = None
        self.last_alert_time: Optional[datetime] = None
        self.last_info: Optional[CPUInfo] = None

    def _load(self) -> Optional[Sequence[float]]:
        try:
            return self._load_source()
        except (OSError, RuntimeError, ValueError):
            return None

    def _table(self, info: CPUInfo) -> str:
        return render_cpu_table(info, default_styles()[AlertType.WARNING])

    def _send(
        self,
        alert_type: AlertType,
        title: str,
        subject: str,
        level: str,
        status_changed: bool,
        info: CPUInfo,
        additional: str,
    ) -> None:
        message = create_alert_html(
            alert_type,
            default_styles()[alert_type],
            title,
            status_changed,
            self._table(info),
            server_info_html(),
            additional,
        )
        try:
            self.notifier.send(subject, message, level)
        except Exception as exc:  # delivery failures must not stop monitoring
            log.error("failed to send %r notification: %s", subject, exc)
        self.last_alert_time = self.clock()

    def _reset_daily_counter(self, now: datetime) -> None:
        if now.date() != self.last_day_reset.date():
            self.warnings_sent_today = 0
            self.last_day_reset = now

    def handle_warning(self, info: CPUInfo, status_changed: bool) -> None:
        """Process a warning-level observation."""
        now = self.clock()
        self._reset_daily_counter(now)
        if status_changed:
            log.info("CPU entered warning state: usage=%.2f%%", info.usage)

        self.current_critical_count = 0

        if status_changed and self.last_info is not None and self.last_info.cpu_status == "critical":
            log.info("CPU improved from critical to warning state: usage=%.2f%%", info.usage)
            self.last_info = info
            return

        if (
            self.last_warning_alert_time is not None
            and now - self.last_warning_alert_time < self.warning_throttle_window
        ):
            self.suppressed_warning_count += 1
            return

        if self.warnings_sent_today >= self.max_warnings_per_day:
            log.info(
                "daily CPU warning notification limit reached: %d of %d",
                self.warnings_sent_today,
                self.max_warnings_per_day,
            )
            return

        if status_changed:
            self.warning_count = 0
            self.last_info = info
            self._send_warning(info, True, "")
            return

        self.warning_count += 1
        self.last_info = info
        self.pending_warnings.append(info)

        if now - self.last_aggregation_time >= self.aggregation_interval and self.pending_warnings:
            self._send_aggregated()
            return

        if self.warning_count < self.warning_escalation:
            log.debug(
                "CPU warning suppressed by escalation policy: %d of %d",
                self.warning_count,
                self.warning_escalation,
            )
            return

        note = (
            "\n<p><b>Note:</b> This alert was sent after "
            f"{self.warning_count} consecutive warnings.</p>"
        )
        self._send_warning(info, False, note)

    def _send_warning(self, info: CPUInfo, status_changed: bool, note: str) -> None:
        self.warnings_sent_today += 1
        self.last_warning_alert_time = self.clock()
        content = warning_content(
            note, self.warnings_sent_today, self.max_warnings_per_day, self._load()
        )
        self._send(
            AlertType.WARNING,
            "CPU WARNING ALERT",
            "CPU Warning",
            "warning",
            status_changed,
            info,
            content,
        )
        self.warning_count = 0
        log.info(
            "sent CPU warning notification: usage=%.2f%% (%d of %d today)",
            info.usage,
            self.warnings_sent_today,
            self.max_warnings_per_day,
        )

    def _send_aggregated(self) -> None:
        if not self.pending_warnings:
            return
        self.warnings_sent_today += 1
        worst = max(self.pending_warnings, key=lambda item: item.usage)
        content = aggregated_content(
            len(self.pending_warnings),
            int(self.aggregation_interval.total_seconds() // 60),
            worst.usage,
            self.warnings_sent_today,
            self.max_warnings_per_day,
        )
        self._send(
            AlertType.WARNING,
            "AGGREGATED CPU WARNING ALERT",
            "CPU Warning Summary",
            "warning",
            False,
            worst,
            content,
        )
        now = self.clock()
        self.last_aggregation_time = now
        self.pending_warnings = []
        self.last_warning_alert_time = now
        self.warning_count = 0
        log.info("sent aggregated CPU warning notification: highest=%.2f%%", worst.usage)

    def handle_critical(self, info: CPUInfo, status_changed: bool) -> None:
        """Process a critical-level observation."""
        self.current_critical_count += 1
        now = self.clock()
        if status_changed:
            log.info(
                "CPU entered critical state: usage=%.2f%% consecutive=%d threshold=%d",
                info.usage,
                self.current_critical_count,
                self.critical_throttle_count,
            )
        self.last_info = info

        if not status_changed and self.current_critical_count < self.critical_throttle_count:
            log.info(
                "suppressing CPU critical alert until threshold reached: %d of %d",
                self.current_critical_count,
                self.critical_throttle_count,
            )
            return

        if (
            self.last_critical_alert_time is not None
            and now - self.last_critical_alert_time < self.cooldown
        ):
            self.suppressed_critical_count += 1
            return

        self._send(
            AlertType.CRITICAL,
            "CRITICAL CPU ALERT",
            "CRITICAL CPU Alert",
            "critical",
            status_changed,
            info,
            critical_content(info, self._load()),
        )
        self.last_critical_alert_time = self.clock()
        self.current_critical_count = 0
        log.info("sent critical CPU alert: usage=%.2f%%", info.usage)

    def handle_normal(self, info: CPUInfo, status_changed: bool) -> None:
        """Process a normal-level observation; only critical-to-normal changes notify."""
        previous = self.last_info
        self.warning_count = 0
        self.current_critical_count = 0
        self.last_info = info

        if not status_changed or previous is None or previous.cpu_status != "critical":
            return

        now = self.clock()
        log.info("CPU returned to normal state: usage=%.2f%%", info.usage)
        if (
            self.last_normal_alert_time is not None
            and now - self.last_normal_alert_time < self.cooldown
        ):
            return

        self._send(
            AlertType.NORMAL,
            "CPU STATUS NORMALIZED",
            "CPU Status Normalized",
            "info",
            status_changed,
            info,
            normal_content(),
        )
        self.last_normal_alert_time = self.clock()
        log.info("sent CPU normalized notification: usage=%.2f%%", info.usage)