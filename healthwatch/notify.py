"""Alert styling, HTML rendering and notification dispatch."""

from __future__ import annotations

import logging
import platform
import socket
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from html import escape
from typing import Callable, Iterable, Optional

import psutil

log = logging.getLogger(__name__)

LEVELS = frozenset({"info", "warning", "critical"})

Transport = Callable[[str, str, str], None]


class AlertType(Enum):
    """Severity of an alert."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class AlertStyle:
    """Colours and status label used when rendering an alert."""

    status_color_class: str
    status_text: str
    header_color: str
    border_color: str


@dataclass(frozen=True)
class TableRow:
    """One label/value row of an alert table."""

    label: str
    value: str


@dataclass(frozen=True)
class Notification:
    """A notification that was handed to the transport."""

    subject: str
    message: str
    level: str
    sent_at: datetime


def _log_transport(subject: str, message: str, level: str) -> None:
    severity = {"info": logging.INFO, "warning": logging.WARNING}.get(level, logging.ERROR)
    log.log(severity, "notification: %s", subject)


@dataclass
class Notifier:
    """Sends notifications through a transport and keeps a history of them."""

    transport: Transport = _log_transport
    history: list[Notification] = field(default_factory=list)
    suppressed_warnings: int = 0
    suppressed_critical: int = 0

    def send(self, subject: str, message: str, level: str) -> Notification:
        """Deliver a notification; transport errors propagate to the caller."""
        if level not in LEVELS:
            raise ValueError(f"unknown notification level: {level!r}")
        self.transport(subject, message, level)
        notification = Notification(subject, message, level, datetime.now(timezone.utc))
        self.history.append(notification)
        return notification


def default_styles() -> dict[AlertType, AlertStyle]:
    """Return the standard style for each alert type."""
    return {
        AlertType.NORMAL: AlertStyle("normal-text", "NORMAL", "#5cb85c", "#3c763d"),
        AlertType.WARNING: AlertStyle("warning-text", "WARNING", "#f0ad4e", "#faebcc"),
        AlertType.CRITICAL: AlertStyle("critical-text", "CRITICAL", "#d9534f", "#d9534f"),
    }


def create_status_line(color_class: str, text: str) -> str:
    """Render the status line shown above an alert table."""
    return f'<p class="status-line">Status: <span class="{escape(color_class)}">{escape(text)}</span></p>\n'


def create_table(rows: Iterable[TableRow]) -> str:
    """Render rows as an HTML table; values may carry markup, labels are escaped."""
    body = "".join(
        f"<tr><th>{escape(row.label)}</th><td>{row.value}</td></tr>\n" for row in rows
    )
    return f'<table class="alert-table">\n{body}</table>\n'


_CSS = """
body { font-family: Arial, sans-serif; color: #333; }
.container { max-width: 700px; margin: 0 auto; }
.alert-table { border-collapse: collapse; width: 100%; margin: 10px 0; }
.alert-table th, .alert-table td { border: 1px solid #ddd; padding: 8px; text-align: left; }
.alert-table th { background-color: #f5f5f5; width: 35%; }
.normal-text { color: #3c763d; font-weight: bold; }
.warning-text { color: #8a6d3b; font-weight: bold; }
.critical-text { color: #a94442; font-weight: bold; }
.status-change { font-style: italic; }
"""


def create_alert_html(
    alert_type: AlertType,
    style: AlertStyle,
    title: str,
    status_changed: bool,
    table_content: str,
    server_info: str,
    additional_content: str,
) -> str:
    """Assemble a complete HTML alert message."""
    change_note = (
        '<p class="status-change">This notification was triggered by a status change.</p>\n'
        if status_changed
        else ""
    )
    safe_title = escape(title)
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{safe_title}</title>\n<style>{_CSS}</style>\n</head>\n"
        f'<body class="alert-{alert_type.value}">\n<div class="container">\n'
        f'<div class="header" style="background-color: {style.header_color}; '
        f'border-bottom: 4px solid {style.border_color}; color: white; padding: 10px;">\n'
        f"<h2>{safe_title}</h2>\n</div>\n"
        f"{change_note}{table_content}{additional_content}\n{server_info}"
        "</div>\n</body>\n</html>\n"
    )


def server_info_html() -> str:
    """Render a short table describing the host this process runs on."""
    rows = [
        TableRow("Hostname", escape(socket.gethostname())),
        TableRow("Platform", escape(platform.platform())),
        TableRow("Report Time", datetime.now().astimezone().isoformat(timespec="seconds")),
    ]
    return "<h3>Server Information</h3>\n" + create_table(rows)


def load_average() -> tuple[float, float, float]:
    """Return the 1, 5 and 15 minute system load averages."""
    one, five, fifteen = psutil.getloadavg()
    return float(one), float(five), float(fifteen)


def _maybe_load_average() -> Optional[tuple[float, float, float]]:
    try:
        return load_average()
    except (OSError, RuntimeError):
        return None