"""HTML fragments that make up CPU alert notifications."""

from __future__ import annotations

from html import escape
from typing import Optional, Sequence

from .cpu_info import CPUInfo
from .notify import AlertStyle, TableRow, create_status_line, create_table

LoadAverage = Optional[Sequence[float]]

_GREEN = "#5cb85c"
_YELLOW = "#f0ad4e"
_RED = "#d9534f"

_RECOMMENDATION = (
    "<p><b>Recommendation:</b> Please monitor the system closely "
    "if this condition persists.</p>"
)

_CRITICAL_ACTIONS = """
<div style="background-color: #d9534f; color: white; padding: 10px; text-align: center; margin: 20px 0;">
<h3>IMMEDIATE ACTION REQUIRED!</h3>
</div>

<div style="background-color: #f2dede; border-left: 5px solid #d9534f; padding: 10px; margin: 10px 0;">
<p><b>Recommended Actions:</b></p>
<ol>
<li>Identify CPU-intensive processes using 'top' or 'htop' commands</li>
<li>Check for runaway processes that may need to be terminated</li>
<li>If appropriate, restart resource-intensive services</li>
<li>Verify that system cooling is functioning properly</li>
<li>Check for recent system changes that may have caused this spike</li>
</ol>
</div>"""

_NORMAL = """
<div style="background-color: #dff0d8; color: #3c763d; padding: 10px; margin: 20px 0; text-align: center; border-radius: 5px;">
<p>System CPU usage has returned to normal parameters.</p>
</div>

<div style="background-color: #f5f5f5; border-left: 5px solid #5cb85c; padding: 10px; margin: 10px 0;">
<p><b>RESOLUTION SUMMARY:</b></p>
<p>The CPU usage has stabilized. If you took any actions to reduce the load, they appear to have been successful.</p>
<p>Continue monitoring the system for any recurring issues.</p>
</div>"""


def _temperature_status(temperature: float) -> str:
    if temperature > 85:
        return "Critical"
    if temperature > 75:
        return "Warning"
    return "Normal"


def _usable_load(load: LoadAverage) -> Optional[tuple[float, float, float]]:
    if load is None or len(load) < 3:
        return None
    return float(load[0]), float(load[1]), float(load[2])


def render_cpu_table(info: CPUInfo, style: AlertStyle) -> str:
    """Render the status line and the table describing the CPU state."""
    rows = [
        TableRow("Usage Percentage", f"{info.usage:.2f}%"),
        TableRow("Model", escape(info.model_name)),
        TableRow("Cores", str(info.cores)),
        TableRow("Threads", str(info.threads)),
    ]
    if info.processor_count > 0:
        rows.append(TableRow("Physical CPUs", str(info.processor_count)))
    rows.append(TableRow("Clock Speed", f"{info.clock_speed:.2f} GHz"))
    if info.temperature > 0:
        rows.append(
            TableRow(
                "Temperature",
                f"{info.temperature:.1f}°C ({_temperature_status(info.temperature)})",
            )
        )
    user, system, idle = info.usage_distribution()
    rows.append(
        TableRow(
            "Usage Distribution",
            f"User: {user:.1f}%, System: {system:.1f}%, Idle: {idle:.1f}%",
        )
    )
    return create_status_line(style.status_color_class, style.status_text) + create_table(rows)


def load_status(load_one: float, processor_count: int) -> tuple[str, str]:
    """Classify a 1-minute load average against the processor count: (label, colour)."""
    if load_one > processor_count:
        return "CRITICAL", _RED
    if load_one > processor_count * 0.7:
        return "WARNING", _YELLOW
    return "NORMAL", _GREEN


def warning_content(
    note: str, sent_today: int, max_per_day: int, load: LoadAverage = None
) -> str:
    """Build the extra content of a CPU warning alert."""
    content = _RECOMMENDATION + (note or "")
    content += (
        f"\n<p><small>This is warning notification {sent_today} of {max_per_day} "
        "allowed per day.</small></p>"
    )
    averages = _usable_load(load)
    if averages is not None:
        one, five, fifteen = averages
        content += (
            '\n<div style="background-color: #f5f5f5; border-left: 5px solid #ddd; '
            'padding: 10px; margin: 10px 0;">\n'
            f"<p><b>SYSTEM LOAD AVERAGE:</b> 1-min: {one:.2f}, 5-min: {five:.2f}, "
            f"15-min: {fifteen:.2f}</p>\n"
            "<p>System load indicates the number of processes waiting for CPU time.</p>\n"
            "</div>"
        )
    return content


def critical_content(info: CPUInfo, load: LoadAverage = None) -> str:
    """Build the extra content of a critical CPU alert."""
    content = _CRITICAL_ACTIONS
    averages = _usable_load(load)
    if averages is not None:
        one, five, fifteen = averages
        processors = info.processor_count or info.cores
        label, colour = load_status(one, processors)
        content += (
            f'\n<div style="background-color: #f2dede; border-left: 5px solid {colour}; '
            'padding: 10px; margin: 10px 0;">\n'
            f"<p><b>SYSTEM LOAD:</b> 1-min: {one:.2f}, 5-min: {five:.2f}, "
            f"15-min: {fifteen:.2f} "
            f'<span style="color: {colour}; font-weight: bold;">({label})</span></p>\n'
            f"<p>Load average above processor count ({processors}) indicates CPU "
            "saturation and performance degradation.</p>\n"
            "</div>"
        )
    return content


def normal_content() -> str:
    """Build the extra content of a CPU status-normalized notification."""
    return _NORMAL


def aggregated_content(
    count: int, minutes: int, highest_usage: float, sent_today: int, max_per_day: int
) -> str:
    """Build the extra content of an aggregated CPU warning alert."""
    return (
        f"\n<p><b>Aggregated Warning:</b> {count} CPU warnings detected in the last "
        f"{minutes} minutes.</p>\n"
        f"<p>Highest CPU usage was {highest_usage:.2f}%</p>\n"
        f"{_RECOMMENDATION}\n"
        f"<p><small>This is warning notification {sent_today} of {max_per_day} "
        "allowed per day.</small></p>\n"
        '<div style="background-color: #fcf8e3; border-left: 5px solid #faebcc; '
        'padding: 10px; margin: 10px 0;">\n'
        "<p><b>TREND SUMMARY:</b> Persistent CPU warnings may indicate:</p>\n"
        "<ul>\n"
        "<li>Undersized infrastructure for current workload</li>\n"
        "<li>Application optimization opportunities</li>\n"
        "<li>Background processes consuming resources</li>\n"
        "<li>Potential need for workload distribution or scaling</li>\n"
        "</ul>\n"
        "</div>"
    )