# healthwatch

Server health metrics for Linux hosts. `healthwatch` collects CPU, memory,
disk and general host information, classifies usage against warning and
critical thresholds, renders HTML alert messages, applies an alert policy
for CPU usage and builds periodic memory summary reports.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command line

Print a one-off snapshot of every metric as JSON:

```
healthwatch
healthwatch --config settings.json --indent 4
```

`--config` names a JSON settings file and `--indent` sets the JSON
indentation (default 2). A part that cannot be read is left out of the
output. If the settings file cannot be loaded the command prints an error
and exits with status 2.

A settings file holds any of the keys `cpu`, `memory`, `disk`,
`throttling`, `email_enabled` and `log_dir`; unknown keys are rejected:

```json
{
  "cpu": {"warning_threshold": 75, "critical_threshold": 90, "check_interval": 30},
  "memory": {"warning_threshold": 80, "critical_threshold": 95},
  "throttling": {"enabled": true, "cooldown_period": 600, "max_warnings_per_day": 3}
}
```

## Library use

Collect a snapshot programmatically:

```python
from healthwatch.settings import Settings
from healthwatch.snapshot import collect_server_metrics

metrics = collect_server_metrics(Settings())
print(metrics.to_dict())
```

Individual collectors:

- `healthwatch.cpu_info.collect_cpu_info(warning_threshold, critical_threshold)`
  samples usage for half a second and returns a `CPUInfo`;
  `collect_cpu_core_info()` describes the processor without sampling.
- `healthwatch.memory_info.collect_memory_info(warning_threshold, critical_threshold)`
  returns a `MemoryInfo`, including swap.
- `healthwatch.disk_info.collect_storage_info()` returns a list of
  `StorageInfo` and a `TotalStorage` (or `None` when there is no internal
  storage). `summarize_storage` and `is_external_mount` are usable on their own.
- `healthwatch.system_info.collect_system_info()` returns a `SystemInfo`
  with uptime, hostname, OS, kernel and global unicast IP addresses.

`ResourceThresholds.classify(usage)` returns `"normal"`, `"warning"` or
`"critical"`.

### Notifications and alerts

`healthwatch.notify.Notifier` hands each message to a transport callable
`transport(subject, message, level)`, where level is `info`, `warning` or
`critical`, and keeps a `history` of what was sent. The default transport
only writes a log record. `create_alert_html`, `create_table`,
`create_status_line`, `default_styles` and `server_info_html` build the
HTML messages.

`healthwatch.cpu_alerts.CPUAlertHandler` decides which CPU observations
become notifications. Call `handle_warning`, `handle_critical` or
`handle_normal` with a `CPUInfo` and whether the status just changed:

- warnings are limited by a 30-minute throttle window, a daily maximum and
  an escalation count, and repeated warnings are aggregated into a summary;
- critical alerts need several consecutive critical readings unless the
  status has just changed, and respect a cooldown;
- a normal notification is sent only on a change from critical to normal.

These limits come from `ThrottlingSettings` when throttling is enabled.
The HTML fragments are in `healthwatch.cpu_alert_content`.

```python
from healthwatch.settings import Settings
from healthwatch.notify import Notifier
from healthwatch.cpu_alerts import CPUAlertHandler
from healthwatch.cpu_info import collect_cpu_info

handler = CPUAlertHandler(Settings(), Notifier())
info = collect_cpu_info(80.0, 90.0)
if info.cpu_status == "critical":
    handler.handle_critical(info, status_changed=True)
```

### Memory summary reports

`healthwatch.memory_summary.MemorySummaryReporter` counts warning and
critical observations and peak usage via `record(info)`, and sends a
summary through its `Notifier` once per interval (24 hours by default).
`build_report()` renders the report and `send_report()` sends it and
resets the counters.

### System information monitor

`healthwatch.sysinfo_monitor.SystemInfoMonitor` collects host information
every second (by default) in a background thread and passes each message,
built by `build_sysinfo_message`, to a publisher callable:

```python
from healthwatch.sysinfo_monitor import SystemInfoMonitor

monitor = SystemInfoMonitor(publisher=print)
monitor.start()
# ...
monitor.stop()
```

### Formatting helpers

`healthwatch.units` provides `format_clock_speed`, `format_bytes_short`
and `format_uptime`; `healthwatch.cpu_info.format_bytes` gives the compact
form such as `1.50KB` or `2GB`.

## What the package does not do

- There are no background monitors for CPU, memory or disk; only host
  information has one. Periodic CPU and memory checks must be driven by
  the caller, feeding the alert handler and summary reporter.
- There is no alert policy for memory and no CPU summary report.
- Status transitions are not written to a dedicated log file.
- No e-mail is sent and no WebSocket or HTTP server is provided; supply a
  `Notifier` transport and a publisher to deliver messages yourself.