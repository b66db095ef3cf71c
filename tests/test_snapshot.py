import json
from datetime import datetime, timezone
from unittest.mock import patch

from healthwatch.cpu_info import CPUInfo
from healthwatch.disk_info import StorageInfo, TotalStorage
from healthwatch.settings import ResourceThresholds, Settings
from healthwatch.snapshot import ServerMetrics, collect_server_metrics, main


def _fake_cpu_percent(interval=None, percpu=False):
    return [10.0, 10.0] if percpu else 10.0


def test_to_dict_omits_missing_parts():
    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    data = ServerMetrics(timestamp=stamp).to_dict()
    assert data == {"timestamp": stamp.isoformat()}


def test_to_dict_nests_disk_data():
    metrics = ServerMetrics(
        cpu=CPUInfo(model_name="Test CPU"),
        partitions=[StorageInfo(device="/dev/vda1", mount_point="/", total=10)],
        total_storage=TotalStorage(total_capacity=10),
    )
    data = metrics.to_dict()
    assert data["cpu"]["model_name"] == "Test CPU"
    assert data["disk"]["partitions"][0]["device"] == "/dev/vda1"
    assert data["disk"]["total_storage"]["total_capacity"] == 10
    assert "memory" not in data


def test_to_dict_empty_partitions_leave_empty_disk():
    data = ServerMetrics(partitions=[]).to_dict()
    assert data["disk"] == {}


def test_collect_leaves_failed_parts_empty():
    settings = Settings(cpu=ResourceThresholds(warning_threshold=5.0, critical_threshold=50.0))
    with patch("psutil.cpu_percent", side_effect=_fake_cpu_percent), patch(
        "psutil.virtual_memory", side_effect=RuntimeError("no memory data")
    ):
        metrics = collect_server_metrics(settings)
    assert metrics.memory is None
    assert metrics.cpu.usage == 10.0
    assert metrics.cpu.cpu_status == "warning"
    assert metrics.system_info is not None


def test_main_prints_json(capsys):
    with patch("psutil.cpu_percent", side_effect=_fake_cpu_percent):
        code = main([])
    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert "timestamp" in data
    assert data["cpu"]["usage"] == 10.0


def test_main_reads_config(tmp_path, capsys):
    config = tmp_path / "settings.json"
    config.write_text(json.dumps({"cpu": {"warning_threshold": 5, "critical_threshold": 9}}))
    with patch("psutil.cpu_percent", side_effect=_fake_cpu_percent):
        code = main(["--config", str(config), "--indent", "0"])
    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["cpu"]["cpu_status"] == "critical"


def test_main_rejects_bad_config(tmp_path, capsys):
    config = tmp_path / "settings.json"
    config.write_text(json.dumps({"nonsense": 1}))
    assert main(["--config", str(config)]) == 2
    assert "cannot load settings" in capsys.readouterr().err


def test_main_rejects_missing_config(tmp_path):
    assert main(["--config", str(tmp_path / "absent.json")]) == 2