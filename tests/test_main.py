"""Tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from solarestimate import main as cli
from solarestimate.profile import TableSolarProfile

from conftest import MOCK_STATUS_RESPONSE, eastern


@pytest.fixture
def status_file(tmp_path: Path) -> Path:
    path = tmp_path / "status.json"
    path.write_text(json.dumps(MOCK_STATUS_RESPONSE))
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "solarestimate.json"
    path.write_text(json.dumps({"timezone": "US/Eastern"}))
    return path


class TestConfig:
    """Test configuration loading."""

    def test_missing_default_config(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setattr(cli, "SOLARESTIMATE_CONFIG_PATH", tmp_path / "missing.json")

        assert cli.load_config() == {}

    def test_default_config(self, config_file: Path, monkeypatch) -> None:
        monkeypatch.setattr(cli, "SOLARESTIMATE_CONFIG_PATH", config_file)

        assert cli.load_config() == {"timezone": "US/Eastern"}

    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            cli.load_config(tmp_path / "missing.json")

    def test_estimator_from_config(self) -> None:
        estimator = cli.estimator_from_config({
            "full_day_after_hour": 12,
            "self_consumption_ratio": 0.5,
            "profile": {"weights": {"12": 1.0}},
            "threshold": 0.01,
        })

        assert estimator.full_day_after_hour == 12
        assert estimator.self_consumption_ratio == 0.5
        assert estimator.forward_share == 0.7
        assert isinstance(estimator.profile, TableSolarProfile)


class TestMain:
    """Test running the command."""

    def test_text_output(self, status_file: Path, config_file: Path, capsys) -> None:
        code = cli.main([
            str(status_file), "--config", str(config_file), "--now", "2024-06-15T10:30:00-04:00",
        ])

        out = capsys.readouterr().out
        assert code == 0
        assert "10:00" in out
        assert "now, real" in out
        assert "Current power:   5.0 kW" in out
        assert "Energy lifetime: 24.6 MWh" in out
        assert "Efficiency:      50.0%" in out
        assert "Local hour:      10 (US/Eastern)" in out

    def test_json_output(self, status_file: Path, config_file: Path, tmp_path: Path, capsys) -> None:
        consumption = tmp_path / "consumption.json"
        consumption.write_text(json.dumps({
            "hourly": [{"timestamp": int(eastern(9).timestamp()), "energy_wh": 1500}]
        }))

        code = cli.main([
            str(status_file),
            "--config", str(config_file),
            "--consumption", str(consumption),
            "--now", "2024-06-15T16:45:00-04:00",
            "--json",
        ])

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["period"] == "hourly_today"
        assert data["full_day"] is True
        assert data["current_hour"] == 16
        assert len(data["production"]) == 13
        chart = {row["label"]: row for row in data["chart"]}
        assert chart["09:00"]["consumption_kwh"] == 1.5
        assert chart["09:00"]["consumption_is_real"] is True
        assert chart["18:00"]["is_real"] is False

    def test_live_telemetry(self, status_file: Path, config_file: Path, tmp_path: Path, capsys) -> None:
        telemetry = tmp_path / "telemetry.json"
        telemetry.write_text(json.dumps({
            "telemetry": {"devices": {"meters": [{"name": "consumption", "channel": 1, "power": 2000}]}}
        }))

        code = cli.main([
            str(status_file),
            "--config", str(config_file),
            "--telemetry", str(telemetry),
            "--now", "2024-06-15T10:30:00-04:00",
            "--json",
        ])

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert all(row["consumption_kwh"] == 2.0 for row in data["chart"])

    def test_timezone_argument(self, status_file: Path, config_file: Path, capsys) -> None:
        code = cli.main([
            str(status_file),
            "--config", str(config_file),
            "--timezone", "Asia/Tokyo",
            "--now", "2024-06-15T00:30:00+00:00",
            "--json",
        ])

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["timezone"] == "Asia/Tokyo"
        assert data["current_hour"] == 9

    def test_all_rows(self, tmp_path: Path, config_file: Path, capsys) -> None:
        status = tmp_path / "idle.json"
        status.write_text(json.dumps({"current_power": 0, "energy_today": 0, "size_w": 4000}))

        cli.main([str(status), "--config", str(config_file), "--now", "2024-06-15T11:00:00-04:00", "--json"])
        filtered = json.loads(capsys.readouterr().out)
        cli.main([
            str(status), "--config", str(config_file), "--now", "2024-06-15T11:00:00-04:00",
            "--json", "--all-rows",
        ])
        unfiltered = json.loads(capsys.readouterr().out)

        assert filtered["chart"] == []
        assert len(unfiltered["chart"]) == 6

    def test_missing_status_file(self, tmp_path: Path, config_file: Path, capsys) -> None:
        code = cli.main([str(tmp_path / "nope.json"), "--config", str(config_file)])

        assert code == 1
        assert capsys.readouterr().out.startswith("Error: ")

    def test_bad_payload(self, tmp_path: Path, config_file: Path, capsys) -> None:
        status = tmp_path / "status.json"
        status.write_text("[1, 2, 3]")

        code = cli.main([str(status), "--config", str(config_file)])

        assert code == 1
        assert "Status payload must be an object" in capsys.readouterr().out

    def test_invalid_json(self, tmp_path: Path, config_file: Path, capsys) -> None:
        status = tmp_path / "status.json"
        status.write_text("{not json")

        assert cli.main([str(status), "--config", str(config_file)]) == 1


class TestMalformedTelemetry:
    """Test telemetry files that do not hold a usable consumption meter."""

    @pytest.mark.parametrize(
        "payload", [{"telemetry": [1, 2]}, {"devices": {"meters": ["x"]}}, [1, 2, 3]]
    )
    def test_falls_back_to_share_of_production(
        self, status_file: Path, config_file: Path, tmp_path: Path, capsys, payload
    ) -> None:
        telemetry = tmp_path / "telemetry.json"
        telemetry.write_text(json.dumps(payload))

        code = cli.main([
            str(status_file),
            "--config", str(config_file),
            "--telemetry", str(telemetry),
            "--now", "2024-06-15T10:30:00-04:00",
            "--json",
        ])

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert all(
            row["consumption_kwh"] == round(row["produced_kwh"] * 0.3, 3) for row in data["chart"]
        )

    def test_status_with_bad_report_time(self, tmp_path: Path, config_file: Path, capsys) -> None:
        status = tmp_path / "status.json"
        status.write_text(json.dumps({"current_power": 10, "last_report_at": 10**15}))

        code = cli.main([str(status), "--config", str(config_file)])

        assert code == 1
        assert capsys.readouterr().out.startswith("Error: Invalid number in status payload")
