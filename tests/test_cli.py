# tests/test_cli.py
# Tests for the healthgate command line interface.

"""
CLI tests using Typer's CliRunner.

Tests cover:
- init writes a loadable config
- monitors lists the validation set
- validate exit codes for pass, fail and error
"""

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from deploy_health_gate import __version__
from deploy_health_gate.cli import app
from deploy_health_gate.core.config import load_config

from conftest import script

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "gate.yaml"
    path.write_text(yaml.dump({
        "stage": {
            "name": "production",
            "tags": "env:production",
            "deploy_groups": [{"name": "Pod 1", "permalink": "pod1"}],
            "monitor_queries": [
                {"query": "service:api", "failure_behavior": "redeploy_previous"},
            ],
        },
    }))
    return path


def _validate(config_file: Path, monitors: Path, *extra: str):
    return runner.invoke(
        app,
        ["validate", "--config", str(config_file), "--monitors", str(monitors), "--no-sleep", *extra],
    )


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestInit:
    def test_init_writes_files(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        config = load_config(tmp_path / ".healthgate.yaml")
        assert config.stage.monitor_queries[0].has_failure_behavior()
        assert (tmp_path / "monitors.yaml").exists()

    def test_init_refuses_overwrite(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".healthgate.yaml").write_text("stage: {name: x}\n")
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_init_then_validate(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert runner.invoke(app, ["init"]).exit_code == 0
        result = runner.invoke(app, ["validate", "-m", "monitors.yaml", "--no-sleep", "--json"])
        # the example latency monitor alerts on its second refresh
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["deploy"]["redeploy_previous_when_failed"] is True


class TestMonitorsCommand:
    def test_lists_validation_set(self, config_file, monitors_file):
        monitors = monitors_file(script("1", ["OK"]), script("2", ["Alert"]))
        result = runner.invoke(app, ["monitors", "-c", str(config_file), "-m", str(monitors)])
        assert result.exit_code == 0
        assert "Monitor 1" in result.output
        assert "Monitor 2" not in result.output
        assert "Total: 1 monitors" in result.output

    def test_missing_monitor_file(self, config_file, tmp_path):
        result = runner.invoke(app, ["monitors", "-c", str(config_file), "-m", str(tmp_path / "none.yaml")])
        assert result.exit_code == 2

    def test_malformed_monitor_file(self, config_file, tmp_path):
        monitors = tmp_path / "monitors.yaml"
        monitors.write_text("monitors: [unclosed\n")
        result = runner.invoke(app, ["monitors", "-c", str(config_file), "-m", str(monitors)])
        assert result.exit_code == 2
        assert "Error:" in result.output


class TestValidateCommand:
    def test_passing_deploy(self, config_file, monitors_file):
        monitors = monitors_file(script("1", ["OK"], check_duration=120))
        result = _validate(config_file, monitors, "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["deploy"]["status"] == "succeeded"
        assert data["gate"]["status"] == "passed"
        assert len(data["gate"]["iterations"]) == 2
        assert [e["tags"][-1] for e in data["events"]] == ["started", "finished"]
        assert data["events"][-1]["alert_type"] == "success"

    def test_alerting_deploy(self, config_file, monitors_file):
        monitors = monitors_file(script("1", ["OK", "Alert"]))
        result = _validate(config_file, monitors, "--json")
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["deploy"]["status"] == "failed"
        assert data["deploy"]["redeploy_previous_when_failed"] is True
        assert "Trying to redeploy previous succeeded deploy" in data["output"]
        assert data["events"][-1]["alert_type"] == "error"

    def test_failed_deploy_body_skips_gate(self, config_file, monitors_file):
        monitors = monitors_file(script("1", ["OK", "Alert"]))
        result = _validate(config_file, monitors, "--json", "--failed")
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["gate"]["status"] == "skipped"
        assert data["deploy"]["redeploy_previous_when_failed"] is False

    def test_console_output(self, config_file, monitors_file):
        monitors = monitors_file(script("1", ["OK"], check_duration=60))
        result = _validate(config_file, monitors)
        assert result.exit_code == 0
        assert "No monitors alerting" in result.output
        assert "PASSED" in result.output

    def test_provider_error(self, config_file, monitors_file):
        monitors = monitors_file(script("1", ["OK", "!error"]))
        result = _validate(config_file, monitors)
        assert result.exit_code == 2
        assert "ERROR" in result.output

    def test_interval_override(self, config_file, monitors_file):
        monitors = monitors_file(script("1", ["OK"], check_duration=60))
        result = _validate(config_file, monitors, "--json", "--interval", "30")
        assert result.exit_code == 0
        assert json.loads(result.output)["gate"]["max_iterations"] == 3

    def test_invalid_interval(self, config_file, monitors_file):
        monitors = monitors_file(script("1", ["OK"]))
        result = _validate(config_file, monitors, "--interval", "0")
        assert result.exit_code == 2

    def test_malformed_monitor_file(self, config_file, tmp_path):
        monitors = tmp_path / "monitors.yaml"
        monitors.write_text("monitors: [unclosed\n")
        result = _validate(config_file, monitors)
        assert result.exit_code == 2
        assert "Error:" in result.output
