# tests/conftest.py
# Pytest configuration and fixtures for deploy-health-gate tests.

"""
Shared pytest fixtures for testing the health gate.

Provides:
- Scripted monitor providers
- Stages, deploy groups and deploys
- A recording sleep so gate loops never wait
"""

from pathlib import Path
from typing import Optional

import pytest
import yaml

from deploy_health_gate.core.config import clear_config_cache
from deploy_health_gate.gates.loop import GateLoop
from deploy_health_gate.gates.refresher import ConcurrentRefresher
from deploy_health_gate.models import Deploy, DeployGroup, MonitorQuery, Stage
from deploy_health_gate.providers.static import MonitorScript, StaticMonitorProvider


def script(
    id: str,
    states: list[str],
    check_duration: float = 60,
    tags: Optional[list[str]] = None,
    groups: Optional[dict[str, list[str]]] = None,
) -> MonitorScript:
    """Build a scripted monitor; states[0] is the state at deploy start."""
    return MonitorScript(
        id=id,
        name=f"Monitor {id}",
        url=f"https://monitoring.example.com/monitors/{id}",
        tags=tags if tags is not None else ["service:api"],
        check_duration=check_duration,
        states=states,
        groups=groups or {},
    )


class RecordingSleep:
    """Stand-in for time.sleep that records requested durations."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture(autouse=True)
def _reset_config_cache():
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def pod1() -> DeployGroup:
    return DeployGroup(name="Pod 1", permalink="pod1", env_value="pod1", environment="production")


@pytest.fixture
def make_stage(pod1: DeployGroup):
    """Factory for a stage with the given monitor queries."""

    def _make(*queries: MonitorQuery, tags: str = "env:production,service:api") -> Stage:
        return Stage(
            name="production",
            tags=tags,
            monitor_queries=list(queries),
            deploy_groups=[pod1],
        )

    return _make


@pytest.fixture
def make_deploy():
    """Factory for a deploy of a stage."""

    def _make(stage: Stage, succeeded: bool = True) -> Deploy:
        return Deploy(
            id="42",
            stage=stage,
            reference="v1.2.3",
            user="alex",
            status="running",
            succeeded=succeeded,
        )

    return _make


@pytest.fixture
def make_loop(sleep: RecordingSleep):
    """Factory for a gate loop against a provider."""

    def _make(provider, interval: float = 60) -> GateLoop:
        return GateLoop(ConcurrentRefresher(provider), interval=interval, sleep=sleep)

    return _make


@pytest.fixture
def redeploy_query() -> MonitorQuery:
    return MonitorQuery(query="service:api", failure_behavior="redeploy_previous")


@pytest.fixture
def fail_query() -> MonitorQuery:
    return MonitorQuery(query="service:api", failure_behavior="fail_deploy")


@pytest.fixture
def monitors_file(tmp_path: Path):
    """Write scripted monitors to a YAML file and return its path."""

    def _write(*scripts: MonitorScript) -> Path:
        path = tmp_path / "monitors.yaml"
        path.write_text(yaml.dump({"monitors": [s.model_dump() for s in scripts]}))
        return path

    return _write


@pytest.fixture
def provider_for():
    def _make(*scripts: MonitorScript) -> StaticMonitorProvider:
        return StaticMonitorProvider(list(scripts))

    return _make
