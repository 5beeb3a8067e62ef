# src/deploy_health_gate/providers/static.py
# Scripted monitoring provider for dry runs and tests.

"""
Static (simulator) provider.

Monitors and their state over time are described in YAML:

    monitors:
      - id: "1001"
        name: API error rate
        url: https://monitoring.example.com/monitors/1001
        tags: [service:api, team:core]
        check_duration: 300
        states: [OK, OK, Alert]
        groups:
          "pod:pod1": [OK, Alert]

Resolving a query returns monitors in the current scripted state of their id.
Every refresh advances the refreshed Monitor one step; the last state repeats
once the script is exhausted. Monitors resolved from the same script by two
queries advance side by side, and the furthest step reached becomes the
starting point for monitors resolved later. A step of "!error" makes that
refresh fail.

Queries are whitespace separated terms. `id:<id>` selects a monitor by id,
any other term must be one of the monitor's tags.
"""

import logging
import threading
from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from deploy_health_gate.errors import ConfigurationError
from deploy_health_gate.models import Monitor, MonitorQuery, MonitorSnapshot, MonitorState
from deploy_health_gate.providers.base import MonitorProvider

logger = logging.getLogger(__name__)

ERROR_STEP = "!error"


class MonitorScript(BaseModel):
    """Scripted monitor definition."""

    id: str = Field(..., description="Provider monitor id")
    name: str = Field(..., description="Monitor name")
    url: str = Field(default="")
    tags: list[str] = Field(default_factory=list)
    check_duration: float = Field(default=0.0, ge=0)
    states: list[str] = Field(default_factory=lambda: ["OK"], min_length=1)
    groups: dict[str, list[str]] = Field(default_factory=dict)

    def matches(self, query: str) -> bool:
        terms = query.split()
        if not terms:
            return False
        for term in terms:
            if term.startswith("id:"):
                if term[3:] != self.id:
                    return False
            elif term not in self.tags:
                return False
        return True

    def step(self, index: int) -> tuple[str, dict[str, str]]:
        """Overall and group states at a refresh index."""
        overall = self.states[min(index, len(self.states) - 1)]
        groups = {
            key: steps[min(index, len(steps) - 1)]
            for key, steps in self.groups.items()
            if steps
        }
        return overall, groups


class StaticProviderFile(BaseModel):
    monitors: list[MonitorScript] = Field(default_factory=list)


class StaticMonitorProvider(MonitorProvider):
    """Provider replaying scripted monitor states."""

    def __init__(self, scripts: list[MonitorScript]) -> None:
        self.scripts = {s.id: s for s in scripts}
        self.refresh_calls = 0
        self._cursors: dict[str, int] = {}
        # keyed by id() of the resolved Monitor, which is kept alive alongside
        self._positions: dict[int, tuple[Monitor, int]] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "static"

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "StaticMonitorProvider":
        """Load monitor scripts from a YAML file."""
        path = Path(path)
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"invalid monitor script file {path}: {e}") from e
        try:
            parsed = StaticProviderFile.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"invalid monitor script file {path}: {e}") from e
        logger.debug("Loaded %d scripted monitors from %s", len(parsed.monitors), path)
        return cls(parsed.monitors)

    def resolve_monitors(self, query: MonitorQuery) -> list[Monitor]:
        monitors = []
        for script in self.scripts.values():
            if not script.matches(query.query):
                continue
            monitor = Monitor(
                id=script.id,
                name=script.name,
                url=script.url,
                check_duration=script.check_duration,
            )
            start = self._cursors.get(script.id, 0)
            monitor.apply_snapshot(self._snapshot(script, start))
            with self._lock:
                self._positions[id(monitor)] = (monitor, start)
            monitors.append(monitor)
        return monitors

    def refresh_state(self, monitor: Monitor) -> MonitorSnapshot:
        script = self.scripts.get(monitor.id)
        if script is None:
            raise LookupError(f"monitor {monitor.id} not found")
        with self._lock:
            self.refresh_calls += 1
            _, position = self._positions.get(id(monitor), (monitor, self._cursors.get(monitor.id, 0)))
            index = position + 1
            self._positions[id(monitor)] = (monitor, index)
            self._cursors[monitor.id] = max(self._cursors.get(monitor.id, 0), index)
        return self._snapshot(script, index)

    def _snapshot(self, script: MonitorScript, index: int) -> MonitorSnapshot:
        overall, groups = script.step(index)
        if overall == ERROR_STEP or ERROR_STEP in groups.values():
            raise ConnectionError(f"simulated provider failure for monitor {script.id}")
        return MonitorSnapshot(
            overall_state=MonitorState.parse(overall),
            group_states={key: MonitorState.parse(value) for key, value in groups.items()},
        )
