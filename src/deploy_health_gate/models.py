# src/deploy_health_gate/models.py
# Core data models for the deploy health gate.
"""
Data models shared by the baseline filter, the refresher and the gate loop.

Configuration entities (MonitorQuery, DeployGroup, Stage) are Pydantic models
so they are validated when loaded. Runtime entities (Monitor, Deploy) are
mutable dataclasses: a monitor's state is refreshed in place during a gate run
and the gate loop writes the rollback flag onto the deploy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from pydantic import BaseModel, Field, field_validator

from deploy_health_gate.errors import ConfigurationError

if TYPE_CHECKING:
    from deploy_health_gate.providers.base import MonitorProvider


class MonitorState(str, Enum):
    """Alert state reported by the monitoring provider."""

    OK = "OK"
    ALERT = "Alert"
    WARN = "Warn"
    NO_DATA = "No Data"
    SKIPPED = "Skipped"
    IGNORED = "Ignored"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Union[str, "MonitorState", None]) -> "MonitorState":
        """Coerce a provider value, mapping anything unrecognised to UNKNOWN."""
        if isinstance(value, MonitorState):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class FailureBehavior(str, Enum):
    """What to do when a monitor alerts after a deploy."""

    REDEPLOY_PREVIOUS = "redeploy_previous"
    FAIL_DEPLOY = "fail_deploy"

    @classmethod
    def parse(cls, value: Union[str, "FailureBehavior", None]) -> Optional["FailureBehavior"]:
        """
        Parse a configured failure behavior.

        Empty values mean the query is informational only and return None.
        Anything else that is not a known behavior raises ConfigurationError.
        """
        if isinstance(value, FailureBehavior):
            return value
        if value is None or value == "":
            return None
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"unsupported failure behavior {value!r}") from None


# Deploy group attributes a query result can be matched against
MATCH_SOURCES = {
    "deploy_group.name": "name",
    "deploy_group.permalink": "permalink",
    "deploy_group.env_value": "env_value",
    "environment.permalink": "environment",
}


class DeployGroup(BaseModel):
    """A group of hosts/clusters a stage deploys to."""

    name: str = Field(..., description="Human-readable name")
    permalink: str = Field(default="", description="URL-safe identifier")
    env_value: str = Field(default="", description="Environment value used in monitor tags")
    environment: str = Field(default="", description="Owning environment permalink")

    def attribute(self, source: str) -> str:
        """Value of the attribute named by a match source."""
        try:
            return getattr(self, MATCH_SOURCES[source])
        except KeyError:
            raise ConfigurationError(f"unsupported match source {source!r}") from None


@dataclass(frozen=True)
class MonitorSnapshot:
    """State of a monitor as returned by one provider refresh."""

    overall_state: MonitorState
    group_states: dict[str, MonitorState] = field(default_factory=dict)
    fetched_at: datetime = field(default_factory=datetime.now)


@dataclass
class Monitor:
    """
    One external monitor.

    Built by the provider when a query is resolved; the state fields are
    refreshed in place for the duration of a single gate run.
    """

    id: str
    name: str
    url: str = ""
    check_duration: float = 0.0
    overall_state: MonitorState = MonitorState.UNKNOWN
    group_states: dict[str, MonitorState] = field(default_factory=dict)
    failure_behavior: Union[FailureBehavior, str, None] = None
    match_target: Optional[str] = None
    match_source: Optional[str] = None
    refreshed_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.check_duration = float(self.check_duration or 0.0)

    def state(self, deploy_groups: Optional[Sequence[DeployGroup]] = None) -> MonitorState:
        """
        Current state, scoped to the given deploy groups.

        A grouped monitor can span groups that are not part of this deploy.
        When it is matched to deploy groups only the matching group states
        count; anything alerting outside of them is reported as OK.
        Ungrouped monitors always report their overall state.
        """
        state = self.overall_state
        if state == MonitorState.OK or not deploy_groups:
            return state
        if not (self.match_target and self.match_source and self.group_states):
            return state

        keys = {
            f"{self.match_target}:{group.attribute(self.match_source)}"
            for group in deploy_groups
        }
        if any(self.group_states.get(key) == MonitorState.ALERT for key in keys):
            return MonitorState.ALERT
        return MonitorState.OK

    def alerting(self, deploy_groups: Optional[Sequence[DeployGroup]] = None) -> bool:
        return self.state(deploy_groups) == MonitorState.ALERT

    def apply_snapshot(self, snapshot: MonitorSnapshot) -> None:
        self.overall_state = snapshot.overall_state
        self.group_states = dict(snapshot.group_states)
        self.refreshed_at = snapshot.fetched_at

    def reference(self) -> str:
        return f"{self.name} {self.url}".strip()


class MonitorQuery(BaseModel):
    """A stage-level entry selecting monitors and their failure policy."""

    query: str = Field(..., description="Provider filter expression")
    failure_behavior: Optional[FailureBehavior] = Field(
        default=None,
        description="Policy when a matched monitor alerts; empty means informational",
    )
    match_target: Optional[str] = Field(default=None, description="Monitor group tag name")
    match_source: Optional[str] = Field(default=None, description="Deploy group attribute")
    check_duration: Optional[float] = Field(
        default=None,
        ge=0,
        description="Seconds an alert needs to aggregate before it is trusted",
    )

    @field_validator("failure_behavior", mode="before")
    @classmethod
    def parse_failure_behavior(cls, value: Any) -> Optional[FailureBehavior]:
        return FailureBehavior.parse(value)

    @field_validator("match_source")
    @classmethod
    def check_match_source(cls, value: Optional[str]) -> Optional[str]:
        if value and value not in MATCH_SOURCES:
            raise ConfigurationError(
                f"unsupported match source {value!r}, expected one of {sorted(MATCH_SOURCES)}"
            )
        return value or None

    def has_failure_behavior(self) -> bool:
        """Whether this query gates deploys (as opposed to informational only)."""
        return self.failure_behavior is not None

    def monitors(self, provider: MonitorProvider) -> list[Monitor]:
        """
        Resolve the query to monitors with their current state.

        Every call asks the provider again and returns new Monitor objects;
        the query is stage configuration and outlives a single deploy.
        """
        resolved = provider.resolve_monitors(self)
        for monitor in resolved:
            monitor.failure_behavior = self.failure_behavior
            monitor.match_target = self.match_target
            monitor.match_source = self.match_source
            if self.check_duration is not None:
                monitor.check_duration = self.check_duration
        return resolved


class Stage(BaseModel):
    """The part of a stage this gate reads."""

    name: str = Field(..., description="Stage name")
    tags: str = Field(default="", description="Comma separated notification tags")
    monitor_queries: list[MonitorQuery] = Field(default_factory=list)
    deploy_groups: list[DeployGroup] = Field(default_factory=list)

    def tag_list(self) -> list[str]:
        return [t.strip() for t in self.tags.split(",") if t.strip()]


@dataclass
class Deploy:
    """
    The deploy record owned by the host pipeline.

    The gate reads `succeeded` and the stage, stores the validation set and
    may set `redeploy_previous_when_failed`.
    """

    id: str
    stage: Stage
    reference: str = ""
    user: str = ""
    status: str = "pending"
    succeeded: bool = False
    redeploy_previous_when_failed: bool = False
    validation_monitors: tuple[Monitor, ...] = ()
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def deploy_groups(self) -> list[DeployGroup]:
        return self.stage.deploy_groups
