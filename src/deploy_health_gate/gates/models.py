# src/deploy_health_gate/gates/models.py
# Data models for gate run records.
"""
Records of a gate run, used for reporting.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class GateStatus(str, Enum):
    """Outcome of a gate run."""
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class IterationResult:
    """What happened in one polling iteration."""
    iteration: int
    elapsed_seconds: float
    polled: list[str] = field(default_factory=list)
    alerting: list[str] = field(default_factory=list)
    settled: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "iteration": self.iteration,
            "elapsed_seconds": self.elapsed_seconds,
            "polled": self.polled,
            "alerting": self.alerting,
            "settled": self.settled,
        }


@dataclass
class GateRun:
    """Result of validating one deploy."""
    deploy_id: str
    status: GateStatus
    started_at: datetime
    finished_at: Optional[datetime] = None
    max_iterations: int = 0
    iterations: list[IterationResult] = field(default_factory=list)
    redeploy_previous: bool = False
    error: Optional[str] = None

    @property
    def verdict(self) -> bool:
        return self.status in (GateStatus.PASSED, GateStatus.SKIPPED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "deploy_id": self.deploy_id,
            "status": self.status.value,
            "verdict": self.verdict,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "max_iterations": self.max_iterations,
            "iterations": [i.to_dict() for i in self.iterations],
            "redeploy_previous": self.redeploy_previous,
            "error": self.error,
        }
