# src/deploy_health_gate/gates/__init__.py
"""
Post-deploy health gate.

1. Baseline filter - picks the monitors that gate a deploy, at deploy start
2. Concurrent refresher - refreshes monitor states in parallel
3. Gate loop - polls the monitors and returns the deploy verdict
"""

from deploy_health_gate.gates.models import (
    GateRun,
    GateStatus,
    IterationResult,
)
from deploy_health_gate.gates.baseline import (
    compute_validation_set,
    store_validation_monitors,
)
from deploy_health_gate.gates.refresher import ConcurrentRefresher
from deploy_health_gate.gates.loop import DEFAULT_INTERVAL, GateLoop

__all__ = [
    "DEFAULT_INTERVAL",
    "ConcurrentRefresher",
    "GateLoop",
    "GateRun",
    "GateStatus",
    "IterationResult",
    "compute_validation_set",
    "store_validation_monitors",
]
