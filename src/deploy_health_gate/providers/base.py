# src/deploy_health_gate/providers/base.py
# Interface of the monitoring provider collaborator.

"""
Monitoring provider interface.

The gate never talks to a monitoring API directly. A provider resolves monitor
queries to Monitor objects (loaded with their current state) and refreshes the
state of a single monitor on demand.
"""

from abc import ABC, abstractmethod

from deploy_health_gate.models import Monitor, MonitorQuery, MonitorSnapshot


class MonitorProvider(ABC):
    """Abstract base class for monitoring providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name."""
        ...

    @abstractmethod
    def resolve_monitors(self, query: MonitorQuery) -> list[Monitor]:
        """
        Find the monitors selected by a query.

        Returned monitors carry their current state so the baseline filter can
        exclude monitors that are already alerting.
        """
        ...

    @abstractmethod
    def refresh_state(self, monitor: Monitor) -> MonitorSnapshot:
        """Fetch the latest state of one monitor. Raises on provider failure."""
        ...
