# src/deploy_health_gate/gates/refresher.py
# Concurrent refresh of monitor states.
"""
Concurrent monitor refresh.

Fans out one provider call per monitor on a thread pool and waits for all of
them. The batch succeeds or fails as a unit: snapshots are only applied once
every monitor refreshed, so the gate never evaluates a half-updated set.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from deploy_health_gate.errors import ProviderRefreshError
from deploy_health_gate.models import Monitor, MonitorSnapshot
from deploy_health_gate.providers.base import MonitorProvider

logger = logging.getLogger(__name__)


class ConcurrentRefresher:
    """Refreshes monitor states in parallel."""

    def __init__(self, provider: MonitorProvider, max_workers: Optional[int] = None):
        self.provider = provider
        self.max_workers = max_workers

    def refresh_all(self, monitors: Sequence[Monitor]) -> None:
        """
        Refresh every monitor's state from the provider.

        Every monitor is attempted. Failures are not retried here; they are
        collected and raised together as a ProviderRefreshError.
        """
        if not monitors:
            return

        workers = min(self.max_workers or len(monitors), len(monitors))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="monitor-refresh") as pool:
            futures = [(m, pool.submit(self.provider.refresh_state, m)) for m in monitors]

        snapshots: list[tuple[Monitor, MonitorSnapshot]] = []
        failures: dict[str, str] = {}
        for monitor, future in futures:
            error = future.exception()
            if error is not None:
                logger.warning("Refreshing monitor %s (%s) failed: %s", monitor.id, monitor.name, error)
                failures[monitor.id] = str(error) or type(error).__name__
            else:
                snapshots.append((monitor, future.result()))

        if failures:
            raise ProviderRefreshError(
                f"failed to refresh {len(failures)} of {len(monitors)} monitor(s)",
                failures=failures,
            )

        for monitor, snapshot in snapshots:
            monitor.apply_snapshot(snapshot)
