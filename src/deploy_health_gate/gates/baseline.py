# src/deploy_health_gate/gates/baseline.py
# Baseline filter selecting the monitors that gate a deploy.
"""
Baseline filter - picks the monitors that gate a deploy.

Runs once when the deploy starts. Monitors that are already alerting at that
point are left out: their alert cannot be caused by this deploy. They are
excluded for the whole run, even if they recover and alert again later.
"""

import logging
from typing import Optional, Sequence

from deploy_health_gate.errors import HealthGateError, ProviderRefreshError
from deploy_health_gate.models import Deploy, DeployGroup, Monitor, MonitorQuery
from deploy_health_gate.providers.base import MonitorProvider

logger = logging.getLogger(__name__)


def compute_validation_set(
    queries: Sequence[MonitorQuery],
    deploy_groups: Optional[Sequence[DeployGroup]],
    provider: MonitorProvider,
) -> tuple[Monitor, ...]:
    """
    Resolve the gating queries to monitors, minus those alerting already.

    Order follows the query order. An empty result is valid and disables
    the gate for this deploy.
    """
    monitors: list[Monitor] = []
    for query in queries:
        if not query.has_failure_behavior():
            continue
        try:
            monitors.extend(query.monitors(provider))
        except HealthGateError:
            raise
        except Exception as e:
            raise ProviderRefreshError(
                f"could not resolve monitors for query {query.query!r}: {e}"
            ) from e

    validation_set = tuple(m for m in monitors if not m.alerting(deploy_groups))
    excluded = len(monitors) - len(validation_set)
    if excluded:
        logger.info("Excluding %d monitor(s) already alerting before the deploy", excluded)
    return validation_set


def store_validation_monitors(deploy: Deploy, provider: MonitorProvider) -> tuple[Monitor, ...]:
    """Compute the validation set for a deploy and attach it."""
    deploy.validation_monitors = compute_validation_set(
        deploy.stage.monitor_queries,
        deploy.deploy_groups,
        provider,
    )
    logger.debug(
        "Deploy %s validates against %d monitor(s)",
        deploy.id,
        len(deploy.validation_monitors),
    )
    return deploy.validation_monitors
