# src/deploy_health_gate/__init__.py
# Main package init - exports public API for the deploy health gate.

"""
Deploy health gate: after a deploy, polls the alert state of the monitors tied
to the stage and turns it into a pass/fail verdict, optionally asking the
pipeline to redeploy the previous succeeded deploy.

CLI Usage:
    healthgate init                                  # Write an example config
    healthgate monitors -c stage.yaml -m mon.yaml    # Show the validation set
    healthgate validate -c stage.yaml -m mon.yaml    # Run a full deploy lifecycle
"""

from deploy_health_gate.errors import (
    ConfigurationError,
    HealthGateError,
    ProviderRefreshError,
)
from deploy_health_gate.models import (
    Deploy,
    DeployGroup,
    FailureBehavior,
    Monitor,
    MonitorQuery,
    MonitorSnapshot,
    MonitorState,
    Stage,
)
from deploy_health_gate.providers import MonitorProvider, StaticMonitorProvider
from deploy_health_gate.gates import (
    ConcurrentRefresher,
    GateLoop,
    GateRun,
    GateStatus,
    compute_validation_set,
    store_validation_monitors,
)
from deploy_health_gate.core.config import GateSettings, HealthGateConfig, load_config
from deploy_health_gate.notifications import NotificationSender
from deploy_health_gate.observers import DeploymentObserver, HealthGateObserver, ObserverChain
from deploy_health_gate.output import BufferedOutput, ConsoleOutput

__version__ = "0.1.0"
__all__ = [
    # Errors
    "ConfigurationError",
    "HealthGateError",
    "ProviderRefreshError",
    # Models
    "Deploy",
    "DeployGroup",
    "FailureBehavior",
    "Monitor",
    "MonitorQuery",
    "MonitorSnapshot",
    "MonitorState",
    "Stage",
    # Providers
    "MonitorProvider",
    "StaticMonitorProvider",
    # Gate
    "ConcurrentRefresher",
    "GateLoop",
    "GateRun",
    "GateStatus",
    "compute_validation_set",
    "store_validation_monitors",
    # Configuration
    "GateSettings",
    "HealthGateConfig",
    "load_config",
    # Lifecycle
    "DeploymentObserver",
    "HealthGateObserver",
    "NotificationSender",
    "ObserverChain",
    # Output
    "BufferedOutput",
    "ConsoleOutput",
]
