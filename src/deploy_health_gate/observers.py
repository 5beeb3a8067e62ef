# src/deploy_health_gate/observers.py
# Deploy lifecycle observers.
"""
Hooks the host deployment pipeline calls around a deploy.

The pipeline keeps an ordered list of observers (an ObserverChain) and calls:

    chain.on_deploy_start(deploy)              # before the deploy body runs
    ok = chain.on_deploy_validate(deploy, out)  # after it finished
    chain.on_deploy_finish(deploy)              # after validation

HealthGateObserver wires the baseline filter, gate loop and notifications
into those three calls.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

from deploy_health_gate.core.config import GateSettings
from deploy_health_gate.errors import HealthGateError
from deploy_health_gate.gates.baseline import store_validation_monitors
from deploy_health_gate.gates.loop import GateLoop
from deploy_health_gate.gates.models import GateRun
from deploy_health_gate.gates.refresher import ConcurrentRefresher
from deploy_health_gate.models import Deploy
from deploy_health_gate.notifications import NotificationSender
from deploy_health_gate.output import OutputSink
from deploy_health_gate.providers.base import MonitorProvider

logger = logging.getLogger(__name__)


class DeploymentObserver(ABC):
    """Something that takes part in a deploy's lifecycle."""

    def on_deploy_start(self, deploy: Deploy) -> None:
        """Called once before the deploy body runs."""

    @abstractmethod
    def on_deploy_validate(self, deploy: Deploy, output: OutputSink) -> bool:
        """Called once after the deploy body ran. False fails the deploy."""
        ...

    def on_deploy_finish(self, deploy: Deploy) -> None:
        """Called once after validation."""


class HealthGateObserver(DeploymentObserver):
    """Gates deploys on the alert state of monitoring provider monitors."""

    def __init__(
        self,
        provider: MonitorProvider,
        settings: Optional[GateSettings] = None,
        sender: Optional[NotificationSender] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.provider = provider
        self.settings = settings or GateSettings()
        self.sender = sender or NotificationSender(source_type_name=self.settings.source_type_name)
        self.loop = GateLoop(
            ConcurrentRefresher(provider, max_workers=self.settings.max_workers),
            interval=self.settings.interval_seconds,
            sleep=sleep,
        )

    @property
    def last_run(self) -> Optional[GateRun]:
        return self.loop.last_run

    def on_deploy_start(self, deploy: Deploy) -> None:
        self.sender.send(deploy, additional_tags=["started"], now=True)
        store_validation_monitors(deploy, self.provider)

    def on_deploy_validate(self, deploy: Deploy, output: OutputSink) -> bool:
        try:
            return self.loop.run(deploy, output)
        except HealthGateError as e:
            output.puts(f"Deploy validation aborted: {e}")
            logger.error("Validation of deploy %s aborted: %s", deploy.id, e)
            raise

    def on_deploy_finish(self, deploy: Deploy) -> None:
        self.sender.send(deploy, additional_tags=["finished"])


class ObserverChain:
    """Ordered list of observers, invoked one after another."""

    def __init__(self, observers: Sequence[DeploymentObserver] = ()):
        self.observers = list(observers)

    def register(self, observer: DeploymentObserver) -> None:
        self.observers.append(observer)

    def on_deploy_start(self, deploy: Deploy) -> None:
        for observer in self.observers:
            observer.on_deploy_start(deploy)

    def on_deploy_validate(self, deploy: Deploy, output: OutputSink) -> bool:
        """Every observer is asked; the deploy passes only if all of them agree."""
        results = [observer.on_deploy_validate(deploy, output) for observer in self.observers]
        return all(results)

    def on_deploy_finish(self, deploy: Deploy) -> None:
        for observer in self.observers:
            observer.on_deploy_finish(deploy)
