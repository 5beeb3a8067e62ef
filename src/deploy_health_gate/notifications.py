# src/deploy_health_gate/notifications.py
# Deploy lifecycle notifications.
"""
Sends "started" / "finished" events for a deploy to the monitoring provider's
event stream, so deploys show up next to the metrics they affect.

Only stages with notification tags configured send anything.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from deploy_health_gate.models import Deploy

logger = logging.getLogger(__name__)

ALERT_TYPES = {
    "succeeded": "success",
    "failed": "error",
    "errored": "error",
}


class DeployEvent(BaseModel):
    """Event describing a deploy."""

    title: str
    text: str = ""
    alert_type: str = Field(default="info", description="info, success or error")
    source_type_name: str = Field(default="deploy-health-gate")
    date_happened: datetime
    tags: list[str] = Field(default_factory=list)


def build_event(
    deploy: Deploy,
    additional_tags: Sequence[str] = (),
    now: bool = False,
    source_type_name: str = "deploy-health-gate",
) -> DeployEvent:
    """Build the event for a deploy in its current state."""
    user = deploy.user or "Someone"
    title = f"{user} deployed {deploy.reference} to {deploy.stage.name}"
    text = f"Deploy {deploy.id} is {deploy.status}"
    if deploy.redeploy_previous_when_failed:
        text += ", redeploying previous succeeded deploy"
    return DeployEvent(
        title=title,
        text=text,
        alert_type=ALERT_TYPES.get(deploy.status, "info"),
        source_type_name=source_type_name,
        date_happened=datetime.now() if now else deploy.updated_at,
        tags=deploy.stage.tag_list() + [f"deploy:{deploy.id}"] + list(additional_tags),
    )


class EventSink(ABC):
    """Destination for deploy events."""

    @abstractmethod
    def deliver(self, event: DeployEvent) -> None:
        ...


class LoggingEventSink(EventSink):
    """Writes events to the log."""

    def deliver(self, event: DeployEvent) -> None:
        logger.info("[%s] %s (%s) tags=%s", event.alert_type, event.title, event.text, ",".join(event.tags))


class MemoryEventSink(EventSink):
    """Keeps delivered events in memory."""

    def __init__(self) -> None:
        self.events: list[DeployEvent] = []

    def deliver(self, event: DeployEvent) -> None:
        self.events.append(event)


class NotificationSender:
    """Sends deploy events for stages that have notification tags."""

    def __init__(self, sink: Optional[EventSink] = None, source_type_name: str = "deploy-health-gate"):
        self.sink = sink or LoggingEventSink()
        self.source_type_name = source_type_name

    def send(self, deploy: Deploy, additional_tags: Sequence[str] = (), now: bool = False) -> Optional[DeployEvent]:
        if not deploy.stage.tag_list():
            return None
        event = build_event(deploy, additional_tags, now=now, source_type_name=self.source_type_name)
        self.sink.deliver(event)
        return event
