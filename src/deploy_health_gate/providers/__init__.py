# src/deploy_health_gate/providers/__init__.py
"""Monitoring provider interface and the scripted simulator provider."""

from deploy_health_gate.providers.base import MonitorProvider
from deploy_health_gate.providers.static import StaticMonitorProvider, MonitorScript

__all__ = ["MonitorProvider", "MonitorScript", "StaticMonitorProvider"]
