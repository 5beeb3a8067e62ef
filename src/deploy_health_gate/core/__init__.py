# src/deploy_health_gate/core/__init__.py
# Core modules for the health gate.
"""
Core functionality:
- config: Configuration management
"""

from deploy_health_gate.core.config import (
    GateSettings,
    HealthGateConfig,
    clear_config_cache,
    load_config,
)

__all__ = ["GateSettings", "HealthGateConfig", "clear_config_cache", "load_config"]
