# src/deploy_health_gate/core/config.py
# Configuration management for the health gate.
"""
Configuration models and loading utilities.

The config file (.healthgate.yaml) stores:
- Gate settings (polling interval, refresh concurrency)
- The stage: notification tags, deploy groups and monitor queries
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from deploy_health_gate.errors import ConfigurationError
from deploy_health_gate.gates.loop import DEFAULT_INTERVAL
from deploy_health_gate.models import Stage

CONFIG_FILENAME = ".healthgate.yaml"


class GateSettings(BaseModel):
    """Tunables for the gate loop."""

    interval_seconds: float = Field(
        default=DEFAULT_INTERVAL,
        gt=0,
        description="Polling period between iterations",
    )
    max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Refresh concurrency cap; one worker per monitor when unset",
    )
    source_type_name: str = Field(
        default="deploy-health-gate",
        description="Source name attached to deploy events",
    )


class HealthGateConfig(BaseModel):
    """Health gate configuration model."""

    version: str = Field(default="1.0", description="Config version")
    settings: GateSettings = Field(default_factory=GateSettings)
    stage: Stage = Field(..., description="Stage being deployed")


# Global config cache
_cached_config: Optional[HealthGateConfig] = None
_config_path: Optional[Path] = None


def parse_config(data: dict, source: str = "<config>") -> HealthGateConfig:
    """Validate raw config data."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"{source}: expected a mapping at the top level")
    try:
        return HealthGateConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"{source}: {e}") from e


def load_config(path: Optional[Path] = None) -> Optional[HealthGateConfig]:
    """
    Load configuration from file.

    Searches for config in order:
    1. Specified path
    2. Current directory (.healthgate.yaml)
    3. Home directory (~/.healthgate.yaml)

    Returns None if no config found.
    """
    global _cached_config, _config_path

    # Use cached config if same path
    if _cached_config and (path is None or path == _config_path):
        return _cached_config

    search_paths = []
    if path:
        search_paths.append(path)
    search_paths.extend([
        Path(CONFIG_FILENAME),
        Path.home() / CONFIG_FILENAME,
    ])

    config_file = None
    for p in search_paths:
        if p.exists():
            config_file = p
            break

    if not config_file:
        return None

    with open(config_file) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"{config_file}: {e}") from e

    config = parse_config(data or {}, source=str(config_file))

    _cached_config = config
    _config_path = config_file

    return config


def clear_config_cache() -> None:
    """Clear the cached configuration."""
    global _cached_config, _config_path
    _cached_config = None
    _config_path = None
