# src/deploy_health_gate/errors.py
# Exception hierarchy for the deploy health gate.
"""
Errors raised by the health gate.

- ConfigurationError: setup bug (unknown failure behavior, malformed config).
  Fatal, never retried.
- ProviderRefreshError: the monitoring provider could not be queried. Aborts
  validation instead of being read as "no alert".
"""

from typing import Optional


class HealthGateError(Exception):
    """Base class for all health gate errors."""


class ConfigurationError(HealthGateError, ValueError):
    """Invalid gate configuration."""


class ProviderRefreshError(HealthGateError):
    """One or more monitor state refreshes failed."""

    def __init__(self, message: str, failures: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.failures = failures or {}

    def __str__(self) -> str:
        base = super().__str__()
        if not self.failures:
            return base
        details = ", ".join(f"{mid}: {err}" for mid, err in sorted(self.failures.items()))
        return f"{base} ({details})"
