# src/deploy_health_gate/cli/commands/__init__.py
"""CLI sub-commands."""
