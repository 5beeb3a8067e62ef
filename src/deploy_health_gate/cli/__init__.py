# src/deploy_health_gate/cli/__init__.py
# CLI package for the deploy health gate.
"""
CLI module providing the `healthgate` command-line interface.

Commands:
- healthgate init: Write an example config and scripted monitor file
- healthgate monitors: Show the validation set for a stage
- healthgate validate: Dry-run a deploy lifecycle against scripted monitors
"""

from deploy_health_gate.cli.main import app

__all__ = ["app"]
