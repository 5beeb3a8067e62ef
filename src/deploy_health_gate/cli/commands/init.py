# src/deploy_health_gate/cli/commands/init.py
# Implementation of `healthgate init` command.
"""
Creates an example configuration file (.healthgate.yaml) and a scripted
monitor file for dry runs with `healthgate validate`.
"""

from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.panel import Panel

from deploy_health_gate.core.config import CONFIG_FILENAME, GateSettings, HealthGateConfig
from deploy_health_gate.models import DeployGroup, FailureBehavior, MonitorQuery, Stage

console = Console()


def example_config() -> HealthGateConfig:
    """Config with one gating query and one informational query."""
    return HealthGateConfig(
        version="1.0",
        settings=GateSettings(),
        stage=Stage(
            name="production",
            tags="env:production,service:api",
            deploy_groups=[
                DeployGroup(name="Pod 1", permalink="pod1", env_value="pod1", environment="production"),
            ],
            monitor_queries=[
                MonitorQuery(
                    query="service:api",
                    failure_behavior=FailureBehavior.REDEPLOY_PREVIOUS,
                    match_target="pod",
                    match_source="deploy_group.permalink",
                    check_duration=300,
                ),
                MonitorQuery(query="team:core"),
            ],
        ),
    )


EXAMPLE_MONITORS = {
    "monitors": [
        {
            "id": "1001",
            "name": "API error rate",
            "url": "https://monitoring.example.com/monitors/1001",
            "tags": ["service:api", "team:core"],
            "check_duration": 300,
            "states": ["OK"],
            "groups": {"pod:pod1": ["OK"]},
        },
        {
            "id": "1002",
            "name": "API latency p99",
            "url": "https://monitoring.example.com/monitors/1002",
            "tags": ["service:api"],
            "check_duration": 120,
            "states": ["OK", "OK", "Alert"],
        },
    ]
}


def init_command(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing files"),
    path: Path = typer.Option(
        Path(CONFIG_FILENAME), "--path", "-p", help="Config file path"
    ),
    monitors_path: Path = typer.Option(
        Path("monitors.yaml"), "--monitors", "-m", help="Scripted monitor file path"
    ),
) -> None:
    """Write an example health gate config and scripted monitor file."""
    for target in (path, monitors_path):
        if target.exists() and not force:
            console.print(f"[yellow]{target} already exists[/yellow]")
            console.print("Use --force to overwrite")
            raise typer.Exit(1)

    config = example_config()
    config_dict = config.model_dump(mode="json", exclude_none=True)

    with open(path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
    with open(monitors_path, "w") as f:
        yaml.dump(EXAMPLE_MONITORS, f, default_flow_style=False, sort_keys=False)

    console.print(Panel(
        f"[bold]Stage:[/bold] {config.stage.name}\n"
        f"[bold]Tags:[/bold] {config.stage.tags}\n"
        f"[bold]Monitor queries:[/bold] {len(config.stage.monitor_queries)}\n"
        f"[bold]Interval:[/bold] {config.settings.interval_seconds:g}s",
        title="Health Gate Config",
    ))
    console.print(f"\n[green]✓ Created config at {path}[/green]")
    console.print(f"[green]✓ Created scripted monitors at {monitors_path}[/green]")

    console.print("\n[bold]Next steps:[/bold]")
    console.print(f"  1. Run [cyan]healthgate monitors -m {monitors_path}[/cyan] to see the validation set")
    console.print(f"  2. Run [cyan]healthgate validate -m {monitors_path} --no-sleep[/cyan] for a dry run")
