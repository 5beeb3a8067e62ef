# src/deploy_health_gate/cli/commands/validate.py
# Implementation of `healthgate monitors` and `healthgate validate` commands.
"""
Commands for dry-running the health gate against scripted monitors.

Usage:
    healthgate monitors -m monitors.yaml            # Show the validation set
    healthgate validate -m monitors.yaml            # Run start/validate/finish
    healthgate validate -m monitors.yaml --no-sleep # Same, without waiting
"""

import json as json_lib
import time
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.table import Table

from deploy_health_gate.core.config import HealthGateConfig, load_config
from deploy_health_gate.errors import HealthGateError
from deploy_health_gate.gates.baseline import compute_validation_set
from deploy_health_gate.gates.models import GateStatus
from deploy_health_gate.models import Deploy
from deploy_health_gate.notifications import MemoryEventSink, NotificationSender
from deploy_health_gate.observers import HealthGateObserver, ObserverChain
from deploy_health_gate.output import BufferedOutput, ConsoleOutput
from deploy_health_gate.providers.static import StaticMonitorProvider

console = Console()

EXIT_FAILED = 1
EXIT_ERROR = 2


def _status_style(status: GateStatus) -> str:
    """Get rich style for status."""
    return {
        GateStatus.PASSED: "green",
        GateStatus.FAILED: "red",
        GateStatus.SKIPPED: "yellow",
        GateStatus.ERROR: "red bold",
    }.get(status, "white")


def _load(config_path: Optional[Path], monitors_path: Path) -> tuple[HealthGateConfig, StaticMonitorProvider]:
    config = load_config(config_path)
    if config is None:
        console.print("[red]No config found. Run 'healthgate init' or pass --config.[/red]")
        raise typer.Exit(EXIT_ERROR)
    if not monitors_path.exists():
        console.print(f"[red]Monitor file not found: {monitors_path}[/red]")
        raise typer.Exit(EXIT_ERROR)
    return config, StaticMonitorProvider.from_yaml(monitors_path)


def monitors_command(
    monitors: Path = typer.Option(..., "--monitors", "-m", help="Scripted monitor file"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """Show the monitors that would gate a deploy started now."""
    try:
        config, provider = _load(config_path, monitors)
        stage = config.stage.model_copy(deep=True)
        validation_set = compute_validation_set(stage.monitor_queries, stage.deploy_groups, provider)
    except HealthGateError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(EXIT_ERROR)

    table = Table(title=f"Validation monitors for {stage.name}")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="green")
    table.add_column("State")
    table.add_column("Check window", justify="right")
    table.add_column("On alert")

    for monitor in validation_set:
        behavior = getattr(monitor.failure_behavior, "value", monitor.failure_behavior)
        table.add_row(
            monitor.id,
            monitor.name,
            monitor.state(stage.deploy_groups).value,
            f"{monitor.check_duration:g}s",
            behavior or "-",
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(validation_set)} monitors[/dim]")


def validate_command(
    monitors: Path = typer.Option(..., "--monitors", "-m", help="Scripted monitor file"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    reference: str = typer.Option("HEAD", "--reference", "-r", help="Deployed reference"),
    user: str = typer.Option("healthgate", "--user", "-u", help="Deploying user"),
    interval: Optional[float] = typer.Option(
        None, "--interval", "-i", help="Override polling interval in seconds"
    ),
    no_sleep: bool = typer.Option(
        False, "--no-sleep", help="Do not wait between iterations"
    ),
    failed: bool = typer.Option(
        False, "--failed", help="Simulate a deploy whose body failed"
    ),
    json_only: bool = typer.Option(
        False, "--json", help="Output JSON only, no console"
    ),
) -> None:
    """
    Run a deploy lifecycle against scripted monitors.

    Exit code is 0 when the gate passes, 1 when it fails and 2 on errors.
    """
    try:
        config, provider = _load(config_path, monitors)
    except HealthGateError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(EXIT_ERROR)

    settings = config.settings
    if interval is not None:
        if interval <= 0:
            console.print("[red]Error: --interval must be positive[/red]")
            raise typer.Exit(EXIT_ERROR)
        settings = settings.model_copy(update={"interval_seconds": interval})

    sink = MemoryEventSink()
    observer = HealthGateObserver(
        provider,
        settings=settings,
        sender=NotificationSender(sink, source_type_name=settings.source_type_name),
        sleep=(lambda _: None) if no_sleep else time.sleep,
    )
    chain = ObserverChain([observer])
    output = BufferedOutput() if json_only else ConsoleOutput(console, prefix="  ")

    deploy = Deploy(
        id=uuid.uuid4().hex[:8],
        stage=config.stage.model_copy(deep=True),
        reference=reference,
        user=user,
        status="running",
    )

    error: Optional[HealthGateError] = None
    verdict = False
    try:
        chain.on_deploy_start(deploy)
        if not json_only:
            console.print(Panel(
                f"[bold]Deploy {deploy.id}[/bold]: {reference} to {deploy.stage.name}\n"
                f"Validation monitors: {len(deploy.validation_monitors)}\n"
                f"Interval: {settings.interval_seconds:g}s",
                title="Health Gate",
            ))
        deploy.succeeded = not failed
        verdict = chain.on_deploy_validate(deploy, output)
        deploy.status = "succeeded" if deploy.succeeded and verdict else "failed"
    except HealthGateError as e:
        error = e
        deploy.status = "errored"
    deploy.succeeded = deploy.status == "succeeded"
    deploy.updated_at = datetime.now()
    chain.on_deploy_finish(deploy)

    run = observer.last_run
    if json_only:
        typer.echo(json_lib.dumps({
            "deploy": {
                "id": deploy.id,
                "status": deploy.status,
                "redeploy_previous_when_failed": deploy.redeploy_previous_when_failed,
            },
            "gate": run.to_dict() if run else None,
            "events": [e.model_dump(mode="json") for e in sink.events],
            "output": output.lines if isinstance(output, BufferedOutput) else [],
            "error": str(error) if error else None,
        }, indent=2))
    else:
        status = run.status if run else GateStatus.ERROR
        style = _status_style(status)
        lines = [
            f"[{style} bold]{status.value.upper()}[/{style} bold]",
            "",
            f"Deploy status: {deploy.status}",
            f"Iterations: {len(run.iterations) if run else 0}/{run.max_iterations if run else 0}",
            f"Redeploy previous: {'yes' if deploy.redeploy_previous_when_failed else 'no'}",
            f"Events sent: {len(sink.events)}",
        ]
        if error:
            lines.append(f"\n[red]{escape(str(error))}[/red]")
        console.print(Panel("\n".join(lines), title="Gate Result"))

    if error:
        raise typer.Exit(EXIT_ERROR)
    if deploy.status != "succeeded":
        raise typer.Exit(EXIT_FAILED)
