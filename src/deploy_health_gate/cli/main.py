# src/deploy_health_gate/cli/main.py
# Main CLI entrypoint for the deploy health gate.
"""
Main Typer application with all sub-commands.

Usage:
    healthgate init                                 # Write example config
    healthgate monitors -m monitors.yaml            # Show the validation set
    healthgate validate -m monitors.yaml --no-sleep # Dry-run a deploy
"""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from deploy_health_gate import __version__
from deploy_health_gate.cli.commands import init, validate

app = typer.Typer(
    name="healthgate",
    help="healthgate - post-deploy health gate driven by monitor alert states",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()

# Register sub-commands
app.command("init")(init.init_command)
app.command("monitors")(validate.monitors_command)
app.command("validate")(validate.validate_command)


def configure_logging(level: int = logging.DEBUG) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-V", help="Show version and exit"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """healthgate - post-deploy health gate CLI."""
    if version:
        console.print(f"[bold]healthgate[/bold] version {__version__}")
        raise typer.Exit()
    if verbose:
        configure_logging()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


if __name__ == "__main__":
    app()
