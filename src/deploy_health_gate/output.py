# src/deploy_health_gate/output.py
# Deploy output sinks.
"""
Append-only text sinks for the deploy's live output.

The host pipeline hands the gate an output object; the gate only ever calls
`puts(line)` on it.
"""

from typing import Optional, Protocol

from rich.console import Console
from rich.markup import escape


class OutputSink(Protocol):
    def puts(self, line: str) -> None: ...


class BufferedOutput:
    """Collects output lines in memory."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def puts(self, line: str) -> None:
        self.lines.extend(line.splitlines() or [""])

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class ConsoleOutput:
    """Streams output lines to a rich console."""

    def __init__(self, console: Optional[Console] = None, prefix: str = "") -> None:
        self.console = console or Console()
        self.prefix = prefix

    def puts(self, line: str) -> None:
        for part in line.splitlines() or [""]:
            self.console.print(f"{self.prefix}{escape(part)}", highlight=False)
