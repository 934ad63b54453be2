import json
import typer
from datetime import datetime
from typing import Any, Iterable, List
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rsboot.utils.diagnostics import StepDiagnostic

# Operator-facing stdout console; markup and highlighting off so command output prints verbatim
console = Console(highlight=False, markup=False, emoji=False, soft_wrap=True)

# Create a stderr console for logging
error_console = Console(stderr=True, soft_wrap=True)

COMMAND_OUTPUT_PREFIX = "  > "

class OutputFormatter:
    """
    Handles operator console output for the bootstrap.
    System logs go to stderr; step banners, command echo and heartbeats go to stdout.
    """

    @staticmethod
    def log(message: str, severity: str = "info") -> None:
        """
        Print system messages to stderr with color coding.
        """
        style = "white"
        prefix = "[RSBOOT]"

        if severity == "warning":
            style = "yellow"
        elif severity == "error":
            style = "red"
        elif severity == "critical":
            style = "bold red"
        elif severity == "success":
            style = "green"

        error_console.print(f"[{style}]{prefix} {escape(message)}[/{style}]")

    @staticmethod
    def print_block(text: str) -> None:
        """
        Print a step banner: the text framed by '=' borders, then a blank line.
        """
        border = "=" * len(text)
        console.print(border)
        console.print(text)
        console.print(border)
        console.print()

    @staticmethod
    def print_command_output(lines: Iterable[str]) -> None:
        """
        Echo captured command output, each line prefixed for readability.
        """
        captured = list(lines) or [""]
        for line in captured:
            console.print(f"{COMMAND_OUTPUT_PREFIX}{line}")

    @staticmethod
    def print_heartbeat(now: datetime) -> None:
        console.print(f"Still here {now.isoformat(sep=' ', timespec='seconds')}")

    @staticmethod
    def print_diagnostics(diagnostics: List[StepDiagnostic]) -> None:
        """
        Prints a table of startup steps that degraded without aborting the boot.
        """
        if not diagnostics:
            return

        table = Table(title="Startup Diagnostics", border_style="yellow", header_style="bold yellow")
        table.add_column("Severity", style="bold")
        table.add_column("Step")
        table.add_column("Message")
        table.add_column("Command")

        for diag in diagnostics:
            color = "yellow"
            if diag.severity == "error":
                color = "red"

            table.add_row(
                f"[{color}]{diag.severity.upper()}[/{color}]",
                escape(diag.step),
                escape(diag.message),
                escape(diag.command or ""),
            )

        error_console.print(table)
        error_console.print() # spacing

    @staticmethod
    def print_data(data: Any) -> None:
        """
        Print a structured value to stdout as JSON.
        Handles Pydantic models and paths.
        """
        if isinstance(data, str):
            typer.echo(data)
            return

        def json_serializer(obj):
            if isinstance(obj, BaseModel):
                return obj.model_dump(mode='json')
            if hasattr(obj, "isoformat"):
                return obj.isoformat()
            return str(obj)

        try:
            output = json.dumps(data, indent=2, default=json_serializer)
            typer.echo(output)
        except TypeError as e:
            OutputFormatter.log(f"JSON Serialization failed: {e}", severity="error")
            typer.echo(str(data))
