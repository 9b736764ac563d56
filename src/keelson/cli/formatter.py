import json
import typer
from typing import Any, Iterable, List
from pydantic import BaseModel
from rich.console import Console
from rich.table import Table
from keelson.core.models import CommandDescriptor, SiteAlias

# Create a stderr console for logging
error_console = Console(stderr=True)

class OutputFormatter:
    """
    Handles output formatting for the CLI and the shell.
    Ensures separation of concerns between System Logs (stderr) and Data (stdout).
    """

    verbose: bool = False

    @staticmethod
    def log(message: str, severity: str = "info") -> None:
        """
        Print system messages to stderr with color coding.
        """
        if severity == "debug" and not OutputFormatter.verbose:
            return

        style = "white"
        prefix = "[KEELSON]"

        if severity == "debug":
            style = "dim"
        elif severity == "warning":
            style = "yellow"
        elif severity == "error":
            style = "red"
        elif severity == "critical":
            style = "bold red"
        elif severity == "success":
            style = "green"

        error_console.print(f"[{style}]{prefix} {message}[/{style}]", markup=True, highlight=False)

    @staticmethod
    def print_commands(commands: List[CommandDescriptor]) -> None:
        """
        Prints the commands available inside the shell.
        """
        table = Table(title="Shell Commands", header_style="bold cyan")
        table.add_column("Command", style="bold")
        table.add_column("Aliases")
        table.add_column("Description")

        for command in commands:
            table.add_row(
                command.name,
                ", ".join(sorted(command.aliases)),
                command.description or "",
            )

        console = Console()
        console.print(table)
        console.print() # spacing

    @staticmethod
    def print_aliases(aliases: Iterable[SiteAlias]) -> None:
        table = Table(title="Site Aliases", header_style="bold cyan")
        table.add_column("Alias", style="bold")
        table.add_column("Root")
        table.add_column("Host")
        table.add_column("Also Known As")

        for alias in aliases:
            table.add_row(
                f"@{alias.name}",
                str(alias.root) if alias.root else "",
                alias.host or "",
                ", ".join(f"@{name}" for name in alias.aliases),
            )

        Console().print(table)

    @staticmethod
    def print_data(data: Any) -> None:
        """
        Print a command result to stdout.
        Handles Pydantic models and complex types.
        """
        # 1. Raw Strings
        if isinstance(data, str):
            typer.echo(data)
            return

        # 2. Serialize complex objects
        def json_serializer(obj):
            if isinstance(obj, BaseModel):
                return obj.model_dump(mode='json')
            if hasattr(obj, "isoformat"):
                return obj.isoformat()
            return str(obj)

        # 3. Print JSON
        try:
            output = json.dumps(data, indent=2, default=json_serializer)
            typer.echo(output)
        except TypeError as e:
            OutputFormatter.log(f"JSON Serialization failed: {e}", severity="error")
            typer.echo(str(data))
