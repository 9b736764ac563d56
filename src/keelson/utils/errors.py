from typing import Optional


class KeelsonError(Exception):
    """Base class for errors surfaced to the CLI boundary."""


class SiteAliasNotFoundError(KeelsonError):
    """
    Raised when a site alias cannot be resolved to a configured record.
    """
    def __init__(self, alias: str):
        self.alias = alias
        super().__init__(f"Site alias '{alias}' not found.")


class ShellConstructionError(KeelsonError):
    """
    Raised when the shell namespace cannot be built, e.g. two commands
    would be bound under the same identifier.
    """


class CommandExecutionError(KeelsonError):
    """
    Exception raised while running a host command, providing context about
    which command failed.
    """
    def __init__(self, message: str, command_name: Optional[str] = None):
        self.message = message
        self.command_name = command_name
        ctx = f" in command '{command_name}'" if command_name else ""
        super().__init__(f"Execution Error{ctx}: {message}")
