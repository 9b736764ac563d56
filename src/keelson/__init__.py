"""Keelson: site management CLI with an interactive Python shell."""

__version__ = "0.1.0"

from keelson.core.context import KeelsonContext
from keelson.core.models import CommandDescriptor, SessionContext
from keelson.shell import filter_commands, resolve_history_path

__all__ = [
    "CommandDescriptor",
    "KeelsonContext",
    "SessionContext",
    "filter_commands",
    "resolve_history_path",
    "__version__",
]
