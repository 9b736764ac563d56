"""Interactive shell: command exposure, history selection and the console."""

from keelson.shell.console import KeelsonShell
from keelson.shell.filter import filter_commands
from keelson.shell.history import history_identity, resolve_history_path
from keelson.shell.namespace import CommandInvoker, CommandNamespace, build_command_namespace
from keelson.shell.reflection import build_command_registry

__all__ = [
	"CommandInvoker",
	"CommandNamespace",
	"KeelsonShell",
	"build_command_namespace",
	"build_command_registry",
	"filter_commands",
	"history_identity",
	"resolve_history_path",
]
