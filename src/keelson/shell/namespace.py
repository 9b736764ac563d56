from typing import AbstractSet, Any, Callable, Dict, List, Sequence

from keelson.cli.formatter import OutputFormatter
from keelson.core.models import CommandDescriptor
from keelson.core.naming import RESERVED_WORDS, to_identifier
from keelson.utils.errors import CommandExecutionError, KeelsonError, ShellConstructionError

Invoke = Callable[[str, List[str]], Any]


def _kwargs_to_argv(kwargs: Dict[str, Any]) -> List[str]:
    argv: List[str] = []
    for key, value in kwargs.items():
        option = f"--{key.replace('_', '-')}"
        if value is True:
            argv.append(option)
        elif value is False or value is None:
            continue
        elif isinstance(value, (list, tuple)):
            for item in value:
                argv.extend([option, str(item)])
        else:
            argv.extend([option, str(value)])
    return argv


class CommandInvoker:
    """
    Callable handle for one host command inside the shell.

    ``cache_clear("render", all=True)`` runs ``cache-clear render --all``.
    """

    def __init__(self, command: CommandDescriptor, invoke: Invoke):
        self.command = command
        self._invoke = invoke

    @property
    def name(self) -> str:
        return self.command.name

    def build_argv(self, *args: Any, **kwargs: Any) -> List[str]:
        return [str(arg) for arg in args] + _kwargs_to_argv(kwargs)

    def run_argv(self, argv: Sequence[str]) -> Any:
        try:
            result = self._invoke(self.command.name, list(argv))
        except KeelsonError:
            raise
        except Exception as exc:
            raise CommandExecutionError(str(exc), command_name=self.command.name) from exc
        # A clean exit code carries no information at the prompt
        return None if result == 0 else result

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.run_argv(self.build_argv(*args, **kwargs))

    def __repr__(self) -> str:
        return f"<command {self.command.name}>"


class CommandNamespace:
    """The exposed commands bound to identifiers and to their raw names."""

    def __init__(self):
        self.commands: List[CommandDescriptor] = []
        # identifier -> invoker, bound as Python names in the console
        self.bindings: Dict[str, CommandInvoker] = {}
        # raw name or alias -> invoker, matched against typed command lines
        self.line_commands: Dict[str, CommandInvoker] = {}


def build_command_namespace(
    commands: Sequence[CommandDescriptor],
    invoke: Invoke,
    reserved: AbstractSet[str] = RESERVED_WORDS,
) -> CommandNamespace:
    """
    Bind each exposed command under the identifier form of its name and aliases.

    A primary name that cannot be bound, or that two commands would share,
    raises ShellConstructionError. An alias that cannot be bound is skipped.
    """
    namespace = CommandNamespace()

    for command in commands:
        identifier = to_identifier(command.name)
        if not identifier.isidentifier() or identifier in reserved:
            raise ShellConstructionError(f"Command '{command.name}' cannot be bound as '{identifier}'.")
        if identifier in namespace.bindings:
            other = namespace.bindings[identifier].name
            raise ShellConstructionError(
                f"Commands '{other}' and '{command.name}' would both be bound as '{identifier}'."
            )

        invoker = CommandInvoker(command, invoke)
        namespace.commands.append(command)
        namespace.bindings[identifier] = invoker
        namespace.line_commands[command.name] = invoker

    for command in commands:
        invoker = namespace.line_commands[command.name]
        for alias in sorted(command.aliases):
            identifier = to_identifier(alias)
            taken = identifier in namespace.bindings or alias in namespace.line_commands
            if taken or not identifier.isidentifier() or identifier in reserved:
                OutputFormatter.log(f"Skipping alias '{alias}' of '{command.name}': name is taken or not a valid identifier.", severity="debug")
                continue
            namespace.bindings[identifier] = invoker
            namespace.line_commands[alias] = invoker

    return namespace
