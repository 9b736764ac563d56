import code
import re
import shlex
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory

from keelson.cli.formatter import OutputFormatter
from keelson.core.naming import RESERVED_WORDS
from keelson.shell.casters import Caster, make_display_hook
from keelson.shell.namespace import CommandInvoker, CommandNamespace
from keelson.utils.errors import KeelsonError

COMMAND_LINE_PATTERN = re.compile(r"^\s*(?P<name>[A-Za-z_][\w:.-]*)(?:\s+(?P<args>.*?))?\s*$")
# Text after a command name that means the line is Python, e.g. ``cc = 1``
PYTHON_TAIL_PATTERN = re.compile(r"^(?:[-+*/%&|^@<>=!]*=|\.|\[|\()")


def _looks_like_python(tail: str) -> bool:
    if not tail:
        return False
    if PYTHON_TAIL_PATTERN.match(tail):
        return True
    return tail.split(None, 1)[0] in RESERVED_WORDS


class KeelsonShell(code.InteractiveConsole):
    """
    Python console with the host commands bound as functions.

    A line that starts with a command name or alias runs that command with the
    rest of the line as its arguments; every other line is Python. History is
    kept in ``history_path`` when the console is attached to a terminal.
    """

    def __init__(
        self,
        history_path: Union[str, Path],
        scope: Optional[Dict[str, Any]] = None,
        casters: Optional[Dict[type, Caster]] = None,
    ):
        super().__init__(locals=dict(scope or {}), filename="<keelson>")
        self.history_path = Path(history_path)
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        self.namespace = CommandNamespace()
        self.display_hook = make_display_hook(casters)

        self.prompt_session: Optional[PromptSession] = None
        if sys.stdin.isatty():
            self.prompt_session = PromptSession(history=FileHistory(str(self.history_path)))

    def add_commands(self, namespace: CommandNamespace) -> None:
        self.namespace.commands.extend(namespace.commands)
        self.namespace.bindings.update(namespace.bindings)
        self.namespace.line_commands.update(namespace.line_commands)
        self.locals.update(namespace.bindings)

    def raw_input(self, prompt: str = "") -> str:
        if self.prompt_session is None:
            return super().raw_input(prompt)
        return self.prompt_session.prompt(prompt)

    def push(self, line: str, *args: Any, **kwargs: Any) -> bool:
        if not self.buffer and self.dispatch_line(line):
            return False
        return super().push(line, *args, **kwargs)

    def dispatch_line(self, line: str) -> bool:
        """Run ``line`` as a command if it is one. Returns whether it was handled."""
        match = COMMAND_LINE_PATTERN.match(line)
        if not match:
            return False

        name = match.group("name")
        tail = match.group("args") or ""
        if _looks_like_python(tail):
            return False

        invoker = self.namespace.line_commands.get(name)
        if invoker is None and name != "help":
            return False
        # A name rebound at the prompt refers to the new value
        if name.isidentifier() and self.locals.get(name, invoker) is not invoker:
            return False

        try:
            argv = shlex.split(tail, comments=True)
        except ValueError as exc:
            OutputFormatter.log(f"Invalid argument syntax: {exc}", severity="error")
            return True

        if invoker is None:
            self.show_help(argv)
        else:
            self.run_command(invoker, argv)
        return True

    def run_command(self, invoker: CommandInvoker, argv: List[str]) -> None:
        try:
            invoker.run_argv(argv)
        except KeelsonError as exc:
            OutputFormatter.log(str(exc), severity="error")

    def show_help(self, argv: List[str]) -> None:
        if not argv:
            OutputFormatter.print_commands(self.namespace.commands)
            return

        invoker = self.namespace.line_commands.get(argv[0])
        if invoker is None:
            OutputFormatter.log(f"Command '{argv[0]}' not found. Type 'help' for the list.", severity="error")
            return
        self.run_command(invoker, ["--help"])

    def run(self, banner: Optional[str] = None) -> None:
        """Hand the terminal to the console until the user sends EOF."""
        previous_hook = sys.displayhook
        sys.displayhook = self.display_hook
        try:
            self.interact(banner=banner, exitmsg="Exiting Keelson shell.")
        finally:
            sys.displayhook = previous_hook
