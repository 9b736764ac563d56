import hashlib
import keyword
import re
from typing import FrozenSet

# Words that cannot be bound as callables in the shell namespace. Soft keywords
# are included because a line such as ``match x`` is ambiguous at the prompt.
RESERVED_WORDS: FrozenSet[str] = frozenset(keyword.kwlist) | frozenset(keyword.softkwlist)

# Commands that are never exposed inside the shell.
IGNORED_COMMANDS: FrozenSet[str] = frozenset({
    "help",
    "shell",
    "repl",
    "eval",
})

_NON_IDENTIFIER_CHARS = re.compile(r"\W")


def to_identifier(name: str) -> str:
    """Fold a command name such as ``cache-clear`` into a bindable identifier."""
    identifier = _NON_IDENTIFIER_CHARS.sub("_", name)
    if identifier[:1].isdigit():
        identifier = f"_{identifier}"
    return identifier


def path_digest(value: str) -> str:
    """Stable content digest used to name history files after paths."""
    return hashlib.md5(value.encode("utf-8"), usedforsecurity=False).hexdigest()
