from typing import AbstractSet, Iterable, List, Tuple, Union

from keelson.core.models import CommandDescriptor
from keelson.core.naming import IGNORED_COMMANDS, RESERVED_WORDS
from keelson.core.registry import Registry

CommandEntries = Union[Registry[CommandDescriptor], Iterable[Tuple[str, CommandDescriptor]]]


def filter_commands(
    entries: CommandEntries,
    ignored: AbstractSet[str] = IGNORED_COMMANDS,
    reserved: AbstractSet[str] = RESERVED_WORDS,
) -> List[CommandDescriptor]:
    """
    Select the host commands that can be exposed inside the shell.

    A command is dropped when its name is ignored, is a reserved word, or
    differs from the key it is stored under (the entry is an alias of some
    other command). Survivors keep their name but lose any alias that is a
    reserved word. The registry itself is left untouched: survivors are
    returned as new descriptors, in enumeration order.
    """
    if isinstance(entries, Registry):
        entries = entries.entries()

    exposed: List[CommandDescriptor] = []
    for key, command in entries:
        name = command.name
        if name in ignored or name in reserved or name != key:
            continue

        aliases = frozenset(command.aliases) - reserved
        exposed.append(command.model_copy(update={"aliases": aliases}))

    return exposed
