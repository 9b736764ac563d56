from typing import Mapping, Sequence

import click

from keelson.core.models import CommandDescriptor
from keelson.core.registry import Registry


def describe_command(name: str, command: click.Command, aliases: Sequence[str] = ()) -> CommandDescriptor:
    return CommandDescriptor(
        name=name,
        aliases=frozenset(aliases),
        definition=list(command.params),
        description=command.get_short_help_str(limit=80) or None,
        hidden=command.hidden,
    )


def build_command_registry(
    group: click.Group,
    aliases: Mapping[str, Sequence[str]],
) -> Registry[CommandDescriptor]:
    """
    Reflect a Click group into a command registry.

    ``aliases`` maps canonical command names to the alternate names they are
    also registered under in the group; those alternate entries become alias
    keys pointing at the canonical descriptor.
    """
    registry: Registry[CommandDescriptor] = Registry()
    alias_names = {alias for names in aliases.values() for alias in names}

    for name, command in group.commands.items():
        if name in alias_names:
            continue
        registry.register(describe_command(name, command, aliases.get(name, ())))

    for target, names in aliases.items():
        if target not in registry:
            continue
        for alias in names:
            registry.register_alias(alias, target)

    return registry
