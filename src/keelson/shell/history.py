from pathlib import Path
from typing import Optional, Union

from keelson.cli.formatter import OutputFormatter
from keelson.core.models import SessionContext
from keelson.core.naming import path_digest
from keelson.site.aliases import SiteAliasRegistry

DEFAULT_TOOL_NAME = "site"


def history_identity(
    ctx: SessionContext,
    aliases: Optional[SiteAliasRegistry] = None,
    tool_name: str = DEFAULT_TOOL_NAME,
) -> str:
    """
    Pick the history file name for a session. First match wins:

    - no site root: ``global-<digest of working directory>``
    - version history requested: ``<tool>-<version>``
    - targeting an alias: ``<tool>-site-<canonical alias name>``
    - otherwise: ``<tool>-site-<digest of site root>``
    """
    if not ctx.has_root_environment:
        return f"global-{path_digest(ctx.working_directory)}"

    if ctx.use_version_history:
        return f"{tool_name}-{ctx.root_path_or_version}"

    if ctx.active_alias_name:
        registry = aliases if aliases is not None else SiteAliasRegistry()
        record = registry.resolve(ctx.active_alias_name)
        return f"{tool_name}-site-{record.name}"

    return f"{tool_name}-site-{path_digest(ctx.root_path_or_version)}"


def resolve_history_path(
    cache_dir: Union[str, Path],
    ctx: SessionContext,
    *,
    aliases: Optional[SiteAliasRegistry] = None,
    tool_name: str = DEFAULT_TOOL_NAME,
    verbose: bool = False,
) -> str:
    """Return ``<cache_dir>/<identity>`` for the shell's history file."""
    full_path = (Path(cache_dir) / history_identity(ctx, aliases=aliases, tool_name=tool_name)).as_posix()

    if verbose:
        OutputFormatter.log(f"History: {full_path}", severity="success")

    return full_path
