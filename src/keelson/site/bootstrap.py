from pathlib import Path
from typing import Any, Optional

import yaml

from keelson.cli.formatter import OutputFormatter
from keelson.config.loader import CONFIG_FILE_NAME, load_config
from keelson.core.context import KeelsonContext
from keelson.core.models import SessionContext, SiteRoot
from keelson.infrastructure.database import dispose_databases, initialize_databases
from keelson.utils.errors import KeelsonError


def find_site_root(start: Path) -> Optional[Path]:
    """
    Walk up from ``start`` to the nearest directory whose keelson.yaml
    declares a 'site' section.
    """
    start = start.expanduser().resolve()
    for candidate in (start, *start.parents):
        config_path = candidate / CONFIG_FILE_NAME
        if not config_path.is_file():
            continue
        if "site" in _read_config(config_path):
            return candidate
    return None


def _read_config(path: Path) -> dict:
    try:
        return load_config(path)
    except yaml.YAMLError as exc:
        raise KeelsonError(f"Invalid configuration in {path}: {exc}") from exc


def _build_context(path: Path, **overrides: Any) -> KeelsonContext:
    try:
        return KeelsonContext(config_dict=_read_config(path), **overrides)
    except ValueError as exc:
        raise KeelsonError(f"Invalid configuration in {path}: {exc}") from exc


def boot(
    root: Optional[Path] = None,
    alias: Optional[str] = None,
    verbose: bool = False,
    cwd: Optional[Path] = None,
) -> KeelsonContext:
    """
    Load configuration, resolve the targeted alias and locate the site.

    Raises KeelsonError (including SiteAliasNotFoundError) when the targeted
    site cannot be determined.
    """
    cwd = cwd or Path.cwd()
    start = root if root is not None else cwd

    # Aliases are read from the starting point's config before the site is known
    config_path = start / CONFIG_FILE_NAME
    if not config_path.is_file():
        config_path = cwd / CONFIG_FILE_NAME
    context = _build_context(config_path)

    if alias:
        record = context.aliases.resolve(alias)
        context.active_alias = alias
        if record.root is not None:
            start = record.root

    site_dir = find_site_root(start)
    if site_dir is not None:
        site_config_path = site_dir / CONFIG_FILE_NAME
        if site_config_path != config_path:
            overrides = {"active_alias": context.active_alias}
            if len(context.aliases):
                overrides["aliases"] = context.aliases
            context = _build_context(site_config_path, **overrides)
            config_path = site_config_path

        context.site = SiteRoot(
            path=site_dir,
            name=context.site_settings.name or site_dir.name,
            framework=context.site_settings.framework,
            version=context.site_settings.version,
        )

    context.config_path = config_path if config_path.is_file() else None
    if verbose:
        context.settings.verbose = True
    OutputFormatter.verbose = context.settings.verbose

    if context.databases:
        base_dir = context.site.path if context.site else cwd
        context.databases = initialize_databases(context.databases, base_dir=base_dir)

    if context.site:
        OutputFormatter.log(f"Site root: {context.site.path}", severity="debug")
    else:
        OutputFormatter.log("No site root found; running without a site.", severity="debug")

    return context


def build_session_context(
    context: KeelsonContext,
    use_version_history: bool = False,
    cwd: Optional[Path] = None,
) -> SessionContext:
    """Capture the facts the history file name is derived from."""
    site = context.site
    if site is None:
        root_path_or_version = ""
    elif use_version_history:
        root_path_or_version = site.version
    else:
        root_path_or_version = str(site.path)

    return SessionContext(
        has_root_environment=site is not None,
        use_version_history=use_version_history,
        active_alias_name=context.active_alias,
        root_path_or_version=root_path_or_version,
        working_directory=str(cwd or Path.cwd()),
    )


def terminate(context: KeelsonContext) -> None:
    """
    Release resources held by the bootstrap before the shell takes over the
    terminal. Engines stay usable and reconnect on demand.
    """
    dispose_databases(context.databases)
