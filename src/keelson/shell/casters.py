"""Presentation of common Keelson objects at the shell prompt."""

import builtins
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel
from rich.console import Console
from rich.pretty import pprint
from sqlalchemy import Engine

from keelson.core.context import KeelsonContext
from keelson.site.aliases import SiteAliasRegistry

Caster = Callable[[Any], Any]


def cast_model(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json")


def cast_engine(engine: Engine) -> Dict[str, Any]:
    return {
        "url": engine.url.render_as_string(hide_password=True),
        "database": engine.url.database,
        "dialect": engine.dialect.name,
        "pool": engine.pool.status(),
    }


def cast_aliases(aliases: SiteAliasRegistry) -> Dict[str, Any]:
    return {f"@{alias.name}": cast_model(alias) for alias in aliases}


def cast_context(context: KeelsonContext) -> Dict[str, Any]:
    return {
        "site": cast_model(context.site) if context.site else None,
        "alias": context.active_alias,
        "config_path": str(context.config_path) if context.config_path else None,
        "databases": {name: cast_engine(engine) for name, engine in context.databases.items() if isinstance(engine, Engine)},
        "aliases": sorted(f"@{alias.name}" for alias in context.aliases),
    }


DEFAULT_CASTERS: Dict[type, Caster] = {
    KeelsonContext: cast_context,
    SiteAliasRegistry: cast_aliases,
    Engine: cast_engine,
    BaseModel: cast_model,
}


def cast_value(value: Any, casters: Dict[type, Caster]) -> Any:
    """Apply the caster registered for the most specific class of ``value``."""
    for klass in type(value).__mro__:
        caster = casters.get(klass)
        if caster is not None:
            return caster(value)
    return value


def make_display_hook(casters: Optional[Dict[type, Caster]] = None, console: Optional[Console] = None) -> Callable[[Any], None]:
    casters = DEFAULT_CASTERS if casters is None else casters

    def display_hook(value: Any) -> None:
        if value is None:
            return
        # Same contract as sys.__displayhook__: _ is unset while printing
        builtins._ = None
        pprint(cast_value(value, casters), console=console, expand_all=False)
        builtins._ = value

    return display_hook
