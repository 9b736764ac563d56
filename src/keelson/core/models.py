from pathlib import Path
from typing import Any, FrozenSet, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_cache_dir() -> Path:
    return Path.home() / ".keelson" / "cache"


class KeelsonSettings(BaseSettings):
    """
    Framework-level settings (the 'keelson' section in keelson.yaml).
    """
    model_config = SettingsConfigDict(env_prefix='KEELSON_', extra='ignore')

    verbose: bool = False
    cache_dir: Path = Field(default_factory=_default_cache_dir)

    @field_validator("cache_dir")
    @classmethod
    def _expand_cache_dir(cls, value: Path) -> Path:
        return value.expanduser()


class SiteSettings(BaseModel):
    """
    Site identity (the 'site' section in keelson.yaml).
    """
    model_config = ConfigDict(extra='ignore')

    name: Optional[str] = None
    framework: str = "site"
    version: str = "1"


class AppConfig(BaseModel):
    """
    User-defined site configuration (the 'config' section in keelson.yaml).
    """
    model_config = ConfigDict(extra='allow')


class SiteRoot(BaseModel):
    """A located site: its root directory plus the identity read from its config."""
    model_config = ConfigDict(frozen=True)

    path: Path
    name: str
    framework: str = "site"
    version: str = "1"


class SiteAlias(BaseModel):
    """
    A named pointer to a site, local or remote.
    """
    model_config = ConfigDict(extra='ignore')

    name: str = Field(..., pattern=r'^[A-Za-z0-9][A-Za-z0-9_.-]*$')
    root: Optional[Path] = None
    host: Optional[str] = None
    uri: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)


class CommandDescriptor(BaseModel):
    """
    Read-only view of one host command as found in the command registry.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    aliases: FrozenSet[str] = frozenset()
    definition: Optional[Any] = None
    description: Optional[str] = None
    hidden: bool = False


class SessionContext(BaseModel):
    """
    Ambient session facts used to pick a history file. Built once per process.

    ``root_path_or_version`` holds the site version when version history is
    requested, otherwise the resolved site root path.
    """
    model_config = ConfigDict(frozen=True)

    has_root_environment: bool
    use_version_history: bool = False
    active_alias_name: Optional[str] = None
    root_path_or_version: str = ""
    working_directory: str
