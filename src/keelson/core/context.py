from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict
from keelson.core.models import AppConfig, KeelsonSettings, SiteRoot, SiteSettings
from keelson.site.aliases import SiteAliasRegistry


class KeelsonContext(BaseModel):
    """
    Everything a command needs about the targeted site, built once per process
    by the bootstrap and shared with commands run from inside the shell.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    # Framework Settings (Maps to 'keelson' section)
    settings: KeelsonSettings = Field(default_factory=KeelsonSettings)

    # Site identity (Maps to 'site' section)
    site_settings: SiteSettings = Field(default_factory=SiteSettings)

    # Site Config (Maps to 'config' section)
    config: AppConfig = Field(default_factory=AppConfig)

    # Alias lookup (Maps to 'aliases' section)
    aliases: SiteAliasRegistry = Field(default_factory=SiteAliasRegistry)

    # Database engines hydrated from the 'databases' section
    databases: Dict[str, Any] = Field(default_factory=dict)

    # Located site root, None when running outside a site
    site: Optional[SiteRoot] = None

    # Alias the user targeted with --alias, as typed
    active_alias: Optional[str] = None

    config_path: Optional[Path] = None

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None, **data: Any):
        """
        Initialize the context, optionally with a configuration dictionary.
        """
        if config_dict:
            if 'settings' not in data:
                data['settings'] = KeelsonSettings(**(config_dict.get('keelson') or {}))
            if 'site_settings' not in data:
                data['site_settings'] = SiteSettings(**(config_dict.get('site') or {}))
            if 'config' not in data:
                data['config'] = AppConfig(**(config_dict.get('config') or {}))
            if 'aliases' not in data:
                data['aliases'] = SiteAliasRegistry.from_config(config_dict.get('aliases'))
            if 'databases' not in data:
                data['databases'] = config_dict.get('databases') or {}

        super().__init__(**data)

    @property
    def tool_name(self) -> str:
        return self.site.framework if self.site else self.site_settings.framework

    def get_config_value(self, key: str) -> Any:
        """Look up a dotted key such as ``mail.sender`` in the config section."""
        value: Any = self.config.model_dump()
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                raise KeyError(key)
            value = value[part]
        return value
