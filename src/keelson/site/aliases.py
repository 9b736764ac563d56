from typing import Any, Dict, Iterator, Optional

from keelson.core.models import SiteAlias
from keelson.core.registry import Registry
from keelson.utils.errors import SiteAliasNotFoundError


class SiteAliasRegistry:
    """
    Lookup of configured site aliases by canonical or alternate name.

    Names may be given with or without the leading ``@``.
    """

    def __init__(self):
        self._registry: Registry[SiteAlias] = Registry()

    @classmethod
    def from_config(cls, section: Optional[Dict[str, Any]]) -> "SiteAliasRegistry":
        """
        Build the registry from the 'aliases' section of keelson.yaml:

            aliases:
              prodserver:
                root: /var/www/site
                host: prod.example.com
                aliases: [prod]
        """
        registry = cls()
        for name, record in (section or {}).items():
            data = dict(record or {})
            data["name"] = str(name).lstrip("@")
            registry.add(SiteAlias(**data))
        return registry

    def add(self, record: SiteAlias) -> None:
        self._registry.register(record)
        for alternate in record.aliases:
            self._registry.register_alias(alternate.lstrip("@"), record.name)

    def resolve(self, alias: str) -> SiteAlias:
        """Return the canonical record for ``alias``."""
        key = alias.lstrip("@")
        record = self._registry.find(key)
        if record is None:
            raise SiteAliasNotFoundError(alias)
        return record

    def __contains__(self, alias: str) -> bool:
        return alias.lstrip("@") in self._registry

    def __len__(self) -> int:
        return len(self._registry)

    def __iter__(self) -> Iterator[SiteAlias]:
        return iter(self._registry)
