from typing import Dict, Iterator, Optional, Tuple, TypeVar, Generic, Protocol

class HasName(Protocol):
    name: str

T = TypeVar("T", bound=HasName)

class Registry(Generic[T]):
    """
    A generic lookup table for objects with a name attribute.

    Canonical items live under their own name; alias entries live under the
    alias key and point at the canonical item, so enumerating ``entries()``
    yields every lookup key in registration order.
    """
    def __init__(self):
        self._entries: Dict[str, T] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, item: T) -> None:
        """
        Register an item. Raises ValueError if name already exists.
        """
        if item.name in self._aliases:
            raise ValueError(f"Item name '{item.name}' conflicts with an existing alias.")

        if item.name in self._entries:
            raise ValueError(f"Item with name '{item.name}' is already registered.")

        self._entries[item.name] = item

    def register_alias(self, alias: str, target: str) -> None:
        """
        Register an alias key that resolves to an existing canonical item.
        """
        if target in self._aliases:
            raise ValueError("Alias chains are not supported.")

        if target not in self._entries:
            raise ValueError(f"Alias target '{target}' does not exist.")

        if alias == target:
            raise ValueError("Alias and target cannot be the same.")

        if alias in self._aliases:
            raise ValueError(f"Alias '{alias}' is already registered.")

        if alias in self._entries:
            raise ValueError(f"Alias '{alias}' cannot shadow an existing canonical name.")

        self._aliases[alias] = target
        self._entries[alias] = self._entries[target]

    def get(self, name: str) -> T:
        """
        Retrieve an item by name or alias. Raises KeyError if not found.
        """
        if name not in self._entries:
            raise KeyError(f"'{name}' not found in registry.")
        return self._entries[name]

    def find(self, name: str) -> Optional[T]:
        return self._entries.get(name)

    def entries(self) -> Iterator[Tuple[str, T]]:
        """Yield ``(lookup_key, item)`` for canonical and alias keys alike."""
        return iter(list(self._entries.items()))

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries) - len(self._aliases)

    def __iter__(self) -> Iterator[T]:
        return (item for key, item in self._entries.items() if key not in self._aliases)
