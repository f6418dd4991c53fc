"""Name-keyed registries for strategies chosen once from a case dictionary."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, TypeVar

T = TypeVar("T")


class Registry:
    """Case-insensitive factory table; one factory may answer to several names."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._items: Dict[str, Callable[..., Any]] = {}
        self._canonical: Dict[str, str] = {}

    def register(self, key: str, *aliases: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
        names = [key.lower(), *(alias.lower() for alias in aliases)]

        def decorator(factory: Callable[..., T]) -> Callable[..., T]:
            for norm in names:
                if norm in self._items:
                    raise ValueError(f"{self.name} registry already has key {norm}")
            for norm in names:
                self._items[norm] = factory
                self._canonical[norm] = key
            return factory

        return decorator

    def get(self, key: str) -> Callable[..., Any]:
        try:
            return self._items[key.lower()]
        except KeyError as exc:
            known = ", ".join(self.keys()) or "<none>"
            raise KeyError(f"Unknown {self.name} '{key}' (known: {known})") from exc

    def create(self, key: str, *args: Any, **kwargs: Any) -> Any:
        return self.get(key)(*args, **kwargs)

    def __contains__(self, key: str) -> bool:
        return key.lower() in self._items

    def keys(self) -> List[str]:
        return sorted({self._canonical[norm].lower() for norm in self._items})
