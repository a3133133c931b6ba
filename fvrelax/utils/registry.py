"""Name-based registry for selecting implementations from configuration."""

from __future__ import annotations

from typing import Any, Callable, Dict, TypeVar

T = TypeVar("T")


class Registry:
    def __init__(self, name: str) -> None:
        self.name = name
        self._items: Dict[str, Callable[..., Any]] = {}

    def register(self, *keys: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
        """Register a factory under one or more case-insensitive names."""
        if not keys:
            raise ValueError(f"{self.name} registration requires at least one key")
        names = [key.lower() for key in keys]

        def decorator(factory: Callable[..., T]) -> Callable[..., T]:
            for norm in names:
                if norm in self._items:
                    raise ValueError(f"{self.name} registry already has key {norm}")
                self._items[norm] = factory
            return factory

        return decorator

    def get(self, key: str) -> Callable[..., Any]:
        try:
            return self._items[key.lower()]
        except KeyError as exc:
            known = ", ".join(sorted(self._items))
            raise KeyError(f"Unknown {self.name} '{key}' (known: {known})") from exc

    def create(self, key: str, *args: Any, **kwargs: Any) -> Any:
        factory = self.get(key)
        return factory(*args, **kwargs)

    def __contains__(self, key: str) -> bool:
        return key.lower() in self._items
