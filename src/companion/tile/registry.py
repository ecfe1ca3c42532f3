from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from companion.tile.base import BaseTile, SceneHost

_REGISTRY: dict[str, type[BaseTile]] = {}

def register_tile(cls: type[BaseTile]) -> type[BaseTile]:
    """Class decorator to register a tile variant by its TYPE_KEY."""
    key = getattr(cls, "TYPE_KEY", None)
    if not key:
        raise ValueError(f"{cls.__name__} must define TYPE_KEY")
    _REGISTRY[key] = cls
    return cls

def has_tile_type(key: str) -> bool:
    return key in _REGISTRY

def create_tile(key: str, host: Optional[SceneHost] = None) -> BaseTile:
    cls = _REGISTRY.get(key)
    if not cls:
        raise KeyError(f"No tile registered for key '{key}'")
    return cls.create(host)

def list_keys() -> list[str]:
    return list(_REGISTRY.keys())
