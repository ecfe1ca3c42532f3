from __future__ import annotations

import pytest

import companion.tile  # noqa: F401  (registers the tile variants)
from companion.tile import registry
from companion.tile.nested import NestedTile
from companion.tile.playlist import PlaylistTile


def test_variants_are_registered_under_stable_tags() -> None:
    assert registry.has_tile_type("Tile::PlaylistTile")
    assert registry.has_tile_type("Tile::NestedTile")
    assert set(registry.list_keys()) >= {"Tile::PlaylistTile", "Tile::NestedTile"}


def test_create_tile_binds_host(canvas) -> None:
    nested = registry.create_tile("Tile::NestedTile", canvas)
    assert isinstance(nested, NestedTile)
    assert nested.host() is canvas

    playlist = registry.create_tile("Tile::PlaylistTile", canvas)
    assert isinstance(playlist, PlaylistTile)
    assert playlist.get_sound_file_model() is canvas.get_sound_file_model()


def test_unknown_tag_raises_key_error() -> None:
    assert not registry.has_tile_type("UnknownWidget")
    with pytest.raises(KeyError):
        registry.create_tile("UnknownWidget")


def test_register_requires_type_key() -> None:
    class NoKey:
        TYPE_KEY = ""

    with pytest.raises(ValueError):
        registry.register_tile(NoKey)
