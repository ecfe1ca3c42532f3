"""
Tile scene graph: tiles, scenes and the canvas hosting them.

Importing the package registers every tile variant with the registry.
"""
from companion.tile.base import BaseTile, TileMode
from companion.tile.nested import NestedTile
from companion.tile.playlist import PlaylistTile
from companion.tile.scene import TileScene

__all__ = ["BaseTile", "TileMode", "NestedTile", "PlaylistTile", "TileScene"]
