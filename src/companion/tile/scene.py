"""
Tile Scene
==========
QGraphicsScene that only holds tiles, either the canvas root scene or the
private sub-scene of a nested tile.

The scene keeps its own insertion-ordered tile list, so iterating over tiles
never needs a downcast from QGraphicsItem and the JSON export order is stable
across save/load cycles.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, TYPE_CHECKING

from PySide6.QtCore import QRectF
from PySide6.QtWidgets import QGraphicsItem, QGraphicsScene

from companion.config import DEFAULT_SUB_SCENE_RECT
from companion.tile import registry
from companion.tile.base import is_number

if TYPE_CHECKING:
    from companion.tile.base import BaseTile, SceneHost

logger = logging.getLogger(__name__)

RECT_KEYS = ("x", "y", "width", "height")


def rect_to_json(rect: QRectF) -> Dict[str, float]:
    return {"x": rect.x(), "y": rect.y(), "width": rect.width(), "height": rect.height()}


def rect_from_json(obj: Any) -> Optional[QRectF]:
    """Returns None unless obj holds all four numeric rect fields."""
    if not isinstance(obj, dict) or not all(is_number(obj.get(k)) for k in RECT_KEYS):
        return None
    return QRectF(float(obj["x"]), float(obj["y"]), float(obj["width"]), float(obj["height"]))


class TileScene(QGraphicsScene):
    def __init__(self, rect: Optional[QRectF] = None, parent=None) -> None:
        super().__init__(rect if rect is not None else QRectF(*DEFAULT_SUB_SCENE_RECT), parent)
        self._tiles: List[BaseTile] = []
        # nested tile this scene belongs to, None for the canvas root scene
        self.owner: Optional[BaseTile] = None

    def tiles(self) -> List[BaseTile]:
        """Snapshot of the tiles, safe to iterate while tiles are added/removed."""
        return list(self._tiles)

    def walk_tiles(self) -> Iterator[BaseTile]:
        """Depth-first over this scene and every nested sub-scene."""
        for tile in self.tiles():
            yield tile
            sub = tile.sub_scene()
            if sub is not None:
                yield from sub.walk_tiles()

    def __len__(self) -> int:
        return len(self._tiles)

    def __contains__(self, tile: object) -> bool:
        return tile in self._tiles

    def add_tile(self, tile: BaseTile) -> None:
        current = tile.tile_scene()
        if current is self:
            return
        if current is not None:
            current.take_tile(tile)
        self._tiles.append(tile)
        self.addItem(tile)

    def take_tile(self, tile: BaseTile) -> bool:
        """Removes the tile without deleting it (used for reparenting)."""
        if tile not in self._tiles:
            return False
        self._tiles.remove(tile)
        self.removeItem(tile)
        return True

    def delete_tile(self, tile: BaseTile) -> bool:
        if tile not in self._tiles:
            return False
        tile.on_delete()
        return self.take_tile(tile)

    def clear_tiles(self) -> None:
        tiles = self.tiles()
        for tile in tiles:
            tile.on_delete()
        for tile in tiles:
            self.take_tile(tile)

    # ------------------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------------------

    def to_json_object(self) -> Dict[str, Any]:
        return {
            "scene_rect": rect_to_json(self.sceneRect()),
            "tiles": [tile.to_json_entry() for tile in self._tiles],
        }

    def set_from_json_object(self, obj: Dict[str, Any], host: Optional[SceneHost] = None) -> bool:
        """
        Rebuilds the scene from `{"scene_rect": {...}, "tiles": [{type, data}, ...]}`.

        All-or-nothing: children are built detached and only swapped in when
        every known entry loaded. Unknown type tags are skipped.
        """
        if not isinstance(obj, dict):
            return False
        scene_rect = rect_from_json(obj.get("scene_rect"))
        if scene_rect is None:
            logger.warning("Scene: missing or invalid 'scene_rect'.")
            return False
        entries = obj.get("tiles")
        if not isinstance(entries, list):
            logger.warning("Scene: missing or invalid 'tiles' list.")
            return False

        built: List[BaseTile] = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            key = entry.get("type")
            data = entry.get("data")
            if not isinstance(key, str) or not isinstance(data, dict):
                continue
            if not registry.has_tile_type(key):
                logger.debug(f"Scene: skipping unknown tile type '{key}'.")
                continue

            tile = registry.create_tile(key, host)
            tile.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsMovable, True)
            tile.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, True)
            tile.init()
            if not tile.set_from_json_object(data):
                logger.warning(f"FAILURE: Could not set tile data from JSON. data: {data}. Aborting.")
                tile.on_delete()
                for t in built:
                    t.on_delete()
                return False
            built.append(tile)

        self.setSceneRect(scene_rect)
        self.clear_tiles()
        for tile in built:
            self.add_tile(tile)
        return True
