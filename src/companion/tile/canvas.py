"""
Canvas
======
QGraphicsView hosting the tile scenes.

Why is this file needed?
------------------------
1. Navigation: It keeps a stack of (scene, name) pairs. Entering a nested
   tile pushes its sub-scene; "Back" pops it. The root scene is never popped.
2. Catalog access: Playlist tiles resolve their persisted sound file ids
   through the catalog the canvas hands out.
3. Persistence: It is the top-level JSON entry point (root scene + layouts).
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from PySide6.QtCore import QPointF, QRectF, Signal
from PySide6.QtGui import QPainter
from PySide6.QtWidgets import QGraphicsItem, QGraphicsView

from companion.model.catalog import SoundFileCatalog
from companion.tile.base import BaseTile
from companion.tile.nested import NestedTile
from companion.tile.playlist import PlaylistTile
from companion.tile.scene import TileScene

logger = logging.getLogger(__name__)

ROOT_SCENE_NAME = "Root"
ROOT_SCENE_RECT = QRectF(0.0, 0.0, 800.0, 600.0)


class Canvas(QGraphicsView):
    scene_stack_changed = Signal(list)
    layout_added = Signal(str)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setAcceptDrops(True)
        self.setDragMode(QGraphicsView.DragMode.RubberBandDrag)

        self._catalog: Optional[SoundFileCatalog] = None
        self._root = TileScene(QRectF(ROOT_SCENE_RECT), self)
        self._stack: List[Tuple[TileScene, str]] = [(self._root, ROOT_SCENE_NAME)]
        self._layouts: Dict[str, Dict[str, Any]] = {}
        self.setScene(self._root)

    # ------------------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------------------

    def set_sound_file_model(self, catalog: Optional[SoundFileCatalog]) -> None:
        """Sets the catalog and rebinds every playlist tile, nested ones included."""
        self._catalog = catalog
        for tile in self._root.walk_tiles():
            if isinstance(tile, PlaylistTile):
                tile.set_sound_file_model(catalog)

    def get_sound_file_model(self) -> Optional[SoundFileCatalog]:
        return self._catalog

    # ------------------------------------------------------------------------------
    # Scene stack
    # ------------------------------------------------------------------------------

    def root_scene(self) -> TileScene:
        return self._root

    def current_scene(self) -> TileScene:
        return self._stack[-1][0]

    def scene_names(self) -> List[str]:
        return [name for _, name in self._stack]

    def push_scene(self, scene: TileScene, name: str) -> None:
        self._stack.append((scene, name))
        self.setScene(scene)
        logger.debug(f"Entered scene '{name}' (depth {len(self._stack) - 1}).")
        self.scene_stack_changed.emit(self.scene_names())

    def pop_scene(self) -> bool:
        if len(self._stack) <= 1:
            return False
        _, name = self._stack.pop()
        self.setScene(self.current_scene())
        logger.debug(f"Left scene '{name}'.")
        self.scene_stack_changed.emit(self.scene_names())
        return True

    def pop_to_root(self) -> None:
        if len(self._stack) == 1:
            return
        del self._stack[1:]
        self.setScene(self._root)
        self.scene_stack_changed.emit(self.scene_names())

    # ------------------------------------------------------------------------------
    # Tiles
    # ------------------------------------------------------------------------------

    def add_playlist_tile(self, pos: Optional[QPointF] = None) -> PlaylistTile:
        tile = PlaylistTile.create(self)
        self._add_new_tile(tile, pos)
        return tile

    def add_nested_tile(self, pos: Optional[QPointF] = None, name: str = "") -> NestedTile:
        tile = NestedTile.create(self)
        tile.set_name(name)
        self._add_new_tile(tile, pos)
        return tile

    def _add_new_tile(self, tile: BaseTile, pos: Optional[QPointF]) -> None:
        tile.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsMovable, True)
        tile.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, True)
        tile.init()
        if pos is None:
            pos = self.mapToScene(self.viewport().rect().center()) - QPointF(tile.size / 2, tile.size / 2)
        tile.setPos(pos)
        self.current_scene().add_tile(tile)

    def selected_tiles(self) -> List[BaseTile]:
        """Selected tiles of the current scene, in scene order."""
        return [t for t in self.current_scene().tiles() if t.isSelected()]

    def group_selected_tiles(self, name: str = "") -> Optional[NestedTile]:
        """Moves the selected tiles into a new nested tile placed where they were."""
        tiles = self.selected_tiles()
        if not tiles:
            return None
        area = QRectF()
        for t in tiles:
            area = area.united(t.sceneBoundingRect())
        group = self.add_nested_tile(area.topLeft(), name)
        group.add_tiles(tiles)
        logger.info(f"Grouped {len(tiles)} tiles into '{name}'.")
        return group

    def clear(self) -> None:
        self.pop_to_root()
        self._root.clear_tiles()
        self._layouts.clear()

    # ------------------------------------------------------------------------------
    # Layouts
    # ------------------------------------------------------------------------------

    def store_as_layout(self, name: str) -> None:
        """Stores the current root scene under `name`, replacing an existing layout."""
        self._layouts[name] = self._root.to_json_object()
        logger.info(f"Stored layout '{name}'.")
        self.layout_added.emit(name)

    def has_layout(self, name: str) -> bool:
        return name in self._layouts

    def layout_names(self) -> List[str]:
        return sorted(self._layouts)

    def load_layout(self, name: str) -> bool:
        layout = self._layouts.get(name)
        if layout is None:
            return False
        self.pop_to_root()
        if not self._root.set_from_json_object(copy.deepcopy(layout), self):
            logger.error(f"Layout '{name}' could not be loaded.")
            return False
        logger.info(f"Loaded layout '{name}'.")
        return True

    # ------------------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------------------

    def to_json_object(self) -> Dict[str, Any]:
        return {
            "scene": self._root.to_json_object(),
            "layouts": copy.deepcopy(self._layouts),
        }

    def set_from_json_object(self, obj: Dict[str, Any], catalog: Optional[SoundFileCatalog] = None) -> bool:
        """
        Replaces the root scene and the layouts. Nothing changes on failure.

        Args:
            obj: Document produced by `to_json_object`.
            catalog: Catalog to resolve playlist ids against, and to keep on
                success. Defaults to the current one.
        """
        if not isinstance(obj, dict) or not isinstance(obj.get("scene"), dict):
            logger.warning("Canvas: missing or invalid 'scene'.")
            return False
        layouts = obj.get("layouts", {})
        if not isinstance(layouts, dict) or not all(isinstance(v, dict) for v in layouts.values()):
            logger.warning("Canvas: invalid 'layouts'.")
            return False

        previous = self._catalog
        if catalog is not None:
            self._catalog = catalog
        if not self._root.set_from_json_object(obj["scene"], self):
            self._catalog = previous
            return False
        self.pop_to_root()
        self._layouts = copy.deepcopy(layouts)
        return True
