"""
Nested Tile
===========
A tile that is itself a container of tiles.

Why is this file needed?
------------------------
1. Drill-down: Clicking "Contents..." (or hovering a drag over the tile for
   ENTER_DWELL_MS) asks the hosting canvas to show the tile's sub-scene.
2. Persistence: The sub-scene is exported inside the tile's own JSON object
   and rebuilt recursively on import, so nesting depth is unlimited.
3. Activation: Activating the tile activates every child first.

JSON layout (on top of the BaseTile fields):
    {"contents": {"scene": {"scene_rect": {x, y, width, height},
                            "tiles": [{"type": ..., "data": ...}, ...]}}}
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterable, Optional, TYPE_CHECKING

from PySide6.QtCore import QPointF, QRectF, QTimer
from PySide6.QtGui import QAction, QBrush, QColor, QPainter, QPainterPath, QPen
from PySide6.QtWidgets import QInputDialog, QLineEdit

from companion.config import DEFAULT_SUB_SCENE_RECT, DWELL_TICK_MS, ENTER_DWELL_MS
from companion.tile.base import BaseTile, SceneHost, paint_play_state
from companion.tile.dwell import DwellState, NO_PROGRESS
from companion.tile.registry import register_tile
from companion.tile.scene import TileScene

if TYPE_CHECKING:
    from PySide6.QtCore import QMimeData

logger = logging.getLogger(__name__)


def paint_folder(painter: QPainter, rect: QRectF) -> None:
    w, h = rect.width(), rect.height()
    body = QRectF(rect.x() + 0.1 * w, rect.y() + 0.3 * h, 0.8 * w, 0.55 * h)
    tab = QPainterPath()
    tab.moveTo(body.left(), body.top())
    tab.lineTo(body.left(), body.top() - 0.1 * h)
    tab.lineTo(body.left() + 0.3 * w, body.top() - 0.1 * h)
    tab.lineTo(body.left() + 0.38 * w, body.top())
    tab.closeSubpath()

    painter.save()
    painter.setPen(QPen(QColor(150, 110, 20)))
    painter.setBrush(QBrush(QColor(230, 180, 60)))
    painter.drawPath(tab)
    painter.drawRect(body)
    painter.restore()


@register_tile
class NestedTile(BaseTile):
    TYPE_KEY = "Tile::NestedTile"

    def __init__(
        self,
        host: Optional[SceneHost] = None,
        parent=None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(parent)
        self._host = host
        self._clock = clock
        self._progress: float = NO_PROGRESS

        self._scene = TileScene(QRectF(*DEFAULT_SUB_SCENE_RECT), self)
        self._scene.owner = self

        # single wake-up driving the dwell; runs only while dwelling
        self._dwell = DwellState(duration_ms=ENTER_DWELL_MS)
        self._dwell_timer = QTimer(self)
        self._dwell_timer.setInterval(DWELL_TICK_MS)
        self._dwell_timer.timeout.connect(self._on_dwell_tick)

    @classmethod
    def create(cls, host: Optional[SceneHost] = None) -> NestedTile:
        return cls(host)

    def sub_scene(self) -> TileScene:
        return self._scene

    def host(self) -> Optional[SceneHost]:
        return self._host

    # ------------------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------------------

    def add_tiles(self, tiles: Iterable[BaseTile]) -> None:
        """
        Moves tiles into the sub-scene, laid out in rows below its current
        content. The tile itself, its ancestors and tiles already inside are
        skipped. The sub-scene rect grows to fit.
        """
        blocked = [self] + self.ancestors()
        moved = [t for t in tiles if t not in self._scene and not any(t is b for b in blocked)]
        if not moved:
            return

        rect = self._scene.sceneRect()
        x = rect.left()
        y = self._scene.itemsBoundingRect().bottom() if len(self._scene) else rect.top()
        row_height = 0.0
        for t in moved:
            if x > rect.left() and x + t.size > rect.right():
                x = rect.left()
                y += row_height
                row_height = 0.0
            t.setSelected(False)
            t.setPos(x, y)
            self._scene.add_tile(t)
            x += t.size
            row_height = max(row_height, t.size)
        self._scene.setSceneRect(rect.united(self._scene.itemsBoundingRect()))
        logger.debug(f"Moved {len(moved)} tiles into '{self.name}'.")

    def on_move_selected_here(self) -> None:
        """Moves the other selected tiles of this tile's scene into the sub-scene."""
        scene = self.tile_scene()
        if scene is not None:
            self.add_tiles(t for t in scene.tiles() if t.isSelected())

    def clear_tiles(self) -> None:
        self._scene.clear_tiles()

    def on_activate(self) -> None:
        for t in self._scene.tiles():
            t.on_activate()
        super().on_activate()

    def release_resources(self) -> None:
        self.cancel_dwell()
        self.clear_tiles()

    # ------------------------------------------------------------------------------
    # Dwell / enter contents
    # ------------------------------------------------------------------------------

    @property
    def progress(self) -> float:
        return self._progress

    def set_progress(self, value: float) -> None:
        self._progress = value
        self.update()

    @property
    def is_dwelling(self) -> bool:
        return self._dwell.is_dwelling

    def is_dwell_timer_active(self) -> bool:
        return self._dwell_timer.isActive()

    def begin_dwell(self) -> None:
        now = self._clock()
        self._dwell.start(now)
        self._dwell_timer.start()
        self.set_progress(self._dwell.progress(now))

    def cancel_dwell(self) -> None:
        self._dwell_timer.stop()
        self._dwell.cancel()
        if self._progress != NO_PROGRESS:
            self.set_progress(NO_PROGRESS)

    def _on_dwell_tick(self) -> None:
        if not self._dwell.is_dwelling:
            self._dwell_timer.stop()
            return
        now = self._clock()
        if self._dwell.expired(now):
            self.on_contents()
        else:
            self.set_progress(self._dwell.progress(now))

    def on_contents(self) -> None:
        """Shows the sub-scene in the hosting canvas."""
        if self._host is None:
            logger.warning(f"Nested tile '{self.name}' has no host, cannot enter contents.")
        else:
            self._host.push_scene(self._scene, self.name)
        self.cancel_dwell()

    def on_configure(self) -> None:
        text, ok = QInputDialog.getText(
            None, self.tr("Set Name"), self.tr("Name:"), QLineEdit.EchoMode.Normal, self.name
        )
        if ok and text:
            self.set_name(text)

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def dragEnterEvent(self, event) -> None:
        super().dragEnterEvent(event)
        self.begin_dwell()

    def dragLeaveEvent(self, event) -> None:
        super().dragLeaveEvent(event)
        self.cancel_dwell()

    def receive_external_data(self, mime: QMimeData) -> None:
        self.cancel_dwell()

    def create_context_menu(self) -> None:
        contents_action = QAction(self.tr("Contents..."), self)
        contents_action.triggered.connect(self.on_contents)

        configure_action = QAction(self.tr("Configure..."), self)
        configure_action.triggered.connect(self.on_configure)

        move_here_action = QAction(self.tr("Move Selected Tiles Here"), self)
        move_here_action.triggered.connect(self.on_move_selected_here)

        self.context_menu.addAction(contents_action)
        self.context_menu.addAction(configure_action)
        self.context_menu.addAction(move_here_action)
        self.context_menu.addSeparator()

        super().create_context_menu()

    def paint(self, painter: QPainter, option, widget=None) -> None:
        super().paint(painter, option, widget)

        p_rect = self.get_paint_rect()
        if p_rect.width() > 0 and p_rect.height() > 0:
            paint_folder(painter, p_rect)
            paint_play_state(painter, p_rect, self.is_activated)

        if 0.0 < self._progress < 100.0:
            painter.fillRect(self.progress_rect(), QBrush(QColor(0, 255, 0, 120)))

    def progress_rect(self) -> QRectF:
        """Dwell indicator, grown symmetrically from the paint rect center."""
        p_rect = self.get_paint_rect()
        f = max(self._progress, 0.0) / 100.0
        c = p_rect.center()
        half_w = p_rect.width() / 2.0 * f
        half_h = p_rect.height() / 2.0 * f
        return QRectF(QPointF(c.x() - half_w, c.y() - half_h), QPointF(c.x() + half_w, c.y() + half_h))

    # ------------------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------------------

    def to_json_object(self) -> Dict[str, Any]:
        obj = super().to_json_object()
        obj["contents"] = {"scene": self._scene.to_json_object()}
        return obj

    def set_from_json_object(self, obj: Dict[str, Any]) -> bool:
        if not self.validate_json_object(obj):
            return False

        contents = obj.get("contents")
        if not isinstance(contents, dict) or not isinstance(contents.get("scene"), dict):
            logger.warning(f"{self.TYPE_KEY}: missing or invalid 'contents.scene'.")
            return False

        if not self._scene.set_from_json_object(contents["scene"], self._host):
            return False

        return super().set_from_json_object(obj)
