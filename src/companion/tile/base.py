"""
Base Tile
=========
Common node of the canvas scene graph.

Why is this file needed?
------------------------
1. Contract: Every tile variant (playlist, nested, ...) shares identity,
   geometry, activation state and the JSON round-trip of those fields.
2. Interaction: Click-to-activate, the move mode and the shared part of the
   right-click menu live here, so variants only add what is specific to them.

Classes:
    TileMode: Interaction mode of a tile.
    SceneHost: What a tile needs from the view hosting it.
    BaseTile: Abstract QGraphicsObject all tiles derive from.
"""
from __future__ import annotations

from enum import Enum
import logging
from typing import Any, Dict, List, Optional, Protocol, TYPE_CHECKING

from PySide6.QtCore import Qt, QRectF, QPointF, QTimer, Signal
from PySide6.QtGui import QAction, QBrush, QColor, QPainter, QPainterPath, QPen, QPolygonF
from PySide6.QtWidgets import QApplication, QGraphicsItem, QGraphicsObject, QMenu

from companion.config import DEFAULT_TILE_SIZE, TILE_PAINT_MARGIN

if TYPE_CHECKING:
    from PySide6.QtCore import QMimeData
    from companion.model.catalog import SoundFileCatalog
    from companion.tile.scene import TileScene

logger = logging.getLogger(__name__)


class TileMode(Enum):
    DEFAULT = "default"
    MOVE = "move"


class SceneHost(Protocol):
    def push_scene(self, scene: TileScene, name: str) -> None: ...
    def get_sound_file_model(self) -> Optional[SoundFileCatalog]: ...


def is_number(value: Any) -> bool:
    """JSON number check (bool is an int subclass in Python, but not a JSON number)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def paint_play_state(painter: QPainter, rect: QRectF, activated: bool) -> None:
    """Play triangle when stopped, stop square when playing."""
    side = min(rect.width(), rect.height()) * 0.35
    center = rect.center()
    painter.save()
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QBrush(QColor(255, 255, 255, 220)))
    if activated:
        painter.drawRect(QRectF(center.x() - side / 2, center.y() - side / 2, side, side))
    else:
        painter.drawPolygon(QPolygonF([
            QPointF(center.x() - side / 2, center.y() - side / 2),
            QPointF(center.x() + side / 2, center.y()),
            QPointF(center.x() - side / 2, center.y() + side / 2),
        ]))
    painter.restore()


class BaseTile(QGraphicsObject):
    """
    Abstract tile. Subclasses define TYPE_KEY, register themselves with
    `companion.tile.registry.register_tile` and extend the JSON object.
    """
    TYPE_KEY: str = ""

    activated_changed = Signal(bool)
    name_changed = Signal(str)

    def __init__(self, parent: Optional[QGraphicsItem] = None) -> None:
        super().__init__(parent)
        self.name: str = ""
        self.mode: TileMode = TileMode.DEFAULT
        self.is_activated: bool = False
        self.size: float = DEFAULT_TILE_SIZE

        self.context_menu: Optional[QMenu] = None
        self._deleted: bool = False

    @classmethod
    def create(cls, host: Optional[SceneHost] = None) -> BaseTile:
        """Factory used by the registry when rebuilding tiles from JSON."""
        return cls()

    def init(self) -> None:
        """One-time setup after construction, before any JSON is applied."""
        self.setAcceptDrops(True)
        self.setAcceptHoverEvents(True)
        self.context_menu = QMenu()
        self.create_context_menu()

    # ------------------------------------------------------------------------------
    # Geometry / painting
    # ------------------------------------------------------------------------------

    def boundingRect(self) -> QRectF:
        return QRectF(0.0, 0.0, self.size, self.size)

    def shape(self) -> QPainterPath:
        path = QPainterPath()
        path.addRect(self.boundingRect())
        return path

    def get_paint_rect(self) -> QRectF:
        m = TILE_PAINT_MARGIN
        return self.boundingRect().adjusted(m, m, -m, -m)

    def paint(self, painter: QPainter, option, widget=None) -> None:
        rect = self.boundingRect().adjusted(1, 1, -1, -1)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        border = QColor(255, 170, 0) if self.mode is TileMode.MOVE else QColor(40, 40, 40)
        painter.setPen(QPen(border, 2 if self.mode is TileMode.MOVE else 1))
        painter.setBrush(QBrush(QColor(90, 90, 90) if self.is_activated else QColor(60, 60, 60)))
        painter.drawRoundedRect(rect, 6, 6)

        if self.name:
            painter.setPen(QPen(QColor(230, 230, 230)))
            painter.drawText(
                QRectF(rect.x(), rect.bottom() - TILE_PAINT_MARGIN - 2, rect.width(), TILE_PAINT_MARGIN + 2),
                Qt.AlignmentFlag.AlignCenter,
                self.name,
            )

    # ------------------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------------------

    @property
    def is_deleted(self) -> bool:
        return self._deleted

    def set_name(self, name: str) -> None:
        if name == self.name:
            return
        self.name = name
        self.update()
        self.name_changed.emit(name)

    def set_mode(self, mode: TileMode) -> None:
        self.mode = mode
        self.update()

    def set_size(self, size: float) -> None:
        self.prepareGeometryChange()
        self.size = size

    def on_activate(self) -> None:
        self.is_activated = not self.is_activated
        self.update()
        self.activated_changed.emit(self.is_activated)

    def on_delete(self) -> None:
        """Releases timers/animations before the tile leaves its scene."""
        if self._deleted:
            return
        self._deleted = True
        self.release_resources()

    def release_resources(self) -> None:
        """Hook for subclasses owning transient resources."""

    def request_delete(self) -> None:
        """Deletes the tile through its scene once the current event is handled."""
        scene = self.tile_scene()
        if scene is not None:
            QTimer.singleShot(0, lambda: scene.delete_tile(self))

    def tile_scene(self) -> Optional[TileScene]:
        from companion.tile.scene import TileScene

        scene = self.scene()
        return scene if isinstance(scene, TileScene) else None

    def sub_scene(self) -> Optional[TileScene]:
        """Scene holding child tiles, None for leaf tiles."""
        return None

    def ancestors(self) -> List[BaseTile]:
        """Tiles owning the scenes this tile is nested in, innermost first."""
        result: List[BaseTile] = []
        scene = self.tile_scene()
        while scene is not None and scene.owner is not None and scene.owner not in result:
            result.append(scene.owner)
            scene = scene.owner.tile_scene()
        return result

    # ------------------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------------------

    def to_json_object(self) -> Dict[str, Any]:
        pos = self.pos()
        return {
            "name": self.name,
            "size": self.size,
            "position": {"x": pos.x(), "y": pos.y()},
        }

    def to_json_entry(self) -> Dict[str, Any]:
        """Self-describing record as stored in a scene's tile list."""
        return {"type": self.TYPE_KEY, "data": self.to_json_object()}

    def validate_json_object(self, obj: Any) -> bool:
        """Checks the shared fields without touching the tile."""
        if not isinstance(obj, dict):
            logger.warning(f"{self.TYPE_KEY}: tile data is not an object.")
            return False

        size = obj.get("size")
        position = obj.get("position")
        if not isinstance(obj.get("name"), str):
            logger.warning(f"{self.TYPE_KEY}: missing or invalid 'name'.")
            return False
        if not is_number(size) or size <= 0:
            logger.warning(f"{self.TYPE_KEY}: missing or invalid 'size'.")
            return False
        if not (isinstance(position, dict) and is_number(position.get("x")) and is_number(position.get("y"))):
            logger.warning(f"{self.TYPE_KEY}: missing or invalid 'position'.")
            return False
        return True

    def set_from_json_object(self, obj: Dict[str, Any]) -> bool:
        if not self.validate_json_object(obj):
            return False

        position = obj["position"]
        self.set_name(obj["name"])
        self.set_size(float(obj["size"]))
        self.setPos(float(position["x"]), float(position["y"]))
        return True

    # ------------------------------------------------------------------------------
    # Context menu
    # ------------------------------------------------------------------------------

    def create_context_menu(self) -> None:
        """Appends the shared actions. Subclasses add theirs first, then call this."""
        move_action = QAction(self.tr("Move"), self)
        move_action.setCheckable(True)
        move_action.toggled.connect(
            lambda checked: self.set_mode(TileMode.MOVE if checked else TileMode.DEFAULT)
        )

        delete_action = QAction(self.tr("Delete"), self)
        delete_action.triggered.connect(self.request_delete)

        self.context_menu.addAction(move_action)
        self.context_menu.addAction(delete_action)

    def contextMenuEvent(self, event) -> None:
        if self.context_menu is None:
            return super().contextMenuEvent(event)
        self.context_menu.exec(event.screenPos())
        event.accept()

    # ------------------------------------------------------------------------------
    # Mouse / drag & drop
    # ------------------------------------------------------------------------------

    def mousePressEvent(self, event) -> None:
        super().mousePressEvent(event)
        if event.button() == Qt.MouseButton.LeftButton:
            event.accept()

    def mouseReleaseEvent(self, event) -> None:
        if (self.mode is not TileMode.MOVE
                and event.button() == Qt.MouseButton.LeftButton
                and not (event.modifiers() & Qt.KeyboardModifier.ControlModifier)):
            moved = event.scenePos() - event.buttonDownScenePos(Qt.MouseButton.LeftButton)
            if moved.manhattanLength() < QApplication.startDragDistance():
                self.on_activate()
        super().mouseReleaseEvent(event)

    def accepts_mime(self, mime: QMimeData) -> bool:
        return True

    def dragEnterEvent(self, event) -> None:
        event.setAccepted(self.accepts_mime(event.mimeData()))

    def dropEvent(self, event) -> None:
        self.receive_external_data(event.mimeData())
        event.acceptProposedAction()

    def receive_external_data(self, mime: QMimeData) -> None:
        """Called with the payload of a drop onto this tile."""
