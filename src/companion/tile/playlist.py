from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from PySide6.QtCore import Qt, QRectF, Signal
from PySide6.QtGui import QAction, QBrush, QColor, QPainter, QPen

from companion.model.catalog import SoundFileCatalog, SoundFileRecord
from companion.tile.base import BaseTile, SceneHost, paint_play_state
from companion.tile.mime import decode_sound_file_ids, has_sound_files
from companion.tile.registry import register_tile

if TYPE_CHECKING:
    from PySide6.QtCore import QMimeData

logger = logging.getLogger(__name__)


@register_tile
class PlaylistTile(BaseTile):
    """Leaf tile holding an ordered list of sound files from the catalog."""
    TYPE_KEY = "Tile::PlaylistTile"

    play_requested = Signal(object)
    stop_requested = Signal()

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.playlist: List[SoundFileRecord] = []
        self.current_index: int = 0
        self._catalog: Optional[SoundFileCatalog] = None

    @classmethod
    def create(cls, host: Optional[SceneHost] = None) -> PlaylistTile:
        tile = cls()
        if host is not None:
            tile.set_sound_file_model(host.get_sound_file_model())
        return tile

    def set_sound_file_model(self, catalog: Optional[SoundFileCatalog]) -> None:
        self._catalog = catalog

    def get_sound_file_model(self) -> Optional[SoundFileCatalog]:
        return self._catalog

    # ---- playlist ----

    def add_sound_file(self, rec: SoundFileRecord) -> None:
        self.playlist.append(rec)
        self.update()

    def remove_sound_file(self, sound_file_id: int) -> bool:
        for i, rec in enumerate(self.playlist):
            if rec.id == sound_file_id:
                del self.playlist[i]
                if self.current_index >= len(self.playlist):
                    self.current_index = 0
                self.update()
                return True
        return False

    def current_record(self) -> Optional[SoundFileRecord]:
        if not self.playlist:
            return None
        return self.playlist[self.current_index]

    def next(self) -> Optional[SoundFileRecord]:
        """Advances to the next entry, wrapping around at the end."""
        if not self.playlist:
            return None
        self.current_index = (self.current_index + 1) % len(self.playlist)
        return self.playlist[self.current_index]

    def on_next(self) -> None:
        """Skips to the next entry; a playing tile starts it right away."""
        rec = self.next()
        if rec is not None and self.is_activated:
            self.play_requested.emit(rec)

    def on_remove_current(self) -> None:
        rec = self.current_record()
        if rec is not None:
            self.remove_sound_file(rec.id)

    def on_activate(self) -> None:
        super().on_activate()
        if self.is_activated:
            rec = self.current_record()
            if rec is not None:
                self.play_requested.emit(rec)
        else:
            self.stop_requested.emit()

    # ---- painting ----

    def paint(self, painter: QPainter, option, widget=None) -> None:
        super().paint(painter, option, widget)
        p_rect = self.get_paint_rect()
        if p_rect.width() <= 0 or p_rect.height() <= 0:
            return

        # note glyph
        painter.save()
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QBrush(QColor(70, 130, 180)))
        r = min(p_rect.width(), p_rect.height()) * 0.18
        head = QRectF(p_rect.left() + r * 0.5, p_rect.bottom() - 2.5 * r, 2 * r, 1.6 * r)
        painter.drawEllipse(head)
        painter.drawRect(QRectF(head.right() - r * 0.3, p_rect.top() + r, r * 0.3, head.center().y() - p_rect.top() - r))
        painter.restore()

        paint_play_state(painter, p_rect, self.is_activated)

        painter.setPen(QPen(QColor(230, 230, 230)))
        painter.drawText(p_rect, Qt.AlignmentFlag.AlignTop | Qt.AlignmentFlag.AlignRight, str(len(self.playlist)))

    # ---- JSON ----

    def to_json_object(self) -> Dict[str, Any]:
        obj = super().to_json_object()
        obj["playlist"] = [{"id": rec.id} for rec in self.playlist]
        return obj

    def set_from_json_object(self, obj: Dict[str, Any]) -> bool:
        if not isinstance(obj, dict):
            return False
        entries = obj.get("playlist")
        if not isinstance(entries, list):
            logger.warning(f"{self.TYPE_KEY}: missing or invalid 'playlist'.")
            return False
        ids: List[int] = []
        for entry in entries:
            sid = entry.get("id") if isinstance(entry, dict) else None
            if not isinstance(sid, int) or isinstance(sid, bool):
                logger.warning(f"{self.TYPE_KEY}: invalid playlist entry {entry!r}.")
                return False
            ids.append(sid)
        if ids and self._catalog is None:
            logger.warning(f"{self.TYPE_KEY}: no sound file catalog set, cannot resolve playlist.")
            return False

        if not super().set_from_json_object(obj):
            return False

        self.playlist = self._resolve(ids)
        self.current_index = 0
        self.update()
        return True

    # ---- context menu ----

    def create_context_menu(self) -> None:
        next_action = QAction(self.tr("Next Sound File"), self)
        next_action.triggered.connect(self.on_next)

        remove_action = QAction(self.tr("Remove Current Sound File"), self)
        remove_action.triggered.connect(self.on_remove_current)

        self.context_menu.addAction(next_action)
        self.context_menu.addAction(remove_action)
        self.context_menu.addSeparator()

        super().create_context_menu()

    # ---- drag & drop ----

    def accepts_mime(self, mime: QMimeData) -> bool:
        return has_sound_files(mime)

    def receive_external_data(self, mime: QMimeData) -> None:
        for rec in self._resolve(decode_sound_file_ids(mime)):
            self.add_sound_file(rec)

    def _resolve(self, ids: List[int]) -> List[SoundFileRecord]:
        records: List[SoundFileRecord] = []
        if self._catalog is None:
            return records
        for sid in ids:
            rec = self._catalog.get(sid)
            if rec is None:
                logger.warning(f"{self.TYPE_KEY} '{self.name}': sound file {sid} not found in catalog, skipped.")
                continue
            records.append(rec)
        return records
