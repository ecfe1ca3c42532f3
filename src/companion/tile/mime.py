"""Drag & drop payload for sound files (catalog list -> playlist tiles)."""
from __future__ import annotations

import json
import logging
from typing import Iterable, List

from PySide6.QtCore import QByteArray, QMimeData

from companion.model.catalog import SoundFileRecord

logger = logging.getLogger(__name__)

SOUND_FILES_MIME_TYPE = "application/x-companion-sound-files"


def encode_sound_files(records: Iterable[SoundFileRecord]) -> QMimeData:
    payload = json.dumps([{"id": rec.id} for rec in records])
    mime = QMimeData()
    mime.setData(SOUND_FILES_MIME_TYPE, QByteArray(payload.encode("utf-8")))
    return mime


def has_sound_files(mime: QMimeData) -> bool:
    return mime is not None and mime.hasFormat(SOUND_FILES_MIME_TYPE)


def decode_sound_file_ids(mime: QMimeData) -> List[int]:
    """Sound file ids carried by the drag, empty for foreign or malformed data."""
    if not has_sound_files(mime):
        return []
    try:
        data = json.loads(bytes(mime.data(SOUND_FILES_MIME_TYPE).data()).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Malformed sound file drag payload: {e}")
        return []
    if not isinstance(data, list):
        return []
    return [
        item["id"] for item in data
        if isinstance(item, dict) and isinstance(item.get("id"), int) and not isinstance(item.get("id"), bool)
    ]
