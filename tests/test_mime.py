from __future__ import annotations

from PySide6.QtCore import QByteArray, QMimeData

from companion.tile.mime import (
    SOUND_FILES_MIME_TYPE, decode_sound_file_ids, encode_sound_files, has_sound_files
)


def test_encode_decode_ids(catalog) -> None:
    mime = encode_sound_files(catalog.records())
    assert has_sound_files(mime)
    assert decode_sound_file_ids(mime) == [1, 2, 3]


def test_decode_filters_bad_entries() -> None:
    mime = QMimeData()
    mime.setData(SOUND_FILES_MIME_TYPE, QByteArray(b'[{"id": 4}, {"id": "x"}, 5, {"id": false}]'))
    assert decode_sound_file_ids(mime) == [4]


def test_decode_non_list_payload() -> None:
    mime = QMimeData()
    mime.setData(SOUND_FILES_MIME_TYPE, QByteArray(b'{"id": 1}'))
    assert decode_sound_file_ids(mime) == []


def test_decode_foreign_mime() -> None:
    mime = QMimeData()
    mime.setText("1,2,3")
    assert not has_sound_files(mime)
    assert decode_sound_file_ids(mime) == []
