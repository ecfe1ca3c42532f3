from __future__ import annotations

import copy

from PySide6.QtCore import QByteArray, QEvent, QMimeData
from PySide6.QtWidgets import QGraphicsSceneDragDropEvent

from companion.tile.base import TileMode
from companion.tile.mime import SOUND_FILES_MIME_TYPE, encode_sound_files
from companion.tile.playlist import PlaylistTile


def make_playlist(canvas) -> PlaylistTile:
    tile = PlaylistTile.create(canvas)
    tile.init()
    return tile


def data(**overrides) -> dict:
    obj = {
        "name": "loops",
        "size": 80.0,
        "position": {"x": 5.0, "y": -3.0},
        "playlist": [{"id": 3}, {"id": 1}],
    }
    obj.update(overrides)
    return obj


def test_set_from_json_resolves_against_catalog(canvas) -> None:
    tile = make_playlist(canvas)
    assert tile.set_from_json_object(data())
    assert tile.name == "loops"
    assert tile.size == 80.0
    assert (tile.pos().x(), tile.pos().y()) == (5.0, -3.0)
    assert [r.name for r in tile.playlist] == ["rain", "kick"]
    assert tile.to_json_object() == data()


def test_unknown_ids_are_skipped(canvas) -> None:
    tile = make_playlist(canvas)
    assert tile.set_from_json_object(data(playlist=[{"id": 2}, {"id": 99}]))
    assert [r.id for r in tile.playlist] == [2]


def test_invalid_data_leaves_tile_untouched(canvas) -> None:
    tile = make_playlist(canvas)
    tile.set_name("before")
    for bad in (
        data(playlist="nope"),
        data(playlist=[{"id": "1"}]),
        data(playlist=[{"id": True}]),
        data(size=-1),
        data(size="big"),
        data(position={"x": 1}),
        {"playlist": []},
        [],
    ):
        assert not tile.set_from_json_object(bad)
    assert tile.name == "before"
    assert tile.playlist == []


def test_requires_catalog_for_non_empty_playlist(qapp) -> None:
    tile = PlaylistTile()
    tile.init()
    assert not tile.set_from_json_object(data())
    assert tile.set_from_json_object(data(playlist=[]))


def test_set_from_json_is_idempotent(canvas) -> None:
    tile = make_playlist(canvas)
    assert tile.set_from_json_object(copy.deepcopy(data()))
    first = tile.to_json_object()
    assert tile.set_from_json_object(copy.deepcopy(data()))
    assert tile.to_json_object() == first


def test_activation_requests_playback(canvas, catalog) -> None:
    tile = make_playlist(canvas)
    tile.add_sound_file(catalog.get(2))
    played, stopped = [], []
    tile.play_requested.connect(played.append)
    tile.stop_requested.connect(lambda: stopped.append(True))

    tile.on_activate()
    assert tile.is_activated
    assert [r.name for r in played] == ["snare"]

    tile.on_activate()
    assert not tile.is_activated
    assert stopped == [True]


def test_next_wraps_around(canvas, catalog) -> None:
    tile = make_playlist(canvas)
    assert tile.next() is None
    tile.add_sound_file(catalog.get(1))
    tile.add_sound_file(catalog.get(2))
    assert tile.current_record().id == 1
    assert tile.next().id == 2
    assert tile.next().id == 1


def test_remove_sound_file(canvas, catalog) -> None:
    tile = make_playlist(canvas)
    tile.add_sound_file(catalog.get(1))
    tile.add_sound_file(catalog.get(2))
    tile.next()
    assert tile.remove_sound_file(2)
    assert not tile.remove_sound_file(2)
    assert tile.current_index == 0
    assert [r.id for r in tile.playlist] == [1]


def test_drop_appends_sound_files(canvas, catalog) -> None:
    tile = make_playlist(canvas)
    mime = encode_sound_files([catalog.get(3), catalog.get(1)])
    assert tile.accepts_mime(mime)
    tile.receive_external_data(mime)
    assert [r.id for r in tile.playlist] == [3, 1]


def test_foreign_drop_is_ignored(canvas) -> None:
    tile = make_playlist(canvas)
    mime = QMimeData()
    mime.setText("hello")
    assert not tile.accepts_mime(mime)
    tile.receive_external_data(mime)

    broken = QMimeData()
    broken.setData(SOUND_FILES_MIME_TYPE, QByteArray(b"{not json"))
    tile.receive_external_data(broken)
    assert tile.playlist == []


def test_base_context_menu_and_move_mode(canvas) -> None:
    tile = make_playlist(canvas)
    actions = tile.context_menu.actions()
    assert [a.text() for a in actions] == [
        "Next Sound File", "Remove Current Sound File", "", "Move", "Delete",
    ]

    actions[3].setChecked(True)
    assert tile.mode is TileMode.MOVE
    actions[3].setChecked(False)
    assert tile.mode is TileMode.DEFAULT


def test_geometry(canvas) -> None:
    tile = make_playlist(canvas)
    tile.set_size(60.0)
    assert tile.boundingRect().width() == 60.0
    assert tile.shape().boundingRect() == tile.boundingRect()
    assert tile.get_paint_rect().width() == 40.0


def test_on_delete_runs_once(canvas) -> None:
    tile = make_playlist(canvas)
    calls = []
    tile.release_resources = lambda: calls.append(1)
    tile.on_delete()
    tile.on_delete()
    assert calls == [1]
    assert tile.is_deleted


def test_menu_next_and_remove(canvas, catalog) -> None:
    tile = make_playlist(canvas)
    tile.add_sound_file(catalog.get(1))
    tile.add_sound_file(catalog.get(2))
    actions = {a.text(): a for a in tile.context_menu.actions()}
    played = []
    tile.play_requested.connect(played.append)

    actions["Next Sound File"].trigger()
    assert tile.current_record().id == 2
    assert played == []

    tile.on_activate()
    actions["Next Sound File"].trigger()
    assert [r.id for r in played] == [2, 1]

    actions["Remove Current Sound File"].trigger()
    assert [r.id for r in tile.playlist] == [2]
    assert tile.current_record().id == 2


def test_drag_enter_accepts_only_sound_files(canvas, catalog) -> None:
    tile = make_playlist(canvas)

    foreign = QMimeData()
    foreign.setText("hello")
    event = QGraphicsSceneDragDropEvent(QEvent.Type.GraphicsSceneDragEnter)
    event.setMimeData(foreign)
    tile.dragEnterEvent(event)
    assert not event.isAccepted()

    sounds = encode_sound_files([catalog.get(1)])
    event = QGraphicsSceneDragDropEvent(QEvent.Type.GraphicsSceneDragEnter)
    event.setMimeData(sounds)
    tile.dragEnterEvent(event)
    assert event.isAccepted()

    drop = QGraphicsSceneDragDropEvent(QEvent.Type.GraphicsSceneDrop)
    drop.setMimeData(sounds)
    tile.dropEvent(drop)
    assert [r.id for r in tile.playlist] == [1]
