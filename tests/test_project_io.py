from __future__ import annotations

import copy
import json
from pathlib import Path

import pytest
from PySide6.QtCore import QPointF

from companion.model.catalog import SoundFileCatalog
from companion.model.io import ProjectIO
from companion.tile.canvas import Canvas
from companion.tile.playlist import PlaylistTile


@pytest.fixture()
def fresh_canvas(qapp) -> Canvas:
    view = Canvas()
    yield view
    view.clear()


def test_save_and_load(tmp_path: Path, canvas, catalog, fresh_canvas) -> None:
    folder = canvas.add_nested_tile(QPointF(0, 0), name="set 1")
    folder.on_contents()
    canvas.add_playlist_tile(QPointF(0, 0)).add_sound_file(catalog.get(3))
    canvas.pop_scene()

    path = tmp_path / "projects" / "show.json"
    ProjectIO.save_project(canvas, catalog, str(path))

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert set(doc) == {"version", "catalog", "canvas"}

    new_catalog = SoundFileCatalog()
    ProjectIO.load_project(fresh_canvas, new_catalog, str(path))

    assert [r.name for r in new_catalog.records()] == ["kick", "snare", "rain"]
    assert fresh_canvas.get_sound_file_model() is new_catalog
    assert fresh_canvas.to_json_object() == canvas.to_json_object()
    playlists = [t for t in fresh_canvas.root_scene().walk_tiles() if isinstance(t, PlaylistTile)]
    assert playlists
    assert all(t.get_sound_file_model() is new_catalog for t in playlists)
    # new ids continue after the persisted ones
    assert new_catalog.add("new", "/x.wav").id == 4


def test_load_rejects_non_json(tmp_path: Path, fresh_canvas) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{ nope", encoding="utf-8")
    with pytest.raises(ValueError):
        ProjectIO.load_project(fresh_canvas, SoundFileCatalog(), str(path))


@pytest.mark.parametrize("doc", [
    [],
    {"catalog": []},
    {"catalog": "x", "canvas": {}},
    {"catalog": [{"id": 1}], "canvas": {}},
    {"catalog": [], "canvas": {"scene": {"tiles": []}}},
])
def test_load_rejects_invalid_project_data(tmp_path: Path, fresh_canvas, doc) -> None:
    path = tmp_path / "invalid.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    with pytest.raises(ValueError):
        ProjectIO.load_project(fresh_canvas, SoundFileCatalog(), str(path))


def test_load_missing_file(tmp_path: Path, fresh_canvas) -> None:
    with pytest.raises(OSError):
        ProjectIO.load_project(fresh_canvas, SoundFileCatalog(), str(tmp_path / "missing.json"))


@pytest.mark.parametrize("doc", [
    {"catalog": [], "canvas": {"scene": {"tiles": []}}},
    {
        "catalog": [{"id": 9, "name": "other", "path": "/other.wav"}],
        "canvas": {"scene": {
            "scene_rect": {"x": 0, "y": 0, "width": 800, "height": 600},
            "tiles": [{"type": "Tile::PlaylistTile", "data": {
                "name": "bad", "size": -5, "position": {"x": 0, "y": 0}, "playlist": [{"id": 9}],
            }}],
        }},
    },
])
def test_failed_load_keeps_project(tmp_path: Path, canvas, catalog, doc) -> None:
    folder = canvas.add_nested_tile(QPointF(0, 0), name="keep me")
    canvas.add_playlist_tile(QPointF(200, 0)).add_sound_file(catalog.get(2))
    canvas.store_as_layout("live")
    folder.on_contents()
    canvas.add_playlist_tile(QPointF(0, 0)).add_sound_file(catalog.get(1))

    before_canvas = copy.deepcopy(canvas.to_json_object())
    before_catalog = catalog.to_list()

    path = tmp_path / "invalid.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    with pytest.raises(ValueError):
        ProjectIO.load_project(canvas, catalog, str(path))

    assert canvas.to_json_object() == before_canvas
    assert catalog.to_list() == before_catalog
    assert canvas.get_sound_file_model() is catalog
    assert canvas.scene_names() == ["Root", "keep me"]
    assert not folder.is_deleted
