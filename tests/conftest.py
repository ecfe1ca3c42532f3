from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from companion.model.catalog import SoundFileCatalog
from companion.tile.canvas import Canvas


class FakeClock:
    """Monotonic clock stand-in, advanced by hand."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture(scope="session")
def qapp() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture()
def catalog() -> SoundFileCatalog:
    cat = SoundFileCatalog()
    cat.add("kick", "/sounds/kick.wav")
    cat.add("snare", "/sounds/snare.wav")
    cat.add("rain", "/sounds/ambience/rain.ogg")
    return cat


@pytest.fixture()
def canvas(qapp, catalog) -> Canvas:
    view = Canvas()
    view.set_sound_file_model(catalog)
    yield view
    view.clear()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
