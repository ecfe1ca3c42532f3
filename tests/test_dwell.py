from __future__ import annotations

import pytest

from companion.tile.dwell import DwellPhase, DwellState, NO_PROGRESS


def test_idle_has_no_progress() -> None:
    d = DwellState()
    assert d.phase is DwellPhase.IDLE
    assert d.progress(5.0) == NO_PROGRESS
    assert not d.expired(5.0)


def test_progress_is_linear_from_start_to_end() -> None:
    d = DwellState(duration_ms=1000)
    d.start(10.0)
    assert d.progress(10.0) == pytest.approx(0.1)
    assert d.progress(10.5) == pytest.approx(0.1 + 99.9 * 0.5)
    assert d.progress(11.0) == pytest.approx(100.0)
    # clamped after the deadline
    assert d.progress(20.0) == pytest.approx(100.0)


def test_expires_at_deadline() -> None:
    d = DwellState(duration_ms=1000)
    d.start(0.0)
    assert not d.expired(0.999)
    assert d.expired(1.0)


def test_cancel_is_idempotent() -> None:
    d = DwellState()
    d.cancel()
    d.start(1.0)
    d.cancel()
    d.cancel()
    assert not d.is_dwelling
    assert d.started_at is None
    assert d.progress(2.0) == NO_PROGRESS


def test_restart_resets_elapsed_time() -> None:
    d = DwellState(duration_ms=1000)
    d.start(0.0)
    d.start(0.8)
    assert not d.expired(1.5)
    assert d.expired(1.8)
