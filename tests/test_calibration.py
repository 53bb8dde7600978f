"""
Test script for the manual calibration workflow

Tests:
1. Corner capture and step progression
2. Snake/ladder capture with direction validation
3. Clearing and document loading
4. Save/restore through the mapping store
5. Auto-detect integration and re-entry guard

Usage:
    python tests/test_calibration.py
"""

import sys
import tempfile
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.mapping import (
    CalibrationSession,
    CalibrationStep,
    MappingDocument,
    MappingStore,
)
from tools.make_board import render_board

SQUARE = [(0, 100), (100, 100), (100, 0), (0, 0)]


def _calibrated_session(store=None) -> CalibrationSession:
    session = CalibrationSession(store)
    for x, y in SQUARE:
        session.click(x, y)
    session.generate_centers(100, 100)
    return session


def test_corner_flow():
    """Four corner clicks advance to the centers step."""
    print("\n" + "="*60)
    print("TEST: Corner capture")
    print("="*60)

    session = CalibrationSession()
    assert session.step == CalibrationStep.CORNERS

    for i, (x, y) in enumerate(SQUARE, start=1):
        session.click(x, y)
        assert session.status == f"Corner {i}/4 captured."

    assert session.step == CalibrationStep.CENTERS
    assert [tuple(p) for p in session.corners] == SQUARE

    # Fifth corner is ignored
    assert session.add_corner(1, 1) is False
    assert len(session.corners) == 4

    assert session.generate_centers(100, 100) is True
    assert session.step == CalibrationStep.TRANSITIONS
    assert len(session.centers) == 100
    print("  [PASS] Corner capture")


def test_generate_centers_needs_four_corners():
    session = CalibrationSession()
    session.add_corner(0, 100)

    assert session.generate_centers(100, 100) is False
    assert session.status == "Please capture all 4 corners first."
    assert session.centers == []


def test_capture_ladder():
    """Ladder endpoints snap to the nearest cell."""
    session = _calibrated_session()
    session.set_capture_mode("ladder")

    assert session.capture_point(15, 95) is None
    assert session.pending_cell == 2
    assert session.capture_point(25, 65) == (2, 38)

    assert session.ladders == {2: 38}
    assert session.pending_cell is None
    assert session.status == "Ladder recorded: 2 -> 38"


def test_capture_snake_via_click():
    session = _calibrated_session()
    session.set_capture_mode("snake")

    session.click(5, 5)    # cell 100
    session.click(5, 95)   # cell 1

    assert session.snakes == {100: 1}
    assert session.ladders == {}


def test_invalid_snake_rejected():
    """Tail above head is rejected and the pending head discarded."""
    session = _calibrated_session()
    session.set_capture_mode("snake")

    session.capture_point(5, 95)              # cell 1
    assert session.capture_point(5, 5) is None  # cell 100

    assert session.snakes == {}
    assert session.pending_cell is None
    assert session.status == "Invalid snake: tail must be lower than head."


def test_invalid_ladder_rejected():
    session = _calibrated_session()
    session.set_capture_mode("ladder")

    session.capture_point(5, 5)
    session.capture_point(5, 5)

    assert session.ladders == {}
    assert session.status == "Invalid ladder: top must be higher than bottom."


def test_capture_before_centers():
    session = CalibrationSession()
    for x, y in SQUARE:
        session.add_corner(x, y)

    assert session.capture_point(50, 50) is None
    assert session.status == "Generate centers first."
    assert session.pending_cell is None


def test_mode_change_discards_pending_endpoint():
    session = _calibrated_session()
    session.capture_point(5, 5)
    assert session.pending_cell == 100

    session.set_capture_mode("ladder")
    assert session.pending_cell is None
    assert session.capture_mode == "ladder"

    with pytest.raises(ValueError):
        session.set_capture_mode("chute")


def test_clearing():
    session = _calibrated_session()
    session.set_capture_mode("ladder")
    session.capture_point(15, 95)
    session.capture_point(25, 65)

    session.clear_transitions()
    assert session.ladders == {} and session.snakes == {}

    session.clear_centers()
    assert session.centers == []
    assert session.step == CalibrationStep.CENTERS

    session.clear_corners()
    assert session.corners == []
    assert session.step == CalibrationStep.CORNERS


def test_load_document_resumes_step():
    session = _calibrated_session()
    complete = session.to_document()

    fresh = CalibrationSession()
    fresh.load_document(complete)
    assert fresh.step == CalibrationStep.TRANSITIONS
    assert len(fresh.centers) == 100

    fresh.load_document(MappingDocument(corners=complete.corners))
    assert fresh.step == CalibrationStep.CENTERS

    fresh.load_document(MappingDocument())
    assert fresh.step == CalibrationStep.CORNERS


def test_save_and_restore():
    """Saved sessions restore into a new session."""
    print("\n" + "="*60)
    print("TEST: Save/restore")
    print("="*60)

    with tempfile.TemporaryDirectory() as tmp:
        store = MappingStore(Path(tmp) / "store.json")

        session = _calibrated_session(store)
        session.set_capture_mode("ladder")
        session.capture_point(15, 95)
        session.capture_point(25, 65)
        saved = session.save()
        assert session.status == "Saved mapping."

        restored = CalibrationSession(store)
        assert restored.restore() is True
        assert restored.ladders == {2: 38}
        assert restored.centers == saved.centers
        assert restored.step == CalibrationStep.TRANSITIONS

        store.clear()
        assert CalibrationSession(store).restore() is False

    print("  [PASS] Save/restore")


def test_save_without_store():
    with pytest.raises(RuntimeError):
        CalibrationSession().save()
    assert CalibrationSession().restore() is False


def test_auto_detect_failure_keeps_state():
    session = _calibrated_session()
    session.ladders = {2: 38}

    result = session.run_auto_detect("does/not/exist.png")

    assert result.success is False
    assert session.status.startswith("Auto-detect failed")
    assert session.ladders == {2: 38}
    assert session.auto_busy is False


def test_auto_detect_adopts_and_saves_mapping():
    with tempfile.TemporaryDirectory() as tmp:
        store = MappingStore(Path(tmp) / "store.json")
        session = CalibrationSession(store)
        messages = []

        result = session.run_auto_detect(render_board(ladders={8: 48}), messages.append)

        assert result.success is True
        assert session.ladders == {8: 48}
        assert session.step == CalibrationStep.TRANSITIONS
        assert store.load().ladders == {8: 48}
        assert messages[0] == "Loading image..."
        assert session.auto_busy is False


def test_auto_detect_refuses_reentry():
    session = CalibrationSession()
    nested = []

    def reenter(message):
        if not nested:
            nested.append(session.run_auto_detect("does/not/exist.png"))

    result = session.run_auto_detect(render_board(), reenter)

    assert result.success is True
    assert nested == [None]
    assert session.auto_busy is False


def main():
    """Run all tests."""
    print("\n" + "#"*60)
    print("# CALIBRATION VALIDATION TESTS")
    print("#"*60)

    tests = [
        test_corner_flow,
        test_generate_centers_needs_four_corners,
        test_capture_ladder,
        test_capture_snake_via_click,
        test_invalid_snake_rejected,
        test_invalid_ladder_rejected,
        test_capture_before_centers,
        test_mode_change_discards_pending_endpoint,
        test_clearing,
        test_load_document_resumes_step,
        test_save_and_restore,
        test_save_without_store,
        test_auto_detect_failure_keeps_state,
        test_auto_detect_adopts_and_saves_mapping,
        test_auto_detect_refuses_reentry,
    ]

    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            failed += 1
            print(f"  [FAIL] {test.__name__}: {e}")

    print()
    if failed:
        print(f"{failed} test(s) FAILED!")
        return 1
    print("All tests PASSED!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
