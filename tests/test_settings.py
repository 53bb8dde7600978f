"""
Test script for settings persistence

Usage:
    python tests/test_settings.py
"""

import sys
import json
import tempfile
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.settings import DEFAULT_SETTINGS, load_settings, merge_settings, save_settings


def test_missing_file_gives_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        assert load_settings(Path(tmp) / "config.json") == DEFAULT_SETTINGS


def test_save_and_load():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "config.json"
        settings = dict(DEFAULT_SETTINGS, min_confidence=0.7, debug_enabled=True)

        save_settings(settings, path)
        loaded = load_settings(path)

        assert loaded["min_confidence"] == 0.7
        assert loaded["debug_enabled"] is True
        assert loaded["board_image"] == DEFAULT_SETTINGS["board_image"]


def test_partial_file_merged_with_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "config.json"
        path.write_text(json.dumps({"board_image": "boards/custom.png"}), encoding="utf-8")

        loaded = load_settings(path)

        assert loaded["board_image"] == "boards/custom.png"
        assert loaded["min_confidence"] == DEFAULT_SETTINGS["min_confidence"]


def test_invalid_file_gives_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "config.json"

        path.write_text("{broken", encoding="utf-8")
        assert load_settings(path) == DEFAULT_SETTINGS

        path.write_text("[]", encoding="utf-8")
        assert load_settings(path) == DEFAULT_SETTINGS


def test_merge_drops_bad_values():
    merged = merge_settings({
        "min_confidence": 3,
        "debug_enabled": "yes",
        "mapping_store": 12,
        "theme": "dark",
    })

    assert merged["min_confidence"] == DEFAULT_SETTINGS["min_confidence"]
    assert merged["debug_enabled"] is False
    assert merged["mapping_store"] == DEFAULT_SETTINGS["mapping_store"]
    assert merged["theme"] == "dark"

    assert merge_settings({"min_confidence": 1})["min_confidence"] == 1
    assert merge_settings({"min_confidence": True})["min_confidence"] == DEFAULT_SETTINGS["min_confidence"]


def main():
    """Run all tests."""
    tests = [
        test_missing_file_gives_defaults,
        test_save_and_load,
        test_partial_file_merged_with_defaults,
        test_invalid_file_gives_defaults,
        test_merge_drops_bad_values,
    ]

    failed = 0
    for test in tests:
        try:
            test()
            print(f"  [PASS] {test.__name__}")
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
