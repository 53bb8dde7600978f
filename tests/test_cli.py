"""
Test script for the command line entry point

Usage:
    python tests/test_cli.py
"""

import os
import sys
import json
import tempfile
from contextlib import contextmanager
from pathlib import Path

from PIL import Image

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from main import Application, parse_args
from src.mapping import MappingDocument, MappingStore, export_mapping
from tools.make_board import render_board


@contextmanager
def working_directory():
    """Run inside a fresh temporary directory."""
    previous = os.getcwd()
    with tempfile.TemporaryDirectory() as tmp:
        os.chdir(tmp)
        try:
            yield Path(tmp)
        finally:
            os.chdir(previous)


def test_parse_args():
    args = parse_args(["detect", "board.png", "--save", "-o", "out.json"])
    assert args.command == "detect"
    assert args.image == "board.png"
    assert args.save is True
    assert args.output == "out.json"

    args = parse_args(["play", "--seed", "4", "--auto"])
    assert args.seed == 4 and args.auto is True

    args = parse_args(["config", "min_confidence", "0.6"])
    assert (args.key, args.value) == ("min_confidence", "0.6")


def test_detect_exports_and_saves():
    with working_directory() as tmp:
        render_board(ladders={8: 48}).save(tmp / "board.png")
        application = Application()

        assert application.detect(str(tmp / "board.png"), "out.json", save=True) == 0

        exported = MappingDocument.from_json((tmp / "out.json").read_text(encoding="utf-8"))
        assert exported.ladders == {8: 48}
        assert MappingStore(tmp / "mapping_store.json").load().ladders == {8: 48}


def test_detect_writes_debug_image():
    with working_directory() as tmp:
        board = render_board(ladders={8: 48})
        board.save(tmp / "board.png")

        assert Application(debug_mode=True).detect("board.png", None, save=False) == 0
        debug_images = list((tmp / "debug").glob("debug_*.png"))
        assert len(debug_images) == 1
        with Image.open(debug_images[0]) as debug_image:
            assert debug_image.size == board.size


def test_detect_missing_image_fails():
    with working_directory():
        assert Application().detect("nope.png", None, save=False) == 1


def test_show():
    with working_directory() as tmp:
        application = Application()
        assert application.show(None) == 1

        export_mapping(MappingDocument(ladders={2: 38}), tmp / "m.json")
        assert application.show("m.json") == 0

        (tmp / "bad.json").write_text("{}", encoding="utf-8")
        assert application.show("bad.json") == 2

        (tmp / "bad.bin").write_bytes(b"\xff\xfe\x00garbage")
        assert application.show("bad.bin") == 2

        (tmp / "mapping_store.json").write_bytes(b"\xff\xfe\x00garbage")
        assert application.show(None) == 2
        assert application.play(None, seed=1, auto=True) == 2


def test_play_auto_finishes():
    with working_directory():
        assert Application().play(None, seed=42, auto=True) == 0


def test_config_command():
    with working_directory() as tmp:
        application = Application()

        assert application.config("min_confidence", "0.6") == 0
        saved = json.loads((tmp / "config.json").read_text(encoding="utf-8"))
        assert saved["min_confidence"] == 0.6

        assert application.config("min_confidence", "2") == 1
        assert application.config("debug_enabled", "maybe") == 1
        assert Application().settings["min_confidence"] == 0.6


def main():
    """Run all tests."""
    tests = [
        test_parse_args,
        test_detect_exports_and_saves,
        test_detect_writes_debug_image,
        test_detect_missing_image_fails,
        test_show,
        test_play_auto_finishes,
        test_config_command,
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
