"""
Test script for mapping document persistence

Tests:
1. Document JSON shape
2. Export/import round-trip
3. Version and format rejection
4. Key-value mapping store

Usage:
    python tests/test_storage.py
"""

import sys
import json
import tempfile
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.mapping import (
    MAPPING_STORAGE_KEY,
    MappingDocument,
    MappingFormatError,
    MappingStore,
    Point,
    build_square_centers,
    export_mapping,
    import_mapping,
    make_empty_mapping,
)

SQUARE = [(0, 100), (100, 100), (100, 0), (0, 0)]


def _sample_document() -> MappingDocument:
    return MappingDocument(
        meta={"note": "test board", "updatedAt": "2026-01-02T03:04:05+00:00", "boundaryConfidence": 0.7},
        corners=[Point(float(x), float(y)) for x, y in SQUARE],
        centers=build_square_centers(SQUARE, 100, 100),
        ladders={2: 38, 8: 31},
        snakes={16: 6, 98: 78},
    )


def test_document_json_shape():
    """Serialized form matches the interchange format."""
    data = _sample_document().to_dict()

    assert data["version"] == 1
    assert data["corners"][0] == {"x": 0.0, "y": 100.0}
    assert len(data["centers"]) == 100
    assert set(data["centers"][0]) == {"cell", "x", "y", "u", "v"}
    assert data["ladders"] == {"2": 38, "8": 31}
    assert data["snakes"] == {"16": 6, "98": 78}

    # Survives a trip through the json module with string keys
    reparsed = json.loads(json.dumps(data))
    assert MappingDocument.from_dict(reparsed).ladders == {2: 38, 8: 31}


def test_export_import_round_trip():
    """Exported documents import back equal."""
    print("\n" + "="*60)
    print("TEST: Export/import round-trip")
    print("="*60)

    original = _sample_document()
    with tempfile.TemporaryDirectory() as tmp:
        path = export_mapping(original, Path(tmp) / "snl-mapping.json")
        restored = import_mapping(path)

    assert restored == original
    assert restored.to_dict() == original.to_dict()
    print("  [PASS] Round-trip")


def test_import_rejects_wrong_version():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "mapping.json"
        for version in (2, "1", True, None):
            data = _sample_document().to_dict()
            data["version"] = version
            path.write_text(json.dumps(data), encoding="utf-8")
            with pytest.raises(MappingFormatError):
                import_mapping(path)

        data = _sample_document().to_dict()
        del data["version"]
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(MappingFormatError):
            import_mapping(path)


def test_import_rejects_malformed_json():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "mapping.json"

        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(MappingFormatError):
            import_mapping(path)

        path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(MappingFormatError):
            import_mapping(path)

        path.write_text(json.dumps({"version": 1, "corners": [{"x": 1}]}), encoding="utf-8")
        with pytest.raises(MappingFormatError):
            import_mapping(path)

        path.write_text(json.dumps({"version": 1, "ladders": {"two": 38}}), encoding="utf-8")
        with pytest.raises(MappingFormatError):
            import_mapping(path)


def test_import_rejects_non_finite_coordinates():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "mapping.json"

        for literal in ("NaN", "Infinity", "-Infinity"):
            path.write_text('{"version": 1, "corners": [{"x": %s, "y": 0}]}' % literal, encoding="utf-8")
            with pytest.raises(MappingFormatError):
                import_mapping(path)

    with pytest.raises(MappingFormatError):
        MappingDocument.from_dict({"version": 1, "corners": [{"x": "nan", "y": 0}]})
    with pytest.raises(MappingFormatError):
        MappingDocument.from_dict({
            "version": 1,
            "centers": [{"cell": 1, "x": 5, "y": float("inf"), "u": 0.05, "v": 0.05}],
        })


def test_non_utf8_content_rejected():
    """Binary files are format errors for import and the store, and save recovers the store."""
    garbage = b"\xff\xfe\x00garbage"
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "mapping.json"
        path.write_bytes(garbage)
        with pytest.raises(MappingFormatError):
            import_mapping(path)

        store_path = Path(tmp) / "store.json"
        store_path.write_bytes(garbage)
        store = MappingStore(store_path)
        with pytest.raises(MappingFormatError):
            store.load()

        store.save(_sample_document())
        assert store.load() == _sample_document()


def test_import_missing_file_raises_os_error():
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(OSError):
            import_mapping(Path(tmp) / "missing.json")


def test_empty_mapping():
    document = make_empty_mapping()
    assert document.version == 1
    assert document.corners == [] and document.centers == []
    assert document.ladders == {} and document.snakes == {}
    assert "createdAt" in document.meta

    # Sparse documents (no corners/centers yet) are valid
    assert MappingDocument.from_dict({"version": 1}).corners == []


def test_mapping_store():
    """Store saves under the fixed key and loads it back."""
    print("\n" + "="*60)
    print("TEST: Mapping store")
    print("="*60)

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "store.json"
        store = MappingStore(path)
        assert store.load() is None

        document = _sample_document()
        store.save(document)
        raw = json.loads(path.read_text(encoding="utf-8"))
        assert MAPPING_STORAGE_KEY in raw
        assert store.load() == document

        store.clear()
        assert store.load() is None
    print("  [PASS] Mapping store")


def test_mapping_store_preserves_other_keys():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "store.json"
        path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

        MappingStore(path).save(_sample_document())
        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["theme"] == "dark"


def test_mapping_store_rejects_bad_content():
    """Corrupt or wrong-version stored values are errors, not defaults."""
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "store.json"
        store = MappingStore(path)

        path.write_text("garbage", encoding="utf-8")
        with pytest.raises(MappingFormatError):
            store.load()

        path.write_text(json.dumps({MAPPING_STORAGE_KEY: {"version": 7}}), encoding="utf-8")
        with pytest.raises(MappingFormatError):
            store.load()

        # Saving over a corrupt store recovers it
        path.write_text("garbage", encoding="utf-8")
        store.save(_sample_document())
        assert store.load() == _sample_document()


def main():
    """Run all tests."""
    print("\n" + "#"*60)
    print("# STORAGE VALIDATION TESTS")
    print("#"*60)

    tests = [
        test_document_json_shape,
        test_export_import_round_trip,
        test_import_rejects_wrong_version,
        test_import_rejects_malformed_json,
        test_import_rejects_non_finite_coordinates,
        test_non_utf8_content_rejected,
        test_import_missing_file_raises_os_error,
        test_empty_mapping,
        test_mapping_store,
        test_mapping_store_preserves_other_keys,
        test_mapping_store_rejects_bad_content,
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
