"""
Mapping Document Module - Versioned calibration hand-off artifact.

A MappingDocument is the only interchange format between calibration /
auto-detection and game logic. Its JSON form is:

    {
      "version": 1,
      "meta": {"note": str, "source"?: str, "updatedAt"|"createdAt": ISO-8601,
               "boundaryConfidence"?: float},
      "corners": [{"x": num, "y": num} x4],          # BL, BR, TR, TL
      "centers": [{"cell", "x", "y", "u", "v"} x100],
      "ladders": {"<baseCell>": topCell, ...},
      "snakes":  {"<headCell>": tailCell, ...}
    }
"""

import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from .bilinear import Point
from .centers import SquareCenter


MAPPING_VERSION = 1
DEFAULT_NOTE = "Calibration mapping for Snakes & Ladders board"


class MappingFormatError(ValueError):
    """Raised when a mapping document is malformed or has the wrong version."""


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class MappingDocument:
    """
    Versioned mapping aggregate.

    Attributes:
        version: Format version (always 1)
        meta: Free-form metadata (note, source, timestamps, confidence)
        corners: Board corners in BL, BR, TR, TL order
        centers: Square center table (100 entries once generated)
        ladders: base cell -> top cell
        snakes: head cell -> tail cell
    """
    version: int = MAPPING_VERSION
    meta: Dict[str, Any] = field(default_factory=dict)
    corners: List[Point] = field(default_factory=list)
    centers: List[SquareCenter] = field(default_factory=list)
    ladders: Dict[int, int] = field(default_factory=dict)
    snakes: Dict[int, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-compatible dictionary shape."""
        return {
            "version": self.version,
            "meta": dict(self.meta),
            "corners": [{"x": p.x, "y": p.y} for p in self.corners],
            "centers": [
                {"cell": c.cell, "x": c.x, "y": c.y, "u": c.u, "v": c.v}
                for c in self.centers
            ],
            "ladders": {str(base): top for base, top in self.ladders.items()},
            "snakes": {str(head): tail for head, tail in self.snakes.items()},
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON text."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Any) -> 'MappingDocument':
        """
        Build a document from its dictionary shape.

        Args:
            data: Parsed JSON object

        Returns:
            MappingDocument instance

        Raises:
            MappingFormatError: If the version tag is missing or wrong,
                or any section has the wrong shape
        """
        if not isinstance(data, dict):
            raise MappingFormatError("Mapping must be a JSON object")

        version = data.get("version")
        if isinstance(version, bool) or version != MAPPING_VERSION:
            raise MappingFormatError(f"Invalid mapping format/version: {version!r}")

        meta = data.get("meta") or {}
        if not isinstance(meta, dict):
            raise MappingFormatError("'meta' must be an object")

        try:
            corners = [Point(_finite(p["x"]), _finite(p["y"])) for p in data.get("corners") or []]
            centers = [
                SquareCenter(
                    cell=int(c["cell"]),
                    x=_finite(c["x"]),
                    y=_finite(c["y"]),
                    u=_finite(c["u"]),
                    v=_finite(c["v"])
                )
                for c in data.get("centers") or []
            ]
            ladders = _parse_transitions(data.get("ladders") or {})
            snakes = _parse_transitions(data.get("snakes") or {})
        except (KeyError, TypeError, ValueError) as e:
            raise MappingFormatError(f"Malformed mapping: {e}") from e

        return cls(
            version=MAPPING_VERSION,
            meta=dict(meta),
            corners=corners,
            centers=centers,
            ladders=ladders,
            snakes=snakes,
        )

    @classmethod
    def from_json(cls, text: str) -> 'MappingDocument':
        """
        Parse a document from JSON text.

        Raises:
            MappingFormatError: On invalid JSON or an invalid document
        """
        try:
            data = json.loads(text, parse_constant=_reject_constant)
        except ValueError as e:
            raise MappingFormatError(f"Invalid JSON: {e}") from e
        return cls.from_dict(data)


def _finite(value: Any) -> float:
    """Coerce a coordinate to float, refusing NaN and infinities."""
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite coordinate: {value!r}")
    return number


def _reject_constant(name: str) -> float:
    raise ValueError(f"{name} is not allowed in a mapping")


def _parse_transitions(raw: Any) -> Dict[int, int]:
    """Convert a {"<cell>": cell} object into an int -> int dict."""
    if not isinstance(raw, dict):
        raise TypeError("transitions must be an object")
    return {int(source): int(target) for source, target in raw.items()}


def make_empty_mapping(note: str = DEFAULT_NOTE) -> MappingDocument:
    """Create an empty version-1 document stamped with its creation time."""
    return MappingDocument(meta={"note": note, "createdAt": utc_timestamp()})
