"""
Detection Result Dataclasses

Shared data structures for the auto-detection pipeline.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from src.mapping.document import MappingDocument


@dataclass
class Component:
    """Shape statistics of one connected colour blob in the analysis crop."""
    color: str
    pixel_count: int
    bbox: Tuple[int, int, int, int]  # (min_x, min_y, max_x, max_y) inclusive
    min_point: Tuple[int, int]       # Extremal point with the smaller crop y
    max_point: Tuple[int, int]       # Extremal point with the larger crop y
    length: float                    # Distance between the two extremal points
    aspect: float                    # Long bbox side / short bbox side, floor 1

    @property
    def bbox_width(self) -> int:
        return self.bbox[2] - self.bbox[0] + 1

    @property
    def bbox_height(self) -> int:
        return self.bbox[3] - self.bbox[1] + 1


@dataclass
class DetectionResult:
    """Complete auto-detection result."""
    success: bool                       # False only on hard failure
    confidence: float                   # Overall confidence in [0, 1]
    message: str                        # Advisory / failure message
    mapping: Optional[MappingDocument]  # None on hard failure
    boundary_confidence: float = 0.0
    components: List[Component] = field(default_factory=list)
    processing_time_ms: float = 0.0
    image: Optional[np.ndarray] = field(default=None, repr=False, compare=False)  # Decoded RGB source, success only

    @classmethod
    def failure(cls, message: str, processing_time_ms: float = 0.0) -> 'DetectionResult':
        """Build the structured hard-failure result."""
        return cls(
            success=False,
            confidence=0.0,
            message=message,
            mapping=None,
            processing_time_ms=processing_time_ms
        )

    def to_dict(self) -> dict:
        """Convert to the {success, confidence, message, mapping} shape."""
        return {
            "success": self.success,
            "confidence": self.confidence,
            "message": self.message,
            "mapping": self.mapping.to_dict() if self.mapping else None,
        }
