"""
Calibration Session Module - Manual "Mapping Mode" state machine.

Drives manual calibration from click coordinates on a rendered board:

    CORNERS -> CENTERS -> TRANSITIONS

1. Click the four board corners: bottom-left, bottom-right, top-right, top-left.
2. Generate the 100 square centers from those corners.
3. Capture snakes (head then tail) or ladders (bottom then top) by clicking
   their endpoints; each click snaps to the nearest cell.

Every action updates `status`, the user-facing message for the last action.
Invalid input never raises; it is rejected with a status message.
"""

import logging
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple

from .bilinear import Point
from .board import LAST_CELL
from .centers import SquareCenter, build_square_centers, nearest_cell
from .document import DEFAULT_NOTE, MappingDocument, utc_timestamp
from .storage import MappingStore

logger = logging.getLogger(__name__)


__all__ = [
    "CalibrationStep",
    "CalibrationSession",
]


CAPTURE_SNAKE = "snake"
CAPTURE_LADDER = "ladder"


class CalibrationStep(Enum):
    """
    Calibration steps.

    States:
        CORNERS: Collecting the four board corners
        CENTERS: Corners complete, centers not generated yet
        TRANSITIONS: Centers available, capturing snakes and ladders
    """
    CORNERS = auto()
    CENTERS = auto()
    TRANSITIONS = auto()


class CalibrationSession:
    """
    Manual calibration state for one board image.

    Holds corners, centers and transitions, and builds a MappingDocument
    from them on demand.
    """

    def __init__(self, store: Optional[MappingStore] = None):
        """
        Initialize an empty session.

        Args:
            store: Optional mapping store used by save()/restore() and
                   by auto-detection to persist accepted results
        """
        self.store = store
        self.step = CalibrationStep.CORNERS
        self.corners: List[Point] = []
        self.centers: List[SquareCenter] = []
        self.snakes: Dict[int, int] = {}
        self.ladders: Dict[int, int] = {}
        self.capture_mode = CAPTURE_SNAKE
        self.status = ""
        self.auto_busy = False
        self._pending_cell: Optional[int] = None

    def _set_status(self, message: str) -> None:
        self.status = message
        logger.info(message)

    # ------------------------------------------------------------------
    # Step 1: corners
    # ------------------------------------------------------------------

    def add_corner(self, x: float, y: float) -> bool:
        """
        Record the next board corner.

        Args:
            x: Click x relative to the board image
            y: Click y relative to the board image

        Returns:
            True if the corner was accepted
        """
        if self.step != CalibrationStep.CORNERS or len(self.corners) >= 4:
            logger.debug(f"Corner click ignored in step {self.step.name}")
            return False

        self.corners.append(Point(float(x), float(y)))
        self._set_status(f"Corner {len(self.corners)}/4 captured.")
        if len(self.corners) == 4:
            self.step = CalibrationStep.CENTERS
        return True

    # ------------------------------------------------------------------
    # Step 2: centers
    # ------------------------------------------------------------------

    def generate_centers(self, width: float, height: float) -> bool:
        """
        Regenerate all 100 square centers from the current corners.

        Args:
            width: Rendered board width
            height: Rendered board height

        Returns:
            True if centers were generated
        """
        if len(self.corners) != 4:
            self._set_status("Please capture all 4 corners first.")
            return False

        self.centers = build_square_centers(self.corners, width, height)
        self.step = CalibrationStep.TRANSITIONS
        self._set_status(f"Generated {len(self.centers)} square centers.")
        return True

    # ------------------------------------------------------------------
    # Step 3: snakes and ladders
    # ------------------------------------------------------------------

    def set_capture_mode(self, mode: str) -> None:
        """
        Switch between capturing snakes and ladders.

        Any half-captured endpoint is discarded.

        Args:
            mode: "snake" or "ladder"

        Raises:
            ValueError: If mode is not recognized
        """
        if mode not in (CAPTURE_SNAKE, CAPTURE_LADDER):
            raise ValueError(f"Unknown capture mode: {mode}. Available: {CAPTURE_SNAKE}, {CAPTURE_LADDER}")

        self.capture_mode = mode
        self._pending_cell = None
        if mode == CAPTURE_SNAKE:
            self._set_status("Capturing SNAKES: click head then tail.")
        else:
            self._set_status("Capturing LADDERS: click bottom then top.")

    @property
    def pending_cell(self) -> Optional[int]:
        """First endpoint of the transition being captured, if any."""
        return self._pending_cell

    def capture_point(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        """
        Capture one snake/ladder endpoint.

        The first click selects the head (snake) or base (ladder), the second
        the tail or top. A second click in the wrong direction is rejected and
        the pending endpoint is discarded.

        Args:
            x: Click x relative to the board image
            y: Click y relative to the board image

        Returns:
            (source, target) once a transition is recorded, else None
        """
        if not self.centers:
            self._set_status("Generate centers first.")
            return None

        cell = nearest_cell(x, y, self.centers)

        if self._pending_cell is None:
            self._pending_cell = cell
            if self.capture_mode == CAPTURE_SNAKE:
                self._set_status(f"Snake head selected at cell {cell}. Now click tail.")
            else:
                self._set_status(f"Ladder bottom selected at cell {cell}. Now click top.")
            return None

        source = self._pending_cell
        self._pending_cell = None

        if self.capture_mode == CAPTURE_SNAKE:
            if cell >= source:
                self._set_status("Invalid snake: tail must be lower than head.")
                return None
            self.snakes[source] = cell
            self._set_status(f"Snake recorded: {source} -> {cell}")
        else:
            if cell <= source:
                self._set_status("Invalid ladder: top must be higher than bottom.")
                return None
            self.ladders[source] = cell
            self._set_status(f"Ladder recorded: {source} -> {cell}")

        return source, cell

    def click(self, x: float, y: float) -> None:
        """Route a board click to the action of the current step."""
        if self.step == CalibrationStep.CORNERS:
            self.add_corner(x, y)
        elif self.step == CalibrationStep.TRANSITIONS:
            self.capture_point(x, y)

    # ------------------------------------------------------------------
    # Clearing
    # ------------------------------------------------------------------

    def clear_corners(self) -> None:
        """Discard corners and the centers derived from them."""
        self.corners = []
        self.centers = []
        self._pending_cell = None
        self.step = CalibrationStep.CORNERS
        self._set_status("Corners cleared.")

    def clear_centers(self) -> None:
        """Discard generated centers."""
        self.centers = []
        self._pending_cell = None
        if len(self.corners) == 4:
            self.step = CalibrationStep.CENTERS
        self._set_status("Centers cleared.")

    def clear_transitions(self) -> None:
        """Discard all captured snakes and ladders."""
        self.snakes = {}
        self.ladders = {}
        self._pending_cell = None
        self._set_status("Snakes and ladders cleared.")

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def to_document(self) -> MappingDocument:
        """Build a mapping document from the current session state."""
        return MappingDocument(
            meta={"note": DEFAULT_NOTE, "updatedAt": utc_timestamp()},
            corners=list(self.corners),
            centers=list(self.centers),
            ladders=dict(self.ladders),
            snakes=dict(self.snakes),
        )

    def load_document(self, document: MappingDocument) -> None:
        """
        Replace the session state with a document's contents.

        The step resumes where the document leaves off: no complete quad ->
        CORNERS, quad without a full center table -> CENTERS, otherwise
        TRANSITIONS.
        """
        self.corners = list(document.corners)
        self.centers = list(document.centers)
        self.snakes = dict(document.snakes)
        self.ladders = dict(document.ladders)
        self._pending_cell = None

        if len(self.corners) != 4:
            self.step = CalibrationStep.CORNERS
        elif len(self.centers) != LAST_CELL:
            self.step = CalibrationStep.CENTERS
        else:
            self.step = CalibrationStep.TRANSITIONS

        logger.debug(f"Loaded mapping: {len(self.ladders)} ladders, {len(self.snakes)} snakes, "
                     f"step {self.step.name}")

    def save(self) -> MappingDocument:
        """
        Persist the current state to the session's store.

        Returns:
            The saved document

        Raises:
            RuntimeError: If the session has no store
        """
        if self.store is None:
            raise RuntimeError("Calibration session has no mapping store")
        document = self.to_document()
        self.store.save(document)
        self._set_status("Saved mapping.")
        return document

    def restore(self) -> bool:
        """
        Load the stored mapping, if any.

        Returns:
            True if a stored mapping was loaded

        Raises:
            MappingFormatError: If the stored mapping is invalid
        """
        if self.store is None:
            return False
        document = self.store.load()
        if document is None:
            return False
        self.load_document(document)
        self._set_status("Restored saved mapping.")
        return True

    def run_auto_detect(self, source, progress_callback=None):
        """
        Run auto-detection and adopt its mapping on success.

        Re-entry while a run is in progress is refused. On success the
        detected mapping replaces the session state and is saved to the
        store, whatever its confidence.

        Args:
            source: Board image (path, URL, PIL Image or array)
            progress_callback: Optional callable receiving stage messages

        Returns:
            DetectionResult, or None if a run was already in progress
        """
        from src.detection import auto_detect_mapping

        if self.auto_busy:
            logger.warning("Auto-detect already running")
            return None

        self.auto_busy = True
        self._set_status("Starting auto-detect...")

        def relay(message: str) -> None:
            self.status = message
            if progress_callback:
                progress_callback(message)

        try:
            result = auto_detect_mapping(source, relay)
            if not result.success:
                self._set_status(result.message or "Auto-detect failed.")
                return result

            self.load_document(result.mapping)
            if self.store is not None:
                self.store.save(result.mapping)
            self._set_status(f"{result.message} Confidence {result.confidence * 100:.0f}%.")
            return result
        finally:
            self.auto_busy = False
