"""
Mapping Module for Snakes & Ladders

Coordinate mapping between a board image and the 100 logical cells.

Usage:
    from src.mapping import build_square_centers, nearest_cell

    # Corners in order: bottom-left, bottom-right, top-right, top-left
    corners = [(0, 100), (100, 100), (100, 0), (0, 0)]
    centers = build_square_centers(corners, 100, 100)

    # Click-to-cell lookup
    cell = nearest_cell(52, 48, centers)

Persistence:
    store = MappingStore()
    store.save(document)
    document = store.load()
"""

# Public API - Boustrophedon indexing
from .board import (
    BOARD_ROWS,
    BOARD_COLS,
    FIRST_CELL,
    LAST_CELL,
    cell_from_row_col,
    row_col_from_cell,
)

# Public API - Bilinear mapping
from .bilinear import (
    Point,
    NewtonState,
    BilinearMap,
    newton_step,
    solve_coefficients,
)

# Public API - Square centers
from .centers import (
    SquareCenter,
    build_square_centers,
    nearest_cell,
)

# Public API - Mapping document and storage
from .document import (
    MAPPING_VERSION,
    MappingDocument,
    MappingFormatError,
    make_empty_mapping,
)
from .storage import (
    MAPPING_STORAGE_KEY,
    MappingStore,
    export_mapping,
    import_mapping,
)

# Manual calibration
from .calibration import CalibrationSession, CalibrationStep

__all__ = [
    # Indexing
    "BOARD_ROWS",
    "BOARD_COLS",
    "FIRST_CELL",
    "LAST_CELL",
    "cell_from_row_col",
    "row_col_from_cell",
    # Bilinear mapping
    "Point",
    "NewtonState",
    "BilinearMap",
    "newton_step",
    "solve_coefficients",
    # Centers
    "SquareCenter",
    "build_square_centers",
    "nearest_cell",
    # Document
    "MAPPING_VERSION",
    "MappingDocument",
    "MappingFormatError",
    "make_empty_mapping",
    # Storage
    "MAPPING_STORAGE_KEY",
    "MappingStore",
    "export_mapping",
    "import_mapping",
    # Calibration
    "CalibrationSession",
    "CalibrationStep",
]
