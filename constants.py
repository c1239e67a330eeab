"""
Constants for the .cube LUT generator.

Centralized definitions for grid defaults, .cube file format details,
frame analysis types and terminal styling.
"""

from typing import Tuple


# =============================================================================
# Grid / Strength Defaults
# =============================================================================

DEFAULT_LUT_SIZE = 33          # 33x33x33 = 35,937 sample points
MIN_LUT_SIZE = 2               # index / (size - 1) needs size >= 2
DEFAULT_STRENGTH = 1.0         # full-strength correction


# =============================================================================
# .cube File Format
# =============================================================================

CUBE_COMMENT_PREFIX = "#"
CUBE_TITLE_KEYWORD = "TITLE"
CUBE_SIZE_KEYWORD = "LUT_3D_SIZE"
CUBE_DOMAIN_MIN_KEYWORD = "DOMAIN_MIN"
CUBE_DOMAIN_MAX_KEYWORD = "DOMAIN_MAX"
CUBE_ROW_FORMAT = "%.6f %.6f %.6f"

# Regression comparison: values written with 6 decimals
REFERENCE_TOLERANCE = 1e-6


# =============================================================================
# Frame Analysis
# =============================================================================

# (x1, y1, x2, y2) in pixels
Region = Tuple[int, int, int, int]


# =============================================================================
# Terminal Output
# =============================================================================

THEME_STYLES = {
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "highlight": "bold magenta",
    "muted": "dim",
    "preset": "bold blue",
    "value": "bold cyan",
}
