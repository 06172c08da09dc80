"""Policy constants shared by the fitter, barcode geometry and ZPL emitter."""

from __future__ import annotations

# Average glyph advance as a fraction of the font height, used by the
# headless text metrics.
AVERAGE_CHAR_WIDTH_RATIO = 0.6

# ^A0 character width as a fraction of the character height.
FONT_ASPECT_RATIO = 0.6

# Two lines with ~1.2x leading need 2.4x the font height.
TWO_LINE_HEIGHT_DIVISOR = 2.4

ELLIPSIS = "…"

# Code128 module widths (dots) tried from widest to narrowest.
MODULE_WIDTHS = (2, 3, 4)

# Modules per encoded character and for start + check + stop symbols.
CODE128_CHAR_MODULES = 11
CODE128_OVERHEAD_MODULES = 35

DEFAULT_COPIES = 1
DEFAULT_PRINT_SPEED = 4
DEFAULT_DARKNESS = 10

SUPPORTED_DPIS = (203, 300)

# ^CI28 selects UTF-8.
ENCODING_CODE = 28

__all__ = [
    "AVERAGE_CHAR_WIDTH_RATIO",
    "CODE128_CHAR_MODULES",
    "CODE128_OVERHEAD_MODULES",
    "DEFAULT_COPIES",
    "DEFAULT_DARKNESS",
    "DEFAULT_PRINT_SPEED",
    "ELLIPSIS",
    "ENCODING_CODE",
    "FONT_ASPECT_RATIO",
    "MODULE_WIDTHS",
    "SUPPORTED_DPIS",
    "TWO_LINE_HEIGHT_DIVISOR",
]
