"""Code128 size estimates for placing barcodes inside their field box.

These are estimates only; the printer does the actual encoding.
"""

from __future__ import annotations

from .config import (
    CODE128_CHAR_MODULES,
    CODE128_OVERHEAD_MODULES,
    MODULE_WIDTHS,
)
from .types import Alignment


def estimate_symbol_width_dots(data_length: int, module_width: int) -> int:
    """Approximate rendered Code128 width for ``data_length`` characters."""

    modules = max(data_length, 0) * CODE128_CHAR_MODULES + CODE128_OVERHEAD_MODULES
    return modules * module_width


def choose_module_width(field_width: int, data_length: int) -> int:
    """Return the widest module width whose symbol still fits ``field_width``.

    Overflow is tolerated: the narrowest width is used when none fit.
    """

    for module_width in sorted(MODULE_WIDTHS, reverse=True):
        if estimate_symbol_width_dots(data_length, module_width) <= field_width:
            return module_width
    return min(MODULE_WIDTHS)


def compute_offset(
    field_width: int,
    symbol_width: int,
    alignment: Alignment,
) -> int:
    """Horizontal offset from the field origin that aligns the symbol."""

    slack = field_width - symbol_width
    if alignment is Alignment.CENTER:
        return max(0, slack // 2)
    if alignment is Alignment.RIGHT:
        return max(0, slack)
    return 0


__all__ = [
    "choose_module_width",
    "compute_offset",
    "estimate_symbol_width_dots",
]
