"""ZPL statements for individual label fields."""

from __future__ import annotations

import math
import re
from typing import List

from .barcode import choose_module_width, compute_offset, estimate_symbol_width_dots
from .config import FONT_ASPECT_RATIO
from .fitting import FontFitter
from .types import Alignment, LabelField

# ^FB line break.
FIELD_BLOCK_LINE_BREAK = "\\&"

_JUSTIFICATION = {
    Alignment.LEFT: "L",
    Alignment.CENTER: "C",
    Alignment.RIGHT: "R",
}

_BRACES_RE = re.compile(r"[{}]")


def escape_field_data(text: str) -> str:
    """Replace the ZPL command prefixes ``^`` and ``~`` with hex escapes."""

    return text.replace("^", "_5E").replace("~", "_7E")


def font_width_for(font_height: int) -> int:
    return math.floor(font_height * FONT_ASPECT_RATIO)


def emit_text_field(
    field: LabelField,
    text: str,
    fitter: FontFitter,
    *,
    placeholder: bool = False,
) -> List[str]:
    """Return the statements that print ``text`` inside ``field``.

    With ``placeholder`` the text is a template token: the font is still
    fitted to it, but the token itself is emitted untouched.
    """

    fit = fitter.fit_field(field, text)
    justification = _JUSTIFICATION[field.alignment]

    lines = [f"^FO{field.x},{field.y}"]
    if fit.is_two_line:
        lines.append(f"^FB{field.width},2,0,{justification}")
    elif field.alignment is not Alignment.LEFT:
        lines.append(f"^FB{field.width},1,0,{justification}")
    lines.append(f"^A0N,{fit.font_size},{font_width_for(fit.font_size)}")

    if placeholder:
        data = text
    else:
        data = FIELD_BLOCK_LINE_BREAK.join(
            escape_field_data(line) for line in fit.lines
        )
    lines.append(f"^FD{data}^FS")
    return lines


def emit_barcode_field(field: LabelField, data: str) -> List[str]:
    """Return the statements for a Code128 symbol aligned within ``field``."""

    # Placeholder braces never reach the printer; keep them out of the estimate.
    estimate_data = _BRACES_RE.sub("", data)
    module_width = choose_module_width(field.width, len(estimate_data))
    symbol_width = estimate_symbol_width_dots(len(estimate_data), module_width)
    offset = compute_offset(field.width, symbol_width, field.alignment)

    return [
        f"^FO{field.x + offset},{field.y}",
        f"^BY{module_width}",
        f"^BCN,{max(field.height, 1)},N,N,N",
        f"^FD{escape_field_data(data)}^FS",
    ]


__all__ = [
    "FIELD_BLOCK_LINE_BREAK",
    "emit_barcode_field",
    "emit_text_field",
    "escape_field_data",
    "font_width_for",
]
