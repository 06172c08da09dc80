"""Compile a label layout into a ZPL document or a reusable ZPL template."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .config import ENCODING_CODE
from .fitting import FontFitter
from .types import (
    FieldKind,
    FieldValueMap,
    LabelField,
    LabelLayout,
    PrintSettings,
    normalize_field_values,
)
from .zpl import emit_barcode_field, emit_text_field

logger = logging.getLogger(__name__)

PLACEHOLDERS: dict[FieldKind, str] = {
    FieldKind.TITLE: "CARDNAME",
    FieldKind.SKU: "SKU",
    FieldKind.PRICE: "PRICE",
    FieldKind.CONDITION: "CONDITION",
    FieldKind.BARCODE: "BARCODE",
    FieldKind.SET: "SETNAME",
    FieldKind.CARD_NUMBER: "CARDNUMBER",
    FieldKind.YEAR: "YEAR",
    FieldKind.VENDOR: "VENDOR",
}

COPIES_TOKEN = "COPIES"
SPEED_TOKEN = "SPEED"
DARKNESS_TOKEN = "DARKNESS"


def token(name: str) -> str:
    return "{{" + name + "}}"


def placeholder_for(kind: FieldKind) -> str:
    """Return the ``{{TOKEN}}`` standing in for ``kind`` in templates."""

    return token(PLACEHOLDERS[kind])


def resolve_field_value(kind: FieldKind, values: dict[FieldKind, str]) -> str:
    """Return the display value for ``kind``; barcodes fall back to the SKU."""

    value = values.get(kind, "")
    if not value and kind is FieldKind.BARCODE:
        value = values.get(FieldKind.SKU, "")
        if value:
            logger.debug("Barcode value empty; encoding SKU %r instead", value)
    return value


def ordered_fields(fields: Iterable[LabelField]) -> List[LabelField]:
    """Enabled fields, top to bottom (stable for equal ``y``)."""

    return sorted((f for f in fields if f.enabled), key=lambda f: f.y)


def compile_layout(
    layout: LabelLayout,
    values: FieldValueMap,
    settings: Optional[PrintSettings] = None,
    fitter: Optional[FontFitter] = None,
) -> str:
    """Return the ZPL document for ``layout`` filled with ``values``."""

    settings = settings or PrintSettings()
    fitter = fitter or FontFitter()
    resolved = normalize_field_values(values)

    lines = _header(layout, str(settings.speed), str(settings.darkness))
    for field in ordered_fields(layout.fields):
        value = resolve_field_value(field.field_kind, resolved)
        if not value:
            logger.debug("Skipping field %s (%s): empty value",
                         field.id, field.field_kind.value)
            continue
        if field.is_barcode:
            lines.extend(emit_barcode_field(field, value))
        else:
            lines.extend(emit_text_field(field, value, fitter))
    lines.extend(_footer(str(settings.copies)))
    return "\n".join(lines)


def compile_template(
    layout: LabelLayout,
    fitter: Optional[FontFitter] = None,
) -> str:
    """Return a ZPL template with ``{{TOKEN}}`` placeholders for data and settings."""

    fitter = fitter or FontFitter()

    lines = _header(layout, token(SPEED_TOKEN), token(DARKNESS_TOKEN))
    for field in ordered_fields(layout.fields):
        placeholder = placeholder_for(field.field_kind)
        if field.is_barcode:
            lines.extend(emit_barcode_field(field, placeholder))
        else:
            lines.extend(
                emit_text_field(field, placeholder, fitter, placeholder=True)
            )
    lines.extend(_footer(token(COPIES_TOKEN)))
    return "\n".join(lines)


def _header(layout: LabelLayout, speed: str, darkness: str) -> List[str]:
    return [
        "^XA",
        f"^CI{ENCODING_CODE}",
        f"^PW{layout.width_dots}",
        f"^LL{layout.height_dots}",
        f"^PR{speed}",
        f"^MD{darkness}",
        "^MNY",
        "^LH0,0",
        f"^LT{layout.label_top_offset}",
        f"^LS{layout.label_left_offset}",
    ]


def _footer(copies: str) -> List[str]:
    return [f"^PQ{copies}", "^XZ"]


__all__ = [
    "COPIES_TOKEN",
    "DARKNESS_TOKEN",
    "PLACEHOLDERS",
    "SPEED_TOKEN",
    "compile_layout",
    "compile_template",
    "ordered_fields",
    "placeholder_for",
    "resolve_field_value",
]
