from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Union

from .config import (
    DEFAULT_COPIES,
    DEFAULT_DARKNESS,
    DEFAULT_PRINT_SPEED,
    ELLIPSIS,
)


class FieldKind(str, Enum):
    """Semantic role of a layout field."""

    TITLE = "title"
    PRICE = "price"
    SKU = "sku"
    CONDITION = "condition"
    BARCODE = "barcode"
    SET = "set"
    CARD_NUMBER = "cardNumber"
    YEAR = "year"
    VENDOR = "vendor"


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class LabelField:
    """A positioned, sized field on the label, in printer dots."""

    id: str
    field_kind: FieldKind
    x: int
    y: int
    width: int
    height: int
    alignment: Alignment = Alignment.LEFT
    max_font_size: int = 30
    min_font_size: int = 12
    enabled: bool = True

    @property
    def is_barcode(self) -> bool:
        return self.field_kind is FieldKind.BARCODE


@dataclass(frozen=True)
class LabelLayout:
    """Printable area and the fields placed on it."""

    width_dots: int
    height_dots: int
    dpi: int = 203
    label_top_offset: int = 0
    label_left_offset: int = 0
    fields: tuple[LabelField, ...] = field(default_factory=tuple)
    id: str = ""
    name: str = ""


@dataclass(frozen=True)
class PrintSettings:
    """Per-job printer settings carried into the ZPL header and footer."""

    copies: int = DEFAULT_COPIES
    speed: int = DEFAULT_PRINT_SPEED
    darkness: int = DEFAULT_DARKNESS


@dataclass(frozen=True)
class FitResult:
    """Chosen font size and the line(s) to draw at that size."""

    font_size: int
    lines: tuple[str, ...]
    is_two_line: bool = False

    @property
    def is_truncated(self) -> bool:
        return any(line.endswith(ELLIPSIS) for line in self.lines)


FieldValueMap = Mapping[Union[FieldKind, str], Optional[str]]


def normalize_field_values(values: FieldValueMap | None) -> dict[FieldKind, str]:
    """Return ``values`` keyed by :class:`FieldKind`, dropping unknown keys."""

    normalized: dict[FieldKind, str] = {}
    for key, value in (values or {}).items():
        try:
            kind = FieldKind(key)
        except ValueError:
            continue
        normalized[kind] = value or ""
    return normalized


__all__ = [
    "Alignment",
    "FieldKind",
    "FieldValueMap",
    "FitResult",
    "LabelField",
    "LabelLayout",
    "PrintSettings",
    "normalize_field_values",
]
