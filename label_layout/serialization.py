"""Convert the editor's JSON layout documents to and from label types."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from .config import SUPPORTED_DPIS
from .types import (
    Alignment,
    FieldKind,
    FitResult,
    LabelField,
    LabelLayout,
    PrintSettings,
)

logger = logging.getLogger(__name__)


def parse_int(data: Mapping[str, Any], key: str, default: Optional[int] = None) -> int:
    value = data.get(key, default)
    if value is None:
        raise ValueError(f"Missing required key '{key}'.")
    if isinstance(value, bool):
        raise ValueError(f"'{key}' must be an integer, got {value!r}.")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ValueError(f"'{key}' must be an integer, got {value!r}.") from None
    if not isinstance(value, int):
        raise ValueError(f"'{key}' must be an integer, got {value!r}.")
    return value


def parse_bool(data: Mapping[str, Any], key: str, default: bool) -> bool:
    """Return ``data[key]`` as a bool; only JSON ``true``/``false`` are accepted."""

    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be true or false, got {value!r}.")
    return value


def _as_enum(enum_cls: Any, value: Any, what: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(
            f"Unknown {what} {value!r}. Expected one of: {allowed}"
        ) from None


def field_from_dict(data: Mapping[str, Any]) -> LabelField:
    """Build a :class:`LabelField` from its camelCase JSON form."""

    if not isinstance(data, Mapping):
        raise ValueError(f"Field entries must be objects, got {data!r}.")

    kind_value = data.get("fieldKey", data.get("fieldKind"))
    if kind_value is None:
        raise ValueError("Field is missing 'fieldKey'.")

    return LabelField(
        id=str(data.get("id") or kind_value),
        field_kind=_as_enum(FieldKind, kind_value, "field kind"),
        x=parse_int(data, "x"),
        y=parse_int(data, "y"),
        width=parse_int(data, "width"),
        height=parse_int(data, "height"),
        alignment=_as_enum(Alignment, data.get("alignment", "left"), "alignment"),
        max_font_size=parse_int(data, "maxFontSize"),
        min_font_size=parse_int(data, "minFontSize"),
        enabled=parse_bool(data, "enabled", True),
    )


def layout_from_dict(data: Mapping[str, Any]) -> LabelLayout:
    """Build a :class:`LabelLayout`; raises ``ValueError`` on malformed input."""

    if not isinstance(data, Mapping):
        raise ValueError("Layout document must be a JSON object.")

    dpi = parse_int(data, "dpi", 203)
    if dpi not in SUPPORTED_DPIS:
        supported = ", ".join(str(d) for d in SUPPORTED_DPIS)
        raise ValueError(f"Unsupported dpi {dpi}. Supported: {supported}")

    raw_fields = data.get("fields") or []
    if not isinstance(raw_fields, list):
        raise ValueError("'fields' must be a list.")

    fields = tuple(field_from_dict(item) for item in raw_fields)
    ids = [f.id for f in fields]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise ValueError(f"Duplicate field ids: {', '.join(duplicates)}")

    return LabelLayout(
        width_dots=parse_int(data, "widthDots"),
        height_dots=parse_int(data, "heightDots"),
        dpi=dpi,
        label_top_offset=parse_int(data, "labelTopOffset", 0),
        label_left_offset=parse_int(data, "labelLeftOffset", 0),
        fields=fields,
        id=str(data.get("id") or ""),
        name=str(data.get("name") or ""),
    )


def field_to_dict(field: LabelField) -> Dict[str, Any]:
    return {
        "id": field.id,
        "fieldKey": field.field_kind.value,
        "x": field.x,
        "y": field.y,
        "width": field.width,
        "height": field.height,
        "alignment": field.alignment.value,
        "maxFontSize": field.max_font_size,
        "minFontSize": field.min_font_size,
        "enabled": field.enabled,
    }


def layout_to_dict(layout: LabelLayout) -> Dict[str, Any]:
    return {
        "id": layout.id,
        "name": layout.name,
        "widthDots": layout.width_dots,
        "heightDots": layout.height_dots,
        "dpi": layout.dpi,
        "labelTopOffset": layout.label_top_offset,
        "labelLeftOffset": layout.label_left_offset,
        "fields": [field_to_dict(f) for f in layout.fields],
    }


def fit_result_to_dict(result: FitResult) -> Dict[str, Any]:
    """JSON form of a fit, as consumed by the editor preview."""

    return {
        "fontSize": result.font_size,
        "lines": list(result.lines),
        "isTwoLine": result.is_two_line,
        "isTruncated": result.is_truncated,
    }


def field_values_from_dict(data: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Return string values for known field kinds; other keys are ignored."""

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError("Field values must be a JSON object.")

    known = {kind.value for kind in FieldKind}
    values: Dict[str, str] = {}
    for key, value in data.items():
        if key not in known:
            logger.debug("Ignoring unknown field value key %r", key)
            continue
        values[key] = "" if value is None else str(value)
    return values


def settings_from_dict(
    data: Optional[Mapping[str, Any]],
    defaults: Optional[PrintSettings] = None,
) -> PrintSettings:
    """Build :class:`PrintSettings`, falling back to ``defaults`` per key."""

    base = defaults or PrintSettings()
    if not data:
        return base
    if not isinstance(data, Mapping):
        raise ValueError("Print settings must be a JSON object.")
    return PrintSettings(
        copies=parse_int(data, "copies", base.copies),
        speed=parse_int(data, "speed", base.speed),
        darkness=parse_int(data, "darkness", base.darkness),
    )


__all__ = [
    "field_from_dict",
    "field_to_dict",
    "field_values_from_dict",
    "fit_result_to_dict",
    "layout_from_dict",
    "layout_to_dict",
    "parse_bool",
    "parse_int",
    "settings_from_dict",
]
