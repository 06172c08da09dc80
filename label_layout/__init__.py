"""Compile label layouts into ZPL for thermal label printers."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from .compiler import compile_layout, compile_template, placeholder_for
from .fitting import FontFitter
from .metrics import (
    AverageWidthTextMetrics,
    MemoizedTextMetrics,
    ReportLabTextMetrics,
    TextMetrics,
)
from .template_fill import fill_template
from .types import (
    Alignment,
    FieldKind,
    FitResult,
    LabelField,
    LabelLayout,
    PrintSettings,
)

_METRICS_NAMES = {"average", "reportlab"}


def get_text_metrics(
    name: str,
    font_name: Optional[str] = None,
    font_path: str | Path | None = None,
) -> TextMetrics:
    """Instantiate the text measurement backend called ``name``."""

    key = name.lower()
    if key not in _METRICS_NAMES:
        available = ", ".join(sorted(_METRICS_NAMES))
        raise ValueError(
            f"Unknown text metrics '{name}'. Available: {available}"
        )
    if key == "reportlab":
        return ReportLabTextMetrics(font_name=font_name, font_path=font_path)
    return AverageWidthTextMetrics()


def list_text_metrics() -> Iterable[str]:
    """Return the text metrics identifiers."""

    return sorted(_METRICS_NAMES)


__all__ = [
    "Alignment",
    "AverageWidthTextMetrics",
    "FieldKind",
    "FitResult",
    "FontFitter",
    "LabelField",
    "LabelLayout",
    "MemoizedTextMetrics",
    "PrintSettings",
    "ReportLabTextMetrics",
    "TextMetrics",
    "compile_layout",
    "compile_template",
    "fill_template",
    "get_text_metrics",
    "list_text_metrics",
    "placeholder_for",
]
