"""Text measurement backends used by the font fitter."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont as ReportLabTTFont

from .config import AVERAGE_CHAR_WIDTH_RATIO


class TextMetrics(ABC):
    """Width of a string at a given font size, both in dots."""

    @abstractmethod
    def measure(self, text: str, font_size: float) -> float:
        """Return the rendered width of ``text`` at ``font_size``.

        Implementations must be non-decreasing in ``font_size`` and in the
        length of ``text``.
        """


class AverageWidthTextMetrics(TextMetrics):
    """Deterministic approximation: every glyph advances ``ratio * size``."""

    def __init__(self, ratio: float = AVERAGE_CHAR_WIDTH_RATIO) -> None:
        self.ratio = ratio

    def measure(self, text: str, font_size: float) -> float:
        return len(text) * font_size * self.ratio


class ReportLabTextMetrics(TextMetrics):
    """Glyph-advance totals from ReportLab's font metrics.

    ``font_name`` may be one of the standard PDF fonts (Helvetica, Courier,
    ...) or, together with ``font_path``, a TrueType font registered on first
    use.
    """

    def __init__(
        self,
        font_name: Optional[str] = None,
        font_path: str | Path | None = None,
    ) -> None:
        if font_path is not None:
            path = Path(font_path)
            font_name = _REGISTRY.register(font_name or path.stem, path)
        self.font_name = font_name or "Helvetica"
        try:
            pdfmetrics.getFont(self.font_name)
        except KeyError:
            raise ValueError(
                f"Unknown font '{self.font_name}'; pass a standard PDF font "
                "name or a TrueType font_path."
            ) from None

    def measure(self, text: str, font_size: float) -> float:
        return pdfmetrics.stringWidth(text, self.font_name, font_size)


class MemoizedTextMetrics(TextMetrics):
    """Cache ``measure`` results by ``(text, font_size)``.

    Meant to live for one interaction, e.g. a field being dragged in the
    editor; drop the instance afterwards.
    """

    def __init__(self, inner: TextMetrics) -> None:
        self.inner = inner
        self._cache: dict[tuple[str, float], float] = {}

    def measure(self, text: str, font_size: float) -> float:
        key = (text, font_size)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        width = self.inner.measure(text, font_size)
        self._cache[key] = width
        return width

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


class _FontRegistry:
    """Register TrueType files with ReportLab once per process."""

    def __init__(self) -> None:
        self._registered: dict[str, Path] = {}

    def register(self, font_name: str, font_path: Path) -> str:
        resolved = font_path.resolve()
        registered_path = self._registered.get(font_name)
        if registered_path is not None:
            if registered_path != resolved:
                raise ValueError(
                    f"Font '{font_name}' is already registered from "
                    f"'{registered_path}', not '{resolved}'."
                )
            return font_name
        if not font_path.exists():
            raise FileNotFoundError(
                f"Font file '{font_path}' for '{font_name}' is missing."
            )
        pdfmetrics.registerFont(ReportLabTTFont(font_name, str(font_path)))
        self._registered[font_name] = resolved
        return font_name


_REGISTRY = _FontRegistry()


__all__ = [
    "AverageWidthTextMetrics",
    "MemoizedTextMetrics",
    "ReportLabTextMetrics",
    "TextMetrics",
]
