"""Choose font sizes (and one- or two-line splits) that fit a field box."""

from __future__ import annotations

import math
from typing import Optional

from .config import ELLIPSIS, TWO_LINE_HEIGHT_DIVISOR
from .metrics import AverageWidthTextMetrics, TextMetrics
from .types import FitResult, LabelField


class FontFitter:
    """Fit text into a box of printer dots using an injected measurer."""

    def __init__(self, metrics: Optional[TextMetrics] = None) -> None:
        self.metrics = metrics or AverageWidthTextMetrics()

    def fits(self, text: str, font_size: int, box_width: float) -> bool:
        return self.metrics.measure(text, font_size) <= box_width

    def fit_single_line(
        self,
        text: str,
        box_width: float,
        max_font_size: int,
        min_font_size: int,
    ) -> int:
        """Return the largest size in ``[min, max]`` at which ``text`` fits.

        Falls back to ``min_font_size`` when nothing fits; the caller decides
        whether to truncate.
        """

        if not text.strip():
            return max_font_size

        best = min_font_size
        low, high = min_font_size, max_font_size
        while low <= high:
            mid = (low + high) // 2
            if self.fits(text, mid, box_width):
                best = mid
                low = mid + 1
            else:
                high = mid - 1
        return best

    def fit_two_line(
        self,
        text: str,
        box_width: float,
        box_height: Optional[float],
        max_font_size: int,
        min_font_size: int,
    ) -> FitResult:
        """Return the best of the single-line fit and every two-line split."""

        if not text.strip():
            return FitResult(font_size=max_font_size, lines=(text,))

        single_size = self.fit_single_line(
            text, box_width, max_font_size, min_font_size
        )
        single = FitResult(font_size=single_size, lines=(text,))

        words = text.split()
        if len(words) < 2:
            return self._truncate(single, box_width)

        height_cap = (
            math.floor(box_height / TWO_LINE_HEIGHT_DIVISOR)
            if box_height is not None
            else max_font_size
        )

        line_fits: dict[str, int] = {}

        def line_fit(line: str) -> int:
            size = line_fits.get(line)
            if size is None:
                size = self.fit_single_line(
                    line, box_width, max_font_size, min_font_size
                )
                line_fits[line] = size
            return size

        best_size = -1
        best_lines: tuple[str, str] = ("", "")
        for split in range(1, len(words)):
            first = " ".join(words[:split])
            second = " ".join(words[split:])
            size = min(line_fit(first), line_fit(second), height_cap)
            size = max(size, min_font_size)
            if size > best_size:
                best_size = size
                best_lines = (first, second)

        two_line = FitResult(
            font_size=best_size, lines=best_lines, is_two_line=True
        )
        if self._prefer_two_lines(single, two_line, box_width):
            return self._truncate(two_line, box_width)
        return self._truncate(single, box_width)

    def fit_optimal(
        self,
        text: str,
        box_width: float,
        max_font_size: int,
        min_font_size: int,
        allow_two_lines: bool = False,
        box_height: Optional[float] = None,
    ) -> FitResult:
        """Fit ``text`` on one line, or two when allowed and strictly better.

        Never raises; text that overflows at the minimum size is truncated
        with an ellipsis.
        """

        if not text.strip():
            return FitResult(font_size=max_font_size, lines=(text,))

        if allow_two_lines:
            return self.fit_two_line(
                text, box_width, box_height, max_font_size, min_font_size
            )

        size = self.fit_single_line(
            text, box_width, max_font_size, min_font_size
        )
        return self._truncate(FitResult(font_size=size, lines=(text,)), box_width)

    def fit_field(self, field: LabelField, text: str) -> FitResult:
        """Fit ``text`` into ``field``; two lines when the box is tall enough."""

        allow_two_lines = (
            field.height >= TWO_LINE_HEIGHT_DIVISOR * field.min_font_size
        )
        return self.fit_optimal(
            text,
            field.width,
            field.max_font_size,
            field.min_font_size,
            allow_two_lines=allow_two_lines,
            box_height=field.height,
        )

    def truncate_line(self, line: str, font_size: int, box_width: float) -> str:
        """Drop trailing characters and append an ellipsis until it fits.

        At least one character of ``line`` is always kept.
        """

        if self.fits(line, font_size, box_width):
            return line

        kept = line
        while len(kept) > 1 and not self.fits(kept + ELLIPSIS, font_size, box_width):
            kept = kept[:-1]
        kept = kept.rstrip() or kept
        return kept + ELLIPSIS

    def _prefer_two_lines(
        self,
        single: FitResult,
        two_line: FitResult,
        box_width: float,
    ) -> bool:
        if two_line.font_size > single.font_size:
            return True
        if two_line.font_size < single.font_size:
            return False
        size = single.font_size
        single_overflows = not self.fits(single.lines[0], size, box_width)
        split_fits = all(self.fits(line, size, box_width) for line in two_line.lines)
        return single_overflows and split_fits

    def _truncate(self, result: FitResult, box_width: float) -> FitResult:
        lines = tuple(
            self.truncate_line(line, result.font_size, box_width)
            for line in result.lines
        )
        if lines == result.lines:
            return result
        return FitResult(
            font_size=result.font_size,
            lines=lines,
            is_two_line=result.is_two_line,
        )


__all__ = ["FontFitter"]
