"""Resolve ``{{TOKEN}}`` placeholders in a compiled ZPL template."""

from __future__ import annotations

import logging
import re
from typing import Optional

from .compiler import (
    COPIES_TOKEN,
    DARKNESS_TOKEN,
    PLACEHOLDERS,
    SPEED_TOKEN,
    resolve_field_value,
)
from .types import FieldValueMap, PrintSettings, normalize_field_values
from .zpl import escape_field_data

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\{\{([A-Z]+)\}\}")


def template_substitutions(
    values: FieldValueMap,
    settings: Optional[PrintSettings] = None,
) -> dict[str, str]:
    """Map token names to their replacement text."""

    settings = settings or PrintSettings()
    resolved = normalize_field_values(values)

    substitutions = {
        name: escape_field_data(resolve_field_value(kind, resolved))
        for kind, name in PLACEHOLDERS.items()
    }
    substitutions[COPIES_TOKEN] = str(settings.copies)
    substitutions[SPEED_TOKEN] = str(settings.speed)
    substitutions[DARKNESS_TOKEN] = str(settings.darkness)
    return substitutions


def fill_template(
    template: str,
    values: FieldValueMap,
    settings: Optional[PrintSettings] = None,
) -> str:
    """Replace every known token in ``template`` in a single pass.

    Unknown tokens are left as they are. Replacement text is never scanned
    again, so a value that itself looks like ``{{SKU}}`` is printed verbatim.
    """

    substitutions = template_substitutions(values, settings)

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        replacement = substitutions.get(name)
        if replacement is None:
            logger.debug("Leaving unknown template token %s", match.group(0))
            return match.group(0)
        return replacement

    return _TOKEN_RE.sub(_replace, template)


__all__ = ["fill_template", "template_substitutions"]
