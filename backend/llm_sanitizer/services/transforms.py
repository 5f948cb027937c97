"""Structural fixes applied to the parsed value, after text repair succeeded."""

from __future__ import annotations

import re
from typing import Any, Callable

from llm_sanitizer.core.logging import get_logger
from llm_sanitizer.domain.property_names import DEFAULT_TABLES, PropertyNameTables

logger = get_logger("transforms")


_NUMBER_IN_TEXT_RE = re.compile(
    r"^\s*(?:~|\u2248|about|approx\.?|approximately|around)?\s*(?P<number>-?\d+(?:\.\d+)?)\s*[A-Za-z ]*$",
    re.IGNORECASE,
)


def unwrap_schema_envelope(value: Any) -> tuple[Any, bool]:
    """``{"type": "object", "properties": {...}}`` becomes the ``properties`` object."""
    if not isinstance(value, dict) or value.get("type") != "object":
        return value, False
    properties = value.get("properties")
    if isinstance(properties, dict) and properties:
        return properties, True
    return value, False


def _canonical_key(key: Any, tables: PropertyNameTables) -> str | None:
    # Parsed keys are only renamed towards a known property or via the typo table.
    if not isinstance(key, str):
        return None
    canonical = tables.canonical_for_typo(key)
    if canonical and (key in tables.typo_corrections or canonical in tables.known_properties):
        return canonical
    return None


def fix_key_typos(value: Any, tables: PropertyNameTables = DEFAULT_TABLES) -> tuple[Any, bool]:
    """Rename keys such as ``type_`` unless the canonical key is already present."""
    if isinstance(value, list):
        items = [fix_key_typos(item, tables) for item in value]
        return [item for item, _ in items], any(changed for _, changed in items)
    if not isinstance(value, dict):
        return value, False

    changed = False
    result: dict[str, Any] = {}
    for key, item in value.items():
        fixed_item, item_changed = fix_key_typos(item, tables)
        changed = changed or item_changed
        canonical = _canonical_key(key, tables)
        if canonical and canonical not in value and canonical not in result:
            result[canonical] = fixed_item
            changed = True
        else:
            result[key] = fixed_item
    return result, changed


def _to_number(text: str) -> int | float | None:
    match = _NUMBER_IN_TEXT_RE.match(text)
    if not match:
        return None
    number = match.group("number")
    return float(number) if "." in number else int(number)


def coerce_numeric_properties(value: Any, tables: PropertyNameTables = DEFAULT_TABLES) -> tuple[Any, bool]:
    """``"linesOfCode": "~19 lines"`` becomes ``19`` for configured numeric keys."""
    if isinstance(value, list):
        items = [coerce_numeric_properties(item, tables) for item in value]
        return [item for item, _ in items], any(changed for _, changed in items)
    if not isinstance(value, dict):
        return value, False

    changed = False
    result: dict[str, Any] = {}
    for key, item in value.items():
        if isinstance(key, str) and key.lower() in tables.numeric_properties and isinstance(item, str):
            number = _to_number(item)
            if number is not None:
                result[key] = number
                changed = True
                continue
        fixed_item, item_changed = coerce_numeric_properties(item, tables)
        changed = changed or item_changed
        result[key] = fixed_item
    return result, changed


PostParseTransform = Callable[[Any, PropertyNameTables], tuple[Any, bool]]

POST_PARSE_TRANSFORMS: tuple[tuple[str, PostParseTransform], ...] = (
    ("unwrap_schema_envelope", lambda value, _tables: unwrap_schema_envelope(value)),
    ("fix_key_typos", fix_key_typos),
    ("coerce_numeric_properties", coerce_numeric_properties),
)


def apply_post_parse_transforms(
    value: Any,
    tables: PropertyNameTables = DEFAULT_TABLES,
) -> tuple[Any, list[str]]:
    """Run every transform in order; one that hits the recursion limit leaves the value as it was."""
    applied: list[str] = []
    for name, transform in POST_PARSE_TRANSFORMS:
        try:
            value, changed = transform(value, tables)
        except RecursionError:
            logger.warning("post_parse_transform_skipped", transform=name, reason="nesting_too_deep")
            continue
        if changed:
            applied.append(name)
    return value, applied
