"""Conversion between stored work/parts columns and line item sets

Stored values come in three shapes:

- a JSON array of ``{"description", "price"}`` objects (current format)
- free text written before work and parts were itemized
- null / empty

``decode`` normalizes all of them into a non-empty ``LineItemSet`` and never
raises; ``encode`` always writes the JSON array format.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, List

from src.errors import ParseError
from src.models.decimal_wire import decimal_to_wire
from src.models.line_items import LineItem, LineItemSet

logger = logging.getLogger(__name__)


def _row_to_item(row: Any) -> LineItem:
    if isinstance(row, Mapping):
        return LineItem(
            description=row.get("description", ""),
            price=row.get("price", ""),
        )
    # Bare values inside the array are kept as descriptions
    return LineItem(description=row)


def _parse_rows(raw: str) -> List[Any]:
    try:
        data = json.loads(raw)
    except (ValueError, TypeError) as e:
        raise ParseError(f"Not a JSON document: {e}") from e
    if not isinstance(data, list):
        raise ParseError(f"Expected a JSON array, got {type(data).__name__}")
    return data


def decode(raw: Any) -> LineItemSet:
    """
    Normalize a stored work/parts value into a line item set.

    Args:
        raw: JSON text, legacy free text, an already decoded list, or None

    Returns:
        LineItemSet with at least one item
    """
    if raw is None:
        return LineItemSet()

    if isinstance(raw, (list, tuple)):
        return LineItemSet(_row_to_item(row) for row in raw)

    text = raw if isinstance(raw, str) else str(raw)
    if not text.strip():
        return LineItemSet()

    try:
        rows = _parse_rows(text)
    except ParseError as e:
        logger.debug(f"Treating stored value as legacy text: {e}")
        return LineItemSet([LineItem(description=text, price="")])

    return LineItemSet(_row_to_item(row) for row in rows)


def encode(items: LineItemSet) -> str:
    """Serialize a line item set to its stored JSON array form"""
    return json.dumps(
        [
            {
                "description": item.description,
                "price": decimal_to_wire(item.amount),
            }
            for item in items
        ],
        ensure_ascii=False,
    )
