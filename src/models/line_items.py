"""Line item models for work and parts"""

from decimal import Decimal
from typing import Any, Iterable, Iterator, List, Optional
from pydantic import BaseModel, field_validator

from src.errors import ItemIndexError
from src.models.decimal_wire import ZERO, parse_price

EDITABLE_FIELDS = ("description", "price")


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


class LineItem(BaseModel):
    """One billable entry: a description and the price as typed"""
    description: str = ""
    price: str = ""

    @field_validator("description", "price", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _to_text(value)

    @property
    def amount(self) -> Decimal:
        """Numeric price (blank, non-numeric and negative count as zero)"""
        return parse_price(self.price)

    def is_blank(self) -> bool:
        return not self.description.strip() and not self.price.strip()


class LineItemSet:
    """
    Ordered, never-empty list of line items with a derived total.

    Removing the last remaining item is a no-op so there is always an
    editable row.
    """

    def __init__(self, items: Optional[Iterable[LineItem]] = None):
        self._items: List[LineItem] = list(items or [])
        if not self._items:
            self._items.append(LineItem())

    @classmethod
    def of(cls, *rows) -> "LineItemSet":
        """Build a set from ``(description, price)`` pairs"""
        return cls(LineItem(description=d, price=p) for d, p in rows)

    def add(self) -> LineItem:
        """Append a blank item"""
        item = LineItem()
        self._items.append(item)
        return item

    def update(self, index: int, field: str, value: Any) -> LineItem:
        """Set ``description`` or ``price`` of the item at ``index`` in place"""
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown line item field: {field}")
        item = self._get(index)
        setattr(item, field, _to_text(value))
        return item

    def remove(self, index: int) -> None:
        """Remove the item at ``index``; no-op while only one item remains"""
        if len(self._items) <= 1:
            return
        self._get(index)
        del self._items[index]

    def total(self) -> Decimal:
        return sum((item.amount for item in self._items), ZERO)

    def filled_items(self) -> List[LineItem]:
        """Items with a description or a price"""
        return [item for item in self._items if not item.is_blank()]

    def is_blank(self) -> bool:
        return not self.filled_items()

    def _get(self, index: int) -> LineItem:
        if not isinstance(index, int) or not 0 <= index < len(self._items):
            raise ItemIndexError(
                f"Line item index {index} out of range (0..{len(self._items) - 1})"
            )
        return self._items[index]

    def __getitem__(self, index: int) -> LineItem:
        return self._get(index)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LineItemSet):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"LineItemSet({self._items!r})"
