"""Vehicle record data model"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from src.errors import RecordValidationError
from src.models.decimal_wire import ZERO, parse_price
from src.models.line_items import LineItem, LineItemSet


class RecordStatus(str, Enum):
    """Repair status (values are the stored wire strings)"""
    IN_PROGRESS = "En proceso"
    DONE = "Terminado"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "RecordStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.IN_PROGRESS

    def toggled(self) -> "RecordStatus":
        return RecordStatus.DONE if self is RecordStatus.IN_PROGRESS else RecordStatus.IN_PROGRESS


class ItemKind(str, Enum):
    """Which line item set of a record"""
    WORK = "work"
    PARTS = "parts"


class VehicleRecord(BaseModel):
    """
    One vehicle intake / service record.

    ``cost`` follows the line items: every item edit recomputes the sum of
    work and parts and overwrites ``cost`` whenever that sum is non-zero. A
    value typed with ``set_cost`` (or a cost loaded from storage) therefore
    survives only while the rows carry no prices.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[str] = None
    external_code: Optional[str] = None
    plate: str = ""
    model: str = ""
    mileage: str = ""
    client_name: str = ""
    contact: str = ""
    work_items: LineItemSet = Field(default_factory=LineItemSet)
    part_items: LineItemSet = Field(default_factory=LineItemSet)
    cost: Decimal = ZERO
    status: RecordStatus = RecordStatus.IN_PROGRESS
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None

    _cost_overridden: bool = PrivateAttr(default=False)

    @model_validator(mode="after")
    def derive_initial_cost(self) -> "VehicleRecord":
        # An explicit (stored or typed) cost is kept as given
        if "cost" not in self.model_fields_set:
            total = self.computed_total()
            if total > ZERO:
                self.cost = total
        return self

    @property
    def cost_overridden(self) -> bool:
        """True while a manually entered cost supersedes the computed total"""
        return self._cost_overridden

    @property
    def is_new(self) -> bool:
        return self.id is None

    def items(self, kind: ItemKind) -> LineItemSet:
        return self.work_items if ItemKind(kind) is ItemKind.WORK else self.part_items

    def computed_total(self) -> Decimal:
        return self.work_items.total() + self.part_items.total()

    def add_item(self, kind: ItemKind) -> LineItem:
        item = self.items(kind).add()
        self._recompute_cost()
        return item

    def update_item(self, kind: ItemKind, index: int, field: str, value: Any) -> LineItem:
        item = self.items(kind).update(index, field, value)
        self._recompute_cost()
        return item

    def remove_item(self, kind: ItemKind, index: int) -> None:
        self.items(kind).remove(index)
        self._recompute_cost()

    def set_cost(self, value: Any) -> None:
        """Direct edit of the cost field"""
        self.cost = parse_price(value)
        self._cost_overridden = True

    def _recompute_cost(self) -> None:
        total = self.computed_total()
        if total > ZERO:
            self.cost = total
            self._cost_overridden = False

    def toggle_status(self) -> RecordStatus:
        self.status = self.status.toggled()
        return self.status

    def validate_for_save(self) -> None:
        """Raise RecordValidationError unless plate and client name are set"""
        missing = []
        if not self.plate.strip():
            missing.append("plate")
        if not self.client_name.strip():
            missing.append("client_name")
        if missing:
            raise RecordValidationError(missing)

    def matches(self, term: str) -> bool:
        """Case-insensitive match on plate, client name or id"""
        needle = (term or "").strip().lower()
        if not needle:
            return True
        return (
            needle in self.plate.lower()
            or needle in self.client_name.lower()
            or needle in (self.id or "").lower()
        )
