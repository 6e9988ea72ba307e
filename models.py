from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Tuple
from uuid import UUID

CENTS_PER_DOLLAR = 100


def cents_to_decimal(cents: int) -> Decimal:
    return Decimal(cents) / CENTS_PER_DOLLAR


@dataclass(frozen=True)
class Item:
    """ A single validated receipt line item, price held in integer cents """
    short_description: str
    price_cents: int

    @property
    def price(self) -> Decimal:
        return cents_to_decimal(self.price_cents)


@dataclass(frozen=True)
class ValidatedReceipt:
    """ Receipt fields after validation and normalization, before an id is assigned """
    retailer: str
    purchase_timestamp: datetime
    items: Tuple[Item, ...]
    total_cents: int

    @property
    def total(self) -> Decimal:
        return cents_to_decimal(self.total_cents)


@dataclass(frozen=True)
class Receipt:
    """ A stored receipt: validated fields, its id and the points computed at submission """
    id: UUID
    retailer: str
    purchase_timestamp: datetime
    items: Tuple[Item, ...]
    total_cents: int
    points: int

    @classmethod
    def from_validated(cls, receipt_id: UUID, validated: ValidatedReceipt, points: int) -> "Receipt":
        return cls(
            id=receipt_id,
            retailer=validated.retailer,
            purchase_timestamp=validated.purchase_timestamp,
            items=validated.items,
            total_cents=validated.total_cents,
            points=points,
        )

    @property
    def total(self) -> Decimal:
        return cents_to_decimal(self.total_cents)
