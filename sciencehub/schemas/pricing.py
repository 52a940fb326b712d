"""
Schemas for ticket price quotes.
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class PaymentMode(str, Enum):
    """How an event is paid for. ``cost`` is the stored value for paid events."""

    FREE = "free"
    DONATION = "donation"
    PAID = "cost"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str) and value.lower() == "paid":
            return cls.PAID
        return None

    @property
    def is_chargeable(self) -> bool:
        return self is PaymentMode.PAID


class LineItem(BaseModel):
    """One row of the price breakdown shown before submission."""

    kind: str = Field(..., description="adults or children")
    quantity: int
    unit_price: Decimal
    amount: Decimal
    discounted_pairs: int = 0
    undiscounted_amount: Optional[Decimal] = None
    half_price: bool = False


class PriceQuote(BaseModel):
    """Total charge for a ticket request and its breakdown."""

    total: Decimal
    currency: Optional[str] = None
    line_items: List[LineItem] = Field(default_factory=list)
