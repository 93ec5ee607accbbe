"""Commerce pydantic models with stricter types.

- Use Enum for meal periods and rejection reasons to prevent invalid values.
- Use Decimal for prices so order totals are exact.
- Results are values: a rejection is returned, never raised.
"""
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MealPeriod(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"


class MenuItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    price: Decimal
    available: bool = True
    allergens: FrozenSet[str] = frozenset()


class Order(BaseModel):
    user_id: str
    items: List[MenuItem]
    total: Decimal


class RejectionReason(str, Enum):
    capacity_exceeded = "capacity_exceeded"
    item_not_found = "item_not_found"
    item_unavailable = "item_unavailable"


class Rejection(BaseModel):
    reason: RejectionReason
    item_id: Optional[int] = None
    seats_left: Optional[int] = None


class ReservationResult(BaseModel):
    ok: bool
    message: str
    rejection: Optional[Rejection] = None


class OrderResult(BaseModel):
    ok: bool
    message: str
    loyalty_balance: Optional[int] = None
    rejection: Optional[Rejection] = None
    items: List[MenuItem] = Field(default_factory=list)
