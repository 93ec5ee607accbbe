"""Commerce state: reservation capacity, order history and loyalty points.

All three ledgers live behind LedgerStorage so a durable key-value store can
replace the in-memory one without touching the store or the router. Every
mutation runs under a per-key asyncio lock, so a check-then-increment on a
reservation slot cannot interleave with another request for the same slot.
"""
import asyncio
import math
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from .menu_store import MenuStore, get_menu_store
from ..app.config import Config
from ..schemas.commerce_models import (
    Order,
    OrderResult,
    Rejection,
    RejectionReason,
    ReservationResult,
)
from ..utils.logger import get_logger

logger = get_logger()

RESERVATIONS = "reservations"
ORDERS = "orders"
LOYALTY = "loyalty"


class LedgerStorage(ABC):
    """get / put / append / atomic increment over named ledgers."""

    @abstractmethod
    def get(self, ledger: str, key: str, default: Any = None) -> Any:
        ...

    @abstractmethod
    def put(self, ledger: str, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def append(self, ledger: str, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def increment(self, ledger: str, key: str, amount: int) -> int:
        """Add ``amount`` to an integer entry (missing = 0) and return the new value."""
        ...


class InMemoryLedgerStorage(LedgerStorage):
    """Process-lifetime storage; contents are lost on restart."""

    def __init__(self):
        self._ledgers: Dict[str, Dict[str, Any]] = defaultdict(dict)

    def get(self, ledger: str, key: str, default: Any = None) -> Any:
        return self._ledgers[ledger].get(key, default)

    def put(self, ledger: str, key: str, value: Any) -> None:
        self._ledgers[ledger][key] = value

    def append(self, ledger: str, key: str, value: Any) -> None:
        self._ledgers[ledger].setdefault(key, []).append(value)

    def increment(self, ledger: str, key: str, amount: int) -> int:
        value = self._ledgers[ledger].get(key, 0) + amount
        self._ledgers[ledger][key] = value
        return value

    def snapshot(self, ledger: str) -> Dict[str, Any]:
        return dict(self._ledgers[ledger])


def reservation_key(date: str, time: str) -> str:
    # Literal key: "2024-01-01" and "01/01/2024" are different slots
    return f"{date}-{time}"


class CommerceStore:
    """Reservations, orders and loyalty with per-key atomic operations."""

    def __init__(
        self,
        storage: Optional[LedgerStorage] = None,
        menu_store: Optional[MenuStore] = None,
        capacity: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.storage = storage or InMemoryLedgerStorage()
        self.menu_store = menu_store or get_menu_store()
        self.capacity = capacity or Config.RESERVATION_CAPACITY
        self.clock = clock
        # holders plus waiters per lock name; a lock is dropped when its count hits 0
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def _lock(self, scope: str, key: str):
        name = f"{scope}:{key}"
        lock = self._locks.setdefault(name, asyncio.Lock())
        self._lock_users[name] = self._lock_users.get(name, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[name] -= 1
            if not self._lock_users[name]:
                del self._lock_users[name]
                del self._locks[name]

    async def reserve(self, user_id: str, date: str, time: str, party_size: int) -> ReservationResult:
        if isinstance(party_size, bool) or not isinstance(party_size, int) or party_size < 1:
            raise ValueError("party_size must be a positive integer")

        key = reservation_key(date, time)
        async with self._lock(RESERVATIONS, key):
            booked = self.storage.get(RESERVATIONS, key, 0)
            if booked + party_size > self.capacity:
                seats_left = self.capacity - booked
                logger.info("Reservation for %s at %s rejected: %d requested, %d left", user_id, key, party_size, seats_left)
                return ReservationResult(
                    ok=False,
                    message=(
                        f"Sorry, we can't seat {party_size} on {date} at {time}. "
                        f"Only {seats_left} seats are left for that time."
                    ),
                    rejection=Rejection(reason=RejectionReason.capacity_exceeded, seats_left=seats_left),
                )
            self.storage.increment(RESERVATIONS, key, party_size)

        logger.info("Reservation for %s at %s confirmed (%d guests)", user_id, key, party_size)
        return ReservationResult(
            ok=True,
            message=f"Reservation confirmed for {party_size} on {date} at {time}. See you then!",
        )

    async def place_order(self, user_id: str, item_ids: List[int]) -> OrderResult:
        """
        Place an all-or-nothing order against the current meal period's menu.

        Every id is resolved before anything is recorded; the first unknown or
        unavailable id rejects the whole order.
        """
        if not item_ids:
            raise ValueError("item_ids must not be empty")

        period = self.menu_store.current_period(self.clock())
        items = []
        for item_id in item_ids:
            item = self.menu_store.find_item(item_id, period)
            if item is None:
                return OrderResult(
                    ok=False,
                    message=f"Sorry, item {item_id} is not on our {period.value} menu.",
                    rejection=Rejection(reason=RejectionReason.item_not_found, item_id=item_id),
                )
            if not item.available:
                return OrderResult(
                    ok=False,
                    message=f"Sorry, {item.name} (item {item_id}) is not available right now.",
                    rejection=Rejection(reason=RejectionReason.item_unavailable, item_id=item_id),
                )
            items.append(item)

        total = sum((i.price for i in items), Decimal("0"))
        points = math.floor(total)

        async with self._lock(ORDERS, user_id):
            self.storage.append(ORDERS, user_id, Order(user_id=user_id, items=items, total=total))
            balance = self.storage.increment(LOYALTY, user_id, points)

        names = ", ".join(i.name for i in items)
        return OrderResult(
            ok=True,
            message=(
                f"Order placed: {names}. Total: ${total}. "
                f"You earned {points} loyalty points (balance: {balance})."
            ),
            loyalty_balance=balance,
            items=items,
        )

    async def get_loyalty_balance(self, user_id: str) -> int:
        return self.storage.get(LOYALTY, user_id, 0)

    def order_history(self, user_id: str) -> List[Order]:
        return list(self.storage.get(ORDERS, user_id, []))

    def seats_booked(self, date: str, time: str) -> int:
        return self.storage.get(RESERVATIONS, reservation_key(date, time), 0)
