#!/usr/bin/env python3
"""
Tests for the commerce state store: reservation capacity, order atomicity
and loyalty monotonicity.
"""

import asyncio
import unittest
from datetime import datetime
from decimal import Decimal

from kofibot.data.commerce_store import CommerceStore, InMemoryLedgerStorage, LOYALTY, RESERVATIONS
from kofibot.data.menu_store import MenuStore
from kofibot.schemas.commerce_models import RejectionReason

LUNCH = datetime(2024, 5, 1, 12, 30)
DINNER = datetime(2024, 5, 1, 19, 0)


def make_store(now=LUNCH, capacity=50):
    storage = InMemoryLedgerStorage()
    store = CommerceStore(storage=storage, menu_store=MenuStore(), capacity=capacity, clock=lambda: now)
    return store, storage


class TestReservations(unittest.IsolatedAsyncioTestCase):

    async def test_accepts_until_capacity_then_rejects_without_change(self):
        store, storage = make_store()
        accepted = 0
        for size in [20, 20, 8, 3, 2]:
            result = await store.reserve("+15550001", "2024-05-01", "19:00", size)
            if result.ok:
                accepted += size
            self.assertLessEqual(store.seats_booked("2024-05-01", "19:00"), 50)

        self.assertEqual(accepted, 50)
        self.assertEqual(storage.snapshot(RESERVATIONS), {"2024-05-01-19:00": 50})

    async def test_rejection_reports_capacity_exceeded(self):
        store, _ = make_store()
        await store.reserve("+15550001", "2024-05-01", "19:00", 45)

        result = await store.reserve("+15550002", "2024-05-01", "19:00", 6)

        self.assertFalse(result.ok)
        self.assertEqual(result.rejection.reason, RejectionReason.capacity_exceeded)
        self.assertEqual(result.rejection.seats_left, 5)
        self.assertEqual(store.seats_booked("2024-05-01", "19:00"), 45)

    async def test_concurrent_reservations_never_overbook(self):
        store, _ = make_store()

        results = await asyncio.gather(*(
            store.reserve(f"user{i}", "2024-05-01", "19:00", 7) for i in range(10)
        ))

        accepted = [r for r in results if r.ok]
        self.assertEqual(len(accepted), 7)
        self.assertEqual(store.seats_booked("2024-05-01", "19:00"), 49)

    async def test_slot_locks_are_released_after_use(self):
        store, _ = make_store()

        await asyncio.gather(*(
            store.reserve(f"user{i}", f"2024-05-0{i % 3 + 1}", "19:00", 7) for i in range(9)
        ))
        await store.place_order("user1", [3])

        self.assertEqual(store._locks, {})
        self.assertEqual(store._lock_users, {})

    async def test_keys_are_literal_not_normalized(self):
        store, storage = make_store()

        await store.reserve("u", "2024-01-01", "19:00", 30)
        result = await store.reserve("u", "01/01/2024", "19:00", 30)

        self.assertTrue(result.ok)
        self.assertEqual(storage.snapshot(RESERVATIONS), {"2024-01-01-19:00": 30, "01/01/2024-19:00": 30})

    async def test_party_larger_than_capacity_is_rejected(self):
        store, _ = make_store()
        result = await store.reserve("u", "2024-05-01", "19:00", 51)
        self.assertFalse(result.ok)

    async def test_invalid_party_size_raises(self):
        store, _ = make_store()
        with self.assertRaises(ValueError):
            await store.reserve("u", "2024-05-01", "19:00", 0)


class TestOrders(unittest.IsolatedAsyncioTestCase):

    async def test_lunch_order_totals_and_awards_points(self):
        store, _ = make_store()

        result = await store.place_order("+15550001", [3, 4])

        self.assertTrue(result.ok)
        self.assertIn("233.98", result.message)
        self.assertEqual(result.loyalty_balance, 233)
        self.assertEqual(await store.get_loyalty_balance("+15550001"), 233)
        history = store.order_history("+15550001")
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].total, Decimal("233.98"))

    async def test_unknown_item_rejects_whole_order(self):
        store, storage = make_store()

        result = await store.place_order("+15550001", [3, 99])

        self.assertFalse(result.ok)
        self.assertEqual(result.rejection.reason, RejectionReason.item_not_found)
        self.assertEqual(result.rejection.item_id, 99)
        self.assertEqual(store.order_history("+15550001"), [])
        self.assertEqual(storage.snapshot(LOYALTY), {})

    async def test_item_from_another_period_is_not_found(self):
        store, _ = make_store(now=LUNCH)
        result = await store.place_order("u", [5])
        self.assertEqual(result.rejection.reason, RejectionReason.item_not_found)

    async def test_unavailable_item_rejects_whole_order(self):
        store, _ = make_store(now=DINNER)

        result = await store.place_order("u", [5, 7])

        self.assertFalse(result.ok)
        self.assertEqual(result.rejection.reason, RejectionReason.item_unavailable)
        self.assertEqual(result.rejection.item_id, 7)
        self.assertEqual(await store.get_loyalty_balance("u"), 0)

    async def test_duplicates_are_charged_each_time(self):
        store, _ = make_store()
        result = await store.place_order("u", [3, 3])
        self.assertEqual(result.loyalty_balance, 185)  # floor(185.98)

    async def test_loyalty_only_increases_by_floor_of_each_total(self):
        store, _ = make_store()
        balances = []
        for ids in ([3], [4], [3, 4]):
            result = await store.place_order("u", ids)
            balances.append(result.loyalty_balance)

        self.assertEqual(balances, [92, 92 + 140, 92 + 140 + 233])
        self.assertEqual(len(store.order_history("u")), 3)

    async def test_unseen_user_has_zero_balance(self):
        store, _ = make_store()
        self.assertEqual(await store.get_loyalty_balance("nobody"), 0)


if __name__ == "__main__":
    unittest.main()
