#!/usr/bin/env python3
"""
End-to-end routing tests: message text in, reply text out, with the commerce
store and a fake RAG pair behind the controller.
"""

import unittest
from datetime import datetime

from fakes import FakeGenerator, FakeRetriever
from kofibot.agents.general_info_agent import GeneralInfoAgent
from kofibot.agents.loyalty_agent import LoyaltyAgent
from kofibot.agents.menu_agent import MenuAgent
from kofibot.agents.meta_agent import CAPABILITIES, MetaAgent
from kofibot.agents.order_agent import ORDER_FORMAT_HELP, OrderAgent
from kofibot.agents.reservation_agent import RESERVATION_FORMAT_HELP, ReservationAgent
from kofibot.app.controller import BRANCH_FAILURE_REPLY, Controller
from kofibot.data.commerce_store import CommerceStore, InMemoryLedgerStorage, RESERVATIONS
from kofibot.data.menu_store import MenuStore
from kofibot.nlu.rules import Intent

LUNCH = datetime(2024, 5, 1, 12, 30)


class ExplodingAgent(MetaAgent):
    async def handle(self, user_id, text):
        raise RuntimeError("boom")


class TestController(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        clock = lambda: LUNCH
        self.storage = InMemoryLedgerStorage()
        menu_store = MenuStore()
        self.store = CommerceStore(storage=self.storage, menu_store=menu_store, capacity=50, clock=clock)
        self.retriever = FakeRetriever([("Kofi opens at 7am", 0.92)])
        self.generator = FakeGenerator("We open at 7am every day but Sunday.")
        self.agents = {
            Intent.menu: MenuAgent(menu_store, clock=clock),
            Intent.reserve: ReservationAgent(self.store),
            Intent.order: OrderAgent(self.store),
            Intent.loyalty: LoyaltyAgent(self.store),
            Intent.help: MetaAgent(),
            Intent.fallback: GeneralInfoAgent(self.retriever, self.generator),
        }
        self.controller = Controller(self.agents)

    async def test_menu_at_lunch_previews_items_3_and_4(self):
        reply = await self.controller.handle("+15550001", "menu")

        lines = reply.splitlines()
        self.assertEqual(len(lines), 3)
        self.assertTrue(lines[1].startswith("3. "))
        self.assertIn("92.99", lines[1])
        self.assertTrue(lines[2].startswith("4. "))
        self.assertIn("140.99", lines[2])

    async def test_reservation_sets_ledger(self):
        reply = await self.controller.handle("+15550001", "reserve 2024-05-01 19:00 for 4")

        self.assertIn("confirmed", reply)
        self.assertEqual(self.storage.snapshot(RESERVATIONS), {"2024-05-01-19:00": 4})

    async def test_unparseable_reservation_returns_format_help(self):
        reply = await self.controller.handle("+15550001", "reserve tomorrow night")
        self.assertEqual(reply, RESERVATION_FORMAT_HELP)

    async def test_order_then_loyalty(self):
        reply = await self.controller.handle("+15550001", "order 3 4")
        self.assertIn("233.98", reply)
        self.assertEqual(await self.store.get_loyalty_balance("+15550001"), 233)

        reply = await self.controller.handle("+15550001", "how many points do I have?")
        self.assertEqual(reply, "You have 233 loyalty points.")

    async def test_order_without_ids_returns_format_help(self):
        reply = await self.controller.handle("+15550001", "order something tasty")
        self.assertEqual(reply, ORDER_FORMAT_HELP)

    async def test_rejected_order_is_explained(self):
        result = await self.controller.route("+15550001", "order 3 42")

        self.assertTrue(result.rejected)
        self.assertIn("42", result.reply)
        self.assertEqual(await self.store.get_loyalty_balance("+15550001"), 0)

    async def test_help(self):
        self.assertEqual(await self.controller.handle("+15550001", "help"), CAPABILITIES)

    async def test_unmatched_text_uses_retrieval_and_generation(self):
        reply = await self.controller.handle("+15550001", "banana")

        self.assertEqual(reply, "We open at 7am every day but Sunday.")
        self.assertEqual(self.retriever.queries, ["banana"])
        query, context, history = self.generator.calls[0]
        self.assertEqual(query, "banana")
        self.assertEqual(context, "Kofi opens at 7am")
        self.assertEqual(len(history), 1)

    async def test_generation_failure_still_replies(self):
        self.agents[Intent.fallback] = GeneralInfoAgent(FakeRetriever(), FakeGenerator("Sorry, try later.", ok=False))
        controller = Controller(self.agents)

        reply = await controller.handle("+15550001", "banana")

        self.assertEqual(reply, "Sorry, try later.")

    async def test_agent_exception_becomes_reply(self):
        self.agents[Intent.help] = ExplodingAgent()
        controller = Controller(self.agents)

        reply = await controller.handle("+15550001", "help")

        self.assertEqual(reply, BRANCH_FAILURE_REPLY)

    def test_every_intent_needs_an_agent(self):
        agents = dict(self.agents)
        del agents[Intent.loyalty]
        with self.assertRaises(ValueError):
            Controller(agents)


if __name__ == "__main__":
    unittest.main()
