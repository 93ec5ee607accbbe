"""Loyalty Agent: reports a user's points balance."""
from .base_agent import BaseAgent
from ..data.commerce_store import CommerceStore


class LoyaltyAgent(BaseAgent):
    name = "loyalty"
    intent = "loyalty"

    def __init__(self, store: CommerceStore):
        self.store = store

    async def handle(self, user_id: str, text: str):
        balance = await self.store.get_loyalty_balance(user_id)
        if balance == 0:
            return self._ok("You have 0 loyalty points. Every order earns 1 point per dollar spent!")
        return self._ok(f"You have {balance} loyalty points.")
