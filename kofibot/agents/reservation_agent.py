"""Reservation Agent: parses date/time/party size and books a table."""
from .base_agent import BaseAgent
from ..data.commerce_store import CommerceStore
from ..nlu.entity_extractor import extract_reservation

RESERVATION_FORMAT_HELP = (
    "To book a table, send: reserve <date> <time> for <guests>, "
    "for example: reserve 2024-05-01 19:00 for 4"
)


class ReservationAgent(BaseAgent):
    name = "reservation"
    intent = "reserve"

    def __init__(self, store: CommerceStore):
        self.store = store

    async def handle(self, user_id: str, text: str):
        request = extract_reservation(text)
        if request is None:
            return self._reject(RESERVATION_FORMAT_HELP)

        result = await self.store.reserve(user_id, request.date, request.time, request.party_size)
        if not result.ok:
            return self._reject(result.message)
        return self._ok(result.message)
