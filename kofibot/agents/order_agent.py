"""Order Agent: turns item numbers into an all-or-nothing order."""
from .base_agent import BaseAgent
from ..data.commerce_store import CommerceStore
from ..nlu.entity_extractor import extract_item_ids

ORDER_FORMAT_HELP = (
    "To order, send the item numbers from the menu, for example: order 3 4. "
    "Text MENU to see what's available now."
)


class OrderAgent(BaseAgent):
    name = "order"
    intent = "order"

    def __init__(self, store: CommerceStore):
        self.store = store

    async def handle(self, user_id: str, text: str):
        item_ids = extract_item_ids(text)
        if not item_ids:
            return self._reject(ORDER_FORMAT_HELP)

        result = await self.store.place_order(user_id, item_ids)
        if not result.ok:
            return self._reject(result.message)
        return self._ok(result.message)
