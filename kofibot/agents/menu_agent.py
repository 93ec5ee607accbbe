"""Menu Agent: previews the menu for the current meal period."""
from datetime import datetime
from typing import Callable, Optional

from .base_agent import BaseAgent
from ..data.menu_store import MenuStore, get_menu_store


class MenuAgent(BaseAgent):
    name = "menu"
    intent = "menu"

    def __init__(self, menu_store: Optional[MenuStore] = None, clock: Callable[[], datetime] = datetime.now):
        self.menu_store = menu_store or get_menu_store()
        self.clock = clock

    async def handle(self, user_id: str, text: str):
        return self._ok(self.menu_store.preview(self.clock()))
