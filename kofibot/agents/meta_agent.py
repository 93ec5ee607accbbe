"""Meta Agent: answers help requests with the list of things the assistant can do."""
from .base_agent import BaseAgent

CAPABILITIES = "\n".join([
    "Here's what I can do:",
    "MENU - see what we're serving now",
    "reserve <date> <time> for <guests> - book a table",
    "order <item numbers> - place an order, e.g. order 3 4",
    "POINTS - check your loyalty balance",
    "Or just ask me anything about Kofi!",
])


class MetaAgent(BaseAgent):
    name = "meta"
    intent = "help"

    async def handle(self, user_id: str, text: str):
        return self._ok(CAPABILITIES)
