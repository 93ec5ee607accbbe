"""BaseAgent interface for all agents."""
from abc import ABC, abstractmethod

from ..schemas.io_models import AgentResult


class BaseAgent(ABC):
    name: str = "base"
    intent: str = "base"

    @abstractmethod
    async def handle(self, user_id: str, text: str) -> AgentResult:
        """Turn one message into the reply text for this intent."""
        ...

    def _ok(self, reply: str) -> AgentResult:
        return AgentResult(agent=self.name, intent=self.intent, reply=reply)

    def _reject(self, reply: str) -> AgentResult:
        return AgentResult(agent=self.name, intent=self.intent, reply=reply, rejected=True)
