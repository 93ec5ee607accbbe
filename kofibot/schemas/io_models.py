"""Pydantic models for agent contracts and the messaging webhook."""
from pydantic import BaseModel


class AgentResult(BaseModel):
    agent: str
    intent: str
    reply: str
    rejected: bool = False


class IncomingMessage(BaseModel):
    user_id: str
    text: str
