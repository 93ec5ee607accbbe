"""Retrieval / generation models passed between pipeline stages."""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class KnowledgeChunk(BaseModel):
    id: str
    text: str
    embedding: List[float] = Field(default_factory=list)


class VectorMatch(BaseModel):
    id: str
    score: float
    metadata: Dict[str, Any] = Field(default_factory=dict)


class RetrievedPassage(BaseModel):
    text: str
    score: float


class IngestionReport(BaseModel):
    namespace: str
    chunk_ids: List[str]
    skipped: bool = False

    @property
    def chunk_count(self) -> int:
        return len(self.chunk_ids)


class Role(str, Enum):
    user = "user"
    assistant = "assistant"


class ConversationTurn(BaseModel):
    role: Role
    text: str


class GenerationResult(BaseModel):
    ok: bool
    text: str
    error: Optional[str] = None
