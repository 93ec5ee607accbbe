#!/usr/bin/env python3
"""
Retrieval module for the Kofi SMS assistant.

Embeds the incoming question, asks the vector index for its nearest
neighbours and returns their source text. Retrieval is fail-soft: when the
embedding service or the index is down it returns an empty list so the
generator can still answer, ungrounded.
"""

from typing import List, Optional

from .config import Config
from .embed import EmbeddingClient
from .vector_store import VectorIndex
from ..schemas.rag_models import RetrievedPassage
from ..utils.logger import get_logger

logger = get_logger("rag")


class Retriever:
    """Dense retriever over one namespace of the vector index."""

    def __init__(
        self,
        embed_client: EmbeddingClient,
        index: Optional[VectorIndex],
        namespace: Optional[str] = None,
        top_k: Optional[int] = None,
    ):
        self.embed_client = embed_client
        self.index = index
        self.namespace = namespace or Config.PINECONE_NAMESPACE
        self.top_k = top_k or Config.RETRIEVAL_TOP_K

    async def retrieve(self, query: str, top_k: Optional[int] = None) -> List[RetrievedPassage]:
        """
        Fetch the passages most similar to ``query``.

        Args:
            query: Non-empty free-text query
            top_k: Maximum number of passages (>= 1), defaults to the configured value

        Returns:
            Up to top_k passages ordered by descending similarity; empty on failure
        """
        top_k = self.top_k if top_k is None else top_k
        if not query or not query.strip():
            raise ValueError("query must be a non-empty string")
        if top_k < 1:
            raise ValueError("top_k must be >= 1")

        if self.index is None:
            logger.warning("Vector index is not initialized; answering without context")
            return []

        try:
            query_embedding = await self.embed_client.embed(query)
            matches = await self.index.query(
                self.namespace, query_embedding, top_k, include_metadata=True
            )
        except Exception as e:
            logger.warning("Retrieval failed, continuing ungrounded: %s", e)
            return []

        passages = [
            RetrievedPassage(text=m.metadata["text"], score=m.score)
            for m in matches
            if m.metadata.get("text")
        ]
        passages.sort(key=lambda p: p.score, reverse=True)
        logger.info("Retrieved %d passages for query", len(passages))
        return passages[:top_k]


def build_context(passages: List[RetrievedPassage]) -> str:
    """Concatenate retrieved passages into one grounding context."""
    return "\n".join(p.text for p in passages)
