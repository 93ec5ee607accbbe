#!/usr/bin/env python3
"""
Knowledge ingestion for the Kofi SMS assistant.

Splits the business reference text into sentence chunks, embeds every chunk
and upserts them into one namespace of the vector index in a single batch.
Chunk ids are derived from position, so re-ingesting an unchanged corpus
overwrites the same ids instead of adding new ones.
"""

import asyncio
import re
from typing import List, Optional

from .config import Config
from .embed import EmbeddingClient
from .errors import EmbeddingError, IngestionError
from .vector_store import VectorIndex
from ..schemas.rag_models import IngestionReport, KnowledgeChunk
from ..utils.logger import get_logger

logger = get_logger("ingest")

SENTENCE_TERMINATORS = re.compile(r"[.!?]")


def split_into_chunks(text: str) -> List[KnowledgeChunk]:
    """
    Split text into sentence-level chunks.

    Ids are ``vec{n}`` with ``n`` the 1-based position in the raw split;
    empty pieces keep their position but produce no chunk.
    """
    chunks = []
    for i, sentence in enumerate(SENTENCE_TERMINATORS.split(text or "")):
        sentence = sentence.strip()
        if sentence:
            chunks.append(KnowledgeChunk(id=f"vec{i + 1}", text=sentence))
    return chunks


def read_knowledge_file(path: Optional[str] = None) -> str:
    with open(path or Config.KNOWLEDGE_FILE, "r", encoding="utf-8") as f:
        return f.read()


class KnowledgeIngestor:
    """Embeds reference text and writes it to the vector index."""

    def __init__(
        self,
        embed_client: EmbeddingClient,
        index: VectorIndex,
        namespace: Optional[str] = None,
    ):
        self.embed_client = embed_client
        self.index = index
        self.namespace = namespace or Config.PINECONE_NAMESPACE
        self._lock = asyncio.Lock()
        self._completed = False

    async def _embed_chunk(self, chunk: KnowledgeChunk) -> KnowledgeChunk:
        try:
            vector = await self.embed_client.embed(chunk.text)
        except EmbeddingError as e:
            raise IngestionError(chunk.id, e) from e
        return chunk.model_copy(update={"embedding": vector})

    async def ingest(self, text: str) -> IngestionReport:
        """
        Ingest a reference text blob.

        All chunks are embedded before anything is written; if one fails the
        run raises IngestionError naming that chunk and the index is untouched.
        """
        async with self._lock:
            return await self._ingest(text)

    async def _ingest(self, text: str) -> IngestionReport:
        chunks = split_into_chunks(text)
        logger.info("Embedding %d knowledge chunks", len(chunks))

        await self.index.ensure_ready()
        tasks = [asyncio.create_task(self._embed_chunk(c)) for c in chunks]
        try:
            embedded = await asyncio.gather(*tasks)
        except BaseException:
            # no embedding call may outlive a failed run
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        vectors = [
            {"id": c.id, "values": c.embedding, "metadata": {"text": c.text}}
            for c in embedded
        ]
        await self.index.upsert(self.namespace, vectors)
        self._completed = True
        logger.info("Business info embedded and uploaded to namespace '%s'.", self.namespace)
        return IngestionReport(namespace=self.namespace, chunk_ids=[c.id for c in embedded])

    async def ingest_file(self, path: Optional[str] = None) -> IngestionReport:
        async with self._lock:
            return await self._ingest(read_knowledge_file(path))

    async def ingest_once(self, path: Optional[str] = None) -> IngestionReport:
        """Startup entry point: runs ingestion at most once per process."""
        async with self._lock:
            if self._completed:
                return IngestionReport(namespace=self.namespace, chunk_ids=[], skipped=True)
            return await self._ingest(read_knowledge_file(path))

    @property
    def completed(self) -> bool:
        return self._completed
