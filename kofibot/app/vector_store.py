#!/usr/bin/env python3
"""
Vector index module for the Kofi SMS assistant.

Two backends share one async interface:

- PineconeVectorIndex: the hosted index used in production.
- FaissVectorIndex: a process-local index for development and tests.

Both are id-keyed: upserting an existing id overwrites it.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import faiss
import numpy as np
from pinecone import Pinecone, ServerlessSpec

from .config import Config
from ..schemas.rag_models import VectorMatch
from ..utils.logger import get_logger

logger = get_logger()


class VectorIndex(ABC):
    """upsert(namespace, vectors) / query(namespace, vector, top_k) boundary."""

    @abstractmethod
    async def upsert(self, namespace: str, vectors: List[Dict[str, Any]]) -> int:
        """Store ``{"id", "values", "metadata"}`` records; return how many were written."""
        ...

    @abstractmethod
    async def query(
        self,
        namespace: str,
        vector: List[float],
        top_k: int,
        include_metadata: bool = True,
    ) -> List[VectorMatch]:
        """Return up to top_k matches ordered by descending cosine similarity."""
        ...

    async def ensure_ready(self) -> None:
        """Make sure the index exists before it is written to."""


class PineconeVectorIndex(VectorIndex):
    """Hosted Pinecone index; blocking client calls run in the default executor."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        index_name: Optional[str] = None,
        dimension: Optional[int] = None,
        client: Optional[Pinecone] = None,
    ):
        self.index_name = index_name or Config.PINECONE_INDEX
        self.dimension = dimension or Config.EMBEDDING_DIMENSION
        self.pinecone = client or Pinecone(api_key=api_key or Config.PINECONE_API_KEY)
        self._index = None

    def ensure_index(self) -> None:
        """Create the serverless cosine index if it does not exist yet."""
        if self.index_name in self.pinecone.list_indexes().names():
            logger.info("Index '%s' already exists. Skipping index creation.", self.index_name)
            return
        self.pinecone.create_index(
            name=self.index_name,
            dimension=self.dimension,
            metric="cosine",
            spec=ServerlessSpec(cloud=Config.PINECONE_CLOUD, region=Config.PINECONE_REGION),
        )
        logger.info("Index '%s' created successfully.", self.index_name)

    async def ensure_ready(self) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.ensure_index)

    @property
    def index(self):
        if self._index is None:
            self._index = self.pinecone.Index(self.index_name)
        return self._index

    async def upsert(self, namespace: str, vectors: List[Dict[str, Any]]) -> int:
        if not vectors:
            return 0
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, lambda: self.index.upsert(vectors=vectors, namespace=namespace)
        )
        return len(vectors)

    async def query(
        self,
        namespace: str,
        vector: List[float],
        top_k: int,
        include_metadata: bool = True,
    ) -> List[VectorMatch]:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            None,
            lambda: self.index.query(
                namespace=namespace,
                vector=vector,
                top_k=top_k,
                include_values=False,
                include_metadata=include_metadata,
            ),
        )
        matches = []
        for match in result.matches:
            matches.append(VectorMatch(
                id=match.id,
                score=float(match.score),
                metadata=dict(match.metadata or {}) if include_metadata else {},
            ))
        return matches


class FaissVectorIndex(VectorIndex):
    """Process-local index: cosine similarity via inner product on normalized vectors."""

    def __init__(self, dimension: Optional[int] = None):
        self.dimension = dimension or Config.EMBEDDING_DIMENSION
        # namespace -> id -> (normalized vector, metadata); dicts keep insertion order
        self._namespaces: Dict[str, Dict[str, tuple]] = {}

    def _normalize(self, values: List[float]) -> np.ndarray:
        vec = np.asarray(values, dtype="float32").reshape(1, -1)
        if vec.shape[1] != self.dimension:
            raise ValueError(f"Vector dimension {vec.shape[1]} does not match index dimension {self.dimension}")
        faiss.normalize_L2(vec)
        return vec

    async def upsert(self, namespace: str, vectors: List[Dict[str, Any]]) -> int:
        records = self._namespaces.setdefault(namespace, {})
        for v in vectors:
            records[v["id"]] = (self._normalize(v["values"]), dict(v.get("metadata") or {}))
        return len(vectors)

    async def query(
        self,
        namespace: str,
        vector: List[float],
        top_k: int,
        include_metadata: bool = True,
    ) -> List[VectorMatch]:
        records = self._namespaces.get(namespace)
        if not records:
            return []

        ids = list(records.keys())
        index = faiss.IndexFlatIP(self.dimension)
        index.add(np.vstack([records[i][0] for i in ids]))

        k = min(top_k, len(ids))
        scores, positions = index.search(self._normalize(vector), k)

        matches = []
        for score, pos in zip(scores[0], positions[0]):
            if pos == -1:  # -1 means no result
                continue
            record_id = ids[int(pos)]
            matches.append(VectorMatch(
                id=record_id,
                score=float(score),
                metadata=dict(records[record_id][1]) if include_metadata else {},
            ))
        return matches

    def fetch(self, namespace: str) -> Dict[str, List[float]]:
        """Return the stored id -> normalized vector mapping of a namespace."""
        return {
            record_id: vec[0].tolist()
            for record_id, (vec, _) in self._namespaces.get(namespace, {}).items()
        }


def create_vector_index(backend: Optional[str] = None) -> VectorIndex:
    backend = (backend or Config.VECTOR_BACKEND).lower()
    if backend == "pinecone":
        return PineconeVectorIndex()
    return FaissVectorIndex()
