#!/usr/bin/env python3
"""Tests for the retrieval query pipeline."""

import unittest

from fakes import DIM, FakeEmbedClient, vector_for
from kofibot.app.retrieval import Retriever, build_context
from kofibot.app.vector_store import FaissVectorIndex, VectorIndex
from kofibot.schemas.rag_models import RetrievedPassage

NAMESPACE = "business_info_test"


class BrokenIndex(VectorIndex):
    async def upsert(self, namespace, vectors):
        raise ConnectionError("index down")

    async def query(self, namespace, vector, top_k, include_metadata=True):
        raise ConnectionError("index down")


class TestRetriever(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.index = FaissVectorIndex(dimension=DIM)
        texts = [
            "We accept cash and card",
            "Parking is free behind the restaurant",
            "Breakfast is served until eleven",
        ]
        await self.index.upsert(NAMESPACE, [
            {"id": f"vec{i}", "values": vector_for(t), "metadata": {"text": t}}
            for i, t in enumerate(texts, 1)
        ])

    async def test_returns_at_most_top_k_by_descending_score(self):
        retriever = Retriever(FakeEmbedClient(), self.index, namespace=NAMESPACE, top_k=3)

        passages = await retriever.retrieve("Parking is free behind the restaurant", top_k=2)

        self.assertEqual(len(passages), 2)
        self.assertEqual(passages[0].text, "Parking is free behind the restaurant")
        self.assertGreaterEqual(passages[0].score, passages[1].score)

    async def test_unavailable_index_returns_empty(self):
        retriever = Retriever(FakeEmbedClient(), BrokenIndex(), namespace=NAMESPACE)
        self.assertEqual(await retriever.retrieve("hours?"), [])

    async def test_uninitialized_index_returns_empty(self):
        retriever = Retriever(FakeEmbedClient(), None, namespace=NAMESPACE)
        self.assertEqual(await retriever.retrieve("hours?"), [])

    async def test_embedding_outage_returns_empty(self):
        retriever = Retriever(FakeEmbedClient(fail_on="hours"), self.index, namespace=NAMESPACE)
        self.assertEqual(await retriever.retrieve("what are your hours"), [])

    async def test_empty_namespace_returns_empty(self):
        retriever = Retriever(FakeEmbedClient(), self.index, namespace="nothing_here")
        self.assertEqual(await retriever.retrieve("hours?"), [])

    async def test_invalid_arguments_raise(self):
        retriever = Retriever(FakeEmbedClient(), self.index, namespace=NAMESPACE)
        with self.assertRaises(ValueError):
            await retriever.retrieve("")
        with self.assertRaises(ValueError):
            await retriever.retrieve("hours?", top_k=0)


class TestBuildContext(unittest.TestCase):

    def test_joins_passage_text_in_order(self):
        passages = [RetrievedPassage(text="First", score=0.9), RetrievedPassage(text="Second", score=0.5)]
        self.assertEqual(build_context(passages), "First\nSecond")

    def test_no_passages_gives_empty_context(self):
        self.assertEqual(build_context([]), "")


if __name__ == "__main__":
    unittest.main()
