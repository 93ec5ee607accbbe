#!/usr/bin/env python3
"""
Tests for the embedding client's retry and response-format handling.

USAGE:
    Run from project root: python -m pytest tests/test_embed.py -v
"""

import unittest

import requests

from fakes import FakeResponse, ScriptedSession
from kofibot.app.embed import EmbeddingClient
from kofibot.app.errors import EmbeddingFormatError, EmbeddingRejected, EmbeddingUnavailable

VECTOR = [0.1, 0.2, 0.3, 0.4]


def make_client(responses, attempts=3):
    session = ScriptedSession(responses)
    client = EmbeddingClient(
        api_url="http://embeddings.test/model",
        api_key="hf_test",
        dimension=4,
        max_attempts=attempts,
        retry_delay=0,
        session=session,
    )
    return client, session


class TestEmbeddingRetry(unittest.IsolatedAsyncioTestCase):

    async def test_succeeds_on_third_attempt_after_two_failures(self):
        client, session = make_client([
            FakeResponse(503, text="Service Unavailable"),
            requests.ConnectionError("connection reset"),
            FakeResponse(200, VECTOR),
        ])

        vector = await client.embed("What are your opening hours?")

        self.assertEqual(vector, VECTOR)
        self.assertEqual(len(session.calls), 3)

    async def test_non_array_payload_fails_without_retry(self):
        client, session = make_client([FakeResponse(200, {"unexpected": "shape"})])

        with self.assertRaises(EmbeddingFormatError):
            await client.embed("hello")
        self.assertEqual(len(session.calls), 1)

    async def test_wrong_dimension_is_a_format_error(self):
        client, session = make_client([FakeResponse(200, [0.1, 0.2])])

        with self.assertRaises(EmbeddingFormatError):
            await client.embed("hello")
        self.assertEqual(len(session.calls), 1)

    async def test_non_numeric_array_is_a_format_error(self):
        client, _ = make_client([FakeResponse(200, ["a", "b", "c", "d"])])

        with self.assertRaises(EmbeddingFormatError):
            await client.embed("hello")

    async def test_exhausted_retries_carry_last_error(self):
        client, session = make_client([FakeResponse(502, text="Bad Gateway")], attempts=4)

        with self.assertRaises(EmbeddingUnavailable) as ctx:
            await client.embed("hello")

        self.assertEqual(len(session.calls), 4)
        self.assertEqual(ctx.exception.attempts, 4)
        self.assertEqual(ctx.exception.last_error.status_code, 502)

    async def test_model_loading_signal_is_retried(self):
        client, session = make_client([
            FakeResponse(400, {"error": "Model is currently loading"}, text='{"error": "Model is currently loading"}'),
            FakeResponse(200, VECTOR),
        ])

        self.assertEqual(await client.embed("hello"), VECTOR)
        self.assertEqual(len(session.calls), 2)

    async def test_auth_failure_is_not_retried(self):
        client, session = make_client([FakeResponse(401, text="Invalid token")])

        with self.assertRaises(EmbeddingRejected):
            await client.embed("hello")
        self.assertEqual(len(session.calls), 1)

    async def test_accepts_vector_object_and_single_row_matrix(self):
        client, _ = make_client([FakeResponse(200, {"vector": VECTOR})])
        self.assertEqual(await client.embed("hello"), VECTOR)

        client, _ = make_client([FakeResponse(200, [VECTOR])])
        self.assertEqual(await client.embed("hello"), VECTOR)

    async def test_empty_text_is_rejected_before_any_call(self):
        client, session = make_client([FakeResponse(200, VECTOR)])

        with self.assertRaises(ValueError):
            await client.embed("   ")
        self.assertEqual(session.calls, [])

    async def test_request_carries_bearer_token_and_inputs(self):
        client, session = make_client([FakeResponse(200, VECTOR)])

        await client.embed("jollof")

        url, kwargs = session.calls[0]
        self.assertEqual(url, "http://embeddings.test/model")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer hf_test")
        self.assertEqual(kwargs["json"], {"inputs": "jollof"})


if __name__ == "__main__":
    unittest.main()
