#!/usr/bin/env python3
"""
Embedding module for the Kofi SMS assistant.

This module turns text into vectors using the Hugging Face inference API.
Transient failures (network errors, 5xx, 429, "model is currently loading")
are retried with a fixed or exponential delay; a malformed response is a
format error and is never retried.
"""

import asyncio
from numbers import Real
from typing import Any, List, Optional

import requests

from .config import Config
from .errors import (
    EmbeddingFormatError,
    EmbeddingRejected,
    EmbeddingUnavailable,
    TransientRemoteFailure,
)
from ..utils.logger import get_logger

logger = get_logger("embed")


class EmbeddingClient:
    """Client for generating text embeddings through a remote service."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        dimension: Optional[int] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        backoff_factor: Optional[float] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url or Config.EMBEDDING_API_URL
        self.api_key = api_key if api_key is not None else Config.HUGGINGFACE_API_KEY
        self.dimension = dimension or Config.EMBEDDING_DIMENSION
        self.max_attempts = max_attempts or Config.EMBEDDING_MAX_ATTEMPTS
        self.retry_delay = Config.EMBEDDING_RETRY_DELAY_SECONDS if retry_delay is None else retry_delay
        self.backoff_factor = backoff_factor or Config.EMBEDDING_BACKOFF_FACTOR
        self.timeout = timeout or Config.EMBEDDING_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    async def embed(self, text: str) -> List[float]:
        """
        Embed one piece of text.

        Args:
            text: Non-empty text to embed

        Returns:
            Embedding vector of length ``self.dimension``

        Raises:
            ValueError: text is empty
            EmbeddingFormatError: response is not a numeric vector of the right length
            EmbeddingRejected: the service refused the request
            EmbeddingUnavailable: every attempt failed transiently
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        loop = asyncio.get_running_loop()
        last_error: Optional[Exception] = None
        delay = self.retry_delay

        for attempt in range(1, self.max_attempts + 1):
            try:
                payload = await loop.run_in_executor(None, self._post, text)
                return self._parse_vector(payload)
            except TransientRemoteFailure as e:
                last_error = e
                if attempt == self.max_attempts:
                    break
                logger.warning(
                    "Embedding request failed (%s). Retrying (attempt %d/%d)...",
                    e, attempt, self.max_attempts,
                )
                if delay:
                    await asyncio.sleep(delay)
                delay *= self.backoff_factor

        logger.error("Embedding service unavailable after %d attempts: %s", self.max_attempts, last_error)
        raise EmbeddingUnavailable(self.max_attempts, last_error)

    def _post(self, text: str) -> Any:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            response = self.session.post(
                self.api_url,
                headers=headers,
                json={"inputs": text},
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise TransientRemoteFailure(f"network error: {e}") from e

        status = response.status_code
        if status >= 500 or status == 429:
            raise TransientRemoteFailure(f"HTTP error! status: {status}", status_code=status)
        if status >= 400:
            # The inference API signals a cold model with an error body mentioning "loading"
            if "loading" in (response.text or "").lower():
                raise TransientRemoteFailure("model is loading", status_code=status)
            raise EmbeddingRejected(f"HTTP error! status: {status}", status_code=status)

        try:
            return response.json()
        except ValueError as e:
            raise EmbeddingFormatError("Unexpected API response format. Response is not JSON.") from e

    def _parse_vector(self, payload: Any) -> List[float]:
        if isinstance(payload, dict):
            if "error" in payload and "loading" in str(payload["error"]).lower():
                raise TransientRemoteFailure("model is loading")
            payload = payload.get("vector", payload.get("embedding"))

        # Some models answer a single input with a one-row matrix
        if isinstance(payload, list) and len(payload) == 1 and isinstance(payload[0], list):
            payload = payload[0]

        if not isinstance(payload, list):
            raise EmbeddingFormatError("Unexpected API response format. Response is not an array.")
        if not all(isinstance(v, Real) and not isinstance(v, bool) for v in payload):
            raise EmbeddingFormatError("Unexpected API response format. Array is not numeric.")
        if len(payload) != self.dimension:
            raise EmbeddingFormatError(
                f"Unexpected embedding dimension {len(payload)}, expected {self.dimension}"
            )
        return [float(v) for v in payload]
