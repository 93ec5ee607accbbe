#!/usr/bin/env python3
"""
Generation module for the Kofi SMS assistant.

This module handles answer generation using the Gemini LLM API. The public
``generate`` call is fail-soft: any failure turns into a GenerationResult
carrying the static apology text, so a broken model never breaks a reply.
"""

import asyncio
from typing import Any, Dict, List, Optional

import requests

from .config import Config
from .errors import GenerationError
from .prompt_builder import PromptBuilder
from ..schemas.rag_models import ConversationTurn, GenerationResult, Role
from ..utils.logger import get_logger

logger = get_logger("rag")

FALLBACK_REPLY = "Sorry, I couldn't come up with an answer right now. Please try again in a moment."

ROLE_MAP = {Role.user: "user", Role.assistant: "model"}


class GenerationClient:
    """Client for generating answers using Gemini LLM API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else Config.GEMINI_API_KEY
        self.llm_model = model or Config.GEMINI_MODEL
        self.temperature = Config.GENERATION_TEMPERATURE if temperature is None else temperature
        self.max_output_tokens = max_output_tokens or Config.GENERATION_MAX_OUTPUT_TOKENS
        self.timeout = timeout or Config.GENERATION_TIMEOUT_SECONDS
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.session = session or requests.Session()
        self.api_base_url = f"https://generativelanguage.googleapis.com/v1beta/models/{self.llm_model}:generateContent"

    def _payload(self, prompt: str, history: List[ConversationTurn]) -> Dict[str, Any]:
        contents = [
            {"role": ROLE_MAP[turn.role], "parts": [{"text": turn.text}]}
            for turn in history
        ]
        contents.append({"role": "user", "parts": [{"text": prompt}]})
        return {
            "contents": contents,
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
        }

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.post(
                self.api_base_url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise GenerationError(f"Error generating answer: {e}") from e
        except ValueError as e:
            raise GenerationError(f"Error parsing generation response: {e}") from e

    async def complete(self, prompt: str, history: List[ConversationTurn]) -> str:
        """
        Call the model once.

        Raises:
            GenerationError: on transport failure or an unexpected response shape
        """
        if not self.api_key:
            raise GenerationError("Gemini API key is required")

        loop = asyncio.get_running_loop()
        data = await loop.run_in_executor(None, self._post, self._payload(prompt, history))

        # Extract answer from Gemini response
        try:
            answer = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError(f"Error parsing generation response: {e}") from e
        if not isinstance(answer, str):
            raise GenerationError("Generation response text is not a string")
        return answer.strip()

    async def generate(
        self,
        query: str,
        context: str,
        history: Optional[List[ConversationTurn]] = None,
    ) -> GenerationResult:
        """Build the grounded prompt and return the model's trimmed reply, or the fallback."""
        prompt = self.prompt_builder.build_prompt(query, context)
        turns = self.prompt_builder.bound_history(history or [])
        try:
            answer = await self.complete(prompt, turns)
        except Exception as e:
            logger.error("Error fetching Gemini response: %s", e)
            return GenerationResult(ok=False, text=FALLBACK_REPLY, error=str(e))
        if not answer:
            return GenerationResult(ok=False, text=FALLBACK_REPLY, error="empty response")
        return GenerationResult(ok=True, text=answer)
