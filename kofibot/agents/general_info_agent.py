"""General Info Agent: answers anything unclassified with the RAG pipeline.

Retrieval and generation are both fail-soft, so this agent always returns
text: a grounded answer, an ungrounded answer when retrieval came back
empty, or the generator's static apology.
"""
from typing import Optional

from .base_agent import BaseAgent
from ..app.generate import GenerationClient
from ..app.prompt_builder import PromptBuilder
from ..app.retrieval import Retriever, build_context
from ..utils.logger import get_logger

logger = get_logger()


class GeneralInfoAgent(BaseAgent):
    name = "general_info"
    intent = "fallback"

    def __init__(
        self,
        retriever: Retriever,
        generator: GenerationClient,
        prompt_builder: Optional[PromptBuilder] = None,
    ):
        self.retriever = retriever
        self.generator = generator
        self.prompt_builder = prompt_builder or generator.prompt_builder

    async def handle(self, user_id: str, text: str):
        passages = await self.retriever.retrieve(text)
        if not passages:
            logger.info("[RAG] No relevant documents found, answering ungrounded")
        context = build_context(passages)

        history = self.prompt_builder.build_history()
        result = await self.generator.generate(text, context, history)
        if not result.ok:
            return self._reject(result.text)
        return self._ok(result.text)
