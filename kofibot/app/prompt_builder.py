#!/usr/bin/env python3
"""
Prompt builder module for the Kofi SMS assistant.

This module constructs the grounded prompt and the short conversation
history handed to the generative model.
"""

from typing import List, Optional

from .config import Config
from ..schemas.rag_models import ConversationTurn, Role


class PromptBuilder:
    """Builds prompts for the LLM with context and conversation history."""

    def __init__(self, max_history_turns: Optional[int] = None):
        self.max_history_turns = max_history_turns or Config.MAX_HISTORY_TURNS
        self.system_prompt = """You are the text-message assistant for Kofi, a restaurant.
Answer the customer's message using the business information below when it is relevant.
If the information does not cover the question, say so briefly and suggest texting HELP.
Keep the reply short enough for a single SMS. Do not invent prices, hours or policies.

Business information:
{context}

Customer: {query}
Assistant:"""

    def build_prompt(self, query: str, context: str) -> str:
        """
        Build a prompt for the LLM.

        Args:
            query: Customer message
            context: Concatenated retrieved text, possibly empty

        Returns:
            Formatted prompt string
        """
        context_text = context.strip() if context and context.strip() else "No relevant information found."
        return self.system_prompt.format(context=context_text, query=query.strip())

    def build_history(self, prior: Optional[List[ConversationTurn]] = None) -> List[ConversationTurn]:
        """Prime the history with the reply-style instruction, followed by any prior turns."""
        turns = [ConversationTurn(role=Role.user, text=Config.REPLY_STYLE_INSTRUCTION)]
        turns.extend(prior or [])
        return self.bound_history(turns)

    def bound_history(self, turns: List[ConversationTurn]) -> List[ConversationTurn]:
        # keep the instruction turn; drop the oldest turns after it
        if len(turns) <= self.max_history_turns:
            return list(turns)
        if self.max_history_turns == 1:
            return [turns[-1]]
        return [turns[0]] + list(turns[-(self.max_history_turns - 1):])
