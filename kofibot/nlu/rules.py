"""Rule-based intent classification.

Intents are checked in a fixed priority order and the first match wins;
several phrase sets overlap ("book a table for 4" also looks like an order),
so the ordering of ROUTES is part of the contract.
"""
import re
from enum import Enum
from typing import Callable, List, Tuple


class Intent(str, Enum):
    menu = "menu"
    reserve = "reserve"
    order = "order"
    loyalty = "loyalty"
    help = "help"
    fallback = "fallback"


MENU_PHRASES = ["menu", "menus", "what do you serve", "what's cooking", "whats cooking", "what can i eat"]
RESERVE_VERBS = ["reserve", "book"]
RESERVE_PHRASES = ["reservation", "reservations", "book a table", "table for"]
ORDER_VERBS = ["order", "buy", "get me"]
ORDER_PHRASES = ["place an order", "i'd like to order", "i would like to order", "i want to order"]
LOYALTY_PHRASES = ["loyalty", "points", "rewards", "reward"]
HELP_PHRASES = ["help", "what can you do", "how does this work", "commands"]
HELP_KEYWORDS = ["?", "hi", "hello", "start", "info"]


def normalize(text: str) -> str:
    return (text or "").strip().lower()


def _starts_with_any(q: str, verbs: List[str]) -> bool:
    first = q.split(" ", 1)[0] if q else ""
    return any(first == v or q.startswith(v + " ") for v in verbs)


def _contains_any(q: str, vocab: List[str]) -> bool:
    # whole words only: "disappointed" must not hit "points"
    return any(re.search(rf"(?<!\w){re.escape(phrase)}(?!\w)", q) for phrase in vocab)


def is_menu(q: str) -> bool:
    return _contains_any(q, MENU_PHRASES)


def is_reserve(q: str) -> bool:
    return _starts_with_any(q, RESERVE_VERBS) or _contains_any(q, RESERVE_PHRASES)


def is_order(q: str) -> bool:
    return _starts_with_any(q, ORDER_VERBS) or _contains_any(q, ORDER_PHRASES)


def is_loyalty(q: str) -> bool:
    return _contains_any(q, LOYALTY_PHRASES)


def is_help(q: str) -> bool:
    return q in HELP_KEYWORDS or _contains_any(q, HELP_PHRASES)


ROUTES: List[Tuple[Intent, Callable[[str], bool]]] = [
    (Intent.menu, is_menu),
    (Intent.reserve, is_reserve),
    (Intent.order, is_order),
    (Intent.loyalty, is_loyalty),
    (Intent.help, is_help),
]


def classify(text: str) -> Intent:
    """Classify a raw message; normalization happens here."""
    q = normalize(text)
    for intent, predicate in ROUTES:
        if predicate(q):
            return intent
    return Intent.fallback
