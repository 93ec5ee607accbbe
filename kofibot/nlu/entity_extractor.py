"""Very small token-based entity extractor for reservations and orders."""
from typing import List, Optional

from pydantic import BaseModel


class ReservationRequest(BaseModel):
    date: str
    time: str
    party_size: int


def _tokens(text: str) -> List[str]:
    return (text or "").strip().lower().split()


def _is_number(token: str) -> bool:
    return token.isascii() and token.isdigit()


def extract_reservation(text: str) -> Optional[ReservationRequest]:
    """
    Pull (date, time, party size) out of a reservation message.

    date is the first token containing '-' or '/', time the first token
    containing ':', party size the first purely numeric token. Returns None
    when any of them is missing or the party size is not positive. Tokens
    are kept literally: no date or time normalization is done.
    """
    date = time = None
    party_size = None
    for token in _tokens(text):
        if date is None and ("-" in token or "/" in token):
            date = token
        elif time is None and ":" in token:
            time = token
        elif party_size is None and _is_number(token):
            party_size = int(token)

    if date is None or time is None or party_size is None or party_size < 1:
        return None
    return ReservationRequest(date=date, time=time, party_size=party_size)


def extract_item_ids(text: str) -> List[int]:
    """All purely numeric tokens, in order of appearance, duplicates kept."""
    return [int(t) for t in _tokens(text) if _is_number(t)]
