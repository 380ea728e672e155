"""Client search: weighted token relevance, with an alphabetical listing for empty queries."""
from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Sequence, Tuple

from foodbank.domain.Client import Client, as_client
from foodbank.utilities.constants import (
    RECENCY_DIVISOR, SCORE_CONTAINS, SCORE_FIRST_PREFIX, SCORE_FULL_PREFIX,
    SCORE_LAST_PREFIX, SCORE_LATER_WORD, SCORE_PHONE_DIGITS,
)

__all__ = [
    "strip_diacritics", "tokens_of", "digits_of", "relevance_score", "rank_clients",
    "group_alphabetically", "search_clients", "SearchResult",
]

_NON_DIGIT = re.compile(r"\D")


def strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def tokens_of(text: str) -> List[str]:
    return strip_diacritics(text or "").lower().split()


def digits_of(text: str) -> str:
    return _NON_DIGIT.sub("", text or "")


def relevance_score(client: Any, tokens: Sequence[str]) -> float:
    """Score a client against query tokens.

    Each token earns the weight of the first rule it satisfies (full-name
    prefix, first-name prefix, last-name prefix, later name part, substring,
    phone digits). A small recency bonus from ``updated_at`` breaks ties.
    """
    c = as_client(client)
    first = strip_diacritics(c.first_name).lower()
    last = strip_diacritics(c.last_name).lower()
    full = f"{first} {last}".strip()
    phone = digits_of(c.phone)

    score = 0.0
    for tk in tokens:
        digit_tk = digits_of(tk)
        if full.startswith(tk):
            score += SCORE_FULL_PREFIX
        elif first.startswith(tk):
            score += SCORE_FIRST_PREFIX
        elif last.startswith(tk):
            score += SCORE_LAST_PREFIX
        elif f" {tk}" in full:
            score += SCORE_LATER_WORD
        elif tk in full:
            score += SCORE_CONTAINS
        elif digit_tk and digit_tk in phone:
            score += SCORE_PHONE_DIGITS
    score += (c.updated_at or 0) / RECENCY_DIVISOR
    return score


def rank_clients(clients: Iterable[Any], query: str | Sequence[str]) -> List[Client]:
    """Clients matching the query, best first. An empty query bypasses scoring."""
    if isinstance(query, str):
        tokens = tokens_of(query)
    else:
        tokens = [t for part in (query or ()) for t in tokens_of(part)]
    pool = [as_client(c) for c in (clients or [])]
    if not tokens:
        return pool
    scored = [(relevance_score(c, tokens), c) for c in pool]
    # sorted() is stable, so equal scores keep input order
    ranked = sorted((pair for pair in scored if pair[0] > 0), key=lambda pair: pair[0], reverse=True)
    return [c for _, c in ranked]


def group_alphabetically(clients: Iterable[Any]) -> List[Tuple[str, List[Client]]]:
    """Letter sections for browsing when there is no query."""
    groups: dict[str, List[Client]] = {}
    for raw in clients or []:
        c = as_client(raw)
        source = c.first_name or c.last_name or "?"
        letter = (source[:1] or "?").upper()
        groups.setdefault(letter, []).append(c)
    return [
        (letter, sorted(groups[letter], key=lambda c: (c.first_name.lower(), c.last_name.lower())))
        for letter in sorted(groups)
    ]


@dataclass
class SearchResult:
    query_tokens: List[str]
    ranked: List[Client] = field(default_factory=list)
    groups: List[Tuple[str, List[Client]]] = field(default_factory=list)

    @property
    def letters(self) -> List[str]:
        return [letter for letter, _ in self.groups]


def search_clients(clients: Iterable[Any], query: str) -> SearchResult:
    pool = [as_client(c) for c in (clients or [])]
    tokens = tokens_of(query)
    if not tokens:
        return SearchResult(query_tokens=[], ranked=pool, groups=group_alphabetically(pool))
    return SearchResult(query_tokens=tokens, ranked=rank_clients(pool, tokens))
