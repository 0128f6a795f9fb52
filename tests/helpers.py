from __future__ import annotations

from typing import List

from handeval.cards import Card, Rank, Suit, parse_cards
from handeval.evaluator import evaluate_five
from handeval.models import Hand


def cards(labels: str) -> List[Card]:
    """Parse a space separated string of labels such as ``"Ah Kd 7c"``."""
    return parse_cards(labels.split())


def hand(labels: str) -> Hand:
    return evaluate_five(cards(labels))


def full_deck() -> List[Card]:
    return [Card(rank, suit) for rank in Rank for suit in Suit]


def run_of(high: Rank, suits: List[Suit]) -> List[Card]:
    """Five consecutive ranks ending at ``high``, suits taken in order."""
    return [Card(Rank(high - offset), suits[offset % len(suits)]) for offset in range(5)]
