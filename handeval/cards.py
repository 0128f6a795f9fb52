from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, List, Sequence, Union

RANK_LABELS = "23456789TJQKA"


class Suit(str, Enum):
    SPADES = "s"
    HEARTS = "h"
    CLUBS = "c"
    DIAMONDS = "d"


class Rank(IntEnum):
    """Card rank. The value is the 0..12 ordinal used for run arithmetic."""

    TWO = 0
    THREE = 1
    FOUR = 2
    FIVE = 3
    SIX = 4
    SEVEN = 5
    EIGHT = 6
    NINE = 7
    TEN = 8
    JACK = 9
    QUEEN = 10
    KING = 11
    ACE = 12

    @property
    def label(self) -> str:
        return RANK_LABELS[self.value]

    @classmethod
    def from_label(cls, label: str) -> "Rank":
        text = label.upper()
        if text == "10":
            text = "T"
        if len(text) != 1 or text not in RANK_LABELS:
            raise ValueError(f"Invalid rank: {label}")
        return cls(RANK_LABELS.index(text))


@dataclass(frozen=True)
class Card:
    rank: Rank
    suit: Suit

    def __post_init__(self) -> None:
        if not isinstance(self.rank, Rank):
            raise ValueError(f"Invalid rank: {self.rank}")
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{self.rank.label}{self.suit.value}"

    def __str__(self) -> str:
        return self.label


def rank_key(card: Card) -> int:
    return card.rank.value


def same_rank(a: Card, b: Card) -> bool:
    return a.rank == b.rank


def same_card(a: Card, b: Card) -> bool:
    return a.rank == b.rank and a.suit == b.suit


def parse_label(label: str) -> Card:
    text = label.strip()
    if len(text) not in (2, 3):
        raise ValueError(f"Invalid card label: {label}")
    rank_text, suit_text = text[:-1], text[-1].lower()
    try:
        suit = Suit(suit_text)
    except ValueError:
        raise ValueError(f"Invalid suit: {label}") from None
    return Card(Rank.from_label(rank_text), suit)


def parse_cards(labels: Iterable[Union[str, Card]]) -> List[Card]:
    return [label if isinstance(label, Card) else parse_label(label) for label in labels]


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]


def find_duplicates(cards: Sequence[Card]) -> List[Card]:
    seen: List[Card] = []
    duplicates: List[Card] = []
    for card in cards:
        if not any(same_card(card, other) for other in seen):
            seen.append(card)
        elif not any(same_card(card, other) for other in duplicates):
            duplicates.append(card)
    return duplicates


def ensure_unique(cards: Sequence[Card]) -> None:
    duplicates = find_duplicates(cards)
    if duplicates:
        raise ValueError(f"Duplicate cards: {' '.join(cards_to_labels(duplicates))}")
