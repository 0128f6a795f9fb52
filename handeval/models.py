from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Tuple

from .cards import Card, Rank, cards_to_labels

HAND_SIZE = 5


class HandCategory(IntEnum):
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9

    @property
    def label(self) -> str:
        return self.name.lower()


class Variant(str, Enum):
    HOLDEM = "holdem"
    OMAHA = "omaha"
    POOL = "pool"


# (min, max) hole cards that may go into the final five; None means no cap.
VARIANT_RULES: Dict[Variant, Tuple[int, Optional[int]]] = {
    Variant.HOLDEM: (0, 2),
    Variant.OMAHA: (2, 2),
    Variant.POOL: (0, None),
}


@dataclass(frozen=True, order=True)
class Hand:
    """A categorized five-card hand.

    ``cards`` is in significance order: the cards that make the category come
    first in descending rank, kickers follow in descending rank. A wheel lists
    its Ace last. Ordering and equality only look at ``category`` and the rank
    sequence, so the same ranks in different suits tie.
    """

    category: HandCategory
    ranks: Tuple[Rank, ...] = field(init=False, repr=False)
    cards: Tuple[Card, ...] = field(compare=False)

    def __post_init__(self) -> None:
        cards = tuple(self.cards)
        if len(cards) != HAND_SIZE:
            raise ValueError(f"Hand requires exactly {HAND_SIZE} cards, got {len(cards)}")
        object.__setattr__(self, "cards", cards)
        object.__setattr__(self, "ranks", tuple(card.rank for card in cards))

    @property
    def labels(self) -> List[str]:
        return cards_to_labels(self.cards)


@dataclass
class ServiceConfig:
    host: str = "0.0.0.0"
    port: int = 8765
    variant: Variant = Variant.HOLDEM
    max_pool_size: int = 12
    max_compare_hands: int = 10
    max_workers: int = 0
