"""Poker hand evaluation primitives shared by the evaluation server and its callers."""

from .cards import (
    Card,
    Rank,
    Suit,
    cards_to_labels,
    ensure_unique,
    find_duplicates,
    parse_cards,
    parse_label,
    same_card,
    same_rank,
)
from .evaluator import (
    best_hand,
    best_hand_concurrent,
    best_hand_for_variant,
    best_hand_using,
    categorize,
    compare_hands,
    evaluate_five,
    winners,
)
from .models import Hand, HandCategory, ServiceConfig, Variant

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "cards_to_labels",
    "ensure_unique",
    "find_duplicates",
    "parse_cards",
    "parse_label",
    "same_card",
    "same_rank",
    "best_hand",
    "best_hand_concurrent",
    "best_hand_for_variant",
    "best_hand_using",
    "categorize",
    "compare_hands",
    "evaluate_five",
    "winners",
    "Hand",
    "HandCategory",
    "ServiceConfig",
    "Variant",
]
