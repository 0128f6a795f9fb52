from __future__ import annotations

import itertools
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .cards import Card, Rank, rank_key
from .models import HAND_SIZE, VARIANT_RULES, Hand, HandCategory, Variant

STRAIGHT_OFFSETS = (4, 3, 2, 1)
WHEEL_OFFSETS = (12, 3, 2, 1)  # A-5-4-3-2 with the Ace still on top

GROUP_PATTERNS: Dict[Tuple[int, ...], HandCategory] = {
    (4, 1): HandCategory.FOUR_OF_A_KIND,
    (3, 2): HandCategory.FULL_HOUSE,
    (3, 1, 1): HandCategory.THREE_OF_A_KIND,
    (2, 2, 1): HandCategory.TWO_PAIR,
    (2, 1, 1, 1): HandCategory.PAIR,
    (1, 1, 1, 1, 1): HandCategory.HIGH_CARD,
}

CardCombo = Tuple[Card, ...]


def categorize(cards: Sequence[Card]) -> Tuple[HandCategory, CardCombo]:
    """Classify exactly five cards and return them in significance order.

    The input is never modified; the reordered cards come back as a new tuple.
    """
    if len(cards) != HAND_SIZE:
        raise ValueError(f"categorize expects exactly {HAND_SIZE} cards, got {len(cards)}")

    ordered = tuple(sorted(cards, key=rank_key, reverse=True))
    is_flush = len({card.suit for card in ordered}) == 1

    run = _straight_order(ordered)
    if run is not None:
        if not is_flush:
            return HandCategory.STRAIGHT, run
        if all(card.rank >= Rank.TEN for card in run):
            return HandCategory.ROYAL_FLUSH, run
        return HandCategory.STRAIGHT_FLUSH, run
    if is_flush:
        return HandCategory.FLUSH, ordered

    groups = _group_by_rank(ordered)
    pattern = tuple(len(group) for group in groups)
    return GROUP_PATTERNS[pattern], tuple(itertools.chain.from_iterable(groups))


def _straight_order(ordered: CardCombo) -> Optional[CardCombo]:
    lowest = ordered[-1].rank
    offsets = tuple(card.rank - lowest for card in ordered[:-1])
    if offsets == STRAIGHT_OFFSETS:
        return ordered
    if offsets == WHEEL_OFFSETS:
        # Five plays high; the Ace drops to the bottom.
        return ordered[1:] + ordered[:1]
    return None


def _group_by_rank(cards: Iterable[Card]) -> List[List[Card]]:
    groups: Dict[Rank, List[Card]] = {}
    for card in cards:
        groups.setdefault(card.rank, []).append(card)
    # Equal-sized groups fall back to rank so two pair orders its pairs high to low.
    return sorted(groups.values(), key=lambda group: (len(group), group[0].rank), reverse=True)


def evaluate_five(cards: Sequence[Card]) -> Hand:
    category, ordered = categorize(cards)
    return Hand(category, ordered)


def compare_hands(hand_a: Hand, hand_b: Hand) -> int:
    return 1 if hand_a > hand_b else (-1 if hand_b > hand_a else 0)


def winners(hands: Sequence[Optional[Hand]]) -> List[int]:
    """Indices of every hand tied for the best. ``None`` entries never win."""
    present = [hand for hand in hands if hand is not None]
    if not present:
        return []
    best = max(present)
    return [idx for idx, hand in enumerate(hands) if hand is not None and hand == best]


def best_hand(pool: Iterable[Card]) -> Optional[Hand]:
    """Best five-card hand from any pool; ``None`` when it holds fewer than five cards."""
    return _best_of(itertools.combinations(list(pool), HAND_SIZE))


def best_hand_using(
    private: Iterable[Card],
    shared: Iterable[Card],
    min_private: int = 0,
    max_private: Optional[int] = None,
) -> Optional[Hand]:
    """Best hand that uses between ``min_private`` and ``max_private`` private cards.

    The remaining cards come from ``shared``. ``max_private`` defaults to every
    private card. Returns ``None`` when no allowed split can make five cards.
    """
    private_cards = list(private)
    shared_cards = list(shared)
    upper = len(private_cards) if max_private is None else max_private
    if min_private < 0 or upper < 0:
        raise ValueError("Private card bounds must be non-negative")
    if min_private > upper:
        raise ValueError(f"min_private ({min_private}) exceeds max_private ({upper})")
    combos = _split_combinations(private_cards, shared_cards, min_private, min(upper, HAND_SIZE))
    return _best_of(combos)


def best_hand_for_variant(
    variant: Union[Variant, str],
    hole: Iterable[Card],
    community: Iterable[Card],
) -> Optional[Hand]:
    min_private, max_private = VARIANT_RULES[Variant(variant)]
    return best_hand_using(hole, community, min_private, max_private)


def best_hand_concurrent(
    pool: Iterable[Card],
    max_workers: Optional[int] = None,
    executor: Optional[Executor] = None,
    chunk_size: int = 64,
) -> Optional[Hand]:
    """Same result as :func:`best_hand`, with subsets scored on worker threads.

    Each chunk reduces to its own best hand and the chunk winners reduce with
    ``max``; chunk completion order does not matter. A caller-owned
    ``executor`` is used as is and left running; otherwise a pool of
    ``max_workers`` threads is created for the call.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")
    if executor is not None and max_workers is not None:
        raise ValueError("Pass either executor or max_workers, not both")
    cards = list(pool)
    if len(cards) < HAND_SIZE:
        return None
    chunks = list(_chunked(itertools.combinations(cards, HAND_SIZE), chunk_size))
    if executor is not None:
        results = list(executor.map(_best_of, chunks))
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as workers:
            results = list(workers.map(_best_of, chunks))
    return max(hand for hand in results if hand is not None)


def _split_combinations(
    private: List[Card],
    shared: List[Card],
    min_private: int,
    max_private: int,
) -> Iterator[CardCombo]:
    for used in range(min_private, max_private + 1):
        needed = HAND_SIZE - used
        if used > len(private) or needed > len(shared):
            continue
        for hole in itertools.combinations(private, used):
            for board in itertools.combinations(shared, needed):
                yield hole + board


def _chunked(combos: Iterable[CardCombo], size: int) -> Iterator[List[CardCombo]]:
    iterator = iter(combos)
    while True:
        chunk = list(itertools.islice(iterator, size))
        if not chunk:
            return
        yield chunk


def _best_of(combos: Iterable[CardCombo]) -> Optional[Hand]:
    best: Optional[Hand] = None
    for combo in combos:
        hand = evaluate_five(combo)
        if best is None or hand > best:
            best = hand
    return best
