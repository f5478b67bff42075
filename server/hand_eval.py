"""
Hand evaluation for 5-card draw with two wild jokers.

A hand is classified into one of eleven categories, checked strictly from
strongest to weakest; the first category the hand can reach wins. Jokers
may stand in for any rank and suit.

Every rank-grouping category (five/four of a kind, full house, three of a
kind, two pair, one pair) is resolved by one search: pick the highest
distinct ranks for the group sizes the category needs, paying for missing
copies with jokers, then fill the remaining slots as kickers. Straights and
flushes share a single run search. High card is the degenerate case with no
groups.

Contributing ranks are ordered by significance (group ranks first, then
kickers high to low; straights from the top of the run down). An ace
playing low in 5-4-3-2-A is still reported as 14, last in the run.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from cards import Card, Suit
from constants import ACE_HIGH, ACE_LOW, HAND_SCORES, HAND_SIZE, LOWEST_RANK


class InvalidHandError(ValueError):
    """Raised when a hand does not hold exactly HAND_SIZE cards."""


class HandCategory(str, Enum):
    """Hand categories, strongest first."""

    FIVE_OF_A_KIND = "Five of a Kind"
    ROYAL_FLUSH = "Royal Flush"
    STRAIGHT_FLUSH = "Straight Flush"
    FOUR_OF_A_KIND = "Four of a Kind"
    FULL_HOUSE = "Full House"
    FLUSH = "Flush"
    STRAIGHT = "Straight"
    THREE_OF_A_KIND = "Three of a Kind"
    TWO_PAIR = "Two Pair"
    ONE_PAIR = "One Pair"
    HIGH_CARD = "High Card"

    @property
    def score(self) -> int:
        return HAND_SCORES[self.value]


@dataclass(frozen=True)
class HandEvaluation:
    """
    Result of evaluating a hand.

    Attributes:
        category: The best category the hand reaches.
        contributing_ranks: Tie-break ranks, most significant first.
    """

    category: HandCategory
    contributing_ranks: tuple[int, ...]

    @property
    def name(self) -> str:
        return self.category.value

    @property
    def score(self) -> int:
        return self.category.score

    def to_dict(self) -> dict:
        return {
            "hand_name": self.name,
            "score": self.score,
            "contributing_ranks": list(self.contributing_ranks),
        }


# -------------------------------------------------------------------------
# Shared search helpers
# -------------------------------------------------------------------------

def _best_groups(
    counts: Counter,
    wilds: int,
    sizes: tuple[int, ...],
) -> Optional[tuple[tuple[int, ...], int]]:
    """
    Find the highest distinct ranks that can fill groups of the given sizes.

    Missing copies of a rank are paid for with wild cards. Groups of equal
    size are returned high to low, so (K, Q) and (Q, K) are one candidate.
    Ranks are tried from Ace down, so the first complete assignment found
    is the lexicographically best one.

    Args:
        counts: Natural rank value -> number of cards of that rank.
        wilds: Number of wild cards available.
        sizes: Group sizes, largest first, e.g. (3, 2) for a full house.

    Returns:
        (group ranks, wilds left over), or None if no assignment exists.
    """
    def search(index: int, taken: tuple[int, ...], wilds_left: int):
        if index == len(sizes):
            return taken, wilds_left

        top = ACE_HIGH
        if index and sizes[index] == sizes[index - 1]:
            top = taken[-1] - 1

        for rank in range(top, LOWEST_RANK - 1, -1):
            if rank in taken:
                continue
            needed = max(0, sizes[index] - counts[rank])
            if needed > wilds_left:
                continue
            found = search(index + 1, taken + (rank,), wilds_left - needed)
            if found is not None:
                return found
        return None

    return search(0, (), wilds)


def _kickers(
    counts: Counter,
    taken: tuple[int, ...] = (),
    sizes: tuple[int, ...] = (),
    wilds_left: int = 0,
) -> list[int]:
    """
    Ranks of the cards not used by the groups, highest first.

    Leftover natural cards keep their rank. Leftover wilds become the
    highest ranks not already in the hand.
    """
    group_size = dict(zip(taken, sizes))
    leftovers = []
    for rank, count in counts.items():
        leftovers.extend([rank] * max(0, count - group_size.get(rank, 0)))

    occupied = set(counts) | set(taken)
    rank = ACE_HIGH
    for _ in range(wilds_left):
        while rank in occupied:
            rank -= 1
        leftovers.append(rank)
        occupied.add(rank)

    return sorted(leftovers, reverse=True)


def _grouped(counts: Counter, wilds: int, sizes: tuple[int, ...]) -> Optional[tuple[int, ...]]:
    found = _best_groups(counts, wilds, sizes)
    if found is None:
        return None
    taken, wilds_left = found
    return taken + tuple(_kickers(counts, taken, sizes, wilds_left))


def _best_straight(counts: Counter, wilds: int) -> Optional[tuple[int, ...]]:
    """
    Find the highest five-rank run the natural cards fit into.

    Every natural card must sit in the run, so a paired hand can never be a
    straight. Wilds fill the gaps. An ace may end the run low (5-4-3-2-A).
    """
    if any(count > 1 for count in counts.values()):
        return None

    naturals = set(counts)
    for high in range(ACE_HIGH, 4, -1):
        run = tuple(ACE_HIGH if r == ACE_LOW else r for r in range(high, high - 5, -1))
        if naturals <= set(run) and len(set(run) - naturals) <= wilds:
            return run
    return None


# -------------------------------------------------------------------------
# Category detectors
# -------------------------------------------------------------------------
# Each takes (rank counts, wild count, natural suits) and returns the
# contributing ranks, or None if the hand cannot reach the category.

def _five_of_a_kind(counts, wilds, suits):
    return _grouped(counts, wilds, (5,))


def _straight_flush(counts, wilds, suits):
    if len(suits) > 1:
        return None
    return _best_straight(counts, wilds)


def _royal_flush(counts, wilds, suits):
    run = _straight_flush(counts, wilds, suits)
    if run and run[0] == ACE_HIGH:
        return run
    return None


def _four_of_a_kind(counts, wilds, suits):
    return _grouped(counts, wilds, (4,))


def _full_house(counts, wilds, suits):
    return _grouped(counts, wilds, (3, 2))


def _flush(counts, wilds, suits):
    # Any run these ranks could form was already taken as a straight flush
    if len(suits) != 1:
        return None
    return tuple(_kickers(counts, wilds_left=wilds))


def _straight(counts, wilds, suits):
    return _best_straight(counts, wilds)


def _three_of_a_kind(counts, wilds, suits):
    return _grouped(counts, wilds, (3,))


def _two_pair(counts, wilds, suits):
    return _grouped(counts, wilds, (2, 2))


def _one_pair(counts, wilds, suits):
    return _grouped(counts, wilds, (2,))


def _high_card(counts, wilds, suits):
    return tuple(_kickers(counts, wilds_left=wilds))


Detector = Callable[[Counter, int, set], Optional[tuple[int, ...]]]

# Strict precedence: the first detector that matches decides the category.
PRECEDENCE: tuple[tuple[HandCategory, Detector], ...] = (
    (HandCategory.FIVE_OF_A_KIND, _five_of_a_kind),
    (HandCategory.ROYAL_FLUSH, _royal_flush),
    (HandCategory.STRAIGHT_FLUSH, _straight_flush),
    (HandCategory.FOUR_OF_A_KIND, _four_of_a_kind),
    (HandCategory.FULL_HOUSE, _full_house),
    (HandCategory.FLUSH, _flush),
    (HandCategory.STRAIGHT, _straight),
    (HandCategory.THREE_OF_A_KIND, _three_of_a_kind),
    (HandCategory.TWO_PAIR, _two_pair),
    (HandCategory.ONE_PAIR, _one_pair),
    (HandCategory.HIGH_CARD, _high_card),
)


# -------------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------------

def evaluate_hand(hand: Sequence[Card]) -> HandEvaluation:
    """
    Classify a 5-card hand.

    The result does not depend on the order of the cards.

    Args:
        hand: Exactly five cards, up to two of them wild.

    Returns:
        HandEvaluation with the category and tie-break ranks.

    Raises:
        InvalidHandError: If the hand does not hold exactly five cards.
    """
    if len(hand) != HAND_SIZE:
        raise InvalidHandError(f"Hand must contain exactly {HAND_SIZE} cards, got {len(hand)}")

    wilds = sum(1 for card in hand if card.is_wild)
    naturals = [card for card in hand if not card.is_wild]
    counts = Counter(card.value for card in naturals)
    suits: set[Suit] = {card.suit for card in naturals}

    for category, detector in PRECEDENCE:
        ranks = detector(counts, wilds, suits)
        if ranks is not None:
            return HandEvaluation(category=category, contributing_ranks=tuple(ranks))

    # _high_card always matches
    raise AssertionError("unreachable")


def compare_contributing_ranks(ranks_a: Sequence[int], ranks_b: Sequence[int]) -> int:
    """
    Compare tie-break ranks element by element, most significant first.

    A missing trailing element is lower than any real rank.

    Returns:
        1 if a wins, -1 if b wins, 0 for a tie.
    """
    for i in range(max(len(ranks_a), len(ranks_b))):
        value_a = ranks_a[i] if i < len(ranks_a) else -1
        value_b = ranks_b[i] if i < len(ranks_b) else -1
        if value_a > value_b:
            return 1
        if value_a < value_b:
            return -1
    return 0


def compare_evaluations(a: HandEvaluation, b: HandEvaluation) -> int:
    """Compare two evaluated hands: category first, then tie-break ranks."""
    if a.score != b.score:
        return 1 if a.score > b.score else -1
    return compare_contributing_ranks(a.contributing_ranks, b.contributing_ranks)
