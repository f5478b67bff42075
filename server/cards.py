"""
Card and deck model for Joker Draw.

The deck is a fixed set of 54 cards: the 52 standard cards plus two wild
jokers. Decks, hands and the discard pile are plain lists of Card; the end
of a deck list is its top (cards are dealt with pop()).

Card ids are stable across the whole session ("Spades-A", "Joker-1") so the
union of deck, hands and discard pile can always be checked against the
full 54-id set.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from constants import DEFAULT_RANK_VALUES, HAND_SIZE, JOKER_COUNT

logger = logging.getLogger(__name__)


class Suit(str, Enum):
    """Card suits. Jokers carry their own pseudo-suit."""

    SPADES = "Spades"
    HEARTS = "Hearts"
    DIAMONDS = "Diamonds"
    CLUBS = "Clubs"
    JOKER = "Joker"


class Rank(str, Enum):
    """Card ranks with their display values."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    JOKER = "Joker"


STANDARD_SUITS: tuple[Suit, ...] = (Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS)
STANDARD_RANKS: tuple[Rank, ...] = tuple(rank for rank in Rank if rank != Rank.JOKER)

# Map Rank enum to numeric values (derived from constants.py as single source of truth)
RANK_VALUES: dict[Rank, int] = {rank: DEFAULT_RANK_VALUES[rank.value] for rank in STANDARD_RANKS}


@dataclass(frozen=True)
class Card:
    """
    A playing card.

    Attributes:
        suit: The card's suit (Joker for jokers).
        rank: The card's rank (Joker for jokers).
        is_wild: True for the two jokers.
        id: Stable unique identifier, e.g. "Hearts-10" or "Joker-2".
    """

    suit: Suit
    rank: Rank
    is_wild: bool
    id: str

    @classmethod
    def standard(cls, suit: Suit, rank: Rank) -> "Card":
        """Build a natural card with its canonical id."""
        return cls(suit=suit, rank=rank, is_wild=False, id=f"{suit.value}-{rank.value}")

    @classmethod
    def joker(cls, number: int) -> "Card":
        """Build joker number 1 or 2."""
        return cls(suit=Suit.JOKER, rank=Rank.JOKER, is_wild=True, id=f"Joker-{number}")

    @property
    def value(self) -> int:
        """Numeric rank value (2..14). Jokers have no value and raise KeyError."""
        return RANK_VALUES[self.rank]

    def to_dict(self) -> dict:
        """Convert card to dictionary for JSON serialization."""
        return {
            "suit": self.suit.value,
            "rank": self.rank.value,
            "is_wild": self.is_wild,
            "id": self.id,
        }

    def __str__(self) -> str:
        if self.is_wild:
            return self.id
        return f"{self.rank.value}{self.suit.value[0]}"


def create_deck() -> list[Card]:
    """
    Create the fixed 54-card deck in deterministic order.

    Suits in Spades, Hearts, Diamonds, Clubs order, each A through K,
    followed by Joker-1 and Joker-2.
    """
    deck = [Card.standard(suit, rank) for suit in STANDARD_SUITS for rank in STANDARD_RANKS]
    deck.extend(Card.joker(n) for n in range(1, JOKER_COUNT + 1))
    return deck


def shuffle(cards: Sequence[Card], rng: Optional[random.Random] = None) -> list[Card]:
    """
    Return a uniformly shuffled copy of cards.

    The caller's sequence is left untouched. random.shuffle is a
    Fisher-Yates shuffle; fairness here is for a casual game, not security.

    Args:
        cards: Cards to shuffle.
        rng: Optional Random instance (seeded sessions pass their own).

    Returns:
        A new list with the same cards in random order.
    """
    shuffled = list(cards)
    (rng or random).shuffle(shuffled)
    return shuffled


def deal_hands(players: Sequence, deck: list[Card], hand_size: int = HAND_SIZE) -> bool:
    """
    Deal hand_size cards to each player from the top of the deck.

    Each player's hand is emptied first. Mutates player hands and the deck
    in place.

    Args:
        players: Objects with a mutable `hand` list attribute.
        deck: Deck to deal from (end of list is the top).
        hand_size: Cards per player.

    Returns:
        True if every player received a full hand, False if the deck ran
        out (the remaining hands are left partial).
    """
    for player in players:
        player.hand = []
        for _ in range(hand_size):
            if not deck:
                logger.warning(
                    f"Deck ran out while dealing: {len(player.hand)}/{hand_size} cards to {player.id}"
                )
                return False
            player.hand.append(deck.pop())
    return True
