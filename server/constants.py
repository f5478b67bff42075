"""
Fixed rule constants for Joker Draw (5-card draw, jokers wild).

This module is the single source of truth for rank values, hand category
scores and table sizes. None of these are configurable: the game is always
four players, five cards, three rounds.

Rank values:
    - 2-10: Face value
    - Jack: 11, Queen: 12, King: 13
    - Ace: 14 (also plays low in A-2-3-4-5, still reported as 14)
    - Joker: wild, no fixed value
"""

# =============================================================================
# Table Constants
# =============================================================================

PLAYERS_PER_GAME = 4
HAND_SIZE = 5
MAX_ROUNDS = 3
ROUND_WIN_POINTS = 1  # Added to each round winner's running score
JOKER_COUNT = 2


# =============================================================================
# Card Constants
# =============================================================================

DEFAULT_RANK_VALUES: dict[str, int] = {
    "2": 2,
    "3": 3,
    "4": 4,
    "5": 5,
    "6": 6,
    "7": 7,
    "8": 8,
    "9": 9,
    "10": 10,
    "J": 11,
    "Q": 12,
    "K": 13,
    "A": 14,
}

ACE_HIGH = 14
ACE_LOW = 1
LOWEST_RANK = 2


# =============================================================================
# Hand Category Scores
# =============================================================================
# Strictly increasing with category strength. Keyed by display name so that
# the values can be sent to clients unchanged.

HAND_SCORES: dict[str, int] = {
    "Five of a Kind": 100,
    "Royal Flush": 90,
    "Straight Flush": 80,
    "Four of a Kind": 70,
    "Full House": 60,
    "Flush": 50,
    "Straight": 40,
    "Three of a Kind": 30,
    "Two Pair": 20,
    "One Pair": 10,
    "High Card": 0,
}
