"""
Draw/discard processing for Joker Draw.

A player's single draw replaces the cards at the chosen hand positions with
cards from the top of the deck. When the deck runs dry mid-draw the whole
discard pile is shuffled into a new deck.

Index validation (distinct, in range, at most five) is the caller's job;
see GameSession.request_discard.
"""

import logging
import random
from typing import Collection, Optional

from cards import Card, shuffle

logger = logging.getLogger(__name__)


class DeckExhaustedError(RuntimeError):
    """
    Raised when both the deck and the discard pile are empty during a draw.

    With 54 cards and at most 20 in hands this cannot happen in correct
    play, so it signals a broken card-closure invariant elsewhere.
    """


def recycle_discard_pile(
    deck: list[Card],
    discard_pile: list[Card],
    rng: Optional[random.Random] = None,
) -> int:
    """
    Shuffle the discard pile into the deck and clear the pile.

    Both lists are mutated in place so that callers holding references to
    them see the change.

    Returns:
        Number of cards moved.
    """
    moved = len(discard_pile)
    deck.extend(shuffle(discard_pile, rng))
    discard_pile.clear()
    return moved


def perform_draw(
    player,
    discard_indices: Collection[int],
    deck: list[Card],
    discard_pile: list[Card],
    rng: Optional[random.Random] = None,
) -> list[Card]:
    """
    Discard the cards at discard_indices and draw replacements.

    Discarded cards go to the end of the discard pile in hand order. Kept
    cards keep their relative order; drawn cards are appended after them.

    Args:
        player: Object with a mutable `hand` list and an `id`.
        discard_indices: Distinct, in-range hand positions.
        deck: Draw pile (end of list is the top).
        discard_pile: Discard pile.
        rng: Random instance used if the discard pile must be reshuffled.

    Returns:
        The newly drawn cards, in draw order.

    Raises:
        DeckExhaustedError: If deck and discard pile are both empty before
            the hand is refilled.
    """
    positions = set(discard_indices)
    discarded = [card for i, card in enumerate(player.hand) if i in positions]
    player.hand = [card for i, card in enumerate(player.hand) if i not in positions]
    discard_pile.extend(discarded)

    drawn = []
    for _ in range(len(positions)):
        if not deck:
            if not discard_pile:
                logger.critical(
                    f"No cards left in deck or discard pile while {player.id} was drawing "
                    f"({len(drawn)}/{len(positions)} drawn)"
                )
                raise DeckExhaustedError("Deck and discard pile are both empty")
            moved = recycle_discard_pile(deck, discard_pile, rng)
            logger.info(f"Deck empty, reshuffled {moved} discarded cards into a new deck")
        card = deck.pop()
        player.hand.append(card)
        drawn.append(card)

    logger.debug(
        f"{player.id} discarded {[str(c) for c in discarded]}, drew {[str(c) for c in drawn]}"
    )
    return drawn
