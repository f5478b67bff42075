"""
Showdown scoring for Joker Draw.

At the end of each round every hand is evaluated. The round is won by the
strongest category; hands of the same category are separated by their
contributing ranks, and hands still equal share the win. Each round winner
gains ROUND_WIN_POINTS on their running score.
"""

import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Sequence

from cards import Card
from constants import ROUND_WIN_POINTS
from hand_eval import HandEvaluation, compare_evaluations, evaluate_hand

logger = logging.getLogger(__name__)


@dataclass
class PlayerRoundResult:
    """
    One player's showdown outcome.

    Attributes:
        player_id: Stable player identity.
        player_name: Display name.
        hand: The five cards shown.
        evaluation: Category and tie-break ranks.
        is_round_winner: Whether this hand won (or tied for) the round.
        total_score: Running game score after this round's points.
    """

    player_id: str
    player_name: str
    hand: list[Card]
    evaluation: HandEvaluation
    is_round_winner: bool = False
    total_score: int = 0

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "hand": [card.to_dict() for card in self.hand],
            **self.evaluation.to_dict(),
            "is_round_winner": self.is_round_winner,
            "total_score": self.total_score,
        }


@dataclass
class ShowdownResult:
    """All players' results for one round, in seat order."""

    results: list[PlayerRoundResult] = field(default_factory=list)

    @property
    def winners(self) -> list[PlayerRoundResult]:
        return [r for r in self.results if r.is_round_winner]


def resolve_showdown(players: Sequence, points: int = ROUND_WIN_POINTS) -> ShowdownResult:
    """
    Evaluate every hand, mark the round winner(s) and award points.

    Mutates each winning player's `score`.

    Args:
        players: Seated players (with id, name, hand, score), in seat order.
        points: Points awarded to each round winner.

    Returns:
        ShowdownResult with one entry per player.
    """
    showdown = ShowdownResult()
    for player in players:
        showdown.results.append(PlayerRoundResult(
            player_id=player.id,
            player_name=player.name,
            hand=list(player.hand),
            evaluation=evaluate_hand(player.hand),
        ))

    if not showdown.results:
        return showdown

    best = max(
        (r.evaluation for r in showdown.results),
        key=cmp_to_key(compare_evaluations),
    )
    for result in showdown.results:
        result.is_round_winner = compare_evaluations(result.evaluation, best) == 0

    by_id = {player.id: player for player in players}
    for result in showdown.results:
        player = by_id[result.player_id]
        if result.is_round_winner:
            player.score += points
        result.total_score = player.score

    logger.info(
        f"Showdown winners: {', '.join(r.player_name for r in showdown.winners)} "
        f"with {best.name} {list(best.contributing_ranks)}"
    )
    return showdown


def game_winners(players: Sequence) -> list:
    """Players holding the highest cumulative score (ties allowed)."""
    if not players:
        return []
    top = max(player.score for player in players)
    return [player for player in players if player.score == top]
