"""
Outbound notification definitions for Joker Draw.

The game state machine never touches sockets. It describes what happened
as Notification objects; the room delivers them to one participant
(`target`) or to everyone connected (`target=None`).

Roster entries passed to these factories are the public player dicts built
by GameSession.public_roster(): id, name, score, card_count,
has_completed_draw_phase.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class NotificationType(str, Enum):
    """All outbound message types."""

    # Lobby
    PLAYER_JOINED = "player_joined"
    ROSTER_UPDATE = "roster_update"
    GAME_FULL = "game_full"
    GAME_RESET = "game_reset"

    # Round flow
    GAME_START = "game_start"
    ROUND_START = "round_start"
    DRAW_PROCESSED = "draw_processed"
    TURN_ADVANCE = "turn_advance"
    SHOWDOWN = "showdown"
    ROUND_RESULTS = "round_results"
    GAME_OVER = "game_over"

    # Replies
    ACTION_ERROR = "action_error"
    STATE = "state"


@dataclass
class Notification:
    """
    A message for one participant or for everyone.

    Attributes:
        type: Message type.
        data: Payload fields (merged into the top level of the message).
        target: Recipient participant id, or None to broadcast.
    """

    type: NotificationType
    data: dict = field(default_factory=dict)
    target: Optional[str] = None

    @property
    def is_broadcast(self) -> bool:
        return self.target is None

    def to_message(self) -> dict:
        """Render as a JSON-serializable message dict."""
        return {"type": self.type.value, **self.data}


# =============================================================================
# Notification Factory Functions
# =============================================================================


def player_joined(player_id: str, player_name: str, roster: list[dict]) -> Notification:
    """Private acknowledgement for the player who just took a seat."""
    return Notification(
        type=NotificationType.PLAYER_JOINED,
        target=player_id,
        data={
            "player_id": player_id,
            "player_name": player_name,
            "players": roster,
        },
    )


def roster_update(roster: list[dict]) -> Notification:
    """Broadcast of the seated players (id, name, score)."""
    return Notification(
        type=NotificationType.ROSTER_UPDATE,
        data={"players": [
            {"id": p["id"], "name": p["name"], "score": p["score"]} for p in roster
        ]},
    )


def hand_dealt(
    start_type: NotificationType,
    player_id: str,
    hand: list[dict],
    round_num: int,
    current_player: dict,
    phase: str,
    roster: list[dict],
    deck_size: int,
    discard_pile_size: int,
) -> Notification:
    """
    Private deal notice (GAME_START or ROUND_START).

    Each player receives only their own hand; everything else is public.
    """
    return Notification(
        type=start_type,
        target=player_id,
        data={
            "hand": hand,
            "round": round_num,
            "is_your_turn": current_player["id"] == player_id,
            "current_player_id": current_player["id"],
            "current_player_name": current_player["name"],
            "phase": phase,
            "players": roster,
            "deck_size": deck_size,
            "discard_pile_size": discard_pile_size,
        },
    )


def draw_processed(
    player_id: str,
    new_hand: list[dict],
    cards_drawn: int,
    phase: str,
    roster: list[dict],
    deck_size: int,
    discard_pile_size: int,
) -> Notification:
    """Private result of a draw for the acting player."""
    return Notification(
        type=NotificationType.DRAW_PROCESSED,
        target=player_id,
        data={
            "new_hand": new_hand,
            "cards_drawn": cards_drawn,
            "phase": phase,
            "players": roster,
            "deck_size": deck_size,
            "discard_pile_size": discard_pile_size,
        },
    )


def turn_advance(turn_index: int, current_player: dict, phase: str, roster: list[dict]) -> Notification:
    """Broadcast that the draw turn moved to another player."""
    return Notification(
        type=NotificationType.TURN_ADVANCE,
        data={
            "current_player_index": turn_index,
            "current_player_id": current_player["id"],
            "current_player_name": current_player["name"],
            "phase": phase,
            "players": roster,
        },
    )


def showdown(phase: str, roster: list[dict]) -> Notification:
    """Broadcast that every player has drawn and hands are being shown."""
    return Notification(
        type=NotificationType.SHOWDOWN,
        data={"phase": phase, "players": roster},
    )


def round_results(
    round_num: int,
    results: list[dict],
    deck_size: int,
    discard_pile_size: int,
) -> Notification:
    """Broadcast of every hand, its category and the round winner flags."""
    return Notification(
        type=NotificationType.ROUND_RESULTS,
        data={
            "round": round_num,
            "results": results,
            "deck_size": deck_size,
            "discard_pile_size": discard_pile_size,
        },
    )


def game_over(standings: list[dict], winner_ids: list[str]) -> Notification:
    """Broadcast of final scores and the overall winner(s)."""
    return Notification(
        type=NotificationType.GAME_OVER,
        data={
            "message": "The game has ended!",
            "players": standings,
            "winner_ids": winner_ids,
        },
    )


def action_error(player_id: str, message: str) -> Notification:
    return Notification(
        type=NotificationType.ACTION_ERROR,
        target=player_id,
        data={"message": message},
    )


def game_full(player_id: str, message: str = "Game is currently full or in progress.") -> Notification:
    return Notification(
        type=NotificationType.GAME_FULL,
        target=player_id,
        data={"message": message},
    )


def game_reset(message: str, phase: str) -> Notification:
    """Broadcast that the session was discarded and recreated."""
    return Notification(
        type=NotificationType.GAME_RESET,
        data={"message": message, "phase": phase, "players": []},
    )


def state(player_id: str, snapshot: dict) -> Notification:
    """Private reply carrying a state snapshot."""
    return Notification(
        type=NotificationType.STATE,
        target=player_id,
        data={"game_state": snapshot},
    )
