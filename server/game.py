"""
Game logic for Joker Draw.

This module implements the authoritative session state machine: seating,
dealing, the single draw turn of each player, showdown scoring and the
advance to the next round or the end of the game.

Joker Draw Rules Summary:
    - Exactly four players; a round starts as soon as the fourth joins
    - 54-card deck: 52 standard cards plus two jokers, which are wild
    - Each player is dealt five cards
    - In seat order, each player discards 0-5 cards once and draws
      replacements
    - At showdown the best poker hand wins the round and scores 1 point
      (tied best hands all score)
    - After three rounds the highest score wins (ties share the win)

Phase flow:
    WaitingForPlayers -> RoundInProgress_DrawPhase -> RoundInProgress_Showdown
        -> PreparingNewRound -> RoundInProgress_DrawPhase ...
        -> GameOver

The session never sends anything itself. Every outbound message is handed
to the notifier callback installed with set_notifier(); see
models/notifications.py.
"""

import logging
import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional

from cards import Card, create_deck, deal_hands, shuffle
from constants import HAND_SIZE, MAX_ROUNDS, PLAYERS_PER_GAME
from draw import perform_draw, recycle_discard_pile
from models import notifications
from models.notifications import Notification, NotificationType
from scoring import ShowdownResult, game_winners, resolve_showdown

logger = logging.getLogger(__name__)


class GameError(Exception):
    """Base class for rejected game operations."""


class ActionError(GameError):
    """A player action was malformed or not allowed right now. State is unchanged."""


class GameFullError(GameError):
    """A join was refused because the table is full or a game is running."""


class GamePhase(str, Enum):
    """
    Phases of a Joker Draw session.

    Flow: WAITING_FOR_PLAYERS -> DRAW_PHASE -> SHOWDOWN
          -> PREPARING_NEW_ROUND -> DRAW_PHASE ... -> GAME_OVER
    """

    WAITING_FOR_PLAYERS = "WaitingForPlayers"
    DRAW_PHASE = "RoundInProgress_DrawPhase"
    SHOWDOWN = "RoundInProgress_Showdown"
    PREPARING_NEW_ROUND = "PreparingNewRound"
    GAME_OVER = "GameOver"


# Phases in which losing a player leaves the session unplayable
IN_PROGRESS_PHASES = (
    GamePhase.DRAW_PHASE,
    GamePhase.SHOWDOWN,
    GamePhase.PREPARING_NEW_ROUND,
)


@dataclass
class Player:
    """
    A seated player.

    Attributes:
        id: Stable identity (the participant id assigned by the transport).
        name: Display name.
        hand: Exactly five cards during a round, empty while waiting.
        score: Rounds won so far in this game.
        has_completed_draw_phase: Whether this player has drawn this round.
    """

    id: str
    name: str
    hand: list[Card] = field(default_factory=list)
    score: int = 0
    has_completed_draw_phase: bool = False

    def hand_to_dict(self) -> list[dict]:
        return [card.to_dict() for card in self.hand]

    def to_public_dict(self) -> dict:
        """Fields every participant may see."""
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "card_count": len(self.hand),
            "has_completed_draw_phase": self.has_completed_draw_phase,
        }


@dataclass
class GameSession:
    """
    Main game state and logic controller for one Joker Draw game.

    Build with GameSession.create(); a session is never reused after a
    reset, the holder replaces it with a fresh one.

    Attributes:
        players: Seated players in join order (also the turn order, max 4).
        deck: Draw pile; the end of the list is the top.
        discard_pile: Cards discarded this round.
        current_player_index: Seat whose draw request is currently accepted.
        current_round: 1-based round number (0 before the first deal).
        max_rounds: Rounds in a game.
        phase: Current phase.
        rng: Random source for every shuffle in this session.
        last_showdown: Results of the most recent showdown, if any.
        game_id: Unique identifier used in logs.
    """

    players: list[Player] = field(default_factory=list)
    deck: list[Card] = field(default_factory=list)
    discard_pile: list[Card] = field(default_factory=list)
    current_player_index: int = 0
    current_round: int = 0
    max_rounds: int = MAX_ROUNDS
    phase: GamePhase = GamePhase.WAITING_FOR_PLAYERS
    rng: random.Random = field(default_factory=random.Random, repr=False)
    last_showdown: Optional[ShowdownResult] = None
    game_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    _notifier: Optional[Callable[[Notification], None]] = field(
        default=None, repr=False, compare=False
    )

    @classmethod
    def create(cls, seed: Optional[int] = None) -> "GameSession":
        """
        Create a session waiting for players, with a freshly shuffled deck.

        Args:
            seed: Optional seed for reproducible shuffles.
        """
        rng = random.Random(seed)
        session = cls(deck=shuffle(create_deck(), rng), rng=rng)
        logger.info(f"Game session {session.game_id} initialized, waiting for players")
        return session

    def set_notifier(self, notifier: Callable[[Notification], None]) -> None:
        """
        Set callback for outbound notifications.

        The callback is invoked synchronously while state is being changed,
        so it must only record the notification, never wait on I/O.
        """
        self._notifier = notifier

    def _notify(self, notification: Notification) -> None:
        if self._notifier is not None:
            self._notifier(notification)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def is_accepting_players(self) -> bool:
        return self.phase == GamePhase.WAITING_FOR_PLAYERS and len(self.players) < PLAYERS_PER_GAME

    @property
    def needs_reset(self) -> bool:
        """True once an in-progress game has lost a player."""
        return self.phase in IN_PROGRESS_PHASES and len(self.players) < PLAYERS_PER_GAME

    def get_player(self, player_id: str) -> Optional[Player]:
        """Find a seated player by id."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def current_player(self) -> Optional[Player]:
        """Get the player whose draw turn it currently is."""
        if self.players:
            return self.players[self.current_player_index]
        return None

    def public_roster(self) -> list[dict]:
        return [player.to_public_dict() for player in self.players]

    def all_cards(self) -> list[Card]:
        """Every card the session holds: deck, discard pile and hands."""
        cards = list(self.deck) + list(self.discard_pile)
        for player in self.players:
            cards.extend(player.hand)
        return cards

    # -------------------------------------------------------------------------
    # Player Management
    # -------------------------------------------------------------------------

    def add_player(self, player_id: str, name: Optional[str] = None) -> Player:
        """
        Seat a new player at the end of the turn order.

        Seating the fourth player deals the first round.

        Args:
            player_id: Stable identity of the participant.
            name: Display name; defaults to "Player N".

        Returns:
            The new Player.

        Raises:
            GameFullError: If four players are seated or a game is running.
            ActionError: If the participant is already seated.
        """
        if self.get_player(player_id):
            raise ActionError("You are already seated.")
        if not self.is_accepting_players:
            raise GameFullError("Game is currently full or in progress.")

        player = Player(id=player_id, name=name or f"Player {len(self.players) + 1}")
        self.players.append(player)
        logger.info(f"{player.name} ({player.id}) joined. Total players: {len(self.players)}")

        roster = self.public_roster()
        self._notify(notifications.player_joined(player.id, player.name, roster))
        self._notify(notifications.roster_update(roster))

        if len(self.players) == PLAYERS_PER_GAME:
            self.start_game()

        return player

    def remove_player(self, player_id: str) -> Optional[Player]:
        """
        Remove a player from the turn order, in any phase.

        The player's cards go to the discard pile so the session still
        holds all 54 cards. Whether the session survives is the holder's
        decision (see needs_reset).

        Returns:
            The removed Player, or None if not seated.
        """
        for i, player in enumerate(self.players):
            if player.id == player_id:
                removed = self.players.pop(i)
                self.discard_pile.extend(removed.hand)
                removed.hand = []
                if i < self.current_player_index:
                    self.current_player_index -= 1
                if self.current_player_index >= len(self.players):
                    self.current_player_index = 0
                logger.info(f"{removed.name} ({removed.id}) removed during {self.phase.value}")
                self._notify(notifications.roster_update(self.public_roster()))
                return removed
        return None

    # -------------------------------------------------------------------------
    # Game Lifecycle
    # -------------------------------------------------------------------------

    def start_game(self) -> None:
        """Deal the first round. Called when the fourth player is seated."""
        if len(self.players) != PLAYERS_PER_GAME:
            raise GameError(f"Need exactly {PLAYERS_PER_GAME} players to start")

        self.current_round = 1
        self._deal_round(NotificationType.GAME_START)

    def _deal_round(self, start_type: NotificationType) -> None:
        for player in self.players:
            player.has_completed_draw_phase = False
        if not deal_hands(self.players, self.deck, HAND_SIZE):
            logger.error(f"Cannot deal round {self.current_round}: {len(self.deck)} cards left")
            raise GameError("Not enough cards to deal a full round")
        self.current_player_index = 0
        self.phase = GamePhase.DRAW_PHASE

        current = self.current_player()
        logger.info(f"Round {self.current_round} started. {current.name}'s turn to draw.")

        roster = self.public_roster()
        for player in self.players:
            self._notify(notifications.hand_dealt(
                start_type,
                player_id=player.id,
                hand=player.hand_to_dict(),
                round_num=self.current_round,
                current_player={"id": current.id, "name": current.name},
                phase=self.phase.value,
                roster=roster,
                deck_size=len(self.deck),
                discard_pile_size=len(self.discard_pile),
            ))

    # -------------------------------------------------------------------------
    # Turn Actions
    # -------------------------------------------------------------------------

    def _validate_indices(self, player: Player, indices: Iterable) -> list[int]:
        if isinstance(indices, (str, bytes, dict)) or not isinstance(indices, Iterable):
            raise ActionError("Discard indices must be a list of hand positions.")
        indices = list(indices)
        if len(indices) > HAND_SIZE or any(
            isinstance(i, bool) or not isinstance(i, int) or not 0 <= i < len(player.hand)
            for i in indices
        ):
            raise ActionError(
                f"Invalid cards to discard. Indices must be valid and 0-{HAND_SIZE} cards."
            )
        if len(set(indices)) != len(indices):
            raise ActionError("Duplicate discard indices are not allowed.")
        return indices

    def request_discard(self, player_id: str, indices: Iterable) -> list[Card]:
        """
        Apply a player's single discard/draw for this round.

        Validation happens before anything changes, so a rejected request
        leaves the session untouched. A successful request may cascade
        through showdown and into the next round (or game over).

        Args:
            player_id: The requesting participant.
            indices: Hand positions to discard (0-5 distinct values).

        Returns:
            The cards drawn.

        Raises:
            ActionError: Wrong phase, wrong turn or bad indices.
        """
        if self.phase != GamePhase.DRAW_PHASE:
            raise ActionError("Not the correct game phase for discarding.")

        player = self.current_player()
        if player is None or player.id != player_id:
            raise ActionError("Not your turn to discard.")

        indices = self._validate_indices(player, indices)

        logger.info(f"{player.name} discards positions {sorted(indices)}")
        drawn = perform_draw(player, indices, self.deck, self.discard_pile, self.rng)
        player.has_completed_draw_phase = True

        self._notify(notifications.draw_processed(
            player.id,
            new_hand=player.hand_to_dict(),
            cards_drawn=len(drawn),
            phase=self.phase.value,
            roster=self.public_roster(),
            deck_size=len(self.deck),
            discard_pile_size=len(self.discard_pile),
        ))

        if all(p.has_completed_draw_phase for p in self.players):
            self.phase = GamePhase.SHOWDOWN
            logger.info("All players have completed the draw phase. Moving to showdown.")
            self._notify(notifications.showdown(self.phase.value, self.public_roster()))
            self._run_showdown()
        else:
            self._next_turn()

        return drawn

    # -------------------------------------------------------------------------
    # Turn & Round Flow (Internal)
    # -------------------------------------------------------------------------

    def _next_turn(self) -> None:
        """Advance to the next seat (circularly) that has not drawn yet."""
        count = len(self.players)
        for step in range(1, count + 1):
            index = (self.current_player_index + step) % count
            if not self.players[index].has_completed_draw_phase:
                self.current_player_index = index
                break

        current = self.current_player()
        logger.info(f"Next turn to draw: {current.name}")
        self._notify(notifications.turn_advance(
            self.current_player_index,
            {"id": current.id, "name": current.name},
            self.phase.value,
            self.public_roster(),
        ))

    def _run_showdown(self) -> None:
        """Score every hand, then move on to the next round or game over."""
        self.last_showdown = resolve_showdown(self.players)
        self._notify(notifications.round_results(
            self.current_round,
            [result.to_dict() for result in self.last_showdown.results],
            deck_size=len(self.deck),
            discard_pile_size=len(self.discard_pile),
        ))
        self._finish_round()

    def _finish_round(self) -> None:
        finished = self.current_round
        self.current_round += 1

        if self.current_round > self.max_rounds:
            self.phase = GamePhase.GAME_OVER
            winners = game_winners(self.players)
            winner_ids = [w.id for w in winners]
            logger.info(
                f"Game over after round {finished}. Winners: {', '.join(w.name for w in winners)}"
            )
            self._notify(notifications.game_over(
                [
                    {
                        "id": p.id,
                        "name": p.name,
                        "final_score": p.score,
                        "is_game_winner": p.id in winner_ids,
                    }
                    for p in self.players
                ],
                winner_ids,
            ))
            return

        self._start_next_round()

    def _start_next_round(self) -> None:
        """
        Gather every card back into the deck, reshuffle and deal again.

        Hands are returned along with the discard pile so the deck is the
        full 54 cards again at the start of each round.
        """
        self.phase = GamePhase.PREPARING_NEW_ROUND
        for player in self.players:
            self.discard_pile.extend(player.hand)
            player.hand = []
        recycle_discard_pile(self.deck, self.discard_pile, self.rng)
        self.deck = shuffle(self.deck, self.rng)
        self._deal_round(NotificationType.ROUND_START)

    # -------------------------------------------------------------------------
    # State Queries
    # -------------------------------------------------------------------------

    def get_state(self, for_player_id: Optional[str] = None) -> dict:
        """
        Get the game state as seen by one participant.

        Only the requester's own hand is included; other players are
        described by their public fields.
        """
        current = self.current_player() if self.phase == GamePhase.DRAW_PHASE else None
        me = self.get_player(for_player_id) if for_player_id else None

        return {
            "game_id": self.game_id,
            "phase": self.phase.value,
            "round": self.current_round,
            "max_rounds": self.max_rounds,
            "players": self.public_roster(),
            "current_player_id": current.id if current else None,
            "is_your_turn": bool(current and me and current.id == me.id),
            "hand": me.hand_to_dict() if me else [],
            "deck_size": len(self.deck),
            "discard_pile_size": len(self.discard_pile),
        }
