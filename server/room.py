"""
Session hosting and WebSocket fan-out for Joker Draw.

The server runs a single table. A Room holds:
    - The live WebSocket connections, keyed by participant id
    - The one GameSession (replaced wholesale whenever it is reset)
    - An asyncio.Lock that serializes every mutation of that session

The session reports what happened through its notifier callback. The room
collects those notifications in an outbox while the mutation runs and sends
them once the mutation has finished, so no state change waits on a socket.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, Optional

from fastapi import WebSocket

from draw import DeckExhaustedError
from game import ActionError, GameError, GameFullError, GamePhase, GameSession
from logging_config import get_logger
from models import notifications
from models.notifications import Notification

logger = get_logger(__name__)


@dataclass
class RoomPlayer:
    """
    A connected participant (transport-level representation).

    This is separate from game.Player: a participant may be connected
    without being seated, for example after a reset or while the table
    is full.

    Attributes:
        id: Participant id assigned on connect.
        websocket: The participant's WebSocket connection.
        name: Display name requested on connect, if any.
    """

    id: str
    websocket: Optional[WebSocket] = None
    name: Optional[str] = None


@dataclass
class Room:
    """
    The single game table.

    Attributes:
        connections: Connected participants by id.
        seed: Shuffle seed for every session this room creates.
        game_over_reset_seconds: Delay before a finished game is reset (0 = never).
        session: The current GameSession.
        game_lock: Serializes session mutations.
    """

    connections: dict[str, RoomPlayer] = field(default_factory=dict)
    seed: Optional[int] = None
    game_over_reset_seconds: int = 0
    session: Optional[GameSession] = None
    game_lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    _outbox: list[Notification] = field(default_factory=list, repr=False)
    _reset_task: Optional[asyncio.Task] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = GameSession.create(seed=self.seed)
        self.session.set_notifier(self._outbox.append)

    @property
    def log(self):
        return logger.with_context(game_id=self.session.game_id, phase=self.session.phase.value)

    # -------------------------------------------------------------------------
    # Connections
    # -------------------------------------------------------------------------

    def connect(self, participant_id: str, websocket: WebSocket, name: Optional[str] = None) -> RoomPlayer:
        """Register a connection. Does not seat the participant."""
        room_player = RoomPlayer(id=participant_id, websocket=websocket, name=name)
        self.connections[participant_id] = room_player
        self.log.info(f"Connection {participant_id} registered ({len(self.connections)} connected)")
        return room_player

    async def disconnect(self, participant_id: str) -> None:
        """Forget a closed connection and unseat its player."""
        self.connections.pop(participant_id, None)
        await self.leave(participant_id)
        self.log.info(f"Connection {participant_id} closed ({len(self.connections)} connected)")

    # -------------------------------------------------------------------------
    # Game Operations
    # -------------------------------------------------------------------------

    async def join(self, participant_id: str, name: Optional[str] = None) -> None:
        """Try to seat a participant; refusals are reported to them only."""
        async with self.game_lock:
            self._outbox.clear()
            room_player = self.connections.get(participant_id)
            if name is None and room_player:
                name = room_player.name
            try:
                self.session.add_player(participant_id, name)
            except GameFullError as e:
                self.log.info(f"Join refused for {participant_id}: {e}")
                self._outbox.append(notifications.game_full(participant_id, str(e)))
            except ActionError as e:
                self._outbox.append(notifications.action_error(participant_id, str(e)))
            except GameError:
                self._outbox.clear()
                self._reset_session("Internal error: the deck ran out. Game has been reset.")
                await self._flush()
                raise
            await self._flush()

    async def leave(self, participant_id: str) -> None:
        """
        Unseat a participant.

        Losing a player mid-game discards the session. An empty finished
        session is also replaced so that new players can join.
        """
        async with self.game_lock:
            self._outbox.clear()
            removed = self.session.remove_player(participant_id)
            if removed is not None:
                if self.session.needs_reset:
                    self._reset_session(
                        f"{removed.name} left. Game has been reset. Waiting for players."
                    )
                elif self.session.phase == GamePhase.GAME_OVER and not self.session.players:
                    self._reset_session("Game over and all players left. Waiting for players.")
            await self._flush()

    async def request_discard(self, participant_id: str, indices: Iterable[int]) -> None:
        """Apply a discard/draw request; rejections go to the requester only."""
        async with self.game_lock:
            self._outbox.clear()
            try:
                self.session.request_discard(participant_id, indices)
            except ActionError as e:
                self.log.info(f"Discard rejected for {participant_id}: {e}")
                self._outbox.append(notifications.action_error(participant_id, str(e)))
            except (DeckExhaustedError, GameError):
                self._outbox.clear()
                self._reset_session("Internal error: the deck ran out. Game has been reset.")
                await self._flush()
                raise
            await self._flush()

            if self.session.phase == GamePhase.GAME_OVER:
                self._schedule_game_over_reset()

    async def send_state(self, participant_id: str) -> None:
        """Send a participant their private view of the session."""
        async with self.game_lock:
            snapshot = self.session.get_state(participant_id)
        await self.send_to(participant_id, notifications.state(participant_id, snapshot).to_message())

    async def reset_session(self, reason: str) -> None:
        async with self.game_lock:
            self._outbox.clear()
            self._reset_session(reason)
            await self._flush()

    def _reset_session(self, reason: str) -> None:
        """Replace the session with a fresh one. Caller holds the lock."""
        old = self.session
        self.log.warning(f"Resetting game session: {reason}")
        self.session = GameSession.create(seed=self.seed)
        self.session.set_notifier(self._outbox.append)
        self._outbox.append(notifications.game_reset(reason, self.session.phase.value))
        logger.debug(f"Session {old.game_id} replaced by {self.session.game_id}")

    def _schedule_game_over_reset(self) -> None:
        if self.game_over_reset_seconds <= 0:
            return
        if self._reset_task is not None and not self._reset_task.done():
            return
        self._reset_task = asyncio.create_task(self._reset_after_game_over(self.session.game_id))

    async def _reset_after_game_over(self, game_id: str) -> None:
        await asyncio.sleep(self.game_over_reset_seconds)
        async with self.game_lock:
            # Only the finished session this timer was started for
            if self.session.game_id != game_id or self.session.phase != GamePhase.GAME_OVER:
                return
            self._outbox.clear()
            self._reset_session("Starting a new game. Waiting for players.")
            await self._flush()

    # -------------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------------

    async def _flush(self) -> None:
        """Send and clear everything queued during the last mutation."""
        outbox = list(self._outbox)
        self._outbox.clear()
        for notification in outbox:
            message = notification.to_message()
            if notification.is_broadcast:
                await self.broadcast(message)
            else:
                await self.send_to(notification.target, message)

    async def broadcast(self, message: dict, exclude: Optional[str] = None) -> None:
        """
        Send a message to every connected participant.

        Args:
            message: JSON-serializable message dict.
            exclude: Optional participant id to skip.
        """
        for participant_id, room_player in list(self.connections.items()):
            if participant_id != exclude and room_player.websocket:
                try:
                    await room_player.websocket.send_json(message)
                except Exception as e:
                    logger.debug(f"Send to {participant_id} failed: {e}")

    async def send_to(self, participant_id: str, message: dict) -> None:
        room_player = self.connections.get(participant_id)
        if room_player and room_player.websocket:
            try:
                await room_player.websocket.send_json(message)
            except Exception as e:
                logger.debug(f"Send to {participant_id} failed: {e}")

    async def close(self) -> None:
        """Cancel timers and close every connection (server shutdown)."""
        if self._reset_task is not None:
            self._reset_task.cancel()
        for room_player in list(self.connections.values()):
            if room_player.websocket:
                try:
                    await room_player.websocket.close(code=1001, reason="Server shutting down")
                except Exception:
                    pass
        self.log.info("All WebSocket connections closed")
