"""
Test suite for the WebSocket endpoint's receive loop.

Drives main.websocket_endpoint with a queue-fed fake socket against a real
Room, so frame decoding and dispatch are exercised without a server.

Run with: pytest test_main.py -v
"""

import asyncio
import json

import pytest
from fastapi import WebSocketDisconnect

import main
from constants import PLAYERS_PER_GAME
from game import GamePhase
from room import Room


# =============================================================================
# Mock helpers
# =============================================================================

class MockWebSocket:
    """Mock WebSocket that collects sent messages."""

    def __init__(self):
        self.messages: list[dict] = []

    async def send_json(self, data: dict):
        self.messages.append(data)

    async def close(self, code: int = 1000, reason: str = ""):
        pass

    def messages_of_type(self, msg_type: str) -> list[dict]:
        return [m for m in self.messages if m.get("type") == msg_type]


class QueueWebSocket(MockWebSocket):
    """Mock WebSocket whose inbound text frames come from a queue. None disconnects."""

    def __init__(self):
        super().__init__()
        self.query_params: dict[str, str] = {}
        self.inbox: asyncio.Queue = asyncio.Queue()

    async def accept(self):
        pass

    async def receive_text(self) -> str:
        frame = await self.inbox.get()
        if frame is None:
            raise WebSocketDisconnect()
        return frame


async def wait_until(predicate, attempts: int = 200):
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture
def room(monkeypatch):
    room = Room(seed=0)
    monkeypatch.setattr(main, "room", room)
    return room


async def seat_others(room) -> dict[str, MockWebSocket]:
    """Seat all but one player directly so the endpoint's participant completes the table."""
    sockets = {}
    for i in range(PLAYERS_PER_GAME - 1):
        ws = MockWebSocket()
        sockets[f"p{i}"] = ws
        room.connect(f"p{i}", ws)
        await room.join(f"p{i}")
    return sockets


# =============================================================================
# Receive loop
# =============================================================================

class TestReceiveLoop:

    @pytest.mark.asyncio
    async def test_connect_seats_and_disconnect_unseats(self, room):
        ws = QueueWebSocket()
        task = asyncio.create_task(main.websocket_endpoint(ws))

        await wait_until(lambda: len(room.session.players) == 1)
        assert ws.messages_of_type("player_joined")

        ws.inbox.put_nowait(None)
        await task
        assert room.session.players == []
        assert room.connections == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("frame", ["not json{", "[1, 2]", "42", '"join"', ""])
    async def test_malformed_frame_keeps_game_running(self, room, frame):
        others = await seat_others(room)
        ws = QueueWebSocket()
        task = asyncio.create_task(main.websocket_endpoint(ws))
        await wait_until(lambda: room.session.phase == GamePhase.DRAW_PHASE)
        game_id = room.session.game_id

        ws.inbox.put_nowait(frame)
        ws.inbox.put_nowait(json.dumps({"type": "get_state"}))
        await wait_until(lambda: ws.messages_of_type("state"))

        errors = ws.messages_of_type("action_error")
        assert errors == [{
            "type": "action_error",
            "message": "Malformed message: expected a JSON object.",
        }]
        assert room.session.game_id == game_id
        assert room.session.phase == GamePhase.DRAW_PHASE
        assert len(room.session.players) == PLAYERS_PER_GAME
        for other in others.values():
            assert not other.messages_of_type("game_reset")

        ws.inbox.put_nowait(None)
        await task

    @pytest.mark.asyncio
    async def test_unknown_type_gets_action_error(self, room):
        ws = QueueWebSocket()
        task = asyncio.create_task(main.websocket_endpoint(ws))
        await wait_until(lambda: len(room.session.players) == 1)

        ws.inbox.put_nowait(json.dumps({"type": "shuffle"}))
        await wait_until(lambda: ws.messages_of_type("action_error"))

        assert ws.messages_of_type("action_error")[0]["message"] == "Unknown message type: shuffle"
        assert len(room.session.players) == 1

        ws.inbox.put_nowait(None)
        await task

    @pytest.mark.asyncio
    async def test_discard_request_dispatched(self, room):
        others = await seat_others(room)
        ws = QueueWebSocket()
        task = asyncio.create_task(main.websocket_endpoint(ws))
        await wait_until(lambda: room.session.phase == GamePhase.DRAW_PHASE)

        await room.request_discard("p0", [])
        await room.request_discard("p1", [])
        await room.request_discard("p2", [])
        ws.inbox.put_nowait(json.dumps({"type": "discard_request", "indices": [0, 1]}))
        await wait_until(lambda: ws.messages_of_type("draw_processed"))

        assert ws.messages_of_type("draw_processed")[0]["cards_drawn"] == 2
        assert others["p0"].messages_of_type("round_results")

        ws.inbox.put_nowait(None)
        await task
