"""WebSocket message handlers for the Joker Draw server.

Each handler corresponds to a single message type from the client.
Handlers are dispatched via the HANDLERS dict in main.py.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import WebSocket
from pydantic import BaseModel, StrictInt, ValidationError

from models import notifications
from room import Room

logger = logging.getLogger(__name__)


@dataclass
class ConnectionContext:
    """State tracked per WebSocket connection."""

    websocket: WebSocket
    participant_id: str
    room: Room
    name: Optional[str] = None


class DiscardRequest(BaseModel):
    """Payload of a discard_request message."""

    indices: list[StrictInt]


class JoinRequest(BaseModel):
    name: Optional[str] = None


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"Invalid request ({location}): {first['msg']}"


# ---------------------------------------------------------------------------
# Seating handlers
# ---------------------------------------------------------------------------

async def handle_join(data: dict, ctx: ConnectionContext, **kw) -> None:
    try:
        request = JoinRequest.model_validate(data)
    except ValidationError as e:
        await ctx.websocket.send_json(notifications.action_error(ctx.participant_id, _describe(e)).to_message())
        return
    await ctx.room.join(ctx.participant_id, request.name or ctx.name)


async def handle_leave(data: dict, ctx: ConnectionContext, **kw) -> None:
    await ctx.room.leave(ctx.participant_id)


# ---------------------------------------------------------------------------
# Game action handlers
# ---------------------------------------------------------------------------

async def handle_discard_request(data: dict, ctx: ConnectionContext, **kw) -> None:
    try:
        request = DiscardRequest.model_validate(data)
    except ValidationError as e:
        logger.info(f"Malformed discard_request from {ctx.participant_id}")
        await ctx.websocket.send_json(notifications.action_error(ctx.participant_id, _describe(e)).to_message())
        return
    await ctx.room.request_discard(ctx.participant_id, request.indices)


async def handle_get_state(data: dict, ctx: ConnectionContext, **kw) -> None:
    await ctx.room.send_state(ctx.participant_id)


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------

HANDLERS = {
    "join": handle_join,
    "leave": handle_leave,
    "discard_request": handle_discard_request,
    "get_state": handle_get_state,
}
