"""FastAPI WebSocket server for the Joker Draw card game."""

import json
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from config import config
from draw import DeckExhaustedError
from game import GameError
from handlers import HANDLERS, ConnectionContext
from hand_eval import InvalidHandError
from logging_config import participant_id_var, setup_logging
from models import notifications
from room import Room
from routers.health import router as health_router, set_health_dependencies

# Configure logging based on environment
setup_logging(
    level=config.LOG_LEVEL,
    environment=config.ENVIRONMENT,
)
logger = logging.getLogger(__name__)

room = Room(
    seed=config.SHUFFLE_SEED,
    game_over_reset_seconds=config.GAME_OVER_RESET_SECONDS,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    set_health_dependencies(room=room)
    logger.info(f"Joker Draw server started (environment={config.ENVIRONMENT})")

    yield

    logger.info("Shutdown initiated...")
    await room.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Joker Draw",
    debug=config.DEBUG,
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(health_router)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()

    participant_id = str(uuid.uuid4())
    participant_id_var.set(participant_id)
    name = websocket.query_params.get("name") or None
    logger.debug(f"WebSocket connected as {participant_id}")

    ctx = ConnectionContext(
        websocket=websocket,
        participant_id=participant_id,
        room=room,
        name=name,
    )

    room.connect(participant_id, websocket, name)

    try:
        try:
            await room.join(participant_id, name)
        except GameError:
            logger.exception("Internal error seating participant")

        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except ValueError:
                data = None
            if not isinstance(data, dict):
                logger.info(f"Malformed message from {participant_id}")
                await websocket.send_json(notifications.action_error(
                    participant_id, "Malformed message: expected a JSON object."
                ).to_message())
                continue
            handler = HANDLERS.get(data.get("type"))
            if handler is None:
                await websocket.send_json(notifications.action_error(
                    participant_id, f"Unknown message type: {data.get('type')}"
                ).to_message())
                continue
            try:
                await handler(data, ctx)
            except (DeckExhaustedError, GameError, InvalidHandError):
                logger.exception(f"Internal error handling {data.get('type')}")
    except WebSocketDisconnect:
        logger.debug(f"WebSocket {participant_id} disconnected")
    finally:
        await room.disconnect(participant_id)


def run():
    """Run the server using uvicorn."""
    import uvicorn

    logger.info(f"Starting Joker Draw server on {config.HOST}:{config.PORT}")
    logger.info(f"Debug mode: {config.DEBUG}")

    uvicorn.run(
        "main:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.DEBUG,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
