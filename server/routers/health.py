"""
Health check endpoints.

Provides:
- /health - Basic liveness check (is the app running?)
- /metrics - Table metrics for monitoring
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

# Set during app initialization
_room = None


def set_health_dependencies(room=None):
    """Set dependencies for health checks."""
    global _room
    _room = room


@router.get("/health")
async def health_check():
    """
    Basic liveness check.

    Always returns 200 while the process is alive.
    """
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/metrics")
async def metrics():
    """Expose the state of the table for dashboards."""
    metrics_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if _room is not None:
        session = _room.session
        metrics_data.update({
            "game_id": session.game_id,
            "phase": session.phase.value,
            "round": session.current_round,
            "seated_players": len(session.players),
            "connected_participants": len(_room.connections),
            "deck_size": len(session.deck),
            "discard_pile_size": len(session.discard_pile),
        })

    return metrics_data
