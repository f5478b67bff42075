"""
Test suite for the health and metrics endpoints.

Run with: pytest test_health.py -v
"""

import pytest

from room import Room
from routers import health


@pytest.fixture(autouse=True)
def reset_dependencies():
    yield
    health.set_health_dependencies(room=None)


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_ok(self):
        result = await health.health_check()
        assert result["status"] == "ok"
        assert "timestamp" in result

    @pytest.mark.asyncio
    async def test_metrics_without_room(self):
        result = await health.metrics()
        assert set(result) == {"timestamp"}

    @pytest.mark.asyncio
    async def test_metrics_report_table(self):
        room = Room(seed=0)
        for i in range(4):
            room.connect(f"p{i}", None)
            await room.join(f"p{i}")
        health.set_health_dependencies(room=room)

        result = await health.metrics()

        assert result["phase"] == "RoundInProgress_DrawPhase"
        assert result["round"] == 1
        assert result["seated_players"] == 4
        assert result["connected_participants"] == 4
        assert result["deck_size"] == 34
        assert result["discard_pile_size"] == 0
