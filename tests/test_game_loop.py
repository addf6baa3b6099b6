"""Tests for the asyncio game loop."""

from unittest.mock import MagicMock

import pytest

from idleserver.engine.game_loop import GameLoop
from idleserver.loaders.game_config_loader import GameConfig
from idleserver.models.resources import Resource


def _loop_stopping_after(ticks: int, engine=None, clock=None):
    engine = engine or MagicMock()
    kwargs = {"clock": clock} if clock else {}
    loop = GameLoop(engine, GameConfig(step_length_ms=0), **kwargs)
    calls = []
    real_tick = engine.tick

    def tick(now):
        calls.append(now)
        real_tick(now)
        if len(calls) >= ticks:
            loop.stop()

    engine.tick = tick
    return loop, calls


class TestGameLoop:
    @pytest.mark.asyncio
    async def test_runs_until_stopped(self):
        loop, calls = _loop_stopping_after(3)
        await loop.run()
        assert len(calls) == 3
        assert loop.tick_count == 3
        assert loop.is_running is False
        assert loop.avg_tick_duration_ms >= 0

    @pytest.mark.asyncio
    async def test_ticks_with_clock_time(self):
        times = iter([1.0, 2.0, 3.0])
        loop, calls = _loop_stopping_after(3, clock=lambda: next(times))
        await loop.run()
        assert calls == [1.0, 2.0, 3.0]

    @pytest.mark.asyncio
    async def test_drives_a_real_engine(self, engine_state):
        engine, state = engine_state
        engine.set_active_specialization("mining")
        times = iter([1.0, 2.0, 3.0])
        loop, _ = _loop_stopping_after(3, engine=engine, clock=lambda: next(times))
        await loop.run()
        assert state.resources[Resource.STONE] == 3
        assert state.last_tick == 3.0

    @pytest.mark.asyncio
    async def test_failing_tick_stops_loop(self):
        engine = MagicMock()
        engine.tick.side_effect = RuntimeError("boom")
        loop = GameLoop(engine, GameConfig(step_length_ms=0))
        with pytest.raises(RuntimeError):
            await loop.run()
        assert loop.is_running is False
        assert loop.tick_count == 0

    def test_default_interval(self):
        loop = GameLoop(MagicMock())
        assert loop._step_interval == 1.0
        assert loop.uptime_seconds == 0.0

    def test_interval_from_config(self):
        loop = GameLoop(MagicMock(), GameConfig(step_length_ms=250))
        assert loop._step_interval == 0.25
