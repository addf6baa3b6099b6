"""Main game loop — asyncio-based 1-second tick.

Responsibilities:
- Call GameEngine.tick with the current clock reading once per step
- Keep tick timing counters for monitoring

Commands from the REST API run on the same event loop between ticks; the
engine lock serializes them against the tick either way.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from idleserver.engine.game_engine import GameEngine
    from idleserver.loaders.game_config_loader import GameConfig

log = logging.getLogger(__name__)


class GameLoop:
    """The central game tick loop.

    Args:
        engine: Engine owning the game state.
        game_config: Supplies the step interval (default 1 s).
        clock: Time source in seconds; must match the one the game
            state was created with.
    """

    def __init__(
        self,
        engine: GameEngine,
        game_config: GameConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._engine = engine
        self._clock = clock
        self._running = False
        self._step_interval = (game_config.step_length_ms / 1000.0) if game_config else 1.0

        # --- Monitoring counters ---
        self.tick_count: int = 0
        self.started_at: float = 0.0
        self.last_tick_duration_ms: float = 0.0
        self.avg_tick_duration_ms: float = 0.0
        self._tick_duration_sum: float = 0.0

    async def run(self) -> None:
        """Start the game loop. Runs until stop() is called."""
        self._running = True
        self.started_at = time.monotonic()
        while self._running:
            t0 = time.monotonic()
            self._step()
            elapsed_ms = (time.monotonic() - t0) * 1000

            self.tick_count += 1
            self.last_tick_duration_ms = elapsed_ms
            self._tick_duration_sum += elapsed_ms
            self.avg_tick_duration_ms = self._tick_duration_sum / self.tick_count

            await asyncio.sleep(self._step_interval)

    @property
    def uptime_seconds(self) -> float:
        """Seconds since the loop started."""
        if self.started_at == 0.0:
            return 0.0
        return time.monotonic() - self.started_at

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Signal the game loop to stop."""
        self._running = False

    def _step(self) -> None:
        """One tick of the game loop."""
        try:
            self._engine.tick(self._clock())
        except Exception:
            log.exception("Tick %d failed", self.tick_count)
            self.stop()
            raise
