"""Shared fixtures: shipped catalogs, scripted randomness, engine factory."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

import pytest

from idleserver.engine.game_engine import GameEngine, create_game_state
from idleserver.loaders.game_config_loader import GameConfig, load_game_config
from idleserver.loaders.production_loader import load_productions
from idleserver.loaders.skill_tree_loader import load_skill_trees
from idleserver.models.game_state import GameState
from idleserver.util.events import EventBus

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


class ScriptedRandom:
    """Random source replaying fixed values (the last one repeats)."""

    def __init__(self, values: Iterable[float] = (0.99,)) -> None:
        self._values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self._values[min(self.calls, len(self._values) - 1)]
        self.calls += 1
        return value


@pytest.fixture
def config_dir() -> Path:
    return CONFIG_DIR


@pytest.fixture
def game_config() -> GameConfig:
    return load_game_config(CONFIG_DIR / "game.yaml")


@pytest.fixture(scope="session")
def productions():
    return load_productions(CONFIG_DIR / "productions.yaml")


@pytest.fixture(scope="session")
def skill_trees():
    return load_skill_trees(CONFIG_DIR / "skill_trees.yaml")


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def make_engine(game_config, productions, skill_trees, bus) -> Callable[..., tuple[GameEngine, GameState]]:
    """Factory returning ``(engine, state)`` for a fresh game started at t=0."""

    def _make(rng=None, now: float = 0.0) -> tuple[GameEngine, GameState]:
        state = create_game_state(game_config, productions, skill_trees, now=now)
        engine = GameEngine(state, bus, game_config, rng=rng or ScriptedRandom())
        return engine, state

    return _make


@pytest.fixture
def engine_state(make_engine) -> tuple[GameEngine, GameState]:
    return make_engine()
