"""Game server entry point.

Initializes all components and starts the asyncio event loop:
1. Load configuration (game constants, production lines, skill trees, specialization info)
2. Create the game state and engine services
3. Wire event handlers
4. Start the REST API
5. Start game loop (1s tick)

Usage:
    python -m idleserver.main
    # or via entry point:
    idleserver --config_dir config
"""

from __future__ import annotations

import asyncio
import logging
import os
import random
import signal
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from idleserver.engine.game_engine import GameEngine, create_game_state
from idleserver.engine.game_loop import GameLoop
from idleserver.loaders.game_config_loader import GameConfig, load_game_config
from idleserver.loaders.production_loader import load_productions
from idleserver.loaders.skill_tree_loader import load_skill_trees
from idleserver.loaders.specialization_loader import check_chains, load_specialization_info
from idleserver.models.production import ProductionLine
from idleserver.models.skill_tree import SkillTree
from idleserver.models.specialization import Specialization, SpecializationInfo
from idleserver.util.events import (
    EventBus,
    MarketRepriced,
    ProductionUpgraded,
    SkillNodeAllocated,
    SpecializationLevelUp,
)

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Container for all loaded configuration
# ---------------------------------------------------------------------------


@dataclass
class Configuration:
    """Holds all data loaded from config files."""

    game: GameConfig = field(default_factory=GameConfig)
    productions: list[ProductionLine] = field(default_factory=list)
    skill_trees: dict[Specialization, SkillTree] = field(default_factory=dict)
    specializations: dict[Specialization, SpecializationInfo] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Container for all services (makes passing around easier)
# ---------------------------------------------------------------------------


@dataclass
class Services:
    """Holds references to all services."""

    game_config: Optional[GameConfig] = None
    event_bus: Optional[EventBus] = None
    engine: Optional[GameEngine] = None
    game_loop: Optional[GameLoop] = None
    specializations: dict[Specialization, SpecializationInfo] = field(default_factory=dict)
    rest_server: Any = None


# ===================================================================
# 1. Load configuration
# ===================================================================


def load_configuration(config_dir: str = "config") -> Configuration:
    """Load game constants, production lines, skill trees and specialization info.

    Args:
        config_dir: Directory holding game.yaml, productions.yaml,
            skill_trees.yaml and specializations.yaml.

    Returns:
        Populated :class:`Configuration`.
    """
    log.info("Loading configuration …")

    game_cfg = load_game_config(os.path.join(config_dir, "game.yaml"))
    log.info("  game_config:  loaded")

    productions_path = os.path.join(config_dir, "productions.yaml")
    productions = load_productions(productions_path)
    log.info("  productions:  %d lines from %s", len(productions), productions_path)

    trees_path = os.path.join(config_dir, "skill_trees.yaml")
    skill_trees = load_skill_trees(trees_path)
    node_count = sum(1 for tree in skill_trees.values() for _ in tree.iter_nodes())
    log.info("  skill_trees:  %d nodes from %s", node_count, trees_path)

    info_path = os.path.join(config_dir, "specializations.yaml")
    specializations = load_specialization_info(info_path)
    check_chains(specializations, (line.line_id for line in productions))
    log.info("  specializations: %d from %s", len(specializations), info_path)

    return Configuration(game=game_cfg, productions=productions, skill_trees=skill_trees,
                         specializations=specializations)


# ===================================================================
# 2. Create services
# ===================================================================


def create_services(config: Configuration, clock=time.monotonic,
                    rng: random.Random | None = None) -> Services:
    """Create the game state and every service around it.

    Args:
        config: Loaded configuration.
        clock: Time source shared by the game state and the game loop.
        rng: Random source; a fresh ``random.Random`` by default.

    Returns:
        Populated :class:`Services` container.
    """
    log.info("Creating services …")

    gc = config.game
    event_bus = EventBus()
    state = create_game_state(gc, config.productions, config.skill_trees, now=clock())
    engine = GameEngine(state, event_bus, gc, rng=rng)
    game_loop = GameLoop(engine, gc, clock=clock)

    log.info("  all services created")
    return Services(game_config=gc, event_bus=event_bus, engine=engine, game_loop=game_loop,
                    specializations=config.specializations)


# ===================================================================
# 3. Wire up event handlers
# ===================================================================


def wire_events(services: Services) -> None:
    """Register event handlers on the EventBus.

    Args:
        services: All instantiated services.
    """
    log.info("Wiring event handlers …")
    bus = services.event_bus

    bus.on(SpecializationLevelUp, lambda evt: log.info(
        "Level up: %s is now level %d", evt.specialization, evt.level))
    bus.on(SkillNodeAllocated, lambda evt: log.info(
        "Skill allocated: %s (%d point(s) left)", evt.node_id, evt.available_points))
    bus.on(ProductionUpgraded, lambda evt: log.info(
        "Production upgraded: %s → level %d", evt.line_id, evt.level))
    bus.on(MarketRepriced, lambda evt: log.debug("Market repriced at %.1f", evt.timestamp))

    log.info("  event handlers registered")


# ===================================================================
# 4. Start REST API
# ===================================================================


async def start_network(services: Services) -> None:
    """Start the REST API as a background task.

    Args:
        services: All instantiated services.
    """
    from idleserver.network.rest_api import create_app
    import uvicorn

    log.info("Starting REST API …")
    gc = services.game_config
    rest_app = create_app(services)
    config = uvicorn.Config(
        rest_app,
        host=gc.rest_host,
        port=gc.rest_port,
        log_level="info",
        access_log=False,
    )
    rest_server = uvicorn.Server(config)
    services.rest_server = rest_server
    asyncio.create_task(rest_server.serve())
    log.info("  REST API listening on http://%s:%d", gc.rest_host, gc.rest_port)


# ===================================================================
# 5. Start game loop
# ===================================================================


async def start_game_loop(services: Services) -> None:
    """Start the main game loop; returns after a shutdown signal.

    Args:
        services: All instantiated services.
    """
    log.info("Starting game loop …")
    loop = asyncio.get_running_loop()

    # Graceful shutdown on SIGINT / SIGTERM
    def _request_shutdown() -> None:
        log.info("Shutdown signal received — stopping …")
        services.game_loop.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _request_shutdown)

    log.info("  game loop running (%.0f ms tick)", services.game_config.step_length_ms)
    await services.game_loop.run()

    # --- Cleanup after loop exits ---
    log.info("Shutting down …")
    if services.rest_server is not None:
        services.rest_server.should_exit = True
        log.info("  REST API server stopped")
    log.info("  goodbye")


# ===================================================================
# Entry points
# ===================================================================


async def _start(config_dir: str = "config") -> None:
    """Initialize and run all server components."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    log.info("=== Idle Industries starting ===")

    config = load_configuration(config_dir=config_dir)
    services = create_services(config)
    wire_events(services)
    await start_network(services)
    await start_game_loop(services)


def main() -> None:
    """Entry point for the game server.

    Supports command-line arguments:
        --config_dir <path>  Directory with the YAML configuration (default: config)
    """
    config_dir = "config"

    if "--config_dir" in sys.argv:
        idx = sys.argv.index("--config_dir")
        if idx + 1 >= len(sys.argv):
            print("Error: --config_dir requires an argument", file=sys.stderr)
            sys.exit(1)
        config_dir = sys.argv[idx + 1]

    asyncio.run(_start(config_dir=config_dir))


if __name__ == "__main__":
    main()
