"""Game configuration — loads tunable constants from config/game.yaml.

Provides a single ``GameConfig`` dataclass that is loaded once at startup
and then passed (or injected) wherever constants are needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

import yaml

from idleserver.util import constants as C

log = logging.getLogger(__name__)

DEFAULT_GAME_CONFIG_PATH = "config/game.yaml"


@dataclass
class GameConfig:
    """All tunable gameplay constants.

    Loaded from ``config/game.yaml``.  Every field has a sensible default
    so the server can start even without the file.
    """

    # -- Timing ------------------------------------------------------
    step_length_ms: float = C.STEP_LENGTH_MS
    price_update_interval: float = C.PRICE_UPDATE_INTERVAL

    # -- Leveling ----------------------------------------------------
    base_xp: float = C.BASE_XP_REQUIREMENT
    xp_scaling: float = C.XP_SCALING_FACTOR
    max_level: int = C.MAX_LEVEL
    xp_per_unit: float = C.XP_PER_UNIT
    level_production_bonus: float = C.LEVEL_PRODUCTION_BONUS

    # -- Production --------------------------------------------------
    upgrade_cost_multiplier: float = C.UPGRADE_COST_MULTIPLIER
    output_multiplier: float = C.OUTPUT_MULTIPLIER

    # -- Market ------------------------------------------------------
    price_fluctuation: float = C.PRICE_FLUCTUATION
    base_prices: Dict[str, float] = field(default_factory=lambda: dict(C.BASE_PRICES))
    trading_buy_discount: float = C.TRADING_BUY_DISCOUNT
    trading_sell_bonus: float = C.TRADING_SELL_BONUS
    trading_level_bonus: float = C.TRADING_LEVEL_BONUS

    # -- Skill tree --------------------------------------------------
    root_row_y: float = C.ROOT_ROW_Y

    # -- New game defaults -------------------------------------------
    player_name: str = ""
    starting_resources: Dict[str, float] = field(default_factory=lambda: {
        "money": C.STARTING_MONEY,
    })

    # -- Network -----------------------------------------------------
    rest_host: str = "127.0.0.1"
    rest_port: int = 8080


def load_game_config(path: str | Path = DEFAULT_GAME_CONFIG_PATH) -> GameConfig:
    """Load game configuration from a YAML file.

    Missing keys fall back to dataclass defaults.  If the file does not
    exist, a warning is logged and pure defaults are returned.
    """
    p = Path(path)
    if not p.exists():
        log.warning("Game config not found at %s — using defaults", p)
        return GameConfig()

    with p.open() as f:
        raw = yaml.safe_load(f) or {}

    log.info("Loaded game config from %s (%d keys)", p, len(raw))

    unknown = sorted(k for k in raw if k not in GameConfig.__dataclass_fields__)
    if unknown:
        log.warning("Ignoring unknown game config keys: %s", ", ".join(unknown))

    values = {k: v for k, v in raw.items() if k in GameConfig.__dataclass_fields__}

    # Partial price tables only override the listed resources
    if "base_prices" in values:
        values["base_prices"] = {**C.BASE_PRICES, **(values["base_prices"] or {})}

    return GameConfig(**values)
