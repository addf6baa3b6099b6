"""Game constants — leveling, production, market and timing defaults.

These are the defaults of GameConfig; config/game.yaml may override them.
"""

# -- Timing --------------------------------------------------------------

STEP_LENGTH_MS: float = 1000.0
"""Main game loop tick interval in milliseconds."""

PRICE_UPDATE_INTERVAL: float = 30.0
"""Seconds of simulated time between market repricings."""

# -- Leveling ------------------------------------------------------------

BASE_XP_REQUIREMENT: float = 100.0
"""XP needed to go from level 1 to level 2."""

XP_SCALING_FACTOR: float = 1.5
"""Growth factor of the XP requirement per level."""

MAX_LEVEL: int = 20
"""Highest reachable specialization level."""

XP_PER_UNIT: float = 0.1
"""Specialization XP per produced resource unit."""

LEVEL_PRODUCTION_BONUS: float = 0.1
"""Production multiplier gained per specialization level above 1."""

# -- Production ----------------------------------------------------------

BASE_UPGRADE_COST: float = 10.0
"""Upgrade cost of a basic production line; others are multiples of it."""

UPGRADE_COST_MULTIPLIER: float = 1.5
"""Growth of a line's upgrade cost per upgrade (floored)."""

OUTPUT_MULTIPLIER: float = 1.5
"""Growth of a line's base output per upgrade."""

# -- Market --------------------------------------------------------------

PRICE_FLUCTUATION: float = 0.3
"""Maximum relative price excursion around the base price."""

TRADING_BUY_DISCOUNT: float = 0.10
TRADING_SELL_BONUS: float = 0.15
TRADING_LEVEL_BONUS: float = 0.02
"""Extra discount / bonus per trading level above 1."""

BASE_PRICES: dict[str, float] = {
    "wood": 2,
    "stone": 3,
    "food": 4,
    "ore": 5,
    "tools": 10,
    "furniture": 15,
    "bricks": 20,
    "meals": 25,
    "metal": 30,
    "machines": 50,
}

# -- Skill tree ----------------------------------------------------------

ROOT_ROW_Y: float = 100.0
"""Vertical layout coordinate of path-root nodes."""

# -- New game defaults ---------------------------------------------------

STARTING_MONEY: float = 50.0
