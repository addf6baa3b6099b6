"""Resource model — the closed set of quantities a player holds.

The ledger is a plain ``dict[Resource, float]``. It carries no behaviour of
its own; bounds are enforced by the services that mutate it.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional

from idleserver.util.errors import NotFoundError


class Resource(Enum):
    """Every resource known to the game."""

    # Base tier
    MONEY = "money"
    WOOD = "wood"
    STONE = "stone"
    FOOD = "food"
    ORE = "ore"
    TOOLS = "tools"

    # Derived tier
    FURNITURE = "furniture"  # from wood
    BRICKS = "bricks"        # from stone
    MEALS = "meals"          # from food
    METAL = "metal"          # from ore
    MACHINES = "machines"    # from tools + metal

    @classmethod
    def parse(cls, value: "str | Resource") -> "Resource":
        """Resolve a resource name, raising NotFoundError for unknown names."""
        if isinstance(value, Resource):
            return value
        try:
            return cls(value)
        except ValueError:
            raise NotFoundError(f"Unknown resource: {value}") from None


TRADABLE_RESOURCES: tuple[Resource, ...] = tuple(r for r in Resource if r is not Resource.MONEY)
"""Everything the market prices; money is the currency, not a good."""


Ledger = dict[Resource, float]


def new_ledger(starting: Optional[Mapping[str, float]] = None) -> Ledger:
    """Create a ledger with every resource present, zero unless given."""
    ledger: Ledger = {r: 0.0 for r in Resource}
    for key, amount in (starting or {}).items():
        ledger[Resource.parse(key)] = float(amount)
    return ledger
