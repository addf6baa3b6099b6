"""Effect types granted by skill nodes.

Effect values are percentage deltas. A ``resource_cost`` of -10 reduces
input consumption by 10 %, a ``chance_bonus`` of 20 gives a 20 % chance to
double a tick's output.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from idleserver.util.errors import NotFoundError


class EffectType(Enum):
    PRODUCTION_SPEED = "production_speed"
    RESOURCE_COST = "resource_cost"
    RESOURCE_GAIN = "resource_gain"
    CHANCE_BONUS = "chance_bonus"
    UNLOCK_FEATURE = "unlock_feature"

    @classmethod
    def parse(cls, value: "str | EffectType") -> "EffectType":
        if isinstance(value, EffectType):
            return value
        try:
            return cls(value)
        except ValueError:
            raise NotFoundError(f"Unknown effect type: {value}") from None


WILDCARD_TARGET = "all"
"""Effect target applying to every resource."""


def target_matches(effect_target: Optional[str], target: Optional[str]) -> bool:
    """Check whether an effect with *effect_target* applies to *target*.

    An effect without a target or with the wildcard target applies to every
    resource. Passing ``target=None`` asks for every effect of a type.
    """
    if target is None or effect_target is None or effect_target == WILDCARD_TARGET:
        return True
    return effect_target == target
