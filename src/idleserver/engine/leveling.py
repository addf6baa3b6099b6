"""Specialization leveling law.

``xp_to_next(level) = floor(base_xp * scaling ** (level - 1))``. XP above
the threshold carries over into the next level; at the maximum level the
counter is pinned to the threshold and further XP is discarded.
"""

from __future__ import annotations

import math

from idleserver.models.specialization import SpecializationProgress
from idleserver.util.constants import BASE_XP_REQUIREMENT, MAX_LEVEL, XP_SCALING_FACTOR


def xp_requirement(level: int, base_xp: float = BASE_XP_REQUIREMENT,
                   scaling: float = XP_SCALING_FACTOR) -> float:
    """XP needed to advance from *level* to *level + 1*."""
    return float(math.floor(base_xp * scaling ** (level - 1)))


def new_progress(base_xp: float = BASE_XP_REQUIREMENT) -> SpecializationProgress:
    """Fresh level-1 progress."""
    return SpecializationProgress(level=1, xp=0.0, xp_to_next=xp_requirement(1, base_xp))


def add_xp(
    progress: SpecializationProgress,
    amount: float,
    max_level: int = MAX_LEVEL,
    base_xp: float = BASE_XP_REQUIREMENT,
    scaling: float = XP_SCALING_FACTOR,
) -> list[int]:
    """Add XP and apply every level-up it triggers.

    Returns:
        The levels reached, in order. One skill point is owed per entry.
    """
    reached: list[int] = []
    progress.xp += amount
    while progress.xp >= progress.xp_to_next and progress.level < max_level:
        progress.xp -= progress.xp_to_next
        progress.level += 1
        progress.xp_to_next = xp_requirement(progress.level, base_xp, scaling)
        reached.append(progress.level)

    if progress.level >= max_level:
        progress.xp = progress.xp_to_next
    return reached
