"""Specialization model — the four industries, their progress counters and metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from idleserver.util.errors import NotFoundError


class Specialization(Enum):
    """The mutually exclusive industries a player can pursue."""

    MINING = "mining"
    FARMING = "farming"
    CRAFTING = "crafting"
    TRADING = "trading"

    @classmethod
    def parse(cls, value: "str | Specialization") -> "Specialization":
        """Resolve a specialization name, raising NotFoundError for unknown names."""
        if isinstance(value, Specialization):
            return value
        try:
            return cls(value)
        except ValueError:
            raise NotFoundError(f"Unknown specialization: {value}") from None


@dataclass
class SpecializationProgress:
    """Level and experience of one specialization.

    Attributes:
        level: Current level, 1 up to the configured maximum.
        xp: Experience collected towards the next level. Equals
            ``xp_to_next`` once the maximum level is reached.
        xp_to_next: Experience needed to reach the next level.
    """

    level: int = 1
    xp: float = 0.0
    xp_to_next: float = 100.0


@dataclass
class SpecializationInfo:
    """Presentation metadata of a specialization.

    Attributes:
        specialization: The industry described.
        description: How the industry earns XP and what levels give.
        level_unlocks: Level → text of what becomes available there.
        basic_lines: Production line ids with no inputs.
        advanced_lines: Production line ids refining other resources.
    """

    specialization: Specialization
    description: str = ""
    level_unlocks: dict[int, str] = field(default_factory=dict)
    basic_lines: list[str] = field(default_factory=list)
    advanced_lines: list[str] = field(default_factory=list)

    def unlocks_up_to(self, level: int) -> dict[int, str]:
        """Unlocks already reached at *level*."""
        return {lvl: text for lvl, text in self.level_unlocks.items() if lvl <= level}
