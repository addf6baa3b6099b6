"""GameState model — a player's complete simulation state.

A GameState is created once at game start and then owned by the
GameEngine, which is the only writer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from idleserver.models.market import Market
from idleserver.models.production import ProductionLine
from idleserver.models.resources import Ledger, new_ledger
from idleserver.models.skill_tree import SkillTree
from idleserver.models.specialization import Specialization, SpecializationProgress


@dataclass
class GameState:
    """Complete state of one single-player game.

    Attributes:
        market: Price board.
        resources: Resource ledger {Resource: amount}.
        productions: Production lines by line id, in catalog order.
        progress: Level/xp counters per specialization.
        skill_trees: Skill tree per specialization.
        active_specialization: Industry currently running, None until chosen.
        last_tick: Timestamp of the last applied tick.
        player_name: Display name.
    """

    market: Market
    resources: Ledger = field(default_factory=new_ledger)
    productions: dict[str, ProductionLine] = field(default_factory=dict)
    progress: dict[Specialization, SpecializationProgress] = field(default_factory=lambda: {
        spec: SpecializationProgress() for spec in Specialization
    })
    skill_trees: dict[Specialization, SkillTree] = field(default_factory=lambda: {
        spec: SkillTree(specialization=spec) for spec in Specialization
    })
    active_specialization: Optional[Specialization] = None
    last_tick: float = 0.0
    player_name: str = ""

    # -- Helpers ---------------------------------------------------------

    def level_of(self, specialization: Specialization) -> int:
        """Current level of a specialization."""
        return self.progress[specialization].level
