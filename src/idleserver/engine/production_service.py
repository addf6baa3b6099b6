"""Production service — recipe eligibility, upgrades and per-tick output.

Responsibilities:
- Eligibility of a line (specialization/level gate, input availability)
- Upgrade affordability and upgrades
- Output, input consumption and chance doubling for one tick

All methods operate on GameState objects. No network I/O.
"""

from __future__ import annotations

import logging
import math
import random
from typing import TYPE_CHECKING, Mapping, Optional

if TYPE_CHECKING:
    from idleserver.engine.skill_service import SkillService
    from idleserver.loaders.game_config_loader import GameConfig

from idleserver.models.game_state import GameState
from idleserver.models.production import ProductionLine
from idleserver.models.resources import Ledger, Resource
from idleserver.models.specialization import Specialization
from idleserver.util.effects import EffectType
from idleserver.util.errors import NotFoundError
from idleserver.util.types import format_usd

log = logging.getLogger(__name__)


class ProductionService:
    """Service for all production line logic.

    Args:
        skill_service: Source of skill tree modifiers.
        game_config: Balance constants; defaults apply without one.
    """

    def __init__(self, skill_service: SkillService, game_config: GameConfig | None = None) -> None:
        self._skills = skill_service

        # Game balance constants (fall back to defaults if no config)
        if game_config is not None:
            self._level_bonus = game_config.level_production_bonus
            self._xp_per_unit = game_config.xp_per_unit
            self._cost_multiplier = game_config.upgrade_cost_multiplier
            self._output_multiplier = game_config.output_multiplier
        else:
            self._level_bonus = 0.1
            self._xp_per_unit = 0.1
            self._cost_multiplier = 1.5
            self._output_multiplier = 1.5

    # -- Lookup ----------------------------------------------------------

    @staticmethod
    def get(state: GameState, line_id: str) -> ProductionLine:
        """Look up a line by id, raising NotFoundError for unknown ids."""
        line = state.productions.get(line_id)
        if line is None:
            raise NotFoundError(f"Unknown production line: {line_id}")
        return line

    # -- Eligibility -----------------------------------------------------

    def can_produce(self, state: GameState, line_id: str) -> bool:
        """Check the specialization/level gate and input availability.

        Inputs are checked against the current ledger for a single unit;
        this does not predict whether a whole tick's consumption fits.
        """
        line = self.get(state, line_id)
        if line.min_specialization_level is not None:
            if state.active_specialization is not line.specialization:
                return False
            if state.level_of(line.specialization) < line.min_specialization_level:
                return False
        return self._inputs_available(line, state.resources)

    @staticmethod
    def _inputs_available(line: ProductionLine, ledger: Mapping[Resource, float]) -> bool:
        return all(ledger.get(req.resource, 0.0) >= req.amount for req in line.requirements)

    def _runs_this_tick(self, state: GameState, line: ProductionLine, spec: Specialization) -> bool:
        if line.specialization is not spec:
            return False
        if (line.min_specialization_level is not None
                and state.level_of(spec) < line.min_specialization_level):
            return False
        return self._inputs_available(line, state.resources)

    # -- Rates -----------------------------------------------------------

    def multiplier(self, state: GameState, line: ProductionLine) -> float:
        """Level multiplier plus production_speed bonuses for the line's output."""
        level = state.level_of(line.specialization)
        level_multiplier = 1 + (level - 1) * self._level_bonus
        bonus = self._skills.get_node_effect(state, EffectType.PRODUCTION_SPEED,
                                             line.output_resource.value)
        return level_multiplier + bonus / 100

    def gain(self, state: GameState, line: ProductionLine, dt: float) -> int:
        """Floored output of a line over *dt* seconds."""
        return math.floor(dt * line.base_output * line.level * self.multiplier(state, line))

    def production_rate(self, state: GameState, line_id: str) -> float:
        """Units per second the line runs at right now, 0 if it does not run."""
        line = self.get(state, line_id)
        spec = state.active_specialization
        if spec is None or not self._runs_this_tick(state, line, spec):
            return 0.0
        return line.base_output * line.level * self.multiplier(state, line)

    def consumption(self, state: GameState, line: ProductionLine, gain: int) -> dict[Resource, float]:
        """Inputs consumed for *gain* units, after resource_cost modifiers."""
        costs: dict[Resource, float] = {}
        for req in line.requirements:
            reduction = self._skills.get_node_effect(state, EffectType.RESOURCE_COST,
                                                     req.resource.value)
            factor = max(0.0, 1 + reduction / 100)
            costs[req.resource] = costs.get(req.resource, 0.0) + req.amount * factor * gain
        return costs

    # -- Tick ------------------------------------------------------------

    def run(self, state: GameState, working: Ledger, dt: float, now: float,
            rng: random.Random) -> float:
        """Run every eligible line of the active specialization for *dt* seconds.

        Eligibility is judged against ``state.resources`` as it stood at the
        start of the tick; consumption and output go to *working*. A line
        whose consumption would drive an input below zero in *working* is
        skipped for this tick.

        Returns:
            XP earned by the active specialization.
        """
        spec = state.active_specialization
        if spec is None:
            return 0.0

        xp = 0.0
        for line in state.productions.values():
            if not self._runs_this_tick(state, line, spec):
                continue

            gain = self.gain(state, line, dt)
            if gain <= 0:
                continue

            costs = self.consumption(state, line, gain)
            short = [res for res, amount in costs.items() if working.get(res, 0.0) < amount]
            if short:
                log.debug("Skipping %s this tick: not enough %s",
                          line.line_id, ", ".join(r.value for r in short))
                continue
            for res, amount in costs.items():
                working[res] -= amount

            produced = gain
            chance = self._skills.get_node_effect(state, EffectType.CHANCE_BONUS,
                                                  line.output_resource.value)
            if chance > 0 and rng.random() < chance / 100:
                produced += gain
            working[line.output_resource] = working.get(line.output_resource, 0.0) + produced
            line.last_collected = now
            xp += gain * self._xp_per_unit
        return xp

    # -- Upgrades --------------------------------------------------------

    def can_afford_upgrade(self, state: GameState, line_id: str) -> bool:
        line = self.get(state, line_id)
        return state.resources[Resource.MONEY] >= line.upgrade_cost

    def upgrade(self, state: GameState, line_id: str) -> Optional[str]:
        """Upgrade a production line. Returns error message or None.

        Debits the upgrade cost, raises the level and grows base output and
        the next upgrade's cost. Leaves the state untouched when the money
        does not cover the cost.
        """
        line = self.get(state, line_id)
        money = state.resources[Resource.MONEY]
        cost = line.upgrade_cost
        if money < cost:
            reason = f"Not enough money (need {format_usd(cost)}, have {format_usd(money)})"
            log.debug("Upgrade of %s rejected: %s", line_id, reason)
            return reason

        state.resources[Resource.MONEY] = money - cost
        line.level += 1
        line.base_output *= self._output_multiplier
        line.upgrade_cost = float(math.floor(cost * self._cost_multiplier))
        log.info("Upgraded %s to level %d for %s (next %s)",
                 line_id, line.level, format_usd(cost), format_usd(line.upgrade_cost))
        return None
