"""Game engine — owns the GameState and runs the simulation tick.

Responsibilities:
- Tick: market refresh, production, consumption, XP, level-ups, skill points
- Command surface: specialization, upgrades, trades, skill allocation
- Read-only snapshots for the presentation layer

Every public method runs under one re-entrant lock, so a command can never
interleave with a tick no matter which thread or task calls it.
"""

from __future__ import annotations

import copy
import functools
import logging
import random
import threading
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar

if TYPE_CHECKING:
    from idleserver.loaders.game_config_loader import GameConfig

from idleserver.engine import leveling
from idleserver.engine.market_service import MarketService
from idleserver.engine.production_service import ProductionService
from idleserver.engine.skill_service import SkillService
from idleserver.models.game_state import GameState
from idleserver.models.market import Market
from idleserver.models.production import ProductionLine
from idleserver.models.resources import Resource, new_ledger
from idleserver.models.skill_tree import SkillTree
from idleserver.models.specialization import Specialization, SpecializationProgress
from idleserver.util.effects import EffectType
from idleserver.util.events import (
    EventBus,
    MarketRepriced,
    ProductionUpgraded,
    ResourceTraded,
    SkillNodeAllocated,
    SpecializationChanged,
    SpecializationLevelUp,
)

log = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _serialized(method: F) -> F:
    @functools.wraps(method)
    def wrapper(self: "GameEngine", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper  # type: ignore[return-value]


def create_game_state(
    game_config: GameConfig,
    productions: list[ProductionLine],
    skill_trees: dict[Specialization, SkillTree],
    now: float,
) -> GameState:
    """Build a fresh game from the catalog templates.

    Templates are deep-copied so upgrades and allocations never leak back
    into the catalog.
    """
    base_prices = {Resource.parse(k): float(v) for k, v in game_config.base_prices.items()}
    return GameState(
        market=Market(base_prices=base_prices, last_price_update=now),
        resources=new_ledger(game_config.starting_resources),
        productions={line.line_id: copy.deepcopy(line) for line in productions},
        progress={spec: leveling.new_progress(game_config.base_xp) for spec in Specialization},
        skill_trees={spec: copy.deepcopy(skill_trees[spec]) for spec in Specialization},
        last_tick=now,
        player_name=game_config.player_name,
    )


class GameEngine:
    """Single-writer owner of a GameState.

    Args:
        state: The game to drive.
        event_bus: Event bus for notifications after committed changes.
        game_config: Balance constants.
        rng: Random source for chance bonuses and price fluctuation.
    """

    def __init__(self, state: GameState, event_bus: EventBus, game_config: GameConfig,
                 rng: random.Random | None = None) -> None:
        self._state = state
        self._events = event_bus
        self._config = game_config
        self._rng = rng if rng is not None else random.Random()
        self._lock = threading.RLock()

        self.skills = SkillService(game_config.root_row_y)
        self.production = ProductionService(self.skills, game_config)
        self.market = MarketService(self._rng, game_config)

    # -- Tick ------------------------------------------------------------

    @_serialized
    def tick(self, now: float) -> None:
        """Advance the simulation to *now* (seconds).

        A complete no-op while no specialization is active.
        """
        state = self._state
        spec = state.active_specialization
        if spec is None:
            return

        dt = now - state.last_tick

        # 1. Market refresh
        repriced = now - state.market.last_price_update > self._config.price_update_interval
        if repriced:
            self.market.update_prices(state.market, now)

        # 2.-5. Production against a working copy of the ledger
        working = dict(state.resources)
        xp_gained = self.production.run(state, working, dt, now, self._rng)

        # 6. XP and level-ups
        reached = leveling.add_xp(
            state.progress[spec], xp_gained,
            max_level=self._config.max_level,
            base_xp=self._config.base_xp,
            scaling=self._config.xp_scaling,
        )
        state.skill_trees[spec].available_points += len(reached)

        # 7. Commit
        state.resources.update(working)
        state.last_tick = now

        if repriced:
            self._events.emit(MarketRepriced(timestamp=now))
        for level in reached:
            log.info("%s reached level %d", spec.value, level)
            self._events.emit(SpecializationLevelUp(specialization=spec.value, level=level))

    # -- Specialization --------------------------------------------------

    @_serialized
    def set_active_specialization(self, specialization: str | Specialization) -> None:
        """Switch the active industry. No progress is reset."""
        spec = Specialization.parse(specialization)
        if self._state.active_specialization is spec:
            return
        self._state.active_specialization = spec
        log.info("Active specialization: %s", spec.value)
        self._events.emit(SpecializationChanged(specialization=spec.value))

    # -- Production ------------------------------------------------------

    @_serialized
    def upgrade_production(self, line_id: str) -> Optional[str]:
        """Upgrade a line. Returns error message or None."""
        cost = self.production.get(self._state, line_id).upgrade_cost
        error = self.production.upgrade(self._state, line_id)
        if error is None:
            line = self._state.productions[line_id]
            self._events.emit(ProductionUpgraded(line_id=line_id, level=line.level, cost=cost))
        return error

    @_serialized
    def can_afford_upgrade(self, line_id: str) -> bool:
        return self.production.can_afford_upgrade(self._state, line_id)

    @_serialized
    def can_produce(self, line_id: str) -> bool:
        return self.production.can_produce(self._state, line_id)

    @_serialized
    def production_rate(self, line_id: str) -> float:
        return self.production.production_rate(self._state, line_id)

    # -- Market ----------------------------------------------------------

    @_serialized
    def update_market_prices(self, now: float) -> None:
        self.market.update_prices(self._state.market, now)
        self._events.emit(MarketRepriced(timestamp=now))

    @_serialized
    def buy_resource(self, resource: str | Resource, amount: float) -> Optional[str]:
        """Buy from the market. Returns error message or None."""
        money_before = self._state.resources[Resource.MONEY]
        error = self.market.buy(self._state, resource, amount)
        if error is None:
            total = money_before - self._state.resources[Resource.MONEY]
            self._events.emit(ResourceTraded(resource=Resource.parse(resource).value,
                                             amount=amount, total=total, side="buy"))
        return error

    @_serialized
    def sell_resource(self, resource: str | Resource, amount: float) -> Optional[str]:
        """Sell to the market. Returns error message or None."""
        money_before = self._state.resources[Resource.MONEY]
        error = self.market.sell(self._state, resource, amount)
        if error is None:
            total = self._state.resources[Resource.MONEY] - money_before
            self._events.emit(ResourceTraded(resource=Resource.parse(resource).value,
                                             amount=amount, total=total, side="sell"))
        return error

    @_serialized
    def buy_price(self, resource: str | Resource) -> float:
        return self.market.buy_price(self._state, resource)

    @_serialized
    def sell_price(self, resource: str | Resource) -> float:
        return self.market.sell_price(self._state, resource)

    # -- Skill tree ------------------------------------------------------

    @_serialized
    def allocate_skill_point(self, node_id: str) -> Optional[str]:
        """Spend a skill point on a node. Returns error message or None."""
        error = self.skills.allocate(self._state, node_id)
        if error is None:
            tree, _ = self.skills.find(self._state, node_id)
            self._events.emit(SkillNodeAllocated(
                specialization=tree.specialization.value,
                node_id=node_id,
                available_points=tree.available_points,
            ))
        return error

    @_serialized
    def can_allocate_node(self, node_id: str) -> bool:
        return self.skills.can_allocate_node(self._state, node_id)

    @_serialized
    def get_node_effect(self, effect_type: str | EffectType, target: Optional[str] = None) -> float:
        return self.skills.get_node_effect(self._state, EffectType.parse(effect_type), target)

    # -- Snapshots -------------------------------------------------------

    @property
    def active_specialization(self) -> Optional[Specialization]:
        return self._state.active_specialization

    @_serialized
    def resources(self) -> dict[Resource, float]:
        return dict(self._state.resources)

    @_serialized
    def market_prices(self) -> dict[Resource, float]:
        return dict(self._state.market.prices)

    @_serialized
    def progress(self) -> dict[Specialization, SpecializationProgress]:
        return copy.deepcopy(self._state.progress)

    @_serialized
    def productions(self) -> dict[str, ProductionLine]:
        return copy.deepcopy(self._state.productions)

    @_serialized
    def skill_trees(self) -> dict[Specialization, SkillTree]:
        return copy.deepcopy(self._state.skill_trees)

    @_serialized
    def snapshot(self) -> GameState:
        """Deep copy of the whole state."""
        return copy.deepcopy(self._state)
