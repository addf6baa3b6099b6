"""Market service — repricing and buy/sell orders.

Prices are re-rolled uniformly within ±fluctuation of the base price,
independently per resource and per call. Trading specialists buy at a
discount and sell at a bonus that both grow with their trading level.
"""

from __future__ import annotations

import logging
import math
import random
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from idleserver.loaders.game_config_loader import GameConfig

from idleserver.models.game_state import GameState
from idleserver.models.market import Market
from idleserver.models.resources import TRADABLE_RESOURCES, Resource
from idleserver.models.specialization import Specialization
from idleserver.util.errors import NotFoundError
from idleserver.util.types import format_compact_number, format_number, format_percent, format_usd

log = logging.getLogger(__name__)


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


class MarketService:
    """Service for market prices and trades.

    Args:
        rng: Random source for price fluctuation.
        game_config: Balance constants; defaults apply without one.
    """

    def __init__(self, rng: random.Random, game_config: GameConfig | None = None) -> None:
        self._rng = rng
        if game_config is not None:
            self._fluctuation = game_config.price_fluctuation
            self._buy_discount = game_config.trading_buy_discount
            self._sell_bonus = game_config.trading_sell_bonus
            self._level_bonus = game_config.trading_level_bonus
        else:
            self._fluctuation = 0.3
            self._buy_discount = 0.10
            self._sell_bonus = 0.15
            self._level_bonus = 0.02

    # -- Prices ----------------------------------------------------------

    def update_prices(self, market: Market, now: float) -> None:
        """Re-roll every price around its base price."""
        for resource in TRADABLE_RESOURCES:
            base = market.base_prices[resource]
            fluctuation = 1 + (self._rng.random() * 2 - 1) * self._fluctuation
            market.prices[resource] = _round_half_up(base * fluctuation)
        market.last_price_update = now
        log.info("Market repriced: %s", ", ".join(
            f"{r.value}={format_number(p)}" for r, p in market.prices.items()))

    @staticmethod
    def _tradable(resource: str | Resource) -> Resource:
        res = Resource.parse(resource)
        if res not in TRADABLE_RESOURCES:
            raise NotFoundError(f"Resource is not traded: {res.value}")
        return res

    def _trading_level(self, state: GameState) -> Optional[int]:
        """Trading level while trading is the active specialization, else None."""
        if state.active_specialization is Specialization.TRADING:
            return state.level_of(Specialization.TRADING)
        return None

    def buy_discount(self, state: GameState) -> float:
        level = self._trading_level(state)
        return 0.0 if level is None else self._buy_discount + (level - 1) * self._level_bonus

    def sell_bonus(self, state: GameState) -> float:
        level = self._trading_level(state)
        return 0.0 if level is None else self._sell_bonus + (level - 1) * self._level_bonus

    def buy_price(self, state: GameState, resource: str | Resource) -> float:
        """Effective unit price when buying."""
        res = self._tradable(resource)
        return state.market.prices[res] * (1 - self.buy_discount(state))

    def sell_price(self, state: GameState, resource: str | Resource) -> float:
        """Effective unit price when selling."""
        res = self._tradable(resource)
        return state.market.prices[res] * (1 + self.sell_bonus(state))

    # -- Orders ----------------------------------------------------------

    def buy(self, state: GameState, resource: str | Resource, amount: float) -> Optional[str]:
        """Buy *amount* units. Returns error message or None."""
        res = self._tradable(resource)
        if amount <= 0:
            return f"Amount must be positive (got {amount})"

        cost = self.buy_price(state, res) * amount
        money = state.resources[Resource.MONEY]
        if money < cost:
            reason = f"Not enough money (need {format_usd(cost)}, have {format_usd(money)})"
            log.debug("Buy of %s %s rejected: %s", amount, res.value, reason)
            return reason

        state.resources[Resource.MONEY] = money - cost
        state.resources[res] += amount
        log.info("Bought %s %s for %s (discount %s)", format_compact_number(amount), res.value,
                 format_usd(cost), format_percent(self.buy_discount(state)))
        return None

    def sell(self, state: GameState, resource: str | Resource, amount: float) -> Optional[str]:
        """Sell *amount* units. Returns error message or None."""
        res = self._tradable(resource)
        if amount <= 0:
            return f"Amount must be positive (got {amount})"

        held = state.resources[res]
        if held < amount:
            reason = f"Not enough {res.value} (need {format_number(amount)}, have {format_number(held)})"
            log.debug("Sell of %s %s rejected: %s", amount, res.value, reason)
            return reason

        profit = self.sell_price(state, res) * amount
        state.resources[res] = held - amount
        state.resources[Resource.MONEY] += profit
        log.info("Sold %s %s for %s (bonus %s)", format_compact_number(amount), res.value,
                 format_usd(profit), format_percent(self.sell_bonus(state)))
        return None
