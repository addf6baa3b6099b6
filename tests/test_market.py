"""Tests for market repricing and buy/sell orders."""

import math
import random

import pytest

from idleserver.engine.market_service import MarketService
from idleserver.loaders.game_config_loader import GameConfig
from idleserver.models.market import Market
from idleserver.models.resources import TRADABLE_RESOURCES, Resource
from idleserver.models.specialization import Specialization
from idleserver.util.errors import NotFoundError
from idleserver.util.events import ResourceTraded

from conftest import ScriptedRandom

TRADING = Specialization.TRADING


class TestUpdatePrices:
    def test_prices_stay_within_fluctuation(self, game_config):
        svc = MarketService(random.Random(7), game_config)
        base = {Resource.parse(k): float(v) for k, v in game_config.base_prices.items()}
        market = Market(base_prices=base)
        for step in range(200):
            svc.update_prices(market, now=float(step))
            for res in TRADABLE_RESOURCES:
                assert math.floor(base[res] * 0.7) <= market.prices[res] <= math.ceil(base[res] * 1.3)
                assert market.prices[res] == int(market.prices[res])
        assert market.base_prices == base
        assert market.last_price_update == 199.0

    def test_rounds_half_up(self):
        market = Market(base_prices={res: 2.0 for res in TRADABLE_RESOURCES})
        MarketService(ScriptedRandom([0.75]), GameConfig(price_fluctuation=0.5)).update_prices(market, 1.0)
        # 2 * 1.25 = 2.5
        assert market.prices[Resource.WOOD] == 3

    def test_money_is_not_priced(self, engine_state):
        engine, _ = engine_state
        engine.update_market_prices(5.0)
        assert Resource.MONEY not in engine.market_prices()
        with pytest.raises(NotFoundError):
            engine.buy_price("money")

    def test_fresh_market_uses_base_prices(self, engine_state, game_config):
        engine, _ = engine_state
        prices = engine.market_prices()
        assert {res.value: p for res, p in prices.items()} == {
            k: float(v) for k, v in game_config.base_prices.items()
        }


class TestBuy:
    def test_buy(self, engine_state, bus):
        trades = []
        bus.on(ResourceTraded, trades.append)
        engine, state = engine_state
        assert engine.buy_resource("wood", 5) is None
        assert state.resources[Resource.MONEY] == 40
        assert state.resources[Resource.WOOD] == 5
        assert trades == [ResourceTraded(resource="wood", amount=5, total=10, side="buy")]

    def test_buy_unaffordable(self, engine_state):
        engine, state = engine_state
        error = engine.buy_resource("machines", 2)
        assert error is not None
        assert "money" in error.lower()
        assert state.resources[Resource.MONEY] == 50
        assert state.resources[Resource.MACHINES] == 0

    def test_buy_exact_balance(self, engine_state):
        engine, state = engine_state
        assert engine.buy_resource("machines", 1) is None
        assert state.resources[Resource.MONEY] == 0

    def test_non_positive_amount(self, engine_state):
        engine, state = engine_state
        assert engine.buy_resource("wood", 0) is not None
        assert engine.buy_resource("wood", -3) is not None
        assert state.resources[Resource.MONEY] == 50

    def test_unknown_resource(self, engine_state):
        engine, _ = engine_state
        with pytest.raises(NotFoundError):
            engine.buy_resource("gold", 1)

    def test_money_not_tradable(self, engine_state):
        engine, _ = engine_state
        with pytest.raises(NotFoundError):
            engine.buy_resource(Resource.MONEY, 1)


class TestSell:
    def test_sell(self, engine_state):
        engine, state = engine_state
        state.resources[Resource.STONE] = 10
        assert engine.sell_resource("stone", 4) is None
        assert state.resources[Resource.STONE] == 6
        assert state.resources[Resource.MONEY] == 62

    def test_sell_more_than_held(self, engine_state):
        engine, state = engine_state
        state.resources[Resource.STONE] = 3
        error = engine.sell_resource("stone", 4)
        assert error is not None
        assert "stone" in error
        assert state.resources[Resource.STONE] == 3
        assert state.resources[Resource.MONEY] == 50


class TestTradingSpecialization:
    def test_level_one_discount_and_bonus(self, engine_state):
        engine, state = engine_state
        engine.set_active_specialization("trading")
        assert engine.buy_price("wood") == pytest.approx(1.8)
        assert engine.sell_price("wood") == pytest.approx(2.3)
        assert engine.buy_resource("wood", 10) is None
        assert state.resources[Resource.MONEY] == pytest.approx(32)

    def test_bonus_grows_with_level(self, engine_state):
        engine, state = engine_state
        engine.set_active_specialization("trading")
        state.progress[TRADING].level = 3
        # 10% + 2 * 2% discount, 15% + 2 * 2% bonus
        assert engine.buy_price("metal") == pytest.approx(30 * 0.86)
        assert engine.sell_price("metal") == pytest.approx(30 * 1.19)

    def test_no_bonus_unless_trading_active(self, engine_state):
        engine, state = engine_state
        state.progress[TRADING].level = 5
        engine.set_active_specialization("mining")
        assert engine.buy_price("wood") == 2
        assert engine.sell_price("wood") == 2

    def test_sell_with_bonus(self, engine_state):
        engine, state = engine_state
        engine.set_active_specialization("trading")
        state.resources[Resource.FURNITURE] = 2
        assert engine.sell_resource("furniture", 2) is None
        assert state.resources[Resource.MONEY] == pytest.approx(50 + 2 * 15 * 1.15)


class TestRoundTrip:
    """Buying and selling back at an unchanged price only pays off for traders."""

    @pytest.mark.parametrize("active", [None, "mining"])
    def test_never_gains_without_trading(self, engine_state, active):
        engine, state = engine_state
        if active:
            engine.set_active_specialization(active)
        state.resources[Resource.MONEY] = 10_000
        for res in TRADABLE_RESOURCES:
            money_before = state.resources[Resource.MONEY]
            held_before = state.resources[res]
            assert engine.buy_resource(res, 3) is None
            assert engine.sell_resource(res, 3) is None
            assert state.resources[Resource.MONEY] <= money_before
            assert state.resources[res] == held_before

    def test_trading_gains(self, engine_state):
        engine, state = engine_state
        engine.set_active_specialization("trading")
        state.resources[Resource.MONEY] = 10_000
        for res in TRADABLE_RESOURCES:
            money_before = state.resources[Resource.MONEY]
            assert engine.buy_resource(res, 3) is None
            assert engine.sell_resource(res, 3) is None
            assert state.resources[Resource.MONEY] > money_before
            assert state.resources[res] == 0
