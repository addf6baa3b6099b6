"""Tests for the engine tick: ordering, XP, level-ups, market refresh."""

import threading

import pytest

from idleserver.engine.leveling import xp_requirement
from idleserver.models.resources import Resource
from idleserver.models.specialization import Specialization
from idleserver.util.events import (
    MarketRepriced,
    SpecializationChanged,
    SpecializationLevelUp,
)

from conftest import ScriptedRandom

MINING = Specialization.MINING
FARMING = Specialization.FARMING


def _record(bus, event_type):
    received = []
    bus.on(event_type, received.append)
    return received


class TestNoActiveSpecialization:
    def test_tick_is_noop(self, engine_state):
        engine, state = engine_state
        before = engine.snapshot()
        engine.tick(100.0)
        assert state.resources == before.resources
        assert state.last_tick == 0.0
        assert state.market.prices == before.market.prices

    def test_idle_time_counts_once_chosen(self, engine_state):
        engine, state = engine_state
        engine.tick(2.0)
        engine.set_active_specialization("mining")
        engine.tick(3.0)
        assert state.resources[Resource.STONE] == 3


class TestTickTime:
    def test_last_tick_advances(self, engine_state):
        engine, state = engine_state
        engine.set_active_specialization("mining")
        engine.tick(1.0)
        engine.tick(2.5)
        assert state.last_tick == 2.5
        assert state.resources[Resource.STONE] == 2

    def test_zero_elapsed_produces_nothing(self, engine_state):
        engine, state = engine_state
        engine.set_active_specialization("mining")
        engine.tick(0.0)
        assert state.resources[Resource.STONE] == 0


class TestLeveling:
    def test_level_up_awards_skill_point(self, engine_state, bus):
        levels = _record(bus, SpecializationLevelUp)
        engine, state = engine_state
        engine.set_active_specialization("mining")
        state.progress[MINING].xp = 99.95
        engine.tick(1.0)
        progress = state.progress[MINING]
        assert progress.level == 2
        assert progress.xp_to_next == 150
        assert progress.xp == pytest.approx(0.05)
        assert state.skill_trees[MINING].available_points == 1
        assert levels == [SpecializationLevelUp(specialization="mining", level=2)]

    def test_several_levels_in_one_tick(self, engine_state, bus):
        levels = _record(bus, SpecializationLevelUp)
        engine, state = engine_state
        engine.set_active_specialization("mining")
        engine.tick(10_000.0)
        progress = state.progress[MINING]
        assert state.resources[Resource.STONE] == 10_000
        assert progress.level == 5
        assert progress.xp == pytest.approx(188)
        assert state.skill_trees[MINING].available_points == 4
        assert [e.level for e in levels] == [2, 3, 4, 5]

    def test_xp_only_for_active_specialization(self, engine_state):
        engine, state = engine_state
        engine.set_active_specialization("mining")
        engine.tick(5.0)
        assert state.progress[MINING].xp == pytest.approx(0.5)
        assert state.progress[FARMING].xp == 0
        assert state.progress[Specialization.TRADING].xp == 0

    def test_max_level_pins_xp(self, engine_state):
        engine, state = engine_state
        engine.set_active_specialization("mining")
        progress = state.progress[MINING]
        progress.level = 20
        progress.xp_to_next = progress.xp = xp_requirement(20)
        engine.tick(10.0)
        assert progress.level == 20
        assert progress.xp == progress.xp_to_next
        assert state.skill_trees[MINING].available_points == 0


class TestSpecializationSwitch:
    def test_switch_keeps_progress(self, engine_state):
        engine, state = engine_state
        engine.set_active_specialization("mining")
        engine.tick(1.0)
        engine.set_active_specialization(FARMING)
        engine.tick(2.0)
        assert state.resources[Resource.STONE] == 1
        assert state.resources[Resource.FOOD] == 1
        assert state.progress[MINING].xp == pytest.approx(0.1)
        assert state.progress[FARMING].xp == pytest.approx(0.1)

    def test_change_event_only_on_change(self, engine_state, bus):
        changes = _record(bus, SpecializationChanged)
        engine, _ = engine_state
        engine.set_active_specialization("mining")
        engine.set_active_specialization("mining")
        engine.set_active_specialization("trading")
        assert [e.specialization for e in changes] == ["mining", "trading"]

    def test_trading_produces_nothing(self, engine_state):
        engine, state = engine_state
        engine.set_active_specialization("trading")
        before = dict(state.resources)
        engine.tick(60.0)
        assert state.resources == before
        assert state.progress[Specialization.TRADING].xp == 0
        assert state.last_tick == 60.0


class TestMarketRefresh:
    def test_reprices_after_interval(self, make_engine, bus):
        repriced = _record(bus, MarketRepriced)
        engine, state = make_engine(rng=ScriptedRandom([0.5]))
        engine.set_active_specialization("mining")
        state.market.prices[Resource.WOOD] = 99
        engine.tick(31.0)
        assert state.market.prices[Resource.WOOD] == 2
        assert state.market.last_price_update == 31.0
        assert repriced == [MarketRepriced(timestamp=31.0)]

    def test_reprice_event_follows_commit(self, make_engine, bus):
        engine, state = make_engine(rng=ScriptedRandom([0.5]))
        seen = []
        bus.on(MarketRepriced, lambda e: seen.append((state.last_tick, state.resources[Resource.STONE])))
        engine.set_active_specialization("mining")
        engine.tick(31.0)
        assert seen == [(31.0, 31)]

    def test_no_reprice_at_interval_boundary(self, make_engine):
        engine, state = make_engine(rng=ScriptedRandom([0.5]))
        engine.set_active_specialization("mining")
        state.market.prices[Resource.WOOD] = 99
        engine.tick(30.0)
        assert state.market.prices[Resource.WOOD] == 99
        assert state.market.last_price_update == 0.0


class TestSnapshots:
    def test_snapshots_are_copies(self, engine_state):
        engine, state = engine_state
        engine.resources()[Resource.MONEY] = 1_000_000
        engine.productions()["stone_mining"].level = 9
        engine.skill_trees()[MINING].available_points = 9
        engine.progress()[MINING].level = 9
        assert state.resources[Resource.MONEY] == 50
        assert state.productions["stone_mining"].level == 1
        assert state.skill_trees[MINING].available_points == 0
        assert state.progress[MINING].level == 1

    def test_snapshot_is_deep(self, engine_state):
        engine, state = engine_state
        snap = engine.snapshot()
        snap.skill_trees[MINING].allocated_nodes.add("mining-mining-stone-mastery")
        assert state.skill_trees[MINING].allocated_nodes == set()


class TestConcurrentCommands:
    def test_trades_from_many_threads(self, engine_state):
        """50 money buys exactly 25 wood at 2 each, however the calls interleave."""
        engine, state = engine_state
        results = []
        lock = threading.Lock()

        def worker():
            for _ in range(10):
                error = engine.buy_resource("wood", 1)
                with lock:
                    results.append(error)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(1 for r in results if r is None) == 25
        assert state.resources[Resource.MONEY] == 0
        assert state.resources[Resource.WOOD] == 25
