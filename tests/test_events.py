"""Tests for the event bus."""

from idleserver.util.events import EventBus, ProductionUpgraded, SpecializationLevelUp


class TestEventBus:
    def test_emit_triggers_handler(self):
        bus = EventBus()
        received = []
        bus.on(SpecializationLevelUp, lambda e: received.append(e.level))
        bus.emit(SpecializationLevelUp(specialization="mining", level=2))
        assert received == [2]

    def test_no_cross_event(self):
        bus = EventBus()
        received = []
        bus.on(SpecializationLevelUp, lambda e: received.append("level"))
        bus.emit(ProductionUpgraded(line_id="stone_mining", level=2, cost=10))
        assert received == []

    def test_multiple_handlers(self):
        bus = EventBus()
        a, b = [], []
        bus.on(SpecializationLevelUp, lambda e: a.append(1))
        bus.on(SpecializationLevelUp, lambda e: b.append(2))
        bus.emit(SpecializationLevelUp(specialization="mining", level=2))
        assert a == [1] and b == [2]

    def test_off_removes_handler(self):
        bus = EventBus()
        received = []
        handler = lambda e: received.append(1)
        bus.on(SpecializationLevelUp, handler)
        bus.off(SpecializationLevelUp, handler)
        bus.emit(SpecializationLevelUp(specialization="mining", level=2))
        assert received == []

    def test_clear(self):
        bus = EventBus()
        bus.on(SpecializationLevelUp, lambda e: None)
        bus.clear()
        # Should not raise
        bus.emit(SpecializationLevelUp(specialization="mining", level=2))


class TestEngineEvents:
    def test_upgrade_event(self, engine_state, bus):
        received = []
        bus.on(ProductionUpgraded, received.append)
        engine, _ = engine_state
        engine.upgrade_production("stone_mining")
        assert received == [ProductionUpgraded(line_id="stone_mining", level=2, cost=10)]

    def test_no_event_on_rejected_upgrade(self, engine_state, bus):
        received = []
        bus.on(ProductionUpgraded, received.append)
        engine, _ = engine_state
        # 50 money covers the first upgrade (40) but not the second (60)
        engine.upgrade_production("machine_assembly")
        engine.upgrade_production("machine_assembly")
        assert [e.cost for e in received] == [40]
