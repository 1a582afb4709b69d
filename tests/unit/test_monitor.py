"""
Unit tests for the monitoring engine.

A scripted synthesizer stands in for randomness so tick outcomes are exact.
"""

import asyncio

import pytest

from defilens.core.alerts import AlertRuleRegistry
from defilens.core.events import ALERT, UPDATE
from defilens.core.models import AlertRule, AlertType, Severity
from defilens.core.monitor import MonitoringEngine


class ScriptedSynth:
    """Returns queued update values and a fixed opportunity draw."""

    def __init__(self, values, draw=0.99):
        self.values = list(values)
        self.draw = draw

    def uniform(self, low, high):
        return self.values.pop(0)

    def random(self):
        return self.draw


@pytest.fixture
def registry(bus, clock):
    return AlertRuleRegistry(bus, clock=clock)


class TestTick:
    """Tests for a single monitoring pass."""

    @pytest.mark.unit
    def test_emits_one_update_per_address_in_order(self, bus, registry, clock, recorded_events):
        engine = MonitoringEngine(bus, registry, ScriptedSynth([10.0, 20.0]), clock=clock)
        engine._addresses = ["0xa", "0xb"]

        result = engine.tick()

        updates = recorded_events[UPDATE]
        assert [(u.address, u.kind, u.value) for u in updates] == [
            ("0xa", "price_update", 10.0),
            ("0xb", "price_update", 20.0),
        ]
        assert all(u.timestamp == clock.now for u in updates)
        assert result["addresses_processed"] == 2
        assert result["updates_emitted"] == 2
        assert result["alerts_triggered"] == 0
        assert result["errors"] == []

    @pytest.mark.unit
    def test_updates_are_evaluated_against_rules(self, bus, registry, clock, recorded_events):
        registry.register("0xa", AlertRule(AlertType.PRICE_CHANGE, 0.05))
        engine = MonitoringEngine(bus, registry, ScriptedSynth([58.0, 51.0]), clock=clock)
        engine._addresses = ["0xa", "0xa"]

        result = engine.tick()

        assert result["alerts_triggered"] == 1
        assert [a.value for a in recorded_events[ALERT]] == [58.0]

    @pytest.mark.unit
    def test_opportunity_alert_when_draw_below_probability(self, bus, registry, clock, recorded_events):
        engine = MonitoringEngine(bus, registry, ScriptedSynth([50.0], draw=0.05), clock=clock)
        engine._addresses = ["0xa"]

        engine.tick()

        alert = recorded_events[ALERT][0]
        assert alert.alert_type == "opportunity"
        assert alert.severity == Severity.MEDIUM
        assert alert.message == "New high-yield opportunity detected at 0xa"

    @pytest.mark.unit
    def test_error_for_one_address_does_not_stop_tick(self, bus, registry, clock, recorded_events):
        # Second address has no queued value, so its draw raises IndexError
        engine = MonitoringEngine(bus, registry, ScriptedSynth([50.0]), clock=clock)
        engine._addresses = ["0xa", "0xb"]

        result = engine.tick()

        assert result["updates_emitted"] == 1
        assert len(result["errors"]) == 1
        assert result["errors"][0].startswith("0xb")


class TestStart:
    """Tests for the monitoring session lifecycle."""

    @pytest.mark.unit
    def test_rejects_non_positive_interval(self, bus, registry, synth):
        with pytest.raises(ValueError):
            MonitoringEngine(bus, registry, synth, interval=0)

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.smoke
    async def test_second_start_is_a_no_op(self, bus, registry, synth):
        engine = MonitoringEngine(bus, registry, synth, interval=60)

        task = engine.start(["0xa"])
        again = engine.start(["0xb", "0xc"])

        assert task is not None
        assert again is None
        assert engine.is_running is True
        assert engine.addresses == ["0xa"]

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_loop_ticks_after_each_interval(self, bus, registry, synth, recorded_events):
        engine = MonitoringEngine(bus, registry, synth, interval=0.01)

        task = engine.start(["0xa"])
        await asyncio.sleep(0.1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert len(recorded_events[UPDATE]) >= 1
        assert all(0 <= u.value < 100 for u in recorded_events[UPDATE])

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cannot_restart_after_cancel(self, bus, registry, synth):
        engine = MonitoringEngine(bus, registry, synth, interval=60)
        task = engine.start(["0xa"])
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert engine.start(["0xa"]) is None

    @pytest.mark.unit
    def test_failed_start_outside_loop_leaves_engine_idle(self, bus, registry, synth):
        engine = MonitoringEngine(bus, registry, synth, interval=60)

        with pytest.raises(RuntimeError):
            engine.start(["0xa"])

        assert engine.is_running is False
        assert engine.addresses == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_can_start_after_failed_start(self, bus, registry, synth):
        engine = MonitoringEngine(bus, registry, synth, interval=60)
        with pytest.raises(RuntimeError):
            await asyncio.to_thread(engine.start, ["0xa"])

        task = engine.start(["0xb"])

        assert task is not None
        assert engine.addresses == ["0xb"]
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


class TestFailingCallbacks:
    """A raising rule callback must not cut a tick short."""

    @pytest.mark.unit
    def test_opportunity_draw_still_runs(self, bus, registry, clock, recorded_events):
        def boom(alert):
            raise RuntimeError("boom")

        registry.register("0xa", AlertRule(AlertType.PRICE_CHANGE, 0.05, callback=boom))
        engine = MonitoringEngine(bus, registry, ScriptedSynth([58.0], draw=0.0), clock=clock)
        engine._addresses = ["0xa"]

        result = engine.tick()

        assert result["errors"] == []
        assert result["alerts_triggered"] == 2
        assert [a.alert_type for a in recorded_events[ALERT]] == ["price_change", "opportunity"]
