"""
Unit tests for the alert rule registry and threshold helpers.
"""

import pytest

from defilens.core.alerts import (
    AlertRuleRegistry,
    check_threshold,
    price_change_breached,
    rule_key,
)
from defilens.core.events import ALERT
from defilens.core.models import AlertRule, AlertType, Severity, UpdateEvent


def _update(address: str, value: float) -> UpdateEvent:
    return UpdateEvent(address=address, kind="price_update", value=value, timestamp=0.0)


class TestCheckThreshold:

    @pytest.mark.unit
    @pytest.mark.parametrize("value,operator,threshold,expected", [
        (5, "<", 10, True),
        (10, "<", 10, False),
        (10, "<=", 10, True),
        (11, ">", 10, True),
        (10, ">=", 10, True),
        (10, "=", 10, True),
        (10, "!=", 10, False),
    ])
    def test_operators(self, value, operator, threshold, expected):
        assert check_threshold(value, operator, threshold) is expected


class TestPriceChangeBreached:

    @pytest.mark.unit
    @pytest.mark.smoke
    def test_five_percent_threshold(self):
        assert price_change_breached(58, 0.05) is True
        assert price_change_breached(51, 0.05) is False

    @pytest.mark.unit
    def test_symmetric_around_midpoint(self):
        assert price_change_breached(42, 0.05) is True
        assert price_change_breached(49, 0.05) is False


class TestAlertRuleRegistry:
    """Tests for rule storage and evaluation."""

    @pytest.mark.unit
    def test_register_returns_key(self, bus, clock):
        registry = AlertRuleRegistry(bus, clock=clock)
        key = registry.register("0xabc", AlertRule(AlertType.PRICE_CHANGE, 0.05))
        assert key == "0xabc:price_change" == rule_key("0xabc", AlertType.PRICE_CHANGE)
        assert registry.get("0xabc", AlertType.PRICE_CHANGE).threshold == 0.05

    @pytest.mark.unit
    def test_reregistering_replaces_rule(self, bus, clock):
        registry = AlertRuleRegistry(bus, clock=clock)
        registry.register("0xabc", AlertRule(AlertType.PRICE_CHANGE, 0.05))
        registry.register("0xabc", AlertRule(AlertType.PRICE_CHANGE, 0.5))

        assert len(registry) == 1
        assert registry.get("0xabc", "price_change").threshold == 0.5

    @pytest.mark.unit
    def test_replaced_callback_is_detached(self, bus, clock):
        registry = AlertRuleRegistry(bus, clock=clock)
        first, second = [], []
        registry.register("0xabc", AlertRule(AlertType.PRICE_CHANGE, 0.05, callback=first.append))
        registry.register("0xabc", AlertRule(AlertType.PRICE_CHANGE, 0.05, callback=second.append))

        assert bus.subscriber_count(ALERT) == 1
        registry.evaluate("0xabc", _update("0xabc", 90))
        assert first == []
        assert len(second) == 2

    @pytest.mark.unit
    def test_different_types_coexist(self, bus, clock):
        registry = AlertRuleRegistry(bus, clock=clock)
        registry.register("0xabc", AlertRule(AlertType.PRICE_CHANGE, 0.05))
        registry.register("0xabc", AlertRule(AlertType.VOLUME_SPIKE, 2.0))
        assert set(registry.rules()) == {"0xabc:price_change", "0xabc:volume_spike"}

    @pytest.mark.unit
    @pytest.mark.smoke
    def test_breach_fires_high_alert(self, bus, clock, recorded_events):
        registry = AlertRuleRegistry(bus, clock=clock)
        registry.register("0xabc", AlertRule(AlertType.PRICE_CHANGE, 0.05))

        fired = registry.evaluate("0xabc", _update("0xabc", 58))

        assert len(fired) == 1
        alert = fired[0]
        assert alert.severity == Severity.HIGH
        assert alert.message == "Price change threshold exceeded for 0xabc"
        assert alert.value == 58
        assert alert.timestamp == clock.now
        assert recorded_events[ALERT] == [alert]

    @pytest.mark.unit
    def test_no_breach_no_alert(self, bus, clock, recorded_events):
        registry = AlertRuleRegistry(bus, clock=clock)
        registry.register("0xabc", AlertRule(AlertType.PRICE_CHANGE, 0.05))

        assert registry.evaluate("0xabc", _update("0xabc", 51)) == []
        assert recorded_events[ALERT] == []

    @pytest.mark.unit
    def test_callback_receives_alert_twice(self, bus, clock):
        registry = AlertRuleRegistry(bus, clock=clock)
        received = []
        registry.register("0xabc", AlertRule(AlertType.PRICE_CHANGE, 0.05, callback=received.append))

        fired = registry.evaluate("0xabc", _update("0xabc", 80))

        assert received == [fired[0], fired[0]]

    @pytest.mark.unit
    def test_address_must_match_exactly(self, bus, clock):
        registry = AlertRuleRegistry(bus, clock=clock)
        registry.register("0xabc", AlertRule(AlertType.PRICE_CHANGE, 0.05))

        assert registry.evaluate("0xabcdef", _update("0xabcdef", 99)) == []
        assert registry.evaluate("0xab", _update("0xab", 99)) == []

    @pytest.mark.unit
    def test_non_price_rules_do_not_fire(self, bus, clock):
        registry = AlertRuleRegistry(bus, clock=clock)
        registry.register("0xabc", AlertRule(AlertType.LIQUIDITY_DROP, 0.0))
        assert registry.evaluate("0xabc", _update("0xabc", 99)) == []

    @pytest.mark.unit
    def test_raising_callback_does_not_stop_evaluation(self, bus, clock):
        registry = AlertRuleRegistry(bus, clock=clock)
        received = []

        def boom(alert):
            raise RuntimeError("boom")

        registry.register("0xabc", AlertRule(AlertType.PRICE_CHANGE, 0.05, callback=boom))
        registry.register("0xabc", AlertRule(AlertType.VOLUME_SPIKE, 2.0, callback=received.append))

        fired = registry.evaluate("0xabc", _update("0xabc", 80))

        assert len(fired) == 1
        assert received == fired
