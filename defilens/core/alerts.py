"""
Alert System - Caller-registered rules evaluated against monitoring updates.

Rules are keyed by (address, alert type); registering the same key again
replaces the rule.
"""

import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from .events import ALERT, EventBus, Subscription
from .models import AlertEvent, AlertRule, AlertType, Severity, UpdateEvent


logger = logging.getLogger(__name__)


# Operator mapping for threshold comparisons
OPERATORS = {
    '<': lambda v, t: v < t,
    '>': lambda v, t: v > t,
    '<=': lambda v, t: v <= t,
    '>=': lambda v, t: v >= t,
    '=': lambda v, t: v == t,
}

# Midpoint of the simulated update value range [0, 100). Fixed, not derived.
PRICE_CHANGE_BASELINE = 50


def check_threshold(value: float, operator: str, threshold: float) -> bool:
    """
    Check if a value breaches a threshold.

    Args:
        value: Metric value
        operator: Comparison operator ('<', '>', '<=', '>=', '=')
        threshold: Threshold value

    Returns:
        True if threshold is breached
    """
    if operator not in OPERATORS:
        return False
    return OPERATORS[operator](value, threshold)


def rule_key(address: str, alert_type) -> str:
    return f"{address}:{AlertType(alert_type).value}"


def price_change_breached(value: float, threshold: float) -> bool:
    """abs(value - 50) > threshold * 50"""
    return check_threshold(abs(value - PRICE_CHANGE_BASELINE), '>', threshold * PRICE_CHANGE_BASELINE)


class AlertRuleRegistry:
    """
    Per-(address, alert type) rule store.

    A rule's callback is attached to the bus ``alert`` channel when the rule is
    registered, and is also called directly when that rule fires, so it sees
    its own alert twice.

    Args:
        bus: Event bus alerts are published on
        clock: Returns the current time in seconds
    """

    def __init__(self, bus: EventBus, clock: Callable[[], float] = time.time):
        self._bus = bus
        self._clock = clock
        self._rules: Dict[str, Tuple[str, AlertRule]] = {}
        self._subscriptions: Dict[str, Subscription] = {}

    def register(self, address: str, rule: AlertRule) -> str:
        """
        Store or replace a rule.

        Returns:
            The rule key
        """
        key = rule_key(address, rule.alert_type)

        previous = self._subscriptions.pop(key, None)
        if previous is not None:
            previous.unsubscribe()

        self._rules[key] = (address, rule)
        if rule.callback is not None:
            self._subscriptions[key] = self._bus.subscribe(ALERT, rule.callback)

        logger.debug("Registered %s rule for %s (threshold %s)", rule.alert_type, address, rule.threshold)
        return key

    def get(self, address: str, alert_type) -> Optional[AlertRule]:
        entry = self._rules.get(rule_key(address, alert_type))
        return entry[1] if entry else None

    def rules(self) -> Dict[str, AlertRule]:
        return {key: rule for key, (_, rule) in self._rules.items()}

    def evaluate(self, address: str, update: UpdateEvent) -> List[AlertEvent]:
        """
        Check one update against every rule registered for its address.

        Only price_change rules currently produce alerts. Rules match the
        update address exactly; a rule for "0xab" does not fire for "0xabc".
        A failing rule callback is logged and does not stop evaluation.

        Returns:
            List of fired alerts (empty if none)
        """
        fired = []

        for key, (rule_address, rule) in list(self._rules.items()):
            if rule_address != address:
                continue
            if AlertType(rule.alert_type) != AlertType.PRICE_CHANGE:
                continue
            if not price_change_breached(update.value, rule.threshold):
                continue

            alert = AlertEvent(
                address=address,
                alert_type=AlertType.PRICE_CHANGE.value,
                message=f"Price change threshold exceeded for {address}",
                severity=Severity.HIGH,
                timestamp=self._clock(),
                value=update.value,
            )
            self._bus.publish(ALERT, alert)
            if rule.callback is not None:
                try:
                    rule.callback(alert)
                except Exception:
                    logger.exception("Alert callback for %s failed", key)
            fired.append(alert)

        return fired

    def __len__(self) -> int:
        return len(self._rules)
