"""
Monitoring Engine - Periodic update and alert dispatch for watched addresses.

One tick per interval:
- emit one price_update UpdateEvent per address
- evaluate the address's alert rules
- with a fixed probability, emit a simulated opportunity alert

Once started, an engine runs until its task is cancelled or the process exits.
It cannot be started a second time.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .alerts import AlertRuleRegistry
from .events import ALERT, UPDATE, EventBus
from .models import AlertEvent, Severity, UpdateEvent
from .synthesizer import DataSynthesizer


logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 5.0
OPPORTUNITY_PROBABILITY = 0.1


class MonitoringEngine:
    """
    Args:
        bus: Event bus for update and alert events
        registry: Alert rules evaluated on every update
        synth: Source of simulated update values
        interval: Seconds between ticks
        opportunity_probability: Chance per address per tick of an opportunity alert
        clock: Returns the current time in seconds
    """

    def __init__(
        self,
        bus: EventBus,
        registry: AlertRuleRegistry,
        synth: DataSynthesizer,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        opportunity_probability: float = OPPORTUNITY_PROBABILITY,
        clock: Callable[[], float] = time.time,
    ):
        if interval <= 0:
            raise ValueError(f"Monitoring interval must be positive, got {interval}")
        self._bus = bus
        self._registry = registry
        self._synth = synth
        self.interval = interval
        self.opportunity_probability = opportunity_probability
        self._clock = clock
        self._running = False
        self._addresses: List[str] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def addresses(self) -> List[str]:
        return list(self._addresses)

    def start(self, addresses: List[str]) -> Optional[asyncio.Task]:
        """
        Start monitoring on the running event loop.

        Calling start again while running does nothing: no restart and no
        merge of the new addresses.

        Returns:
            The scheduled loop task, or None if already running
        """
        if self._running:
            logger.info("Already monitoring %d addresses", len(self._addresses))
            return None

        loop = asyncio.get_running_loop()
        logger.info("Starting real-time monitoring for %d addresses", len(addresses))
        self._addresses = list(addresses)
        self._task = loop.create_task(self._run())
        self._running = True
        return self._task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    def tick(self) -> Dict[str, Any]:
        """
        Run one pass over every monitored address.

        Returns:
            Dict with tick results
        """
        result = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "addresses_processed": 0,
            "updates_emitted": 0,
            "alerts_triggered": 0,
            "errors": []
        }

        for address in self._addresses:
            result["addresses_processed"] += 1
            try:
                update = UpdateEvent(
                    address=address,
                    kind="price_update",
                    value=self._synth.uniform(0, 100),
                    timestamp=self._clock(),
                )
                self._bus.publish(UPDATE, update)
                result["updates_emitted"] += 1

                fired = self._registry.evaluate(address, update)
                result["alerts_triggered"] += len(fired)

                if self._synth.random() < self.opportunity_probability:
                    self._bus.publish(ALERT, AlertEvent(
                        address=address,
                        alert_type="opportunity",
                        message=f"New high-yield opportunity detected at {address}",
                        severity=Severity.MEDIUM,
                        timestamp=self._clock(),
                    ))
                    result["alerts_triggered"] += 1

            except Exception as e:
                logger.exception("Monitoring tick failed for %s", address)
                result["errors"].append(f"{address}: {str(e)}")

        return result
