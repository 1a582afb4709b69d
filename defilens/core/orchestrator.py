"""
Query Orchestrator - Answers pool/asset queries from cache or fresh upstream data.

Flow for one query:
1. Cache lookup (hit returns immediately, no external calls)
2. Price feed resolution (unknown feed fails before any network call)
3. Protocol metrics fetch, then price fetch with synthesized fallback
4. Base table, plus optional AI analysis, prediction and risk sections
5. Cache store

answer() never raises; every failure ends up as rendered text.
"""

import logging
import math
import time
from typing import Any, Callable, Dict, List, Optional

from ..advisory import build_advisory_client
from ..config.settings import CACHE_CONFIG, MONITOR_CONFIG, REFERENCE_PRICES, get_environment_config
from ..fetchers import AptosProtocolSource, PythPriceSource
from ..notifications.formatters import (
    AI_UNAVAILABLE,
    PREDICTION_UNAVAILABLE,
    TABLE_TITLES,
    build_table_rows,
    format_ai_insights,
    format_error,
    format_prediction,
    format_risk_assessment,
    format_table,
)
from . import risk
from .alerts import AlertRuleRegistry
from .cache import ResultCache, make_key
from .errors import ConfigurationError
from .events import EventBus, Handler, Subscription
from .models import (
    AlertRule,
    Opportunity,
    OpportunityFilters,
    PortfolioOptimization,
    PredictionResult,
    PriceQuote,
    ProtocolMetrics,
    QueryKind,
    QueryOptions,
    QueryResult,
)
from .monitor import MonitoringEngine
from .opportunities import generate_candidates, rank
from .synthesizer import DataSynthesizer


logger = logging.getLogger(__name__)

PREDICTION_TIMEFRAME = "24h"
DEFAULT_REFERENCE_PRICE = 1.0


class QueryOrchestrator:
    """
    Entry point for queries, opportunity discovery, advisory calls and monitoring.

    Every store (cache, alert rules, monitor session) belongs to the instance.

    Args:
        environment: 'testnet' or 'mainnet'
        advisory_api_key: Advisory credential; falls back to OPENAI_API_KEY
        cache_ttl_ms: Cache TTL override in milliseconds
        protocol_source: Protocol data source (default: Aptos indexer)
        price_source: Price source (default: Pyth Hermes)
        advisory_client: Advisory client (default: chosen from the credential)
        synth: Synthesizer for all random substitutes
        seed: Seed for a default synthesizer when synth is not given
        bus: Event bus (default: a new one)
        monitor_interval: Seconds between monitoring ticks
        clock: Wall clock for event timestamps
        cache_clock: Clock used for cache expiry
    """

    def __init__(
        self,
        environment: str = "testnet",
        advisory_api_key: Optional[str] = None,
        cache_ttl_ms: Optional[int] = None,
        protocol_source=None,
        price_source=None,
        advisory_client=None,
        synth: Optional[DataSynthesizer] = None,
        seed: Optional[int] = None,
        bus: Optional[EventBus] = None,
        monitor_interval: Optional[float] = None,
        clock: Callable[[], float] = time.time,
        cache_clock: Callable[[], float] = time.monotonic,
    ):
        self.environment = environment
        self.config = get_environment_config(environment)
        self._clock = clock

        self.synth = synth or DataSynthesizer(seed=seed)
        self.cache = ResultCache(cache_ttl_ms or CACHE_CONFIG["ttl_ms"], clock=cache_clock)
        self.bus = bus or EventBus()
        self.registry = AlertRuleRegistry(self.bus, clock=clock)
        self.monitor = MonitoringEngine(
            self.bus,
            self.registry,
            self.synth,
            interval=monitor_interval or MONITOR_CONFIG["interval_seconds"],
            opportunity_probability=MONITOR_CONFIG["opportunity_probability"],
            clock=clock,
        )

        self.protocol_source = protocol_source or AptosProtocolSource(self.config["indexer_url"], synth=self.synth)
        self.price_source = price_source or PythPriceSource()
        self.advisory = advisory_client or build_advisory_client(advisory_api_key, synth=self.synth)

        logger.info(
            "QueryOrchestrator ready (environment=%s, advisory=%s, cache_ttl_ms=%d)",
            environment,
            "configured" if self.advisory.is_configured else "not configured",
            self.cache.ttl_ms,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    async def answer(
        self,
        query: str,
        pool_address: str,
        feed_key: str,
        query_kind: QueryKind = QueryKind.LIQUIDITY,
        options: Optional[QueryOptions] = None,
    ) -> QueryResult:
        """
        Answer a query about a pool.

        Args:
            query: Free-text question (passed to the advisory service)
            pool_address: Pool address
            feed_key: Logical price feed key, e.g. 'aptUsd'
            query_kind: liquidity or apr
            options: Optional sections to include

        Returns:
            Rendered result text (an error result on failure)
        """
        options = options or QueryOptions()
        try:
            query_kind = QueryKind(query_kind)
            key = make_key(pool_address, feed_key, query_kind, options)

            if self.cache.is_valid(key):
                logger.info("Cache hit for %s", key)
                return self.cache.get(key).payload
            logger.info("Cache miss for %s, fetching fresh data", key)

            feed_id = self._resolve_feed(feed_key)
            timestamp = self._clock()

            metrics = await self._fetch_metrics(pool_address, query_kind)
            price = await self._fetch_price(feed_id, query_kind)

            result = format_table(TABLE_TITLES[query_kind], build_table_rows(query_kind, metrics, price, timestamp))
            result += await self._advisory_sections(query, feed_key, query_kind, metrics, price, options)

            if options.include_risk:
                result += "\n" + format_risk_assessment(risk.score(metrics, query_kind))

            self.cache.put(key, result)
            return result

        except ConfigurationError as e:
            logger.error("Query failed: %s", e)
            return format_error(str(e))
        except Exception as e:
            logger.exception("Unexpected error answering query for %s", pool_address)
            return format_error(str(e) or "Unknown error occurred")

    def _resolve_feed(self, feed_key: str) -> str:
        feed_id = self.config["price_feed_ids"].get(feed_key)
        if not feed_id:
            raise ConfigurationError(f"Price feed not found for key: {feed_key}")
        return feed_id

    async def _fetch_metrics(self, pool_address: str, query_kind: QueryKind) -> ProtocolMetrics:
        metrics = ProtocolMetrics()

        if query_kind == QueryKind.LIQUIDITY:
            try:
                data = await self.protocol_source.fetch_liquidity(pool_address)
            except Exception as e:
                logger.warning("Liquidity source failed for %s, using zero metrics: %s", pool_address, e)
                data = {}
            metrics.total_liquidity = data.get("total_liquidity") or 0
            metrics.asset_types = list(data.get("asset_types") or [])
            metrics.liquidity_depth = risk.liquidity_depth(metrics.total_liquidity)
        else:
            try:
                data = await self.protocol_source.fetch_staking_apr(pool_address)
            except Exception as e:
                logger.warning("Staking source failed for %s, using zero metrics: %s", pool_address, e)
                data = {}
            metrics.apr = data.get("apr") or 0
            metrics.delegators = data.get("delegators") or 0
            metrics.staking_health = risk.staking_health(metrics.apr, metrics.delegators)

        return metrics

    async def _fetch_price(self, feed_id: str, query_kind: QueryKind) -> PriceQuote:
        try:
            price = await self.price_source.fetch_price(feed_id, self.config["price_api_url"])
        except Exception as e:
            logger.warning("Price source failed for %s: %s", feed_id, e)
            price = None

        try:
            value = float(price) if price is not None else None
        except (TypeError, ValueError):
            logger.warning("Price source returned non-numeric value for %s: %r", feed_id, price)
            value = None
        if value is not None and not math.isfinite(value):
            logger.warning("Price source returned non-finite value for %s: %r", feed_id, price)
            value = None

        if value is None:
            synthesized = self.synth.synthesize_price(query_kind)
            logger.info("Price unavailable for %s, using synthesized %.6f", feed_id, synthesized)
            return PriceQuote(price=synthesized, synthesized=True)
        return PriceQuote(price=value)

    async def _advisory_sections(
        self,
        query: str,
        feed_key: str,
        query_kind: QueryKind,
        metrics: ProtocolMetrics,
        price: PriceQuote,
        options: QueryOptions,
    ) -> str:
        if not self.advisory.is_configured:
            return ""

        sections = ""
        if options.include_ai:
            try:
                analysis = await self.advisory.analyze(metrics, price, query, query_kind)
                sections += "\n" + format_ai_insights(analysis)
            except Exception as e:
                logger.warning("AI analysis failed: %s", e)
                sections += f"\n{AI_UNAVAILABLE}\n"

        if options.include_prediction:
            try:
                prediction = await self.advisory.predict(feed_key, PREDICTION_TIMEFRAME, price.price)
                sections += "\n" + format_prediction(prediction)
            except Exception as e:
                logger.warning("Price prediction failed: %s", e)
                sections += f"\n{PREDICTION_UNAVAILABLE}\n"

        return sections

    # =========================================================================
    # Opportunities and advisory
    # =========================================================================

    async def discover_opportunities(self, filters: Optional[OpportunityFilters] = None) -> List[Opportunity]:
        """Generate candidates for the protocol catalogue and rank them."""
        candidates = generate_candidates(self.synth)
        ranked = rank(candidates, filters)
        logger.info("Discovered %d of %d opportunities", len(ranked), len(candidates))
        return ranked

    async def predict_price(
        self,
        asset: str,
        timeframe: str = PREDICTION_TIMEFRAME,
        current_price: Optional[float] = None,
    ) -> PredictionResult:
        """
        Predict an asset price.

        Args:
            asset: Asset or feed key, e.g. 'aptUsd'
            timeframe: Horizon label, e.g. '24h'
            current_price: Current price; defaults to the reference price
        """
        if current_price is None:
            current_price = REFERENCE_PRICES.get(asset, DEFAULT_REFERENCE_PRICE)
        return await self.advisory.predict(asset, timeframe, current_price)

    async def optimize_portfolio(
        self,
        positions: Dict[str, float],
        risk_tolerance: float,
        target_return: Optional[float] = None,
    ) -> PortfolioOptimization:
        """
        Raises:
            OptimizationError: If the advisory service fails
        """
        return await self.advisory.optimize_portfolio(positions, risk_tolerance, target_return)

    # =========================================================================
    # Monitoring
    # =========================================================================

    def start_monitoring(self, addresses: List[str]):
        """Start the monitoring loop. Returns the loop task, or None if already running."""
        return self.monitor.start(addresses)

    def set_smart_alert(self, address: str, rule: AlertRule) -> str:
        return self.registry.register(address, rule)

    def on(self, topic: str, handler: Handler) -> Subscription:
        return self.bus.subscribe(topic, handler)

    def status(self) -> Dict[str, Any]:
        return {
            "environment": self.environment,
            "advisory_configured": self.advisory.is_configured,
            "cached_results": len(self.cache),
            "alert_rules": len(self.registry),
            "monitoring": self.monitor.is_running,
            "monitored_addresses": self.monitor.addresses,
        }
