"""
Pytest configuration and fixtures for DeFi Lens.

This file contains shared fixtures used across all test modules: fake
upstream sources that count their calls, a controllable clock, and a
factory for orchestrators wired to those fakes.
"""

import pytest
from typing import Any, Dict, List, Optional

from defilens.core.events import ALERT, UPDATE, EventBus
from defilens.core.models import (
    AnalysisResult,
    Opportunity,
    PortfolioOptimization,
    PredictionResult,
    RiskBreakdown,
)
from defilens.core.orchestrator import QueryOrchestrator
from defilens.core.synthesizer import DataSynthesizer


# =============================================================================
# FAKES
# =============================================================================

class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProtocolSource:
    """Protocol data source returning fixed data, or raising when `error` is set."""

    def __init__(self, liquidity: Optional[Dict[str, Any]] = None, staking: Optional[Dict[str, Any]] = None):
        self.liquidity = liquidity if liquidity is not None else {"total_liquidity": 750000, "asset_types": [{}, {}]}
        self.staking = staking if staking is not None else {"apr": 12, "delegators": 80}
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []

    async def fetch_liquidity(self, pool_address: str) -> Dict[str, Any]:
        self.calls.append(("liquidity", pool_address))
        if self.error:
            raise self.error
        return self.liquidity

    async def fetch_staking_apr(self, pool_address: str) -> Dict[str, Any]:
        self.calls.append(("apr", pool_address))
        if self.error:
            raise self.error
        return self.staking


class FakePriceSource:
    """Price source returning `price` (None means unavailable)."""

    def __init__(self, price: Optional[float] = 4.5):
        self.price = price
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []

    async def fetch_price(self, feed_id: str, endpoint: str) -> Optional[float]:
        self.calls.append((feed_id, endpoint))
        if self.error:
            raise self.error
        return self.price


class FakeAdvisoryClient:
    """Configured advisory client with canned answers and switchable failures."""

    is_configured = True

    def __init__(self):
        self.analysis_error: Optional[Exception] = None
        self.prediction_error: Optional[Exception] = None
        self.optimization_error: Optional[Exception] = None
        self.calls: List[str] = []

    async def analyze(self, protocol_data, price_data, query, query_kind) -> AnalysisResult:
        self.calls.append("analyze")
        if self.analysis_error:
            raise self.analysis_error
        return AnalysisResult(
            insights=["Liquidity is concentrated in two assets"],
            risk=RiskBreakdown(overall=40, categories={"smart_contract": 20, "liquidity": 40, "market": 50}),
            opportunities=["Provide liquidity on the APT side"],
            confidence=82,
        )

    async def predict(self, asset, timeframe, current_price) -> PredictionResult:
        self.calls.append("predict")
        if self.prediction_error:
            raise self.prediction_error
        return PredictionResult(
            asset=asset,
            current_price=current_price,
            predicted_price=current_price * 1.02,
            confidence=66,
            timeframe=timeframe,
            reasoning="Momentum is positive",
            signals={"technical": 0.3, "fundamental": 0.1, "sentiment": 0.2},
        )

    async def optimize_portfolio(self, positions, risk_tolerance, target_return=None) -> PortfolioOptimization:
        self.calls.append("optimize")
        if self.optimization_error:
            raise self.optimization_error
        return PortfolioOptimization(
            current_value=sum(positions.values()),
            suggested_allocation=dict(positions),
            expected_return=0.08,
            risk_score=risk_tolerance,
        )


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def synth() -> DataSynthesizer:
    """Seeded synthesizer so generated values are reproducible."""
    return DataSynthesizer(seed=42)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorded_events(bus: EventBus) -> Dict[str, list]:
    """Collects everything published on the bus, per topic."""
    events = {UPDATE: [], ALERT: []}
    bus.subscribe(UPDATE, events[UPDATE].append)
    bus.subscribe(ALERT, events[ALERT].append)
    return events


@pytest.fixture
def protocol_source() -> FakeProtocolSource:
    return FakeProtocolSource()


@pytest.fixture
def price_source() -> FakePriceSource:
    return FakePriceSource()


@pytest.fixture
def advisory() -> FakeAdvisoryClient:
    return FakeAdvisoryClient()


# =============================================================================
# ORCHESTRATOR FACTORY
# =============================================================================

@pytest.fixture
def orchestrator_factory(protocol_source, price_source, advisory, synth, clock):
    """
    Factory fixture for orchestrators wired to the fake sources.

    Usage:
        def test_something(orchestrator_factory):
            orchestrator = orchestrator_factory(cache_ttl_ms=1000)
    """
    def _create(**overrides) -> QueryOrchestrator:
        kwargs = {
            "environment": "testnet",
            "protocol_source": protocol_source,
            "price_source": price_source,
            "advisory_client": advisory,
            "synth": synth,
            "clock": clock,
            "cache_clock": clock,
        }
        kwargs.update(overrides)
        return QueryOrchestrator(**kwargs)

    return _create


@pytest.fixture
def opportunity_factory():
    """Factory for Opportunity records with sensible defaults."""
    def _create(**overrides) -> Opportunity:
        defaults = {
            "protocol_name": "AptosSwap",
            "apy": 18.0,
            "tvl": 2_000_000,
            "risk_tier": "medium",
            "ai_score": 80,
            "reasoning": "Stable volume",
            "liquidity_depth": 300_000,
            "volume_24h": 120_000,
            "audit_score": 90,
        }
        defaults.update(overrides)
        return Opportunity(**defaults)

    return _create
