"""
Canned advisory content and the client used when no credential is configured.
"""

from typing import Dict, Optional

from ..core.models import (
    AnalysisResult,
    PortfolioAction,
    PortfolioOptimization,
    PredictionResult,
    PriceQuote,
    ProtocolMetrics,
    QueryKind,
    RiskBreakdown,
)
from ..core.synthesizer import DataSynthesizer


NO_KEY_PREDICTION_REASONING = "AI prediction requires OpenAI API key. Using technical analysis."
UNAVAILABLE_PREDICTION_REASONING = "AI prediction temporarily unavailable, using technical analysis"
NO_KEY_OPTIMIZATION_REASON = "AI optimization requires OpenAI API key"
DEFAULT_EXPECTED_RETURN = 0.12


def canned_analysis() -> AnalysisResult:
    return AnalysisResult(
        insights=[
            "Protocol shows stable liquidity patterns",
            "Price action indicates moderate volatility",
            "Consider dollar-cost averaging for risk management",
        ],
        risk=RiskBreakdown(
            overall=45,
            categories={"smart_contract": 30, "liquidity": 50, "market": 55},
            warnings=["Monitor for sudden liquidity changes"],
        ),
        opportunities=["Potential yield farming opportunity"],
        confidence=70,
    )


class NullAdvisoryClient:
    """
    Advisory client for deployments without a credential.

    Same interface as OpenAIAdvisoryClient; every answer is canned or
    technical-only and nothing leaves the process.
    """

    is_configured = False

    def __init__(self, synth: Optional[DataSynthesizer] = None):
        self._synth = synth or DataSynthesizer()

    async def analyze(
        self,
        protocol_data: ProtocolMetrics,
        price_data: PriceQuote,
        query: str,
        query_kind: QueryKind,
    ) -> AnalysisResult:
        return canned_analysis()

    async def predict(self, asset: str, timeframe: str, current_price: float) -> PredictionResult:
        return self._synth.technical_estimate(asset, current_price, timeframe, NO_KEY_PREDICTION_REASONING)

    async def optimize_portfolio(
        self,
        positions: Dict[str, float],
        risk_tolerance: float,
        target_return: Optional[float] = None,
    ) -> PortfolioOptimization:
        return PortfolioOptimization(
            current_value=sum(positions.values()),
            suggested_allocation=dict(positions),
            expected_return=DEFAULT_EXPECTED_RETURN,
            risk_score=risk_tolerance,
            actions=[PortfolioAction(type="hold", asset="APT", amount=0, reason=NO_KEY_OPTIMIZATION_REASON)],
        )
