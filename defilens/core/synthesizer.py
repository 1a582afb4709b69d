"""
Data Synthesizer - Plausible substitute values for unavailable upstream data.

Every random draw in the package goes through a DataSynthesizer so a seeded
instance makes synthesized prices, simulated updates and generated
opportunities reproducible.
"""

import logging
import math
from typing import Dict, Optional

import numpy as np

from .models import PredictionResult, QueryKind


logger = logging.getLogger(__name__)


# Baseline and total spread of synthesized prices per query kind
PRICE_BASELINES = {
    QueryKind.LIQUIDITY: {"baseline": 4.73, "spread": 0.2},
    QueryKind.APR: {"baseline": 67420.0, "spread": 1000.0},
}

TECHNICAL_SIGNALS = {"technical": 0.2, "fundamental": 0.1, "sentiment": 0.0}
TECHNICAL_CONFIDENCE = 75


class DataSynthesizer:
    """
    Seedable source of substitute metrics.

    Args:
        seed: Optional seed for the underlying numpy Generator
        rng: Optional pre-built Generator (takes precedence over seed)
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        self._rng = rng if rng is not None else np.random.default_rng(seed)

    # -------------------------------------------------------------------------
    # Raw draws
    # -------------------------------------------------------------------------

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return float(self._rng.random())

    def uniform(self, low: float, high: float) -> float:
        return low + self.random() * (high - low)

    def integer(self, low: int, high: int) -> int:
        """Integer in [low, high)."""
        return int(math.floor(self.random() * (high - low))) + low

    # -------------------------------------------------------------------------
    # Substitutes
    # -------------------------------------------------------------------------

    def synthesize_price(self, query_kind: QueryKind) -> float:
        """Baseline price for the query kind plus bounded jitter."""
        params = PRICE_BASELINES[QueryKind(query_kind)]
        price = params["baseline"] + (self.random() - 0.5) * params["spread"]
        logger.debug("Synthesized %s price %.6f", QueryKind(query_kind).value, price)
        return price

    def synthesize_liquidity(self) -> Dict[str, object]:
        return {"total_liquidity": self.integer(100000, 1100000), "asset_types": []}

    def synthesize_staking(self) -> Dict[str, int]:
        return {"apr": self.integer(5, 30), "delegators": self.integer(50, 1050)}

    def technical_estimate(
        self,
        asset: str,
        current_price: float,
        timeframe: str,
        reasoning: str,
    ) -> PredictionResult:
        """
        Technical-only price estimate used when the advisory service cannot help.

        The predicted price stays within +/-5% of the current price.
        """
        predicted = current_price * (1 + (self.random() - 0.5) * 0.1)
        return PredictionResult(
            asset=asset,
            current_price=current_price,
            predicted_price=predicted,
            confidence=TECHNICAL_CONFIDENCE,
            timeframe=timeframe,
            reasoning=reasoning,
            signals=dict(TECHNICAL_SIGNALS),
        )
