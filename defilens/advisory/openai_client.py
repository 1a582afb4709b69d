"""
OpenAI Advisory Client - Narrative analysis, price prediction and portfolio
optimization from a chat-completions model.

Every call is bounded by a timeout. Analysis and prediction degrade to canned
or technical-only content; optimization has no safe fallback and raises.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, Optional

import requests

from ..config.settings import ADVISORY_CONFIG
from ..core.errors import AdvisoryUnavailable, OptimizationError
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
from .fallback import UNAVAILABLE_PREDICTION_REASONING, canned_analysis
from .prompts import SYSTEM_PROMPT, analysis_prompt, optimization_prompt, prediction_prompt


logger = logging.getLogger(__name__)


# Completion token budget per request type
MAX_TOKENS = {
    "analysis": 500,
    "prediction": 300,
    "optimization": 400,
}

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", flags=re.IGNORECASE)


def parse_model_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Parse a JSON object out of model output.

    Accepts bare JSON, fenced JSON and JSON embedded in surrounding prose.

    Returns:
        The decoded object, or None if no JSON object could be read
    """
    if not text:
        return None
    raw = str(text).strip()
    candidates = [raw, _FENCE_RE.sub("", raw).strip()]
    start, end = raw.find("{"), raw.rfind("}")
    if 0 <= start < end:
        candidates.append(raw[start:end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return parsed
    return None


def _number(payload: Dict[str, Any], key: str, default: Optional[float] = None) -> float:
    value = payload.get(key, default)
    if value is None or isinstance(value, bool):
        raise AdvisoryUnavailable(f"Missing numeric field '{key}' in advisory response")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise AdvisoryUnavailable(f"Non-numeric field '{key}' in advisory response: {value!r}")


class OpenAIAdvisoryClient:
    """
    Advisory client backed by the OpenAI chat completions API.

    Args:
        api_key: OpenAI API key
        api_url: Chat completions endpoint
        model: Model name
        timeout_seconds: Upper bound on each advisory call
        synth: Synthesizer for technical-only prediction fallbacks
    """

    is_configured = True

    def __init__(
        self,
        api_key: str,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        synth: Optional[DataSynthesizer] = None,
    ):
        if not api_key:
            raise ValueError("api_key is required for OpenAIAdvisoryClient")
        self.api_key = api_key
        self.api_url = api_url or ADVISORY_CONFIG["api_url"]
        self.model = model or ADVISORY_CONFIG["model"]
        self.timeout_seconds = timeout_seconds or ADVISORY_CONFIG["timeout_seconds"]
        self.temperature = ADVISORY_CONFIG["temperature"]
        self._synth = synth or DataSynthesizer()

    # =========================================================================
    # Transport
    # =========================================================================

    def _post_completion(self, prompt: str, max_tokens: int) -> str:
        response = requests.post(
            self.api_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "max_tokens": max_tokens,
                "temperature": self.temperature,
            },
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        choices = response.json().get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content") or ""

    async def _complete_json(self, prompt: str, max_tokens: int) -> Dict[str, Any]:
        """
        Run one completion and decode its JSON body.

        Raises:
            AdvisoryUnavailable: On transport failure, timeout or malformed output
        """
        try:
            content = await asyncio.wait_for(
                asyncio.to_thread(self._post_completion, prompt, max_tokens),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise AdvisoryUnavailable(f"Advisory call timed out after {self.timeout_seconds}s")
        except (requests.exceptions.RequestException, ValueError) as e:
            raise AdvisoryUnavailable(f"Advisory call failed: {e}") from e

        payload = parse_model_json(content)
        if payload is None:
            raise AdvisoryUnavailable("Advisory response was not a JSON object")
        return payload

    # =========================================================================
    # Operations
    # =========================================================================

    async def analyze(
        self,
        protocol_data: ProtocolMetrics,
        price_data: PriceQuote,
        query: str,
        query_kind: QueryKind,
    ) -> AnalysisResult:
        """
        Narrative analysis of a protocol. Falls back to canned content on failure.
        """
        prompt = analysis_prompt(
            protocol_data.to_dict(),
            {"price": price_data.price, "type": QueryKind(query_kind).value},
            query,
        )
        try:
            payload = await self._complete_json(prompt, MAX_TOKENS["analysis"])
            risk = payload.get("risk") or {}
            categories = risk.get("categories") or {}
            return AnalysisResult(
                insights=[str(i) for i in payload.get("insights") or []],
                risk=RiskBreakdown(
                    overall=_number(risk, "overall"),
                    categories={
                        "smart_contract": _number(categories, "smartContract", 0),
                        "liquidity": _number(categories, "liquidity", 0),
                        "market": _number(categories, "market", 0),
                    },
                    warnings=[str(w) for w in risk.get("warnings") or []],
                ),
                opportunities=[str(o) for o in payload.get("opportunities") or []],
                confidence=_number(payload, "confidence", 0),
            )
        except (AdvisoryUnavailable, AttributeError, TypeError) as e:
            logger.warning("AI analysis unavailable, using canned analysis: %s", e)
            return canned_analysis()

    async def predict(self, asset: str, timeframe: str, current_price: float) -> PredictionResult:
        """
        Price prediction. Falls back to a technical-only estimate on failure.
        """
        try:
            payload = await self._complete_json(
                prediction_prompt(asset, timeframe, current_price),
                MAX_TOKENS["prediction"],
            )
            signals = payload.get("signals") or {}
            return PredictionResult(
                asset=asset,
                current_price=current_price,
                predicted_price=_number(payload, "predictedPrice"),
                confidence=_number(payload, "confidence", 0),
                timeframe=timeframe,
                reasoning=str(payload.get("reasoning") or ""),
                signals={
                    "technical": _number(signals, "technical", 0),
                    "fundamental": _number(signals, "fundamental", 0),
                    "sentiment": _number(signals, "sentiment", 0),
                },
            )
        except (AdvisoryUnavailable, AttributeError, TypeError) as e:
            logger.warning("AI prediction unavailable for %s: %s", asset, e)
            return self._synth.technical_estimate(asset, current_price, timeframe, UNAVAILABLE_PREDICTION_REASONING)

    async def optimize_portfolio(
        self,
        positions: Dict[str, float],
        risk_tolerance: float,
        target_return: Optional[float] = None,
    ) -> PortfolioOptimization:
        """
        Suggest a rebalanced allocation.

        Raises:
            OptimizationError: If the advisory service fails
        """
        current_value = sum(positions.values())
        try:
            payload = await self._complete_json(
                optimization_prompt(positions, current_value, risk_tolerance, target_return),
                MAX_TOKENS["optimization"],
            )
            allocation = payload.get("suggestedAllocation") or {}
            actions = [
                PortfolioAction(
                    type=str(a.get("type", "hold")),
                    asset=str(a.get("asset", "")),
                    amount=_number(a, "amount", 0),
                    reason=str(a.get("reason", "")),
                )
                for a in payload.get("actions") or []
                if isinstance(a, dict)
            ]
            return PortfolioOptimization(
                current_value=current_value,
                suggested_allocation={str(k): float(v) for k, v in allocation.items()},
                expected_return=_number(payload, "expectedReturn"),
                risk_score=_number(payload, "riskScore"),
                actions=actions,
            )
        except (AdvisoryUnavailable, AttributeError, TypeError, ValueError) as e:
            logger.error("Portfolio optimization failed: %s", e)
            raise OptimizationError("Portfolio optimization failed") from e
