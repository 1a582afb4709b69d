"""
Risk Scorer - Deterministic scoring and labelling of protocol metrics.

No randomness: the same metrics always give the same assessment.
"""

from typing import Optional

from ..thresholds import (
    RISK_BASELINE,
    RISK_SCORE_MIN,
    RISK_SCORE_MAX,
    LIQUIDITY_RISK_ADJUSTMENTS,
    APR_RISK_ADJUSTMENTS,
    RISK_LEVELS,
    RISK_FACTORS,
    LIQUIDITY_DEPTH_LABELS,
    LIQUIDITY_DEPTH_DEFAULT,
    STAKING_HEALTH_LABELS,
    STAKING_HEALTH_DEFAULT,
)
from .alerts import check_threshold
from .models import ProtocolMetrics, QueryKind, RiskAssessment, RiskLevel


def _apply_adjustments(score: int, value: float, adjustments: list) -> int:
    for rule in adjustments:
        if check_threshold(value, rule["operator"], rule["value"]):
            score += rule["adjustment"]
    return score


def score_to_level(score: float) -> RiskLevel:
    """Bucket a 0-100 risk score into Low / Medium / High."""
    for bucket in RISK_LEVELS:
        if bucket["max"] is None or score < bucket["max"]:
            return RiskLevel(bucket["level"])
    return RiskLevel.HIGH


def score(metrics: ProtocolMetrics, query_kind: QueryKind) -> RiskAssessment:
    """
    Score protocol metrics for a query kind.

    Args:
        metrics: Protocol metrics (missing values count as 0)
        query_kind: Liquidity or APR

    Returns:
        RiskAssessment with clamped overall score, level and factors
    """
    risk_score = RISK_BASELINE

    if QueryKind(query_kind) == QueryKind.LIQUIDITY:
        risk_score = _apply_adjustments(risk_score, metrics.total_liquidity or 0, LIQUIDITY_RISK_ADJUSTMENTS)
    else:
        risk_score = _apply_adjustments(risk_score, metrics.apr or 0, APR_RISK_ADJUSTMENTS)

    overall = max(RISK_SCORE_MIN, min(RISK_SCORE_MAX, risk_score))

    return RiskAssessment(
        overall=overall,
        level=score_to_level(overall),
        factors=list(RISK_FACTORS),
    )


def liquidity_depth(total_liquidity: Optional[float]) -> str:
    total = total_liquidity or 0
    for rule in LIQUIDITY_DEPTH_LABELS:
        if total > rule["min_liquidity"]:
            return rule["label"]
    return LIQUIDITY_DEPTH_DEFAULT


def staking_health(apr: Optional[float], delegators: Optional[int]) -> str:
    apr = apr or 0
    delegators = delegators or 0
    for rule in STAKING_HEALTH_LABELS:
        if apr > rule["min_apr"] and (rule["min_delegators"] is None or delegators > rule["min_delegators"]):
            return rule["label"]
    return STAKING_HEALTH_DEFAULT
