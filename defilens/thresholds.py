"""
Risk Scoring Thresholds and Labels.

Each adjustment is applied to a fixed baseline score. Labels are checked in
order, first match wins.

Each entry includes:
- the metric bound
- the score adjustment (or the label it maps to)
- justification: why the rule exists
"""

# =============================================================================
# RISK SCORE
# =============================================================================

RISK_BASELINE = 50
RISK_SCORE_MIN = 0
RISK_SCORE_MAX = 100

LIQUIDITY_RISK_ADJUSTMENTS = [
    {
        "operator": "<",
        "value": 50000,
        "adjustment": 20,
        "justification": "Thin pools move sharply on modest trades and can be drained quickly",
    },
    {
        "operator": ">",
        "value": 500000,
        "adjustment": -15,
        "justification": "Deep pools absorb large trades with little price impact",
    },
]

APR_RISK_ADJUSTMENTS = [
    {
        "operator": ">",
        "value": 30,
        "adjustment": 25,
        "justification": "Yields above 30% are rarely sustainable and often subsidise hidden risk",
    },
    {
        "operator": "<",
        "value": 5,
        "adjustment": -10,
        "justification": "Low, validator-level yields indicate a mature staking pool",
    },
]

# Upper bounds (exclusive) of each risk level on the clamped score
RISK_LEVELS = [
    {"max": 30, "level": "Low"},
    {"max": 70, "level": "Medium"},
    {"max": None, "level": "High"},
]

RISK_FACTORS = ["Liquidity analysis", "Protocol maturity", "Market conditions"]


# =============================================================================
# DERIVED LABELS
# =============================================================================

LIQUIDITY_DEPTH_LABELS = [
    {"min_liquidity": 1000000, "label": "Deep"},
    {"min_liquidity": 100000, "label": "Medium"},
]
LIQUIDITY_DEPTH_DEFAULT = "Shallow"

STAKING_HEALTH_LABELS = [
    {"min_apr": 15, "min_delegators": 100, "label": "Excellent"},
    {"min_apr": 10, "min_delegators": 50, "label": "Good"},
    {"min_apr": 5, "min_delegators": None, "label": "Fair"},
]
STAKING_HEALTH_DEFAULT = "Poor"


# =============================================================================
# OPPORTUNITY RISK TIERS
# =============================================================================

RISK_TIER_ORDER = {"low": 1, "medium": 2, "high": 3}
RISK_TIER_DEFAULT_ORDER = 2
