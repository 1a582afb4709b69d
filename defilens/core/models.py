"""
Data model for queries, opportunities, alerts and advisory results.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class QueryKind(str, Enum):
    LIQUIDITY = "liquidity"
    APR = "apr"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RiskTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertType(str, Enum):
    PRICE_CHANGE = "price_change"
    LIQUIDITY_DROP = "liquidity_drop"
    VOLUME_SPIKE = "volume_spike"
    RISK_INCREASE = "risk_increase"


# Rendered query output. Plain text, immutable once cached.
QueryResult = str


@dataclass(frozen=True)
class QueryOptions:
    """Optional sections of a query result. Part of the cache key."""
    include_ai: bool = False
    include_prediction: bool = False
    include_risk: bool = False


@dataclass(frozen=True)
class CacheEntry:
    key: str
    payload: QueryResult
    computed_at: float


@dataclass
class ProtocolMetrics:
    """
    Protocol metrics for one pool.

    Liquidity queries fill total_liquidity/asset_types/liquidity_depth,
    APR queries fill apr/delegators/staking_health.
    """
    total_liquidity: Optional[float] = None
    asset_types: List[Any] = field(default_factory=list)
    liquidity_depth: Optional[str] = None
    apr: Optional[float] = None
    delegators: Optional[int] = None
    staking_health: Optional[str] = None

    @property
    def asset_type_count(self) -> int:
        return len(self.asset_types)

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None and v != []}


@dataclass
class PriceQuote:
    price: float
    synthesized: bool = False


@dataclass
class RiskAssessment:
    overall: int
    level: RiskLevel
    factors: List[str] = field(default_factory=list)


@dataclass
class Opportunity:
    protocol_name: str
    apy: float
    tvl: float
    risk_tier: str
    ai_score: int
    reasoning: str
    liquidity_depth: float
    volume_24h: float
    audit_score: int


@dataclass
class OpportunityFilters:
    """Unset fields impose no constraint."""
    min_apy: Optional[float] = None
    min_tvl: Optional[float] = None
    max_risk_tier: Optional[str] = None
    protocols: Optional[List[str]] = None


@dataclass
class AlertEvent:
    address: str
    alert_type: str
    message: str
    severity: Severity
    timestamp: float
    value: Optional[float] = None


@dataclass
class UpdateEvent:
    address: str
    kind: str
    value: float
    timestamp: float


@dataclass
class AlertRule:
    alert_type: AlertType
    threshold: float
    callback: Optional[Callable[[AlertEvent], None]] = None


@dataclass
class RiskBreakdown:
    overall: float
    categories: Dict[str, float] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


@dataclass
class AnalysisResult:
    insights: List[str]
    risk: RiskBreakdown
    opportunities: List[str]
    confidence: float


@dataclass
class PredictionResult:
    asset: str
    current_price: float
    predicted_price: float
    confidence: float
    timeframe: str
    reasoning: str
    signals: Dict[str, float] = field(default_factory=dict)


@dataclass
class PortfolioAction:
    type: str  # buy | sell | hold
    asset: str
    amount: float
    reason: str


@dataclass
class PortfolioOptimization:
    current_value: float
    suggested_allocation: Dict[str, float]
    expected_return: float
    risk_score: float
    actions: List[PortfolioAction] = field(default_factory=list)
