"""Core query orchestration components."""

from .errors import (
    DefiLensError,
    ConfigurationError,
    UpstreamUnavailable,
    AdvisoryUnavailable,
    OptimizationError,
)

from .models import (
    QueryKind,
    QueryOptions,
    QueryResult,
    CacheEntry,
    ProtocolMetrics,
    PriceQuote,
    RiskLevel,
    RiskTier,
    RiskAssessment,
    Opportunity,
    OpportunityFilters,
    Severity,
    AlertType,
    AlertRule,
    AlertEvent,
    UpdateEvent,
    RiskBreakdown,
    AnalysisResult,
    PredictionResult,
    PortfolioAction,
    PortfolioOptimization,
)

from .cache import ResultCache, make_key
from .synthesizer import DataSynthesizer
from .events import EventBus, Subscription, UPDATE, ALERT
from .alerts import AlertRuleRegistry, check_threshold
from .opportunities import rank, generate_candidates
from .monitor import MonitoringEngine

# Imported last: pulls in config, fetchers and advisory, which depend on the above
from .orchestrator import QueryOrchestrator

__all__ = [
    # Errors
    "DefiLensError",
    "ConfigurationError",
    "UpstreamUnavailable",
    "AdvisoryUnavailable",
    "OptimizationError",
    # Models
    "QueryKind",
    "QueryOptions",
    "QueryResult",
    "CacheEntry",
    "ProtocolMetrics",
    "PriceQuote",
    "RiskLevel",
    "RiskTier",
    "RiskAssessment",
    "Opportunity",
    "OpportunityFilters",
    "Severity",
    "AlertType",
    "AlertRule",
    "AlertEvent",
    "UpdateEvent",
    "RiskBreakdown",
    "AnalysisResult",
    "PredictionResult",
    "PortfolioAction",
    "PortfolioOptimization",
    # Components
    "ResultCache",
    "make_key",
    "DataSynthesizer",
    "EventBus",
    "Subscription",
    "UPDATE",
    "ALERT",
    "AlertRuleRegistry",
    "check_threshold",
    "rank",
    "generate_candidates",
    "MonitoringEngine",
    "QueryOrchestrator",
]
