"""
DeFi Lens - Query orchestration for Aptos DeFi protocol data.

Answers pool and asset queries from a TTL cache or fresh upstream data,
substitutes synthesized values when sources fail, and runs a monitoring loop
that emits update and alert events.
"""

__version__ = "1.0.0"

from .core import (
    QueryOrchestrator,
    QueryKind,
    QueryOptions,
    OpportunityFilters,
    AlertRule,
    AlertType,
    UPDATE,
    ALERT,
    DefiLensError,
    ConfigurationError,
    OptimizationError,
)

__all__ = [
    "__version__",
    "QueryOrchestrator",
    "QueryKind",
    "QueryOptions",
    "OpportunityFilters",
    "AlertRule",
    "AlertType",
    "UPDATE",
    "ALERT",
    "DefiLensError",
    "ConfigurationError",
    "OptimizationError",
]
