"""Configuration for DeFi Lens."""

from .settings import (
    ENVIRONMENT_CONFIG,
    ADVISORY_CONFIG,
    CACHE_CONFIG,
    MONITOR_CONFIG,
    REFERENCE_PRICES,
    get_environment_config,
)

__all__ = [
    "ENVIRONMENT_CONFIG",
    "ADVISORY_CONFIG",
    "CACHE_CONFIG",
    "MONITOR_CONFIG",
    "REFERENCE_PRICES",
    "get_environment_config",
]
