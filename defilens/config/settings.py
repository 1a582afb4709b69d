"""
DeFi Lens configuration.

Network endpoints, price feed identifiers and runtime settings.
"""

import os
from typing import Dict, Any

from dotenv import load_dotenv

from ..core.errors import ConfigurationError

# Load .env from the working directory before any value below is read
load_dotenv()


PYTH_HERMES_URL = "https://hermes.pyth.network/v2/updates/price/latest"

# Pyth price feed ids by logical asset key
PRICE_FEED_IDS = {
    "aptUsd": "03ae4db29ed4ae33d323568895aa00337e658e348b37509f5372ae51f0af00d5",
    "btcUsd": "e62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43",
}

ENVIRONMENT_CONFIG = {
    "testnet": {
        "aptos_rpc_url": os.getenv("APTOS_TESTNET_RPC_URL", "https://api.testnet.aptoslabs.com/v1"),
        "indexer_url": os.getenv("APTOS_TESTNET_INDEXER_URL", "https://api.testnet.aptoslabs.com/v1/graphql"),
        "price_api_url": os.getenv("PYTH_API_URL", PYTH_HERMES_URL),
        "price_feed_ids": dict(PRICE_FEED_IDS),
    },
    "mainnet": {
        "aptos_rpc_url": os.getenv("APTOS_MAINNET_RPC_URL", "https://api.mainnet.aptoslabs.com/v1"),
        # Mainnet metrics are still read from the testnet indexer
        "indexer_url": os.getenv("APTOS_MAINNET_INDEXER_URL", "https://api.testnet.aptoslabs.com/v1/graphql"),
        "price_api_url": os.getenv("PYTH_API_URL", PYTH_HERMES_URL),
        "price_feed_ids": dict(PRICE_FEED_IDS),
    },
}

# Advisory (text generation) service
ADVISORY_CONFIG = {
    "api_key": os.getenv("OPENAI_API_KEY", ""),
    "api_url": os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions"),
    "model": os.getenv("DEFILENS_ADVISORY_MODEL", "gpt-4"),
    "timeout_seconds": float(os.getenv("DEFILENS_ADVISORY_TIMEOUT", 30)),
    "temperature": 0.7,
}

CACHE_CONFIG = {
    "ttl_ms": int(os.getenv("DEFILENS_CACHE_TTL_MS", 300000)),  # 5 minutes
}

MONITOR_CONFIG = {
    "interval_seconds": float(os.getenv("DEFILENS_MONITOR_INTERVAL", 5)),
    "opportunity_probability": 0.1,
}

# Fallback prices used when a prediction is requested without a live quote
REFERENCE_PRICES = {
    "aptUsd": 4.73,
    "btcUsd": 67420.50,
    "ethUsd": 3780.25,
}

FETCH_TIMEOUT_SECONDS = 30


def get_environment_config(environment: str) -> Dict[str, Any]:
    """
    Get endpoint configuration for a network environment.

    Args:
        environment: 'testnet' or 'mainnet'

    Returns:
        Dict with aptos_rpc_url, indexer_url, price_api_url, price_feed_ids

    Raises:
        ConfigurationError: If the environment is unknown
    """
    if environment not in ENVIRONMENT_CONFIG:
        raise ConfigurationError(
            f"Unknown environment: {environment} (expected one of {sorted(ENVIRONMENT_CONFIG)})"
        )
    return ENVIRONMENT_CONFIG[environment]
