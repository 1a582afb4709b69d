"""
Data fetchers for the query orchestrator.

Each module provides:
- fetch_X(...) - blocking HTTP call returning a plain value or result dict
- an async source class the orchestrator awaits

Available fetchers:
- protocol: pool liquidity and staking APR from the Aptos indexer
- price: latest prices from Pyth Hermes
"""

from .protocol import (
    fetch_liquidity,
    fetch_staking_apr,
    AptosProtocolSource,
)

from .price import (
    fetch_pyth_price,
    PythPriceSource,
)

__all__ = [
    # Protocol
    "fetch_liquidity",
    "fetch_staking_apr",
    "AptosProtocolSource",
    # Price
    "fetch_pyth_price",
    "PythPriceSource",
]
