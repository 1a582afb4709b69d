"""
Price Fetcher - Latest prices from the Pyth Hermes API.
"""

import asyncio
import logging
from typing import Optional

import requests

from ..config.settings import FETCH_TIMEOUT_SECONDS


logger = logging.getLogger(__name__)


def fetch_pyth_price(feed_id: str, api_url: str) -> Optional[float]:
    """
    Fetch the latest price for a Pyth feed.

    Args:
        feed_id: Pyth price feed id (hex, no 0x prefix)
        api_url: Hermes 'latest price updates' endpoint

    Returns:
        Human-readable price (price * 10^expo), or None if unavailable
    """
    try:
        response = requests.get(api_url, params={"ids[]": feed_id}, timeout=FETCH_TIMEOUT_SECONDS)
        response.raise_for_status()
        price_update = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning("Error fetching Pyth price data: %s", e)
        return None

    parsed = (price_update or {}).get("parsed") or []
    feed_data = next((entry for entry in parsed if entry.get("id") == feed_id), None)
    if not feed_data or not feed_data.get("price"):
        return None

    try:
        raw_price = float(feed_data["price"]["price"])
        exponent = int(feed_data["price"]["expo"])
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Malformed Pyth price entry for %s: %s", feed_id, e)
        return None

    return raw_price * (10 ** exponent)


class PythPriceSource:
    """Price source backed by Pyth Hermes."""

    async def fetch_price(self, feed_id: str, endpoint: str) -> Optional[float]:
        return await asyncio.to_thread(fetch_pyth_price, feed_id, endpoint)
