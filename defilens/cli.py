#!/usr/bin/env python3
"""
DeFi Lens CLI.

Usage:
    defilens analyze "Is this pool healthy?" --pool 0x1 --type liquidity --ai --risk
    defilens discover --min-apy 20 --max-risk medium
    defilens predict APT 24h
    defilens optimize portfolio.json --risk-tolerance 5
    defilens monitor 0x123 0x456 --alerts
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Dict

from . import __version__
from .core.errors import DefiLensError
from .core.events import ALERT, UPDATE
from .core.models import AlertRule, AlertType, OpportunityFilters, QueryKind, QueryOptions
from .core.orchestrator import QueryOrchestrator
from .logging_utils import setup_logging
from .notifications.formatters import (
    format_alert,
    format_error,
    format_opportunities,
    format_portfolio_optimization,
    format_predictions,
    format_success,
    format_update,
    format_warning,
)


logger = logging.getLogger(__name__)

# Ticker symbols accepted by `predict`, mapped to price feed keys
ASSET_KEYS = {
    "APT": "aptUsd",
    "BTC": "btcUsd",
    "ETH": "ethUsd",
}

DEFAULT_POOL_ADDRESS = "mock-pool-address"
DEFAULT_ALERT_THRESHOLD = 0.05


def _build_orchestrator(args) -> QueryOrchestrator:
    return QueryOrchestrator(environment=args.environment, monitor_interval=getattr(args, "interval", None))


def _load_portfolio(source: str) -> Dict[str, float]:
    """Read positions from a JSON file path or an inline JSON object."""
    if os.path.exists(source):
        with open(source) as f:
            data = json.load(f)
    else:
        data = json.loads(source)
    if not isinstance(data, dict):
        raise ValueError("Portfolio must be a JSON object of asset -> value")
    return {str(k): float(v) for k, v in data.items()}


# ============================================================================
# Commands
# ============================================================================

async def cmd_analyze(args) -> int:
    orchestrator = _build_orchestrator(args)
    options = QueryOptions(include_ai=args.ai, include_prediction=args.predict, include_risk=args.risk)
    result = await orchestrator.answer(args.query, args.pool, args.feed, QueryKind(args.type), options)
    print(result)
    return 0


async def cmd_discover(args) -> int:
    orchestrator = _build_orchestrator(args)
    filters = OpportunityFilters(
        min_apy=args.min_apy,
        min_tvl=args.min_tvl,
        max_risk_tier=args.max_risk,
        protocols=[p.strip() for p in args.protocols.split(",")] if args.protocols else None,
    )
    opportunities = await orchestrator.discover_opportunities(filters)

    if not opportunities:
        print(format_warning("No opportunities found matching your criteria"))
        return 0

    print(format_opportunities(opportunities))

    if args.ai:
        top = opportunities[0]
        print(await orchestrator.answer(
            f"Should I invest in {top.protocol_name}?",
            DEFAULT_POOL_ADDRESS,
            "aptUsd",
            QueryKind.LIQUIDITY,
            QueryOptions(include_ai=True),
        ))

    print(format_success(f"Found {len(opportunities)} opportunities"))
    return 0


async def cmd_predict(args) -> int:
    orchestrator = _build_orchestrator(args)
    asset = ASSET_KEYS.get(args.asset.upper(), args.asset)
    prediction = await orchestrator.predict_price(asset, args.timeframe)
    print(format_predictions([prediction]))

    if args.confidence:
        print("🎯 CONFIDENCE BREAKDOWN:")
        print(f"   Technical Analysis: {prediction.signals.get('technical', 0) * 100:.1f}%")
        print(f"   Fundamental Analysis: {prediction.signals.get('fundamental', 0) * 100:.1f}%")
        print(f"   Market Sentiment: {prediction.signals.get('sentiment', 0) * 100:.1f}%")

    print(format_success("Prediction completed"))
    return 0


async def cmd_optimize(args) -> int:
    orchestrator = _build_orchestrator(args)
    positions = _load_portfolio(args.portfolio)
    target_return = args.target_return / 100 if args.target_return is not None else None
    optimization = await orchestrator.optimize_portfolio(positions, args.risk_tolerance, target_return)
    print(format_portfolio_optimization(optimization))
    print(format_success("Portfolio optimization completed"))
    return 0


async def cmd_monitor(args) -> int:
    orchestrator = _build_orchestrator(args)

    if args.verbose:
        orchestrator.on(UPDATE, lambda update: print(format_update(update)))
    orchestrator.on(ALERT, lambda alert: print(format_alert(alert)))

    if args.alerts:
        for address in args.addresses:
            orchestrator.set_smart_alert(address, AlertRule(AlertType.PRICE_CHANGE, args.threshold))

    task = orchestrator.start_monitoring(args.addresses)
    print(format_success(f"Monitoring started for {len(args.addresses)} addresses"))
    print("Press Ctrl+C to stop monitoring\n")
    await task
    return 0


COMMANDS = {
    "analyze": cmd_analyze,
    "discover": cmd_discover,
    "predict": cmd_predict,
    "optimize": cmd_optimize,
    "monitor": cmd_monitor,
}


# ============================================================================
# Main
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="defilens",
        description="DeFi Lens - Aptos DeFi intelligence from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--environment", "-e", default="testnet", choices=["testnet", "mainnet"],
                        help="Network environment (default: testnet)")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # analyze
    analyze_parser = subparsers.add_parser("analyze", help="Analyze a pool")
    analyze_parser.add_argument("query", help="Your analysis question")
    analyze_parser.add_argument("--pool", default=DEFAULT_POOL_ADDRESS, help="Pool address")
    analyze_parser.add_argument("--feed", default="aptUsd", help="Price feed key (default: aptUsd)")
    analyze_parser.add_argument("--type", default="liquidity", choices=[k.value for k in QueryKind],
                                help="Analysis type (default: liquidity)")
    analyze_parser.add_argument("--ai", action="store_true", help="Include AI analysis")
    analyze_parser.add_argument("--predict", action="store_true", help="Include 24h price prediction")
    analyze_parser.add_argument("--risk", action="store_true", help="Include risk assessment")

    # discover
    discover_parser = subparsers.add_parser("discover", help="Find DeFi opportunities")
    discover_parser.add_argument("--min-apy", type=float, default=0, help="Minimum APY percentage")
    discover_parser.add_argument("--max-risk", default="high", choices=["low", "medium", "high"],
                                 help="Maximum risk level (default: high)")
    discover_parser.add_argument("--min-tvl", type=float, default=0, help="Minimum TVL in USD")
    discover_parser.add_argument("--protocols", default=None, help="Comma-separated list of protocols")
    discover_parser.add_argument("--ai", action="store_true", help="Include AI analysis of the top result")

    # predict
    predict_parser = subparsers.add_parser("predict", help="Predict asset prices")
    predict_parser.add_argument("asset", help="Asset to predict (APT, BTC, ETH or a feed key)")
    predict_parser.add_argument("timeframe", nargs="?", default="24h", help="Prediction timeframe (default: 24h)")
    predict_parser.add_argument("--confidence", action="store_true", help="Show confidence breakdown")

    # optimize
    optimize_parser = subparsers.add_parser("optimize", help="Optimize a portfolio")
    optimize_parser.add_argument("portfolio", help="Portfolio file (JSON) or inline JSON")
    optimize_parser.add_argument("--risk-tolerance", type=float, default=5, help="Risk tolerance 1-10 (default: 5)")
    optimize_parser.add_argument("--target-return", type=float, default=None, help="Target return percentage")

    # monitor
    monitor_parser = subparsers.add_parser("monitor", help="Monitor addresses for updates and alerts")
    monitor_parser.add_argument("addresses", nargs="+", help="Addresses to monitor")
    monitor_parser.add_argument("--alerts", action="store_true", help="Enable price change alerts")
    monitor_parser.add_argument("--threshold", type=float, default=DEFAULT_ALERT_THRESHOLD,
                                help="Price change alert threshold (default: 0.05)")
    monitor_parser.add_argument("--interval", type=float, default=None, help="Seconds between updates")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        return asyncio.run(COMMANDS[args.command](args))
    except KeyboardInterrupt:
        print(format_success("Stopped"))
        return 0
    except (DefiLensError, ValueError, OSError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(format_error(str(e)), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
