"""
Text Formatters - Render query results, advisory output and events as text.

Features:
- Boxed metric tables for liquidity and APR queries
- AI analysis, prediction and risk sections appended to a query result
- One-line alert and update messages for the monitoring loop
"""

from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from ..core.models import (
    AlertEvent,
    AnalysisResult,
    Opportunity,
    PortfolioOptimization,
    PredictionResult,
    PriceQuote,
    ProtocolMetrics,
    QueryKind,
    RiskAssessment,
    RiskLevel,
    UpdateEvent,
)


TABLE_TITLES = {
    QueryKind.LIQUIDITY: "💧 Liquidity Intelligence",
    QueryKind.APR: "📊 APR Intelligence",
}

SEVERITY_EMOJIS = {
    "low": "🔵",
    "medium": "🟡",
    "high": "🔴",
    "critical": "🚨",
}

RISK_LEVEL_EMOJIS = {
    RiskLevel.LOW: "🟢",
    RiskLevel.MEDIUM: "🟡",
    RiskLevel.HIGH: "🔴",
}

KEY_WIDTH = 28
VALUE_WIDTH = 58

AI_UNAVAILABLE = "⚠️  AI analysis temporarily unavailable"
PREDICTION_UNAVAILABLE = "⚠️  Price prediction temporarily unavailable"


def _timestamp(ts: Optional[float]) -> str:
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S") if ts else "N/A"


def _value(enum_or_str: Any) -> str:
    return getattr(enum_or_str, "value", enum_or_str)


# =============================================================================
# Query tables
# =============================================================================

def build_table_rows(
    query_kind: QueryKind,
    metrics: ProtocolMetrics,
    price: PriceQuote,
    timestamp: float,
) -> List[Tuple[str, str]]:
    """
    Rows of the base table for a query result.

    Args:
        query_kind: liquidity or apr
        metrics: Protocol metrics for the pool
        price: Price quote (live or synthesized)
        timestamp: Computation time (seconds since epoch)

    Returns:
        List of (label, value) pairs
    """
    rows = [
        ("⏰ Last Updated", _timestamp(timestamp)),
        ("💰 Price", f"${price.price:.6f}"),
    ]

    if QueryKind(query_kind) == QueryKind.LIQUIDITY:
        total = metrics.total_liquidity or 0
        rows += [
            ("🌊 Total Liquidity", f"{total:,.0f} APT"),
            ("💵 Liquidity (USD)", f"${total * price.price:,.2f}"),
            ("📊 Asset Types", str(metrics.asset_type_count)),
            ("🏊 Liquidity Depth", metrics.liquidity_depth or "N/A"),
        ]
    else:
        rows += [
            ("📈 APR", f"{metrics.apr or 0:g}%"),
            ("👥 Delegators", str(metrics.delegators or 0)),
            ("💪 Staking Health", metrics.staking_health or "Good"),
        ]
    return rows


def format_table(title: str, rows: Sequence[Tuple[str, Any]]) -> str:
    """Render (label, value) rows as a boxed two-column table."""
    border = f"+{'-' * (KEY_WIDTH + 2)}+{'-' * (VALUE_WIDTH + 2)}+"
    lines = [
        f"\n🚀 ================= {title} =================",
        border,
        f"| {'📊 Metric':<{KEY_WIDTH}} | {'💎 Value':<{VALUE_WIDTH}} |",
        border,
    ]
    for key, value in rows:
        lines.append(f"| {str(key):<{KEY_WIDTH}} | {str(value):<{VALUE_WIDTH}} |")
    lines.append(border)
    lines.append("🚀 =====================================================\n")
    return "\n".join(lines)


def format_error(message: str) -> str:
    return f"\n❌ ERROR: {message}\n💡 TIP: Check your API keys and network connection\n"


def format_warning(message: str) -> str:
    return f"⚠️  WARNING: {message}\n"


def format_success(message: str) -> str:
    return f"✅ {message}\n"


# =============================================================================
# Result sections
# =============================================================================

def format_ai_insights(analysis: AnalysisResult) -> str:
    """
    Render an advisory analysis.

    Args:
        analysis: AnalysisResult from the advisory client

    Returns:
        Multi-line section text
    """
    output = "\n🤖 ================= AI ANALYSIS =================\n"

    if analysis.insights:
        output += "💡 KEY INSIGHTS:\n"
        for i, insight in enumerate(analysis.insights, 1):
            output += f"   {i}. {insight}\n"
        output += "\n"

    output += "🛡️  RISK ASSESSMENT:\n"
    output += f"   Overall Risk: {analysis.risk.overall:g}/100\n"
    if analysis.risk.warnings:
        output += "   ⚠️  Warnings:\n"
        for warning in analysis.risk.warnings:
            output += f"     • {warning}\n"
    output += "\n"

    if analysis.opportunities:
        output += "🎯 OPPORTUNITIES:\n"
        for i, opportunity in enumerate(analysis.opportunities, 1):
            output += f"   {i}. {opportunity}\n"
        output += "\n"

    if analysis.confidence:
        output += f"🎯 AI Confidence: {analysis.confidence:g}%\n"

    output += "🤖 ===================================================\n"
    return output


def _change_percent(prediction: PredictionResult) -> float:
    if not prediction.current_price:
        return 0.0
    return (prediction.predicted_price - prediction.current_price) / prediction.current_price * 100


def format_prediction(prediction: PredictionResult) -> str:
    change = _change_percent(prediction)
    trend = "📈" if prediction.predicted_price > prediction.current_price else "📉"
    return (
        f"\n🔮 Price Prediction ({prediction.timeframe}):\n"
        f"{trend} ${prediction.current_price:.4f} → ${prediction.predicted_price:.4f} ({change:.2f}%)\n"
        f"🎯 Confidence: {prediction.confidence:g}%\n"
        f"💭 Analysis: {prediction.reasoning}\n"
    )


def format_predictions(predictions: Iterable[PredictionResult]) -> str:
    """Render several predictions as one block, used by the CLI."""
    predictions = list(predictions)
    if not predictions:
        return "\n🔮 No predictions available.\n"

    output = "\n🔮 ================= PRICE PREDICTIONS =================\n"
    for pred in predictions:
        change = _change_percent(pred)
        trend = "📈" if change > 0 else "📉"
        sign = "+" if change > 0 else ""
        output += f"{trend} {pred.asset.upper()} ({pred.timeframe}):\n"
        output += f"   Current: ${pred.current_price:.4f}\n"
        output += f"   Predicted: ${pred.predicted_price:.4f} ({sign}{change:.2f}%)\n"
        output += f"   Confidence: {pred.confidence:g}%\n"
        output += f"   Reasoning: {pred.reasoning}\n\n"
    output += "🔮 =====================================================\n"
    return output


def format_risk_assessment(risk: RiskAssessment) -> str:
    emoji = RISK_LEVEL_EMOJIS.get(RiskLevel(risk.level), "🔴")
    return (
        "\n🛡️ Risk Assessment:\n"
        f"{emoji} Overall Risk: {_value(risk.level)} ({risk.overall}/100)\n"
        f"📋 Analysis: {', '.join(risk.factors)}\n"
    )


# =============================================================================
# Opportunities and portfolio
# =============================================================================

def format_opportunities(opportunities: Sequence[Opportunity]) -> str:
    if not opportunities:
        return "\n🔍 No opportunities found matching your criteria.\n"

    output = f"\n🎯 ================= DISCOVERED {len(opportunities)} OPPORTUNITIES =================\n"
    output += f"{'🏛️  Protocol':<15} {'📈 APY':>8} {'💰 TVL':>10} {'⚡ Risk':>8} {'🤖 AI Score':>12}\n"
    for opp in opportunities:
        output += (
            f"{opp.protocol_name:<15} {opp.apy:>7.1f}% {'$' + format(opp.tvl / 1_000_000, '.1f') + 'M':>10} "
            f"{_value(opp.risk_tier).upper():>8} {str(opp.ai_score) + '/100':>12}\n"
        )
    output += "🎯 ====================================================\n"

    top = opportunities[0]
    output += "🏆 TOP RECOMMENDATION:\n"
    output += f"   {top.protocol_name} - {top.reasoning}\n\n"
    return output


def format_portfolio_optimization(optimization: PortfolioOptimization) -> str:
    output = "\n💼 ================= PORTFOLIO OPTIMIZATION =================\n"
    output += "📊 CURRENT PORTFOLIO:\n"
    output += f"   Total Value: ${optimization.current_value:,.2f}\n\n"

    output += "🎯 OPTIMIZED ALLOCATION:\n"
    for asset, value in optimization.suggested_allocation.items():
        share = (value / optimization.current_value * 100) if optimization.current_value else 0.0
        output += f"   {asset}: ${value:,.2f} ({share:.1f}%)\n"

    output += f"\n📈 Expected Return: {optimization.expected_return * 100:.1f}%\n"
    output += f"🛡️  Risk Score: {optimization.risk_score:g}/10\n\n"

    if optimization.actions:
        output += "🎬 RECOMMENDED ACTIONS:\n"
        for i, action in enumerate(optimization.actions, 1):
            output += f"   {i}. {action.type.upper()} {action.amount:g} {action.asset}\n"
            output += f"      Reason: {action.reason}\n"

    output += "\n💼 =========================================================\n"
    return output


# =============================================================================
# Monitoring events
# =============================================================================

def format_alert(alert: AlertEvent) -> str:
    emoji = SEVERITY_EMOJIS.get(_value(alert.severity), "📢")
    return (
        f"{emoji} ALERT: {alert.message}\n"
        f"   Address: {alert.address}\n"
        f"   Time: {_timestamp(alert.timestamp)}\n"
    )


def format_update(update: UpdateEvent) -> str:
    return f"📡 {update.kind} {update.address}: {update.value:.2f} ({_timestamp(update.timestamp)})"
