"""Text rendering of query results and monitoring events."""

from .formatters import (
    AI_UNAVAILABLE,
    PREDICTION_UNAVAILABLE,
    TABLE_TITLES,
    build_table_rows,
    format_table,
    format_error,
    format_warning,
    format_success,
    format_ai_insights,
    format_prediction,
    format_predictions,
    format_risk_assessment,
    format_opportunities,
    format_portfolio_optimization,
    format_alert,
    format_update,
)

__all__ = [
    "AI_UNAVAILABLE",
    "PREDICTION_UNAVAILABLE",
    "TABLE_TITLES",
    "build_table_rows",
    "format_table",
    "format_error",
    "format_warning",
    "format_success",
    "format_ai_insights",
    "format_prediction",
    "format_predictions",
    "format_risk_assessment",
    "format_opportunities",
    "format_portfolio_optimization",
    "format_alert",
    "format_update",
]
