"""Prompt templates for the advisory service. All replies are requested as JSON."""

import json
from typing import Any, Dict, Optional

SYSTEM_PROMPT = "You are an expert Aptos DeFi analyst. Always respond with valid JSON when requested."


def analysis_prompt(protocol_data: Dict[str, Any], price_data: Dict[str, Any], query: str) -> str:
    return f"""Analyze this Aptos DeFi protocol:

Protocol Data: {json.dumps(protocol_data, default=str)}
Price Data: {json.dumps(price_data, default=str)}
Query: "{query}"

Provide analysis in JSON format:
{{
  "insights": ["insight1", "insight2", "insight3"],
  "risk": {{
    "overall": number (0-100),
    "categories": {{
      "smartContract": number (0-100),
      "liquidity": number (0-100),
      "market": number (0-100)
    }},
    "warnings": ["warning1", "warning2"]
  }},
  "opportunities": ["opportunity1", "opportunity2"],
  "confidence": number (0-100)
}}"""


def prediction_prompt(asset: str, timeframe: str, current_price: float) -> str:
    return f"""You are an expert crypto analyst. Predict the price of {asset} for the next {timeframe}.

Current Price: ${current_price}
Market Context: Aptos ecosystem is growing with increasing DeFi adoption
Timeframe: {timeframe}

Provide prediction in JSON format:
{{
  "predictedPrice": number,
  "confidence": number (0-100),
  "reasoning": "brief explanation",
  "signals": {{
    "technical": number (-1 to 1),
    "fundamental": number (-1 to 1),
    "sentiment": number (-1 to 1)
  }}
}}"""


def optimization_prompt(
    positions: Dict[str, float],
    current_value: float,
    risk_tolerance: float,
    target_return: Optional[float] = None,
) -> str:
    target_line = f"\nTarget Return: {target_return}" if target_return is not None else ""
    return f"""Optimize this Aptos DeFi portfolio:

Current Positions: {json.dumps(positions)}
Total Value: ${current_value}
Risk Tolerance: {risk_tolerance}/10{target_line}

Provide optimization in JSON format:
{{
  "suggestedAllocation": {{"asset": value}},
  "expectedReturn": number (0-1),
  "riskScore": number (1-10),
  "actions": [{{"type": "buy|sell|hold", "asset": "string", "amount": number, "reason": "string"}}]
}}"""
