"""
Advisory clients.

- OpenAIAdvisoryClient: live analysis, prediction and optimization
- NullAdvisoryClient: canned responses when no credential is configured
"""

from .openai_client import OpenAIAdvisoryClient, parse_model_json
from .fallback import NullAdvisoryClient, canned_analysis
from ..config.settings import ADVISORY_CONFIG


def build_advisory_client(api_key=None, synth=None):
    """Live client when a key is available, otherwise the null client."""
    key = api_key if api_key is not None else ADVISORY_CONFIG["api_key"]
    if key:
        return OpenAIAdvisoryClient(key, synth=synth)
    return NullAdvisoryClient(synth=synth)


__all__ = [
    "OpenAIAdvisoryClient",
    "NullAdvisoryClient",
    "build_advisory_client",
    "canned_analysis",
    "parse_model_json",
]
