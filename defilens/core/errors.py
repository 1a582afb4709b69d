"""
Error taxonomy.

Only ConfigurationError and OptimizationError ever reach a caller; upstream and
advisory failures are recovered where they happen.
"""


class DefiLensError(Exception):
    """Base class for all DeFi Lens errors."""


class ConfigurationError(DefiLensError):
    """Unknown feed key or environment. Fatal for the current query."""


class UpstreamUnavailable(DefiLensError):
    """
    A protocol-data or price fetch failed.

    Taxonomy label only. The bundled sources report failure by returning
    None or synthesized data, and the orchestrator recovers from any exception
    a custom source raises, so this never reaches a caller of answer().
    """


class AdvisoryUnavailable(DefiLensError):
    """The advisory service failed, timed out or returned malformed content."""


class OptimizationError(DefiLensError):
    """Portfolio optimization failed. There is no safe fallback."""
