"""Indicator and composite-scoring engine with a concurrent batch orchestrator."""

__version__ = "0.1.0"
