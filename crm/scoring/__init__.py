"""Churn-risk scoring."""

from .churn import ChurnScorer, normalize_factor
from .config import ChurnScoringConfig

__all__ = ["ChurnScorer", "ChurnScoringConfig", "normalize_factor"]
