"""Utility functions."""

from pgxboard.utils.logging_config import NarrativeDecisionLogger, get_logger, reset_logger
from pgxboard.utils.metrics_tracker import MetricsTracker, TrackerSummary

__all__ = [
    "NarrativeDecisionLogger",
    "get_logger",
    "reset_logger",
    "MetricsTracker",
    "TrackerSummary",
]
