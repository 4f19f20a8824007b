"""Genotype inference, confidence scoring, contradiction detection and metrics."""

from pgxboard.analysis.confidence import calculate_confidence, validate_monotonicity
from pgxboard.analysis.contradictions import (
    check_enzyme_activity_consistency,
    check_internal_consistency,
    detect_contradictions,
    extract_claims,
)
from pgxboard.analysis.genotype import infer_gene_call
from pgxboard.analysis.metrics import aggregate_metrics, validate_metrics

__all__ = [
    "calculate_confidence",
    "validate_monotonicity",
    "check_enzyme_activity_consistency",
    "check_internal_consistency",
    "detect_contradictions",
    "extract_claims",
    "infer_gene_call",
    "aggregate_metrics",
    "validate_metrics",
]
