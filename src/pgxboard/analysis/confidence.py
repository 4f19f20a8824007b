"""Deterministic confidence scoring.

The score is a weighted sum of four factors, each bounded to [0, 1]:

    quality        0.35  piecewise-linear map of the average PHRED quality
    completeness   0.30  fraction of candidates matched
    evidence       0.25  mean CPIC evidence weight (A=1.0 ... D=0.25)
    variant count  0.10  min(count / 5, 1)

The result is monotonic non-decreasing in every factor and is always
computed, never a fixed default.
"""

import logging
import math

from pgxboard.constants import (
    CONFIDENCE_WEIGHTS,
    DEFAULT_EVIDENCE_FACTOR,
    EVIDENCE_WEIGHTS,
    INVALID_QUALITY_FALLBACK,
    VARIANT_COUNT_SATURATION,
)
from pgxboard.models.confidence import ConfidenceInputs
from pgxboard.models.reference import EvidenceLevel

logger = logging.getLogger(__name__)


def _clamp(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def quality_factor(qualities: list[float]) -> float:
    """Map the average of valid quality scores onto [0, 1].

    <20 -> [0, 0.25), [20, 30) -> [0.25, 0.60), >=30 -> [0.60, 1.0] with
    saturation at 100. Negative and NaN scores are ignored.
    """
    if not qualities:
        return 0.0

    valid = [q for q in qualities if not math.isnan(q) and q >= 0]
    if not valid:
        logger.warning(f"All {len(qualities)} quality scores invalid, using fallback factor {INVALID_QUALITY_FALLBACK}")
        return INVALID_QUALITY_FALLBACK

    if len(valid) < len(qualities):
        logger.warning(f"Ignoring {len(qualities) - len(valid)} of {len(qualities)} invalid quality scores")

    average = sum(valid) / len(valid)

    if average < 20:
        return (average / 20) * 0.25
    if average < 30:
        return 0.25 + ((average - 20) / 10) * 0.35
    return min(0.6 + ((average - 30) / 70) * 0.4, 1.0)


def completeness_factor(completeness: float) -> float:
    return _clamp(completeness)


def evidence_factor(levels: list[EvidenceLevel]) -> float:
    """Mean evidence weight; an empty list counts as the weakest level."""
    if not levels:
        return DEFAULT_EVIDENCE_FACTOR
    return sum(EVIDENCE_WEIGHTS[EvidenceLevel(level).value] for level in levels) / len(levels)


def variant_count_factor(count: int) -> float:
    return min(count / VARIANT_COUNT_SATURATION, 1.0)


def calculate_confidence(inputs: ConfidenceInputs) -> float:
    """Weighted confidence score in [0, 1]."""
    factors = {
        "quality": quality_factor(inputs.qualities),
        "completeness": completeness_factor(inputs.completeness),
        "evidence": evidence_factor(inputs.evidence_levels),
        "variant_count": variant_count_factor(inputs.variant_count),
    }
    score = _clamp(sum(CONFIDENCE_WEIGHTS[name] * value for name, value in factors.items()))

    logger.debug(
        f"Confidence {score:.3f} (quality={factors['quality']:.3f} completeness={factors['completeness']:.3f} "
        f"evidence={factors['evidence']:.3f} count={factors['variant_count']:.3f})"
    )
    return score


def validate_monotonicity(lower: ConfidenceInputs, higher: ConfidenceInputs) -> bool:
    """True when improving inputs from ``lower`` to ``higher`` does not reduce confidence."""
    return calculate_confidence(higher) >= calculate_confidence(lower)
