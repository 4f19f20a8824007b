"""Pipeline metrics aggregation and invariant validation."""

import logging

from pgxboard.constants import MAX_AVERAGE_QUALITY
from pgxboard.matching.matcher import classify_detection_state
from pgxboard.models.matching import DetectionState, MatchedVariant
from pgxboard.models.metrics import NOT_APPLICABLE, EvidenceDistribution, MetricsValidation, PipelineMetrics
from pgxboard.models.variant import VariantRecord

logger = logging.getLogger(__name__)

COMPLETENESS_TOLERANCE = 0.001


def average_quality(records: list[VariantRecord]) -> float:
    """Mean QUAL over all records, clamped to [0, 100]; 0 for no records."""
    if not records:
        return 0.0

    average = sum(r.quality for r in records) / len(records)
    if not 0 <= average <= MAX_AVERAGE_QUALITY:
        logger.warning(f"Average quality {average} out of range, clamping to [0, {MAX_AVERAGE_QUALITY:.0f}]")
        average = max(0.0, min(MAX_AVERAGE_QUALITY, average))
    return average


def evidence_distribution(matched: list[MatchedVariant]) -> EvidenceDistribution:
    distribution = EvidenceDistribution()
    for variant in matched:
        level = variant.evidence_level.value if variant.evidence_level else "unknown"
        setattr(distribution, level, getattr(distribution, level) + 1)
    return distribution


def variants_by_gene(matched: list[MatchedVariant]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for variant in matched:
        counts[variant.gene] = counts.get(variant.gene, 0) + 1
    return counts


def variants_by_drug(matched: list[MatchedVariant], gene_to_drugs: dict[str, list[str]]) -> dict[str, int]:
    """Count matched variants per drug through a gene -> drugs mapping."""
    counts: dict[str, int] = {}
    for variant in matched:
        for drug in gene_to_drugs.get(variant.gene, []):
            counts[drug] = counts.get(drug, 0) + 1
    return counts


def annotation_completeness(candidate_count: int, matched_count: int) -> float | str:
    if candidate_count == 0:
        return NOT_APPLICABLE
    return matched_count / candidate_count


def aggregate_metrics(
    all_records: list[VariantRecord],
    candidates: list[VariantRecord],
    matched: list[MatchedVariant],
    unmatched: list[VariantRecord],
    detection_state: DetectionState | None = None,
    gene_to_drugs: dict[str, list[str]] | None = None,
) -> PipelineMetrics:
    """Aggregate one run into PipelineMetrics.

    Args:
        all_records: Every parsed record
        candidates: Records belonging to the gene panel
        matched: Candidates matched to the reference table
        unmatched: Candidates without a match
        detection_state: Precomputed state, classified from the counts when omitted
        gene_to_drugs: Mapping used for per-drug counts
    """
    if detection_state is None:
        detection_state = classify_detection_state(len(all_records), len(candidates), len(matched))

    by_gene = variants_by_gene(matched)
    metrics = PipelineMetrics(
        parsing_success=True,
        total_records=len(all_records),
        candidate_count=len(candidates),
        matched_count=len(matched),
        unmatched_count=len(unmatched),
        variants_detected=len(matched),
        genes_analyzed=len(by_gene),
        annotation_completeness=annotation_completeness(len(candidates), len(matched)),
        average_quality=average_quality(all_records),
        evidence_distribution=evidence_distribution(matched),
        variants_by_gene=by_gene,
        variants_by_drug=variants_by_drug(matched, gene_to_drugs or {}),
        detection_state=detection_state,
    )

    validation = validate_metrics(metrics)
    if not validation.valid:
        logger.warning(f"Metrics validation failed: {'; '.join(validation.errors)}")

    return metrics


def validate_metrics(metrics: PipelineMetrics) -> MetricsValidation:
    """Check the counting invariants of a PipelineMetrics."""
    errors: list[str] = []

    if metrics.matched_count + metrics.unmatched_count != metrics.candidate_count:
        errors.append(
            f"Matched ({metrics.matched_count}) + Unmatched ({metrics.unmatched_count}) "
            f"!= Candidates ({metrics.candidate_count})"
        )

    if metrics.candidate_count > metrics.total_records:
        errors.append(f"Candidates ({metrics.candidate_count}) > Total records ({metrics.total_records})")

    counts = (metrics.total_records, metrics.candidate_count, metrics.matched_count, metrics.unmatched_count)
    if any(c < 0 for c in counts):
        errors.append("Negative variant counts detected")

    if not 0 <= metrics.average_quality <= MAX_AVERAGE_QUALITY:
        errors.append(f"Average quality ({metrics.average_quality}) out of range [0, {MAX_AVERAGE_QUALITY:.0f}]")

    if metrics.evidence_distribution.total != metrics.matched_count:
        errors.append(
            f"Evidence distribution sum ({metrics.evidence_distribution.total}) "
            f"!= Matched ({metrics.matched_count})"
        )

    if metrics.annotation_completeness != NOT_APPLICABLE:
        expected = metrics.matched_count / metrics.candidate_count if metrics.candidate_count > 0 else 0.0
        if abs(metrics.annotation_completeness - expected) > COMPLETENESS_TOLERANCE:
            errors.append(f"Annotation completeness ({metrics.annotation_completeness}) != Expected ({expected})")

    if metrics.variants_detected != metrics.matched_count:
        errors.append(f"variants_detected ({metrics.variants_detected}) != matched ({metrics.matched_count})")

    for error in errors:
        logger.error(f"Metric invariant violation: {error}")

    return MetricsValidation(valid=not errors, errors=errors)
