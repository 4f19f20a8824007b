"""Tests for metrics aggregation and invariant validation."""

import pytest

from pgxboard.analysis.metrics import aggregate_metrics, average_quality, validate_metrics, variants_by_drug
from pgxboard.data.drug_gene_rules import gene_to_drugs
from pgxboard.matching.matcher import detect_pharmacogenomic_variants
from pgxboard.models.matching import DetectionState
from pgxboard.models.metrics import NOT_APPLICABLE
from pgxboard.parsers.vcf import parse_vcf


class TestAggregateMetrics:
    """Tests for aggregate_metrics."""

    def test_no_records(self):
        """Test that an empty file yields N/A completeness."""
        metrics = aggregate_metrics([], [], [], [])

        assert metrics.detection_state == DetectionState.NO_VARIANTS
        assert metrics.annotation_completeness == NOT_APPLICABLE
        assert metrics.average_quality == 0.0
        assert validate_metrics(metrics).valid

    def test_sample_vcf(self, sample_vcf):
        records = parse_vcf(sample_vcf).records
        detection = detect_pharmacogenomic_variants(records)
        metrics = aggregate_metrics(
            records, detection.candidates, detection.matched, detection.unmatched, gene_to_drugs=gene_to_drugs()
        )

        assert metrics.total_records == 3
        assert metrics.candidate_count == 2
        assert metrics.matched_count == 2
        assert metrics.unmatched_count == 0
        assert metrics.variants_detected == 2
        assert metrics.genes_analyzed == 2
        assert metrics.annotation_completeness == 1.0
        assert metrics.average_quality == pytest.approx((35.2 + 40.0 + 50.0) / 3)
        assert metrics.evidence_distribution.A == 2
        assert metrics.evidence_distribution.total == 2
        assert metrics.variants_by_gene == {"CYP2D6": 1, "CYP2C19": 1}
        assert metrics.variants_by_drug["CODEINE"] == 1
        assert metrics.variants_by_drug["CLOPIDOGREL"] == 1
        assert metrics.detection_state == DetectionState.ALL_MATCHED
        assert validate_metrics(metrics).valid

    def test_partial_match(self, make_record, make_matched):
        unmatched = make_record(identifier="rs999", position=1, star_allele="*99")
        matched = make_matched("rs3892097")
        metrics = aggregate_metrics(
            [matched.record, unmatched], [matched.record, unmatched], [matched], [unmatched]
        )

        assert metrics.annotation_completeness == 0.5
        assert metrics.detection_state == DetectionState.SOME_MATCHED

    def test_average_quality_clamped(self, make_record):
        metrics = aggregate_metrics([make_record(quality=500.0)], [], [], [])
        assert metrics.average_quality == 100.0

    def test_average_quality_empty(self):
        assert average_quality([]) == 0.0

    def test_variants_by_drug_mapping(self, make_matched):
        counts = variants_by_drug([make_matched("rs3892097")], {"CYP2D6": ["CODEINE", "TRAMADOL"]})
        assert counts == {"CODEINE": 1, "TRAMADOL": 1}


class TestValidateMetrics:
    """Tests for invariant checks."""

    def test_count_mismatch(self):
        metrics = aggregate_metrics([], [], [], [])
        broken = metrics.model_copy(update={"matched_count": 1, "variants_detected": 1})
        result = validate_metrics(broken)

        assert not result.valid
        assert any("Matched (1) + Unmatched (0) != Candidates (0)" in e for e in result.errors)

    def test_candidates_exceed_total(self):
        metrics = aggregate_metrics([], [], [], [])
        broken = metrics.model_copy(update={"candidate_count": 2, "unmatched_count": 2})
        result = validate_metrics(broken)

        assert any("Candidates (2) > Total records (0)" in e for e in result.errors)

    def test_quality_out_of_range(self):
        metrics = aggregate_metrics([], [], [], [])
        result = validate_metrics(metrics.model_copy(update={"average_quality": -3.0}))
        assert any("Average quality" in e for e in result.errors)

    def test_completeness_mismatch(self, make_matched):
        matched = make_matched("rs3892097")
        metrics = aggregate_metrics([matched.record], [matched.record], [matched], [])
        result = validate_metrics(metrics.model_copy(update={"annotation_completeness": 0.4}))
        assert any("Annotation completeness" in e for e in result.errors)

    def test_evidence_sum_mismatch(self, make_matched):
        matched = make_matched("rs3892097")
        metrics = aggregate_metrics([matched.record], [matched.record], [matched], [])
        distribution = metrics.evidence_distribution.model_copy(update={"A": 0})
        result = validate_metrics(metrics.model_copy(update={"evidence_distribution": distribution}))
        assert any("Evidence distribution sum" in e for e in result.errors)
