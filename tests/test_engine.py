"""Tests for the analysis engine."""

import asyncio

import pytest
from unittest.mock import AsyncMock, patch

from pgxboard.engine import AnalysisEngine, AnalysisError
from pgxboard.models.assessment import RiskLabel, RiskSeverity
from pgxboard.models.genotype import Phenotype
from pgxboard.models.matching import DetectionState
from pgxboard.models.metrics import NOT_APPLICABLE
from pgxboard.parsers.vcf import VCFFormatError
from pgxboard.utils.metrics_tracker import MetricsTracker

CLEAN_RESPONSE = """**Summary**: The patient carries rs3892097 (*4) in CYP2D6.

**Biological Mechanism**: CYP2D6 converts codeine to morphine.

**Variant Interpretation**: The *4 allele is a no function allele.

**Clinical Impact**: Consider alternative analgesics."""

CONTRADICTING_RESPONSE = """**Summary**: rs3892097 increases CYP2D6 enzyme activity.

**Biological Mechanism**: CYP2D6 converts codeine to morphine.

**Variant Interpretation**: The *4 allele is common.

**Clinical Impact**: Standard dosing."""


class TestAnalysisEngine:
    """Tests for AnalysisEngine without the LLM."""

    @pytest.mark.asyncio
    async def test_analyze_codeine(self, offline_engine, sample_vcf):
        """Test a heterozygous *4 carrier assessed for codeine."""
        assessments = await offline_engine.analyze(sample_vcf, ["codeine"])

        assert len(assessments) == 1
        assessment = assessments[0]
        assert assessment.patient_id == "PATIENT_001"
        assert assessment.drug == "CODEINE"

        profile = assessment.pharmacogenomic_profile
        assert profile.primary_gene == "CYP2D6"
        assert profile.diplotype == "*1/*4"
        assert profile.phenotype == Phenotype.IM
        assert [v.rsid for v in profile.detected_variants] == ["rs3892097"]

        assert assessment.risk_assessment.risk_label == RiskLabel.ADJUST_DOSAGE
        assert assessment.risk_assessment.severity == RiskSeverity.MODERATE
        assert 0.0 < assessment.risk_assessment.confidence_score <= 1.0
        assert assessment.clinical_recommendation.cpic_guideline_reference
        assert "Morphine" in assessment.clinical_recommendation.alternative_drugs

        assert assessment.explanation_used_fallback
        assert assessment.contradictions == []
        assert "rs3892097" in assessment.explanation.variant_interpretation

        metrics = assessment.quality_metrics
        assert metrics.total_records == 3
        assert metrics.candidate_count == 2
        assert metrics.detection_state == DetectionState.ALL_MATCHED

    @pytest.mark.asyncio
    async def test_request_order_and_unsupported_drug(self, offline_engine, sample_vcf):
        assessments = await offline_engine.analyze(sample_vcf, ["clopidogrel", "ASPIRIN", "codeine"])

        assert [a.drug for a in assessments] == ["CLOPIDOGREL", "CODEINE"]
        clopidogrel = assessments[0]
        assert clopidogrel.pharmacogenomic_profile.diplotype == "*2/*2"
        assert clopidogrel.pharmacogenomic_profile.phenotype == Phenotype.PM
        assert clopidogrel.risk_assessment.risk_label == RiskLabel.INEFFECTIVE

    @pytest.mark.asyncio
    async def test_no_supported_drug_raises(self, offline_engine, sample_vcf):
        with pytest.raises(AnalysisError):
            await offline_engine.analyze(sample_vcf, ["ASPIRIN"])

    @pytest.mark.asyncio
    async def test_invalid_vcf_raises(self, offline_engine):
        with pytest.raises(VCFFormatError):
            await offline_engine.analyze("#CHROM\tPOS\n", ["CODEINE"])

        assert offline_engine.tracker.parsing_attempts == 1
        assert offline_engine.tracker.parsing_successes == 0

    @pytest.mark.asyncio
    async def test_empty_vcf(self, offline_engine, empty_vcf):
        """Test that a file without records is wild-type with N/A completeness."""
        assessment = (await offline_engine.analyze(empty_vcf, ["CODEINE"], patient_id="P-42"))[0]

        assert assessment.patient_id == "P-42"
        assert assessment.pharmacogenomic_profile.diplotype == "*1/*1"
        assert assessment.risk_assessment.risk_label == RiskLabel.SAFE
        assert assessment.risk_assessment.confidence_score == pytest.approx(0.0625)
        assert assessment.quality_metrics.annotation_completeness == NOT_APPLICABLE
        assert assessment.quality_metrics.detection_state == DetectionState.NO_VARIANTS

    @pytest.mark.asyncio
    async def test_tracker_accumulates(self, offline_engine, sample_vcf):
        await offline_engine.analyze(sample_vcf, ["CODEINE"])
        await offline_engine.analyze(sample_vcf, ["CODEINE", "CLOPIDOGREL"])

        summary = offline_engine.tracker.summary()
        assert summary.total_analyses == 2
        assert summary.vcf_parsing_success_rate == 1.0
        assert summary.round_trip_success_rate == 1.0
        assert summary.variant_matching_rate == 1.0
        assert summary.fallback_usage_rate == 1.0
        assert offline_engine.tracker.confidence_count == 3
        assert summary.average_analysis_seconds > 0.0

    @pytest.mark.asyncio
    async def test_tracker_counts_concurrent_analyses(self, offline_engine, sample_vcf, empty_vcf):
        """Test that overlapping analyses on one engine are each counted."""
        await asyncio.gather(
            offline_engine.analyze(sample_vcf, ["CODEINE"]),
            offline_engine.analyze(empty_vcf, ["CODEINE"]),
            offline_engine.analyze(sample_vcf, ["CLOPIDOGREL"]),
        )

        summary = offline_engine.tracker.summary()
        assert summary.total_analyses == 3
        assert offline_engine.tracker.confidence_count == 3


class TestMetricsTracker:
    """Tests for MetricsTracker."""

    def test_interleaved_start_and_end(self):
        tracker = MetricsTracker()
        first = tracker.start_analysis()
        second = tracker.start_analysis()
        tracker.end_analysis(first)
        tracker.end_analysis(second)

        summary = tracker.summary()
        assert summary.total_analyses == 2
        assert summary.average_analysis_seconds >= 0.0

    def test_running_averages(self):
        tracker = MetricsTracker()
        for score in (0.2, 0.4, 0.9):
            tracker.track_confidence(score)

        assert tracker.summary().average_confidence == pytest.approx(0.5)

    def test_empty_summary(self):
        summary = MetricsTracker().summary()
        assert summary.total_analyses == 0
        assert summary.average_confidence == 0.0
        assert summary.average_analysis_seconds == 0.0


class TestAnalysisEngineWithLLM:
    """Tests for AnalysisEngine with a mocked LLM."""

    @pytest.mark.asyncio
    async def test_llm_narrative_kept(self, sample_vcf, llm_response):
        engine = AnalysisEngine(enable_logging=False)

        with patch("pgxboard.llm.service.acompletion", new_callable=AsyncMock) as mock_call:
            mock_call.return_value = llm_response(CLEAN_RESPONSE)
            assessment = (await engine.analyze(sample_vcf, ["CODEINE"]))[0]

        assert not assessment.explanation_used_fallback
        assert assessment.contradictions == []
        assert assessment.explanation.biological_mechanism == "CYP2D6 converts codeine to morphine."
        assert engine.tracker.summary().llm_success_rate == 1.0

    @pytest.mark.asyncio
    async def test_contradicting_narrative_replaced(self, sample_vcf, llm_response):
        """Test that a narrative contradicting the variant function falls back to the template."""
        engine = AnalysisEngine(enable_logging=False)

        with patch("pgxboard.llm.service.acompletion", new_callable=AsyncMock) as mock_call:
            mock_call.return_value = llm_response(CONTRADICTING_RESPONSE)
            assessment = (await engine.analyze(sample_vcf, ["CODEINE"]))[0]

        assert assessment.explanation_used_fallback
        assert len(assessment.contradictions) == 1
        assert assessment.contradictions[0].affected_variant == "rs3892097"
        assert "increases" not in assessment.explanation.summary
        assert engine.tracker.summary().contradiction_rate == 1.0

    @pytest.mark.asyncio
    async def test_contradiction_check_failure_keeps_narrative(self, sample_vcf, llm_response):
        engine = AnalysisEngine(enable_logging=False)

        with patch("pgxboard.llm.service.acompletion", new_callable=AsyncMock) as mock_call, patch(
            "pgxboard.engine.detect_contradictions", side_effect=RuntimeError("boom")
        ):
            mock_call.return_value = llm_response(CONTRADICTING_RESPONSE)
            assessment = (await engine.analyze(sample_vcf, ["CODEINE"]))[0]

        assert not assessment.explanation_used_fallback
        assert assessment.contradictions == []
