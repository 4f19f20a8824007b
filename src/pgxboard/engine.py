"""Core analysis engine for pharmacogenomic drug risk.

ARCHITECTURE:
    VCF text → Validate → Parse → Round trip → Detect (filter + match) → per drug:
        GeneCall → Risk rule → Confidence → Narrative (LLM | fallback) → Contradiction check → Metrics

Key Design:
- Parsing, matching and scoring are pure functions over immutable inputs
- Only narrative generation awaits I/O; drugs run concurrently (asyncio.gather)
- Per-drug exceptions are captured, not raised; the run fails only when no drug succeeds
- An LLM narrative with contradictions is replaced by the template narrative
"""

import asyncio
import logging

from pgxboard.analysis.confidence import calculate_confidence
from pgxboard.analysis.contradictions import detect_contradictions
from pgxboard.analysis.genotype import infer_gene_call
from pgxboard.analysis.metrics import aggregate_metrics
from pgxboard.data.drug_gene_rules import (
    gene_to_drugs,
    get_alternative_drugs,
    get_cpic_reference,
    get_genes_for_drug,
    get_risk_assessment,
)
from pgxboard.data.reference_variants import KNOWN_PGX_VARIANTS
from pgxboard.llm.fallback import build_fallback_narrative
from pgxboard.llm.service import NarrativeService
from pgxboard.matching.matcher import ReferenceTable, detect_pharmacogenomic_variants
from pgxboard.models.assessment import (
    ClinicalRecommendation,
    DrugAssessment,
    PharmacogenomicProfile,
    RiskAssessment,
)
from pgxboard.models.claims import Contradiction
from pgxboard.models.confidence import ConfidenceInputs
from pgxboard.models.explanation import NarrativeResult
from pgxboard.models.matching import DetectionResult
from pgxboard.models.variant import VariantRecord
from pgxboard.parsers.vcf import VCFFormatError, extract_patient_id, parse_vcf, validate_round_trip
from pgxboard.utils.logging_config import get_logger
from pgxboard.utils.metrics_tracker import MetricsTracker

logger = logging.getLogger(__name__)


class AnalysisError(RuntimeError):
    """Raised when none of the requested drugs could be analysed."""


class UnsupportedDrugError(ValueError):
    """Raised when a drug has no gene rule."""


class AnalysisEngine:
    """
    Engine for pharmacogenomic analysis of one VCF against a list of drugs.

    The reference table is shared read-only across analyses; the metrics
    tracker accumulates across every call to ``analyze``.
    """

    def __init__(
        self,
        llm_model: str = "gpt-4o-mini",
        llm_temperature: float = 0.1,
        enable_logging: bool = True,
        enable_llm: bool = True,
        reference_table: ReferenceTable = KNOWN_PGX_VARIANTS,
    ):
        self.enable_llm = enable_llm
        self.enable_logging = enable_logging
        self.reference_table = reference_table
        self.narrative_service = (
            NarrativeService(model=llm_model, temperature=llm_temperature, enable_logging=enable_logging)
            if enable_llm
            else None
        )
        self.tracker = MetricsTracker()

    async def analyze(
        self, vcf_text: str, drugs: list[str], patient_id: str | None = None
    ) -> list[DrugAssessment]:
        """Analyse a VCF for each requested drug.

        Returns:
            One DrugAssessment per analysable drug, in request order

        Raises:
            VCFFormatError: If the VCF is missing its mandatory headers
            AnalysisError: If no requested drug could be analysed
        """
        started_at = self.tracker.start_analysis()

        try:
            parsed = parse_vcf(vcf_text)
        except VCFFormatError:
            self.tracker.track_parsing(False)
            raise
        self.tracker.track_parsing(True)

        round_trip = validate_round_trip(vcf_text)
        self.tracker.track_round_trip(round_trip.success)
        if not round_trip.success:
            logger.warning(f"Round-trip validation failed: {'; '.join(round_trip.errors[:5])}")

        detection = detect_pharmacogenomic_variants(parsed.records, self.reference_table)
        self.tracker.track_matching(detection.matched_count, len(detection.unmatched))

        patient_id = patient_id or extract_patient_id(vcf_text)
        logger.info(
            f"Patient {patient_id}: {len(parsed.records)} records, {detection.candidate_count} candidates, "
            f"{detection.matched_count} matched ({detection.state.value})"
        )

        tasks = [self.analyze_drug(drug, patient_id, parsed.records, detection) for drug in drugs]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assessments = []
        for drug, result in zip(drugs, results):
            if isinstance(result, UnsupportedDrugError):
                logger.warning(f"Skipping {drug}: {result}")
            elif isinstance(result, Exception):
                logger.error(f"Failed to analyze {drug}: {result}")
            else:
                assessments.append(result)

        self.tracker.end_analysis(started_at)

        if not assessments:
            raise AnalysisError(f"Failed to analyze any of the requested drugs: {', '.join(drugs)}")

        self.tracker.log_summary()
        return assessments

    async def analyze_drug(
        self,
        drug: str,
        patient_id: str,
        records: list[VariantRecord],
        detection: DetectionResult,
    ) -> DrugAssessment:
        """Assess one drug against an already detected VCF.

        Raises:
            UnsupportedDrugError: If the drug has no gene rule
        """
        drug = drug.strip().upper()
        genes = get_genes_for_drug(drug)
        if not genes:
            raise UnsupportedDrugError(f"No pharmacogenomic rule for drug: {drug}")

        primary_gene = genes[0]
        gene_variants = [v for v in detection.matched if v.gene == primary_gene]
        gene_call = infer_gene_call(primary_gene, gene_variants)
        outcome = get_risk_assessment(drug, primary_gene, gene_call.phenotype)

        confidence = calculate_confidence(
            ConfidenceInputs(
                qualities=[v.quality for v in gene_variants],
                completeness=(
                    detection.matched_count / detection.candidate_count if detection.candidate_count else 0.0
                ),
                evidence_levels=[v.evidence_level for v in gene_variants],
                variant_count=len(gene_variants),
            )
        )
        self.tracker.track_confidence(confidence)

        narrative_result = await self._generate_narrative(
            drug, primary_gene, gene_call.diplotype, gene_call.phenotype, gene_variants, outcome.recommendation
        )
        narrative = narrative_result.narrative
        used_fallback = narrative_result.used_fallback

        # The template narrative is derived from the detected variants, only LLM text is checked
        contradictions: list[Contradiction] = []
        if not used_fallback:
            try:
                report = detect_contradictions(narrative, gene_variants)
                contradictions = report.contradictions
                self.tracker.track_contradiction_check(len(contradictions))
            except Exception as e:
                logger.error(f"Contradiction detection failed for {drug}, keeping narrative unchecked: {e}")

        if contradictions:
            logger.warning(f"{len(contradictions)} contradictions in {drug} narrative, using template narrative")
            narrative = build_fallback_narrative(drug, primary_gene, gene_call.phenotype, gene_variants)
            used_fallback = True
            if self.enable_logging:
                get_logger().log_fallback(drug, primary_gene, f"{len(contradictions)} contradictions detected")

        self.tracker.track_narrative(used_fallback)

        metrics = aggregate_metrics(
            records,
            detection.candidates,
            detection.matched,
            detection.unmatched,
            detection.state,
            gene_to_drugs(),
        )

        if self.enable_logging:
            get_logger().log_decision_summary(
                drug=drug,
                gene=primary_gene,
                diplotype=gene_call.diplotype,
                phenotype=gene_call.phenotype.value,
                risk_label=outcome.risk_label.value,
                confidence_score=confidence,
                variants=[f"{v.rsid} {v.star_allele} ({v.functional_status.value})" for v in gene_variants],
                recommendation=outcome.recommendation,
            )

        return DrugAssessment(
            patient_id=patient_id,
            drug=drug,
            risk_assessment=RiskAssessment(
                risk_label=outcome.risk_label,
                severity=outcome.severity,
                confidence_score=confidence,
            ),
            pharmacogenomic_profile=PharmacogenomicProfile(
                primary_gene=primary_gene,
                diplotype=gene_call.diplotype,
                phenotype=gene_call.phenotype,
                detected_variants=gene_variants,
            ),
            clinical_recommendation=ClinicalRecommendation(
                cpic_guideline_reference=get_cpic_reference(drug, primary_gene),
                recommended_action=outcome.recommendation,
                alternative_drugs=get_alternative_drugs(drug),
            ),
            explanation=narrative,
            explanation_used_fallback=used_fallback,
            contradictions=contradictions,
            quality_metrics=metrics,
        )

    async def _generate_narrative(self, drug, gene, diplotype, phenotype, variants, recommendation) -> NarrativeResult:
        if self.narrative_service is None:
            return NarrativeResult(
                narrative=build_fallback_narrative(drug, gene, phenotype, variants),
                used_fallback=True,
                succeeded=False,
                attempts=0,
            )

        result = await self.narrative_service.generate(drug, gene, diplotype, phenotype, variants, recommendation)
        self.tracker.track_llm_call(result.succeeded)
        return result
