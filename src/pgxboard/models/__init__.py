"""Data models for PGxBoard."""

from pgxboard.models.assessment import (
    ClinicalRecommendation,
    DrugAssessment,
    PharmacogenomicProfile,
    RiskAssessment,
    RiskLabel,
    RiskSeverity,
)
from pgxboard.models.claims import (
    BiologicalClaim,
    ClaimType,
    Contradiction,
    ContradictionReport,
    ContradictionType,
    EffectDirection,
    Severity,
)
from pgxboard.models.confidence import ConfidenceInputs
from pgxboard.models.explanation import CitationReport, Narrative, NarrativeResult
from pgxboard.models.genotype import GeneCall, Phenotype
from pgxboard.models.matching import (
    DetectionResult,
    DetectionState,
    MatchedVariant,
    MatchResult,
    MatchStrategy,
)
from pgxboard.models.metrics import NOT_APPLICABLE, EvidenceDistribution, MetricsValidation, PipelineMetrics
from pgxboard.models.reference import EvidenceLevel, FunctionalStatus, ReferenceEntry
from pgxboard.models.variant import ParseResult, RoundTripResult, VariantRecord, VCFValidation

__all__ = [
    "VariantRecord",
    "ParseResult",
    "RoundTripResult",
    "VCFValidation",
    "ReferenceEntry",
    "FunctionalStatus",
    "EvidenceLevel",
    "MatchStrategy",
    "MatchResult",
    "MatchedVariant",
    "DetectionResult",
    "DetectionState",
    "Phenotype",
    "GeneCall",
    "ConfidenceInputs",
    "BiologicalClaim",
    "ClaimType",
    "EffectDirection",
    "Contradiction",
    "ContradictionType",
    "ContradictionReport",
    "Severity",
    "EvidenceDistribution",
    "PipelineMetrics",
    "MetricsValidation",
    "NOT_APPLICABLE",
    "Narrative",
    "NarrativeResult",
    "CitationReport",
    "RiskLabel",
    "RiskSeverity",
    "RiskAssessment",
    "ClinicalRecommendation",
    "PharmacogenomicProfile",
    "DrugAssessment",
]
