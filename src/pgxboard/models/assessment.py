"""Drug risk assessment models."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from pgxboard.models.claims import Contradiction
from pgxboard.models.explanation import Narrative
from pgxboard.models.genotype import Phenotype
from pgxboard.models.matching import MatchedVariant
from pgxboard.models.metrics import PipelineMetrics


class RiskLabel(str, Enum):
    """Drug response risk category from the CPIC rule table."""

    SAFE = "Safe"
    ADJUST_DOSAGE = "Adjust Dosage"
    TOXIC = "Toxic"
    INEFFECTIVE = "Ineffective"
    UNKNOWN = "Unknown"


class RiskSeverity(str, Enum):
    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class RiskAssessment(BaseModel):
    risk_label: RiskLabel
    severity: RiskSeverity
    confidence_score: float = Field(..., ge=0.0, le=1.0, description="Confidence in the assessment (0-1)")


class ClinicalRecommendation(BaseModel):
    cpic_guideline_reference: str
    recommended_action: str
    alternative_drugs: list[str] = Field(default_factory=list)


class PharmacogenomicProfile(BaseModel):
    primary_gene: str
    diplotype: str
    phenotype: Phenotype
    detected_variants: list[MatchedVariant] = Field(default_factory=list)


class DrugAssessment(BaseModel):
    """Complete pharmacogenomic assessment of one drug for one patient."""

    patient_id: str
    drug: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    risk_assessment: RiskAssessment
    pharmacogenomic_profile: PharmacogenomicProfile
    clinical_recommendation: ClinicalRecommendation
    explanation: Narrative
    explanation_used_fallback: bool = False
    contradictions: list[Contradiction] = Field(default_factory=list)
    quality_metrics: PipelineMetrics

    def to_report(self) -> str:
        """Simple report output."""
        profile = self.pharmacogenomic_profile
        risk = self.risk_assessment
        report = f"\nPatient: {self.patient_id} | Drug: {self.drug}\n"
        report += (
            f"Gene: {profile.primary_gene} | Diplotype: {profile.diplotype} | "
            f"Phenotype: {profile.phenotype.value}\n"
        )
        report += (
            f"Risk: {risk.risk_label.value} | Severity: {risk.severity.value} | "
            f"Confidence: {risk.confidence_score:.1%}\n"
        )

        if profile.detected_variants:
            variants = [
                f"{v.rsid} ({v.star_allele}, {v.functional_status.value}, level {v.evidence_level.value})"
                for v in profile.detected_variants
            ]
            report += f"Variants: {' | '.join(variants)}\n"

        report += f"Recommendation: {self.clinical_recommendation.recommended_action}\n"
        report += f"Guideline: {self.clinical_recommendation.cpic_guideline_reference}\n"

        if self.clinical_recommendation.alternative_drugs:
            report += f"Alternatives: {', '.join(self.clinical_recommendation.alternative_drugs)}\n"

        if self.contradictions:
            report += f"Contradictions replaced: {len(self.contradictions)}\n"

        report += f"\n{self.explanation.summary}\n"
        return report
