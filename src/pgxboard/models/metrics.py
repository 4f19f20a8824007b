"""Pipeline quality metrics models."""

from typing import Literal

from pydantic import BaseModel, Field

from pgxboard.models.matching import DetectionState

NOT_APPLICABLE = "N/A"


class EvidenceDistribution(BaseModel):
    """Matched variants counted by CPIC evidence level."""

    A: int = 0
    B: int = 0
    C: int = 0
    D: int = 0
    unknown: int = 0

    @property
    def total(self) -> int:
        return self.A + self.B + self.C + self.D + self.unknown


class PipelineMetrics(BaseModel):
    """Aggregate counters for one analysis run.

    Invariants: matched + unmatched == candidates, candidates <= total.
    ``annotation_completeness`` is ``"N/A"`` when there were no candidates.
    """

    parsing_success: bool = True
    total_records: int = 0
    candidate_count: int = 0
    matched_count: int = 0
    unmatched_count: int = 0
    variants_detected: int = 0
    genes_analyzed: int = 0
    annotation_completeness: float | Literal["N/A"] = NOT_APPLICABLE
    average_quality: float = 0.0
    evidence_distribution: EvidenceDistribution = Field(default_factory=EvidenceDistribution)
    variants_by_gene: dict[str, int] = Field(default_factory=dict)
    variants_by_drug: dict[str, int] = Field(default_factory=dict)
    detection_state: DetectionState = DetectionState.NO_VARIANTS

    def to_report(self) -> str:
        completeness = (
            self.annotation_completeness
            if self.annotation_completeness == NOT_APPLICABLE
            else f"{self.annotation_completeness:.1%}"
        )
        dist = self.evidence_distribution
        return (
            f"Records: {self.total_records} | Candidates: {self.candidate_count} | "
            f"Matched: {self.matched_count} | Unmatched: {self.unmatched_count}\n"
            f"Detection: {self.detection_state.value} | Completeness: {completeness} | "
            f"Avg quality: {self.average_quality:.1f}\n"
            f"Evidence: A={dist.A} B={dist.B} C={dist.C} D={dist.D} unknown={dist.unknown}\n"
        )


class MetricsValidation(BaseModel):
    """Result of checking PipelineMetrics invariants."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
