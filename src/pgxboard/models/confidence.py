"""Confidence scoring input model."""

from pydantic import BaseModel, Field

from pgxboard.models.reference import EvidenceLevel


class ConfidenceInputs(BaseModel):
    """Signals combined into one analysis confidence score."""

    qualities: list[float] = Field(default_factory=list, description="PHRED quality scores of detected variants")
    completeness: float = Field(0.0, description="Fraction of candidates matched to the reference table")
    evidence_levels: list[EvidenceLevel] = Field(default_factory=list)
    variant_count: int = Field(0, ge=0)
