"""Biological claim and contradiction models."""

from enum import Enum

from pydantic import BaseModel, Field


class ClaimType(str, Enum):
    ENZYME_ACTIVITY = "enzyme_activity"
    DRUG_EFFICACY = "drug_efficacy"


class EffectDirection(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    ELIMINATE = "eliminate"
    UNKNOWN = "unknown"


class ContradictionType(str, Enum):
    ENZYME_ACTIVITY_MISMATCH = "enzyme_activity_mismatch"
    INTERNAL_CONTRADICTION = "internal_contradiction"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BiologicalClaim(BaseModel):
    """A directional statement extracted from one sentence of narrative text."""

    type: ClaimType
    subject: str = Field(..., description="Gene symbol, 'enzyme', or '<drug> efficacy'")
    direction: EffectDirection
    sentence: str
    variant_mentioned: str | None = Field(None, description="rs identifier or star allele named in the sentence")


class Contradiction(BaseModel):
    """A claim that conflicts with known function or with another claim."""

    type: ContradictionType
    severity: Severity
    description: str
    conflicting_statements: list[str] = Field(default_factory=list)
    affected_variant: str | None = None


class ContradictionReport(BaseModel):
    """All contradictions found in one narrative."""

    contradictions: list[Contradiction] = Field(default_factory=list)
    claims_analyzed: int = 0

    @property
    def has_contradictions(self) -> bool:
        return bool(self.contradictions)
