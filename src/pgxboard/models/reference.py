"""Reference (known variant) models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FunctionalStatus(str, Enum):
    """Functional consequence of a star allele on the gene product."""

    NORMAL = "normal"
    DECREASED = "decreased"
    INCREASED = "increased"
    NO_FUNCTION = "no_function"


class EvidenceLevel(str, Enum):
    """CPIC evidence tiers.

    A: High evidence
    B: Moderate evidence
    C: Low evidence
    D: Minimal evidence
    """

    A = "A"
    B = "B"
    C = "C"
    D = "D"


class ReferenceEntry(BaseModel):
    """A curated pharmacogenomic variant from the known-variant table."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "rsid": "rs3892097",
                "gene": "CYP2D6",
                "star_allele": "*4",
                "chromosome": "22",
                "position": 42130692,
                "ref": "C",
                "alt": "T",
                "functional_status": "no_function",
                "evidence_level": "A",
            }
        },
    )

    rsid: str = Field(..., description="dbSNP rs identifier")
    gene: str = Field(..., description="Gene symbol (e.g., CYP2D6)")
    star_allele: str = Field(..., description="Star allele designation (e.g., *4)")
    chromosome: str
    position: int = Field(..., ge=0)
    ref: str
    alt: str
    functional_status: FunctionalStatus
    evidence_level: EvidenceLevel
    clinical_significance: str = ""
    cpic_guideline: str | None = None
    drugs_affected: tuple[str, ...] = Field(default_factory=tuple)
