"""Variant record data models."""

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field

InfoValue = str | bool


class VariantRecord(BaseModel):
    """One data line of a VCF file.

    The INFO column is kept as an ordered map. A key that appeared without
    ``=`` is stored with the value ``True``. The four derived tags are
    resolved from the map through their aliases at parse time.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "chromosome": "22",
                "position": 42130692,
                "identifier": "rs3892097",
                "ref": "C",
                "alt": "T",
                "quality": 35.2,
                "filter": "PASS",
                "info": {"GENE": "CYP2D6", "STAR": "*4", "RS": "rs3892097", "CPIC": "A"},
                "genotype": "0/1",
            }
        },
    )

    chromosome: str
    position: int = Field(..., ge=0)
    identifier: str = Field("", description="ID column; empty when the file had '.'")
    ref: str
    alt: str = Field(..., description="ALT column, comma separated when multi-allelic")
    quality: float = Field(0.0, description="QUAL column; 0.0 when the file had '.'")
    filter: str = "."
    info: dict[str, InfoValue] = Field(default_factory=dict)
    genotype: str | None = None

    # Derived INFO tags
    gene: str | None = None
    star_allele: str | None = None
    rs_identifier: str | None = None
    evidence_level: str | None = None

    @property
    def alt_alleles(self) -> list[str]:
        """ALT alleles as a list."""
        return self.alt.split(",")

    @property
    def locus(self) -> str:
        return f"{self.chromosome}:{self.position}"


class ParseResult(NamedTuple):
    """Records parsed from a VCF plus the number of skipped malformed lines."""

    records: list[VariantRecord]
    parse_errors: int


class VCFValidation(BaseModel):
    """Outcome of structural VCF validation."""

    valid: bool
    error: str | None = None


class RoundTripResult(BaseModel):
    """Outcome of a parse → serialize → parse comparison."""

    success: bool = True
    original_variant_count: int = 0
    round_trip_variant_count: int = 0
    info_tags_preserved: bool = True
    quality_scores_preserved: bool = True
    errors: list[str] = Field(default_factory=list)
