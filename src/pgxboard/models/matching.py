"""Variant matching and detection models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from pgxboard.models.reference import EvidenceLevel, FunctionalStatus, ReferenceEntry
from pgxboard.models.variant import VariantRecord


class MatchStrategy(str, Enum):
    """Which matching strategy linked a record to a reference entry."""

    RSID = "rsid"
    POSITION = "position"
    STAR_ALLELE = "star_allele"
    PROXIMITY = "proximity"


class DetectionState(str, Enum):
    """How detection went for one input file.

    NO_VARIANTS: the file had no data records
    NO_PGX_VARIANTS: records exist but none belong to the gene panel
    NONE_MATCHED: candidates exist but no reference entry matched
    SOME_MATCHED: some candidates matched
    ALL_MATCHED: every candidate matched
    """

    NO_VARIANTS = "no_variants_in_vcf"
    NO_PGX_VARIANTS = "no_pgx_variants_detected"
    NONE_MATCHED = "pgx_variants_found_none_matched"
    SOME_MATCHED = "pgx_variants_found_some_matched"
    ALL_MATCHED = "pgx_variants_found_all_matched"


class MatchResult(BaseModel):
    """Result of matching a single record against the reference table."""

    reference: ReferenceEntry | None = None
    strategy: MatchStrategy | None = None
    confidence: float = Field(0.0, ge=0.0, le=1.0)

    @property
    def matched(self) -> bool:
        return self.reference is not None and self.strategy is not None


class MatchedVariant(BaseModel):
    """A parsed record enriched with the reference entry it matched.

    Provenance (strategy and weight) is mandatory; unmatched records are
    never promoted to this type.
    """

    model_config = ConfigDict(frozen=True)

    record: VariantRecord
    reference: ReferenceEntry
    matched_by: MatchStrategy
    match_confidence: float = Field(..., ge=0.0, le=1.0)

    @property
    def rsid(self) -> str:
        return self.record.identifier or self.reference.rsid

    @property
    def gene(self) -> str:
        return self.reference.gene

    @property
    def star_allele(self) -> str:
        return self.reference.star_allele

    @property
    def functional_status(self) -> FunctionalStatus:
        return self.reference.functional_status

    @property
    def evidence_level(self) -> EvidenceLevel:
        return self.reference.evidence_level

    @property
    def clinical_significance(self) -> str:
        return self.reference.clinical_significance

    @property
    def genotype(self) -> str | None:
        return self.record.genotype

    @property
    def quality(self) -> float:
        return self.record.quality

    def to_summary(self) -> dict:
        """Flat view used in reports and JSON output."""
        return {
            "rsid": self.rsid,
            "chromosome": self.record.chromosome,
            "position": self.record.position,
            "ref": self.record.ref,
            "alt": self.record.alt,
            "genotype": self.genotype,
            "quality": self.quality,
            "gene": self.gene,
            "star_allele": self.star_allele,
            "functional_status": self.functional_status.value,
            "evidence_level": self.evidence_level.value,
            "clinical_significance": self.clinical_significance,
            "matched_by": self.matched_by.value,
            "match_confidence": self.match_confidence,
        }


class DetectionResult(BaseModel):
    """Matched and unmatched candidates for one input file."""

    matched: list[MatchedVariant] = Field(default_factory=list)
    unmatched: list[VariantRecord] = Field(default_factory=list)
    total_records: int = 0
    candidate_count: int = 0
    state: DetectionState = DetectionState.NO_VARIANTS

    @property
    def matched_count(self) -> int:
        return len(self.matched)

    @property
    def candidates(self) -> list[VariantRecord]:
        """Every candidate record, matched first then unmatched."""
        return [m.record for m in self.matched] + list(self.unmatched)
