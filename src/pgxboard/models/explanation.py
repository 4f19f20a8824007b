"""Narrative explanation models."""

from pydantic import BaseModel, Field


class Narrative(BaseModel):
    """Four-section clinical explanation for one drug/gene result."""

    summary: str = ""
    biological_mechanism: str = ""
    variant_interpretation: str = ""
    clinical_impact: str = ""

    def full_text(self) -> str:
        """All non-empty sections joined into one text."""
        sections = [
            self.summary,
            self.biological_mechanism,
            self.variant_interpretation,
            self.clinical_impact,
        ]
        return " ".join(s for s in sections if s)


class NarrativeResult(BaseModel):
    """A narrative plus how it was produced."""

    narrative: Narrative
    used_fallback: bool = False
    succeeded: bool = True
    attempts: int = 0


class CitationReport(BaseModel):
    """Which detected variants a narrative cites."""

    all_rsids_cited: bool = True
    all_star_alleles_cited: bool = True
    all_genes_cited: bool = True
    citation_completeness: float = Field(1.0, ge=0.0, le=1.0)
    missing_citations: list[str] = Field(default_factory=list)
