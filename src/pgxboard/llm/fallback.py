"""Template narratives and citation checks.

The template narrative is used whenever the LLM is disabled, fails after
retries, or produces text with contradictions. It is built only from the
matched variants and the phenotype, so it never cites anything that was not
detected.
"""

from pgxboard.constants import PHENOTYPE_DESCRIPTIONS
from pgxboard.models.explanation import CitationReport, Narrative
from pgxboard.models.genotype import Phenotype
from pgxboard.models.matching import MatchedVariant


def _cite(variant: MatchedVariant) -> str:
    parts = [p for p in (variant.rsid, variant.star_allele) if p]
    parts.append(f"in {variant.gene}")
    return " ".join(parts)


def build_fallback_narrative(
    drug: str, gene: str, phenotype: Phenotype, variants: list[MatchedVariant] | None = None
) -> Narrative:
    """Deterministic four-section narrative for a drug/gene result."""
    variants = variants or []
    description = PHENOTYPE_DESCRIPTIONS[phenotype.value]
    is_normal = phenotype == Phenotype.NM
    is_reduced = phenotype in (Phenotype.PM, Phenotype.IM)

    statuses: list[str] = []
    for variant in variants:
        if variant.functional_status.value not in statuses:
            statuses.append(variant.functional_status.value)

    citations = ", ".join(_cite(v) for v in variants)

    summary = f"The patient is a {description} for {gene}, which affects {drug} metabolism. "
    if variants:
        summary += f"Detected variants include {citations}. "
    if is_normal:
        summary += "Standard dosing is appropriate as normal enzyme function is expected."
    else:
        summary += (
            f"Genetic variants in {gene} alter enzyme function, which may require dosage adjustments "
            "or alternative therapy."
        )

    mechanism = f"{gene} encodes an enzyme critical for {drug} metabolism. "
    if is_normal:
        mechanism += "The patient has normal enzyme activity, allowing for typical drug metabolism and response."
    else:
        mechanism += (
            "Genetic variants can reduce, eliminate, or increase enzyme activity, directly impacting drug "
            f"efficacy and safety. The {phenotype.value} phenotype indicates altered metabolic capacity "
            "compared to normal metabolizers."
        )
    if variants and statuses:
        mechanism += (
            f" The detected variants ({citations}) show {', '.join(statuses)} functional status, "
            "contributing to the observed phenotype."
        )

    if variants:
        interpretation = (
            f"The following variants were detected: {citations}. "
            f"These variants contribute to the {phenotype.value} phenotype. "
        )
        if statuses:
            interpretation += f"Functional analysis indicates {', '.join(statuses)} activity. "
        interpretation += (
            "These genetic changes affect enzyme expression, stability, or catalytic activity, "
            f"resulting in altered {drug} metabolism."
        )
    else:
        interpretation = (
            "No clinically significant variants were detected. The patient carries wild-type alleles, "
            f"resulting in normal enzyme function and the {phenotype.value} phenotype."
        )

    if is_normal:
        impact = (
            f"The {phenotype.value} phenotype indicates standard drug response is expected. "
            "No dosage adjustments are necessary based on this genetic result."
        )
    else:
        impact = f"The {phenotype.value} phenotype has significant clinical implications for {drug} therapy. "
        if is_reduced:
            impact += (
                "Reduced enzyme activity may lead to increased drug exposure and risk of adverse effects. "
                "Dose reduction or alternative therapy may be needed."
            )
        else:
            impact += (
                "Increased enzyme activity may lead to reduced drug efficacy. "
                "Higher doses or alternative therapy may be needed."
            )
    if variants:
        impact += (
            f" These recommendations are supported by CPIC evidence level "
            f"{variants[0].evidence_level.value} guidelines."
        )

    return Narrative(
        summary=summary,
        biological_mechanism=mechanism,
        variant_interpretation=interpretation,
        clinical_impact=impact,
    )


def validate_citations(narrative: Narrative, variants: list[MatchedVariant]) -> CitationReport:
    """Check that the narrative names every variant's rsID, star allele and gene."""
    text = narrative.full_text().lower()
    missing: list[str] = []
    expected = 0
    cited = 0
    flags = {}

    for label, attribute in (("rsids", "rsid"), ("star_alleles", "star_allele"), ("genes", "gene")):
        all_cited = True
        for variant in variants:
            value = getattr(variant, attribute)
            if not value:
                continue
            expected += 1
            if value.lower() in text:
                cited += 1
            else:
                all_cited = False
                missing.append(value)
        flags[label] = all_cited

    return CitationReport(
        all_rsids_cited=flags["rsids"],
        all_star_alleles_cited=flags["star_alleles"],
        all_genes_cited=flags["genes"],
        citation_completeness=cited / expected if expected else 1.0,
        missing_citations=missing,
    )
