"""
Prompts for pharmacogenomic clinical narratives.
The model is asked for four bold-headed sections that the service parses back.
"""

from pgxboard.models.genotype import Phenotype
from pgxboard.models.matching import MatchedVariant

NARRATIVE_SYSTEM_PROMPT = """You are a clinical pharmacogenomics expert writing explanations for CPIC-guided drug prescribing.

CORE PRINCIPLES:

1. **Cite every detected variant**
   - Name each variant by rsID and STAR allele
   - Never mention variants that are not listed in the case

2. **Stay consistent with the functional data**
   - A no_function allele never increases enzyme activity
   - A decreased function allele never increases enzyme activity
   - An increased function allele never decreases or eliminates enzyme activity
   - Never describe the same variant or enzyme with opposing effects

3. **Follow the phenotype and recommendation provided**
   - The phenotype and CPIC recommendation are already decided
   - Explain them, do not revise them

RESPONSE FORMAT:
Use exactly these four section headers in **bold** markdown, in this order:

**Summary**
**Biological Mechanism**
**Variant Interpretation**
**Clinical Impact**
"""

NARRATIVE_USER_PROMPT = """Generate a clinical pharmacogenomics explanation for the following case:

**Drug:** {drug}
**Gene:** {gene}
**Diplotype:** {diplotype}
**Phenotype:** {phenotype}
**Detected Variants:**
  - {variant_citations}
**Clinical Recommendation:** {recommendation}

Sections:

1. **Summary** (2-3 sentences): Overview of the finding and its clinical significance.
   - Mention the {phenotype} phenotype
   - Reference key variants by rsID or STAR allele

2. **Biological Mechanism** (3-4 sentences): How {gene} affects {drug} metabolism or transport.
   - Explain how the detected variants alter this mechanism

3. **Variant Interpretation** (2-3 sentences): The specific variants detected.
   - Cite each variant: {variant_list}
   - Describe their functional impact ({statuses})

4. **Clinical Impact** (2-3 sentences): Practical implications for patient care.
   - Expected drug response and why the recommendation is appropriate
"""


def format_variant_citation(variant: MatchedVariant) -> str:
    return (
        f"rsID: {variant.rsid}, STAR allele: {variant.star_allele}, Gene: {variant.gene}, "
        f"Evidence Level: {variant.evidence_level.value}, Functional Status: {variant.functional_status.value}"
    )


def create_narrative_prompt(
    drug: str,
    gene: str,
    diplotype: str,
    phenotype: Phenotype,
    variants: list[MatchedVariant],
    recommendation: str,
) -> list[dict]:
    """
    Returns a message list for litellm with system + user roles.
    """
    citations = "\n  - ".join(format_variant_citation(v) for v in variants) or "None"
    variant_list = ", ".join(f"{v.rsid} ({v.star_allele})" for v in variants) or "none"
    statuses = ", ".join(v.functional_status.value for v in variants) or "none"

    user_content = NARRATIVE_USER_PROMPT.format(
        drug=drug,
        gene=gene,
        diplotype=diplotype,
        phenotype=phenotype.value,
        variant_citations=citations,
        recommendation=recommendation.strip(),
        variant_list=variant_list,
        statuses=statuses,
    )

    return [
        {"role": "system", "content": NARRATIVE_SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]
