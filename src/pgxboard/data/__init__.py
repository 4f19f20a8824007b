"""Static reference tables consumed by the analysis pipeline."""

from pgxboard.data.drug_gene_rules import (
    DRUG_GENE_RULES,
    gene_to_drugs,
    get_alternative_drugs,
    get_cpic_reference,
    get_genes_for_drug,
    get_risk_assessment,
    supported_drugs,
)
from pgxboard.data.reference_variants import KNOWN_PGX_VARIANTS, get_variant_by_rsid, get_variants_by_gene

__all__ = [
    "KNOWN_PGX_VARIANTS",
    "get_variant_by_rsid",
    "get_variants_by_gene",
    "DRUG_GENE_RULES",
    "gene_to_drugs",
    "get_alternative_drugs",
    "get_cpic_reference",
    "get_genes_for_drug",
    "get_risk_assessment",
    "supported_drugs",
]
