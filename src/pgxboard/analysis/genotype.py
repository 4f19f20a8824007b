"""Diplotype and phenotype inference from matched variants.

Allele copies are counted from each variant's GT field, the diplotype is
built from the resulting allele set and the phenotype follows from the
summed activity of its two alleles:

    0 -> PM, (0, 1] -> IM, (1, 2] -> NM, (2, 2.5] -> RM, > 2.5 -> URM
"""

import logging
import re

from pgxboard.constants import ACTIVITY_WEIGHTS, WILD_TYPE_ALLELE, WILD_TYPE_DIPLOTYPE
from pgxboard.models.genotype import GeneCall, Phenotype
from pgxboard.models.matching import MatchedVariant

logger = logging.getLogger(__name__)

GENOTYPE_SEPARATOR = re.compile(r"[/|]")


def count_alternate_copies(genotype: str | None) -> int:
    """Number of non-reference slots among the first two GT slots.

    A missing genotype counts as homozygous reference. Any allele index
    other than 0 is non-reference; no-calls (``.``) are not counted.
    """
    slots = GENOTYPE_SEPARATOR.split(genotype or "0/0")[:2]
    return sum(1 for slot in slots if slot.isdigit() and int(slot) != 0)


def count_alleles(variants: list[MatchedVariant]) -> dict[str, int]:
    """Copy count per star allele, in first-seen order."""
    counts: dict[str, int] = {}
    for variant in variants:
        allele = variant.star_allele or WILD_TYPE_ALLELE
        copies = count_alternate_copies(variant.genotype)
        if copies:
            counts[allele] = counts.get(allele, 0) + copies
    return counts


def build_diplotype(counts: dict[str, int], warnings: list[str]) -> str:
    """Diplotype string from allele copy counts. Appends to ``warnings``."""
    if not counts:
        warnings.append("No non-reference alleles in variant genotypes; assuming wild-type")
        return WILD_TYPE_DIPLOTYPE

    if len(counts) == 1:
        allele, count = next(iter(counts.items()))
        return f"{allele}/{allele}" if count >= 2 else f"{WILD_TYPE_ALLELE}/{allele}"

    if len(counts) == 2:
        first, second = sorted(counts)
        return f"{first}/{second}"

    top_two = sorted(sorted(counts, key=lambda a: -counts[a])[:2])
    warnings.append(
        f"{len(counts)} distinct alleles without phasing ({', '.join(counts)}); "
        f"using the two most frequent: {top_two[0]}/{top_two[1]}"
    )
    return f"{top_two[0]}/{top_two[1]}"


def allele_activity(allele: str, variants: list[MatchedVariant]) -> float:
    """Activity weight of one allele; wild-type and unknown alleles count as normal."""
    if allele == WILD_TYPE_ALLELE:
        return ACTIVITY_WEIGHTS["normal"]
    for variant in variants:
        if variant.star_allele == allele:
            return ACTIVITY_WEIGHTS.get(variant.functional_status.value, ACTIVITY_WEIGHTS["normal"])
    return ACTIVITY_WEIGHTS["normal"]


def phenotype_from_activity(score: float) -> Phenotype:
    if score == 0:
        return Phenotype.PM
    if score <= 1:
        return Phenotype.IM
    if score <= 2:
        return Phenotype.NM
    if score <= 2.5:
        return Phenotype.RM
    return Phenotype.URM


def infer_gene_call(gene: str, variants: list[MatchedVariant]) -> GeneCall:
    """Call the diplotype and phenotype of ``gene``.

    Args:
        gene: Gene symbol
        variants: Matched variants; those of other genes are ignored

    Returns:
        GeneCall. With no variants for the gene, the wild-type diplotype and
        a normal metabolizer phenotype.
    """
    gene_variants = [v for v in variants if v.gene == gene]

    if not gene_variants:
        logger.info(f"{gene}: no matched variants, assuming {WILD_TYPE_DIPLOTYPE}")
        return GeneCall(
            gene=gene,
            diplotype=WILD_TYPE_DIPLOTYPE,
            phenotype=Phenotype.NM,
            activity_score=2 * ACTIVITY_WEIGHTS["normal"],
        )

    warnings: list[str] = []
    counts = count_alleles(gene_variants)
    diplotype = build_diplotype(counts, warnings)
    for warning in warnings:
        logger.warning(f"{gene}: {warning}")

    score = sum(allele_activity(allele, gene_variants) for allele in diplotype.split("/"))
    phenotype = phenotype_from_activity(score)

    star_alleles: list[str] = []
    for variant in gene_variants:
        if variant.star_allele not in star_alleles:
            star_alleles.append(variant.star_allele)

    logger.info(f"{gene}: diplotype={diplotype} activity={score} phenotype={phenotype.value}")
    return GeneCall(
        gene=gene,
        diplotype=diplotype,
        phenotype=phenotype,
        activity_score=score,
        star_alleles=star_alleles,
        warnings=warnings,
    )
