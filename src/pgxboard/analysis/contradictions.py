"""Claim extraction and contradiction detection for narrative text.

Sentences are scanned for directional claims about enzyme activity or drug
efficacy. Two checks run over the extracted claims:

1. Enzyme activity claims are compared against the known functional status
   of the variant they refer to.
2. Claims about the same variant, or the same subject when no variant is
   named, must not point in opposite directions.

Extraction is keyword based and deliberately literal: a sentence counts as
a claim only when it names a claim topic and a direction keyword.
"""

import logging
import re

from pgxboard.constants import (
    DECREASE_KEYWORDS,
    DRUG_PATTERN,
    EFFICACY_TERMS,
    ELIMINATE_KEYWORDS,
    ENZYME_TERMS,
    GENE_PATTERN,
    INCREASE_KEYWORDS,
    RSID_PATTERN,
    STAR_ALLELE_PATTERN,
)
from pgxboard.models.claims import (
    BiologicalClaim,
    ClaimType,
    Contradiction,
    ContradictionReport,
    ContradictionType,
    EffectDirection,
    Severity,
)
from pgxboard.models.explanation import Narrative
from pgxboard.models.matching import MatchedVariant
from pgxboard.models.reference import FunctionalStatus

logger = logging.getLogger(__name__)

SENTENCE_SPLIT = re.compile(r"[.!?]+")
GENE_RE = re.compile(GENE_PATTERN, re.IGNORECASE)
DRUG_RE = re.compile(DRUG_PATTERN, re.IGNORECASE)
RSID_RE = re.compile(RSID_PATTERN, re.IGNORECASE)
STAR_RE = re.compile(STAR_ALLELE_PATTERN)

OPPOSING = {EffectDirection.DECREASE, EffectDirection.ELIMINATE}


def _contains_any(text: str, keywords: list[str]) -> bool:
    return any(kw in text for kw in keywords)


def _variant_mentioned(sentence: str) -> str | None:
    match = RSID_RE.search(sentence) or STAR_RE.search(sentence)
    return match.group(0) if match else None


def _enzyme_direction(lowered: str) -> EffectDirection:
    if _contains_any(lowered, ELIMINATE_KEYWORDS):
        return EffectDirection.ELIMINATE
    if _contains_any(lowered, INCREASE_KEYWORDS):
        return EffectDirection.INCREASE
    if _contains_any(lowered, DECREASE_KEYWORDS):
        return EffectDirection.DECREASE
    return EffectDirection.UNKNOWN


def _efficacy_direction(lowered: str) -> EffectDirection:
    if _contains_any(lowered, INCREASE_KEYWORDS):
        return EffectDirection.INCREASE
    if _contains_any(lowered, DECREASE_KEYWORDS):
        return EffectDirection.DECREASE
    return EffectDirection.UNKNOWN


def extract_claims(text: str) -> list[BiologicalClaim]:
    """Extract enzyme activity and drug efficacy claims, in sentence order.

    One sentence may yield both an enzyme activity and a drug efficacy claim.
    """
    claims: list[BiologicalClaim] = []

    for raw in SENTENCE_SPLIT.split(text):
        sentence = raw.strip()
        if not sentence:
            continue
        lowered = sentence.lower()
        variant = _variant_mentioned(sentence)

        if _contains_any(lowered, ENZYME_TERMS):
            direction = _enzyme_direction(lowered)
            if direction != EffectDirection.UNKNOWN:
                gene = GENE_RE.search(sentence)
                claims.append(
                    BiologicalClaim(
                        type=ClaimType.ENZYME_ACTIVITY,
                        subject=gene.group(0).upper() if gene else "enzyme",
                        direction=direction,
                        sentence=sentence,
                        variant_mentioned=variant,
                    )
                )

        if _contains_any(lowered, EFFICACY_TERMS):
            direction = _efficacy_direction(lowered)
            if direction != EffectDirection.UNKNOWN:
                drug = DRUG_RE.search(sentence)
                claims.append(
                    BiologicalClaim(
                        type=ClaimType.DRUG_EFFICACY,
                        subject=f"{drug.group(0)} efficacy" if drug else "drug efficacy",
                        direction=direction,
                        sentence=sentence,
                        variant_mentioned=variant,
                    )
                )

    return claims


def _resolve_variant(
    claim: BiologicalClaim, by_key: dict[str, MatchedVariant], variants: list[MatchedVariant]
) -> MatchedVariant | None:
    if claim.variant_mentioned:
        found = by_key.get(claim.variant_mentioned.lower())
        if found is not None:
            return found
    subject = claim.subject.upper()
    return next((v for v in variants if v.gene.upper() == subject), None)


def check_enzyme_activity_consistency(
    claims: list[BiologicalClaim], variants: list[MatchedVariant]
) -> list[Contradiction]:
    """Compare enzyme activity claims with the functional status of the variants they name."""
    by_key: dict[str, MatchedVariant] = {}
    for variant in variants:
        if variant.rsid:
            by_key[variant.rsid.lower()] = variant
        if variant.star_allele:
            by_key[variant.star_allele.lower()] = variant

    contradictions: list[Contradiction] = []

    for claim in claims:
        if claim.type != ClaimType.ENZYME_ACTIVITY:
            continue

        variant = _resolve_variant(claim, by_key, variants)
        if variant is None:
            continue

        status = variant.functional_status
        label = variant.rsid or variant.star_allele
        severity = None
        effect = None

        if status == FunctionalStatus.NO_FUNCTION and claim.direction == EffectDirection.INCREASE:
            severity, effect = Severity.HIGH, "has no function"
        elif status == FunctionalStatus.DECREASED and claim.direction == EffectDirection.INCREASE:
            severity, effect = Severity.MEDIUM, "causes decreased function"
        elif status == FunctionalStatus.INCREASED and claim.direction in OPPOSING:
            severity, effect = Severity.MEDIUM, "causes increased function"

        if severity is None:
            continue

        contradictions.append(
            Contradiction(
                type=ContradictionType.ENZYME_ACTIVITY_MISMATCH,
                severity=severity,
                description=f"Claim states enzyme activity is {claim.direction.value}d, but variant {label} {effect}",
                conflicting_statements=[claim.sentence, f"Variant functional status: {status.value}"],
                affected_variant=label,
            )
        )

    return contradictions


def _has_opposing_directions(claims: list[BiologicalClaim]) -> bool:
    directions = {c.direction for c in claims}
    return EffectDirection.INCREASE in directions and bool(directions & OPPOSING)


def check_internal_consistency(claims: list[BiologicalClaim]) -> list[Contradiction]:
    """Find claims that describe the same variant or subject in opposite directions."""
    contradictions: list[Contradiction] = []

    by_variant: dict[str, list[BiologicalClaim]] = {}
    for claim in claims:
        if claim.variant_mentioned:
            by_variant.setdefault(claim.variant_mentioned.lower(), []).append(claim)

    for variant, group in by_variant.items():
        if _has_opposing_directions(group):
            contradictions.append(
                Contradiction(
                    type=ContradictionType.INTERNAL_CONTRADICTION,
                    severity=Severity.HIGH,
                    description=f"Variant {variant} is described as both increasing and decreasing activity",
                    conflicting_statements=[c.sentence for c in group],
                    affected_variant=variant,
                )
            )

    by_subject: dict[str, list[BiologicalClaim]] = {}
    for claim in claims:
        by_subject.setdefault(claim.subject.lower(), []).append(claim)

    for subject, group in by_subject.items():
        if len(group) < 2 or not _has_opposing_directions(group):
            continue
        # Groups naming a variant are covered by the per-variant check
        if any(c.variant_mentioned for c in group):
            continue
        contradictions.append(
            Contradiction(
                type=ContradictionType.INTERNAL_CONTRADICTION,
                severity=Severity.MEDIUM,
                description=f"{subject} is described with contradictory effects",
                conflicting_statements=[c.sentence for c in group],
            )
        )

    return contradictions


def detect_contradictions(text: str | Narrative, variants: list[MatchedVariant]) -> ContradictionReport:
    """Run both consistency checks over a narrative.

    Args:
        text: Narrative text, or a Narrative whose sections are joined
        variants: Matched variants providing the known functional status
    """
    if isinstance(text, Narrative):
        text = text.full_text()

    claims = extract_claims(text)
    contradictions = check_enzyme_activity_consistency(claims, variants) + check_internal_consistency(claims)

    if contradictions:
        logger.warning(f"Found {len(contradictions)} contradictions in {len(claims)} claims")
        for c in contradictions:
            logger.debug(f"{c.type.value} ({c.severity.value}): {c.description}")
    else:
        logger.debug(f"No contradictions in {len(claims)} claims")

    return ContradictionReport(contradictions=contradictions, claims_analyzed=len(claims))
