"""Reference matching for candidate VCF records.

Strategies are tried in priority order and the first hit wins. Within a
strategy the first matching entry in table order wins.

1. rsid: exact identifier match (0.95)
2. position: exact (chromosome, position, ref, alt) match (0.85)
3. star_allele: (gene, star allele) match, both tags required (0.70)
4. proximity: same gene within 10 bases (0.50)

The reference table is read-only and may be shared between callers.
"""

import logging
from collections.abc import Callable, Sequence

from pgxboard.constants import MATCH_WEIGHTS, MISSING_VALUE, PROXIMITY_WINDOW
from pgxboard.data.reference_variants import KNOWN_PGX_VARIANTS
from pgxboard.models.matching import DetectionResult, DetectionState, MatchedVariant, MatchResult, MatchStrategy
from pgxboard.models.reference import ReferenceEntry
from pgxboard.models.variant import VariantRecord
from pgxboard.parsers.vcf import filter_pharmacogenomic_records

logger = logging.getLogger(__name__)

ReferenceTable = Sequence[ReferenceEntry]


def _by_rsid(record: VariantRecord, table: ReferenceTable) -> ReferenceEntry | None:
    if not record.identifier or record.identifier == MISSING_VALUE:
        return None
    return next((e for e in table if e.rsid == record.identifier), None)


def _by_position(record: VariantRecord, table: ReferenceTable) -> ReferenceEntry | None:
    return next(
        (
            e for e in table
            if e.chromosome == record.chromosome
            and e.position == record.position
            and e.ref == record.ref
            and e.alt == record.alt
        ),
        None,
    )


def _by_star_allele(record: VariantRecord, table: ReferenceTable) -> ReferenceEntry | None:
    if not record.gene or not record.star_allele:
        return None
    return next((e for e in table if e.gene == record.gene and e.star_allele == record.star_allele), None)


def _by_proximity(record: VariantRecord, table: ReferenceTable) -> ReferenceEntry | None:
    # Chromosome is not compared; gene identity stands in for it
    if not record.gene:
        return None
    return next(
        (e for e in table if e.gene == record.gene and abs(e.position - record.position) < PROXIMITY_WINDOW),
        None,
    )


STRATEGIES: list[tuple[MatchStrategy, Callable[[VariantRecord, ReferenceTable], ReferenceEntry | None]]] = [
    (MatchStrategy.RSID, _by_rsid),
    (MatchStrategy.POSITION, _by_position),
    (MatchStrategy.STAR_ALLELE, _by_star_allele),
    (MatchStrategy.PROXIMITY, _by_proximity),
]


def match_variant(record: VariantRecord, table: ReferenceTable = KNOWN_PGX_VARIANTS) -> MatchResult:
    """Match one record against the reference table.

    Returns a MatchResult with null provenance and zero confidence when no
    strategy matches.
    """
    for strategy, find in STRATEGIES:
        entry = find(record, table)
        if entry is not None:
            return MatchResult(reference=entry, strategy=strategy, confidence=MATCH_WEIGHTS[strategy.value])

    return MatchResult()


def classify_detection_state(total_records: int, candidate_count: int, matched_count: int) -> DetectionState:
    """Five-way classification of a detection run from its counts."""
    if total_records == 0:
        return DetectionState.NO_VARIANTS
    if candidate_count == 0:
        return DetectionState.NO_PGX_VARIANTS
    if matched_count == 0:
        return DetectionState.NONE_MATCHED
    if matched_count < candidate_count:
        return DetectionState.SOME_MATCHED
    return DetectionState.ALL_MATCHED


def detect_pharmacogenomic_variants(
    records: list[VariantRecord], table: ReferenceTable = KNOWN_PGX_VARIANTS
) -> DetectionResult:
    """Filter panel records and match each one, keeping input order in both output lists.

    A record whose matching raises is kept as unmatched; the run continues.

    Args:
        records: Every parsed record of the file
        table: Reference table to match against
    """
    candidates = filter_pharmacogenomic_records(records)
    total_records = len(records)

    if not table:
        logger.warning(f"Reference table is empty; {len(candidates)} candidate records cannot be matched")

    matched: list[MatchedVariant] = []
    unmatched: list[VariantRecord] = []

    for record in candidates:
        try:
            result = match_variant(record, table)
        except Exception as e:
            logger.warning(f"Matching failed for {record.locus}: {e}")
            unmatched.append(record)
            continue

        if result.matched:
            matched.append(
                MatchedVariant(
                    record=record,
                    reference=result.reference,
                    matched_by=result.strategy,
                    match_confidence=result.confidence,
                )
            )
        else:
            logger.debug(f"No reference match for {record.locus} ({record.identifier or 'no id'})")
            unmatched.append(record)

    state = classify_detection_state(total_records, len(candidates), len(matched))
    logger.info(f"Matched {len(matched)}/{len(candidates)} candidate records ({state.value})")

    return DetectionResult(
        matched=matched,
        unmatched=unmatched,
        total_records=total_records,
        candidate_count=len(candidates),
        state=state,
    )
