"""Tests for claim extraction and contradiction detection."""

from pgxboard.analysis.contradictions import (
    check_enzyme_activity_consistency,
    check_internal_consistency,
    detect_contradictions,
    extract_claims,
)
from pgxboard.models.claims import ClaimType, ContradictionType, EffectDirection, Severity
from pgxboard.models.explanation import Narrative
from pgxboard.models.matching import MatchedVariant, MatchStrategy
from pgxboard.models.reference import EvidenceLevel, FunctionalStatus, ReferenceEntry
from pgxboard.models.variant import VariantRecord


def _variant(rsid: str, status: FunctionalStatus, gene: str = "CYP2D6", star: str = "*99") -> MatchedVariant:
    reference = ReferenceEntry(
        rsid=rsid,
        gene=gene,
        star_allele=star,
        chromosome="22",
        position=100,
        ref="C",
        alt="T",
        functional_status=status,
        evidence_level=EvidenceLevel.A,
    )
    record = VariantRecord(chromosome="22", position=100, identifier=rsid, ref="C", alt="T", gene=gene)
    return MatchedVariant(record=record, reference=reference, matched_by=MatchStrategy.RSID, match_confidence=0.95)


class TestExtractClaims:
    """Tests for claim extraction."""

    def test_enzyme_claim_with_rsid(self):
        claims = extract_claims("rs123 increases enzyme activity.")

        assert len(claims) == 1
        assert claims[0].type == ClaimType.ENZYME_ACTIVITY
        assert claims[0].direction == EffectDirection.INCREASE
        assert claims[0].subject == "enzyme"
        assert claims[0].variant_mentioned == "rs123"

    def test_gene_subject_and_star_allele(self):
        claims = extract_claims("The *4 allele abolishes CYP2D6 function and metabolism")

        assert claims[0].direction == EffectDirection.ELIMINATE
        assert claims[0].subject == "CYP2D6"
        assert claims[0].variant_mentioned == "*4"

    def test_eliminate_wins_over_decrease(self):
        claims = extract_claims("Enzyme activity is reduced or absent")
        assert claims[0].direction == EffectDirection.ELIMINATE

    def test_drug_efficacy_claim(self):
        claims = extract_claims("Codeine efficacy is reduced in this patient!")

        assert len(claims) == 1
        assert claims[0].type == ClaimType.DRUG_EFFICACY
        assert claims[0].subject == "Codeine efficacy"
        assert claims[0].direction == EffectDirection.DECREASE

    def test_sentence_with_both_claim_types(self):
        claims = extract_claims("Reduced CYP2D6 activity lowers codeine efficacy")
        assert [c.type for c in claims] == [ClaimType.ENZYME_ACTIVITY, ClaimType.DRUG_EFFICACY]

    def test_no_direction_no_claim(self):
        assert extract_claims("CYP2D6 encodes an enzyme. The patient was genotyped?") == []

    def test_empty_text(self):
        assert extract_claims("") == []


class TestEnzymeActivityConsistency:
    """Tests for claims checked against functional status."""

    def test_no_function_claimed_increase(self):
        """Test the canonical high-severity mismatch."""
        report = detect_contradictions(
            "rs123 increases enzyme activity", [_variant("rs123", FunctionalStatus.NO_FUNCTION)]
        )

        assert len(report.contradictions) == 1
        contradiction = report.contradictions[0]
        assert contradiction.type == ContradictionType.ENZYME_ACTIVITY_MISMATCH
        assert contradiction.severity == Severity.HIGH
        assert contradiction.affected_variant == "rs123"
        assert report.claims_analyzed == 1

    def test_decreased_claimed_increase(self):
        claims = extract_claims("The *10 allele increases CYP2D6 enzyme activity")
        found = check_enzyme_activity_consistency(
            claims, [_variant("rs1065852", FunctionalStatus.DECREASED, star="*10")]
        )

        assert len(found) == 1
        assert found[0].severity == Severity.MEDIUM

    def test_increased_claimed_decrease(self):
        claims = extract_claims("CYP2C19 *17 reduces enzyme activity")
        found = check_enzyme_activity_consistency(
            claims, [_variant("rs12248560", FunctionalStatus.INCREASED, gene="CYP2C19", star="*17")]
        )

        assert len(found) == 1
        assert found[0].severity == Severity.MEDIUM

    def test_resolves_by_gene_when_no_variant_named(self):
        claims = extract_claims("CYP2D6 enzyme activity is increased")
        found = check_enzyme_activity_consistency(claims, [_variant("rs3892097", FunctionalStatus.NO_FUNCTION)])
        assert len(found) == 1

    def test_consistent_claim(self):
        report = detect_contradictions(
            "rs3892097 eliminates enzyme activity", [_variant("rs3892097", FunctionalStatus.NO_FUNCTION)]
        )
        assert not report.has_contradictions

    def test_unknown_variant_is_skipped(self):
        claims = extract_claims("rs555 increases enzyme activity")
        assert check_enzyme_activity_consistency(claims, []) == []


class TestInternalConsistency:
    """Tests for contradictions between claims."""

    def test_same_variant_opposite_directions(self):
        claims = extract_claims("rs3892097 increases enzyme activity. rs3892097 eliminates enzyme activity.")
        found = check_internal_consistency(claims)

        assert len(found) == 1
        assert found[0].type == ContradictionType.INTERNAL_CONTRADICTION
        assert found[0].severity == Severity.HIGH
        assert len(found[0].conflicting_statements) == 2

    def test_same_subject_opposite_directions(self):
        found = check_internal_consistency(extract_claims("Enzyme activity is increased. Enzyme activity is reduced."))

        assert len(found) == 1
        assert found[0].severity == Severity.MEDIUM
        assert found[0].affected_variant is None

    def test_same_direction_is_consistent(self):
        assert check_internal_consistency(extract_claims("Enzyme activity is reduced. Metabolism is lower.")) == []

    def test_narrative_input(self):
        narrative = Narrative(
            summary="CYP2D6 activity is increased.",
            clinical_impact="CYP2D6 activity is decreased.",
        )
        report = detect_contradictions(narrative, [])

        assert report.claims_analyzed == 2
        assert report.has_contradictions
