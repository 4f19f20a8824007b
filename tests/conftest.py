"""Pytest configuration and fixtures."""

import pytest

SAMPLE_VCF = (
    "##fileformat=VCFv4.2\n"
    "##SAMPLE=<ID=PATIENT_001>\n"
    "##INFO=<ID=GENE,Number=1,Type=String,Description=\"Gene symbol\">\n"
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tSAMPLE\n"
    "22\t42130692\trs3892097\tC\tT\t35.2\tPASS\tGENE=CYP2D6;STAR=*4;RS=rs3892097;CPIC=A\tGT\t0/1\n"
    "10\t94781859\trs4244285\tG\tA\t40.0\tPASS\tGENE=CYP2C19;STAR=*2;RS=rs4244285;CPIC=A\tGT\t1/1\n"
    "17\t7579472\trs1042522\tG\tC\t50.0\tPASS\tGENE=TP53\tGT\t0/1\n"
)


@pytest.fixture(autouse=True)
def reset_narrative_logger():
    """Drop the process-wide narrative logger between tests."""
    from pgxboard.utils.logging_config import reset_logger

    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def sample_vcf():
    """VCF with two matchable panel variants and one non-panel record."""
    return SAMPLE_VCF


@pytest.fixture
def empty_vcf():
    """VCF with headers and no data lines."""
    return "##fileformat=VCFv4.2\n#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"


@pytest.fixture
def make_record():
    """Factory for VariantRecord with sensible defaults."""
    from pgxboard.models.variant import VariantRecord

    def _make(**overrides):
        fields = {
            "chromosome": "22",
            "position": 42130692,
            "identifier": "rs3892097",
            "ref": "C",
            "alt": "T",
            "quality": 35.0,
            "filter": "PASS",
            "info": {"GENE": "CYP2D6", "STAR": "*4"},
            "genotype": "0/1",
            "gene": "CYP2D6",
            "star_allele": "*4",
        }
        fields.update(overrides)
        return VariantRecord(**fields)

    return _make


@pytest.fixture
def make_matched():
    """Factory for MatchedVariant built from a known reference rsID."""
    from pgxboard.data.reference_variants import get_variant_by_rsid
    from pgxboard.models.matching import MatchedVariant, MatchStrategy
    from pgxboard.models.variant import VariantRecord

    def _make(rsid: str, genotype: str | None = "0/1", quality: float = 35.0):
        reference = get_variant_by_rsid(rsid)
        record = VariantRecord(
            chromosome=reference.chromosome,
            position=reference.position,
            identifier=reference.rsid,
            ref=reference.ref,
            alt=reference.alt,
            quality=quality,
            filter="PASS",
            info={"GENE": reference.gene, "STAR": reference.star_allele},
            genotype=genotype,
            gene=reference.gene,
            star_allele=reference.star_allele,
            rs_identifier=reference.rsid,
        )
        return MatchedVariant(
            record=record,
            reference=reference,
            matched_by=MatchStrategy.RSID,
            match_confidence=0.95,
        )

    return _make


@pytest.fixture
def offline_engine():
    """Engine with the LLM and narrative decision logging disabled."""
    from pgxboard.engine import AnalysisEngine

    return AnalysisEngine(enable_llm=False, enable_logging=False)


@pytest.fixture
def llm_response():
    """Factory for a mock litellm response carrying the given content."""
    from unittest.mock import MagicMock

    def _make(content):
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = content
        return response

    return _make
