"""Tests for VCF parsing and serialization."""

import pytest

from pgxboard.parsers.vcf import (
    VCFFormatError,
    extract_header,
    extract_patient_id,
    filter_pharmacogenomic_records,
    parse_genotype,
    parse_info,
    parse_vcf,
    serialize_vcf,
    validate_round_trip,
    validate_vcf,
)

HEADER = "##fileformat=VCFv4.2\n#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO"


class TestValidateVCF:
    """Tests for header validation."""

    def test_valid_headers(self, sample_vcf):
        assert validate_vcf(sample_vcf).valid

    def test_missing_fileformat_header(self):
        """Test that the fileformat line must come first."""
        result = validate_vcf("#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n")
        assert not result.valid
        assert result.error == "Invalid VCF format: Missing fileformat header"

    def test_missing_column_header(self):
        result = validate_vcf("##fileformat=VCFv4.2\n22\t100\t.\tA\tG\t30\tPASS\t.\n")
        assert not result.valid
        assert result.error == "Invalid VCF format: Missing column header"

    def test_parse_raises_on_structural_error(self):
        with pytest.raises(VCFFormatError, match="Missing fileformat header"):
            parse_vcf("not a vcf\n")


class TestParseVCF:
    """Tests for record parsing."""

    def test_parse_sample(self, sample_vcf):
        """Test parsing records with derived tags and genotypes."""
        result = parse_vcf(sample_vcf)

        assert result.parse_errors == 0
        assert len(result.records) == 3

        first = result.records[0]
        assert first.chromosome == "22"
        assert first.position == 42130692
        assert first.identifier == "rs3892097"
        assert first.quality == 35.2
        assert first.gene == "CYP2D6"
        assert first.star_allele == "*4"
        assert first.rs_identifier == "rs3892097"
        assert first.evidence_level == "A"
        assert first.genotype == "0/1"

        assert result.records[2].gene == "TP53"
        assert result.records[2].star_allele is None

    def test_headers_only_is_empty_not_error(self, empty_vcf):
        result = parse_vcf(empty_vcf)
        assert result.records == []
        assert result.parse_errors == 0

    def test_malformed_lines_are_skipped_and_counted(self):
        """Test that per-line problems never abort the parse."""
        content = (
            f"{HEADER}\n"
            "22\t42130692\trs3892097\n"
            "22\tabc\trs3892097\tC\tT\t30\tPASS\t.\n"
            "22\t100\t.\tC\tT\thigh\tPASS\t.\n"
            "22\t200\t.\tC\tT\t30\tPASS\t.\n"
        )
        result = parse_vcf(content)

        assert result.parse_errors == 3
        assert len(result.records) == 1
        assert result.records[0].position == 200

    def test_missing_values(self):
        """Test '.' in ID, QUAL and INFO."""
        result = parse_vcf(f"{HEADER}\n1\t500\t.\tA\tG\t.\tPASS\t.\n")
        record = result.records[0]

        assert record.identifier == ""
        assert record.quality == 0.0
        assert record.info == {}
        assert record.gene is None
        assert record.genotype is None

    def test_info_aliases(self):
        content = f"{HEADER}\n10\t94781859\t.\tG\tA\t30\tPASS\tGENEINFO=CYP2C19;STAR_ALLELE=*2;RSID=rs4244285;CPIC_LEVEL=B\n"
        record = parse_vcf(content).records[0]

        assert record.gene == "CYP2C19"
        assert record.star_allele == "*2"
        assert record.rs_identifier == "rs4244285"
        assert record.evidence_level == "B"

    def test_multi_allelic_alt(self):
        record = parse_vcf(f"{HEADER}\n1\t500\t.\tA\tG,T\t30\tPASS\t.\n").records[0]
        assert record.alt == "G,T"
        assert record.alt_alleles == ["G", "T"]


class TestFieldParsers:
    """Tests for INFO and genotype parsing."""

    def test_parse_info_flags_and_values(self):
        info = parse_info("GENE=CYP2D6;DB;NOTE=a=b")
        assert info == {"GENE": "CYP2D6", "DB": True, "NOTE": "a=b"}

    def test_parse_info_missing(self):
        assert parse_info(".") == {}

    def test_parse_info_skips_empty_keys(self):
        assert parse_info("GENE=TPMT;;=x") == {"GENE": "TPMT"}

    def test_parse_genotype(self):
        assert parse_genotype("GT:DP", "1|0:30") == "1|0"
        assert parse_genotype("DP:GT", "30:0/1") == "0/1"

    def test_parse_genotype_missing_gt(self):
        assert parse_genotype("DP", "30") == "./."
        assert parse_genotype("GT", "") == "./."


class TestSerialization:
    """Tests for serialization and round trip."""

    def test_serialize_reparses(self, sample_vcf):
        records = parse_vcf(sample_vcf).records
        reparsed = parse_vcf(serialize_vcf(records, extract_header(sample_vcf))).records
        assert reparsed == records

    def test_serialize_blank_header(self):
        """Test that a blank header gets a minimal default."""
        records = parse_vcf(f"{HEADER}\n1\t500\t.\tA\tG\t.\tPASS\tGENE=DPYD;DB\n").records
        output = serialize_vcf(records)

        assert output.startswith("##fileformat=VCF")
        assert "1\t500\t.\tA\tG\t.\tPASS\tGENE=DPYD;DB" in output

    def test_round_trip_sample(self, sample_vcf):
        result = validate_round_trip(sample_vcf)

        assert result.success
        assert result.info_tags_preserved
        assert result.quality_scores_preserved
        assert result.original_variant_count == 3
        assert result.round_trip_variant_count == 3
        assert result.errors == []

    def test_round_trip_column_header_after_data(self):
        """Test a file whose #CHROM line follows the data lines."""
        content = f"##fileformat=VCFv4.2\n22\t1\t.\tA\tG\t30\tPASS\tGENE=CYP2D6\n{HEADER.splitlines()[1]}\n"
        result = validate_round_trip(content)

        assert result.success
        assert result.original_variant_count == 1
        assert result.round_trip_variant_count == 1

    def test_serialize_adds_missing_column_header(self, make_record):
        output = serialize_vcf([make_record()], "##fileformat=VCFv4.2\n##source=test")
        lines = output.splitlines()

        assert lines[2] == HEADER.splitlines()[1]
        assert parse_vcf(output).records == [make_record()]

    def test_round_trip_invalid_input(self):
        result = validate_round_trip("garbage")
        assert not result.success
        assert result.errors


DIALECT_CASES = {
    "flags": f"{HEADER}\n1\t97915614\trs3918290\tC\tT\t30\tPASS\tGENE=DPYD;DB;SOMATIC\n",
    "missing_id_and_quality": f"{HEADER}\n1\t500\t.\tA\tG\t.\tPASS\t.\n",
    "format_without_gt": f"{HEADER}\tFORMAT\tS1\n1\t500\t.\tA\tG\t20\tPASS\tGENE=TPMT\tDP:AD\t30:10,20\n",
    "phased_genotypes": (
        f"{HEADER}\tFORMAT\tS1\n"
        "22\t42130692\trs3892097\tC\tT\t35.5\tPASS\tGENE=CYP2D6\tGT\t1|0\n"
        "10\t94781859\trs4244285\tG\tA\t40\tPASS\tGENE=CYP2C19\tGT:DP\t1|1:25\n"
    ),
    "empty_info_value": f"{HEADER}\n22\t42130692\t.\tC\tT\t12.5\tLowQual\tGENE=CYP2D6;NOTE=;STAR=*4\n",
    "headers_only": f"{HEADER}\n",
    "column_header_after_data": f"##fileformat=VCFv4.2\n22\t1\t.\tA\tG\t30\tPASS\tGENE=CYP2D6\n{HEADER.splitlines()[1]}\n",
}


class TestRoundTripLaws:
    """Tests for round-trip preservation and idempotence across VCF dialects."""

    @pytest.mark.parametrize("content", DIALECT_CASES.values(), ids=DIALECT_CASES.keys())
    def test_round_trip_preserves_records(self, content):
        records = parse_vcf(content).records
        reparsed = parse_vcf(serialize_vcf(records, extract_header(content))).records

        assert reparsed == records
        assert validate_round_trip(content).success

    @pytest.mark.parametrize("content", DIALECT_CASES.values(), ids=DIALECT_CASES.keys())
    def test_serialization_is_idempotent(self, content):
        """Test that serializing a round-tripped result changes nothing."""
        first = serialize_vcf(parse_vcf(content).records, extract_header(content))
        records = parse_vcf(first).records
        second = serialize_vcf(records, extract_header(first))

        assert second == first
        assert parse_vcf(second).records == records

    @pytest.mark.parametrize("content", DIALECT_CASES.values(), ids=DIALECT_CASES.keys())
    def test_blank_header_round_trip(self, content):
        records = parse_vcf(content).records
        first = serialize_vcf(records)

        assert parse_vcf(first).records == records
        assert serialize_vcf(parse_vcf(first).records) == first

    def test_dialect_values_survive(self):
        phased = parse_vcf(DIALECT_CASES["phased_genotypes"]).records
        assert [r.genotype for r in phased] == ["1|0", "1|1"]

        no_gt = parse_vcf(DIALECT_CASES["format_without_gt"]).records[0]
        assert no_gt.genotype == "./."

        empty_value = parse_vcf(DIALECT_CASES["empty_info_value"]).records[0]
        assert empty_value.info["NOTE"] == ""
        assert "NOTE=;" in serialize_vcf([empty_value])

        flags = parse_vcf(DIALECT_CASES["flags"]).records[0]
        assert flags.info["DB"] is True
        assert "GENE=DPYD;DB;SOMATIC" in serialize_vcf([flags])


class TestHeaderHelpers:
    """Tests for header and patient helpers."""

    def test_extract_header(self, sample_vcf):
        header = extract_header(sample_vcf)
        assert header.splitlines()[0] == "##fileformat=VCFv4.2"
        assert header.splitlines()[-1].startswith("#CHROM")

    def test_patient_id_from_sample_line(self, sample_vcf):
        assert extract_patient_id(sample_vcf) == "PATIENT_001"

    def test_patient_id_from_column_header(self):
        content = "##fileformat=VCFv4.2\n#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tNA12878\n"
        assert extract_patient_id(content) == "NA12878"

    def test_patient_id_generated(self):
        assert extract_patient_id(f"{HEADER}\n").startswith("PATIENT_")

    def test_filter_pharmacogenomic_records(self, make_record):
        records = [
            make_record(gene="CYP2D6"),
            make_record(gene="cyp2c19"),
            make_record(gene="TP53"),
            make_record(gene=None),
        ]
        kept = filter_pharmacogenomic_records(records)
        assert [r.gene for r in kept] == ["CYP2D6", "cyp2c19"]
