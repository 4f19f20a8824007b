"""VCF input handling."""

from pgxboard.parsers.vcf import (
    VCFFormatError,
    extract_header,
    extract_patient_id,
    filter_pharmacogenomic_records,
    parse_vcf,
    serialize_vcf,
    validate_round_trip,
    validate_vcf,
)

__all__ = [
    "VCFFormatError",
    "extract_header",
    "extract_patient_id",
    "filter_pharmacogenomic_records",
    "parse_vcf",
    "serialize_vcf",
    "validate_round_trip",
    "validate_vcf",
]
