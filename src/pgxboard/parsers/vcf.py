"""VCF parsing and serialization.

The parser reads the tab separated VCF dialect used by pharmacogenomic
annotation pipelines: eight mandatory columns, an optional FORMAT/sample
pair carrying the GT genotype, and an INFO column with GENE/STAR/RS/CPIC
annotations (or their GENEINFO/STAR_ALLELE/RSID/CPIC_LEVEL aliases).

Error handling:
- Missing ``##fileformat=VCF`` or ``#CHROM`` header lines raise VCFFormatError
- Malformed data lines are skipped and counted, parsing continues

``serialize_vcf`` is a left inverse of ``parse_vcf``: re-parsing its output
reproduces every field, which ``validate_round_trip`` checks on real input.
"""

import logging
import math
import re
import time

from pgxboard.constants import (
    COLUMN_HEADER_PREFIX,
    COMMENT_PREFIX,
    FILEFORMAT_PREFIX,
    GENOTYPE_KEY,
    INFO_TAG_ALIASES,
    MIN_RECORD_FIELDS,
    MISSING_VALUE,
    NO_CALL_GENOTYPE,
    PGX_GENES,
    QUALITY_TOLERANCE,
)
from pgxboard.models.variant import InfoValue, ParseResult, RoundTripResult, VariantRecord, VCFValidation

logger = logging.getLogger(__name__)

COLUMN_HEADER = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO"
DEFAULT_HEADER = f"##fileformat=VCFv4.2\n{COLUMN_HEADER}"

SAMPLE_ID_PATTERN = re.compile(r"ID=([^,\s>]+)")

DERIVED_TAGS = ("gene", "star_allele", "rs_identifier", "evidence_level")


class VCFFormatError(ValueError):
    """Raised when VCF content is structurally invalid."""


class MalformedLineError(ValueError):
    """A single data line could not be parsed."""


# =============================================================================
# VALIDATION
# =============================================================================


def validate_vcf(content: str) -> VCFValidation:
    """Check the mandatory header lines.

    A file with headers and no data lines is valid; it represents a sample
    with no variant calls.
    """
    lines = content.split("\n")

    if not lines[0].startswith(FILEFORMAT_PREFIX):
        return VCFValidation(valid=False, error="Invalid VCF format: Missing fileformat header")

    if not any(line.startswith(COLUMN_HEADER_PREFIX) for line in lines):
        return VCFValidation(valid=False, error="Invalid VCF format: Missing column header")

    return VCFValidation(valid=True)


# =============================================================================
# PARSING
# =============================================================================


def parse_info(info: str) -> dict[str, InfoValue]:
    """Parse an INFO column into an ordered tag map.

    ``KEY=VALUE`` pairs split on the first ``=``; a bare ``KEY`` is a flag
    stored as True. A lone ``.`` means no annotations.
    """
    tags: dict[str, InfoValue] = {}
    if info == MISSING_VALUE:
        return tags

    for pair in info.split(";"):
        key, sep, value = pair.partition("=")
        if not key:
            continue
        tags[key] = value if sep else True

    return tags


def resolve_info_tag(info: dict[str, InfoValue], tag: str) -> str | None:
    """Return the first non-empty string value among the aliases of ``tag``."""
    for alias in INFO_TAG_ALIASES[tag]:
        value = info.get(alias)
        if isinstance(value, str) and value:
            return value
    return None


def parse_genotype(format_field: str, sample_field: str) -> str:
    """Extract the GT value from a FORMAT/sample pair, ``./.`` when absent."""
    keys = format_field.split(":")
    values = sample_field.split(":")

    if GENOTYPE_KEY in keys:
        index = keys.index(GENOTYPE_KEY)
        if index < len(values) and values[index].strip():
            return values[index].strip()

    return NO_CALL_GENOTYPE


def _parse_position(raw: str) -> int:
    try:
        position = int(raw)
    except ValueError:
        raise MalformedLineError(f"Unparsable position: {raw!r}")
    if position < 0:
        raise MalformedLineError(f"Negative position: {position}")
    return position


def _parse_quality(raw: str) -> float:
    if raw == MISSING_VALUE:
        return 0.0
    try:
        quality = float(raw)
    except ValueError:
        raise MalformedLineError(f"Unparsable quality: {raw!r}")
    if not math.isfinite(quality):
        raise MalformedLineError(f"Non-finite quality: {raw!r}")
    return quality


def parse_line(line: str) -> VariantRecord:
    """Parse one data line into a VariantRecord.

    Raises:
        MalformedLineError: too few fields or an unparsable numeric column
    """
    fields = line.split("\t")
    if len(fields) < MIN_RECORD_FIELDS:
        raise MalformedLineError(f"Line has {len(fields)} fields, expected at least {MIN_RECORD_FIELDS}")

    chrom, pos, identifier, ref, alt, qual, filter_value, info_field = fields[:MIN_RECORD_FIELDS]
    info = parse_info(info_field)

    genotype = None
    if len(fields) >= 10 and fields[8] and fields[9]:
        genotype = parse_genotype(fields[8], fields[9])

    derived = {tag: resolve_info_tag(info, tag) for tag in DERIVED_TAGS}

    return VariantRecord(
        chromosome=chrom,
        position=_parse_position(pos),
        identifier="" if identifier == MISSING_VALUE else identifier,
        ref=ref,
        alt=alt,
        quality=_parse_quality(qual),
        filter=filter_value,
        info=info,
        genotype=genotype,
        **derived,
    )


def parse_vcf(content: str) -> ParseResult:
    """Parse VCF content into records.

    Args:
        content: Full VCF text

    Returns:
        ParseResult with the parsed records in file order and the count of
        skipped malformed lines

    Raises:
        VCFFormatError: If the mandatory header lines are missing
    """
    validation = validate_vcf(content)
    if not validation.valid:
        logger.error(f"VCF validation failed: {validation.error}")
        raise VCFFormatError(validation.error)

    lines = content.split("\n")
    records: list[VariantRecord] = []
    parse_errors = 0

    for line_number, raw_line in enumerate(lines, 1):
        line = raw_line.rstrip()
        if not line.strip() or line.startswith(COMMENT_PREFIX):
            continue

        try:
            records.append(parse_line(line))
        except MalformedLineError as e:
            logger.warning(f"Skipping VCF line {line_number}: {e}")
            parse_errors += 1

    logger.info(f"Parsed {len(records)} VCF records ({parse_errors} malformed lines skipped)")
    return ParseResult(records=records, parse_errors=parse_errors)


# =============================================================================
# SERIALIZATION
# =============================================================================


def serialize_info(info: dict[str, InfoValue]) -> str:
    if not info:
        return MISSING_VALUE
    return ";".join(key if value is True else f"{key}={value}" for key, value in info.items())


def serialize_record(record: VariantRecord) -> str:
    fields = [
        record.chromosome,
        str(record.position),
        record.identifier or MISSING_VALUE,
        record.ref,
        record.alt,
        MISSING_VALUE if record.quality == 0 else str(record.quality),
        record.filter,
        serialize_info(record.info),
    ]
    if record.genotype is not None:
        fields.extend([GENOTYPE_KEY, record.genotype])
    return "\t".join(fields)


def serialize_vcf(records: list[VariantRecord], header: str = "") -> str:
    """Serialize records back to VCF text under ``header``.

    A blank header is replaced by a minimal one, and a header without a
    ``#CHROM`` line gets the fixed column line appended, so the output
    always re-parses.
    """
    header = header.strip() or DEFAULT_HEADER
    if not any(line.startswith(COLUMN_HEADER_PREFIX) for line in header.split("\n")):
        header = f"{header}\n{COLUMN_HEADER}"
    return "\n".join([header] + [serialize_record(r) for r in records])


# =============================================================================
# HEADER HELPERS
# =============================================================================


def extract_header(content: str) -> str:
    """Header lines up to the first data line."""
    header_lines = []
    for line in content.split("\n"):
        if line.startswith(COMMENT_PREFIX):
            header_lines.append(line.rstrip())
        elif line.strip():
            break
    return "\n".join(header_lines)


def extract_patient_id(content: str) -> str:
    """Patient identifier from ``##SAMPLE=<ID=...>`` or the sample column name."""
    for raw_line in content.split("\n"):
        line = raw_line.rstrip()
        if line.startswith("##SAMPLE="):
            match = SAMPLE_ID_PATTERN.search(line)
            if match:
                return match.group(1).strip()
        if line.startswith(COLUMN_HEADER_PREFIX):
            fields = line.split("\t")
            if len(fields) >= 10 and fields[9].strip():
                return fields[9].strip()

    return f"PATIENT_{int(time.time() * 1000)}"


def filter_pharmacogenomic_records(
    records: list[VariantRecord], genes: list[str] | None = None
) -> list[VariantRecord]:
    """Keep records whose gene tag names a panel gene (case-insensitive substring)."""
    panel = [g.upper() for g in (genes or PGX_GENES)]
    return [r for r in records if r.gene and any(g in r.gene.upper() for g in panel)]


# =============================================================================
# ROUND TRIP
# =============================================================================


def compare_info_tags(first: dict[str, InfoValue], second: dict[str, InfoValue]) -> bool:
    """Tag map equality, ignoring key order."""
    return first == second


def validate_round_trip(content: str) -> RoundTripResult:
    """Parse, serialize and re-parse ``content``, reporting every difference."""
    result = RoundTripResult()

    try:
        original = parse_vcf(content).records
        result.original_variant_count = len(original)

        serialized = serialize_vcf(original, extract_header(content))
        round_tripped = parse_vcf(serialized).records
        result.round_trip_variant_count = len(round_tripped)
    except VCFFormatError as e:
        result.success = False
        result.errors.append(f"Round-trip validation failed: {e}")
        logger.error(f"Round-trip validation failed: {e}")
        return result

    if len(original) != len(round_tripped):
        result.success = False
        result.errors.append(
            f"Variant count mismatch: original {len(original)} vs round-trip {len(round_tripped)}"
        )

    for index, (orig, rt) in enumerate(zip(original, round_tripped)):
        for field in ("chromosome", "position", "identifier", "ref", "alt", "filter", "genotype"):
            if getattr(orig, field) != getattr(rt, field):
                result.success = False
                result.errors.append(
                    f"{field} mismatch at index {index}: {getattr(orig, field)!r} vs {getattr(rt, field)!r}"
                )

        if abs(orig.quality - rt.quality) > QUALITY_TOLERANCE:
            result.quality_scores_preserved = False
            result.errors.append(f"Quality score mismatch at position {orig.position}: {orig.quality} vs {rt.quality}")

        if not compare_info_tags(orig.info, rt.info):
            result.info_tags_preserved = False
            result.errors.append(f"INFO tags differ at position {orig.position}")

        for tag in DERIVED_TAGS:
            if getattr(orig, tag) != getattr(rt, tag):
                result.info_tags_preserved = False
                result.errors.append(
                    f"{tag} mismatch at position {orig.position}: {getattr(orig, tag)!r} vs {getattr(rt, tag)!r}"
                )

    result.success = result.success and result.info_tags_preserved and result.quality_scores_preserved

    if result.success:
        logger.info("Round-trip validation passed")
    else:
        logger.warning(f"Round-trip validation failed with {len(result.errors)} errors")

    return result
