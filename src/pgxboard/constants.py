"""Centralized constants and mappings for PGxBoard.

This module consolidates the hardcoded tables used across the codebase:
- Pharmacogene panel (genes considered candidates for matching)
- INFO tag aliases (different spellings for the same annotation)
- Match strategy weights
- Activity score weights and phenotype bands
- Confidence scoring weights
- Claim extraction vocabulary

Centralizing these makes maintenance easier and ensures consistency.
"""

# =============================================================================
# PHARMACOGENE PANEL
# =============================================================================
# Records whose gene tag contains one of these symbols are "candidate" records

PGX_GENES: list[str] = ["CYP2D6", "CYP2C19", "CYP2C9", "SLCO1B1", "TPMT", "DPYD"]


# =============================================================================
# VCF DIALECT
# =============================================================================

FILEFORMAT_PREFIX = "##fileformat=VCF"
COLUMN_HEADER_PREFIX = "#CHROM"
COMMENT_PREFIX = "#"
MIN_RECORD_FIELDS = 8
MISSING_VALUE = "."
NO_CALL_GENOTYPE = "./."
GENOTYPE_KEY = "GT"

# Each semantic tag is looked up under its aliases in order, first hit wins
INFO_TAG_ALIASES: dict[str, list[str]] = {
    "gene": ["GENE", "GENEINFO"],
    "star_allele": ["STAR", "STAR_ALLELE"],
    "rs_identifier": ["RS", "RSID"],
    "evidence_level": ["CPIC", "CPIC_LEVEL"],
}

# Round-trip quality comparison tolerance
QUALITY_TOLERANCE = 0.01


# =============================================================================
# MATCHING
# =============================================================================

MATCH_WEIGHTS: dict[str, float] = {
    "rsid": 0.95,
    "position": 0.85,
    "star_allele": 0.70,
    "proximity": 0.50,
}

PROXIMITY_WINDOW = 10


# =============================================================================
# GENOTYPE / PHENOTYPE
# =============================================================================

WILD_TYPE_ALLELE = "*1"
WILD_TYPE_DIPLOTYPE = "*1/*1"

ACTIVITY_WEIGHTS: dict[str, float] = {
    "normal": 1.0,
    "decreased": 0.5,
    "increased": 1.5,
    "no_function": 0.0,
}

PHENOTYPE_DESCRIPTIONS: dict[str, str] = {
    "PM": "poor metabolizer with significantly reduced or absent enzyme activity",
    "IM": "intermediate metabolizer with reduced enzyme activity",
    "NM": "normal metabolizer with typical enzyme activity",
    "RM": "rapid metabolizer with increased enzyme activity",
    "URM": "ultra-rapid metabolizer with significantly increased enzyme activity",
    "Unknown": "metabolizer with uncertain enzyme activity",
}


# =============================================================================
# CONFIDENCE SCORING
# =============================================================================

CONFIDENCE_WEIGHTS: dict[str, float] = {
    "quality": 0.35,
    "completeness": 0.30,
    "evidence": 0.25,
    "variant_count": 0.10,
}

EVIDENCE_WEIGHTS: dict[str, float] = {
    "A": 1.0,
    "B": 0.75,
    "C": 0.5,
    "D": 0.25,
}

DEFAULT_EVIDENCE_FACTOR = 0.25
INVALID_QUALITY_FALLBACK = 0.25
VARIANT_COUNT_SATURATION = 5

# Upper bound of a plausible average PHRED quality in aggregate metrics
MAX_AVERAGE_QUALITY = 100.0


# =============================================================================
# CLAIM EXTRACTION VOCABULARY
# =============================================================================

INCREASE_KEYWORDS: list[str] = [
    "increase", "increased", "enhance", "enhanced", "higher", "elevate", "elevated",
]
DECREASE_KEYWORDS: list[str] = [
    "decrease", "decreased", "reduce", "reduced", "lower",
    "diminish", "diminished", "impair", "impaired",
]
ELIMINATE_KEYWORDS: list[str] = [
    "eliminate", "eliminated", "abolish", "abolished", "absent", "no function", "non-functional",
]

ENZYME_TERMS: list[str] = ["enzyme", "activity", "cyp", "metabolism"]
EFFICACY_TERMS: list[str] = ["efficacy", "effective", "response"]

GENE_PATTERN = r"CYP\d[A-Z]\d+|SLCO1B1|TPMT|DPYD"
DRUG_PATTERN = r"codeine|warfarin|clopidogrel|simvastatin|azathioprine|fluorouracil"
RSID_PATTERN = r"rs\d+"
STAR_ALLELE_PATTERN = r"\*\d+[A-Z]?"
