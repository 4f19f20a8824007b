"""Known pharmacogenomic variant table.

Curated from PharmGKB and CPIC guidelines. The table is immutable and shared
by reference; matching and genotype inference only read it.
"""

from pgxboard.models.reference import EvidenceLevel, FunctionalStatus, ReferenceEntry

_CYP2D6_DRUGS = ("codeine", "tramadol", "tamoxifen")
_CYP2C19_DRUGS = ("clopidogrel", "voriconazole", "sertraline")
_CYP2C9_DRUGS = ("warfarin", "phenytoin", "celecoxib")
_SLCO1B1_DRUGS = ("simvastatin", "atorvastatin", "pravastatin")
_TPMT_DRUGS = ("azathioprine", "mercaptopurine", "thioguanine")
_DPYD_DRUGS = ("5-fluorouracil", "capecitabine", "tegafur")


def _entry(
    rsid: str,
    gene: str,
    star_allele: str,
    chromosome: str,
    position: int,
    ref: str,
    alt: str,
    status: FunctionalStatus,
    significance: str,
    level: EvidenceLevel,
    guideline: str,
    drugs: tuple[str, ...],
) -> ReferenceEntry:
    return ReferenceEntry(
        rsid=rsid,
        gene=gene,
        star_allele=star_allele,
        chromosome=chromosome,
        position=position,
        ref=ref,
        alt=alt,
        functional_status=status,
        clinical_significance=significance,
        evidence_level=level,
        cpic_guideline=guideline,
        drugs_affected=drugs,
    )


_F = FunctionalStatus
_E = EvidenceLevel

KNOWN_PGX_VARIANTS: tuple[ReferenceEntry, ...] = (
    # CYP2D6
    _entry("rs3892097", "CYP2D6", "*4", "22", 42130692, "C", "T", _F.NO_FUNCTION,
           "Non-functional allele, no enzyme activity", _E.A,
           "CPIC Guideline for CYP2D6 and Codeine", _CYP2D6_DRUGS),
    _entry("rs1065852", "CYP2D6", "*10", "22", 42126611, "C", "T", _F.DECREASED,
           "Reduced enzyme activity", _E.A,
           "CPIC Guideline for CYP2D6 and Codeine", _CYP2D6_DRUGS),
    _entry("rs28371725", "CYP2D6", "*41", "22", 42128945, "G", "A", _F.DECREASED,
           "Reduced enzyme activity", _E.A,
           "CPIC Guideline for CYP2D6 and Codeine", _CYP2D6_DRUGS),
    # CYP2C19
    _entry("rs4244285", "CYP2C19", "*2", "10", 94781859, "G", "A", _F.NO_FUNCTION,
           "Loss of function allele", _E.A,
           "CPIC Guideline for CYP2C19 and Clopidogrel", _CYP2C19_DRUGS),
    _entry("rs4986893", "CYP2C19", "*3", "10", 94781858, "G", "A", _F.NO_FUNCTION,
           "Loss of function allele", _E.A,
           "CPIC Guideline for CYP2C19 and Clopidogrel", _CYP2C19_DRUGS),
    _entry("rs12248560", "CYP2C19", "*17", "10", 94762706, "C", "T", _F.INCREASED,
           "Increased enzyme activity", _E.A,
           "CPIC Guideline for CYP2C19 and Clopidogrel", _CYP2C19_DRUGS),
    # CYP2C9
    _entry("rs1799853", "CYP2C9", "*2", "10", 94942290, "C", "T", _F.DECREASED,
           "Reduced enzyme activity", _E.A,
           "CPIC Guideline for CYP2C9 and Warfarin", _CYP2C9_DRUGS),
    _entry("rs1057910", "CYP2C9", "*3", "10", 94981296, "A", "C", _F.DECREASED,
           "Significantly reduced enzyme activity", _E.A,
           "CPIC Guideline for CYP2C9 and Warfarin", _CYP2C9_DRUGS),
    # SLCO1B1
    _entry("rs4149056", "SLCO1B1", "*5", "12", 21178615, "T", "C", _F.DECREASED,
           "Reduced transporter function", _E.A,
           "CPIC Guideline for SLCO1B1 and Simvastatin", _SLCO1B1_DRUGS),
    _entry("rs2306283", "SLCO1B1", "*1B", "12", 21172734, "A", "G", _F.INCREASED,
           "Increased transporter function", _E.B,
           "CPIC Guideline for SLCO1B1 and Simvastatin", _SLCO1B1_DRUGS),
    # TPMT
    _entry("rs1800462", "TPMT", "*2", "6", 18139228, "C", "T", _F.DECREASED,
           "Reduced enzyme activity", _E.A,
           "CPIC Guideline for TPMT and Thiopurines", _TPMT_DRUGS),
    _entry("rs1800460", "TPMT", "*3A", "6", 18143955, "G", "A", _F.NO_FUNCTION,
           "Loss of function allele", _E.A,
           "CPIC Guideline for TPMT and Thiopurines", _TPMT_DRUGS),
    _entry("rs1142345", "TPMT", "*3C", "6", 18139213, "G", "A", _F.NO_FUNCTION,
           "Loss of function allele", _E.A,
           "CPIC Guideline for TPMT and Thiopurines", _TPMT_DRUGS),
    # DPYD
    _entry("rs3918290", "DPYD", "*2A", "1", 97450058, "C", "T", _F.NO_FUNCTION,
           "Complete loss of function", _E.A,
           "CPIC Guideline for DPYD and Fluoropyrimidines", _DPYD_DRUGS),
    _entry("rs55886062", "DPYD", "*13", "1", 98205966, "T", "C", _F.DECREASED,
           "Reduced enzyme activity", _E.A,
           "CPIC Guideline for DPYD and Fluoropyrimidines", _DPYD_DRUGS),
    _entry("rs67376798", "DPYD", "*2B", "1", 97450058, "A", "G", _F.DECREASED,
           "Reduced enzyme activity", _E.B,
           "CPIC Guideline for DPYD and Fluoropyrimidines", _DPYD_DRUGS),
)


def get_variant_by_rsid(rsid: str) -> ReferenceEntry | None:
    return next((v for v in KNOWN_PGX_VARIANTS if v.rsid == rsid), None)


def get_variants_by_gene(gene: str) -> list[ReferenceEntry]:
    return [v for v in KNOWN_PGX_VARIANTS if v.gene == gene]


def is_pharmacogenomic_variant(rsid: str) -> bool:
    return get_variant_by_rsid(rsid) is not None
