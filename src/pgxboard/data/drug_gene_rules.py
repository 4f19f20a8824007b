"""CPIC drug-gene interaction rules.

Each rule maps the phenotypes of one gene to a risk label, a severity and a
dosing recommendation for one drug. Phenotypes a rule does not list resolve
to an "Unknown" outcome.
"""

from pydantic import BaseModel, ConfigDict, Field

from pgxboard.models.assessment import RiskLabel, RiskSeverity
from pgxboard.models.genotype import Phenotype


class PhenotypeOutcome(BaseModel):
    """Risk, severity and recommendation for one phenotype."""

    model_config = ConfigDict(frozen=True)

    risk_label: RiskLabel
    severity: RiskSeverity
    recommendation: str


class DrugGeneRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    drug: str
    gene: str
    phenotypes: dict[Phenotype, PhenotypeOutcome] = Field(default_factory=dict)


UNKNOWN_OUTCOME = PhenotypeOutcome(
    risk_label=RiskLabel.UNKNOWN,
    severity=RiskSeverity.NONE,
    recommendation="Insufficient data for this phenotype. Consult pharmacogenomics specialist.",
)


def _outcome(risk: RiskLabel, severity: RiskSeverity, recommendation: str) -> PhenotypeOutcome:
    return PhenotypeOutcome(risk_label=risk, severity=severity, recommendation=recommendation)


_R = RiskLabel
_S = RiskSeverity
_P = Phenotype

DRUG_GENE_RULES: tuple[DrugGeneRule, ...] = (
    DrugGeneRule(
        drug="CODEINE",
        gene="CYP2D6",
        phenotypes={
            _P.PM: _outcome(_R.INEFFECTIVE, _S.HIGH,
                            "Avoid codeine. Use alternative analgesics such as morphine or non-opioid analgesics."),
            _P.IM: _outcome(_R.ADJUST_DOSAGE, _S.MODERATE,
                            "Reduce dose by 50% or consider alternative analgesics. Monitor for reduced efficacy."),
            _P.NM: _outcome(_R.SAFE, _S.NONE, "Use standard dosing. Normal codeine metabolism expected."),
            _P.RM: _outcome(_R.SAFE, _S.LOW,
                            "Use standard dosing with monitoring. Slightly increased metabolism possible."),
            _P.URM: _outcome(_R.TOXIC, _S.CRITICAL,
                             "Avoid codeine due to risk of toxicity. Use alternative analgesics."),
        },
    ),
    DrugGeneRule(
        drug="CLOPIDOGREL",
        gene="CYP2C19",
        phenotypes={
            _P.PM: _outcome(_R.INEFFECTIVE, _S.HIGH,
                            "Avoid clopidogrel. Use alternative antiplatelet agents such as prasugrel or ticagrelor."),
            _P.IM: _outcome(_R.ADJUST_DOSAGE, _S.MODERATE,
                            "Consider alternative antiplatelet therapy or increased clopidogrel dose (150mg/day)."),
            _P.NM: _outcome(_R.SAFE, _S.NONE,
                            "Use standard dosing (75mg/day). Normal clopidogrel activation expected."),
            _P.RM: _outcome(_R.SAFE, _S.NONE, "Use standard dosing. Enhanced clopidogrel activation expected."),
            _P.URM: _outcome(_R.SAFE, _S.LOW, "Use standard dosing. Monitor for increased bleeding risk."),
        },
    ),
    DrugGeneRule(
        drug="WARFARIN",
        gene="CYP2C9",
        phenotypes={
            _P.PM: _outcome(_R.TOXIC, _S.CRITICAL,
                            "Reduce initial dose by 50-75%. Frequent INR monitoring required. "
                            "Consider alternative anticoagulants."),
            _P.IM: _outcome(_R.ADJUST_DOSAGE, _S.HIGH,
                            "Reduce initial dose by 25-50%. Increase INR monitoring frequency."),
            _P.NM: _outcome(_R.SAFE, _S.NONE, "Use standard dosing with routine INR monitoring."),
            _P.RM: _outcome(_R.SAFE, _S.NONE, "Use standard dosing with routine INR monitoring."),
        },
    ),
    DrugGeneRule(
        drug="SIMVASTATIN",
        gene="SLCO1B1",
        phenotypes={
            _P.PM: _outcome(_R.TOXIC, _S.HIGH,
                            "Avoid simvastatin doses >20mg/day. Consider alternative statins "
                            "(pravastatin, rosuvastatin)."),
            _P.IM: _outcome(_R.ADJUST_DOSAGE, _S.MODERATE,
                            "Limit simvastatin dose to ≤40mg/day. Monitor for myopathy symptoms."),
            _P.NM: _outcome(_R.SAFE, _S.NONE, "Use standard dosing up to 80mg/day with routine monitoring."),
        },
    ),
    DrugGeneRule(
        drug="AZATHIOPRINE",
        gene="TPMT",
        phenotypes={
            _P.PM: _outcome(_R.TOXIC, _S.CRITICAL,
                            "Reduce dose to 10% of standard dose or avoid. Consider alternative immunosuppressants."),
            _P.IM: _outcome(_R.ADJUST_DOSAGE, _S.HIGH,
                            "Reduce dose to 30-70% of standard dose. Monitor CBC weekly for 4 weeks, then monthly."),
            _P.NM: _outcome(_R.SAFE, _S.NONE, "Use standard dosing with routine CBC monitoring."),
            _P.RM: _outcome(_R.SAFE, _S.NONE, "Use standard dosing with routine monitoring."),
        },
    ),
    DrugGeneRule(
        drug="FLUOROURACIL",
        gene="DPYD",
        phenotypes={
            _P.PM: _outcome(_R.TOXIC, _S.CRITICAL, "Avoid fluorouracil. Select alternative chemotherapy regimen."),
            _P.IM: _outcome(_R.ADJUST_DOSAGE, _S.HIGH,
                            "Reduce starting dose by 50%. Increase dose based on toxicity and "
                            "therapeutic drug monitoring."),
            _P.NM: _outcome(_R.SAFE, _S.NONE, "Use standard dosing with routine toxicity monitoring."),
        },
    ),
)

CPIC_REFERENCES = {
    ("CODEINE", "CYP2D6"): "CPIC Guideline for CYP2D6 and Codeine Therapy (2014)",
    ("CLOPIDOGREL", "CYP2C19"): "CPIC Guideline for CYP2C19 and Clopidogrel Therapy (2013)",
    ("WARFARIN", "CYP2C9"): "CPIC Guideline for CYP2C9 and Warfarin Therapy (2017)",
    ("SIMVASTATIN", "SLCO1B1"): "CPIC Guideline for SLCO1B1 and Simvastatin Therapy (2014)",
    ("AZATHIOPRINE", "TPMT"): "CPIC Guideline for TPMT and Thiopurine Therapy (2018)",
    ("FLUOROURACIL", "DPYD"): "CPIC Guideline for DPYD and Fluoropyrimidine Therapy (2017)",
}

ALTERNATIVE_DRUGS = {
    "CODEINE": ["Morphine", "Hydromorphone", "Oxycodone", "Non-opioid analgesics"],
    "CLOPIDOGREL": ["Prasugrel", "Ticagrelor", "Aspirin"],
    "WARFARIN": ["Apixaban", "Rivaroxaban", "Dabigatran", "Enoxaparin"],
    "SIMVASTATIN": ["Pravastatin", "Rosuvastatin", "Atorvastatin", "Fluvastatin"],
    "AZATHIOPRINE": ["Mycophenolate", "Methotrexate", "Cyclosporine"],
    "FLUOROURACIL": ["Capecitabine alternatives", "Alternative chemotherapy regimens"],
}


def get_drug_gene_rule(drug: str, gene: str) -> DrugGeneRule | None:
    drug, gene = drug.upper(), gene.upper()
    return next((r for r in DRUG_GENE_RULES if r.drug == drug and r.gene == gene), None)


def get_genes_for_drug(drug: str) -> list[str]:
    """Genes with a rule for ``drug``, in table order. The first one is the primary gene."""
    drug = drug.upper()
    return [r.gene for r in DRUG_GENE_RULES if r.drug == drug]


def get_risk_assessment(drug: str, gene: str, phenotype: Phenotype) -> PhenotypeOutcome | None:
    """Look up the outcome for a drug/gene/phenotype.

    Returns None when no rule exists for the pair, and the Unknown outcome
    when the rule exists but does not list the phenotype.
    """
    rule = get_drug_gene_rule(drug, gene)
    if rule is None:
        return None
    return rule.phenotypes.get(phenotype, UNKNOWN_OUTCOME)


def get_cpic_reference(drug: str, gene: str) -> str:
    return CPIC_REFERENCES.get((drug.upper(), gene.upper()), f"CPIC Guideline for {gene} and {drug} Therapy")


def get_alternative_drugs(drug: str) -> list[str]:
    return list(ALTERNATIVE_DRUGS.get(drug.upper(), []))


def supported_drugs() -> list[str]:
    seen: list[str] = []
    for rule in DRUG_GENE_RULES:
        if rule.drug not in seen:
            seen.append(rule.drug)
    return seen


def gene_to_drugs() -> dict[str, list[str]]:
    """Gene -> drugs mapping derived from the rule table."""
    mapping: dict[str, list[str]] = {}
    for rule in DRUG_GENE_RULES:
        mapping.setdefault(rule.gene, []).append(rule.drug)
    return mapping
