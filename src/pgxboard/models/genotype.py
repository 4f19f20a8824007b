"""Genotype call models."""

from enum import Enum

from pydantic import BaseModel, Field


class Phenotype(str, Enum):
    """Metabolizer phenotype classes.

    PM: Poor Metabolizer
    IM: Intermediate Metabolizer
    NM: Normal Metabolizer
    RM: Rapid Metabolizer
    URM: Ultra-rapid Metabolizer
    """

    PM = "PM"
    IM = "IM"
    NM = "NM"
    RM = "RM"
    URM = "URM"
    UNKNOWN = "Unknown"


class GeneCall(BaseModel):
    """Diplotype and phenotype called for one gene."""

    gene: str
    diplotype: str = Field(..., description="Two allele labels, e.g. *1/*4")
    phenotype: Phenotype
    activity_score: float | None = Field(None, description="Sum of allele activity weights")
    star_alleles: list[str] = Field(default_factory=list, description="Distinct alleles observed")
    warnings: list[str] = Field(default_factory=list)

    @property
    def alleles(self) -> list[str]:
        return self.diplotype.split("/")
