"""Command-line interface for PGxBoard.

ARCHITECTURE:
    CLI Commands → AnalysisEngine/Validator → Report or JSON Output

Workflows: analyze (drug risk), inspect (VCF checks), validate (benchmarking)

Key Design:
- Typer framework for auto-help and type validation
- asyncio.run() bridges sync CLI → async engine
- Flexible I/O: stdout or JSON file output
"""

import asyncio
import json
import warnings
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv

from pgxboard.data.drug_gene_rules import get_genes_for_drug, supported_drugs
from pgxboard.engine import AnalysisEngine, AnalysisError
from pgxboard.matching.matcher import detect_pharmacogenomic_variants
from pgxboard.parsers.vcf import VCFFormatError, extract_patient_id, parse_vcf, validate_round_trip
from pgxboard.validation.validator import Validator

# Suppress litellm's async cleanup warnings (harmless internal warnings)
warnings.filterwarnings("ignore", message=".*async_success_handler.*")
warnings.filterwarnings("ignore", message=".*coroutine.*was never awaited.*")

load_dotenv()

app = typer.Typer(
    name="pgxboard",
    help="Pharmacogenomic drug risk analysis from VCF files",
    add_completion=False,
)


def _read_vcf(vcf: Path) -> str:
    if not vcf.exists():
        print(f"Error: VCF file not found: {vcf}")
        raise typer.Exit(1)
    return vcf.read_text()


@app.command()
def analyze(
    vcf: Path = typer.Argument(..., help="VCF file to analyze"),
    drugs: List[str] = typer.Option(..., "--drug", "-d", help="Drug to assess (repeatable)"),
    patient: Optional[str] = typer.Option(None, "--patient", "-p", help="Patient ID (default: from VCF)"),
    model: str = typer.Option("gpt-4o-mini", "--model", "-m", help="LLM model"),
    temperature: float = typer.Option(0.1, "--temperature", help="LLM temperature (0.0-1.0)"),
    llm: bool = typer.Option(True, "--llm/--no-llm", help="Generate narratives with the LLM"),
    log: bool = typer.Option(True, "--log/--no-log", help="Enable narrative decision logging"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file"),
) -> None:
    """Assess drug risk for a patient VCF."""
    vcf_text = _read_vcf(vcf)

    async def run_analysis() -> None:
        print(f"\nAnalyzing {vcf} for {', '.join(d.upper() for d in drugs)}...")

        engine = AnalysisEngine(llm_model=model, llm_temperature=temperature, enable_logging=log, enable_llm=llm)
        try:
            assessments = await engine.analyze(vcf_text, drugs, patient_id=patient)
        except (VCFFormatError, AnalysisError) as e:
            print(f"Error: {e}")
            raise typer.Exit(1)

        for assessment in assessments:
            print(assessment.to_report())
        print(assessments[0].quality_metrics.to_report())

        if output:
            output_data = [assessment.model_dump(mode="json") for assessment in assessments]
            with open(output, "w") as f:
                json.dump(output_data, f, indent=2)
            print(f"Saved to {output}")

    asyncio.run(run_analysis())


@app.command()
def inspect(
    vcf: Path = typer.Argument(..., help="VCF file to inspect"),
) -> None:
    """Validate a VCF and show parsing, detection and round-trip results."""
    vcf_text = _read_vcf(vcf)

    try:
        parsed = parse_vcf(vcf_text)
    except VCFFormatError as e:
        print(f"Invalid VCF: {e}")
        raise typer.Exit(1)

    detection = detect_pharmacogenomic_variants(parsed.records)
    round_trip = validate_round_trip(vcf_text)

    print(f"\nPatient: {extract_patient_id(vcf_text)}")
    print(f"Records: {len(parsed.records)} | Malformed lines skipped: {parsed.parse_errors}")
    print(
        f"Candidates: {detection.candidate_count} | Matched: {detection.matched_count} | "
        f"Unmatched: {len(detection.unmatched)}"
    )
    print(f"Detection state: {detection.state.value}")

    for variant in detection.matched:
        print(
            f"  {variant.rsid} {variant.gene} {variant.star_allele} GT={variant.genotype or '-'} "
            f"({variant.matched_by.value}, {variant.match_confidence:.2f})"
        )

    print(f"Round trip: {'PASSED' if round_trip.success else 'FAILED'}")
    for error in round_trip.errors[:10]:
        print(f"  - {error}")


@app.command()
def validate(
    cases: Path = typer.Argument(..., help="Validation cases JSON file"),
    model: str = typer.Option("gpt-4o-mini", "--model", "-m", help="LLM model"),
    temperature: float = typer.Option(0.1, "--temperature", help="LLM temperature (0.0-1.0)"),
    llm: bool = typer.Option(False, "--llm/--no-llm", help="Generate narratives with the LLM"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file"),
    max_concurrent: int = typer.Option(3, "--max-concurrent", "-c", help="Max concurrent"),
    log: bool = typer.Option(False, "--log/--no-log", help="Enable narrative decision logging"),
) -> None:
    """Validate the pipeline against expected outcomes."""

    if not cases.exists():
        print(f"Error: Validation case file not found: {cases}")
        raise typer.Exit(1)

    async def run_validation() -> None:
        engine = AnalysisEngine(llm_model=model, llm_temperature=temperature, enable_logging=log, enable_llm=llm)
        validator = Validator(engine)

        loaded = validator.load_cases(cases)
        print(f"\nLoaded {len(loaded)} validation cases")

        print("Running validation...")
        metrics, results = await validator.validate_dataset(loaded, max_concurrent=max_concurrent)

        print(metrics.to_report())

        if output:
            validator.save_results(metrics, results, output)
            print(f"\nDetailed results saved to {output}")

    asyncio.run(run_validation())


@app.command("drugs")
def list_drugs() -> None:
    """List supported drugs and their genes."""
    for drug in supported_drugs():
        print(f"{drug}: {', '.join(get_genes_for_drug(drug))}")


@app.command()
def version() -> None:
    """Show version information."""
    from pgxboard import __version__
    print(f"PGxBoard version {__version__}")


if __name__ == "__main__":
    app()
