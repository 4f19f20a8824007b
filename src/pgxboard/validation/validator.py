"""Validator for benchmarking the pipeline against expected outcomes.

ARCHITECTURE:
    Cases (JSON) → Validator → AnalysisEngine → CaseResult → ValidationMetrics

Each case names a VCF file and the counts, detection state, completeness and
confidence range a curator expects for it.

Key Design:
- Semaphore for concurrency control
- Flexible input: list or dict-wrapped JSON
- VCF paths resolve relative to the case file
- A case whose analysis raises is reported as failed, not dropped
"""

import asyncio
import json
import logging
from pathlib import Path

from pgxboard.engine import AnalysisEngine
from pgxboard.models.assessment import DrugAssessment
from pgxboard.models.metrics import NOT_APPLICABLE
from pgxboard.models.validation import CaseResult, ExpectedOutcome, PipelineCase, ValidationMetrics

logger = logging.getLogger(__name__)

COMPLETENESS_TOLERANCE = 0.001


def compare_outcome(expected: ExpectedOutcome, assessments: list[DrugAssessment]) -> list[str]:
    """Differences between the expected outcome and the engine's assessments."""
    metrics = assessments[0].quality_metrics
    errors = []

    for field in ("total_records", "candidate_count", "matched_count", "unmatched_count"):
        want = getattr(expected, field)
        got = getattr(metrics, field)
        if want is not None and want != got:
            errors.append(f"{field}: expected {want}, got {got}")

    if expected.detection_state is not None and expected.detection_state != metrics.detection_state:
        errors.append(
            f"detection_state: expected {expected.detection_state.value}, got {metrics.detection_state.value}"
        )

    if expected.annotation_completeness is not None:
        want, got = expected.annotation_completeness, metrics.annotation_completeness
        if NOT_APPLICABLE in (want, got):
            if want != got:
                errors.append(f"annotation_completeness: expected {want}, got {got}")
        elif abs(float(want) - got) > COMPLETENESS_TOLERANCE:
            errors.append(f"annotation_completeness: expected {want}, got {got:.3f}")

    if expected.variants_by_gene is not None and expected.variants_by_gene != metrics.variants_by_gene:
        errors.append(f"variants_by_gene: expected {expected.variants_by_gene}, got {metrics.variants_by_gene}")

    if expected.confidence_range is not None:
        for assessment in assessments:
            score = assessment.risk_assessment.confidence_score
            if not expected.confidence_range.contains(score):
                errors.append(
                    f"{assessment.drug} confidence {score:.3f} outside "
                    f"[{expected.confidence_range.min}, {expected.confidence_range.max}]"
                )

    return errors


class Validator:
    """Validator for benchmarking the pipeline against expected outcomes."""

    def __init__(self, engine: AnalysisEngine) -> None:
        """Initialize the validator.

        Args:
            engine: Analysis engine to use for validation
        """
        self.engine = engine

    def load_cases(self, path: str | Path) -> list[PipelineCase]:
        """Load validation cases from a JSON file.

        VCF paths in the file are resolved against the file's directory.

        Raises:
            FileNotFoundError: If file does not exist
            ValueError: If JSON is invalid
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Validation case file not found: {path}")

        logger.info(f"Loading validation cases from {path}")

        try:
            with open(path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in validation case file: {str(e)}")

        # Handle both list and dict with "cases" key
        if isinstance(data, dict) and "cases" in data:
            cases_data = data["cases"]
        elif isinstance(data, list):
            cases_data = data
        else:
            raise ValueError("Invalid validation case format")

        cases = []
        for idx, case_data in enumerate(cases_data):
            try:
                case = PipelineCase(**case_data)
            except Exception as e:
                logger.warning(f"Skipping case {idx} ({case_data.get('vcf_file', '?')}): {e}")
                continue
            vcf_path = Path(case.vcf_file)
            if not vcf_path.is_absolute():
                case.vcf_file = str(path.parent / vcf_path)
            cases.append(case)

        if len(cases) < len(cases_data):
            logger.warning(f"Skipped {len(cases_data) - len(cases)} invalid cases out of {len(cases_data)}")
        logger.info(f"Loaded {len(cases)} valid validation cases")

        return cases

    async def validate_single(self, case: PipelineCase) -> CaseResult:
        """Run one case through the engine and compare with its expected outcome."""
        vcf_text = Path(case.vcf_file).read_text()
        assessments = await self.engine.analyze(vcf_text, case.drugs)
        errors = compare_outcome(case.expected, assessments)

        return CaseResult(
            vcf_file=case.vcf_file,
            description=case.description,
            passed=not errors,
            errors=errors,
            expected_state=case.expected.detection_state,
            observed_state=assessments[0].quality_metrics.detection_state,
            confidence_scores=[a.risk_assessment.confidence_score for a in assessments],
        )

    async def validate_dataset(
        self,
        cases: list[PipelineCase],
        max_concurrent: int = 3,
    ) -> tuple[ValidationMetrics, list[CaseResult]]:
        """Validate all cases.

        Args:
            cases: Validation cases
            max_concurrent: Maximum concurrent validations

        Returns:
            Overall metrics and the per-case results
        """
        logger.info(f"Starting validation of {len(cases)} cases")

        semaphore = asyncio.Semaphore(max_concurrent)

        async def validate_with_semaphore(case: PipelineCase) -> CaseResult:
            async with semaphore:
                return await self.validate_single(case)

        tasks = [validate_with_semaphore(case) for case in cases]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results = []
        for case, outcome in zip(cases, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"Validation failed for {case.vcf_file}: {outcome}")
                results.append(
                    CaseResult(
                        vcf_file=case.vcf_file,
                        description=case.description,
                        passed=False,
                        errors=[f"{type(outcome).__name__}: {str(outcome).splitlines()[0] if str(outcome) else ''}"],
                        expected_state=case.expected.detection_state,
                    )
                )
            else:
                results.append(outcome)

        metrics = ValidationMetrics()
        metrics.calculate(results)

        logger.info(
            f"Validation complete: {metrics.passed_cases}/{metrics.total_cases} passed ({metrics.pass_rate:.1%})"
        )

        return metrics, results

    async def validate_from_file(
        self,
        cases_path: str | Path,
        max_concurrent: int = 3,
    ) -> tuple[ValidationMetrics, list[CaseResult]]:
        cases = self.load_cases(cases_path)
        return await self.validate_dataset(cases, max_concurrent=max_concurrent)

    def save_results(
        self,
        metrics: ValidationMetrics,
        results: list[CaseResult],
        output_path: str | Path,
    ) -> None:
        """Save validation results to JSON file."""
        output_path = Path(output_path)

        output_data = {
            "metrics": metrics.model_dump(mode="json"),
            "results": [result.model_dump(mode="json") for result in results],
        }

        with open(output_path, "w") as f:
            json.dump(output_data, f, indent=2)

        logger.info(f"Saved validation results to {output_path}")
