"""Pipeline validation and benchmarking models.

CONCEPTUAL OVERVIEW:
===================

A pipeline validation case pairs a VCF file with the outcome a curator
documented for it: how many records it holds, how many belong to the gene
panel, how many should match the reference table, which detection state it
should land in and the range the confidence score must fall into.

1. EXPECTED OUTCOMES
   - Counts and detection state are exact expectations
   - Confidence is checked against a range, never a single value
   - Annotation completeness may be expected as "N/A"

2. DETECTION STATE CONFUSION TRACKING
   - Detection state is a five-way classification, so per-state
     precision/recall shows which scenarios the pipeline confuses

3. FAILURE ANALYSIS
   - Each failed case keeps its list of mismatches for review
"""

from pydantic import BaseModel, Field

from pgxboard.models.matching import DetectionState


class ConfidenceRange(BaseModel):
    min: float = Field(0.0, ge=0.0, le=1.0)
    max: float = Field(1.0, ge=0.0, le=1.0)

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


class ExpectedOutcome(BaseModel):
    """Documented outcome for one VCF file. Unset fields are not checked."""

    total_records: int | None = None
    candidate_count: int | None = None
    matched_count: int | None = None
    unmatched_count: int | None = None
    detection_state: DetectionState | None = None
    annotation_completeness: float | str | None = None
    confidence_range: ConfidenceRange | None = None
    variants_by_gene: dict[str, int] | None = None


class PipelineCase(BaseModel):
    """One validation case: a VCF file, the drugs to analyse and the expected outcome."""

    description: str = ""
    vcf_file: str
    drugs: list[str] = Field(default_factory=lambda: ["CODEINE"])
    expected: ExpectedOutcome = Field(default_factory=ExpectedOutcome)


class CaseResult(BaseModel):
    """Result of running one case through the pipeline."""

    vcf_file: str
    description: str = ""
    passed: bool
    errors: list[str] = Field(default_factory=list)
    expected_state: DetectionState | None = None
    observed_state: DetectionState | None = None
    confidence_scores: list[float] = Field(default_factory=list)


class StateMetrics(BaseModel):
    """Precision/recall for one detection state."""

    state: DetectionState
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    precision: float = 0.0
    recall: float = 0.0
    f1_score: float = 0.0

    def calculate(self) -> None:
        """Calculate precision, recall, and F1 score."""
        if self.true_positives + self.false_positives > 0:
            self.precision = self.true_positives / (self.true_positives + self.false_positives)
        else:
            self.precision = 0.0

        if self.true_positives + self.false_negatives > 0:
            self.recall = self.true_positives / (self.true_positives + self.false_negatives)
        else:
            self.recall = 0.0

        if self.precision + self.recall > 0:
            self.f1_score = 2 * (self.precision * self.recall) / (self.precision + self.recall)
        else:
            self.f1_score = 0.0


class ValidationMetrics(BaseModel):
    """Overall validation metrics across all cases."""

    total_cases: int = 0
    passed_cases: int = 0
    pass_rate: float = 0.0
    average_confidence: float = 0.0
    state_metrics: dict[str, StateMetrics] = Field(default_factory=dict)
    failure_analysis: list[dict[str, str]] = Field(default_factory=list)

    def add_result(self, result: CaseResult) -> None:
        self.total_cases += 1
        if result.passed:
            self.passed_cases += 1
        else:
            self.failure_analysis.append(
                {
                    "vcf_file": result.vcf_file,
                    "description": result.description,
                    "errors": "; ".join(result.errors),
                }
            )

        if result.expected_state is None or result.observed_state is None:
            return

        for state in (result.expected_state, result.observed_state):
            if state.value not in self.state_metrics:
                self.state_metrics[state.value] = StateMetrics(state=state)

        if result.expected_state == result.observed_state:
            self.state_metrics[result.expected_state.value].true_positives += 1
        else:
            self.state_metrics[result.expected_state.value].false_negatives += 1
            self.state_metrics[result.observed_state.value].false_positives += 1

    def calculate(self, results: list[CaseResult]) -> None:
        """Calculate overall metrics from results."""
        if not results:
            return

        for result in results:
            self.add_result(result)

        if self.total_cases > 0:
            self.pass_rate = self.passed_cases / self.total_cases

        scores = [s for r in results for s in r.confidence_scores]
        self.average_confidence = sum(scores) / len(scores) if scores else 0.0

        for metrics in self.state_metrics.values():
            metrics.calculate()

    def to_report(self) -> str:
        lines = [
            "=" * 80,
            "PIPELINE VALIDATION REPORT",
            "=" * 80,
            f"\nTotal Cases: {self.total_cases}",
            f"Passed: {self.passed_cases}",
            f"Pass Rate: {self.pass_rate:.2%}",
            f"Average Confidence: {self.average_confidence:.2%}",
        ]

        if self.state_metrics:
            lines.append(f"\n{'-' * 80}")
            lines.append("DETECTION STATE METRICS")
            lines.append(f"{'-' * 80}")
            for state in DetectionState:
                if state.value in self.state_metrics:
                    metrics = self.state_metrics[state.value]
                    lines.append(f"\n{state.value}:")
                    lines.append(f"  Precision: {metrics.precision:.2%}")
                    lines.append(f"  Recall: {metrics.recall:.2%}")
                    lines.append(
                        f"  TP: {metrics.true_positives}, "
                        f"FP: {metrics.false_positives}, "
                        f"FN: {metrics.false_negatives}"
                    )

        if self.failure_analysis:
            lines.append(f"\n{'-' * 80}")
            lines.append(f"FAILURE ANALYSIS ({len(self.failure_analysis)} failed)")
            lines.append(f"{'-' * 80}")
            for idx, failure in enumerate(self.failure_analysis[:10], 1):
                lines.append(f"\n{idx}. {failure['vcf_file']} {failure['description']}".rstrip())
                lines.append(f"   {failure['errors']}")

            if len(self.failure_analysis) > 10:
                lines.append(f"\n... and {len(self.failure_analysis) - 10} more failures")

        lines.append(f"\n{'=' * 80}")
        return "\n".join(lines)
