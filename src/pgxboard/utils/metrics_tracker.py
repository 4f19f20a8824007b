"""Run-level counters for the analysis pipeline.

One tracker lives on an AnalysisEngine and accumulates across analyses,
so the success rates cover every VCF the engine has processed.
"""

import logging
import time

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class TrackerSummary(BaseModel):
    vcf_parsing_success_rate: float = 0.0
    round_trip_success_rate: float = 0.0
    variant_matching_rate: float = 0.0
    average_confidence: float = 0.0
    llm_success_rate: float = 0.0
    contradiction_rate: float = 0.0
    fallback_usage_rate: float = 0.0
    average_analysis_seconds: float = 0.0
    total_analyses: int = 0

    def to_report(self) -> str:
        return (
            f"Analyses: {self.total_analyses} | Avg time: {self.average_analysis_seconds:.2f}s\n"
            f"VCF parsing: {self.vcf_parsing_success_rate:.1%} | Round trip: {self.round_trip_success_rate:.1%} | "
            f"Matching: {self.variant_matching_rate:.1%}\n"
            f"Avg confidence: {self.average_confidence:.1%} | LLM success: {self.llm_success_rate:.1%} | "
            f"Contradictions: {self.contradiction_rate:.1%} | Fallbacks: {self.fallback_usage_rate:.1%}\n"
        )


def _rate(numerator: int, denominator: int) -> float:
    return numerator / denominator if denominator else 0.0


def _average(total: float, count: int) -> float:
    return total / count if count else 0.0


class MetricsTracker:
    """Counts parsing, matching, LLM and contradiction outcomes across analyses."""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.parsing_attempts = 0
        self.parsing_successes = 0
        self.round_trip_attempts = 0
        self.round_trip_successes = 0
        self.variants_matched = 0
        self.variants_unmatched = 0
        self.confidence_total = 0.0
        self.confidence_count = 0
        self.llm_attempts = 0
        self.llm_successes = 0
        self.contradiction_checks = 0
        self.contradictions_detected = 0
        self.narratives = 0
        self.fallbacks_used = 0
        self.duration_total = 0.0
        self.completed_analyses = 0

    def start_analysis(self) -> float:
        """Return the start time to pass back to ``end_analysis``.

        Concurrent analyses share one tracker, so no per-run state is kept here.
        """
        return time.perf_counter()

    def end_analysis(self, started_at: float) -> None:
        self.duration_total += time.perf_counter() - started_at
        self.completed_analyses += 1

    def track_parsing(self, success: bool) -> None:
        self.parsing_attempts += 1
        self.parsing_successes += int(success)

    def track_round_trip(self, success: bool) -> None:
        self.round_trip_attempts += 1
        self.round_trip_successes += int(success)

    def track_matching(self, matched: int, unmatched: int) -> None:
        self.variants_matched += matched
        self.variants_unmatched += unmatched

    def track_confidence(self, score: float) -> None:
        self.confidence_total += score
        self.confidence_count += 1

    def track_llm_call(self, success: bool) -> None:
        self.llm_attempts += 1
        self.llm_successes += int(success)

    def track_contradiction_check(self, contradictions_found: int) -> None:
        self.contradiction_checks += 1
        if contradictions_found > 0:
            self.contradictions_detected += 1

    def track_narrative(self, used_fallback: bool) -> None:
        self.narratives += 1
        self.fallbacks_used += int(used_fallback)

    def summary(self) -> TrackerSummary:
        return TrackerSummary(
            vcf_parsing_success_rate=_rate(self.parsing_successes, self.parsing_attempts),
            round_trip_success_rate=_rate(self.round_trip_successes, self.round_trip_attempts),
            variant_matching_rate=_rate(self.variants_matched, self.variants_matched + self.variants_unmatched),
            average_confidence=_average(self.confidence_total, self.confidence_count),
            llm_success_rate=_rate(self.llm_successes, self.llm_attempts),
            contradiction_rate=_rate(self.contradictions_detected, self.contradiction_checks),
            fallback_usage_rate=_rate(self.fallbacks_used, self.narratives),
            average_analysis_seconds=_average(self.duration_total, self.completed_analyses),
            total_analyses=self.completed_analyses,
        )

    def log_summary(self) -> None:
        logger.info(f"Pipeline metrics summary:\n{self.summary().to_report()}")
