"""Logging configuration for PGxBoard narrative decisions.

Provides structured logging for LLM narrative requests, fallbacks and the
per-drug decisions they explain.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any


class NarrativeDecisionLogger:
    """Logger for narrative generation and drug decisions with structured output."""

    def __init__(self, log_dir: Path | None = None, enable_file_logging: bool = True):
        """Initialize the narrative decision logger.

        Args:
            log_dir: Directory for log files. Defaults to ./logs
            enable_file_logging: Whether to write JSONL records to files
        """
        self.logger = logging.getLogger("pgxboard.llm")
        self.logger.setLevel(logging.INFO)

        # Remove existing handlers to avoid duplicates
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
        self.logger.addHandler(console_handler)

        self.file_handler = None
        self.log_file = None
        if enable_file_logging:
            if log_dir is None:
                log_dir = Path("./logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            timestamp = datetime.now().strftime("%Y%m%d")
            self.log_file = log_dir / f"narrative_decisions_{timestamp}.jsonl"

            # JSON lines are written straight to the stream, never through records
            self.file_handler = logging.FileHandler(self.log_file)
            self.file_handler.setLevel(logging.DEBUG)
            self.file_handler.setFormatter(logging.Formatter("%(message)s"))
            self.file_handler.addFilter(lambda record: record.levelno == logging.DEBUG)
            self.logger.addHandler(self.file_handler)

            self.logger.info(f"Narrative decision logging enabled: {self.log_file}")

    def _write(self, entry: dict[str, Any]) -> None:
        if self.file_handler:
            self.file_handler.stream.write(json.dumps(entry) + "\n")
            self.file_handler.flush()

    def log_request(
        self,
        drug: str,
        gene: str,
        phenotype: str,
        variant_count: int,
        model: str,
        temperature: float,
    ) -> str:
        """Log a narrative request.

        Returns:
            Request ID for tracking
        """
        request_id = f"{drug}_{gene}_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}"

        self._write(
            {
                "timestamp": datetime.now().isoformat(),
                "event_type": "narrative_request",
                "request_id": request_id,
                "input": {
                    "drug": drug,
                    "gene": gene,
                    "phenotype": phenotype,
                    "variant_count": variant_count,
                    "model": model,
                    "temperature": temperature,
                },
            }
        )
        self.logger.info(f"Narrative Request: {drug}/{gene} ({phenotype}) using {model}")
        return request_id

    def log_response(
        self,
        request_id: str,
        drug: str,
        gene: str,
        sections: dict[str, str],
        attempts: int,
        raw_response: str | None = None,
    ) -> None:
        entry = {
            "timestamp": datetime.now().isoformat(),
            "event_type": "narrative_response",
            "request_id": request_id,
            "output": {"drug": drug, "gene": gene, "attempts": attempts, "sections": sections},
        }
        if raw_response:
            entry["raw_response"] = raw_response

        self._write(entry)
        self.logger.info(f"Narrative Generated: {drug}/{gene} after {attempts} attempt(s)")

    def log_error(self, request_id: str, drug: str, gene: str, error: Exception) -> None:
        self._write(
            {
                "timestamp": datetime.now().isoformat(),
                "event_type": "narrative_error",
                "request_id": request_id,
                "input": {"drug": drug, "gene": gene},
                "error": {"type": type(error).__name__, "message": str(error)},
            }
        )
        self.logger.error(f"Narrative Error: {drug}/{gene} - {error}")

    def log_fallback(self, drug: str, gene: str, reason: str) -> None:
        self._write(
            {
                "timestamp": datetime.now().isoformat(),
                "event_type": "narrative_fallback",
                "input": {"drug": drug, "gene": gene},
                "reason": reason,
            }
        )
        self.logger.warning(f"Narrative Fallback: {drug}/{gene} - {reason}")

    def log_decision_summary(
        self,
        drug: str,
        gene: str,
        diplotype: str,
        phenotype: str,
        risk_label: str,
        confidence_score: float,
        variants: list[str],
        recommendation: str,
    ) -> None:
        """Log a high-level decision summary for easy review."""
        summary = (
            f"\n{'='*80}\n"
            f"DECISION SUMMARY\n"
            f"{'='*80}\n"
            f"Drug: {drug}\n"
            f"Gene: {gene}\n"
            f"Diplotype: {diplotype} ({phenotype})\n"
            f"{'='*80}\n"
            f"RISK: {risk_label}\n"
            f"Confidence: {confidence_score:.1%}\n"
            f"{'='*80}\n"
            f"VARIANTS:\n"
        )
        for variant in variants or ["none detected"]:
            summary += f"  • {variant}\n"
        summary += f"{'='*80}\nRECOMMENDATION:\n{recommendation}\n{'='*80}\n"

        self.logger.info(summary)


# Global logger instance
_global_logger: NarrativeDecisionLogger | None = None


def get_logger(log_dir: Path | None = None, enable_file_logging: bool = True) -> NarrativeDecisionLogger:
    """Get or create the global narrative decision logger."""
    global _global_logger

    if _global_logger is None:
        _global_logger = NarrativeDecisionLogger(log_dir=log_dir, enable_file_logging=enable_file_logging)

    return _global_logger


def reset_logger() -> None:
    """Reset the global logger (mainly for testing)."""
    global _global_logger
    _global_logger = None
