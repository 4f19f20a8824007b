"""LLM narrative generation."""

from pgxboard.llm.fallback import build_fallback_narrative, validate_citations
from pgxboard.llm.service import NarrativeGenerationError, NarrativeService, parse_narrative

__all__ = [
    "NarrativeService",
    "NarrativeGenerationError",
    "build_fallback_narrative",
    "parse_narrative",
    "validate_citations",
]
