"""LLM service for pharmacogenomic clinical narratives."""

import logging
import re

from litellm import acompletion
from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_attempt, wait_exponential

from pgxboard.llm.fallback import build_fallback_narrative
from pgxboard.llm.prompts import create_narrative_prompt
from pgxboard.models.explanation import Narrative, NarrativeResult
from pgxboard.models.genotype import Phenotype
from pgxboard.models.matching import MatchedVariant
from pgxboard.utils.logging_config import get_logger

logger = logging.getLogger(__name__)

SECTION_PATTERNS = {
    field: re.compile(rf"\*\*{title}\*\*[:\s]*([\s\S]*?)(?=\*\*|$)", re.IGNORECASE)
    for field, title in (
        ("summary", "Summary"),
        ("biological_mechanism", "Biological Mechanism"),
        ("variant_interpretation", "Variant Interpretation"),
        ("clinical_impact", "Clinical Impact"),
    )
}
NUMBERED_SECTION_SPLIT = re.compile(r"\d+\.\s+\*\*")


class NarrativeGenerationError(RuntimeError):
    """Raised when the LLM returns no usable narrative."""


def parse_narrative(content: str) -> Narrative:
    """Split an LLM response into the four narrative sections.

    Bold section headers are tried first, then numbered sections. When
    neither works the whole response becomes the summary.
    """
    sections = {}
    for field, pattern in SECTION_PATTERNS.items():
        match = pattern.search(content)
        sections[field] = match.group(1).strip() if match else ""

    if sections["summary"]:
        return Narrative(**sections)

    parts = [p for p in NUMBERED_SECTION_SPLIT.split(content) if p.strip()]
    if len(parts) >= 4:
        cleaned = [p.replace("**", "").strip() for p in parts[:4]]
        return Narrative(
            summary=cleaned[0],
            biological_mechanism=cleaned[1],
            variant_interpretation=cleaned[2],
            clinical_impact=cleaned[3],
        )

    return Narrative(summary=content.strip())


class NarrativeService:
    """Clinical narrative generation with retries and a template fallback."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        temperature: float = 0.1,
        enable_logging: bool = True,
        max_attempts: int = 3,
        retry_wait: float = 1.0,
    ):
        self.model = model
        self.temperature = temperature
        self.enable_logging = enable_logging
        self.max_attempts = max_attempts
        self.retry_wait = retry_wait
        self.logger = get_logger() if enable_logging else None

    async def _complete(self, messages: list[dict]) -> str:
        response = await acompletion(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=1500,
        )
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise NarrativeGenerationError("LLM returned an empty response")
        return content.strip()

    async def generate(
        self,
        drug: str,
        gene: str,
        diplotype: str,
        phenotype: Phenotype,
        variants: list[MatchedVariant],
        recommendation: str,
    ) -> NarrativeResult:
        """Generate the narrative for one drug/gene result.

        Retries up to ``max_attempts`` times with exponential backoff, then
        falls back to the template narrative. Never raises for LLM failures.
        """
        request_id = None
        if self.logger:
            request_id = self.logger.log_request(
                drug=drug,
                gene=gene,
                phenotype=phenotype.value,
                variant_count=len(variants),
                model=self.model,
                temperature=self.temperature,
            )

        messages = create_narrative_prompt(drug, gene, diplotype, phenotype, variants, recommendation)
        attempts = 0

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(Exception),
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=self.retry_wait, min=self.retry_wait, max=8 * self.retry_wait),
            ):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    if attempts > 1:
                        logger.info(f"Retrying narrative for {drug}/{gene} (attempt {attempts}/{self.max_attempts})")
                    content = await self._complete(messages)
        except RetryError as e:
            error = e.last_attempt.exception()
            logger.warning(f"Narrative generation for {drug}/{gene} failed after {attempts} attempts: {error}")
            if self.logger:
                self.logger.log_error(request_id=request_id or "unknown", drug=drug, gene=gene, error=error)
                self.logger.log_fallback(drug, gene, f"LLM failed after {attempts} attempts")
            return NarrativeResult(
                narrative=build_fallback_narrative(drug, gene, phenotype, variants),
                used_fallback=True,
                succeeded=False,
                attempts=attempts,
            )

        narrative = parse_narrative(content)
        if self.logger:
            self.logger.log_response(
                request_id=request_id or "unknown",
                drug=drug,
                gene=gene,
                sections=narrative.model_dump(),
                attempts=attempts,
                raw_response=content[:500],
            )

        return NarrativeResult(narrative=narrative, used_fallback=False, succeeded=True, attempts=attempts)
