"""
AI-based fix generator: asks Gemini for structured edits.
"""

from __future__ import annotations

import asyncio

import yaml
from google.genai.types import GenerateContentConfig

from codeheal.core.log import logger
from codeheal.core.prompts import FIX_SUGGESTION_PROMPT
from codeheal.core.retry import TRANSIENT_ERRORS, with_retry
from codeheal.fixes.base import FixGenerator
from codeheal.schema.defect import Defect
from codeheal.schema.fix import AIFixResponse, CandidateFix, GeneratorKind
from codeheal.util.text import split_lines

__all__ = ("AIFixGenerator", "numbered_excerpt")

SYSTEM_PROMPT = "You repair source code defects reported by static analyzers. Reply with JSON only."


def numbered_excerpt(text: str, line: int | None, radius: int) -> tuple[str, int, int]:
    """Lines around ``line`` prefixed with their 1-based numbers. Whole text without a line."""
    lines = split_lines(text)
    if line is None:
        first, last = 1, len(lines)
    else:
        first = max(1, line - radius)
        last = min(len(lines), line + radius)
    width = len(str(last))
    excerpt = "\n".join(f"{n:>{width}} | {lines[n - 1]}" for n in range(first, last + 1))
    return excerpt, first, last


class AIFixGenerator(FixGenerator):
    kind = GeneratorKind.external_ai

    def __init__(
        self,
        client=None,
        model: str = "gemini-3-flash-preview",
        context_lines: int = 20,
        timeout_seconds: float = 60.0,
        max_retries: int = 3,
    ):
        self.client = client
        self.model = model
        self.context_lines = context_lines
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries

    async def generate(self, defect: Defect, text: str) -> list[CandidateFix]:
        return await self.suggest(defect, text)

    async def suggest(self, defect: Defect, text_context: str) -> list[CandidateFix]:
        """
        Ask the model for fixes. Never raises: any failure is logged
        and yields no candidates.
        """
        if self.client is None:
            return []

        excerpt, first, last = numbered_excerpt(text_context, defect.line, self.context_lines)
        defect_data = yaml.safe_dump(
            defect.model_dump(mode="json", exclude_none=True),
            sort_keys=False,
            indent=2,
            width=1024,
            allow_unicode=True,
            default_flow_style=False,
        )
        prompt = FIX_SUGGESTION_PROMPT.format(
            defect=defect_data,
            first_line=first,
            last_line=last,
            excerpt=excerpt,
        )

        try:
            raw_text = await self._call_model(prompt)
            response = AIFixResponse.model_validate_json(raw_text)
        except Exception as e:
            logger.warning(f"AI fix suggestion failed for '{defect.message}': {type(e).__name__}: {e}")
            return []

        return [
            CandidateFix(
                title=item.title,
                description=item.description,
                edits=item.edits,
                confidence=item.confidence,
                source=self.kind,
            )
            for item in response.suggestions
            if item.edits
        ]

    async def _call_model(self, prompt: str) -> str:
        """Call Gemini with retry + timeout."""

        async def _do_call() -> str:
            resp = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=GenerateContentConfig(
                        response_mime_type="application/json",
                        response_json_schema=AIFixResponse.model_json_schema(),
                        temperature=1.0,
                        system_instruction=SYSTEM_PROMPT,
                    ),
                ),
                timeout=self.timeout_seconds,
            )
            return resp.text or ""

        return await with_retry(
            _do_call,
            max_retries=self.max_retries,
            retryable=TRANSIENT_ERRORS,
            label="gemini-fix-suggestion",
        )
