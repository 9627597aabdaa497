from __future__ import annotations

from ..llm.client import LLMClient
from ..prompts import build_grammar_prompt


class GrammarCorrector:
    """Rewrites user text with corrected grammar before classification."""

    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    async def correct(
        self,
        text: str,
        target_language: str = "English",
        preserve_style: bool = False,
    ) -> str:
        corrected = await self._llm.complete(
            build_grammar_prompt(target_language, preserve_style),
            text,
            temperature=0.0,
        )
        return corrected or text
