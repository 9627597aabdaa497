"""
Corpus Selector

Asks the hosted model which legal corpus a query belongs to and maps the
free-text answer onto the closed CorpusTag enum.

The mapping is an explicit, ordered priority table. The first row whose
substrings all occur in the (lower-cased) answer wins, so an answer naming
both "criminal" and "procedure" resolves to CRIMINAL_PROCEDURE and never to
plain CRIMINAL. Empty or unrecognised answers resolve to NONE.

If the classification call fails, the selector returns NONE and the pipeline
answers without retrieval.
"""

from __future__ import annotations

import logging
from typing import Final, Tuple

from ..config import settings
from ..llm.client import LLMClient
from ..prompts import CLASSIFIER_SYSTEM_PROMPT
from .models import CorpusTag

logger = logging.getLogger("kanoon.classifier")


CLASSIFICATION_PRIORITY: Final[Tuple[Tuple[Tuple[str, ...], CorpusTag], ...]] = (
    (("criminal", "procedure"), CorpusTag.CRIMINAL_PROCEDURE),
    (("criminal",), CorpusTag.CRIMINAL),
    (("civil",), CorpusTag.CIVIL),
    (("constitution",), CorpusTag.CONSTITUTION),
)

# Used for empty, unrecognised and failed classifications
FALLBACK_TAG: Final[CorpusTag] = CorpusTag.NONE


def parse_classification(response: str | None) -> CorpusTag:
    """
    Map a raw classifier answer onto a CorpusTag.
    """
    normalized = (response or "").strip().lower()
    if not normalized:
        return FALLBACK_TAG

    for required, tag in CLASSIFICATION_PRIORITY:
        if all(token in normalized for token in required):
            return tag

    return FALLBACK_TAG


class CorpusSelector:
    def __init__(self, llm: LLMClient, model: str | None = None) -> None:
        self._llm = llm
        self._model = model or settings.classifier_model

    async def classify(self, query: str) -> CorpusTag:
        """
        Classify a query's legal domain.

        Never raises for upstream failures: any error from the model call is
        logged and resolves to CorpusTag.NONE.
        """
        try:
            answer = await self._llm.complete(
                CLASSIFIER_SYSTEM_PROMPT,
                query,
                temperature=0.0,
                model=self._model,
            )
        except Exception:
            logger.warning("Classification failed; continuing without retrieval", exc_info=True)
            return FALLBACK_TAG

        tag = parse_classification(answer)
        logger.info("Classified query as %s (raw=%r)", tag.value, answer)
        return tag
