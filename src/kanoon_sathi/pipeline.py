"""
Legal Assistant Pipeline

Per-request RAG flow:

    RECEIVED -> CORRECTED (optional) -> CLASSIFIED -> RETRIEVED
             -> ASSEMBLED -> GENERATED -> PERSISTED | CACHED

Failure policy
--------------
- Grammar correction and classification degrade gracefully: a failure (or
  timeout) falls back to the raw text / no retrieval.
- Any later stage failure aborts the request; the caller sees a generic
  server error.
- History is written only after generation succeeded, so an aborted request
  leaves both the in-memory and the persisted history unchanged.

History source is chosen per request: a user id selects the durable chat
store, otherwise the in-memory history store is used. The two never mix.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, List, Optional, TypeVar

from .config import settings
from .conversation.assembler import assemble
from .conversation.models import ConversationTurn
from .core.errors import KanoonError, StageTimeoutError
from .db.chat_store import ChatStore
from .llm.generator import GenerationClient
from .llm.grammar import GrammarCorrector
from .prompts import ASSISTANT_SYSTEM_PROMPT
from .retrieval.classifier import CorpusSelector
from .retrieval.models import CorpusTag, Passage, RetrievalOptions
from .retrieval.retriever import get_retriever
from .retrieval.search import SimilaritySearchClient
from .sessions.store import HistoryStore
from .tools.definitions import TOOL_DEFINITIONS

logger = logging.getLogger("kanoon.pipeline")

T = TypeVar("T")


class PipelineStage(str, Enum):
    RECEIVED = "received"
    CORRECTED = "corrected"
    CLASSIFIED = "classified"
    RETRIEVED = "retrieved"
    ASSEMBLED = "assembled"
    GENERATED = "generated"
    PERSISTED = "persisted"
    CACHED = "cached"


class LegalAssistantPipeline:
    def __init__(
        self,
        selector: CorpusSelector,
        search_client: SimilaritySearchClient,
        generator: GenerationClient,
        history_store: HistoryStore,
        chat_store: Optional[ChatStore] = None,
        grammar: Optional[GrammarCorrector] = None,
        system_prompt: str = ASSISTANT_SYSTEM_PROMPT,
        retrieval_options: Optional[RetrievalOptions] = None,
        stage_timeout: Optional[float] = None,
    ) -> None:
        self._selector = selector
        self._search_client = search_client
        self._generator = generator
        self._history_store = history_store
        self._chat_store = chat_store
        self._grammar = grammar
        self._system_prompt = system_prompt
        self._retrieval_options = retrieval_options or RetrievalOptions(k=settings.retrieval_k)
        self._stage_timeout = stage_timeout or settings.stage_timeout_seconds

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(
        self,
        text: str,
        conversation_id: str,
        user_id: Optional[str] = None,
    ) -> str:
        """
        Answer one user message and record the exchange.

        Parameters
        ----------
        text : str
            Raw user text.
        conversation_id : str
            In-memory conversation id, or persisted chat id when user_id is set.
        user_id : Optional[str]
            Authenticated user; selects persisted history.

        Returns
        -------
        str
            The generated answer (never empty).
        """
        logger.info(
            "Pipeline %s: conversation=%s authenticated=%s",
            PipelineStage.RECEIVED.value,
            conversation_id,
            user_id is not None,
        )

        query = await self._correct(text)
        tag = await self._classify(query)
        passages = await self._retrieve(tag, query)

        history = await self._load_history(conversation_id, user_id)
        request = assemble(
            self._system_prompt,
            passages,
            history,
            query,
            tools=TOOL_DEFINITIONS,
        )
        logger.debug(
            "Pipeline %s: documents=%d turns=%d",
            PipelineStage.ASSEMBLED.value,
            len(request.documents),
            len(request.messages),
        )

        answer = await self._run_stage(PipelineStage.GENERATED, self._generator.generate(request))

        await self._record(conversation_id, user_id, text, answer)
        return answer

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _run_stage(self, stage: PipelineStage, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._stage_timeout)
        except asyncio.TimeoutError as exc:
            raise StageTimeoutError(stage.value, self._stage_timeout) from exc

    async def _correct(self, text: str) -> str:
        if self._grammar is None:
            return text
        try:
            corrected = await self._run_stage(PipelineStage.CORRECTED, self._grammar.correct(text))
        except Exception:
            logger.warning("Grammar correction failed; using raw text", exc_info=True)
            return text
        logger.debug("Corrected query: %r", corrected)
        return corrected

    async def _classify(self, query: str) -> CorpusTag:
        try:
            return await self._run_stage(PipelineStage.CLASSIFIED, self._selector.classify(query))
        except StageTimeoutError:
            logger.warning("Classification timed out; continuing without retrieval")
            return CorpusTag.NONE

    async def _retrieve(self, tag: CorpusTag, query: str) -> List[Passage]:
        if tag is CorpusTag.NONE:
            return []
        retriever = get_retriever(tag, self._search_client)
        return await self._run_stage(
            PipelineStage.RETRIEVED,
            retriever.retrieve(query, self._retrieval_options),
        )

    async def _load_history(
        self,
        conversation_id: str,
        user_id: Optional[str],
    ) -> List[ConversationTurn]:
        if user_id is None:
            return self._history_store.get(conversation_id)
        return await self._run_stage(
            PipelineStage.ASSEMBLED,
            self._require_chat_store().get_history(conversation_id, user_id),
        )

    async def _record(
        self,
        conversation_id: str,
        user_id: Optional[str],
        text: str,
        answer: str,
    ) -> None:
        if user_id is None:
            self._history_store.append(
                conversation_id,
                [ConversationTurn.of("user", text), ConversationTurn.of("model", answer)],
            )
            logger.info("Pipeline %s: conversation=%s", PipelineStage.CACHED.value, conversation_id)
            return

        store = self._require_chat_store()

        async def persist() -> None:
            await store.append_message(conversation_id, user_id, "user", text)
            await store.append_message(conversation_id, user_id, "model", answer)

        await self._run_stage(PipelineStage.PERSISTED, persist())
        logger.info("Pipeline %s: chat=%s", PipelineStage.PERSISTED.value, conversation_id)

    def _require_chat_store(self) -> ChatStore:
        if self._chat_store is None:
            raise KanoonError("Authenticated request but no chat store is configured")
        return self._chat_store
