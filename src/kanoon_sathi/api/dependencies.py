from functools import lru_cache
from typing import Annotated, Any, Dict

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..db.chat_store import ChatStore
from ..db.session import get_async_session
from ..embeddings.embedder import Embedder
from ..llm.client import LLMClient
from ..llm.generator import GenerationClient
from ..llm.grammar import GrammarCorrector
from ..pipeline import LegalAssistantPipeline
from ..retrieval.classifier import CorpusSelector
from ..retrieval.search import SimilaritySearchClient
from ..sessions.store import InMemoryHistoryStore
from ..tools.base import dispatch_tool_call


@lru_cache
def get_llm_client() -> LLMClient:
    return LLMClient()


@lru_cache
def get_embedder() -> Embedder:
    return Embedder()


# Process-wide: anonymous conversations live as long as the process
@lru_cache
def get_history_store() -> InMemoryHistoryStore:
    return InMemoryHistoryStore(settings.max_messages_per_conversation)


def get_chat_store(
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> ChatStore:
    return ChatStore(session)


def get_search_client(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    embedder: Annotated[Embedder, Depends(get_embedder)],
) -> SimilaritySearchClient:
    return SimilaritySearchClient(session, embedder)


def get_pipeline(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    llm: Annotated[LLMClient, Depends(get_llm_client)],
    embedder: Annotated[Embedder, Depends(get_embedder)],
    history_store: Annotated[InMemoryHistoryStore, Depends(get_history_store)],
) -> LegalAssistantPipeline:
    """Wire a pipeline around the request's database session."""

    async def execute_tool(name: str, args: Dict[str, Any]) -> Any:
        return await dispatch_tool_call(name, args, session)

    grammar = GrammarCorrector(llm) if settings.grammar_correction_enabled else None

    return LegalAssistantPipeline(
        selector=CorpusSelector(llm),
        search_client=SimilaritySearchClient(session, embedder),
        generator=GenerationClient(llm, tool_executor=execute_tool),
        history_store=history_store,
        chat_store=ChatStore(session),
        grammar=grammar,
    )
