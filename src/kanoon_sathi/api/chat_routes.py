"""
Chat Routes: Legal Assistant Conversational Interface

This module exposes the pipeline over HTTP:

- POST /chat                         answer one message
- GET  /chat/conversations           list in-memory conversations
- GET  /chat/{conversation_id}/history  read an in-memory transcript

Security Model
--------------
A bearer token is optional on POST /chat. With a token, `conversation_id`
is a persisted chat id owned by the caller; without one, the conversation
lives in the process-wide in-memory history store.
"""

from fastapi import APIRouter, Depends, status
from typing import Annotated, List, Optional

from .models import ChatRequest, ChatResponse, ConversationSummary
from ..auth.models import UserContext
from ..auth.security import get_optional_user
from ..conversation.models import HistoryEntry
from ..pipeline import LegalAssistantPipeline
from ..sessions.store import InMemoryHistoryStore
from .dependencies import get_history_store, get_pipeline

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post(
    "",
    response_model=ChatResponse,
    summary="Ask the legal assistant",
    status_code=status.HTTP_200_OK,
)
async def chat(
    req: ChatRequest,
    user: Annotated[Optional[UserContext], Depends(get_optional_user)],
    pipeline: Annotated[LegalAssistantPipeline, Depends(get_pipeline)],
) -> ChatResponse:
    """
    Run the retrieval-augmented pipeline for one user message.

    Pipeline failures propagate to the global exception handler, which
    returns a generic 500; an unknown persisted chat yields 404.
    """
    answer = await pipeline.run(
        req.text,
        req.conversation_id,
        user_id=user.user_id if user else None,
    )
    return ChatResponse(text=answer)


@router.get(
    "/conversations",
    response_model=List[ConversationSummary],
    summary="List in-memory conversations",
)
def list_conversations(
    store: Annotated[InMemoryHistoryStore, Depends(get_history_store)],
) -> List[ConversationSummary]:
    return [
        ConversationSummary(
            conversation_id=conversation_id,
            last_message=last.text if last else None,
            last_role=last.role if last else None,
        )
        for conversation_id, last in store.conversations()
    ]


@router.get(
    "/{conversation_id}/history",
    response_model=List[HistoryEntry],
    summary="Read an in-memory conversation transcript",
)
def get_history(
    conversation_id: str,
    store: Annotated[InMemoryHistoryStore, Depends(get_history_store)],
) -> List[HistoryEntry]:
    """Unknown conversations return an empty list."""
    return [HistoryEntry.from_turn(turn) for turn in store.get(conversation_id)]
