"""
Persisted Chat Routes

Authenticated management of durable chats. Every operation is scoped to the
caller's user id; another user's chat is reported as not found.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from typing import Annotated, List

from .models import ChatOut, CreateChatRequest, MessageOut, UpdateChatRequest
from ..auth.models import UserContext
from ..auth.security import get_current_user
from ..db.chat_store import ChatStore
from .dependencies import get_chat_store

router = APIRouter(prefix="/chats", tags=["chats"])


@router.post(
    "",
    response_model=ChatOut,
    summary="Create a persisted chat",
    status_code=status.HTTP_201_CREATED,
)
async def create_chat(
    req: CreateChatRequest,
    user: Annotated[UserContext, Depends(get_current_user)],
    store: Annotated[ChatStore, Depends(get_chat_store)],
) -> ChatOut:
    chat = await store.create_chat(user.user_id, title=req.title)
    return ChatOut.model_validate(chat)


@router.get(
    "",
    response_model=List[ChatOut],
    summary="List the caller's chats, most recent first",
)
async def list_chats(
    user: Annotated[UserContext, Depends(get_current_user)],
    store: Annotated[ChatStore, Depends(get_chat_store)],
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> List[ChatOut]:
    chats = await store.list_chats(user.user_id, limit=limit, offset=offset)
    return [ChatOut.model_validate(c) for c in chats]


@router.get(
    "/{chat_id}/messages",
    response_model=List[MessageOut],
    summary="List a chat's messages, oldest first",
)
async def list_messages(
    chat_id: str,
    user: Annotated[UserContext, Depends(get_current_user)],
    store: Annotated[ChatStore, Depends(get_chat_store)],
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> List[MessageOut]:
    """
    Raises ChatNotFoundError (404) when the chat is missing or not owned by
    the caller.
    """
    messages = await store.list_messages(chat_id, user.user_id, limit=limit, offset=offset)
    return [MessageOut.model_validate(m) for m in messages]


@router.put(
    "/{chat_id}",
    response_model=ChatOut,
    summary="Rename a persisted chat",
)
async def update_chat(
    chat_id: str,
    req: UpdateChatRequest,
    user: Annotated[UserContext, Depends(get_current_user)],
    store: Annotated[ChatStore, Depends(get_chat_store)],
) -> ChatOut:
    chat = await store.update_title(chat_id, user.user_id, req.title)
    return ChatOut.model_validate(chat)


@router.delete(
    "/{chat_id}",
    summary="Delete a persisted chat and its messages",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_chat(
    chat_id: str,
    user: Annotated[UserContext, Depends(get_current_user)],
    store: Annotated[ChatStore, Depends(get_chat_store)],
) -> Response:
    await store.delete_chat(chat_id, user.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
