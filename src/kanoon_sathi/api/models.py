"""
API Models

Pydantic models used for request/response validation across the chat,
history, persisted-chat and search endpoints.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from ..conversation.models import Role
from ..retrieval.models import CorpusTag, Passage, RetrievalOptions


# ---------------------------------------------------------------------
# Chat Models
# ---------------------------------------------------------------------

class ChatRequest(BaseModel):
    """
    One user message for the assistant.

    `conversation_id` names an in-memory conversation for anonymous callers,
    or a persisted chat id when a bearer token is supplied.
    """
    text: str = Field(..., min_length=1)
    conversation_id: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


class ChatResponse(BaseModel):
    text: str

    model_config = ConfigDict(extra="forbid")


class ConversationSummary(BaseModel):
    """In-memory conversation with its most recent message."""
    conversation_id: str
    last_message: Optional[str] = None
    last_role: Optional[Role] = None

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Persisted Chat Models
# ---------------------------------------------------------------------

class CreateChatRequest(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255)

    model_config = ConfigDict(extra="forbid")


class UpdateChatRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)

    model_config = ConfigDict(extra="forbid")


class ChatOut(BaseModel):
    id: uuid.UUID
    title: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageOut(BaseModel):
    id: uuid.UUID
    sender: Role
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------
# Search Models
# ---------------------------------------------------------------------

class SearchRequest(BaseModel):
    """
    Run one corpus retriever directly.

    `corpus` must name a real corpus; `none` is rejected.
    """
    corpus: CorpusTag
    query: str = Field(..., min_length=1)
    options: RetrievalOptions = Field(default_factory=RetrievalOptions)

    model_config = ConfigDict(extra="forbid")


class SearchResponse(BaseModel):
    corpus: CorpusTag
    passages: List[Passage] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")
