"""
Conversation Models

Transcript turns and the assembled generation request handed to the
generation client.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field


Role = Literal["user", "model", "system"]


class ConversationTurn(BaseModel):
    """
    One turn of a conversation transcript.

    A turn carries an ordered list of text segments; readers that need a
    single string use `text`.
    """

    role: Role
    content: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def of(cls, role: Role, text: str) -> "ConversationTurn":
        return cls(role=role, content=[text])

    @property
    def text(self) -> str:
        return " ".join(self.content)


class HistoryEntry(BaseModel):
    """Flattened turn as exposed by history reads."""

    role: Role
    content: str

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_turn(cls, turn: ConversationTurn) -> "HistoryEntry":
        return cls(role=turn.role, content=turn.text)


class GenerationRequest(BaseModel):
    """
    Everything the hosted model receives for one answer.

    `documents` holds retrieved passage contents and is kept apart from the
    transcript in `messages`; the new user turn is always the last message.
    """

    system: str
    documents: List[str] = Field(default_factory=list)
    messages: List[ConversationTurn] = Field(default_factory=list)
    tools: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")
