"""
Conversation Assembler

Builds the single generation request for one answer from the system
instructions, the retrieved passages, the prior transcript and the new user
text.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..retrieval.models import Passage
from .models import ConversationTurn, GenerationRequest


def assemble(
    system_prompt: str,
    retrieved_passages: Sequence[Passage],
    history: Sequence[ConversationTurn],
    new_user_text: str,
    tools: Optional[List[Dict[str, Any]]] = None,
) -> GenerationRequest:
    """
    Assemble a generation request.

    Passage contents go into `documents`, separate from the transcript. The
    new user turn is appended after every prior turn. Inputs are not mutated.
    """
    messages = list(history)
    messages.append(ConversationTurn.of("user", new_user_text))

    return GenerationRequest(
        system=system_prompt,
        documents=[p.content for p in retrieved_passages],
        messages=messages,
        tools=list(tools or []),
    )
