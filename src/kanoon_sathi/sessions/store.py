"""
History Store

Conversation history storage for unauthenticated chat sessions.

The pipeline only depends on the `HistoryStore` interface (`get` / `append`),
so the process-wide in-memory implementation can be swapped for a bounded
or durable backend without touching pipeline logic.

Design choices
--------------
- In-memory only (no persistence across process restarts).
- Unbounded by default: conversations are never evicted and their growth is
  not limited unless `max_messages_per_conversation` is configured.
- Each `get` / `append` call is atomic under a re-entrant lock. Concurrent
  requests on the same conversation are NOT serialised; their appends may
  interleave (last writer wins).
- Copy-on-read semantics (callers cannot mutate internal state).
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Tuple
from threading import RLock

from ..conversation.models import ConversationTurn


class HistoryStore(Protocol):
    """Minimal interface the pipeline needs from a history backend."""

    def get(self, conversation_id: str) -> List[ConversationTurn]:
        ...

    def append(self, conversation_id: str, turns: List[ConversationTurn]) -> None:
        ...


class InMemoryHistoryStore:
    """
    In-memory store mapping conversation IDs to ordered lists of turns.
    """

    def __init__(self, max_messages_per_conversation: Optional[int] = None) -> None:
        """
        Initialize a new InMemoryHistoryStore.

        Parameters
        ----------
        max_messages_per_conversation : Optional[int]
            If provided, each conversation keeps at most this many most recent
            turns. If None, history is unbounded.
        """
        self._store: Dict[str, List[ConversationTurn]] = {}
        self._lock = RLock()
        self._max_messages = max_messages_per_conversation

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def get(self, conversation_id: str) -> List[ConversationTurn]:
        """
        Return the transcript for a conversation (empty list if unknown).

        The returned list is a shallow copy; turns themselves are immutable.
        """
        with self._lock:
            return list(self._store.get(conversation_id, []))

    def append(self, conversation_id: str, turns: List[ConversationTurn]) -> None:
        """
        Append turns, in order, to a conversation's transcript.

        The conversation is created on first append.
        """
        if not turns:
            return

        with self._lock:
            history = self._store.setdefault(conversation_id, [])
            history.extend(turns)

            if self._max_messages is not None and self._max_messages > 0:
                excess = len(history) - self._max_messages
                if excess > 0:
                    del history[:excess]

    # ------------------------------------------------------------------
    # Utility operations
    # ------------------------------------------------------------------

    def conversations(self) -> List[Tuple[str, Optional[ConversationTurn]]]:
        """
        Return (conversation_id, last turn) pairs in insertion order.
        """
        with self._lock:
            return [
                (conversation_id, turns[-1] if turns else None)
                for conversation_id, turns in self._store.items()
            ]

    def clear(self, conversation_id: str) -> None:
        with self._lock:
            self._store.pop(conversation_id, None)

    def clear_all(self) -> None:
        """
        Remove all conversations.

        Intended primarily for test setup/teardown or administrative resets.
        """
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
