"""
Chat Store

PostgreSQL-backed persistence for authenticated conversations. Every
operation is scoped by chat id and owner id; a chat owned by someone else is
indistinguishable from a missing one.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy import select, delete, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Chat, Message
from ..conversation.models import ConversationTurn, Role
from ..core.errors import ChatNotFoundError


def _as_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class ChatStore:
    """
    Durable chat/message store.

    The store flushes but never commits; the request-scoped session
    dependency owns the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_chat(self, owner_id: str, title: Optional[str] = None) -> Chat:
        """
        Create a new, empty chat for a user.
        """
        chat = Chat(owner_id=owner_id, title=title)
        self._session.add(chat)
        await self._session.flush()
        await self._session.refresh(chat)
        return chat

    async def get_chat(self, chat_id: str | uuid.UUID, owner_id: str) -> Optional[Chat]:
        """
        Return the chat if it exists and belongs to owner_id, else None.
        """
        chat_uuid = _as_uuid(chat_id)
        if chat_uuid is None:
            return None

        result = await self._session.execute(
            select(Chat).where(Chat.id == chat_uuid, Chat.owner_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def require_chat(self, chat_id: str | uuid.UUID, owner_id: str) -> Chat:
        chat = await self.get_chat(chat_id, owner_id)
        if chat is None:
            raise ChatNotFoundError(f"Chat {chat_id} not found or access denied")
        return chat

    async def list_chats(self, owner_id: str, limit: int = 50, offset: int = 0) -> List[Chat]:
        """
        Return a user's chats, most recently updated first.
        """
        result = await self._session.execute(
            select(Chat)
            .where(Chat.owner_id == owner_id)
            .order_by(Chat.updated_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def append_message(
        self,
        chat_id: str | uuid.UUID,
        owner_id: str,
        sender: Role,
        content: str,
    ) -> Message:
        """
        Append a message to a chat and bump the chat's updated_at.

        Raises
        ------
        ChatNotFoundError
            If the chat does not exist or belongs to another user.
        """
        chat = await self.require_chat(chat_id, owner_id)

        message = Message(chat_id=chat.id, sender=sender, content=content)
        self._session.add(message)
        await self._session.execute(
            update(Chat).where(Chat.id == chat.id).values(updated_at=func.now())
        )
        await self._session.flush()
        await self._session.refresh(message)
        return message

    async def list_messages(
        self,
        chat_id: str | uuid.UUID,
        owner_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Message]:
        """
        Return messages oldest first.

        With a limit, the most recent `limit` messages (skipping `offset`
        newer ones) are returned, still in chronological order.
        """
        chat = await self.require_chat(chat_id, owner_id)

        stmt = (
            select(Message)
            .where(Message.chat_id == chat.id)
            .order_by(Message.created_at.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._session.execute(stmt)
        return list(reversed(result.scalars().all()))

    async def get_history(self, chat_id: str | uuid.UUID, owner_id: str) -> List[ConversationTurn]:
        """
        Return the chat's transcript as conversation turns.
        """
        messages = await self.list_messages(chat_id, owner_id)
        return [ConversationTurn.of(m.sender, m.content) for m in messages]

    async def update_title(self, chat_id: str | uuid.UUID, owner_id: str, title: str) -> Chat:
        chat = await self.require_chat(chat_id, owner_id)
        chat.title = title
        await self._session.flush()
        await self._session.refresh(chat)
        return chat

    async def delete_chat(self, chat_id: str | uuid.UUID, owner_id: str) -> None:
        """
        Delete a chat and, by cascade, all of its messages.
        """
        chat = await self.require_chat(chat_id, owner_id)
        await self._session.execute(delete(Message).where(Message.chat_id == chat.id))
        await self._session.execute(delete(Chat).where(Chat.id == chat.id))
