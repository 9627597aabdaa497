"""
SQLAlchemy Models

Defines the database schema for:
- Corpus passages (vector storage with pgvector), one table per legal corpus
- Constitution clauses used by the structured lookup tools
- Persisted chats and messages for authenticated users
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, List

from sqlalchemy import (
    CheckConstraint,
    Column,
    String,
    Integer,
    Text,
    DateTime,
    ForeignKey,
    Index,
    func,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, declared_attr
from pgvector.sqlalchemy import Vector


# Dimensionality every corpus was embedded with at ingestion time
CORPUS_EMBEDDING_DIMENSIONS = 768


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ---------------------------------------------------------------------
# Corpus Passage Models
# ---------------------------------------------------------------------

class CorpusPassageMixin:
    """
    Shared shape of every corpus table.

    One row per passage. Rows are bulk-loaded by the ingestion tooling and
    are read-only at query time.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    page_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    metadata_: Mapped[Optional[dict]] = mapped_column(
        "metadata",
        JSONB,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    @declared_attr
    def embedding(cls):
        return Column(Vector(CORPUS_EMBEDDING_DIMENSIONS), nullable=True)

    @declared_attr.directive
    def __table_args__(cls):
        return (
            Index(f"idx_{cls.__tablename__}_page", "page_number"),
        )


class ConstitutionPassage(CorpusPassageMixin, Base):
    """Constitution of Nepal 2015, one row per clause."""
    __tablename__ = "documents"


class CriminalCodePassage(CorpusPassageMixin, Base):
    """National Penal (Code) Act 2017, one row per page."""
    __tablename__ = "criminal_code"


class CivilCodePassage(CorpusPassageMixin, Base):
    """Civil Code Act 2017, one row per page."""
    __tablename__ = "civil_code"


class CriminalProcedurePassage(CorpusPassageMixin, Base):
    """Criminal Procedure Code 2017, one row per page."""
    __tablename__ = "criminal_procedure"


# ---------------------------------------------------------------------
# Constitution Clause Model (structured lookups)
# ---------------------------------------------------------------------

class Clause(Base):
    """
    A single clause of the constitution.

    part_title is stored as "Part-<n> <Title>", e.g. "Part-3 Fundamental
    Rights and Duties".
    """
    __tablename__ = "clauses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    clause_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    part_title: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    article_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    article_title: Mapped[str] = mapped_column(Text, nullable=False)
    clause_number: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    source_reference: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(String(20), nullable=False)


# ---------------------------------------------------------------------
# Chat Model
# ---------------------------------------------------------------------

class Chat(Base):
    """
    A persisted conversation owned by an authenticated user.
    """
    __tablename__ = "chats"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    messages: Mapped[List["Message"]] = relationship(
        "Message",
        back_populates="chat",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )

    __table_args__ = (
        Index("idx_chats_owner", "owner_id"),
        Index("idx_chats_updated_at", "updated_at"),
    )


# ---------------------------------------------------------------------
# Message Model
# ---------------------------------------------------------------------

class Message(Base):
    """
    A single message within a persisted chat.
    """
    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    chat_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("chats.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender: Mapped[str] = mapped_column(String(20), nullable=False)  # user | model | system
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        # Several messages are written per transaction; now() would tie them
        server_default=func.clock_timestamp(),
    )

    chat: Mapped["Chat"] = relationship("Chat", back_populates="messages")

    __table_args__ = (
        CheckConstraint("sender IN ('user', 'model', 'system')", name="ck_messages_sender"),
        Index("idx_messages_chat", "chat_id", "created_at"),
    )
