"""
Database Package

Provides SQLAlchemy async session management and model definitions
for PostgreSQL with pgvector.
"""

from .session import get_async_session, async_engine, AsyncSessionLocal, init_models
from .models import (
    Base,
    Chat,
    Clause,
    CivilCodePassage,
    ConstitutionPassage,
    CriminalCodePassage,
    CriminalProcedurePassage,
    Message,
)
from .chat_store import ChatStore

__all__ = [
    "get_async_session",
    "async_engine",
    "AsyncSessionLocal",
    "init_models",
    "Base",
    "Chat",
    "Clause",
    "CivilCodePassage",
    "ConstitutionPassage",
    "CriminalCodePassage",
    "CriminalProcedurePassage",
    "Message",
    "ChatStore",
]
