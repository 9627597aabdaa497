"""
Tool Dispatch Layer

This module defines the central, authoritative dispatch mechanism for all
model-invoked tool calls. It enforces:

- Explicit tool allow-listing
- Argument validation
- Dependency injection (the database session) for testability

No tool is callable unless it is registered here.
"""

from __future__ import annotations

from typing import Any, Dict, Callable, Awaitable

from sqlalchemy.ext.asyncio import AsyncSession

from .constitution_tools import (
    tool_get_article,
    tool_get_part,
    tool_get_table_of_contents,
    tool_search_constitution,
)
from .definitions import (
    TOOL_GET_ARTICLE,
    TOOL_GET_PART,
    TOOL_GET_TABLE_OF_CONTENTS,
    TOOL_SEARCH_CONSTITUTION,
)


# ---------------------------------------------------------------------
# Tool Type Definitions
# ---------------------------------------------------------------------

ToolHandler = Callable[[Dict[str, Any], AsyncSession], Awaitable[Any]]


# ---------------------------------------------------------------------
# Tool Registry (AUTHORITATIVE)
# ---------------------------------------------------------------------

async def _handle_table_of_contents(args: Dict[str, Any], session: AsyncSession) -> Any:
    toc_format = args.get("format") or "full"
    if toc_format not in ("full", "summary", "structured"):
        raise ValueError(f"Unknown table of contents format: {toc_format!r}")
    return await tool_get_table_of_contents(session, toc_format)


async def _handle_get_part(args: Dict[str, Any], session: AsyncSession) -> Any:
    part_number = args.get("partNumber")
    if not part_number:
        raise ValueError(f"{TOOL_GET_PART} requires 'partNumber' argument.")
    return await tool_get_part(session, str(part_number))


async def _handle_get_article(args: Dict[str, Any], session: AsyncSession) -> Any:
    raw = args.get("articleNumber")
    try:
        article_number = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{TOOL_GET_ARTICLE} requires an integer 'articleNumber' argument.")
    return await tool_get_article(session, article_number)


async def _handle_search_constitution(args: Dict[str, Any], session: AsyncSession) -> Any:
    query = args.get("query")
    if not query:
        raise ValueError(f"{TOOL_SEARCH_CONSTITUTION} requires 'query' argument.")
    try:
        limit = int(args.get("limit") or 10)
    except (TypeError, ValueError):
        raise ValueError(f"{TOOL_SEARCH_CONSTITUTION} 'limit' must be an integer.")
    return await tool_search_constitution(session, query, limit=max(1, min(limit, 50)))


TOOL_REGISTRY: Dict[str, ToolHandler] = {
    TOOL_GET_TABLE_OF_CONTENTS: _handle_table_of_contents,
    TOOL_GET_PART: _handle_get_part,
    TOOL_GET_ARTICLE: _handle_get_article,
    TOOL_SEARCH_CONSTITUTION: _handle_search_constitution,
}


# ---------------------------------------------------------------------
# Public Dispatch API
# ---------------------------------------------------------------------

async def dispatch_tool_call(
    tool_name: str,
    args: Dict[str, Any],
    session: AsyncSession,
) -> Any:
    """
    Dispatch a tool call requested by the model.

    Parameters
    ----------
    tool_name : str
        The symbolic tool name requested by the model.

    args : Dict[str, Any]
        Parsed JSON arguments for the tool.

    session : AsyncSession
        Request-scoped database session (injected).

    Returns
    -------
    Any
        Tool execution result.

    Raises
    ------
    ValueError
        If the tool name is unknown or required arguments are missing.
    """

    handler = TOOL_REGISTRY.get(tool_name)
    if not handler:
        raise ValueError(f"Unknown tool requested: {tool_name}")

    return await handler(args, session)
