"""
Constitution Lookup Tools

Structured lookups over the `clauses` table, callable by the model:

- table of contents (full / summary / structured)
- a single part with its articles
- a single article with its clauses
- keyword search over clauses

The table of contents falls back to the built-in FALLBACK_TOC when the
database has no parts or cannot be queried.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Literal

from sqlalchemy import Executable, Result, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import Clause
from .constitution_toc import FALLBACK_TOC, ConstitutionPart

logger = logging.getLogger("kanoon.tools.constitution")

CONSTITUTION_NAME = "Constitution of Nepal 2015"
PART_CONTEXT = (
    "This part falls within the Constitution of Nepal 2015, which is the current "
    "governing document of Nepal's legal and political framework."
)

_PART_NUMBER_RE = re.compile(r"^Part-(\d+)", re.IGNORECASE)
# "Part-3", "part 3", "3"
_PART_QUERY_RE = re.compile(r"^(?:part[-\s]*)?(\d+)$", re.IGNORECASE)

TocFormat = Literal["full", "summary", "structured"]


# ---------------------------------------------------------------------
# Part helpers
# ---------------------------------------------------------------------

def split_part_title(part_title: str) -> tuple[str, str]:
    """Split "Part-3 Fundamental Rights" into ("Part-3", "Fundamental Rights")."""
    number, _, title = part_title.strip().partition(" ")
    return number.strip(), title.strip()


def _part_sort_key(part_title: str) -> int:
    match = _PART_NUMBER_RE.match(part_title.strip())
    return int(match.group(1)) if match else 10_000


def describe_part(part_title: str) -> str:
    """
    Describe a stored part using the matching built-in entry, or a generic
    sentence when none matches.
    """
    lowered = part_title.lower()
    for part in FALLBACK_TOC:
        if part.title.lower() in lowered:
            return part.description or ""
    _, title = split_part_title(part_title)
    return f"Constitutional provisions related to {title}"


def _part_payload(part: ConstitutionPart) -> Dict[str, Any]:
    return {
        "partNumber": part.part_number,
        "title": part.title,
        "description": part.description,
    }


async def _execute(session: AsyncSession, stmt: Executable) -> Result:
    """
    Run a tool query inside a savepoint.

    The request session is shared with the chat store; a failed tool query
    rolls back only its savepoint and leaves the outer transaction usable.
    """
    async with session.begin_nested():
        return await session.execute(stmt)


async def get_parts(session: AsyncSession) -> List[ConstitutionPart]:
    """
    Return the constitution's parts in part-number order.
    """
    try:
        result = await _execute(session, select(Clause.part_title).distinct())
        part_titles = [row[0] for row in result.all()]
    except SQLAlchemyError:
        logger.exception("Failed to load constitution parts; using built-in table")
        return list(FALLBACK_TOC)

    if not part_titles:
        logger.warning("No parts found in database, using built-in table")
        return list(FALLBACK_TOC)

    parts = []
    for part_title in sorted(part_titles, key=_part_sort_key):
        number, title = split_part_title(part_title)
        parts.append(ConstitutionPart(number, title, describe_part(part_title)))
    return parts


# ---------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------

async def tool_get_table_of_contents(session: AsyncSession, toc_format: TocFormat = "full") -> Any:
    parts = await get_parts(session)

    if toc_format == "summary":
        return "\n".join(f"{p.part_number}: {p.title}" for p in parts)

    if toc_format == "structured":
        return [_part_payload(p) for p in parts]

    return {
        "title": f"{CONSTITUTION_NAME} - Table of Contents",
        "description": (
            "The Constitution of Nepal was promulgated on 20 September 2015 and is the "
            "fundamental law of Nepal. It defines Nepal as a federal democratic republic "
            "with three main levels of government: federal, provincial, and local."
        ),
        "structure": [
            {
                "part": p.part_number,
                "title": p.title,
                "description": p.description or "No description available",
            }
            for p in parts
        ],
        "totalParts": len(parts),
        "metadata": {
            "promulgationDate": "20 September 2015",
            "officialLanguage": "Nepali",
            "source": CONSTITUTION_NAME,
            "dataSource": "Database of constitutional clauses",
        },
    }


async def tool_get_part(session: AsyncSession, part_number: str) -> Dict[str, Any]:
    query = part_number.strip()
    number_match = _PART_QUERY_RE.match(query)

    if number_match:
        # "Part-1" must not match "Part-10 ..." or "Part-11 ..."
        number = number_match.group(1)
        condition = or_(
            Clause.part_title.ilike(f"Part-{number} %"),
            func.lower(Clause.part_title) == f"part-{number}",
        )
    else:
        condition = Clause.part_title.ilike(f"%{query}%")

    result = await _execute(
        session,
        select(Clause.part_title)
        .where(condition)
        .distinct()
        .order_by(Clause.part_title)
        .limit(1)
    )
    part_title = result.scalar_one_or_none()

    if part_title is None:
        parts = await get_parts(session)
        lowered = query.lower()
        if number_match:
            wanted = f"part-{number_match.group(1)}"
            candidates = (p for p in parts if p.part_number.lower() == wanted)
        else:
            candidates = (p for p in parts if lowered in p.title.lower())
        match = next(candidates, None)
        if match is None:
            return {
                "error": "Part not found",
                "message": f'Could not find part "{query}" in the {CONSTITUTION_NAME}',
                "availableParts": [f"{p.part_number}: {p.title}" for p in parts],
            }

        return {
            "part": match.part_number,
            "title": match.title,
            "description": match.description or "No detailed description available",
            "fullTitle": f"{match.part_number}: {match.title}",
            "context": PART_CONTEXT,
        }

    articles_result = await _execute(
        session,
        select(Clause.article_number, Clause.article_title)
        .where(Clause.part_title == part_title)
        .distinct()
        .order_by(Clause.article_number)
    )
    articles = [
        {"number": row.article_number, "title": row.article_title}
        for row in articles_result.all()
    ]

    number, title = split_part_title(part_title)
    return {
        "part": number,
        "title": title,
        "fullTitle": part_title,
        "description": describe_part(part_title),
        "articles": articles,
        "articleCount": len(articles),
        "context": PART_CONTEXT,
    }


async def tool_get_article(session: AsyncSession, article_number: int) -> Dict[str, Any]:
    result = await _execute(
        session,
        select(Clause)
        .where(Clause.article_number == article_number)
        .order_by(Clause.clause_number)
    )
    clauses = list(result.scalars().all())

    if not clauses:
        return {
            "error": "Article not found",
            "message": f"Could not find Article {article_number} in the {CONSTITUTION_NAME}",
        }

    first = clauses[0]
    return {
        "articleNumber": first.article_number,
        "title": first.article_title,
        "partTitle": first.part_title,
        "clauses": [
            {
                "number": c.clause_number,
                "content": c.content,
                "reference": c.source_reference,
            }
            for c in clauses
        ],
        "clauseCount": len(clauses),
        "fullText": "\n\n".join(f"({c.clause_number}) {c.content}" for c in clauses),
        "source": first.source_reference or CONSTITUTION_NAME,
    }


async def tool_search_constitution(
    session: AsyncSession,
    query: str,
    limit: int = 10,
) -> Dict[str, Any]:
    search_query = query.strip()
    pattern = f"%{search_query}%"

    result = await _execute(
        session,
        select(Clause)
        .where(
            or_(
                Clause.content.ilike(pattern),
                Clause.article_title.ilike(pattern),
                Clause.part_title.ilike(pattern),
                Clause.tags.ilike(pattern),
            )
        )
        .order_by(Clause.article_number, Clause.clause_number)
        .limit(limit)
    )
    rows = list(result.scalars().all())

    if not rows:
        return {
            "message": f'No results found for "{search_query}" in the {CONSTITUTION_NAME}',
            "suggestions": [
                "Try using different keywords",
                "Use more general terms",
                "Check spelling of specialized legal terms",
                "Search for broader concepts",
            ],
        }

    return {
        "query": search_query,
        "totalResults": len(rows),
        "results": [
            {
                "id": row.clause_id,
                "partTitle": row.part_title,
                "articleNumber": row.article_number,
                "articleTitle": row.article_title,
                "clauseNumber": row.clause_number,
                "content": row.content,
                "reference": row.source_reference,
                "location": f"Article {row.article_number}, Clause {row.clause_number}",
            }
            for row in rows
        ],
        "summary": (
            f"Found {len(rows)} relevant provisions in the {CONSTITUTION_NAME} "
            f'related to "{search_query}"'
        ),
    }
