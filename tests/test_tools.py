from types import SimpleNamespace
from uuid import uuid4

import pytest
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from kanoon_sathi.db.chat_store import ChatStore
from kanoon_sathi.db.models import Chat, Clause
from kanoon_sathi.tools.base import TOOL_REGISTRY, dispatch_tool_call
from kanoon_sathi.tools.constitution_toc import FALLBACK_TOC
from kanoon_sathi.tools.constitution_tools import (
    describe_part,
    get_parts,
    split_part_title,
    tool_get_article,
    tool_get_part,
    tool_get_table_of_contents,
    tool_search_constitution,
)
from kanoon_sathi.tools.definitions import TOOL_DEFINITIONS


class FakeSavepoint:
    """Stands in for AsyncSession.begin_nested(); counts rollbacks."""

    def __init__(self):
        self.entered = 0
        self.rolled_back = 0

    async def __aenter__(self):
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.rolled_back += 1
        return False


def _session():
    session = AsyncMock()
    session.add = MagicMock()
    session.savepoint = FakeSavepoint()
    session.begin_nested = MagicMock(return_value=session.savepoint)
    return session


def _result(all_rows=None, scalars=None, scalar=None):
    result = MagicMock()
    result.all.return_value = all_rows or []
    result.scalars.return_value.all.return_value = scalars or []
    result.scalar_one_or_none.return_value = scalar
    return result


def _sql(stmt):
    return str(stmt.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))


def _clause(article_number=16, clause_number=1, content="Every person shall have the right to live with dignity."):
    return Clause(
        clause_id=f"16-{clause_number}",
        part_title="Part-3 Fundamental Rights and Duties",
        article_number=article_number,
        article_title="Right to live with dignity",
        clause_number=clause_number,
        content=content,
        source_reference="Constitution of Nepal 2015, Article 16",
        tags="dignity,rights",
        language="en",
    )


def test_definitions_match_registry():
    names = {d["function"]["name"] for d in TOOL_DEFINITIONS}
    assert names == set(TOOL_REGISTRY)


def test_split_and_describe_part():
    assert split_part_title("Part-3 Fundamental Rights and Duties") == ("Part-3", "Fundamental Rights and Duties")
    assert describe_part("Part-3 Fundamental Rights and Duties") == FALLBACK_TOC[2].description
    assert describe_part("Part-99 Space Law") == "Constitutional provisions related to Space Law"


@pytest.mark.asyncio
async def test_get_parts_sorted_by_number():
    session = _session()
    session.execute.return_value = _result(all_rows=[
        ("Part-11 Judiciary",),
        ("Part-2 Citizenship",),
        ("Part-1 Preliminary",),
    ])

    parts = await get_parts(session)

    assert [p.part_number for p in parts] == ["Part-1", "Part-2", "Part-11"]


@pytest.mark.asyncio
async def test_get_parts_falls_back_when_empty_or_failing():
    session = _session()
    session.execute.return_value = _result(all_rows=[])
    assert await get_parts(session) == FALLBACK_TOC

    session.execute.side_effect = OperationalError("select", {}, Exception("down"))
    assert await get_parts(session) == FALLBACK_TOC


@pytest.mark.asyncio
async def test_table_of_contents_formats():
    session = _session()
    session.execute.return_value = _result(all_rows=[])

    full = await tool_get_table_of_contents(session, "full")
    assert full["totalParts"] == len(FALLBACK_TOC)

    summary = await tool_get_table_of_contents(session, "summary")
    assert summary.splitlines()[0] == "Part-1: Preliminary"

    structured = await tool_get_table_of_contents(session, "structured")
    assert structured[2]["title"] == "Fundamental Rights and Duties"


@pytest.mark.asyncio
async def test_get_article_joins_clauses():
    session = _session()
    session.execute.return_value = _result(scalars=[
        _clause(clause_number=1, content="Every person shall have the right to live with dignity."),
        _clause(clause_number=2, content="No law shall be made providing for the death penalty."),
    ])

    article = await tool_get_article(session, 16)

    assert article["articleNumber"] == 16
    assert article["clauseCount"] == 2
    assert article["fullText"].startswith("(1) Every person")


@pytest.mark.asyncio
async def test_get_article_not_found():
    session = _session()
    session.execute.return_value = _result(scalars=[])

    article = await tool_get_article(session, 999)

    assert article["error"] == "Article not found"


@pytest.mark.asyncio
async def test_search_constitution_results_and_empty():
    session = _session()
    session.execute.return_value = _result(scalars=[_clause()])

    found = await tool_search_constitution(session, "dignity")
    assert found["totalResults"] == 1
    assert found["results"][0]["location"] == "Article 16, Clause 1"

    session.execute.return_value = _result(scalars=[])
    missing = await tool_search_constitution(session, "spaceships")
    assert "No results found" in missing["message"]


@pytest.mark.asyncio
async def test_dispatch_rejects_unknown_tool():
    with pytest.raises(ValueError, match="Unknown tool"):
        await dispatch_tool_call("deleteEverything", {}, AsyncMock())


@pytest.mark.asyncio
async def test_dispatch_validates_arguments():
    session = _session()
    with pytest.raises(ValueError):
        await dispatch_tool_call("getConstitutionArticle", {"articleNumber": "sixteen"}, session)
    with pytest.raises(ValueError):
        await dispatch_tool_call("searchConstitution", {}, session)
    with pytest.raises(ValueError):
        await dispatch_tool_call("getConstitutionTableOfContents", {"format": "xml"}, session)
    session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_dispatch_routes_to_handler():
    session = _session()
    session.execute.return_value = _result(scalars=[_clause()])

    result = await dispatch_tool_call("getConstitutionArticle", {"articleNumber": "16"}, session)

    assert result["articleNumber"] == 16


@pytest.mark.asyncio
async def test_dispatch_clamps_search_limit():
    session = _session()
    session.execute.return_value = _result(scalars=[])

    await dispatch_tool_call("searchConstitution", {"query": "rights", "limit": -5}, session)
    await dispatch_tool_call("searchConstitution", {"query": "rights", "limit": 500}, session)

    low, high = (_sql(c.args[0]) for c in session.execute.await_args_list)
    assert low.endswith("LIMIT 1")
    assert high.endswith("LIMIT 50")


@pytest.mark.asyncio
async def test_failed_tool_query_leaves_session_usable_for_chat_writes():
    chat = Chat(id=uuid4(), owner_id="42")
    chat_result = MagicMock()
    chat_result.scalar_one_or_none.return_value = chat

    session = _session()
    session.execute.side_effect = [
        OperationalError("select", {}, Exception("relation \"clauses\" does not exist")),
        chat_result,
        MagicMock(),
    ]

    toc = await dispatch_tool_call("getConstitutionTableOfContents", {"format": "structured"}, session)
    assert len(toc) == len(FALLBACK_TOC)

    # Only the tool's savepoint was rolled back
    assert session.savepoint.rolled_back == 1
    session.rollback.assert_not_awaited()

    message = await ChatStore(session).append_message(chat.id, "42", "model", "Answer")
    assert message.content == "Answer"
    session.flush.assert_awaited()


@pytest.mark.asyncio
async def test_get_part_by_number_matches_exact_part():
    session = _session()
    session.execute.side_effect = [_result(scalar=None), _result(all_rows=[])]

    part = await tool_get_part(session, "Part-1")

    compiled = session.execute.await_args_list[0].args[0].compile(dialect=postgresql.dialect())
    patterns = set(compiled.params.values())
    assert "Part-1 %" in patterns
    assert "Part-1%" not in patterns
    assert "ORDER BY clauses.part_title" in str(compiled)
    assert part["part"] == "Part-1"
    assert part["title"] == "Preliminary"


@pytest.mark.asyncio
async def test_get_part_by_name_in_database():
    session = _session()
    session.execute.side_effect = [
        _result(scalar="Part-3 Fundamental Rights and Duties"),
        _result(all_rows=[SimpleNamespace(article_number=16, article_title="Right to live with dignity")]),
    ]

    part = await tool_get_part(session, "Fundamental Rights")

    assert part["part"] == "Part-3"
    assert part["articles"] == [{"number": 16, "title": "Right to live with dignity"}]
    assert session.savepoint.entered == 2
