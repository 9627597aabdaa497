import pytest
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.dialects import postgresql

from kanoon_sathi.core.errors import CorpusConfigurationError
from kanoon_sathi.embeddings.embedder import Embedder
from kanoon_sathi.retrieval.corpora import CORPORA
from kanoon_sathi.retrieval.models import CorpusTag
from kanoon_sathi.retrieval.search import SimilaritySearchClient


# Helper to create mock DB rows
class MockRow:
    def __init__(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)


@pytest.fixture
def mock_embedder():
    mock = AsyncMock(spec=Embedder)
    mock.embed_query.return_value = [0.1] * 768
    return mock


def _session_returning(rows):
    session = AsyncMock()
    result = MagicMock()
    result.all.return_value = rows
    session.execute.return_value = result
    return session


@pytest.mark.asyncio
async def test_search_maps_rows_to_passages(mock_embedder):
    session = _session_returning([
        MockRow(content="Article 16: Right to live with dignity", meta={"article": 16}, page_number=12, score=0.91),
        MockRow(content="Article 17: Right to freedom", meta=None, page_number=None, score=0.77),
    ])
    client = SimilaritySearchClient(session, mock_embedder)

    passages = await client.search(CORPORA[CorpusTag.CONSTITUTION], "dignity", limit=5)

    assert [p.score for p in passages] == [0.91, 0.77]
    assert passages[0].metadata == {"article": 16, "pageNumber": 12}
    assert passages[0].page_number == 12
    assert passages[1].metadata == {}
    mock_embedder.embed_query.assert_awaited_once_with("dignity")
    session.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_search_orders_by_ascending_cosine_distance(mock_embedder):
    session = _session_returning([])

    await SimilaritySearchClient(session, mock_embedder).search(
        CORPORA[CorpusTag.CRIMINAL], "theft", limit=5
    )

    compiled = session.execute.call_args.args[0].compile(dialect=postgresql.dialect())
    order_by = str(compiled).split("ORDER BY", 1)[1]
    assert order_by.strip().startswith("criminal_code.embedding <=>")
    assert "DESC" not in order_by
    assert "LIMIT" in order_by
    assert 5 in compiled.params.values()


@pytest.mark.asyncio
async def test_search_clamps_negative_similarity(mock_embedder):
    session = _session_returning([
        MockRow(content="far away", meta={}, page_number=None, score=-0.3),
    ])

    passages = await SimilaritySearchClient(session, mock_embedder).search(
        CORPORA[CorpusTag.CIVIL], "inheritance"
    )

    assert passages[0].score == 0.0


@pytest.mark.asyncio
async def test_search_empty_corpus_returns_empty_list(mock_embedder):
    session = _session_returning([])

    passages = await SimilaritySearchClient(session, mock_embedder).search(
        CORPORA[CorpusTag.CRIMINAL], "theft"
    )

    assert passages == []


@pytest.mark.asyncio
async def test_search_with_precomputed_embedding_skips_embedder(mock_embedder):
    session = _session_returning([])

    await SimilaritySearchClient(session, mock_embedder).search(
        CORPORA[CorpusTag.CRIMINAL],
        "theft",
        query_embedding=[0.0] * 768,
    )

    mock_embedder.embed_query.assert_not_awaited()


@pytest.mark.asyncio
async def test_dimension_mismatch_raises(mock_embedder):
    mock_embedder.embed_query.return_value = [0.1] * 1536
    session = _session_returning([])

    with pytest.raises(CorpusConfigurationError):
        await SimilaritySearchClient(session, mock_embedder).search(
            CORPORA[CorpusTag.CONSTITUTION], "dignity"
        )

    session.execute.assert_not_awaited()
