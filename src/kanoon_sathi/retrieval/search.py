"""
Similarity Search Client

PostgreSQL + pgvector nearest-neighbour search over a single corpus table.

Responsibilities
----------------
- Embed the query (unless a precomputed vector is supplied)
- Verify the vector matches the corpus's ingestion dimensionality
- Run a cosine-distance query, closest passages first
- Return structured Passage objects
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import CorpusConfigurationError
from ..embeddings.embedder import Embedder
from .corpora import Corpus
from .models import PAGE_NUMBER_KEY, Passage

logger = logging.getLogger("kanoon.search")

DEFAULT_LIMIT = 5


def _clamp_score(score: float) -> float:
    """Map 1 - cosine distance (range [-1, 1]) onto [0, 1]."""
    return max(0.0, min(1.0, float(score)))


class SimilaritySearchClient:
    """
    Nearest-neighbour search against corpus tables.

    Each instance wraps one request-scoped session; the engine's connection
    pool lets independent requests search concurrently.
    """

    def __init__(self, session: AsyncSession, embedder: Embedder) -> None:
        self._session = session
        self._embedder = embedder

    async def search(
        self,
        corpus: Corpus,
        query_text: str,
        limit: int = DEFAULT_LIMIT,
        query_embedding: Optional[Sequence[float]] = None,
    ) -> List[Passage]:
        """
        Search a corpus for the passages closest to `query_text`.

        Parameters
        ----------
        corpus : Corpus
            Target corpus.
        query_text : str
            Free-text query. Ignored for embedding when `query_embedding` is given.
        limit : int
            Maximum number of passages to return.
        query_embedding : Optional[Sequence[float]]
            Precomputed query vector.

        Returns
        -------
        List[Passage]
            Passages ordered by similarity descending. Empty if the corpus
            has no rows.

        Raises
        ------
        CorpusConfigurationError
            If the query vector's dimensionality differs from the corpus's.
        """
        if query_embedding is None:
            query_embedding = await self._embedder.embed_query(query_text)

        if len(query_embedding) != corpus.dimensions:
            raise CorpusConfigurationError(
                f"Query embedding has {len(query_embedding)} dimensions but corpus "
                f"'{corpus.tag.value}' ({corpus.table_name}) was ingested with "
                f"{corpus.dimensions}"
            )

        model = corpus.model
        cosine_distance = model.embedding.cosine_distance(list(query_embedding))

        stmt = (
            select(
                model.content,
                model.metadata_.label("meta"),
                model.page_number,
                (1 - cosine_distance).label("score"),
            )
            .where(model.embedding.is_not(None))
            .order_by(cosine_distance)
            .limit(limit)
        )

        result = await self._session.execute(stmt)
        rows = result.all()

        logger.debug(
            "Search on %s returned %d rows (limit=%d)",
            corpus.table_name,
            len(rows),
            limit,
        )

        passages: List[Passage] = []
        for row in rows:
            metadata = dict(row.meta or {})
            if row.page_number is not None:
                metadata.setdefault(PAGE_NUMBER_KEY, row.page_number)
            passages.append(
                Passage(
                    content=row.content,
                    score=_clamp_score(row.score),
                    metadata=metadata,
                )
            )

        return passages
