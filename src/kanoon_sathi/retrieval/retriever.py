"""
Corpus Retriever

One retriever class serves every corpus. A retriever runs the raw similarity
search and then the post-filter stages, in this order:

1. raw search, limit = options.k or 5
2. similarity threshold  (score >= threshold)
3. metadata equality     (every filter key equals the passage value)
4. page number           (pageNumber metadata equals page_filter)

A passage survives only if it passes every active stage. Filters only
remove passages; the search order (closest first) is preserved.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .corpora import Corpus, get_corpus
from .models import CorpusTag, PAGE_NUMBER_KEY, Passage, RetrievalOptions
from .search import DEFAULT_LIMIT, SimilaritySearchClient

logger = logging.getLogger("kanoon.retriever")


# ---------------------------------------------------------------------
# Filter stages
# ---------------------------------------------------------------------

PassageFilter = Callable[[Passage], bool]


def _threshold_filter(threshold: Optional[float]) -> Optional[PassageFilter]:
    if threshold is None:
        return None
    return lambda passage: passage.score >= threshold


def _metadata_filter(expected: Optional[Dict[str, Any]]) -> Optional[PassageFilter]:
    if not expected:
        return None
    return lambda passage: all(
        key in passage.metadata and passage.metadata[key] == value
        for key, value in expected.items()
    )


def _page_filter(page: Optional[int]) -> Optional[PassageFilter]:
    if page is None:
        return None
    return lambda passage: passage.metadata.get(PAGE_NUMBER_KEY) == page


def apply_filters(passages: List[Passage], options: RetrievalOptions) -> List[Passage]:
    """
    Apply the threshold, metadata and page stages to search results.

    Stages without a configured value are skipped. Relative order of the
    surviving passages is unchanged.
    """
    stages = [
        stage
        for stage in (
            _threshold_filter(options.similarity_threshold),
            _metadata_filter(options.metadata_filter),
            _page_filter(options.page_filter),
        )
        if stage is not None
    ]

    return [p for p in passages if all(stage(p) for stage in stages)]


# ---------------------------------------------------------------------
# Retriever
# ---------------------------------------------------------------------

class CorpusRetriever:
    """
    Retriever bound to a single corpus.
    """

    def __init__(self, corpus: Corpus, search_client: SimilaritySearchClient) -> None:
        self.corpus = corpus
        self._search_client = search_client

    @property
    def tag(self) -> CorpusTag:
        return self.corpus.tag

    async def retrieve(
        self,
        query: str,
        options: Optional[RetrievalOptions] = None,
    ) -> List[Passage]:
        """
        Search this corpus and apply the post-filters.

        Parameters
        ----------
        query : str
            Free-text query.
        options : Optional[RetrievalOptions]
            Limit and filters; None means defaults and no filters.

        Returns
        -------
        List[Passage]
            Surviving passages, closest first. Possibly empty.
        """
        options = options or RetrievalOptions()
        limit = options.k or DEFAULT_LIMIT

        raw = await self._search_client.search(self.corpus, query, limit=limit)
        passages = apply_filters(raw, options)

        logger.info(
            "Retrieved %d/%d passages from %s",
            len(passages),
            len(raw),
            self.corpus.tag.value,
        )
        return passages


def get_retriever(tag: CorpusTag | str, search_client: SimilaritySearchClient) -> CorpusRetriever:
    """
    Build the retriever for a corpus tag.

    Raises
    ------
    CorpusConfigurationError
        If the tag does not name a searchable corpus.
    """
    return CorpusRetriever(get_corpus(tag), search_client)
