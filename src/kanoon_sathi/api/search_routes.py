"""
Search Routes

Direct access to a single corpus retriever. Useful for inspecting what the
pipeline would retrieve for a query, with explicit filter options.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from typing import Annotated

from .models import SearchRequest, SearchResponse
from ..retrieval.models import CorpusTag
from ..retrieval.retriever import get_retriever
from ..retrieval.search import SimilaritySearchClient
from .dependencies import get_search_client

router = APIRouter(prefix="/search", tags=["search"])


@router.post(
    "",
    response_model=SearchResponse,
    summary="Similarity search over one legal corpus",
    status_code=status.HTTP_200_OK,
)
async def search(
    req: SearchRequest,
    search_client: Annotated[SimilaritySearchClient, Depends(get_search_client)],
) -> SearchResponse:
    """
    Run the corpus retriever named by `req.corpus`.

    Parameters
    ----------
    req : SearchRequest
        Contains:
        - corpus: Corpus tag (not `none`)
        - query: Search query string
        - options: k, similarity threshold, metadata and page filters
    """
    if req.corpus is CorpusTag.NONE:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Corpus 'none' has no retriever.",
        )

    # Search and embedding failures are left to the global exception handler
    retriever = get_retriever(req.corpus, search_client)
    passages = await retriever.retrieve(req.query, req.options)
    return SearchResponse(corpus=req.corpus, passages=passages)
