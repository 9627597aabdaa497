"""
Retrieval Models

Corpus identifiers, retrieval options and retrieved passages shared by the
corpus selector, the similarity search client and the corpus retrievers.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CorpusTag(str, Enum):
    """Closed set of legal corpora a query can be routed to."""

    CONSTITUTION = "constitution"
    CRIMINAL = "criminal"
    CIVIL = "civil"
    CRIMINAL_PROCEDURE = "criminal_procedure"
    NONE = "none"


# Metadata key carrying the source page number of a passage
PAGE_NUMBER_KEY = "pageNumber"


class RetrievalOptions(BaseModel):
    """
    Options shared by every corpus retriever.

    All fields are optional; an absent field disables the corresponding
    filter stage.
    """

    k: Optional[int] = Field(default=None, ge=1, le=100)
    similarity_threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    metadata_filter: Optional[Dict[str, Any]] = None
    page_filter: Optional[int] = None

    model_config = ConfigDict(extra="forbid")


class Passage(BaseModel):
    """A single retrieval result. Derived per query, never persisted."""

    content: str
    score: float = Field(..., ge=0.0, le=1.0)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @property
    def page_number(self) -> Optional[int]:
        return self.metadata.get(PAGE_NUMBER_KEY)
