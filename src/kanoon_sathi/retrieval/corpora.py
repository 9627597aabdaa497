"""
Corpus Registry

Maps each searchable CorpusTag onto the table that stores its passages and
the embedding dimensionality that table was ingested with.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Type

from ..core.errors import CorpusConfigurationError
from ..db.models import (
    CORPUS_EMBEDDING_DIMENSIONS,
    CivilCodePassage,
    ConstitutionPassage,
    CorpusPassageMixin,
    CriminalCodePassage,
    CriminalProcedurePassage,
)
from .models import CorpusTag


@dataclass(frozen=True)
class Corpus:
    tag: CorpusTag
    title: str
    model: Type[CorpusPassageMixin]
    dimensions: int = CORPUS_EMBEDDING_DIMENSIONS

    @property
    def table_name(self) -> str:
        return self.model.__tablename__


CORPORA: Dict[CorpusTag, Corpus] = {
    CorpusTag.CONSTITUTION: Corpus(
        tag=CorpusTag.CONSTITUTION,
        title="Constitution of Nepal 2015",
        model=ConstitutionPassage,
    ),
    CorpusTag.CRIMINAL: Corpus(
        tag=CorpusTag.CRIMINAL,
        title="The National Penal (Code) Act, 2017",
        model=CriminalCodePassage,
    ),
    CorpusTag.CIVIL: Corpus(
        tag=CorpusTag.CIVIL,
        title="The Civil Code Act, 2017",
        model=CivilCodePassage,
    ),
    CorpusTag.CRIMINAL_PROCEDURE: Corpus(
        tag=CorpusTag.CRIMINAL_PROCEDURE,
        title="The Criminal Procedure Code, 2017",
        model=CriminalProcedurePassage,
    ),
}


def get_corpus(tag: CorpusTag | str) -> Corpus:
    """
    Resolve a corpus by tag.

    Raises
    ------
    CorpusConfigurationError
        If the tag is unknown or is the `none` sentinel.
    """
    try:
        return CORPORA[CorpusTag(tag)]
    except (KeyError, ValueError) as exc:
        raise CorpusConfigurationError(f"Unknown corpus: {tag!r}") from exc
