# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

import math
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from coreason_cui_search.exceptions import InvalidRequest

DEFAULT_PAGE_SIZE = 100

# Elasticsearch rejects a `size` above `index.max_result_window` (10000 unless reconfigured).
MAX_RESULT_WINDOW = 10000


class MatchKind(str, Enum):
    EXACT = "exact"
    RANKED = "ranked"


class ScoringPolicy(str, Enum):
    """
    Primary signal used to score ranked hits.

    STEM_OVERLAP: fraction of query stems found in the concept's searchable text.
    INDEX_SCORE: the index's own relevance score.
    """

    STEM_OVERLAP = "stem-overlap"
    INDEX_SCORE = "index-score"


class CodeEntry(BaseModel):
    """One source-vocabulary code attached to a concept (nested `codes` document)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source_abbreviation: str = Field(alias="SAB")
    code: str = Field(alias="CODE")
    preferred_name: Optional[str] = None
    strings: List[str] = Field(default_factory=list)


class Concept(BaseModel):
    """
    Projection of one UMLS concept document as stored in the index.

    Immutable: the engine annotates Hits, never the Concept itself.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    cui: str = Field(alias="CUI")
    preferred_name: Optional[str] = None
    semantic_types: List[str] = Field(default_factory=list, alias="STY")
    codes: List[CodeEntry] = Field(default_factory=list)
    definitions: List[str] = Field(default_factory=list)

    @field_validator("cui")
    @classmethod
    def _cui_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("CUI must not be blank")
        return value

    @property
    def searchable_text(self) -> str:
        """Preferred name followed by every code string, space-joined."""
        parts = [self.preferred_name] if self.preferred_name else []
        for code in self.codes:
            parts.extend(s for s in code.strings if s)
        return " ".join(parts)


class Hit(BaseModel):
    """A candidate surfaced by one retrieval call."""

    model_config = ConfigDict(frozen=True)

    doc_id: str
    concept: Concept
    index_score: float = 0.0
    match_kind: MatchKind
    fused_score: Optional[float] = None

    @property
    def cui(self) -> str:
        return self.concept.cui

    @property
    def is_well_formed(self) -> bool:
        name = self.concept.preferred_name
        return bool(self.cui.strip()) and isinstance(name, str) and bool(name.strip())

    def with_score(self, score: float) -> "Hit":
        return self.model_copy(update={"fused_score": score})


class NormalizedQuery(BaseModel):
    """
    Canonical form of the user's query, shared by every retrieval strategy.

    `query` keeps the user's casing for clauses analyzed by the index;
    `lowered`, `words` and `stems` are case-folded.
    """

    model_config = ConfigDict(frozen=True)

    query: str
    lowered: str
    words: List[str]
    stems: FrozenSet[str]


class RankedQueryConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    fuzzy: bool = False
    min_word_length_for_fuzzy: int = Field(default=4, ge=1)
    synonym_expansion: bool = True
    fuzziness: str = "AUTO"
    window: int = Field(default=1000, ge=1, le=MAX_RESULT_WINDOW)


def _parse_int(value: Union[str, int, None]) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


class SearchRequest(BaseModel):
    """One immutable search request, passed through the whole pipeline."""

    model_config = ConfigDict(frozen=True)

    query: str
    page: int = Field(default=1, ge=1)
    size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    fuzzy: bool = False

    @classmethod
    def from_params(
        cls,
        q: Optional[str],
        page: Union[str, int, None] = None,
        size: Union[str, int, None] = None,
        fuzzy: Union[str, bool, None] = None,
        default_size: int = DEFAULT_PAGE_SIZE,
    ) -> "SearchRequest":
        """
        Builds a request from loosely-typed parameters (query string, CLI).

        Raises InvalidRequest when the query is missing or blank.
        Non-numeric page/size fall back to their defaults; page < 1 clamps to 1.
        Fuzzy matching is on only for the literal string "true".
        """
        if q is None or not q.strip():
            raise InvalidRequest("Missing query parameter ?q=")

        page_number = _parse_int(page)
        page_number = max(page_number if page_number is not None else 1, 1)

        page_size = _parse_int(size)
        if page_size is None or page_size < 1:
            page_size = default_size

        if isinstance(fuzzy, bool):
            fuzzy_flag = fuzzy
        else:
            fuzzy_flag = fuzzy == "true"

        return cls(query=q, page=page_number, size=page_size, fuzzy=fuzzy_flag)


class SearchResult(BaseModel):
    """One response row. Serialized with the public wire names."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    cui: str = Field(alias="CUI")
    preferred_name: Optional[str] = None
    semantic_types: List[str] = Field(default_factory=list, alias="STY")
    codes: List[CodeEntry] = Field(default_factory=list)
    definitions: List[str] = Field(default_factory=list)
    match_type: Optional[MatchKind] = Field(default=None, alias="matchType")
    custom_score: float = Field(default=0.0, alias="_customScore")

    @field_serializer("custom_score")
    def _finite_score(self, score: float) -> Optional[float]:
        # JSON has no infinity: exact matches go out as null, flagged by matchType.
        return score if math.isfinite(score) else None

    @classmethod
    def from_hit(cls, hit: Hit) -> "SearchResult":
        concept = hit.concept
        return cls(
            cui=concept.cui,
            preferred_name=concept.preferred_name,
            semantic_types=list(concept.semantic_types),
            codes=list(concept.codes),
            definitions=list(concept.definitions),
            match_type=hit.match_kind,
            custom_score=hit.fused_score if hit.fused_score is not None else 0.0,
        )


class Page(BaseModel):
    total: int
    page_number: int
    page_size: int
    results: List[SearchResult] = Field(default_factory=list)

    def to_response(self) -> Dict[str, Any]:
        """The public `{total, results}` body. Exact matches carry a null `_customScore`."""
        return {
            "total": self.total,
            "results": [r.model_dump(by_alias=True) for r in self.results],
        }
