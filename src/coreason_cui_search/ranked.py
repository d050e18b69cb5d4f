# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from typing import AbstractSet, Any, Dict, List

from loguru import logger

from coreason_cui_search.index import SOURCE_FIELDS, execute_search, parse_hits, total_hits
from coreason_cui_search.interfaces import SearchIndex
from coreason_cui_search.schemas import Hit, MatchKind, NormalizedQuery, RankedQueryConfig

SYNONYM_FIELD = "atom_text"
LITERAL_FIELD = "atom_text.literal"
DEFINITION_FIELD = "definitions"

LITERAL_PHRASE_BOOST = 8
LITERAL_AND_BOOST = 6
SYNONYM_PHRASE_BOOST = 5
SYNONYM_AND_BOOST = 3
DEFINITION_BOOST = 2
FUZZY_BOOST = 1


def _phrase(field: str, query: str, boost: float) -> Dict[str, Any]:
    return {"match_phrase": {field: {"query": query, "boost": boost}}}


def _all_terms(field: str, query: str, boost: float, **extra: Any) -> Dict[str, Any]:
    return {"match": {field: {"query": query, "operator": "and", "boost": boost, **extra}}}


def fuzzy_enabled(query: NormalizedQuery, config: RankedQueryConfig) -> bool:
    """Fuzzy matching needs the flag and at least one word long enough to tolerate edits."""
    return config.fuzzy and any(len(w) >= config.min_word_length_for_fuzzy for w in query.words)


def build_query(query: NormalizedQuery, config: RankedQueryConfig) -> Dict[str, Any]:
    """
    Builds the single any-of relevance query.

    Clauses, by descending boost: literal phrase, literal AND, synonym phrase,
    synonym AND, definition AND, fuzzy. Synonym clauses are only added when
    synonym expansion is on.
    """
    text = query.query
    should: List[Dict[str, Any]] = [
        _phrase(LITERAL_FIELD, text, LITERAL_PHRASE_BOOST),
        _all_terms(LITERAL_FIELD, text, LITERAL_AND_BOOST),
    ]
    if config.synonym_expansion:
        should.append(_phrase(SYNONYM_FIELD, text, SYNONYM_PHRASE_BOOST))
        should.append(_all_terms(SYNONYM_FIELD, text, SYNONYM_AND_BOOST))
    should.append(_all_terms(DEFINITION_FIELD, text, DEFINITION_BOOST))
    if fuzzy_enabled(query, config):
        # Synonym graphs do not combine with fuzziness; the literal field does.
        should.append(_all_terms(LITERAL_FIELD, text, FUZZY_BOOST, fuzziness=config.fuzziness))

    return {"bool": {"should": should, "minimum_should_match": 1}}


class RankedRetriever:
    """
    Relevance-ranked retrieval over the concept index.

    Over-fetches up to `config.window` candidates: the final order is only known
    after fusion with exact matches and re-scoring, so asking the index for one
    page would paginate the wrong ordering. The window is a hard capacity bound;
    matches beyond it are never fused.
    """

    def __init__(self, client: SearchIndex, index_name: str):
        self.client = client
        self.index_name = index_name

    def fetch(self, query: NormalizedQuery, config: RankedQueryConfig) -> List[Hit]:
        response = execute_search(
            self.client,
            self.index_name,
            "ranked",
            size=config.window,
            track_total_hits=True,
            source=SOURCE_FIELDS,
            query=build_query(query, config),
        )
        hits = parse_hits(response, MatchKind.RANKED)

        reported = total_hits(response)
        if reported is not None and reported > config.window:
            logger.warning(
                f"Ranked query {query.query!r} matched {reported} documents; "
                f"only the first {config.window} are fused"
            )
        return hits

    @staticmethod
    def exclude(hits: List[Hit], excluded_cuis: AbstractSet[str]) -> List[Hit]:
        """Drops hits whose concept was already surfaced as an exact match."""
        return [h for h in hits if h.cui not in excluded_cuis]

    def retrieve(
        self, query: NormalizedQuery, excluded_cuis: AbstractSet[str], config: RankedQueryConfig
    ) -> List[Hit]:
        return self.exclude(self.fetch(query, config), excluded_cuis)
