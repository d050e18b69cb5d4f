# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Tuple

from loguru import logger

from coreason_cui_search.index import SOURCE_FIELDS, execute_search, parse_hits
from coreason_cui_search.interfaces import SearchIndex
from coreason_cui_search.schemas import Hit, MatchKind
from coreason_cui_search.utils.concurrency import join_all

# (label, field, nested path or None). Each field is a lowercase/ascii-folded keyword sub-field.
EXACT_FIELDS: List[Tuple[str, str, Any]] = [
    ("preferred_name", "preferred_name.lowercase_keyword", None),
    ("CUI", "CUI.lowercase_keyword", None),
    ("codes.strings", "codes.strings.lowercase_keyword", "codes"),
    ("codes.CODE", "codes.CODE.lowercase_keyword", "codes"),
]


def term_query(field: str, value: str, nested_path: Any = None) -> Dict[str, Any]:
    query: Dict[str, Any] = {"term": {field: value}}
    if nested_path:
        query = {"nested": {"path": nested_path, "query": query}}
    return query


class ExactMatchRetriever:
    """
    Finds concepts whose name, identifier, code string or code value equals the query.

    All field lookups run concurrently; their hits are unioned by document id in field
    order, so completion order never changes the result. Any failing lookup fails the
    whole step: a partial exact set would silently under-report.
    """

    def __init__(self, client: SearchIndex, index_name: str, size: int = 100):
        self.client = client
        self.index_name = index_name
        self.size = size

    def _lookup(self, label: str, field: str, nested_path: Any, value: str) -> List[Hit]:
        response = execute_search(
            self.client,
            self.index_name,
            f"exact:{label}",
            size=self.size,
            source=SOURCE_FIELDS,
            query=term_query(field, value, nested_path),
        )
        return parse_hits(response, MatchKind.EXACT)

    def retrieve(self, lowered_query: str) -> List[Hit]:
        """
        Args:
            lowered_query: The case-folded normalized query.

        Returns:
            Exact hits, unique by document id.

        Raises:
            RetrievalFailure: if any field lookup fails.
        """
        executor = ThreadPoolExecutor(max_workers=len(EXACT_FIELDS), thread_name_prefix="exact")
        try:
            futures = [
                executor.submit(self._lookup, label, field, nested_path, lowered_query)
                for label, field, nested_path in EXACT_FIELDS
            ]
            per_field = join_all(futures)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        seen = set()
        hits: List[Hit] = []
        for (label, _, _), field_hits in zip(EXACT_FIELDS, per_field):
            new = [h for h in field_hits if h.doc_id not in seen]
            seen.update(h.doc_id for h in new)
            hits.extend(new)
            if new:
                logger.debug(f"Exact match on {label}: {len(new)} new documents")

        return hits
