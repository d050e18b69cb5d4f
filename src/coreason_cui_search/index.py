# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from typing import Any, List, Mapping, Optional

from elasticsearch import ApiError, Elasticsearch, TransportError
from loguru import logger
from pydantic import ValidationError

from coreason_cui_search.config import SearchSettings
from coreason_cui_search.exceptions import MalformedResult, RetrievalFailure
from coreason_cui_search.interfaces import SearchIndex
from coreason_cui_search.schemas import Concept, Hit, MatchKind

# Stored fields every retrieval strategy projects.
SOURCE_FIELDS = ["preferred_name", "CUI", "STY", "codes", "definitions"]


class IndexConnector:
    """
    Responsible for building the index client and verifying the concept index is there.
    """

    def __init__(self, settings: SearchSettings):
        self.settings = settings

    def connect(self, verify: bool = True) -> Elasticsearch:
        """
        Returns a client configured with the transport-level timeout and bounded retry.

        Raises:
            ValueError: if `verify` is set and the index is unreachable or missing.
        """
        logger.info(f"Connecting to Elasticsearch at {self.settings.es_url}")
        client = Elasticsearch(
            hosts=[self.settings.es_url],
            request_timeout=self.settings.request_timeout,
            max_retries=self.settings.max_retries,
            retry_on_timeout=True,
        )
        if verify:
            self.verify(client)
        return client

    def verify(self, client: SearchIndex) -> bool:
        index = self.settings.index_name
        try:
            exists = bool(client.indices.exists(index=index))
        except (ApiError, TransportError) as e:
            logger.error(f"Failed to reach Elasticsearch: {e}")
            raise ValueError(f"Failed to reach index '{index}' at {self.settings.es_url}: {e}") from e

        if not exists:
            raise ValueError(f"Index '{index}' not found at {self.settings.es_url}.")

        logger.info(f"Index '{index}' is available.")
        return True


def _error_details(error: ApiError) -> Any:
    body = getattr(error, "body", None)
    if isinstance(body, Mapping) and body.get("error"):
        return body["error"]
    return str(error)


def execute_search(client: SearchIndex, index: str, label: str, **request: Any) -> Mapping[str, Any]:
    """
    Runs one search call, translating client errors into RetrievalFailure.

    Args:
        client: The index client.
        index: Index name.
        label: Short name of the strategy, used in logs.
        **request: Search parameters (query, size, source, ...).
    """
    try:
        return client.search(index=index, **request)
    except ApiError as e:
        details = _error_details(e)
        logger.error(f"Index rejected the {label} query: {details}")
        raise RetrievalFailure("Search failed", details) from e
    except TransportError as e:
        logger.error(f"Index unavailable during the {label} query: {e}")
        raise RetrievalFailure("Search failed", str(e)) from e


def _raw_hits(response: Mapping[str, Any]) -> List[Any]:
    try:
        raw = response["hits"]["hits"]
    except (KeyError, TypeError) as e:
        raise RetrievalFailure("Search failed", "Malformed index response: no hits.hits") from e
    if not isinstance(raw, list):
        raise RetrievalFailure("Search failed", "Malformed index response: hits.hits is not a list")
    return raw


def to_hit(raw: Any, match_kind: MatchKind) -> Hit:
    """
    Validates one raw index hit into a Hit.

    Raises:
        MalformedResult: if the hit has no source or its source is not a valid Concept.
    """
    if not isinstance(raw, Mapping):
        raise MalformedResult(None, "hit is not an object")

    doc_id = raw.get("_id")
    source = raw.get("_source")
    if not isinstance(source, Mapping):
        raise MalformedResult(doc_id, "missing _source")

    try:
        concept = Concept.model_validate(dict(source))
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise MalformedResult(doc_id, f"invalid fields: {fields}") from e

    score = raw.get("_score")
    return Hit(
        doc_id=str(doc_id) if doc_id is not None else concept.cui,
        concept=concept,
        index_score=float(score) if isinstance(score, (int, float)) else 0.0,
        match_kind=match_kind,
    )


def parse_hits(response: Mapping[str, Any], match_kind: MatchKind) -> List[Hit]:
    """
    The single validation boundary for index documents.

    Malformed documents are logged and dropped; one bad document never fails a search.
    A response without a hit list is a RetrievalFailure.
    """
    hits: List[Hit] = []
    for raw in _raw_hits(response):
        try:
            hits.append(to_hit(raw, match_kind))
        except MalformedResult as e:
            logger.warning(f"Dropping malformed document: {e}")
    return hits


def total_hits(response: Mapping[str, Any]) -> Optional[int]:
    """The index-reported match count, or None when the response does not carry one."""
    try:
        total = response["hits"].get("total")
    except (KeyError, TypeError, AttributeError):
        return None
    if isinstance(total, Mapping):
        total = total.get("value")
    return total if isinstance(total, int) else None
