# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from typing import Any, Optional


class CuiSearchError(Exception):
    """Base class for all errors raised by the search engine."""


class InvalidRequest(CuiSearchError):
    """
    The caller sent a request that cannot be searched (e.g. an empty query).
    Detected before any index call is made. Maps to HTTP 400.
    """

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else message


class RetrievalFailure(CuiSearchError):
    """
    The index could not answer: unreachable, timed out, rejected the query,
    or returned a response we cannot read. Aborts the whole request. Maps to HTTP 500.
    """

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else message


class MalformedResult(CuiSearchError):
    """
    A single index document is missing required fields.
    Raised at the response boundary, logged and dropped there; never reaches the caller.
    """

    def __init__(self, doc_id: Optional[str], reason: str):
        super().__init__(f"Malformed document {doc_id!r}: {reason}")
        self.doc_id = doc_id
        self.reason = reason
