# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from typing import Any, Mapping, Protocol


class Stemmer(Protocol):
    """
    Protocol for deterministic word stemmers.
    """

    def stem(self, word: str) -> str:
        """
        Returns the stem of a single word.
        """
        ...


class SearchIndex(Protocol):
    """
    The subset of the Elasticsearch client the engine relies on.
    """

    indices: Any

    def search(self, **kwargs: Any) -> Mapping[str, Any]:
        """
        Runs one search request and returns the raw response body.
        """
        ...

    def ping(self) -> bool:
        """
        Returns True when the cluster answers.
        """
        ...
