# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

import re
import unicodedata

from loguru import logger

from coreason_cui_search.exceptions import InvalidRequest
from coreason_cui_search.interfaces import Stemmer
from coreason_cui_search.schemas import NormalizedQuery
from coreason_cui_search.stemmers import stem_all

_WHITESPACE = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


class QueryNormalizer:
    """
    Canonicalizes raw user input into the single query every strategy uses.

    Steps, in order:
    1. Unicode NFC (canonical composition).
    2. Trim and collapse whitespace runs to one space.
    3. Case-fold (kept separately from the cased query).
    4. Replace each `%` with " percent" (reserved by the index query parser).

    Whitespace is collapsed again after step 4 so "5 % off" does not yield a double space.
    """

    def __init__(self, stemmer: Stemmer):
        self.stemmer = stemmer

    def normalize(self, raw: str) -> NormalizedQuery:
        """
        Args:
            raw: The user's query text. Must not be blank.

        Raises:
            InvalidRequest: if the input is empty or whitespace only.
        """
        if raw is None or not raw.strip():
            raise InvalidRequest("Missing query parameter ?q=")

        text = unicodedata.normalize("NFC", raw)
        text = _collapse(text)
        query = _collapse(text.replace("%", " percent"))
        lowered = query.lower()

        words = lowered.split(" ")
        stems = frozenset(stem_all(self.stemmer, words))

        logger.debug(f"Normalized query {raw!r} -> {query!r} ({len(words)} words)")
        return NormalizedQuery(query=query, lowered=lowered, words=words, stems=stems)
