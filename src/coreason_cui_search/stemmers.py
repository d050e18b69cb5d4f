# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from functools import lru_cache
from typing import Iterable, Set

from nltk.stem import PorterStemmer as _NltkPorterStemmer

from coreason_cui_search.interfaces import Stemmer


class PorterStemmer(Stemmer):
    """
    Stemmer implementation using NLTK's Porter algorithm.
    """

    def __init__(self) -> None:
        self._stemmer = _NltkPorterStemmer()
        # Concept texts repeat the same vocabulary constantly; stems are pure.
        self._stem = lru_cache(maxsize=65536)(self._stemmer.stem)

    def stem(self, word: str) -> str:
        return self._stem(word.lower())


def stem_all(stemmer: Stemmer, words: Iterable[str]) -> Set[str]:
    """Stems every non-empty word and returns the set of stems."""
    return {stemmer.stem(w) for w in words if w}
