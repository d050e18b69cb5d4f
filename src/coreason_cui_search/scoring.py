# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from typing import AbstractSet, List

from coreason_cui_search.interfaces import Stemmer
from coreason_cui_search.schemas import Hit, ScoringPolicy
from coreason_cui_search.stemmers import stem_all


def coverage_ratio(stemmer: Stemmer, text: str, query_stems: AbstractSet[str]) -> float:
    """
    Fraction of the query stems present among the stems of `text`.

    Returns 0.0 when there are no query stems. Always within [0, 1].
    """
    if not query_stems:
        return 0.0
    field_stems = stem_all(stemmer, text.lower().split())
    return len(query_stems & field_stems) / len(query_stems)


class StemCoverageScorer:
    """
    Assigns the fused score of ranked hits under the configured policy.

    Exactly one policy is active per deployment:
    - stem-overlap: fused score is the stem coverage ratio.
    - index-score: fused score is the index's relevance score.
    """

    def __init__(self, stemmer: Stemmer, policy: ScoringPolicy = ScoringPolicy.STEM_OVERLAP):
        self.stemmer = stemmer
        self.policy = policy

    def score(self, hit: Hit, query_stems: AbstractSet[str]) -> Hit:
        if self.policy == ScoringPolicy.INDEX_SCORE:
            return hit.with_score(hit.index_score)
        return hit.with_score(coverage_ratio(self.stemmer, hit.concept.searchable_text, query_stems))

    def score_all(self, hits: List[Hit], query_stems: AbstractSet[str]) -> List[Hit]:
        return [self.score(h, query_stems) for h in hits]
