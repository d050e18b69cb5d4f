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
from typing import Dict, List, Sequence, Tuple

from loguru import logger

from coreason_cui_search.schemas import Hit


def _sort_key(hit: Hit) -> Tuple[float, str]:
    score = hit.fused_score if hit.fused_score is not None else 0.0
    return (-score, hit.cui)


class ResultFuser:
    """
    Merges exact and ranked hits into the one authoritative ranking for a query.

    1. Exact hits (scored +inf) come first, then ranked hits.
    2. Malformed hits are logged and dropped.
    3. The first hit seen per CUI wins, so an exact match beats its ranked duplicate.
    4. Order: fused score descending (+inf first), then CUI ascending.
    """

    def fuse(self, exact_hits: Sequence[Hit], ranked_hits: Sequence[Hit]) -> List[Hit]:
        combined = [h.with_score(math.inf) for h in exact_hits] + list(ranked_hits)

        by_cui: Dict[str, Hit] = {}
        dropped = 0
        for hit in combined:
            if not hit.is_well_formed:
                logger.warning(f"Dropping malformed hit {hit.doc_id!r} (CUI {hit.cui!r}): missing preferred name")
                dropped += 1
                continue
            if hit.cui not in by_cui:
                by_cui[hit.cui] = hit

        fused = sorted(by_cui.values(), key=_sort_key)
        logger.debug(
            f"Fused {len(exact_hits)} exact + {len(ranked_hits)} ranked hits into {len(fused)} "
            f"({dropped} malformed dropped)"
        )
        return fused
