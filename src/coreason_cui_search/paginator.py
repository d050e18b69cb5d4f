# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from typing import Sequence

from coreason_cui_search.schemas import DEFAULT_PAGE_SIZE, Hit, Page, SearchResult


class Paginator:
    """
    Slices the fused ranking into one page. Keeps no state between calls.
    """

    def __init__(self, default_size: int = DEFAULT_PAGE_SIZE):
        self.default_size = default_size

    def paginate(self, hits: Sequence[Hit], page_number: int, page_size: int) -> Page:
        """
        Args:
            hits: The fully fused, fully ordered result list.
            page_number: 1-based page number; values below 1 are treated as 1.
            page_size: Results per page; non-positive values use the default size.

        Returns:
            The page. A page past the end is empty, not an error.
        """
        size = page_size if page_size > 0 else self.default_size
        index = max(page_number - 1, 0)
        start = index * size

        return Page(
            total=len(hits),
            page_number=index + 1,
            page_size=size,
            results=[SearchResult.from_hit(h) for h in hits[start : start + size]],
        )
