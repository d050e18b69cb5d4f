# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Union

from coreason_cui_search.config import SearchSettings
from coreason_cui_search.exact import ExactMatchRetriever
from coreason_cui_search.fusion import ResultFuser
from coreason_cui_search.index import IndexConnector
from coreason_cui_search.interfaces import SearchIndex, Stemmer
from coreason_cui_search.normalizer import QueryNormalizer
from coreason_cui_search.paginator import Paginator
from coreason_cui_search.ranked import RankedRetriever
from coreason_cui_search.schemas import Hit, Page, SearchRequest
from coreason_cui_search.scoring import StemCoverageScorer
from coreason_cui_search.stemmers import PorterStemmer
from coreason_cui_search.utils.concurrency import join_all
from coreason_cui_search.utils.logger import logger


class CuiSearchEngine:
    """
    Runs the full retrieval and fusion pipeline for one request.

    Stateless across requests: every page re-runs retrieval and fusion from scratch,
    so pages of the same query are slices of the same ranking. The only shared
    resource is the (read-only) index client.
    """

    def __init__(self, client: SearchIndex, settings: SearchSettings, stemmer: Optional[Stemmer] = None):
        self.settings = settings
        stemmer = stemmer or PorterStemmer()

        self.normalizer = QueryNormalizer(stemmer)
        self.exact = ExactMatchRetriever(client, settings.index_name, size=settings.exact_match_size)
        self.ranked = RankedRetriever(client, settings.index_name)
        self.scorer = StemCoverageScorer(stemmer, settings.scoring_policy)
        self.fuser = ResultFuser()
        self.paginator = Paginator(settings.default_page_size)

    def rank(self, request: SearchRequest) -> List[Hit]:
        """
        Returns the complete fused ranking for the request's query.

        Raises:
            InvalidRequest: if the query is blank (before any index call).
            RetrievalFailure: if either retrieval step fails.
        """
        query = self.normalizer.normalize(request.query)
        config = self.settings.ranked_config(request.fuzzy)

        # Both strategies are independent; fusion waits for both (or the first failure).
        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="cui-search")
        try:
            exact_future = executor.submit(self.exact.retrieve, query.lowered)
            ranked_future = executor.submit(self.ranked.fetch, query, config)
            exact_hits, ranked_hits = join_all([exact_future, ranked_future])
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        ranked_hits = self.ranked.exclude(ranked_hits, {h.cui for h in exact_hits})
        scored = self.scorer.score_all(ranked_hits, query.stems)
        return self.fuser.fuse(exact_hits, scored)

    def search(self, request: SearchRequest) -> Page:
        start = time.perf_counter()
        fused = self.rank(request)
        page = self.paginator.paginate(fused, request.page, request.size)
        logger.info(
            f"Search {request.query!r} page={page.page_number} size={page.page_size} fuzzy={request.fuzzy}: "
            f"{len(page.results)}/{page.total} results in {time.perf_counter() - start:.3f}s"
        )
        return page


class SearchContext:
    """
    Global context/singleton holding the index client and the engine.
    """

    _instance: Optional["SearchContext"] = None

    def __init__(self, settings: SearchSettings):
        logger.info(f"Initializing search context for index '{settings.index_name}'")
        self.settings = settings
        self.client = IndexConnector(settings).connect()
        self.engine = CuiSearchEngine(self.client, settings)

    @classmethod
    def initialize(cls, settings: Optional[SearchSettings] = None) -> None:
        cls._instance = cls(settings or SearchSettings.from_env())

    @classmethod
    def get_instance(cls) -> "SearchContext":
        if cls._instance is None:
            raise RuntimeError("SearchContext not initialized. Call initialize() first.")
        return cls._instance


# --- Public API Functions ---


def initialize(settings: Optional[SearchSettings] = None) -> None:
    """Initializes the search engine (from the environment when no settings are given)."""
    SearchContext.initialize(settings)


def cui_search(
    q: Optional[str],
    page: Union[str, int, None] = 1,
    size: Union[str, int, None] = None,
    fuzzy: Union[str, bool, None] = False,
) -> Page:
    """
    Searches concepts by free text and returns one page of the fused ranking.
    """
    ctx = SearchContext.get_instance()
    request = SearchRequest.from_params(q, page, size, fuzzy, default_size=ctx.settings.default_page_size)
    return ctx.engine.search(request)
