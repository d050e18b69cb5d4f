# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

"""
coreason-cui-search
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .exact import ExactMatchRetriever
from .fusion import ResultFuser
from .normalizer import QueryNormalizer
from .paginator import Paginator
from .pipeline import CuiSearchEngine, cui_search, initialize
from .ranked import RankedRetriever
from .scoring import StemCoverageScorer

__all__ = [
    "QueryNormalizer",
    "ExactMatchRetriever",
    "RankedRetriever",
    "StemCoverageScorer",
    "ResultFuser",
    "Paginator",
    "CuiSearchEngine",
    "initialize",
    "cui_search",
]
