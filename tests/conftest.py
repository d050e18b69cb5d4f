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
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from coreason_cui_search.config import SearchSettings
from coreason_cui_search.pipeline import CuiSearchEngine
from coreason_cui_search.stemmers import PorterStemmer

# --- Synthetic corpus ---

# C0027051: Myocardial Infarction, code string "Heart Attack" (exact match for "heart attack")
# C0018787: Heart
# C0001511: Panic attack
# C0038454: Stroke ("brain attack")
# C0021400 / C0016627: two influenza concepts sharing the code string "Flu"
# C0009999: no preferred name (malformed, must never be returned)
CORPUS: List[Dict[str, Any]] = [
    {
        "CUI": "C0027051",
        "preferred_name": "Myocardial Infarction",
        "STY": ["Disease or Syndrome"],
        "codes": [
            {
                "SAB": "MSH",
                "CODE": "D009203",
                "preferred_name": "Myocardial Infarction",
                "strings": ["Myocardial Infarction", "Heart Attack"],
            },
            {"SAB": "ICD10CM", "CODE": "I21.9", "preferred_name": "Acute myocardial infarction", "strings": []},
        ],
        "definitions": ["Necrosis of the myocardium caused by an obstruction of the coronary blood supply."],
    },
    {
        "CUI": "C0018787",
        "preferred_name": "Heart",
        "STY": ["Body Part, Organ, or Organ Component"],
        "codes": [{"SAB": "MSH", "CODE": "D006321", "preferred_name": "Heart", "strings": ["Heart", "Hearts"]}],
        "definitions": ["The hollow muscular organ that maintains the circulation of the blood."],
    },
    {
        "CUI": "C0001511",
        "preferred_name": "Panic attack",
        "STY": ["Mental or Behavioral Dysfunction"],
        "codes": [{"SAB": "MSH", "CODE": "D000071", "preferred_name": "Panic attack", "strings": ["Panic attacks"]}],
    },
    {
        "CUI": "C0038454",
        "preferred_name": "Stroke",
        "STY": ["Disease or Syndrome"],
        "codes": [
            {
                "SAB": "MSH",
                "CODE": "D020521",
                "preferred_name": "Stroke",
                "strings": ["Cerebrovascular accident", "brain attack"],
            }
        ],
    },
    {
        "CUI": "C0021400",
        "preferred_name": "Influenza",
        "STY": ["Disease or Syndrome"],
        "codes": [{"SAB": "MSH", "CODE": "D007251", "preferred_name": "Influenza", "strings": ["Grippe", "Flu"]}],
    },
    {
        "CUI": "C0016627",
        "preferred_name": "Avian Influenza",
        "STY": ["Disease or Syndrome"],
        "codes": [{"SAB": "MSH", "CODE": "D005585", "preferred_name": "Avian Influenza", "strings": ["Bird flu", "Flu"]}],
    },
    {
        "CUI": "C0009999",
        "preferred_name": None,
        "STY": [],
        "codes": [{"SAB": "SRC", "CODE": "X1", "preferred_name": None, "strings": ["orphan heart attack record"]}],
    },
]

_TOKEN = re.compile(r"\w+")


def _doc_text(doc: Dict[str, Any]) -> str:
    parts = [doc.get("preferred_name") or ""]
    for code in doc.get("codes", []):
        parts.extend(code.get("strings", []))
    parts.extend(doc.get("definitions", []))
    return " ".join(parts).lower()


def _response(docs: List[Dict[str, Any]], scores: List[float], size: int) -> Dict[str, Any]:
    hits = [{"_id": d["CUI"], "_score": s, "_source": dict(d)} for d, s in zip(docs, scores)]
    return {"hits": {"total": {"value": len(hits), "relation": "eq"}, "hits": hits[:size]}}


class FakeIndex:
    """
    In-memory stand-in for the Elasticsearch client.

    Evaluates the query shapes the engine sends:
    - term on `<field>.lowercase_keyword` (case-insensitive equality),
    - nested term on `codes.strings` / `codes.CODE`,
    - bool/should relevance queries (score = matched query words, +1 for the whole phrase).
    """

    def __init__(self, docs: Optional[List[Dict[str, Any]]] = None):
        self.docs = docs if docs is not None else CORPUS
        self.calls: List[Dict[str, Any]] = []
        self.fail_when: Optional[Callable[[Dict[str, Any]], bool]] = None
        self.error: Exception = RuntimeError("index failure")
        self.indices = MagicMock()
        self.indices.exists.return_value = True

    def ping(self) -> bool:
        return True

    def search(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(kwargs)
        if self.fail_when is not None and self.fail_when(kwargs):
            raise self.error

        query = kwargs["query"]
        size = kwargs.get("size", 10)
        if "bool" in query:
            return self._relevance(query["bool"], size)
        return self._term(query, size)

    def _term(self, query: Dict[str, Any], size: int) -> Dict[str, Any]:
        nested = "nested" in query
        term = query["nested"]["query"]["term"] if nested else query["term"]
        ((field, value),) = term.items()
        base = field.replace(".lowercase_keyword", "")

        matches = []
        for doc in self.docs:
            if nested:
                key = base.split(".", 1)[1]
                values = []
                for code in doc.get("codes", []):
                    v = code.get(key)
                    values.extend(v if isinstance(v, list) else [v])
            else:
                values = [doc.get(base)]
            if any(isinstance(v, str) and v.lower() == value for v in values):
                matches.append(doc)
        return _response(matches, [1.0] * len(matches), size)

    def _relevance(self, query: Dict[str, Any], size: int) -> Dict[str, Any]:
        clause = query["should"][0]
        ((_, params),) = next(iter(clause.values())).items()
        text = params["query"].lower()
        words = text.split()

        scored = []
        for doc in self.docs:
            doc_text = _doc_text(doc)
            tokens = set(_TOKEN.findall(doc_text))
            matched = sum(1 for w in words if w in tokens)
            if matched:
                scored.append((matched + (1.0 if text in doc_text else 0.0), doc))
        scored.sort(key=lambda pair: (-pair[0], pair[1]["CUI"]))
        return _response([d for _, d in scored], [s for s, _ in scored], size)

    def calls_with(self, predicate: Callable[[Dict[str, Any]], bool]) -> List[Dict[str, Any]]:
        return [c for c in self.calls if predicate(c)]


def is_ranked_call(call: Dict[str, Any]) -> bool:
    return "bool" in call["query"]


# --- Fixtures ---

SETTINGS_VARIABLES = [
    "ES_URL",
    "ES_REQUEST_TIMEOUT_MS",
    "ES_MAX_RETRIES",
    "CUI_SEARCH_INDEX",
    "CUI_SEARCH_OVER_FETCH",
    "CUI_SEARCH_EXACT_SIZE",
    "CUI_SEARCH_SCORING_POLICY",
    "CUI_SEARCH_FUZZY_MIN_WORD_LENGTH",
    "CUI_SEARCH_SYNONYMS",
    "CUI_SEARCH_FUZZINESS",
    "CUI_SEARCH_PAGE_SIZE",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Settings are read from the environment; keep the host's variables out of the tests."""
    for name in SETTINGS_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_index() -> FakeIndex:
    return FakeIndex()


@pytest.fixture
def settings() -> SearchSettings:
    return SearchSettings()


@pytest.fixture
def stemmer() -> PorterStemmer:
    return PorterStemmer()


@pytest.fixture
def engine(fake_index: FakeIndex, settings: SearchSettings, stemmer: PorterStemmer) -> CuiSearchEngine:
    return CuiSearchEngine(fake_index, settings, stemmer=stemmer)
