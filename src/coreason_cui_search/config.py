# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from coreason_cui_search.schemas import DEFAULT_PAGE_SIZE, MAX_RESULT_WINDOW, RankedQueryConfig, ScoringPolicy


class SearchSettings(BaseSettings):
    """
    Deployment configuration for the search engine, read from environment variables.

    The scoring policy changes result order for every multi-strategy query,
    so it is fixed per deployment rather than per request.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        case_sensitive=False,
        populate_by_name=True,
        env_ignore_empty=True,
    )

    es_url: str = Field(default="http://127.0.0.1:9200", validation_alias="ES_URL")
    index_name: str = Field(default="umls-cui", validation_alias="CUI_SEARCH_INDEX")
    request_timeout_ms: int = Field(default=120000, gt=0, validation_alias="ES_REQUEST_TIMEOUT_MS")
    max_retries: int = Field(default=3, ge=0, validation_alias="ES_MAX_RETRIES")

    # Upper bound on ranked candidates fetched per request. Results past this
    # window are not fused, so totals and deep pages are approximate beyond it.
    over_fetch_window: int = Field(default=1000, ge=1, le=MAX_RESULT_WINDOW, validation_alias="CUI_SEARCH_OVER_FETCH")
    exact_match_size: int = Field(default=100, ge=1, le=MAX_RESULT_WINDOW, validation_alias="CUI_SEARCH_EXACT_SIZE")

    scoring_policy: ScoringPolicy = Field(
        default=ScoringPolicy.STEM_OVERLAP, validation_alias="CUI_SEARCH_SCORING_POLICY"
    )
    min_word_length_for_fuzzy: int = Field(default=4, ge=1, validation_alias="CUI_SEARCH_FUZZY_MIN_WORD_LENGTH")
    synonym_expansion: bool = Field(default=True, validation_alias="CUI_SEARCH_SYNONYMS")
    fuzziness: str = Field(default="AUTO", validation_alias="CUI_SEARCH_FUZZINESS")
    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, validation_alias="CUI_SEARCH_PAGE_SIZE")

    @property
    def request_timeout(self) -> float:
        """Request timeout in seconds, as the Elasticsearch client expects."""
        return self.request_timeout_ms / 1000.0

    def ranked_config(self, fuzzy: bool) -> RankedQueryConfig:
        return RankedQueryConfig(
            fuzzy=fuzzy,
            min_word_length_for_fuzzy=self.min_word_length_for_fuzzy,
            synonym_expansion=self.synonym_expansion,
            fuzziness=self.fuzziness,
            window=self.over_fetch_window,
        )

    @classmethod
    def from_env(cls) -> "SearchSettings":
        """
        Reads settings from the process environment.

        Raises:
            ValueError: if a variable is set to an invalid value.
        """
        try:
            return cls()
        except ValidationError as e:
            raise ValueError(f"Invalid search configuration: {e}") from e
