# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

import json
import sys
from typing import Annotated, Optional

import typer

from coreason_cui_search import __version__
from coreason_cui_search.config import SearchSettings
from coreason_cui_search.exceptions import InvalidRequest
from coreason_cui_search.pipeline import cui_search, initialize
from coreason_cui_search.utils.logger import logger

app = typer.Typer(
    name="coreason-cui-search",
    help="CLI for coreason-cui-search: free-text lookup of UMLS concepts.",
    add_completion=False,
)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Free-text query (e.g. 'heart attack')")],
    page: Annotated[int, typer.Option("--page", "-p", help="1-based page number")] = 1,
    size: Annotated[Optional[int], typer.Option("--size", "-n", help="Results per page")] = None,
    fuzzy: Annotated[bool, typer.Option("--fuzzy/--no-fuzzy", help="Enable edit-distance matching")] = False,
    es_url: Annotated[Optional[str], typer.Option("--es-url", help="Elasticsearch URL (overrides ES_URL)")] = None,
    index: Annotated[Optional[str], typer.Option("--index", "-i", help="Concept index name")] = None,
) -> None:
    """
    Search concepts and print one page of results as JSON.
    """
    try:
        settings = SearchSettings.from_env()
        overrides = {}
        if es_url:
            overrides["es_url"] = es_url
        if index:
            overrides["index_name"] = index
        if overrides:
            settings = settings.model_copy(update=overrides)

        initialize(settings)
        result = cui_search(query, page=page, size=size, fuzzy=fuzzy)
        typer.echo(json.dumps(result.to_response(), indent=2, allow_nan=False))
    except InvalidRequest as e:
        logger.error(f"Invalid query: {e.message}")
        sys.exit(2)
    except Exception:
        logger.exception("Search Failed")
        sys.exit(1)


@app.command()
def version() -> None:
    """Print the version of coreason-cui-search."""
    typer.echo(f"coreason-cui-search v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()  # pragma: no cover
