# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from concurrent.futures import Future, ThreadPoolExecutor
from threading import Event
from typing import List

import pytest

from coreason_cui_search.utils import logger as logger_module
from coreason_cui_search.utils.concurrency import join_all
from coreason_cui_search.utils.logger import configure, logger


def test_logger_interface() -> None:
    # Verify logger is accessible
    logger.info("Test log")
    assert logger_module.logger is logger


def test_configure_replaces_existing_sinks() -> None:
    messages: List[str] = []
    logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    configure("INFO")
    logger.info("after reconfigure")
    assert messages == []


def test_join_all_returns_results_in_order() -> None:
    with ThreadPoolExecutor(max_workers=2) as executor:
        futures = [executor.submit(lambda v=v: v * 2) for v in (1, 2, 3)]
        assert join_all(futures) == [2, 4, 6]


def test_join_all_fails_fast() -> None:
    release = Event()
    executor = ThreadPoolExecutor(max_workers=2)
    try:
        slow = executor.submit(release.wait, 5)

        def boom() -> None:
            raise ValueError("first failure")

        failing = executor.submit(boom)
        with pytest.raises(ValueError, match="first failure"):
            join_all([slow, failing])
        assert not slow.done()
    finally:
        release.set()
        executor.shutdown(wait=True)


def test_join_all_empty() -> None:
    assert join_all([]) == []


def test_join_all_with_completed_futures() -> None:
    done: Future = Future()
    done.set_result("ok")
    assert join_all([done]) == ["ok"]
