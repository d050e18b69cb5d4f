# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from concurrent.futures import FIRST_EXCEPTION, Future, wait
from typing import List, Sequence, TypeVar

T = TypeVar("T")


def join_all(futures: Sequence["Future[T]"]) -> List[T]:
    """
    Waits for every future and returns their results in submission order.

    Raises the first failure as soon as it happens, without waiting for the others.
    Callers are expected to cancel the remaining futures (executor shutdown).
    """
    wait(futures, return_when=FIRST_EXCEPTION)
    for future in futures:
        if future.done() and not future.cancelled():
            error = future.exception()
            if error is not None:
                raise error
    return [future.result() for future in futures]
