"""
Core — Query Fallback

Listing queries run an efficient, index-backed query first. When the
database rejects it (missing index, unsupported lookup, transient
error) a broader query is run and filtered / sorted in Python. If both
fail the caller gets an empty list so views degrade to "no items".

@file core/queries.py
"""

import logging
from typing import Callable, Iterable, TypeVar

from django.db import DatabaseError

logger = logging.getLogger('beinghappy')

T = TypeVar('T')


def query_with_fallback(
    primary: Callable[[], Iterable[T]],
    fallback: Callable[[], Iterable[T]] | None,
    *,
    label: str,
) -> list[T]:
    try:
        return list(primary())
    except DatabaseError as exc:
        logger.warning('%s primary query failed, falling back to client-side filter/sort: %s', label, exc)

    if fallback is None:
        return []

    try:
        return list(fallback())
    except DatabaseError as exc:
        logger.error('%s fallback also failed: %s', label, exc)
        return []
