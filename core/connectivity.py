"""
Core — Connectivity Precondition

Every write (locations, posts, categories, favorites, profile) is
gated on the service being online: not forced into OFFLINE_MODE and
able to reach its database. The check runs before any write is
attempted so callers fail fast with a readable message.

@file core/connectivity.py
"""

import logging

from django.conf import settings
from django.db import DatabaseError, connection

from core.exceptions import OfflineError

logger = logging.getLogger('beinghappy')


def is_online() -> bool:
    if getattr(settings, 'OFFLINE_MODE', False):
        return False
    try:
        connection.ensure_connection()
    except DatabaseError as exc:
        logger.warning('Database unreachable: %s', exc)
        return False
    return True


def ensure_online(action: str) -> None:
    """Raise OfflineError, e.g. 'Online connection required to create locations.'"""
    if not is_online():
        raise OfflineError(detail=f'Online connection required to {action}.')
