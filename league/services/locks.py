# league/services/locks.py
"""
Per-season mutual exclusion for score processing.

Two layers:
  - SeasonLockManager serialises submissions inside one process, waiting
    at most `timeout` seconds before raising Conflict.
  - lock_season_row() takes the season's row lock inside the surrounding
    transaction so separate worker processes queue on the database too.
    On PostgreSQL the wait is capped with `SET LOCAL lock_timeout`; SQLite
    serialises writers on its own.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Optional

from django.conf import settings
from django.db import DatabaseError, connection

from league.exceptions import Conflict, NotFound

logger = logging.getLogger(__name__)


class SeasonLockManager:
    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout if timeout is not None else getattr(settings, "LEAGUE_SEASON_LOCK_TIMEOUT", 5.0)
        self._guard = threading.Lock()
        self._locks: Dict[object, threading.Lock] = {}

    def _lock_for(self, season_id) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(season_id, threading.Lock())

    @contextmanager
    def hold(self, season_id):
        lock = self._lock_for(season_id)
        if not lock.acquire(timeout=self.timeout):
            logger.warning("Season %s busy for %.1fs, rejecting submission", season_id, self.timeout)
            raise Conflict(f"processing in progress for season {season_id}, retry shortly")
        try:
            yield
        finally:
            lock.release()


# one manager per process; views share it so requests on different threads queue
default_lock_manager = SeasonLockManager()


def lock_season_row(season_id, timeout: Optional[float] = None):
    """Row-lock the season for the rest of the current transaction."""
    from league.models import Season

    if timeout is None:
        timeout = getattr(settings, "LEAGUE_SEASON_LOCK_TIMEOUT", 5.0)

    try:
        if connection.vendor == "postgresql":
            with connection.cursor() as cursor:
                cursor.execute("SET LOCAL lock_timeout = %s", [f"{int(timeout * 1000)}ms"])
        season = Season.objects.select_for_update().filter(id=season_id).first()
    except DatabaseError as exc:
        logger.warning("Season %s row lock not acquired: %s", season_id, exc)
        raise Conflict(f"processing in progress for season {season_id}, retry shortly")

    if season is None:
        raise NotFound(f"season {season_id} not found")
    return season
