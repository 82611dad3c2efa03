# league/services/sequencer.py
"""
Match-day sequencing within a season.

Status only moves forward: scheduled -> completed -> locked. When a match day
is scored for the first time (scheduled -> completed), every earlier match
day of the season that is already completed gets locked. A locked day
refuses any further score ingestion, edit or deletion.

Scheduled days with nothing scored are left alone whatever their date.
"""

from __future__ import annotations

import logging
from typing import List

from django.db import transaction
from django.utils import timezone

from league.exceptions import FailedPrecondition, InvalidInput, NotFound

logger = logging.getLogger(__name__)

SCHEDULED = "scheduled"
COMPLETED = "completed"
LOCKED = "locked"

TRANSITIONS = {
    SCHEDULED: {COMPLETED},
    COMPLETED: {LOCKED},
    LOCKED: set(),
}


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, set())


class MatchDaySequencer:

    def ensure_mutable(self, match_day) -> None:
        if match_day.status == LOCKED:
            raise FailedPrecondition(
                f"match day {match_day.pk} ({match_day.date}) is locked; its scores can no longer change"
            )

    def _advance(self, match_day, target: str) -> None:
        if not can_transition(match_day.status, target):
            raise FailedPrecondition(
                f"match day {match_day.pk} cannot move from {match_day.status} to {target}"
            )
        now = timezone.now()
        match_day.status = target
        if target == COMPLETED:
            match_day.completed_at = now
            match_day.save(update_fields=["status", "completed_at"])
        else:
            match_day.locked_at = now
            match_day.save(update_fields=["status", "locked_at"])

    @transaction.atomic
    def match_day_scored(self, match_day) -> List[int]:
        """
        Call after a match on `match_day` was scored. Returns the ids of the
        match days this locked (empty unless the day just became completed).
        """
        from league.models import MatchDay

        if match_day.status != SCHEDULED:
            return []

        self._advance(match_day, COMPLETED)

        earlier = (
            MatchDay.objects
            .select_for_update()
            .filter(season_id=match_day.season_id, status=COMPLETED, date__lt=match_day.date)
            .order_by("date", "id")
        )
        locked = []
        for md in earlier:
            self._advance(md, LOCKED)
            locked.append(md.id)

        if locked:
            logger.info(
                "Match day %s completed; locked earlier match days %s in season %s",
                match_day.pk, locked, match_day.season_id,
            )
        return locked

    @transaction.atomic
    def lock(self, match_day) -> None:
        """Freeze a completed match day by hand (admin action)."""
        if match_day.status == LOCKED:
            return
        if match_day.status != COMPLETED:
            raise InvalidInput(f"match day {match_day.pk} has no scores to lock")
        self._advance(match_day, LOCKED)
        logger.info("Match day %s locked by hand", match_day.pk)

    def delete_match_day(self, match_day, tracker=None, locks=None) -> None:
        """
        Delete an unlocked match day and rebuild handicaps its rounds fed.

        Runs under the season lock and re-reads the day's row, so a day that
        got locked after `match_day` was loaded is refused.
        """
        from league.models import MatchDay, Player, Round
        from league.services.handicap import HandicapTracker
        from league.services.locks import default_lock_manager, lock_season_row

        locks = locks or default_lock_manager
        season_id = match_day.season_id

        with locks.hold(season_id):
            with transaction.atomic():
                season = lock_season_row(season_id)
                current = MatchDay.objects.select_for_update().filter(id=match_day.pk).first()
                if current is None:
                    raise NotFound(f"match day {match_day.pk} not found")
                self.ensure_mutable(current)

                player_ids = set(
                    Round.objects
                    .filter(match__match_day=current, player_absent=False)
                    .values_list("player_id", flat=True)
                )
                logger.info("Deleting match day %s (%s)", current.pk, current.status)
                current.delete()

                tracker = tracker or HandicapTracker()
                for player in Player.objects.filter(id__in=player_ids):
                    tracker.refresh(season, player)
