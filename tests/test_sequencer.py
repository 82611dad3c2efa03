from datetime import date
from decimal import Decimal

import pytest

from league.exceptions import Conflict, FailedPrecondition, InvalidInput, NotFound
from league.models import HandicapRecord, MatchDay, Round, Season
from league.services.locks import SeasonLockManager
from league.services.sequencer import COMPLETED, LOCKED, SCHEDULED, MatchDaySequencer, can_transition


def test_transitions_only_move_forward():
    assert can_transition(SCHEDULED, COMPLETED)
    assert can_transition(COMPLETED, LOCKED)
    assert not can_transition(LOCKED, COMPLETED)
    assert not can_transition(COMPLETED, SCHEDULED)
    assert not can_transition(SCHEDULED, LOCKED)


@pytest.mark.django_db
class TestMatchDayScored:
    def _day(self, season, course, day, status=SCHEDULED):
        return MatchDay.objects.create(season=season, course=course, date=date(2026, 5, day), status=status)

    def test_first_score_completes_day_and_locks_earlier(self, season, course):
        earlier = self._day(season, course, 1, COMPLETED)
        skipped = self._day(season, course, 2)
        today = self._day(season, course, 8)
        later = self._day(season, course, 15, COMPLETED)

        locked = MatchDaySequencer().match_day_scored(today)

        assert locked == [earlier.id]
        statuses = dict(MatchDay.objects.values_list("id", "status"))
        assert statuses[earlier.id] == LOCKED
        assert statuses[skipped.id] == SCHEDULED
        assert statuses[today.id] == COMPLETED
        assert statuses[later.id] == COMPLETED

    def test_rescoring_completed_day_locks_nothing(self, season, course):
        earlier = self._day(season, course, 1, COMPLETED)
        today = self._day(season, course, 8, COMPLETED)
        assert MatchDaySequencer().match_day_scored(today) == []
        assert MatchDay.objects.get(id=earlier.id).status == COMPLETED

    def test_other_seasons_untouched(self, league, season, course):
        other = Season.objects.create(
            league=league, name="2025", start_date=date(2025, 4, 1), end_date=date(2025, 9, 30),
        )
        old = MatchDay.objects.create(season=other, course=course, date=date(2025, 5, 1), status=COMPLETED)
        MatchDaySequencer().match_day_scored(self._day(season, course, 8))
        assert MatchDay.objects.get(id=old.id).status == COMPLETED


@pytest.mark.django_db
class TestManualLock:
    def test_lock_completed_day(self, week1):
        week1.status = COMPLETED
        week1.save()
        MatchDaySequencer().lock(week1)
        week1.refresh_from_db()
        assert week1.status == LOCKED
        assert week1.locked_at is not None

    def test_lock_is_repeatable(self, week1):
        week1.status = LOCKED
        week1.save()
        MatchDaySequencer().lock(week1)
        assert MatchDay.objects.get(id=week1.id).status == LOCKED

    def test_cannot_lock_unscored_day(self, week1):
        with pytest.raises(InvalidInput):
            MatchDaySequencer().lock(week1)


@pytest.mark.django_db
class TestDeleteMatchDay:
    def test_delete_rebuilds_handicaps(self, season, match1, processor, par_card, bogey_card):
        processor.process_match(match1.id, [bogey_card, par_card])
        match_day = MatchDay.objects.get(id=match1.match_day_id)

        MatchDaySequencer().delete_match_day(match_day)

        assert not MatchDay.objects.filter(id=match_day.id).exists()
        record = HandicapRecord.objects.get(season=season, player=match1.player_a)
        assert record.rounds_counted == 0
        assert record.league_handicap_index == Decimal("10.0")

    def test_locked_day_cannot_be_deleted(self, week1):
        week1.status = LOCKED
        week1.save()
        with pytest.raises(FailedPrecondition):
            MatchDaySequencer().delete_match_day(week1)
        assert MatchDay.objects.filter(id=week1.id).exists()

    def test_day_locked_after_loading_cannot_be_deleted(self, match1, match2, processor, par_card, bogey_card):
        processor.process_match(match1.id, [bogey_card, par_card])
        stale = MatchDay.objects.get(id=match1.match_day_id)
        processor.process_match(match2.id, [bogey_card, par_card])
        assert stale.status == COMPLETED

        with pytest.raises(FailedPrecondition):
            MatchDaySequencer().delete_match_day(stale)
        assert MatchDay.objects.get(id=stale.id).status == LOCKED
        assert Round.objects.filter(match=match1).count() == 2

    def test_busy_season_conflicts(self, season, week1):
        locks = SeasonLockManager(timeout=0)
        with locks.hold(season.id):
            with pytest.raises(Conflict):
                MatchDaySequencer().delete_match_day(week1, locks=locks)
        assert MatchDay.objects.filter(id=week1.id).exists()

    def test_already_deleted_day(self, week1):
        stale = MatchDay.objects.get(id=week1.id)
        MatchDaySequencer().delete_match_day(week1)
        with pytest.raises(NotFound):
            MatchDaySequencer().delete_match_day(stale)
