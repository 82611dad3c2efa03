from decimal import Decimal

import pytest

from league.exceptions import Conflict, FailedPrecondition, InvalidInput, NotFound
from league.models import HandicapRecord, LeagueMember, Match, MatchDay, Player, Round
from league.services.handicap import HandicapTracker
from league.services.locks import SeasonLockManager
from league.services.match import MAX_MATCH_POINTS, MatchProcessor, bonus_points, hole_points


def test_hole_points():
    a, b = hole_points([3, 4, 5], [4, 4, 4])
    assert a == [2, 1, 0]
    assert b == [0, 1, 2]


def test_bonus_points():
    assert bonus_points(30, 31) == (4, 0)
    assert bonus_points(31, 30) == (0, 4)
    assert bonus_points(30, 30) == (2, 2)


@pytest.mark.django_db
class TestProcessMatch:
    def test_both_present(self, match1, processor, par_card, bogey_card):
        result = processor.process_match(match1.id, [bogey_card, par_card])

        # Alice plays off 11, Bob off 4: seven strokes to Alice
        assert result.side_a.playing_handicap == 11
        assert result.side_b.playing_handicap == 4
        assert result.side_a.strokes_received == 7
        assert result.side_a.match_net_score == 38
        assert result.side_b.match_net_score == 36
        assert result.points == (7, 15)
        assert sum(result.points) == MAX_MATCH_POINTS
        assert result.side_a.differential == Decimal("9.9")
        assert result.side_b.differential == Decimal("1.4")
        assert result.side_a.is_provisional and result.side_b.is_provisional

        match1.refresh_from_db()
        assert match1.status == Match.STATUS_COMPLETED
        assert (match1.player_a_points, match1.player_b_points) == (7, 15)
        assert Round.objects.filter(match=match1).count() == 2
        assert MatchDay.objects.get(id=match1.match_day_id).status == MatchDay.STATUS_COMPLETED

    def test_equal_handicaps_equal_cards_split_points(self, league, week1, alice, processor, par_card):
        twin = Player.objects.create(name="Dana")
        LeagueMember.objects.create(league=league, player=twin, provisional_handicap=Decimal("10.0"))
        match = Match.objects.create(match_day=week1, player_a=alice, player_b=twin)

        result = processor.process_match(match.id, [par_card, list(par_card)])

        assert result.side_a.strokes_received == result.side_b.strokes_received == 0
        assert result.side_a.hole_points == (1,) * 9
        assert result.points == (11, 11)

    def test_resubmission_is_idempotent(self, match1, processor, par_card, bogey_card):
        first = processor.process_match(match1.id, [bogey_card, par_card])
        round_ids = sorted(Round.objects.filter(match=match1).values_list("id", flat=True))

        second = processor.process_match(match1.id, [bogey_card, par_card])

        assert second.to_dict() == first.to_dict()
        assert second.points == first.points
        assert second.side_a.playing_handicap == first.side_a.playing_handicap
        assert sorted(Round.objects.filter(match=match1).values_list("id", flat=True)) == round_ids
        assert HandicapRecord.objects.get(player=match1.player_a).rounds_counted == 1

    def test_edit_replaces_previous_result(self, match1, processor, par_card, bogey_card):
        processor.process_match(match1.id, [bogey_card, par_card])
        result = processor.process_match(match1.id, [par_card, bogey_card])
        assert result.side_b.gross_score == 45
        assert Round.objects.get(match=match1, player=match1.player_b).gross_score == 45

    def test_absent_player_gets_synthetic_card(self, season, match1, processor, par_card):
        result = processor.process_match(match1.id, [par_card, [1] * 9], absent=[False, True])

        # Bob: playing handicap 4 + par 36 + 3, typed scores ignored
        assert result.side_b.absent
        assert result.side_b.hole_scores == (5, 5, 4, 5, 5, 5, 3, 6, 5)
        assert result.side_b.gross_score == 43
        assert result.side_b.differential is None
        assert result.points == (20, 2)

        bob_round = Round.objects.get(match=match1, player=match1.player_b)
        assert bob_round.player_absent
        assert bob_round.handicap_differential is None
        assert not HandicapRecord.objects.filter(season=season, player=match1.player_b).exists()

    def test_absence_leaves_existing_handicap_unchanged(self, league, season, match1, match2, processor,
                                                        par_card, bogey_card):
        processor.process_match(match1.id, [bogey_card, par_card])
        tracker = HandicapTracker()
        before = tracker.get_handicap(league.id, season.id, match1.player_b_id)
        assert before.index == Decimal("1.4")

        processor.process_match(match2.id, [par_card, None], absent=[False, True])

        after = tracker.get_handicap(league.id, season.id, match1.player_b_id)
        assert after == before
        assert len(tracker.history(season, match1.player_b)) == 1
        assert HandicapRecord.objects.get(season=season, player=match1.player_b).rounds_counted == 1

    def test_both_absent(self, match1, processor):
        result = processor.process_match(match1.id, [None, None], absent=[True, True])
        assert sum(result.points) == MAX_MATCH_POINTS
        assert Round.objects.filter(match=match1, player_absent=True).count() == 2

    def test_edit_to_absent_drops_differential(self, season, match1, processor, par_card, bogey_card):
        processor.process_match(match1.id, [bogey_card, par_card])
        processor.process_match(match1.id, [bogey_card, None], absent=[False, True])

        record = HandicapRecord.objects.get(season=season, player=match1.player_b)
        assert record.rounds_counted == 0
        assert record.is_provisional
        assert record.league_handicap_index == Decimal("4.0")

    def test_later_match_uses_earlier_rounds(self, match1, match2, processor, par_card, bogey_card):
        processor.process_match(match1.id, [bogey_card, par_card])
        result = processor.process_match(match2.id, [bogey_card, par_card])

        # Alice 9.9 -> 11, Bob 1.4 -> 1 on slope 120
        assert not result.side_a.is_provisional
        assert result.side_a.handicap_index == Decimal("9.9")
        assert result.side_b.playing_handicap == 1
        assert result.side_a.strokes_received == 10

    def test_scoring_later_day_locks_earlier(self, match1, match2, processor, par_card, bogey_card):
        processor.process_match(match1.id, [bogey_card, par_card])
        processor.process_match(match2.id, [bogey_card, par_card])

        assert MatchDay.objects.get(id=match1.match_day_id).status == MatchDay.STATUS_LOCKED
        with pytest.raises(FailedPrecondition):
            processor.process_match(match1.id, [par_card, par_card])
        with pytest.raises(FailedPrecondition):
            processor.clear_match(match1.id)

    def test_locked_day_left_untouched(self, match1, match2, processor, par_card, bogey_card):
        processor.process_match(match1.id, [bogey_card, par_card])
        processor.process_match(match2.id, [bogey_card, par_card])
        before = Round.objects.get(match=match1, player=match1.player_a).gross_score

        with pytest.raises(FailedPrecondition):
            processor.process_match(match1.id, [par_card, bogey_card])
        assert Round.objects.get(match=match1, player=match1.player_a).gross_score == before

    def test_inactive_season(self, season, match1, processor, par_card):
        season.active = False
        season.save()
        with pytest.raises(FailedPrecondition):
            processor.process_match(match1.id, [par_card, par_card])
        assert not Round.objects.filter(match=match1).exists()

    def test_unknown_match(self, processor, par_card):
        with pytest.raises(NotFound):
            processor.process_match(987654, [par_card, par_card])

    @pytest.mark.parametrize("cards, absent", [
        ([[4] * 8, [4] * 9], [False, False]),
        ([[4] * 9], [False, False]),
        ([[4] * 9, [4] * 9], [False]),
        ([[4] * 9, [4] * 9], [0, 0]),
        ([[4] * 9, [4] * 8 + [-2]], [False, False]),
    ])
    def test_invalid_input_writes_nothing(self, match1, processor, cards, absent):
        with pytest.raises(InvalidInput):
            processor.process_match(match1.id, cards, absent)
        assert not Round.objects.filter(match=match1).exists()

    def test_player_against_themselves(self, week1, alice, processor, par_card):
        match = Match.objects.create(match_day=week1, player_a=alice, player_b=alice)
        with pytest.raises(InvalidInput):
            processor.process_match(match.id, [par_card, par_card])

    def test_non_member_not_found(self, week1, alice, processor, par_card):
        stranger = Player.objects.create(name="Stranger")
        match = Match.objects.create(match_day=week1, player_a=alice, player_b=stranger)
        with pytest.raises(NotFound):
            processor.process_match(match.id, [par_card, par_card])
        assert not Round.objects.filter(match=match).exists()

    def test_busy_season_conflicts(self, season, match1, par_card):
        locks = SeasonLockManager(timeout=0)
        processor = MatchProcessor(locks=locks)
        with locks.hold(season.id):
            with pytest.raises(Conflict):
                processor.process_match(match1.id, [par_card, par_card])

    def test_result_to_dict(self, match1, processor, par_card, bogey_card):
        data = processor.process_match(match1.id, [bogey_card, par_card]).to_dict()
        assert data["matchId"] == match1.id
        assert data["playerA"]["totalPoints"] + data["playerB"]["totalPoints"] == 22
        assert len(data["playerA"]["matchStrokes"]) == 9


@pytest.mark.django_db
class TestClearMatch:
    def test_clear_resets_match_and_handicap(self, season, match1, processor, par_card, bogey_card):
        processor.process_match(match1.id, [bogey_card, par_card])
        processor.clear_match(match1.id)

        match1.refresh_from_db()
        assert match1.status == Match.STATUS_SCHEDULED
        assert (match1.player_a_points, match1.player_b_points) == (0, 0)
        assert not Round.objects.filter(match=match1).exists()

        record = HandicapRecord.objects.get(season=season, player=match1.player_a)
        assert record.rounds_counted == 0
        assert record.league_handicap_index == Decimal("10.0")

    def test_clear_unknown_match(self, processor):
        with pytest.raises(NotFound):
            processor.clear_match(987654)
