# league/services/match.py
"""
Match processing.

Takes both players' nine-hole gross cards (or an absence flag) for one match
and produces the stored result:

  1. absent side  -> synthetic card from the absence resolver
  2. playing handicaps from the tracker (provisional until rounds exist)
  3. strokes for the higher handicap, hardest hole first
  4. match net per hole = gross - strokes received on that hole
  5. hole points: lower net 2-0, halved 1-1
  6. bonus: lower total match net 4-0, halved 2-2   (22 points per match)
  7. persist both rounds and the match, status -> completed
  8. present sides feed their differential to the handicap tracker
  9. the sequencer decides whether earlier match days lock

Steps 1-9 run under the season's lock and inside one transaction: either all
of it is written or none of it.

Idempotent
----------
Re-submitting an unlocked match overwrites its two Round rows in place and
recomputes the result. The handicap used to score a match only looks at
rounds from earlier match days, so the same cards give the same result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from django.db import transaction
from django.utils import timezone

from league.exceptions import FailedPrecondition, InvalidInput, NotFound
from league.services.absence import synthetic_hole_scores
from league.services.catalog import distribute_strokes
from league.services.differential import score_differential, validate_hole_scores
from league.services.handicap import HandicapTracker
from league.services.locks import default_lock_manager, lock_season_row
from league.services.sequencer import MatchDaySequencer
from league.services.strokes import allocate_strokes

logger = logging.getLogger(__name__)

HOLE_WIN_POINTS = 2
HOLE_HALVED_POINTS = 1
MATCH_BONUS_POINTS = 4
MATCH_HALVED_BONUS = 2
MAX_MATCH_POINTS = 9 * HOLE_WIN_POINTS + MATCH_BONUS_POINTS  # 22


# ---- scoring helpers ---------------------------------------------

def net_scores(gross: Sequence[int], strokes: Sequence[int]) -> List[int]:
    return [g - s for g, s in zip(gross, strokes)]


def hole_points(net_a: Sequence[int], net_b: Sequence[int]) -> Tuple[List[int], List[int]]:
    points_a, points_b = [], []
    for a, b in zip(net_a, net_b):
        if a < b:
            points_a.append(HOLE_WIN_POINTS)
            points_b.append(0)
        elif b < a:
            points_a.append(0)
            points_b.append(HOLE_WIN_POINTS)
        else:
            points_a.append(HOLE_HALVED_POINTS)
            points_b.append(HOLE_HALVED_POINTS)
    return points_a, points_b


def bonus_points(total_a: int, total_b: int) -> Tuple[int, int]:
    if total_a < total_b:
        return MATCH_BONUS_POINTS, 0
    if total_b < total_a:
        return 0, MATCH_BONUS_POINTS
    return MATCH_HALVED_BONUS, MATCH_HALVED_BONUS


# ---- results -----------------------------------------------------

@dataclass(frozen=True)
class SideResult:
    player_id: int
    absent: bool
    hole_scores: Tuple[int, ...]
    gross_score: int
    handicap_index: Decimal
    course_handicap: int
    playing_handicap: int
    is_provisional: bool
    differential: Optional[Decimal]
    match_strokes: Tuple[int, ...]
    strokes_received: int
    net_hole_scores: Tuple[int, ...]
    net_score: int
    match_net_hole_scores: Tuple[int, ...]
    match_net_score: int
    hole_points: Tuple[int, ...]
    bonus_points: int

    @property
    def total_points(self) -> int:
        return sum(self.hole_points) + self.bonus_points

    def to_dict(self):
        return {
            "playerId": self.player_id,
            "absent": self.absent,
            "holeScores": list(self.hole_scores),
            "grossScore": self.gross_score,
            "handicapIndex": float(self.handicap_index),
            "courseHandicap": self.course_handicap,
            "playingHandicap": self.playing_handicap,
            "isProvisional": self.is_provisional,
            "differential": float(self.differential) if self.differential is not None else None,
            "matchStrokes": list(self.match_strokes),
            "strokesReceived": self.strokes_received,
            "netHoleScores": list(self.net_hole_scores),
            "netScore": self.net_score,
            "matchNetHoleScores": list(self.match_net_hole_scores),
            "matchNetScore": self.match_net_score,
            "holePoints": list(self.hole_points),
            "bonusPoints": self.bonus_points,
            "totalPoints": self.total_points,
        }


@dataclass(frozen=True)
class MatchResult:
    match_id: int
    match_day_id: int
    status: str
    side_a: SideResult
    side_b: SideResult

    @property
    def points(self) -> Tuple[int, int]:
        return self.side_a.total_points, self.side_b.total_points

    def to_dict(self):
        return {
            "matchId": self.match_id,
            "matchDayId": self.match_day_id,
            "status": self.status,
            "playerA": self.side_a.to_dict(),
            "playerB": self.side_b.to_dict(),
        }


# ---- processor ---------------------------------------------------

class MatchProcessor:
    """
    Orchestrates one score submission. Collaborators are injected so tests
    (and other entry points) can swap the lock manager or tracker settings.
    """

    def __init__(self, tracker=None, sequencer=None, locks=None):
        self.tracker = tracker or HandicapTracker()
        self.sequencer = sequencer or MatchDaySequencer()
        self.locks = locks or default_lock_manager

    def _validate(self, hole_scores, absent) -> Tuple[List[Optional[List[int]]], Tuple[bool, bool]]:
        if not isinstance(hole_scores, (list, tuple)) or len(hole_scores) != 2:
            raise InvalidInput("hole scores are required for exactly two players")
        if not isinstance(absent, (list, tuple)) or len(absent) != 2:
            raise InvalidInput("absence flags are required for exactly two players")
        if not all(isinstance(flag, bool) for flag in absent):
            raise InvalidInput("absence flags must be true or false")

        cards = []
        for side, (scores, is_absent) in zip("AB", zip(hole_scores, absent)):
            if is_absent:
                cards.append(None)  # anything typed for an absentee is ignored
                continue
            try:
                cards.append(validate_hole_scores(scores))
            except InvalidInput as exc:
                raise InvalidInput(f"player {side}: {exc}")
        return cards, (absent[0], absent[1])

    def _load_match(self, match_id):
        from league.models import Match

        match = Match.objects.select_related("match_day").filter(id=match_id).first()
        if match is None:
            raise NotFound(f"match {match_id} not found")
        if match.player_a_id == match.player_b_id:
            raise InvalidInput(f"match {match_id} pairs a player with themselves")
        return match

    def process_match(self, match_id, hole_scores, absent=(False, False)):
        from league.models import Match, MatchDay

        cards, absent = self._validate(hole_scores, absent)
        season_id = self._load_match(match_id).match_day.season_id

        with self.locks.hold(season_id):
            with transaction.atomic():
                season = lock_season_row(season_id)
                if not season.active:
                    raise FailedPrecondition(f"season {season.pk} is not active")

                match = (
                    Match.objects
                    .select_for_update()
                    .select_related("player_a", "player_b")
                    .get(id=match_id)
                )
                match_day = (
                    MatchDay.objects
                    .select_for_update()
                    .select_related("course")
                    .get(id=match.match_day_id)
                )
                self.sequencer.ensure_mutable(match_day)

                result = self._score(match, match_day, season, cards, absent)
                self.sequencer.match_day_scored(match_day)

        logger.info(
            "Match %s scored: player %s %d pts, player %s %d pts",
            match_id, result.side_a.player_id, result.side_a.total_points,
            result.side_b.player_id, result.side_b.total_points,
        )
        return result

    def _score(self, match, match_day, season, cards, absent):
        from league.models import Match, Round

        course = match_day.course
        players = (match.player_a, match.player_b)

        # only earlier match days feed the handicap used here
        snaps = [
            self.tracker.snapshot(season, player, course=course, before=match_day.date)
            for player in players
        ]
        gross = [
            synthetic_hole_scores(snap.playing_handicap, course) if is_absent else card
            for snap, card, is_absent in zip(snaps, cards, absent)
        ]

        allocation = allocate_strokes(snaps[0].playing_handicap, snaps[1].playing_handicap, course.hole_difficulty)
        strokes = (allocation.strokes_a, allocation.strokes_b)
        match_net = [net_scores(gross[i], strokes[i]) for i in range(2)]
        points = hole_points(match_net[0], match_net[1])
        bonus = bonus_points(sum(match_net[0]), sum(match_net[1]))

        previously_counted = set(
            Round.objects
            .filter(match=match, player_absent=False)
            .values_list("player_id", flat=True)
        )

        sides, rounds = [], []
        for i, player in enumerate(players):
            snap = snaps[i]
            own_strokes = distribute_strokes(snap.playing_handicap, course.hole_difficulty)
            net_holes = net_scores(gross[i], own_strokes)
            differential = None
            if not absent[i]:
                differential = score_differential(sum(gross[i]), course.course_rating, course.slope_rating)

            side = SideResult(
                player_id=player.pk,
                absent=absent[i],
                hole_scores=tuple(gross[i]),
                gross_score=sum(gross[i]),
                handicap_index=snap.index,
                course_handicap=snap.course_handicap,
                playing_handicap=snap.playing_handicap,
                is_provisional=snap.is_provisional,
                differential=differential,
                match_strokes=tuple(strokes[i]),
                strokes_received=sum(strokes[i]),
                net_hole_scores=tuple(net_holes),
                net_score=sum(gross[i]) - snap.playing_handicap,
                match_net_hole_scores=tuple(match_net[i]),
                match_net_score=sum(match_net[i]),
                hole_points=tuple(points[i]),
                bonus_points=bonus[i],
            )
            rnd, _ = Round.objects.update_or_create(
                match=match,
                player=player,
                defaults={
                    "season": season,
                    "played_on": match_day.date,
                    "player_absent": side.absent,
                    "hole_scores": list(side.hole_scores),
                    "net_hole_scores": list(side.net_hole_scores),
                    "match_net_hole_scores": list(side.match_net_hole_scores),
                    "match_strokes": list(side.match_strokes),
                    "gross_score": side.gross_score,
                    "net_score": side.net_score,
                    "match_net_score": side.match_net_score,
                    "strokes_received": side.strokes_received,
                    "handicap_differential": side.differential,
                    "handicap_index": side.handicap_index,
                    "course_handicap": side.course_handicap,
                    "playing_handicap": side.playing_handicap,
                    "hole_points": list(side.hole_points),
                    "bonus_points": side.bonus_points,
                    "total_points": side.total_points,
                },
            )
            sides.append(side)
            rounds.append(rnd)

        match.status = Match.STATUS_COMPLETED
        match.player_a_points = sides[0].total_points
        match.player_b_points = sides[1].total_points
        match.player_a_absent = absent[0]
        match.player_b_absent = absent[1]
        match.completed_at = timezone.now()
        match.save()

        for i, (player, rnd) in enumerate(zip(players, rounds)):
            if not absent[i]:
                self.tracker.record_differential(rnd)
            elif player.pk in previously_counted:
                # an edit turned a played round into an absence; drop it from history
                self.tracker.refresh(season, player)

        return MatchResult(
            match_id=match.pk,
            match_day_id=match_day.pk,
            status=match.status,
            side_a=sides[0],
            side_b=sides[1],
        )

    def clear_match(self, match_id) -> None:
        """
        Remove a match's scores and send it back to scheduled. Only allowed
        while its match day is unlocked. The day itself keeps its status.
        """
        from league.models import Match, MatchDay, Round

        season_id = self._load_match(match_id).match_day.season_id

        with self.locks.hold(season_id):
            with transaction.atomic():
                season = lock_season_row(season_id)
                match = Match.objects.select_for_update().select_related("player_a", "player_b").get(id=match_id)
                match_day = MatchDay.objects.select_for_update().get(id=match.match_day_id)
                self.sequencer.ensure_mutable(match_day)

                counted = set(
                    Round.objects
                    .filter(match=match, player_absent=False)
                    .values_list("player_id", flat=True)
                )
                deleted, _ = Round.objects.filter(match=match).delete()

                match.status = Match.STATUS_SCHEDULED
                match.player_a_points = 0
                match.player_b_points = 0
                match.player_a_absent = False
                match.player_b_absent = False
                match.completed_at = None
                match.save()

                for player in (match.player_a, match.player_b):
                    if player.pk in counted:
                        self.tracker.refresh(season, player)

        logger.info("Match %s cleared (%d rounds removed)", match_id, deleted)
