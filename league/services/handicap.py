# league/services/handicap.py
"""
Handicap index tracker.

Each (season, player) has an ordered list of differentials: by play date,
ties broken by ingestion order. Only the most recent MAX_HANDICAP_ROUNDS
feed the index; older ones stay stored for history display.

    index           = mean of the best (lowest) N differentials in the window
    course handicap = round(index * slope / 113)
    playing         = course handicap (no allowance in this league)

With no qualifying rounds the index is the membership's provisional
handicap, untouched.

The stored Round rows are the history. HandicapTracker rebuilds a
DifferentialHistory from them on demand and writes the HandicapRecord
snapshot, so the snapshot is always reproducible from the rounds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from django.conf import settings
from django.db import transaction

from league.exceptions import InvalidInput, NotFound
from league.services.catalog import NOMINAL_SLOPE
from league.services.differential import round_half_up, to_decimal

logger = logging.getLogger(__name__)

MAX_HANDICAP_ROUNDS = 20
WHOLE_STROKE = Decimal("1")

# rounds in window -> differentials counted, World Handicap System style
WHS_BEST_OF = (
    (5, 1),
    (8, 2),
    (11, 3),
    (14, 4),
    (16, 5),
    (18, 6),
    (19, 7),
    (20, 8),
)


def best_differential_count(rounds: int, rule: str = "all") -> int:
    """
    How many of the lowest differentials count toward the index.

    "all" averages the whole window. "whs" follows the lookup above. Both
    never decrease as rounds accumulate and stop growing at 20 rounds.
    """
    if rule == "all":
        return max(rounds, 0)
    if rule == "whs":
        if rounds <= 0:
            return 0
        for upper, count in WHS_BEST_OF:
            if rounds <= upper:
                return count
        return WHS_BEST_OF[-1][1]
    raise InvalidInput(f"unknown best-of rule {rule!r}")


@dataclass(frozen=True)
class Differential:
    value: Decimal
    played_on: date
    seq: int


class DifferentialHistory:
    """Ordered differentials for one player in one season."""

    def __init__(self, max_rounds: int = MAX_HANDICAP_ROUNDS, best_of: str = "all"):
        self.max_rounds = max_rounds
        self.best_of = best_of
        self._entries: List[Differential] = []
        self._next_seq = 0

    def __len__(self):
        return len(self._entries)

    def record(self, value, played_on: date, seq: Optional[int] = None) -> Differential:
        """
        Append a differential in date order. Same-day entries keep ingestion
        order; pass `seq` to replay a stored ingestion order.
        """
        if seq is None:
            seq = self._next_seq
        self._next_seq = max(self._next_seq, seq) + 1
        entry = Differential(to_decimal(value), played_on, seq)
        self._entries.append(entry)
        self._entries.sort(key=lambda d: (d.played_on, d.seq))
        return entry

    @property
    def entries(self) -> List[Differential]:
        return list(self._entries)

    @property
    def window(self) -> List[Differential]:
        return self._entries[-self.max_rounds:] if self.max_rounds > 0 else []

    def counted(self) -> List[Decimal]:
        values = sorted(d.value for d in self.window)
        return values[:best_differential_count(len(values), self.best_of)]

    def index(self, provisional) -> Decimal:
        counted = self.counted()
        if not counted:
            return to_decimal(provisional)
        return round_half_up(sum(counted) / Decimal(len(counted)))


def course_handicap(index, slope_rating) -> int:
    slope = to_decimal(slope_rating)
    if slope <= 0:
        raise InvalidInput("slope rating must be positive")
    raw = to_decimal(index) * slope / Decimal(NOMINAL_SLOPE)
    return int(round_half_up(raw, WHOLE_STROKE))


def playing_handicap(course_hcp: int) -> int:
    return course_hcp


@dataclass(frozen=True)
class HandicapSnapshot:
    index: Decimal
    course_handicap: int
    playing_handicap: int
    is_provisional: bool
    rounds_counted: int

    def to_dict(self):
        return {
            "index": float(self.index),
            "courseHandicap": self.course_handicap,
            "playingHandicap": self.playing_handicap,
            "isProvisional": self.is_provisional,
            "roundsCounted": self.rounds_counted,
        }


class HandicapTracker:
    """ORM-backed tracker; rounds are read from and snapshots written to the store."""

    def __init__(self, max_rounds: Optional[int] = None, best_of: Optional[str] = None):
        self.max_rounds = max_rounds if max_rounds is not None else getattr(
            settings, "LEAGUE_MAX_HANDICAP_ROUNDS", MAX_HANDICAP_ROUNDS)
        self.best_of = best_of or getattr(settings, "LEAGUE_HANDICAP_BEST_OF", "all")

    # ---- lookups -------------------------------------------------

    def membership(self, season, player):
        from league.models import LeagueMember

        member = (
            LeagueMember.objects
            .filter(league_id=season.league_id, player=player, is_deleted=False)
            .first()
        )
        if member is None:
            raise NotFound(f"player {player.pk} has no membership in league {season.league_id}")
        return member

    def history(self, season, player, before: Optional[date] = None) -> DifferentialHistory:
        """
        Differentials from the player's stored non-absent rounds. With
        `before`, only rounds played strictly earlier than that date.
        """
        from league.models import Round

        rounds = Round.objects.filter(
            season=season,
            player=player,
            player_absent=False,
            handicap_differential__isnull=False,
        )
        if before is not None:
            rounds = rounds.filter(played_on__lt=before)

        history = DifferentialHistory(self.max_rounds, self.best_of)
        for rnd in rounds.order_by("played_on", "id").only("id", "played_on", "handicap_differential"):
            history.record(rnd.handicap_differential, rnd.played_on, seq=rnd.id)
        return history

    def current_index(self, season, player, before: Optional[date] = None) -> Tuple[Decimal, bool, int]:
        """(index, is_provisional, rounds counted)"""
        member = self.membership(season, player)
        history = self.history(season, player, before=before)
        counted = len(history.counted())
        return history.index(member.provisional_handicap), counted == 0, counted

    def snapshot(self, season, player, course=None, before: Optional[date] = None) -> HandicapSnapshot:
        index, provisional, counted = self.current_index(season, player, before=before)
        slope = course.slope_rating if course is not None else NOMINAL_SLOPE
        ch = course_handicap(index, slope)
        return HandicapSnapshot(
            index=index,
            course_handicap=ch,
            playing_handicap=playing_handicap(ch),
            is_provisional=provisional,
            rounds_counted=counted,
        )

    # ---- writes --------------------------------------------------

    def record_differential(self, rnd):
        """
        Ingest a freshly stored round. The differential already lives on the
        Round row; this refreshes the player's HandicapRecord against it.
        """
        if rnd.player_absent or rnd.handicap_differential is None:
            raise InvalidInput("absent rounds never enter the handicap history")
        return self.refresh(rnd.season, rnd.player, course=rnd.match.match_day.course)

    @transaction.atomic
    def refresh(self, season, player, course=None):
        from league.models import HandicapRecord, Round

        if course is None:
            latest = (
                Round.objects
                .filter(season=season, player=player, player_absent=False)
                .select_related("match__match_day__course")
                .order_by("-played_on", "-id")
                .first()
            )
            course = latest.match.match_day.course if latest else None

        snap = self.snapshot(season, player, course=course)
        record, _ = HandicapRecord.objects.update_or_create(
            season=season,
            player=player,
            defaults={
                "course": course,
                "league_handicap_index": snap.index,
                "course_handicap": snap.course_handicap,
                "playing_handicap": snap.playing_handicap,
                "rounds_counted": snap.rounds_counted,
                "is_provisional": snap.is_provisional,
            },
        )
        logger.info(
            "Handicap for player %s season %s: index=%s course=%s playing=%s (%d rounds%s)",
            player.pk, season.pk, snap.index, snap.course_handicap, snap.playing_handicap,
            snap.rounds_counted, ", provisional" if snap.is_provisional else "",
        )
        return record

    # ---- API -----------------------------------------------------

    def get_handicap(self, league_id, season_id, player_id, course_id=None) -> HandicapSnapshot:
        from league.models import Course, HandicapRecord, Player, Season

        season = Season.objects.filter(id=season_id, league_id=league_id).first()
        if season is None:
            raise NotFound(f"season {season_id} not found in league {league_id}")
        player = Player.objects.filter(id=player_id).first()
        if player is None:
            raise NotFound(f"player {player_id} not found")

        if course_id is not None:
            course = Course.objects.filter(id=course_id, league_id=league_id).first()
            if course is None:
                raise NotFound(f"course {course_id} not found in league {league_id}")
        else:
            record = (
                HandicapRecord.objects
                .select_related("course")
                .filter(season=season, player=player)
                .first()
            )
            course = record.course if record else None

        return self.snapshot(season, player, course=course)
