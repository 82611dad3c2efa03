# league/services/standings.py
from __future__ import annotations

from collections import defaultdict

from league.exceptions import NotFound


def season_standings(season_id):
    """
    Standings table for a season, best first: total points, then wins, then
    name. Every active league member appears, even before their first match.
    """
    from league.models import LeagueMember, Match, Season

    season = Season.objects.filter(id=season_id).first()
    if season is None:
        raise NotFound(f"season {season_id} not found")

    stats = defaultdict(lambda: {
        "playerId": None,
        "playerName": "",
        "matchesPlayed": 0,
        "matchesWon": 0,
        "matchesLost": 0,
        "matchesTied": 0,
        "totalPoints": 0,
    })

    members = (
        LeagueMember.objects
        .filter(league_id=season.league_id, is_deleted=False)
        .select_related("player")
    )
    for m in members:
        row = stats[m.player_id]
        row["playerId"] = m.player_id
        row["playerName"] = m.player.name

    matches = (
        Match.objects
        .filter(match_day__season=season, status=Match.STATUS_COMPLETED)
        .select_related("player_a", "player_b")
    )
    for match in matches:
        for player, mine, theirs in (
            (match.player_a, match.player_a_points, match.player_b_points),
            (match.player_b, match.player_b_points, match.player_a_points),
        ):
            row = stats[player.pk]
            row["playerId"] = player.pk
            row["playerName"] = player.name
            row["matchesPlayed"] += 1
            row["totalPoints"] += mine
            if mine > theirs:
                row["matchesWon"] += 1
            elif mine < theirs:
                row["matchesLost"] += 1
            else:
                row["matchesTied"] += 1

    return sorted(
        stats.values(),
        key=lambda r: (-r["totalPoints"], -r["matchesWon"], r["playerName"]),
    )


def match_days_overview(season_id):
    """
    Match days with a week number (1 = earliest) and whether any round is
    stored, newest first.
    """
    from league.models import MatchDay, Round, Season

    if not Season.objects.filter(id=season_id).exists():
        raise NotFound(f"season {season_id} not found")

    days = list(MatchDay.objects.filter(season_id=season_id).order_by("date", "id"))
    scored = set(
        Round.objects
        .filter(match__match_day__season_id=season_id)
        .values_list("match__match_day_id", flat=True)
        .distinct()
    )
    out = [
        {
            "id": md.id,
            "date": md.date.isoformat(),
            "courseId": md.course_id,
            "status": md.status,
            "weekNumber": week,
            "hasScores": md.id in scored,
        }
        for week, md in enumerate(days, start=1)
    ]
    out.reverse()
    return out
