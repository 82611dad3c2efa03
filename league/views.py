import json
import logging

from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods

from league.exceptions import InvalidInput, NotFound
from league.models import LeagueMember, Match, MatchDay
from league.services.handicap import HandicapTracker
from league.services.match import MatchProcessor
from league.services.sequencer import MatchDaySequencer
from league.services.standings import match_days_overview, season_standings
from league.services.strokes import get_stroke_allocation

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# helpers
# ------------------------------------------------------------------
def _require_league_admin(user, league_id):
    """Staff, or an admin member of the league."""
    if user.is_staff:
        return
    is_admin = LeagueMember.objects.filter(
        league_id=league_id,
        player__user=user,
        role=LeagueMember.ROLE_ADMIN,
        is_deleted=False,
    ).exists()
    if not is_admin:
        raise PermissionDenied("league admin privilege required")


def _json_body(request):
    try:
        return json.loads(request.body or b"{}")
    except (TypeError, ValueError):
        raise InvalidInput("request body is not valid JSON")


def _int_param(request, name, required=True):
    raw = request.GET.get(name)
    if raw is None or raw == "":
        if required:
            raise InvalidInput(f"query parameter '{name}' is required")
        return None
    try:
        return int(raw)
    except ValueError:
        raise InvalidInput(f"query parameter '{name}' must be a whole number, got {raw!r}")


# ------------------------------------------------------------------
# scores
# ------------------------------------------------------------------
@login_required
@require_http_methods(["POST", "DELETE"])
def match_scores_view(request, match_id):
    """
    POST   {"players": [{"holeScores": [...], "absent": false}, {...}]}  side A then B
    DELETE clears the match's scores (unlocked match days only)
    """
    match = Match.objects.select_related("match_day__season").filter(id=match_id).first()
    if match is None:
        raise NotFound(f"match {match_id} not found")
    _require_league_admin(request.user, match.match_day.season.league_id)

    processor = MatchProcessor()
    if request.method == "DELETE":
        processor.clear_match(match_id)
        return JsonResponse({'success': True, 'matchId': match_id, 'status': Match.STATUS_SCHEDULED})

    data = _json_body(request)
    players = data.get('players') if isinstance(data, dict) else None
    if not isinstance(players, list) or len(players) != 2:
        raise InvalidInput("'players' must list exactly two entries, player A then player B")
    if not all(isinstance(p, dict) for p in players):
        raise InvalidInput("each player entry must be an object")

    hole_scores = [p.get('holeScores') for p in players]
    absent = [p.get('absent', False) for p in players]

    result = processor.process_match(match_id, hole_scores, absent)
    logger.info("Scores for match %s entered by user %s", match_id, request.user.pk)
    return JsonResponse({'success': True, 'result': result.to_dict()})


# ------------------------------------------------------------------
# handicaps & strokes
# ------------------------------------------------------------------
@login_required
@require_GET
def handicap_view(request, league_id, season_id, player_id):
    course_id = _int_param(request, 'course', required=False)
    snap = HandicapTracker().get_handicap(league_id, season_id, player_id, course_id=course_id)
    return JsonResponse({'success': True, 'handicap': snap.to_dict()})


@login_required
@require_GET
def stroke_allocation_view(request, course_id):
    a = _int_param(request, 'a')
    b = _int_param(request, 'b')
    allocation = get_stroke_allocation(course_id, a, b)
    return JsonResponse({'success': True, 'allocation': allocation.to_dict()})


# ------------------------------------------------------------------
# season views
# ------------------------------------------------------------------
@login_required
@require_GET
def standings_view(request, season_id):
    return JsonResponse({'success': True, 'standings': season_standings(season_id)})


@login_required
@require_GET
def match_days_view(request, season_id):
    return JsonResponse({'success': True, 'matchDays': match_days_overview(season_id)})


@login_required
@require_http_methods(["DELETE"])
def match_day_delete_view(request, match_day_id):
    match_day = get_object_or_404(MatchDay.objects.select_related("season"), id=match_day_id)
    _require_league_admin(request.user, match_day.season.league_id)

    MatchDaySequencer().delete_match_day(match_day)
    return JsonResponse({'success': True, 'deleted': match_day_id})
