# league/services/catalog.py
"""
Course catalog: nine-hole layouts and the hardest-hole-first stroke spread
shared by the stroke allocator and the absence resolver.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import List, Sequence

from django.db import transaction

from league.exceptions import InvalidInput

HOLES_PER_ROUND = 9
NOMINAL_SLOPE = 113


def _is_int(value) -> bool:
    # bool is an int subclass; a True on a scorecard is a bug, not a 1
    return isinstance(value, int) and not isinstance(value, bool)


def validate_difficulty(hole_difficulty: Sequence[int]) -> List[int]:
    """Return the ranking as a list if it is a permutation of 1..9."""
    if not isinstance(hole_difficulty, (list, tuple)) or len(hole_difficulty) != HOLES_PER_ROUND:
        raise InvalidInput(f"hole difficulty must list exactly {HOLES_PER_ROUND} rankings")
    if not all(_is_int(rank) for rank in hole_difficulty):
        raise InvalidInput("hole difficulty rankings must be integers")
    if sorted(hole_difficulty) != list(range(1, HOLES_PER_ROUND + 1)):
        raise InvalidInput(f"hole difficulty must be a permutation of 1..{HOLES_PER_ROUND}, got {list(hole_difficulty)}")
    return list(hole_difficulty)


def validate_layout(par, hole_pars, hole_difficulty, slope_rating) -> None:
    """
    Check a course layout:
      - exactly 9 hole pars, each a positive integer, summing to `par`
      - hole difficulty is a permutation of 1..9
      - slope rating is positive
    """
    if not isinstance(hole_pars, (list, tuple)) or len(hole_pars) != HOLES_PER_ROUND:
        raise InvalidInput(f"a course needs exactly {HOLES_PER_ROUND} hole pars")
    if not all(_is_int(p) and p > 0 for p in hole_pars):
        raise InvalidInput("hole pars must be positive integers")
    if sum(hole_pars) != par:
        raise InvalidInput(f"hole pars sum to {sum(hole_pars)}, course par is {par}")
    validate_difficulty(hole_difficulty)
    if slope_rating is None or slope_rating <= 0:
        raise InvalidInput("slope rating must be positive")


def holes_by_difficulty(hole_difficulty: Sequence[int]) -> List[int]:
    """Hole indices (0-based) ordered hardest first."""
    ranking = validate_difficulty(hole_difficulty)
    return sorted(range(HOLES_PER_ROUND), key=lambda i: ranking[i])


def distribute_strokes(count: int, hole_difficulty: Sequence[int]) -> List[int]:
    """
    Spread `count` strokes over the nine holes, hardest hole first.

    Every hole gets count // 9 and the remaining count % 9 go one each to the
    hardest holes. Floor division keeps this exact for negative counts too
    (a plus-handicap absentee gives strokes back on the easiest holes).
    """
    base, extra = divmod(count, HOLES_PER_ROUND)
    strokes = [base] * HOLES_PER_ROUND
    for idx in holes_by_difficulty(hole_difficulty)[:extra]:
        strokes[idx] += 1
    return strokes


@transaction.atomic
def create_course(league, name: str, hole_pars, hole_difficulty, course_rating, slope_rating):
    """Validate and store a new course. Par is derived from the hole pars."""
    from league.models import Course

    par = sum(hole_pars) if isinstance(hole_pars, (list, tuple)) and all(_is_int(p) for p in hole_pars) else None
    validate_layout(par, hole_pars, hole_difficulty, slope_rating)
    try:
        rating = Decimal(str(course_rating))
    except InvalidOperation:
        raise InvalidInput(f"course rating {course_rating!r} is not a number")
    if not rating.is_finite():
        raise InvalidInput("course rating must be finite")

    return Course.objects.create(
        league=league,
        name=name,
        par=par,
        course_rating=rating,
        slope_rating=slope_rating,
        hole_pars=list(hole_pars),
        hole_difficulty=list(hole_difficulty),
    )
