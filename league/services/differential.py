# league/services/differential.py
"""
Differential calculator.

    differential = (113 / slope) * (gross - course_rating)

rounded half-up to one decimal. Decimal arithmetic end to end so 7.0625
lands on 7.1 and not wherever binary floating point puts it.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Sequence

from league.exceptions import InvalidInput
from league.services.catalog import HOLES_PER_ROUND, NOMINAL_SLOPE, _is_int

ONE_DECIMAL = Decimal("0.1")


def round_half_up(value: Decimal, places: Decimal = ONE_DECIMAL) -> Decimal:
    return value.quantize(places, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so 34.5 stays 34.5 instead of its binary expansion
    return Decimal(str(value))


def validate_hole_scores(hole_scores: Sequence[int]) -> List[int]:
    """Nine finite, non-negative integer gross scores, returned as a list."""
    if not isinstance(hole_scores, (list, tuple)):
        raise InvalidInput("hole scores must be a list")
    if len(hole_scores) != HOLES_PER_ROUND:
        raise InvalidInput(f"expected {HOLES_PER_ROUND} hole scores, got {len(hole_scores)}")
    for hole, score in enumerate(hole_scores, start=1):
        if not _is_int(score):
            raise InvalidInput(f"hole {hole}: score {score!r} is not a whole number")
        if score < 0:
            raise InvalidInput(f"hole {hole}: score {score} is negative")
    return list(hole_scores)


def score_differential(gross_score: int, course_rating, slope_rating) -> Decimal:
    if not _is_int(gross_score) or gross_score < 0:
        raise InvalidInput(f"gross score {gross_score!r} must be a non-negative whole number")
    rating = to_decimal(course_rating)
    slope = to_decimal(slope_rating)
    if not rating.is_finite() or not slope.is_finite():
        raise InvalidInput("course and slope rating must be finite")
    if slope <= 0:
        raise InvalidInput("slope rating must be positive")

    raw = Decimal(NOMINAL_SLOPE) * (Decimal(gross_score) - rating) / slope
    return round_half_up(raw)


def round_differential(hole_scores: Sequence[int], course) -> Decimal:
    """Differential for a completed, non-absent nine-hole card on `course`."""
    scores = validate_hole_scores(hole_scores)
    return score_differential(sum(scores), course.course_rating, course.slope_rating)
