# league/services/strokes.py
"""
Stroke allocation for a head-to-head match.

The higher playing handicap receives |hA - hB| strokes, spread hardest hole
first (every hole gets diff // 9, the hardest diff % 9 holes one more). The
lower handicap receives nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from league.exceptions import InvalidInput, NotFound
from league.services.catalog import HOLES_PER_ROUND, _is_int, distribute_strokes


@dataclass(frozen=True)
class StrokeAllocation:
    strokes_a: List[int]
    strokes_b: List[int]

    @property
    def total_a(self) -> int:
        return sum(self.strokes_a)

    @property
    def total_b(self) -> int:
        return sum(self.strokes_b)

    def to_dict(self):
        return {
            "strokesA": list(self.strokes_a),
            "strokesB": list(self.strokes_b),
            "totalA": self.total_a,
            "totalB": self.total_b,
        }


def allocate_strokes(handicap_a: int, handicap_b: int, hole_difficulty: Sequence[int]) -> StrokeAllocation:
    if not _is_int(handicap_a) or not _is_int(handicap_b):
        raise InvalidInput("playing handicaps must be whole numbers")

    diff = abs(handicap_a - handicap_b)
    given = distribute_strokes(diff, hole_difficulty)
    none = [0] * HOLES_PER_ROUND

    if handicap_a > handicap_b:
        return StrokeAllocation(given, none)
    if handicap_b > handicap_a:
        return StrokeAllocation(none, given)
    return StrokeAllocation(none, list(none))


def get_stroke_allocation(course_id, handicap_a: int, handicap_b: int) -> StrokeAllocation:
    from league.models import Course

    course = Course.objects.filter(id=course_id).first()
    if course is None:
        raise NotFound(f"course {course_id} not found")
    return allocate_strokes(handicap_a, handicap_b, course.hole_difficulty)
