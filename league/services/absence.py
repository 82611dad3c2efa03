# league/services/absence.py
"""
Absent-player card.

    synthetic gross = playing handicap + course par + 3

Each hole is its par plus a share of (playing handicap + 3), spread hardest
hole first exactly like match strokes. The card is scored in the match like
any other, but never produces a differential.
"""

from __future__ import annotations

from typing import List

from league.services.catalog import distribute_strokes

ABSENCE_PENALTY = 3


def synthetic_hole_scores(playing_handicap: int, course) -> List[int]:
    over_par = playing_handicap + ABSENCE_PENALTY
    spread = distribute_strokes(over_par, course.hole_difficulty)
    return [par + extra for par, extra in zip(course.hole_pars, spread)]
