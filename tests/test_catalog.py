from decimal import Decimal

import pytest

from league.exceptions import FailedPrecondition, InvalidInput
from league.services.catalog import (
    create_course, distribute_strokes, holes_by_difficulty, validate_difficulty, validate_layout,
)

from .conftest import DIFFICULTY, PARS


def test_holes_by_difficulty_hardest_first():
    assert holes_by_difficulty(DIFFICULTY) == [2, 5, 0, 7, 4, 8, 1, 6, 3]


@pytest.mark.parametrize("ranking", [
    [1, 2, 3, 4, 5, 6, 7, 8],
    [1, 1, 2, 3, 4, 5, 6, 7, 8],
    [0, 1, 2, 3, 4, 5, 6, 7, 8],
    [1, 2, 3, 4, 5, 6, 7, 8, True],
    "123456789",
])
def test_difficulty_must_be_permutation(ranking):
    with pytest.raises(InvalidInput):
        validate_difficulty(ranking)


def test_layout_checks_par_sum():
    with pytest.raises(InvalidInput, match="sum to 36"):
        validate_layout(35, PARS, DIFFICULTY, 113)


def test_layout_rejects_non_positive_slope():
    with pytest.raises(InvalidInput):
        validate_layout(36, PARS, DIFFICULTY, 0)


def test_layout_rejects_zero_par_hole():
    with pytest.raises(InvalidInput):
        validate_layout(33, [4, 4, 0, 5, 4, 4, 3, 5, 4], DIFFICULTY, 113)


def test_distribute_strokes_remainder_goes_to_hardest():
    strokes = distribute_strokes(11, DIFFICULTY)
    assert sum(strokes) == 11
    assert strokes[2] == 2 and strokes[5] == 2
    assert all(s == 1 for i, s in enumerate(strokes) if i not in (2, 5))


def test_distribute_strokes_zero():
    assert distribute_strokes(0, DIFFICULTY) == [0] * 9


def test_distribute_negative_strokes_taken_from_easiest():
    strokes = distribute_strokes(-3, DIFFICULTY)
    assert sum(strokes) == -3
    # ranks 7, 8 and 9 are holes 2, 7 and 4
    assert [i for i, s in enumerate(strokes) if s == -1] == [1, 3, 6]


@pytest.mark.django_db
def test_create_course_derives_par(league):
    course = create_course(league, "Front", PARS, DIFFICULTY, 34.5, 120)
    assert course.par == 36
    assert course.course_rating == Decimal("34.5")


@pytest.mark.django_db
def test_create_course_rejects_bad_layout(league):
    with pytest.raises(InvalidInput):
        create_course(league, "Front", PARS[:8], DIFFICULTY, 34.5, 120)


@pytest.mark.django_db
def test_course_is_immutable(course):
    course.slope_rating = 130
    with pytest.raises(FailedPrecondition):
        course.save()
