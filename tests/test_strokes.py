import pytest

from league.exceptions import InvalidInput, NotFound
from league.services.strokes import allocate_strokes, get_stroke_allocation

from .conftest import DIFFICULTY


def test_higher_handicap_receives_difference_on_hardest_holes():
    allocation = allocate_strokes(10, 4, DIFFICULTY)
    # difficulty ranks 1..6 sit on holes 3, 6, 1, 8, 5 and 9
    assert [i for i, s in enumerate(allocation.strokes_a) if s] == [0, 2, 4, 5, 7, 8]
    assert allocation.total_a == 6
    assert allocation.strokes_b == [0] * 9


def test_player_b_can_receive():
    allocation = allocate_strokes(4, 10, DIFFICULTY)
    assert allocation.total_a == 0
    assert allocation.total_b == 6


def test_equal_handicaps_give_nothing():
    allocation = allocate_strokes(7, 7, DIFFICULTY)
    assert allocation.total_a == allocation.total_b == 0


def test_more_than_nine_strokes():
    allocation = allocate_strokes(15, 4, DIFFICULTY)
    assert allocation.total_a == 11
    assert max(allocation.strokes_a) == 2
    assert allocation.strokes_a[2] == allocation.strokes_a[5] == 2


def test_plus_handicap_difference():
    allocation = allocate_strokes(-2, 3, DIFFICULTY)
    assert allocation.total_b == 5


@pytest.mark.parametrize("handicap_a", range(-5, 31))
def test_only_higher_handicap_receives_the_difference(handicap_a):
    for handicap_b in range(0, 31):
        allocation = allocate_strokes(handicap_a, handicap_b, DIFFICULTY)
        assert allocation.total_a + allocation.total_b == abs(handicap_a - handicap_b)
        assert allocation.total_a == 0 or allocation.total_b == 0
        receiver = allocation.strokes_a if handicap_a > handicap_b else allocation.strokes_b
        assert max(receiver) - min(receiver) <= 1


def test_handicaps_must_be_whole():
    with pytest.raises(InvalidInput):
        allocate_strokes(10.5, 4, DIFFICULTY)


def test_to_dict_keys():
    data = allocate_strokes(10, 4, DIFFICULTY).to_dict()
    assert set(data) == {"strokesA", "strokesB", "totalA", "totalB"}


@pytest.mark.django_db
def test_allocation_for_stored_course(course):
    assert get_stroke_allocation(course.id, 10, 4).total_a == 6


@pytest.mark.django_db
def test_allocation_unknown_course():
    with pytest.raises(NotFound):
        get_stroke_allocation(424242, 10, 4)
