# tests/conftest.py
from datetime import date
from decimal import Decimal

import pytest

from league.models import League, LeagueMember, Match, MatchDay, Player, Season
from league.services.catalog import create_course
from league.services.locks import SeasonLockManager
from league.services.match import MatchProcessor

PARS = [4, 4, 3, 5, 4, 4, 3, 5, 4]           # par 36
DIFFICULTY = [3, 7, 1, 9, 5, 2, 8, 4, 6]     # hardest first: holes 3, 6, 1, 8, 5, 9, 2, 7, 4


@pytest.fixture
def league(db):
    return League.objects.create(name="Tuesday Nine")


@pytest.fixture
def course(league):
    return create_course(league, "Oak Hollow Front", PARS, DIFFICULTY, Decimal("34.5"), 120)


@pytest.fixture
def season(league):
    return Season.objects.create(
        league=league, name="2026", start_date=date(2026, 4, 1), end_date=date(2026, 9, 30),
    )


def _member(league, name, provisional, role=LeagueMember.ROLE_PLAYER):
    player = Player.objects.create(name=name)
    LeagueMember.objects.create(
        league=league, player=player, role=role, provisional_handicap=Decimal(provisional),
    )
    return player


@pytest.fixture
def alice(league):
    return _member(league, "Alice", "10.0")


@pytest.fixture
def bob(league):
    return _member(league, "Bob", "4.0")


@pytest.fixture
def carol(league):
    return _member(league, "Carol", "18.0")


@pytest.fixture
def week1(season, course):
    return MatchDay.objects.create(season=season, course=course, date=date(2026, 4, 7))


@pytest.fixture
def week2(season, course):
    return MatchDay.objects.create(season=season, course=course, date=date(2026, 4, 14))


@pytest.fixture
def match1(week1, alice, bob):
    return Match.objects.create(match_day=week1, player_a=alice, player_b=bob)


@pytest.fixture
def match2(week2, alice, bob):
    return Match.objects.create(match_day=week2, player_a=alice, player_b=bob)


@pytest.fixture
def processor():
    # a private lock manager per test so a failed test never leaves a season held
    return MatchProcessor(locks=SeasonLockManager(timeout=0))


@pytest.fixture
def par_card():
    return list(PARS)


@pytest.fixture
def bogey_card():
    return [p + 1 for p in PARS]
