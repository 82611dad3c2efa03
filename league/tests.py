import json
from datetime import date
from decimal import Decimal

from django.contrib import admin
from django.contrib.auth.models import User
from django.test import Client, RequestFactory, TestCase
from django.urls import reverse

from league.models import League, LeagueMember, Match, MatchDay, Player, Round, Season
from league.services.catalog import create_course

PARS = [4, 4, 3, 5, 4, 4, 3, 5, 4]
DIFFICULTY = [3, 7, 1, 9, 5, 2, 8, 4, 6]


class LeagueApiTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.league = League.objects.create(name='Tuesday Nine')
        cls.course = create_course(cls.league, 'Oak Hollow Front', PARS, DIFFICULTY, Decimal('34.5'), 120)
        cls.season = Season.objects.create(
            league=cls.league, name='2026', start_date=date(2026, 4, 1), end_date=date(2026, 9, 30),
        )

        cls.staff = User.objects.create_user(username='starter', password='pword1', is_staff=True)
        cls.member_user = User.objects.create_user(username='alice', password='pword1')
        cls.admin_user = User.objects.create_user(username='bob', password='pword1')

        cls.alice = Player.objects.create(name='Alice', user=cls.member_user)
        cls.bob = Player.objects.create(name='Bob', user=cls.admin_user)
        LeagueMember.objects.create(league=cls.league, player=cls.alice, provisional_handicap=Decimal('10.0'))
        LeagueMember.objects.create(
            league=cls.league, player=cls.bob, provisional_handicap=Decimal('4.0'),
            role=LeagueMember.ROLE_ADMIN,
        )

        cls.week1 = MatchDay.objects.create(season=cls.season, course=cls.course, date=date(2026, 4, 7))
        cls.match = Match.objects.create(match_day=cls.week1, player_a=cls.alice, player_b=cls.bob)

    def setUp(self):
        self.client = Client()
        self.client.force_login(self.staff)

    def _post_scores(self, match_id, players):
        return self.client.post(
            reverse('match_scores', args=[match_id]),
            data=json.dumps({'players': players}),
            content_type='application/json',
        )

    def test_submit_scores(self):
        response = self._post_scores(self.match.id, [
            {'holeScores': [p + 1 for p in PARS]},
            {'holeScores': PARS},
        ])
        self.assertEqual(response.status_code, 200)
        result = response.json()['result']
        self.assertEqual(result['playerA']['totalPoints'], 7)
        self.assertEqual(result['playerB']['totalPoints'], 15)
        self.assertEqual(result['status'], 'completed')
        self.assertEqual(Round.objects.filter(match=self.match).count(), 2)

    def test_submit_with_absent_player(self):
        response = self._post_scores(self.match.id, [
            {'holeScores': PARS},
            {'absent': True},
        ])
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['result']['playerB']['absent'])

    def test_invalid_scores_are_rejected(self):
        response = self._post_scores(self.match.id, [
            {'holeScores': PARS[:8]},
            {'holeScores': PARS},
        ])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['code'], 'InvalidInput')
        self.assertFalse(Round.objects.exists())

    def test_malformed_body(self):
        response = self.client.post(
            reverse('match_scores', args=[self.match.id]), data='not json', content_type='application/json',
        )
        self.assertEqual(response.status_code, 400)

    def test_unknown_match(self):
        response = self._post_scores(999999, [{'holeScores': PARS}, {'holeScores': PARS}])
        self.assertEqual(response.status_code, 404)

    def test_locked_match_day(self):
        locked_day = MatchDay.objects.create(
            season=self.season, course=self.course, date=date(2026, 4, 1), status=MatchDay.STATUS_LOCKED,
        )
        match = Match.objects.create(match_day=locked_day, player_a=self.alice, player_b=self.bob)
        response = self._post_scores(match.id, [{'holeScores': PARS}, {'holeScores': PARS}])
        self.assertEqual(response.status_code, 412)
        self.assertEqual(response.json()['code'], 'FailedPrecondition')

    def test_plain_member_cannot_submit(self):
        self.client.force_login(self.member_user)
        response = self._post_scores(self.match.id, [{'holeScores': PARS}, {'holeScores': PARS}])
        self.assertEqual(response.status_code, 403)

    def test_league_admin_can_submit(self):
        self.client.force_login(self.admin_user)
        response = self._post_scores(self.match.id, [{'holeScores': PARS}, {'holeScores': PARS}])
        self.assertEqual(response.status_code, 200)

    def test_anonymous_redirected_to_login(self):
        self.client.logout()
        response = self.client.get(reverse('season_standings', args=[self.season.id]))
        self.assertEqual(response.status_code, 302)

    def test_clear_scores(self):
        self._post_scores(self.match.id, [{'holeScores': PARS}, {'holeScores': PARS}])
        response = self.client.delete(reverse('match_scores', args=[self.match.id]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Round.objects.filter(match=self.match).exists())

    def test_handicap(self):
        url = reverse('player_handicap', args=[self.league.id, self.season.id, self.alice.id])
        response = self.client.get(url, {'course': self.course.id})
        self.assertEqual(response.status_code, 200)
        handicap = response.json()['handicap']
        self.assertEqual(handicap['index'], 10.0)
        self.assertEqual(handicap['playingHandicap'], 11)
        self.assertTrue(handicap['isProvisional'])

    def test_handicap_bad_course_param(self):
        url = reverse('player_handicap', args=[self.league.id, self.season.id, self.alice.id])
        response = self.client.get(url, {'course': 'front'})
        self.assertEqual(response.status_code, 400)

    def test_stroke_allocation(self):
        response = self.client.get(reverse('stroke_allocation', args=[self.course.id]), {'a': 10, 'b': 4})
        self.assertEqual(response.status_code, 200)
        allocation = response.json()['allocation']
        self.assertEqual(allocation['totalA'], 6)
        self.assertEqual(allocation['strokesB'], [0] * 9)

    def test_stroke_allocation_needs_both_handicaps(self):
        response = self.client.get(reverse('stroke_allocation', args=[self.course.id]), {'a': 10})
        self.assertEqual(response.status_code, 400)

    def test_standings(self):
        response = self.client.get(reverse('season_standings', args=[self.season.id]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['standings']), 2)

    def test_match_days(self):
        response = self.client.get(reverse('season_match_days', args=[self.season.id]))
        self.assertEqual(response.status_code, 200)
        days = response.json()['matchDays']
        self.assertEqual(days[0]['weekNumber'], 1)
        self.assertFalse(days[0]['hasScores'])

    def test_delete_match_day(self):
        day = MatchDay.objects.create(season=self.season, course=self.course, date=date(2026, 4, 21))
        response = self.client.delete(reverse('match_day_delete', args=[day.id]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(MatchDay.objects.filter(id=day.id).exists())

    def test_delete_locked_match_day(self):
        day = MatchDay.objects.create(
            season=self.season, course=self.course, date=date(2026, 3, 31), status=MatchDay.STATUS_LOCKED,
        )
        response = self.client.delete(reverse('match_day_delete', args=[day.id]))
        self.assertEqual(response.status_code, 412)


class LeagueAdminTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        league = League.objects.create(name='Tuesday Nine')
        cls.course = create_course(league, 'Oak Hollow Front', PARS, DIFFICULTY, Decimal('34.5'), 120)
        cls.season = Season.objects.create(
            league=league, name='2026', start_date=date(2026, 4, 1), end_date=date(2026, 9, 30),
        )
        cls.superuser = User.objects.create_superuser(username='boss', password='pword1', email='boss@example.com')

    def setUp(self):
        self.client = Client()
        self.client.force_login(self.superuser)

    def _day(self, status, day):
        return MatchDay.objects.create(season=self.season, course=self.course, date=date(2026, 4, day), status=status)

    def _delete_selected(self, model, ids):
        return self.client.post(
            reverse(f'admin:league_{model}_changelist'),
            {'action': 'delete_selected', '_selected_action': ids, 'post': 'yes'},
        )

    def test_locked_day_cannot_be_deleted(self):
        locked = self._day(MatchDay.STATUS_LOCKED, 7)
        self._delete_selected('matchday', [locked.id])
        self.assertTrue(MatchDay.objects.filter(id=locked.id).exists())

    def test_completed_day_cannot_be_deleted_from_admin(self):
        completed = self._day(MatchDay.STATUS_COMPLETED, 14)
        response = self.client.post(reverse('admin:league_matchday_delete', args=[completed.id]), {'post': 'yes'})
        self.assertEqual(response.status_code, 403)
        self.assertTrue(MatchDay.objects.filter(id=completed.id).exists())

    def test_scheduled_day_can_be_deleted(self):
        scheduled = self._day(MatchDay.STATUS_SCHEDULED, 21)
        self._delete_selected('matchday', [scheduled.id])
        self.assertFalse(MatchDay.objects.filter(id=scheduled.id).exists())

    def test_scored_day_fields_are_read_only(self):
        request = RequestFactory().get('/')
        request.user = self.superuser
        model_admin = admin.site._registry[MatchDay]
        locked = self._day(MatchDay.STATUS_LOCKED, 7)
        scheduled = self._day(MatchDay.STATUS_SCHEDULED, 21)
        self.assertIn('date', model_admin.get_readonly_fields(request, locked))
        self.assertIn('course', model_admin.get_readonly_fields(request, locked))
        self.assertNotIn('date', model_admin.get_readonly_fields(request, scheduled))

    def test_matches_and_rounds_on_scored_days_are_protected(self):
        request = RequestFactory().get('/')
        request.user = self.superuser
        alice = Player.objects.create(name='Alice')
        bob = Player.objects.create(name='Bob')
        match = Match.objects.create(match_day=self._day(MatchDay.STATUS_LOCKED, 7), player_a=alice, player_b=bob)
        self.assertFalse(admin.site._registry[Match].has_delete_permission(request, match))
        self.assertIn('player_a', admin.site._registry[Match].get_readonly_fields(request, match))
        self.assertFalse(admin.site._registry[Round].has_delete_permission(request))
