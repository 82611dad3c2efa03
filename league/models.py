from django.db import models
from django.contrib.auth.models import User # identity layer; a Player may be linked to a login
from django.core.exceptions import ValidationError

from league.exceptions import FailedPrecondition, InvalidInput


class Player(models.Model):
    user = models.OneToOneField(User, on_delete=models.SET_NULL, null=True, blank=True) # Links to the built-in Django User model
    name = models.CharField(max_length=128)
    email = models.CharField(max_length=256, blank=True, default="")
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "Players"

    def __str__(self):
        return self.name


class League(models.Model):
    name = models.CharField(max_length=128)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "Leagues"

    def __str__(self):
        return self.name


class LeagueMember(models.Model):
    """
    A player's membership in a league. Carries the admin-entered provisional
    handicap used until the player has a real round in the season.
    """
    ROLE_ADMIN = "admin"
    ROLE_PLAYER = "player"
    ROLE_CHOICES = [(ROLE_ADMIN, "Admin"), (ROLE_PLAYER, "Player")]

    league = models.ForeignKey('League', on_delete=models.CASCADE, related_name="members")
    player = models.ForeignKey('Player', on_delete=models.CASCADE, related_name="memberships")
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_PLAYER)
    provisional_handicap = models.DecimalField(max_digits=4, decimal_places=1, default=0)
    joined_at = models.DateTimeField(auto_now_add=True)
    is_deleted = models.BooleanField(default=False)  # soft delete, history still points here

    class Meta:
        db_table = "LeagueMembers"
        constraints = [
            models.UniqueConstraint(fields=["league", "player"], name="leaguemember_unique_player"),
        ]

    def __str__(self):
        return f"{self.player_id}@{self.league_id} ({self.role})"


class Course(models.Model):
    """
    Nine-hole course layout. Immutable once created: historical stroke
    allocations were computed from these numbers.
    """
    league = models.ForeignKey('League', on_delete=models.CASCADE, related_name="courses")
    name = models.CharField(max_length=128)
    par = models.IntegerField()
    course_rating = models.DecimalField(max_digits=4, decimal_places=1)
    slope_rating = models.IntegerField(default=113)
    hole_pars = models.JSONField()        # [par of hole 1, ..., par of hole 9]
    hole_difficulty = models.JSONField()  # permutation of 1..9, 1 = hardest

    class Meta:
        db_table = "Courses"

    def __str__(self):
        return self.name

    def clean(self):
        from league.services.catalog import validate_layout
        try:
            validate_layout(self.par, self.hole_pars, self.hole_difficulty, self.slope_rating)
        except InvalidInput as exc:
            raise ValidationError(str(exc))

    def save(self, *args, **kwargs):
        if self.pk is not None and Course.objects.filter(pk=self.pk).exists():
            raise FailedPrecondition(f"Course {self.pk} is immutable once created.")
        super().save(*args, **kwargs)


class Season(models.Model):
    league = models.ForeignKey('League', on_delete=models.CASCADE, related_name="seasons")
    name = models.CharField(max_length=128)
    start_date = models.DateField()
    end_date = models.DateField()
    active = models.BooleanField(default=True)  # one active season per league, enforced by the caller
    description = models.CharField(max_length=1024, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "Seasons"

    def __str__(self):
        return self.name


class MatchDay(models.Model):
    STATUS_SCHEDULED = "scheduled"
    STATUS_COMPLETED = "completed"
    STATUS_LOCKED = "locked"
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, "Scheduled"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_LOCKED, "Locked"),
    ]

    season = models.ForeignKey('Season', on_delete=models.CASCADE, related_name="match_days")
    course = models.ForeignKey('Course', on_delete=models.PROTECT, related_name="match_days")
    date = models.DateField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SCHEDULED)
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    locked_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "MatchDays"
        ordering = ["date", "id"]

    def __str__(self):
        return f"{self.season_id} {self.date} ({self.status})"

    @property
    def is_locked(self):
        return self.status == self.STATUS_LOCKED


class Match(models.Model):
    STATUS_SCHEDULED = "scheduled"
    STATUS_COMPLETED = "completed"
    STATUS_CHOICES = [(STATUS_SCHEDULED, "Scheduled"), (STATUS_COMPLETED, "Completed")]

    match_day = models.ForeignKey('MatchDay', on_delete=models.CASCADE, related_name="matches")
    player_a = models.ForeignKey('Player', on_delete=models.PROTECT, related_name="matches_as_a")
    player_b = models.ForeignKey('Player', on_delete=models.PROTECT, related_name="matches_as_b")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SCHEDULED)
    player_a_points = models.IntegerField(default=0)
    player_b_points = models.IntegerField(default=0)
    player_a_absent = models.BooleanField(default=False)
    player_b_absent = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "Matches"

    def __str__(self):
        return f"Match {self.id}: {self.player_a_id} v {self.player_b_id}"


class Round(models.Model):
    """
    One player's nine-hole card for one match, plus everything the engine
    derived from it. Always overwritten when the match is re-processed, so the
    primary key keeps the round's original ingestion order.
    """
    match = models.ForeignKey('Match', on_delete=models.CASCADE, related_name="rounds")
    player = models.ForeignKey('Player', on_delete=models.PROTECT, related_name="rounds")
    season = models.ForeignKey('Season', on_delete=models.CASCADE, related_name="rounds")
    played_on = models.DateField()
    player_absent = models.BooleanField(default=False)

    hole_scores = models.JSONField()            # gross, real or synthesized
    net_hole_scores = models.JSONField()        # gross - own playing handicap spread over holes
    match_net_hole_scores = models.JSONField()  # gross - strokes received in this match
    match_strokes = models.JSONField()          # strokes received per hole in this match

    gross_score = models.IntegerField()
    net_score = models.IntegerField()
    match_net_score = models.IntegerField()
    strokes_received = models.IntegerField(default=0)

    handicap_differential = models.DecimalField(max_digits=4, decimal_places=1, null=True, blank=True)  # null when absent
    handicap_index = models.DecimalField(max_digits=4, decimal_places=1)  # index used for this round
    course_handicap = models.IntegerField()
    playing_handicap = models.IntegerField()

    hole_points = models.JSONField()
    bonus_points = models.IntegerField(default=0)
    total_points = models.IntegerField(default=0)

    class Meta:
        db_table = "Rounds"
        constraints = [
            models.UniqueConstraint(fields=["match", "player"], name="round_unique_match_player"),
        ]

    def __str__(self):
        return f"Round {self.id}: player {self.player_id} match {self.match_id}"


class HandicapRecord(models.Model):
    """
    Current handicap snapshot for a (season, player). Rebuilt from stored rounds
    after every ingestion, so it never drifts from the round history.
    """
    season = models.ForeignKey('Season', on_delete=models.CASCADE, related_name="handicaps")
    player = models.ForeignKey('Player', on_delete=models.CASCADE, related_name="handicaps")
    course = models.ForeignKey('Course', on_delete=models.SET_NULL, null=True, blank=True)
    league_handicap_index = models.DecimalField(max_digits=4, decimal_places=1)
    course_handicap = models.IntegerField()
    playing_handicap = models.IntegerField()
    rounds_counted = models.IntegerField(default=0)
    is_provisional = models.BooleanField(default=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "HandicapRecords"
        constraints = [
            models.UniqueConstraint(fields=["season", "player"], name="handicaprecord_unique_player"),
        ]

    def __str__(self):
        return f"{self.player_id} {self.season_id}: {self.league_handicap_index}"
