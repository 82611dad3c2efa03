from django.contrib import admin, messages

from .exceptions import LeagueError
from .models import (
    Course, HandicapRecord, League, LeagueMember, Match, MatchDay, Player, Round, Season,
)
from .services.sequencer import MatchDaySequencer

admin.site.register(Player)
admin.site.register(League)
admin.site.register(Season)


@admin.register(LeagueMember)
class LeagueMemberAdmin(admin.ModelAdmin):
    list_display = ("id", "league", "player", "role", "provisional_handicap", "is_deleted")
    list_filter = ("league", "role", "is_deleted")


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "league", "par", "course_rating", "slope_rating")

    # layouts are frozen once saved; existing courses are view-only
    def has_change_permission(self, request, obj=None):
        if obj is not None and obj.pk is not None:
            return False
        return super().has_change_permission(request, obj)


@admin.action(description="Lock selected match days")
def lock_match_days(modeladmin, request, queryset):
    sequencer = MatchDaySequencer()
    locked = 0
    for match_day in queryset:
        try:
            sequencer.lock(match_day)
            locked += 1
        except LeagueError as exc:
            modeladmin.message_user(request, f"{match_day}: {exc}", messages.WARNING)
    modeladmin.message_user(request, f"Locked {locked} match day(s).", messages.SUCCESS)


@admin.register(MatchDay)
class MatchDayAdmin(admin.ModelAdmin):
    list_display = ("id", "season", "date", "course", "status", "locked_at")
    list_filter = ("season", "status")
    readonly_fields = ("status", "completed_at", "locked_at")
    actions = [lock_match_days]

    # once scored, a day's rounds depend on its season, course and date
    def get_readonly_fields(self, request, obj=None):
        fields = super().get_readonly_fields(request, obj)
        if obj is not None and obj.status != MatchDay.STATUS_SCHEDULED:
            return tuple(fields) + ("season", "course", "date")
        return fields

    # scored days are removed through the API so handicaps get rebuilt
    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.status != MatchDay.STATUS_SCHEDULED:
            return False
        return super().has_delete_permission(request, obj)

    def delete_model(self, request, obj):
        MatchDaySequencer().delete_match_day(obj)

    def delete_queryset(self, request, queryset):
        sequencer = MatchDaySequencer()
        for match_day in queryset:
            sequencer.delete_match_day(match_day)


@admin.register(Match)
class MatchAdmin(admin.ModelAdmin):
    list_display = ("id", "match_day", "player_a", "player_b", "status", "player_a_points", "player_b_points")
    list_filter = ("status",)
    readonly_fields = ("status", "player_a_points", "player_b_points", "player_a_absent",
                       "player_b_absent", "completed_at")

    def get_readonly_fields(self, request, obj=None):
        fields = super().get_readonly_fields(request, obj)
        if obj is not None and obj.match_day.status != MatchDay.STATUS_SCHEDULED:
            return tuple(fields) + ("match_day", "player_a", "player_b")
        return fields

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.match_day.status != MatchDay.STATUS_SCHEDULED:
            return False
        return super().has_delete_permission(request, obj)


@admin.register(Round)
class RoundAdmin(admin.ModelAdmin):
    list_display = ("id", "match", "player", "played_on", "gross_score", "match_net_score",
                    "handicap_differential", "player_absent", "total_points")
    list_filter = ("season", "player_absent")

    # rounds are written and cleared by the match processor only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(HandicapRecord)
class HandicapRecordAdmin(admin.ModelAdmin):
    list_display = ("id", "season", "player", "league_handicap_index", "course_handicap",
                    "playing_handicap", "rounds_counted", "is_provisional", "updated_at")
    list_filter = ("season", "is_provisional")
