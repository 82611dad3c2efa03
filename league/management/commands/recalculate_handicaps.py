import logging

from django.core.management.base import BaseCommand, CommandError

from league.exceptions import LeagueError
from league.models import LeagueMember, Season
from league.services.handicap import HandicapTracker

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Rebuild every member\'s handicap record from the stored rounds of active seasons'

    def add_arguments(self, parser):
        parser.add_argument('--season', type=int, help='Only this season (active or not)')

    def handle(self, *args, **options):
        if options.get('season'):
            seasons = Season.objects.filter(id=options['season'])
            if not seasons.exists():
                raise CommandError(f"Season {options['season']} does not exist")
        else:
            seasons = Season.objects.filter(active=True)

        tracker = HandicapTracker()
        success_count = 0
        error_count = 0

        for season in seasons:
            members = (
                LeagueMember.objects
                .filter(league_id=season.league_id, is_deleted=False)
                .select_related('player')
            )
            self.stdout.write(f"Season {season.id} ({season.name}): {members.count()} members")

            for member in members:
                try:
                    record = tracker.refresh(season, member.player)
                except LeagueError as exc:
                    error_count += 1
                    logger.warning("Handicap rebuild failed for player %s season %s: %s",
                                   member.player_id, season.id, exc)
                    self.stdout.write(self.style.WARNING(f"  {member.player.name}: {exc}"))
                    continue
                success_count += 1
                self.stdout.write(
                    f"  {member.player.name}: index {record.league_handicap_index} "
                    f"({record.rounds_counted} rounds{', provisional' if record.is_provisional else ''})"
                )

        if error_count:
            self.stdout.write(self.style.WARNING(
                f'Handicap recalculation finished: {success_count} successful, {error_count} errors'))
        else:
            self.stdout.write(self.style.SUCCESS(
                f'Handicap recalculation finished: {success_count} successful'))
