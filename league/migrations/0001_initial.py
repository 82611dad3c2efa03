from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='League',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=128)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'Leagues',
            },
        ),
        migrations.CreateModel(
            name='Player',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=128)),
                ('email', models.CharField(blank=True, default='', max_length=256)),
                ('active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'Players',
            },
        ),
        migrations.CreateModel(
            name='Course',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=128)),
                ('par', models.IntegerField()),
                ('course_rating', models.DecimalField(decimal_places=1, max_digits=4)),
                ('slope_rating', models.IntegerField(default=113)),
                ('hole_pars', models.JSONField()),
                ('hole_difficulty', models.JSONField()),
                ('league', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='courses', to='league.league')),
            ],
            options={
                'db_table': 'Courses',
            },
        ),
        migrations.CreateModel(
            name='Season',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=128)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('active', models.BooleanField(default=True)),
                ('description', models.CharField(blank=True, default='', max_length=1024)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('league', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='seasons', to='league.league')),
            ],
            options={
                'db_table': 'Seasons',
            },
        ),
        migrations.CreateModel(
            name='LeagueMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('player', 'Player')], default='player', max_length=16)),
                ('provisional_handicap', models.DecimalField(decimal_places=1, default=0, max_digits=4)),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('is_deleted', models.BooleanField(default=False)),
                ('league', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='league.league')),
                ('player', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='league.player')),
            ],
            options={
                'db_table': 'LeagueMembers',
            },
        ),
        migrations.AddConstraint(
            model_name='leaguemember',
            constraint=models.UniqueConstraint(fields=('league', 'player'), name='leaguemember_unique_player'),
        ),
        migrations.CreateModel(
            name='MatchDay',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('status', models.CharField(choices=[('scheduled', 'Scheduled'), ('completed', 'Completed'), ('locked', 'Locked')], default='scheduled', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('locked_at', models.DateTimeField(blank=True, null=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='match_days', to='league.course')),
                ('season', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='match_days', to='league.season')),
            ],
            options={
                'db_table': 'MatchDays',
                'ordering': ['date', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Match',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('scheduled', 'Scheduled'), ('completed', 'Completed')], default='scheduled', max_length=16)),
                ('player_a_points', models.IntegerField(default=0)),
                ('player_b_points', models.IntegerField(default=0)),
                ('player_a_absent', models.BooleanField(default=False)),
                ('player_b_absent', models.BooleanField(default=False)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('match_day', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='matches', to='league.matchday')),
                ('player_a', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='matches_as_a', to='league.player')),
                ('player_b', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='matches_as_b', to='league.player')),
            ],
            options={
                'db_table': 'Matches',
            },
        ),
        migrations.CreateModel(
            name='Round',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('played_on', models.DateField()),
                ('player_absent', models.BooleanField(default=False)),
                ('hole_scores', models.JSONField()),
                ('net_hole_scores', models.JSONField()),
                ('match_net_hole_scores', models.JSONField()),
                ('match_strokes', models.JSONField()),
                ('gross_score', models.IntegerField()),
                ('net_score', models.IntegerField()),
                ('match_net_score', models.IntegerField()),
                ('strokes_received', models.IntegerField(default=0)),
                ('handicap_differential', models.DecimalField(blank=True, decimal_places=1, max_digits=4, null=True)),
                ('handicap_index', models.DecimalField(decimal_places=1, max_digits=4)),
                ('course_handicap', models.IntegerField()),
                ('playing_handicap', models.IntegerField()),
                ('hole_points', models.JSONField()),
                ('bonus_points', models.IntegerField(default=0)),
                ('total_points', models.IntegerField(default=0)),
                ('match', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rounds', to='league.match')),
                ('player', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rounds', to='league.player')),
                ('season', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rounds', to='league.season')),
            ],
            options={
                'db_table': 'Rounds',
            },
        ),
        migrations.AddConstraint(
            model_name='round',
            constraint=models.UniqueConstraint(fields=('match', 'player'), name='round_unique_match_player'),
        ),
        migrations.CreateModel(
            name='HandicapRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('league_handicap_index', models.DecimalField(decimal_places=1, max_digits=4)),
                ('course_handicap', models.IntegerField()),
                ('playing_handicap', models.IntegerField()),
                ('rounds_counted', models.IntegerField(default=0)),
                ('is_provisional', models.BooleanField(default=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('course', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to='league.course')),
                ('player', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='handicaps', to='league.player')),
                ('season', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='handicaps', to='league.season')),
            ],
            options={
                'db_table': 'HandicapRecords',
            },
        ),
        migrations.AddConstraint(
            model_name='handicaprecord',
            constraint=models.UniqueConstraint(fields=('season', 'player'), name='handicaprecord_unique_player'),
        ),
    ]
