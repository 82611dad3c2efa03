from django.urls import path
from league import views

urlpatterns = [
    path('matches/<int:match_id>/scores/', views.match_scores_view, name='match_scores'),
    path('leagues/<int:league_id>/seasons/<int:season_id>/players/<int:player_id>/handicap/',
         views.handicap_view, name='player_handicap'),
    path('courses/<int:course_id>/strokes/', views.stroke_allocation_view, name='stroke_allocation'),
    path('seasons/<int:season_id>/standings/', views.standings_view, name='season_standings'),
    path('seasons/<int:season_id>/match-days/', views.match_days_view, name='season_match_days'),
    path('match-days/<int:match_day_id>/', views.match_day_delete_view, name='match_day_delete'),
]
