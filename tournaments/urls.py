from django.urls import path
from .views import (
    TournamentListCreateView,
    TournamentDetailView,
    TournamentStatusView,
    TournamentPointsView,
    TournamentLeaderboardView,
    TournamentResetView,
    TournamentRepairPointsView,
)

urlpatterns = [
    path("", TournamentListCreateView.as_view(), name="tournament-list"),
    path("<int:pk>/", TournamentDetailView.as_view(), name="tournament-detail"),
    path("<int:pk>/status/", TournamentStatusView.as_view(), name="tournament-status"),
    path("<int:pk>/points/", TournamentPointsView.as_view(), name="tournament-points"),
    path("<int:pk>/leaderboard/", TournamentLeaderboardView.as_view(), name="tournament-leaderboard"),
    path("<int:pk>/reset/", TournamentResetView.as_view(), name="tournament-reset"),
    path("<int:pk>/repair-points/", TournamentRepairPointsView.as_view(), name="tournament-repair-points"),
]
