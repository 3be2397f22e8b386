# tournaments/models.py
from django.conf import settings
from django.db import models


def default_tournament_team_size():
    return settings.TOURNAMENT_TEAM_SIZE


class Tournament(models.Model):
    STATUS_UPCOMING = "upcoming"
    STATUS_REGISTRATION_OPEN = "registration_open"
    STATUS_ONGOING = "ongoing"
    STATUS_COMPLETED = "completed"

    STATUS_CHOICES = [
        (STATUS_UPCOMING, "Upcoming"),
        (STATUS_REGISTRATION_OPEN, "Registration open"),
        (STATUS_ONGOING, "Ongoing"),
        (STATUS_COMPLETED, "Completed"),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    year = models.PositiveIntegerField(null=True, blank=True)
    team_size = models.PositiveIntegerField(
        default=default_tournament_team_size,
        help_text="Members a tournament team needs before it is registered",
    )
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_UPCOMING)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    @property
    def accepts_teams(self):
        return self.status == self.STATUS_REGISTRATION_OPEN


class TournamentRegistration(models.Model):
    """
    A team confirmed for a tournament. Created exactly once per (tournament, team),
    together with the team's TournamentPoints row.
    """
    STATUS_REGISTERED = "registered"

    STATUS_CHOICES = [
        (STATUS_REGISTERED, "Registered"),
    ]

    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name="registrations")
    team = models.ForeignKey("teams.Team", on_delete=models.CASCADE, related_name="tournament_registrations")
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_REGISTERED)
    registered_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["tournament", "team"], name="unique_tournament_team_registration"),
        ]

    def __str__(self):
        return f"{self.team} @ {self.tournament}"


class TournamentPoints(models.Model):
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name="points_table")
    team = models.ForeignKey("teams.Team", on_delete=models.CASCADE, related_name="tournament_points")
    points = models.IntegerField(default=0)
    matches_played = models.PositiveIntegerField(default=0)
    wins = models.PositiveIntegerField(default=0)
    losses = models.PositiveIntegerField(default=0)
    draws = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Tournament points"
        constraints = [
            models.UniqueConstraint(fields=["tournament", "team"], name="unique_tournament_team_points"),
        ]
        indexes = [
            models.Index(fields=["tournament", "-points"], name="points_tournament_rank_idx"),
        ]

    def __str__(self):
        return f"{self.team}: {self.points} pts"
