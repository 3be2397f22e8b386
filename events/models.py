# events/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Event(models.Model):
    STATUS_UPCOMING = "upcoming"
    STATUS_REGISTRATION_OPEN = "registration_open"
    STATUS_ONGOING = "ongoing"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_UPCOMING, "Upcoming"),
        (STATUS_REGISTRATION_OPEN, "Registration open"),
        (STATUS_ONGOING, "Ongoing"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    TYPE_INDIVIDUAL = "individual"
    TYPE_TEAM = "team"

    TYPE_CHOICES = [
        (TYPE_INDIVIDUAL, "Individual"),
        (TYPE_TEAM, "Team"),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_TEAM)

    # Authoritative capacity used to decide when a team is full
    team_size = models.PositiveIntegerField(default=1)
    max_participants = models.PositiveIntegerField(default=0, help_text="0 means unlimited")

    registration_deadline = models.DateTimeField(null=True, blank=True)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)

    # Tournament-linked events reuse the teams formed for the tournament
    is_tournament = models.BooleanField(default=False)
    tournament = models.ForeignKey(
        "tournaments.Tournament",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="events",
    )

    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_UPCOMING)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_events",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["start_date"]
        indexes = [
            models.Index(fields=["status", "start_date"], name="event_status_start_idx"),
            models.Index(fields=["tournament"], name="event_tournament_idx"),
        ]

    def __str__(self):
        return self.title

    @property
    def accepts_teams(self):
        return self.type == self.TYPE_TEAM

    @property
    def registration_deadline_passed(self):
        return self.registration_deadline is not None and self.registration_deadline < timezone.now()


class EventRegistration(models.Model):
    """
    Durable record that a team or an individual participates in an event.
    Never mutated or deleted by the team-formation flow.
    """
    TYPE_INDIVIDUAL = "individual"
    TYPE_TEAM = "team"

    TYPE_CHOICES = [
        (TYPE_INDIVIDUAL, "Individual"),
        (TYPE_TEAM, "Team"),
    ]

    STATUS_REGISTERED = "registered"

    STATUS_CHOICES = [
        (STATUS_REGISTERED, "Registered"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    registration_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="event_registrations",
    )
    team = models.ForeignKey(
        "teams.Team",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="event_registrations",
    )
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_REGISTERED)
    registered_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["event", "team"], name="unique_event_team_registration"),
            models.UniqueConstraint(fields=["event", "user"], name="unique_event_user_registration"),
            models.CheckConstraint(
                condition=(
                    Q(registration_type="team", team__isnull=False, user__isnull=True)
                    | Q(registration_type="individual", user__isnull=False, team__isnull=True)
                ),
                name="registration_matches_type",
            ),
        ]
        indexes = [
            models.Index(fields=["event", "registered_at"], name="reg_event_registered_idx"),
        ]

    def __str__(self):
        who = self.team if self.team_id else self.user
        return f"{who} -> {self.event}"
