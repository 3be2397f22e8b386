from django.urls import path
from .views import (
    EventListCreateView,
    EventDetailView,
    EventStatusView,
    RegisterEventView,
    RegisterTournamentTeamView,
    EventRegistrationStatusView,
    MyRegisteredTeamView,
    EventRegistrationsView,
)

urlpatterns = [
    path("", EventListCreateView.as_view(), name="event-list"),
    path("<int:pk>/", EventDetailView.as_view(), name="event-detail"),
    path("<int:pk>/status/", EventStatusView.as_view(), name="event-status"),

    # Registration
    path("<int:pk>/register/", RegisterEventView.as_view(), name="event-register"),
    path("<int:pk>/register-team/", RegisterTournamentTeamView.as_view(), name="event-register-team"),
    path("<int:pk>/registration-status/", EventRegistrationStatusView.as_view(), name="event-registration-status"),
    path("<int:pk>/my-team/", MyRegisteredTeamView.as_view(), name="event-my-team"),

    # Organizer overview
    path("<int:pk>/registrations/", EventRegistrationsView.as_view(), name="event-registrations"),
]
