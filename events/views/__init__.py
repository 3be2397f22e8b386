from .events import (
    EventListCreateView,
    EventDetailView,
    EventStatusView,
)
from .registrations import (
    RegisterEventView,
    RegisterTournamentTeamView,
    EventRegistrationStatusView,
    MyRegisteredTeamView,
    EventRegistrationsView,
)
