# events/views/registrations.py

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from core.api import result_response
from events import services
from events.serializers import RegisterTournamentTeamSerializer


class RegisterEventView(APIView):
    """
    POST /api/events/<id>/register/  individual registration
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        result = services.register_for_individual_event(pk, request.user)
        return result_response(result, success_status=status.HTTP_201_CREATED)


class RegisterTournamentTeamView(APIView):
    """
    POST /api/events/<id>/register-team/  {"team": <tournament team id>}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        serializer = RegisterTournamentTeamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = services.register_existing_tournament_team(pk, serializer.validated_data["team"], request.user)
        return result_response(result, success_status=status.HTTP_201_CREATED)


class EventRegistrationStatusView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        return result_response(services.is_user_registered(pk, request.user))


class MyRegisteredTeamView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        return result_response(services.get_your_registered_team(pk, request.user))


class EventRegistrationsView(APIView):
    """
    GET /api/events/<id>/registrations/  organizer overview (core members only)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        return result_response(services.get_event_registrations(pk, request.user))
