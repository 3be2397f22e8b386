# teams/views.py - Team Formation API Views

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from core.api import api_error, result_response
from . import services
from .models import Team
from .serializers import (
    ApplySerializer,
    EventTeamCreateSerializer,
    InviteSerializer,
    RespondSerializer,
    TournamentTeamCreateSerializer,
)


def _int_param(request, name):
    value = request.query_params.get(name)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class TeamViewSet(viewsets.GenericViewSet):
    """
    Team formation for events and tournaments.

    POST /api/teams/                          create an event team
    POST /api/teams/tournament/               create a tournament team
    GET  /api/teams/<id>/                     team detail with state
    GET  /api/teams/mine/                     teams I lead
    GET  /api/teams/needing-members/?event=   teams with open slots
    POST /api/teams/<id>/apply/               apply to join
    POST /api/teams/<id>/invite/              leader invites a member
    POST /api/teams/<id>/reinvite/            leader re-sends an invitation
    GET  /api/teams/<id>/invitations/         leader sees invitation statuses
    GET  /api/teams/<id>/available-members/   leader sees who can be invited
    """
    queryset = Team.objects.all()
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def create(self, request):
        serializer = EventTeamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = services.create_team(
            request.user,
            data['event'],
            data['name'],
            invited_member_ids=data['invited_member_ids'],
            description=data['description'],
        )
        return result_response(result, success_status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'], url_path='tournament')
    def create_tournament(self, request):
        serializer = TournamentTeamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = services.create_tournament_team(
            request.user,
            data['tournament'],
            data['name'],
            invited_member_ids=data['invited_member_ids'],
            description=data['description'],
        )
        return result_response(result, success_status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return result_response(services.get_team(pk))

    @action(detail=False, methods=['get'], url_path='mine')
    def mine(self, request):
        return result_response(services.get_my_teams(request.user))

    @action(detail=False, methods=['get'], url_path='needing-members')
    def needing_members(self, request):
        event_id = _int_param(request, 'event')
        tournament_id = _int_param(request, 'tournament')
        if event_id is None and tournament_id is None:
            return api_error("Query parameter 'event' or 'tournament' is required")

        result = services.get_teams_needing_members(
            request.user,
            event_id=event_id,
            tournament_id=tournament_id,
        )
        return result_response(result)

    @action(detail=True, methods=['post'], url_path='apply')
    def apply(self, request, pk=None):
        serializer = ApplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.apply_to_team(
            pk,
            request.user,
            event_id=serializer.validated_data.get('event'),
            tournament_id=serializer.validated_data.get('tournament'),
        )
        return result_response(result, success_status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='invite')
    def invite(self, request, pk=None):
        serializer = InviteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.send_invitation(
            pk,
            serializer.validated_data['member_id'],
            request.user,
            message=serializer.validated_data['message'],
        )
        return result_response(result, success_status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='reinvite')
    def reinvite(self, request, pk=None):
        serializer = InviteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.reinvite_member(pk, serializer.validated_data['member_id'], request.user)
        return result_response(result, success_status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'], url_path='invitations')
    def invitations(self, request, pk=None):
        return result_response(services.get_team_invitation_status(pk, request.user))

    @action(detail=True, methods=['get'], url_path='available-members')
    def available_members(self, request, pk=None):
        return result_response(services.get_available_members(pk, request.user))


class InvitationViewSet(viewsets.GenericViewSet):
    """
    GET  /api/teams/invitations/?status=pending   my invitations
    POST /api/teams/invitations/<id>/respond/     {"accept": true|false}
    POST /api/teams/invitations/<id>/cancel/      inviter cancels a pending invitation
    """
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        return result_response(services.list_my_invitations(request.user, status=request.query_params.get('status')))

    @action(detail=True, methods=['post'], url_path='respond')
    def respond(self, request, pk=None):
        serializer = RespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.respond_to_invitation(pk, serializer.validated_data['accept'], request.user)
        return result_response(result)

    @action(detail=True, methods=['post'], url_path='cancel')
    def cancel(self, request, pk=None):
        return result_response(services.cancel_invitation(pk, request.user))


class ApplicationViewSet(viewsets.GenericViewSet):
    """
    GET    /api/teams/applications/?event=         my applications
    GET    /api/teams/applications/incoming/       pending applications to teams I lead
    POST   /api/teams/applications/<id>/respond/   leader accepts / rejects
    DELETE /api/teams/applications/<id>/           applicant withdraws
    """
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        result = services.list_my_applications(
            request.user,
            event_id=_int_param(request, 'event'),
            tournament_id=_int_param(request, 'tournament'),
        )
        return result_response(result)

    @action(detail=False, methods=['get'], url_path='incoming')
    def incoming(self, request):
        result = services.list_team_applications(
            request.user,
            event_id=_int_param(request, 'event'),
            tournament_id=_int_param(request, 'tournament'),
        )
        return result_response(result)

    @action(detail=True, methods=['post'], url_path='respond')
    def respond(self, request, pk=None):
        serializer = RespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.respond_to_application(pk, serializer.validated_data['accept'], request.user)
        return result_response(result)

    def destroy(self, request, pk=None):
        return result_response(services.withdraw_application(pk, request.user))
