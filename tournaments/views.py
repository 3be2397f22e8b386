# tournaments/views.py

from django.db.models import Count
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.api import result_response
from users.permissions import IsCoreMember
from . import services
from .models import Tournament
from .serializers import PointsUpdateSerializer, TournamentSerializer, TournamentStatusSerializer


class TournamentListCreateView(APIView):
    """
    GET  /api/tournaments/
    POST /api/tournaments/   (core members only)
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), IsCoreMember()]
        return [IsAuthenticated()]

    def get(self, request):
        qs = Tournament.objects.annotate(registrations_total=Count("registrations", distinct=True))
        status_filter = request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        return Response(TournamentSerializer(qs, many=True).data)

    def post(self, request):
        serializer = TournamentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tournament = serializer.save()
        return Response(TournamentSerializer(tournament).data, status=status.HTTP_201_CREATED)


class TournamentDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        tournament = get_object_or_404(Tournament, pk=pk)
        return Response(TournamentSerializer(tournament).data)


class TournamentStatusView(APIView):
    """
    POST /api/tournaments/<id>/status/  {"status": "registration_open"}
    """
    permission_classes = [IsAuthenticated, IsCoreMember]

    def post(self, request, pk):
        serializer = TournamentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return result_response(services.update_tournament_status(pk, serializer.validated_data["status"], request.user))


class TournamentPointsView(APIView):
    """
    POST /api/tournaments/<id>/points/  {"team": 1, "points": 3, "wins": 1}
    """
    permission_classes = [IsAuthenticated, IsCoreMember]

    def post(self, request, pk):
        serializer = PointsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = services.update_tournament_points(
            pk,
            data["team"],
            request.user,
            points=data["points"],
            wins=data["wins"],
            losses=data["losses"],
            draws=data["draws"],
            match_played=data["match_played"],
        )
        return result_response(result)


class TournamentLeaderboardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        return result_response(services.get_tournament_leaderboard(pk))


class TournamentResetView(APIView):
    permission_classes = [IsAuthenticated, IsCoreMember]

    def post(self, request, pk):
        return result_response(services.reset_tournament(pk, request.user))


class TournamentRepairPointsView(APIView):
    permission_classes = [IsAuthenticated, IsCoreMember]

    def post(self, request, pk):
        return result_response(services.repair_tournament_points(pk, request.user))
