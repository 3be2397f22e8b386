# events/views/events.py

from django.db.models import Count
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.api import api_error, result_response
from users.permissions import user_is_core
from events import services
from events.models import Event
from events.serializers import EventSerializer, EventStatusSerializer


class EventListCreateView(APIView):
    """
    GET  /api/events/?status=registration_open
    POST /api/events/   (core members only)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = Event.objects.select_related("created_by").annotate(
            registrations_total=Count("registrations", distinct=True)
        )
        status_filter = request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        tournament_id = request.query_params.get("tournament")
        if tournament_id:
            qs = qs.filter(tournament_id=tournament_id)

        serializer = EventSerializer(qs, many=True, context={"request": request})
        return Response(serializer.data)

    def post(self, request):
        if not user_is_core(request.user):
            return api_error("Only core team members can create events", status.HTTP_403_FORBIDDEN)

        serializer = EventSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        event = serializer.save(created_by=request.user)
        return Response(EventSerializer(event, context={"request": request}).data, status=status.HTTP_201_CREATED)


class EventDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        event = get_object_or_404(Event, pk=pk)
        return Response(EventSerializer(event, context={"request": request}).data)

    def patch(self, request, pk):
        event = get_object_or_404(Event, pk=pk)
        if not user_is_core(request.user):
            return api_error("Only core team members can edit events", status.HTTP_403_FORBIDDEN)

        serializer = EventSerializer(event, data=request.data, partial=True, context={"request": request})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class EventStatusView(APIView):
    """
    POST /api/events/<id>/status/  {"status": "registration_open"}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        serializer = EventStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return result_response(services.update_event_status(pk, serializer.validated_data["status"], request.user))
