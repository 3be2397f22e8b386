# events/serializers.py

from rest_framework import serializers

from teams.serializers import TeamSerializer
from users.serializers import UserSummarySerializer
from .models import Event, EventRegistration


# -----------------------------------------
# EVENT SERIALIZER
# -----------------------------------------
class EventSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(source="created_by.display_name", read_only=True)
    registrations_count = serializers.SerializerMethodField()
    is_registered = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "description",
            "type",
            "team_size",
            "max_participants",
            "registration_deadline",
            "start_date",
            "end_date",
            "is_tournament",
            "tournament",
            "status",
            "created_by",
            "created_by_name",
            "created_at",
            "registrations_count",
            "is_registered",
        ]
        read_only_fields = [
            "id",
            "status",
            "created_by",
            "created_at",
            "registrations_count",
            "is_registered",
        ]

    def get_registrations_count(self, obj) -> int:
        # Use annotated value if available, else fallback
        annotated = getattr(obj, "registrations_total", None)
        if annotated is not None:
            return annotated
        return obj.registrations.count()

    def get_is_registered(self, obj):
        request = self.context.get("request")
        if request and request.user.is_authenticated:
            return (
                EventRegistration.objects.filter(event=obj, user=request.user).exists()
                or EventRegistration.objects.filter(event=obj, team__members__member=request.user).exists()
            )
        return False

    def validate_team_size(self, value):
        if value < 1:
            raise serializers.ValidationError("team_size must be at least 1.")
        return value

    def validate(self, attrs):
        """
        Cross-field validation:
        - end_date must be after start_date
        - individual events have a team size of one
        - tournament events must reference their tournament
        """
        def current(field):
            if field in attrs:
                return attrs[field]
            return getattr(self.instance, field, None) if self.instance is not None else None

        start = current("start_date")
        end = current("end_date")
        if start and end and end <= start:
            raise serializers.ValidationError({"end_date": "end_date must be after start_date."})

        if current("type") == Event.TYPE_INDIVIDUAL and (current("team_size") or 1) != 1:
            raise serializers.ValidationError({"team_size": "Individual events have a team size of 1."})

        if current("is_tournament") and current("tournament") is None:
            raise serializers.ValidationError({"tournament": "Tournament events must reference a tournament."})

        return attrs


# -----------------------------------------
# REGISTRATION SERIALIZER
# -----------------------------------------
class EventRegistrationSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    team = TeamSerializer(read_only=True)

    class Meta:
        model = EventRegistration
        fields = ["id", "event", "registration_type", "status", "user", "team", "registered_at"]
        read_only_fields = fields


class EventStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Event.STATUS_CHOICES)


class RegisterTournamentTeamSerializer(serializers.Serializer):
    team = serializers.IntegerField(min_value=1)
