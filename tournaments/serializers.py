# tournaments/serializers.py

from rest_framework import serializers

from .models import Tournament, TournamentPoints


class TournamentSerializer(serializers.ModelSerializer):
    registered_teams = serializers.SerializerMethodField()

    class Meta:
        model = Tournament
        fields = [
            "id", "title", "description", "year", "team_size",
            "start_date", "end_date", "status", "created_at", "registered_teams",
        ]
        read_only_fields = ["id", "status", "created_at", "registered_teams"]

    def get_registered_teams(self, obj) -> int:
        annotated = getattr(obj, "registrations_total", None)
        if annotated is not None:
            return annotated
        return obj.registrations.count()

    def validate_team_size(self, value):
        if value < 1:
            raise serializers.ValidationError("team_size must be at least 1.")
        return value

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end <= start:
            raise serializers.ValidationError({"end_date": "end_date must be after start_date."})
        return attrs


class TournamentPointsSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(source="team.name", read_only=True)

    class Meta:
        model = TournamentPoints
        fields = [
            "id", "tournament", "team", "team_name", "points",
            "matches_played", "wins", "losses", "draws", "updated_at",
        ]
        read_only_fields = fields


class TournamentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Tournament.STATUS_CHOICES)


class PointsUpdateSerializer(serializers.Serializer):
    team = serializers.IntegerField(min_value=1)
    points = serializers.IntegerField(default=0)
    match_played = serializers.BooleanField(default=False)
    wins = serializers.IntegerField(min_value=0, default=0)
    losses = serializers.IntegerField(min_value=0, default=0)
    draws = serializers.IntegerField(min_value=0, default=0)
