# teams/serializers.py

from rest_framework import serializers

from users.serializers import UserSummarySerializer
from .models import Team, TeamMember, TeamInvitation, TeamApplication


class TeamMemberSerializer(serializers.ModelSerializer):
    """Serializer for team members"""
    member = UserSummarySerializer(read_only=True)

    class Meta:
        model = TeamMember
        fields = ['id', 'member', 'joined_at']


class TeamSerializer(serializers.ModelSerializer):
    leader = UserSummarySerializer(read_only=True)
    members = TeamMemberSerializer(many=True, read_only=True)
    member_count = serializers.SerializerMethodField()
    required_size = serializers.IntegerField(read_only=True)

    class Meta:
        model = Team
        fields = [
            'id', 'name', 'description', 'leader', 'is_tournament', 'event',
            'tournament', 'member_count', 'required_size', 'members', 'created_at',
        ]

    def get_member_count(self, obj):
        # Annotated querysets carry the count already
        annotated = getattr(obj, 'member_total', None)
        if annotated is not None:
            return annotated
        return obj.members.count()


class TeamSummarySerializer(serializers.ModelSerializer):
    """Team row without the member list (leader dashboards)"""
    member_count = serializers.SerializerMethodField()
    context_title = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            'id', 'name', 'description', 'is_tournament', 'event', 'tournament',
            'member_count', 'context_title', 'created_at',
        ]

    def get_member_count(self, obj):
        annotated = getattr(obj, 'member_total', None)
        if annotated is not None:
            return annotated
        return obj.members.count()

    def get_context_title(self, obj):
        context = obj.context
        return context.title if context else None


class TeamInvitationSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(source='team.name', read_only=True)
    inviter = UserSummarySerializer(read_only=True)
    invitee = UserSummarySerializer(read_only=True)
    status = serializers.CharField(source='effective_status', read_only=True)

    class Meta:
        model = TeamInvitation
        fields = [
            'id', 'team', 'team_name', 'inviter', 'invitee', 'event', 'tournament',
            'status', 'message', 'created_at', 'responded_at', 'expires_at',
        ]


class TeamApplicationSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(source='team.name', read_only=True)
    applicant = UserSummarySerializer(read_only=True)

    class Meta:
        model = TeamApplication
        fields = [
            'id', 'team', 'team_name', 'applicant', 'event', 'tournament',
            'status', 'created_at', 'responded_at',
        ]


# --- Request payloads ---

class TeamCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    invited_member_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        default=list,
    )


class EventTeamCreateSerializer(TeamCreateSerializer):
    event = serializers.IntegerField(min_value=1)


class TournamentTeamCreateSerializer(TeamCreateSerializer):
    tournament = serializers.IntegerField(min_value=1)


class RespondSerializer(serializers.Serializer):
    accept = serializers.BooleanField()


class ApplySerializer(serializers.Serializer):
    event = serializers.IntegerField(min_value=1, required=False)
    tournament = serializers.IntegerField(min_value=1, required=False)

    def validate(self, attrs):
        if attrs.get('event') and attrs.get('tournament'):
            raise serializers.ValidationError("Provide either an event or a tournament, not both")
        return attrs


class InviteSerializer(serializers.Serializer):
    member_id = serializers.IntegerField(min_value=1)
    message = serializers.CharField(required=False, allow_blank=True, default='')
