# teams/services.py
"""
Team formation operations.

Each function performs one user action and returns a ServiceResult. Writes
that belong to one logical step share a transaction; registration is
delegated to :mod:`teams.registration`.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from core.constants import (
    ACTIVITY_APPLICATION_ACCEPTED,
    ACTIVITY_APPLICATION_REJECTED,
    ACTIVITY_APPLICATION_SUBMITTED,
    ACTIVITY_APPLICATION_WITHDRAWN,
    ACTIVITY_INVITATION_ACCEPTED,
    ACTIVITY_INVITATION_CANCELLED,
    ACTIVITY_INVITATION_DECLINED,
    ACTIVITY_INVITATION_SENT,
    ACTIVITY_TEAM_CREATED,
)
from core.models import DomainActivity
from core.results import ErrorCode, ServiceResult
from core.services import ActivityService
from events.models import Event, EventRegistration
from tournaments.models import Tournament, TournamentRegistration
from users.serializers import UserSummarySerializer

from .models import Team, TeamApplication, TeamInvitation, TeamMember
from .registration import (
    admit_member,
    auto_register_if_full,
    is_registered,
    lock_team,
    member_count,
    register_team,
    registers_on_creation,
    team_state,
)
from .serializers import (
    TeamApplicationSerializer,
    TeamInvitationSerializer,
    TeamSerializer,
    TeamSummarySerializer,
)

logger = logging.getLogger("cos.teams")

User = get_user_model()


def _invitation_message(context, team, inviter):
    return f"You have been invited to participate in {context.title} from Team {team.name} by {inviter.display_name}"


def _scope_teams(event=None, tournament=None):
    if tournament is not None:
        return Team.objects.filter(tournament=tournament, is_tournament=True)
    return Team.objects.filter(event=event, is_tournament=False)


# -------------------------------------------------------------------
# CREATION
# -------------------------------------------------------------------

def create_team(actor, event_id, name, invited_member_ids=None, description=""):
    """
    Create a team for an event whose registration is open.
    The leader becomes the first member; every invitee gets a pending invitation.
    """
    event = Event.objects.filter(pk=event_id, status=Event.STATUS_REGISTRATION_OPEN).first()
    if event is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Event not found")

    if not event.accepts_teams:
        return ServiceResult.fail(ErrorCode.VALIDATION, "This event does not accept teams")

    return _create_team(
        actor,
        name,
        invited_member_ids,
        description,
        event=event,
        duplicate_message="A team with this name already exists for the selected event. Please choose a different name.",
    )


def create_tournament_team(actor, tournament_id, name, invited_member_ids=None, description=""):
    tournament = Tournament.objects.filter(pk=tournament_id).first()
    if tournament is None or not tournament.accepts_teams:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Tournament not found or registration closed")

    return _create_team(
        actor,
        name,
        invited_member_ids,
        description,
        tournament=tournament,
        duplicate_message="A team with this name already exists. Please choose a different name.",
    )


def _create_team(actor, name, invited_member_ids, description, event=None, tournament=None, duplicate_message=""):
    context = tournament if tournament is not None else event
    name = (name or "").strip()
    invited_ids = list(invited_member_ids or [])

    if not name:
        return ServiceResult.fail(ErrorCode.VALIDATION, "Team name is required")

    # Room for the leader is reserved
    if len(invited_ids) > context.team_size - 1:
        return ServiceResult.fail(ErrorCode.VALIDATION, "Too many members for team size")

    if len(set(invited_ids)) != len(invited_ids):
        return ServiceResult.fail(ErrorCode.VALIDATION, "A member can only be invited once")

    if actor.id in invited_ids:
        return ServiceResult.fail(ErrorCode.VALIDATION, "You cannot invite yourself")

    invitees = list(User.objects.filter(pk__in=invited_ids))
    if len(invitees) != len(invited_ids):
        return ServiceResult.fail(ErrorCode.VALIDATION, "One or more invited members do not exist")

    with transaction.atomic():
        try:
            with transaction.atomic():
                team = Team.objects.create(
                    name=name,
                    description=description or "",
                    leader=actor,
                    is_tournament=tournament is not None,
                    event=event,
                    tournament=tournament,
                )
        except IntegrityError:
            logger.info(f"Duplicate team name rejected: name={name!r}, context={context.id}")
            return ServiceResult.fail(ErrorCode.DUPLICATE_NAME, duplicate_message)

        TeamMember.objects.create(team=team, member=actor)

        message = _invitation_message(context, team, actor)
        TeamInvitation.objects.bulk_create([
            TeamInvitation(
                team=team,
                inviter=actor,
                invitee=invitee,
                event=event,
                tournament=tournament,
                message=message,
            )
            for invitee in invitees
        ])

        registered = False
        if registers_on_creation(team):
            registered = register_team(lock_team(team.id), actor=actor)

        ActivityService.log_activity_safely(
            actor=actor,
            verb=ACTIVITY_TEAM_CREATED,
            target=team,
            metadata={
                "team_name": team.name,
                "context_type": "tournament" if team.is_tournament else "event",
                "context_id": context.id,
                "invited": [u.id for u in invitees],
            },
        )

    logger.info(
        f"Team created: team={team.id}, leader={actor.id}, "
        f"invitations={len(invitees)}, registered={registered}"
    )
    return ServiceResult.ok(
        "Team created and invitations sent",
        data={"team_id": team.id, "registered": registered},
    )


# -------------------------------------------------------------------
# INVITATIONS
# -------------------------------------------------------------------

def respond_to_invitation(invitation_id, accept, actor):
    """
    Accept or decline an invitation addressed to ``actor``.

    Accepting admits the member and registers the team if this acceptance
    fills it. The status change, the membership and the registration commit
    together.
    """
    with transaction.atomic():
        invitation = (
            TeamInvitation.objects.select_related("team")
            .filter(pk=invitation_id, invitee=actor)
            .first()
        )
        if invitation is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Invitation not found or not authorized")

        if invitation.status != TeamInvitation.STATUS_PENDING:
            return ServiceResult.fail(ErrorCode.CONFLICT, "Invitation has already been responded to")

        now = timezone.now()
        pending = TeamInvitation.objects.filter(pk=invitation.pk, status=TeamInvitation.STATUS_PENDING)

        if invitation.is_expired:
            pending.update(status=TeamInvitation.STATUS_EXPIRED)
            return ServiceResult.fail(ErrorCode.CONFLICT, "Invitation has expired")

        new_status = TeamInvitation.STATUS_ACCEPTED if accept else TeamInvitation.STATUS_DECLINED
        if not pending.update(status=new_status, responded_at=now):
            return ServiceResult.fail(ErrorCode.CONFLICT, "Invitation has already been responded to")

        registered = False
        if accept:
            admitted = admit_member(lock_team(invitation.team_id), actor)
            if not admitted:
                transaction.set_rollback(True)
                return admitted
            registered = auto_register_if_full(invitation.team_id, actor=actor)

        ActivityService.log_activity_safely(
            actor=actor,
            verb=ACTIVITY_INVITATION_ACCEPTED if accept else ACTIVITY_INVITATION_DECLINED,
            target=invitation.team,
            visibility=DomainActivity.VISIBILITY_PRIVATE,
            metadata={"invitation_id": invitation.id},
        )

    logger.info(f"Invitation {new_status}: invitation={invitation.id}, team={invitation.team_id}, invitee={actor.id}")
    return ServiceResult.ok(
        f"Invitation {new_status}",
        data={"team_id": invitation.team_id, "registered": registered},
    )


def send_invitation(team_id, member_id, actor, message=""):
    """Leader invites one more member to a team that still has room."""
    with transaction.atomic():
        if not Team.objects.filter(pk=team_id).exists():
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Team not found")
        team = lock_team(team_id)

        if team.leader_id != actor.id:
            return ServiceResult.fail(ErrorCode.FORBIDDEN, "Not authorized")

        invitee = User.objects.filter(pk=member_id).first()
        if invitee is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")

        if TeamMember.objects.filter(team=team, member=invitee).exists():
            return ServiceResult.fail(ErrorCode.CONFLICT, "Member is already on this team")

        if member_count(team) >= team.required_size:
            return ServiceResult.fail(ErrorCode.CONFLICT, "Team is full")

        has_pending = TeamInvitation.objects.filter(
            team=team,
            invitee=invitee,
            status=TeamInvitation.STATUS_PENDING,
            expires_at__gt=timezone.now(),
        ).exists()
        if has_pending:
            return ServiceResult.fail(ErrorCode.CONFLICT, "Invitation already pending for this member")

        invitation = TeamInvitation.objects.create(
            team=team,
            inviter=actor,
            invitee=invitee,
            event=team.event,
            tournament=team.tournament,
            message=message or _invitation_message(team.context, team, actor),
        )

        ActivityService.log_activity_safely(
            actor=actor,
            verb=ACTIVITY_INVITATION_SENT,
            target=team,
            visibility=DomainActivity.VISIBILITY_PRIVATE,
            metadata={"invitation_id": invitation.id, "invitee_id": invitee.id},
        )

    logger.info(f"Invitation sent: team={team.id}, invitee={invitee.id}")
    return ServiceResult.ok("Invitation sent successfully", data={"invitation_id": invitation.id})


def cancel_invitation(invitation_id, actor):
    invitation = TeamInvitation.objects.filter(pk=invitation_id).first()
    if invitation is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Invitation not found")

    if invitation.inviter_id != actor.id:
        return ServiceResult.fail(ErrorCode.FORBIDDEN, "Not authorized")

    updated = TeamInvitation.objects.filter(
        pk=invitation.pk,
        status=TeamInvitation.STATUS_PENDING,
    ).update(status=TeamInvitation.STATUS_CANCELLED, responded_at=timezone.now())
    if not updated:
        return ServiceResult.fail(ErrorCode.CONFLICT, "Can only cancel pending invitations")

    ActivityService.log_activity_safely(
        actor=actor,
        verb=ACTIVITY_INVITATION_CANCELLED,
        target=invitation.team,
        visibility=DomainActivity.VISIBILITY_PRIVATE,
        metadata={"invitation_id": invitation.id},
    )
    logger.info(f"Invitation cancelled: invitation={invitation.id}, team={invitation.team_id}")
    return ServiceResult.ok("Invitation cancelled")


def reinvite_member(team_id, member_id, actor):
    """
    Replace a declined, expired or cancelled invitation with a fresh one
    that expires after TEAM_REINVITE_EXPIRY_HOURS.
    """
    with transaction.atomic():
        if not Team.objects.filter(pk=team_id).exists():
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Team not found")
        team = lock_team(team_id)

        if team.leader_id != actor.id:
            return ServiceResult.fail(ErrorCode.FORBIDDEN, "Not authorized")

        invitee = User.objects.filter(pk=member_id).first()
        if invitee is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")

        if TeamMember.objects.filter(team=team, member=invitee).exists():
            return ServiceResult.fail(ErrorCode.CONFLICT, "Member is already on this team")

        if member_count(team) >= team.required_size:
            return ServiceResult.fail(ErrorCode.CONFLICT, "Team is full")

        now = timezone.now()
        previous = TeamInvitation.objects.filter(team=team, invitee=invitee)
        previous.filter(status=TeamInvitation.STATUS_PENDING, expires_at__lte=now).update(
            status=TeamInvitation.STATUS_EXPIRED
        )
        if previous.filter(status=TeamInvitation.STATUS_PENDING).exists():
            return ServiceResult.fail(ErrorCode.CONFLICT, "Invitation already pending for this member")

        previous.delete()
        invitation = TeamInvitation.objects.create(
            team=team,
            inviter=actor,
            invitee=invitee,
            event=team.event,
            tournament=team.tournament,
            message=f"New invitation to join team {team.name} for {team.context.title}",
            expires_at=now + timedelta(hours=settings.TEAM_REINVITE_EXPIRY_HOURS),
        )

        ActivityService.log_activity_safely(
            actor=actor,
            verb=ACTIVITY_INVITATION_SENT,
            target=team,
            visibility=DomainActivity.VISIBILITY_PRIVATE,
            metadata={"invitation_id": invitation.id, "invitee_id": invitee.id, "reinvite": True},
        )

    logger.info(f"Member re-invited: team={team.id}, invitee={invitee.id}")
    return ServiceResult.ok("Invitation sent", data={"invitation_id": invitation.id})


def get_team_invitation_status(team_id, actor):
    team = Team.objects.filter(pk=team_id).first()
    if team is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Team not found")
    if team.leader_id != actor.id:
        return ServiceResult.fail(ErrorCode.FORBIDDEN, "Not authorized")

    invitations = team.invitations.select_related("team", "inviter", "invitee")
    return ServiceResult.ok(data=TeamInvitationSerializer(invitations, many=True).data)


def list_my_invitations(actor, status=None):
    invitations = TeamInvitation.objects.filter(invitee=actor).select_related("team", "inviter", "invitee")
    if status:
        invitations = invitations.filter(status=status)
    return ServiceResult.ok(data=TeamInvitationSerializer(invitations, many=True).data)


# -------------------------------------------------------------------
# APPLICATIONS
# -------------------------------------------------------------------

def apply_to_team(team_id, actor, event_id=None, tournament_id=None):
    """
    Ask to join a team that is still forming.

    The duplicate-application check is a read before the insert and has no
    database constraint behind it.
    """
    team = Team.objects.select_related("event", "tournament").filter(pk=team_id).first()
    if team is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Team not found")

    if event_id is not None and (team.is_tournament or team.event_id != int(event_id)):
        return ServiceResult.fail(ErrorCode.VALIDATION, "Team does not belong to this event")
    if tournament_id is not None and (not team.is_tournament or team.tournament_id != int(tournament_id)):
        return ServiceResult.fail(ErrorCode.VALIDATION, "Team does not belong to this tournament")

    if is_registered(team):
        return ServiceResult.fail(ErrorCode.CONFLICT, "Team already registered")

    if TeamMember.objects.filter(team=team, member=actor).exists():
        return ServiceResult.fail(ErrorCode.CONFLICT, "You are already a member of this team")

    already_applied = TeamApplication.objects.filter(
        team=team,
        applicant=actor,
        status=TeamApplication.STATUS_PENDING,
    ).exists()
    if already_applied:
        return ServiceResult.fail(ErrorCode.CONFLICT, "You have already applied to this team")

    application = TeamApplication.objects.create(
        team=team,
        applicant=actor,
        event=team.event,
        tournament=team.tournament,
    )

    ActivityService.log_activity_safely(
        actor=actor,
        verb=ACTIVITY_APPLICATION_SUBMITTED,
        target=team,
        visibility=DomainActivity.VISIBILITY_PRIVATE,
        metadata={"application_id": application.id},
    )
    logger.info(f"Application submitted: application={application.id}, team={team.id}, applicant={actor.id}")
    return ServiceResult.ok("Application submitted", data={"application_id": application.id})


def respond_to_application(application_id, accept, actor):
    """
    Team leader accepts or rejects a pending application. Acceptance admits
    the applicant and may complete the team's registration.
    """
    with transaction.atomic():
        application = (
            TeamApplication.objects.select_related("team", "applicant")
            .filter(pk=application_id, team__leader=actor)
            .first()
        )
        if application is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Application not found or not authorized")

        new_status = TeamApplication.STATUS_ACCEPTED if accept else TeamApplication.STATUS_REJECTED
        updated = TeamApplication.objects.filter(
            pk=application.pk,
            status=TeamApplication.STATUS_PENDING,
        ).update(status=new_status, responded_at=timezone.now())
        if not updated:
            return ServiceResult.fail(ErrorCode.CONFLICT, "Application has already been responded to")

        registered = False
        if accept:
            admitted = admit_member(lock_team(application.team_id), application.applicant)
            if not admitted:
                transaction.set_rollback(True)
                return admitted
            registered = auto_register_if_full(application.team_id, actor=actor)

        ActivityService.log_activity_safely(
            actor=actor,
            verb=ACTIVITY_APPLICATION_ACCEPTED if accept else ACTIVITY_APPLICATION_REJECTED,
            target=application.team,
            visibility=DomainActivity.VISIBILITY_PRIVATE,
            metadata={"application_id": application.id, "applicant_id": application.applicant_id},
        )

    logger.info(f"Application {new_status}: application={application.id}, team={application.team_id}")
    return ServiceResult.ok(
        f"Application {new_status}",
        data={"team_id": application.team_id, "registered": registered},
    )


def withdraw_application(application_id, actor):
    application = TeamApplication.objects.filter(pk=application_id).first()
    if application is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Application not found")

    if application.applicant_id != actor.id:
        return ServiceResult.fail(ErrorCode.FORBIDDEN, "Not authorized")

    deleted, _ = TeamApplication.objects.filter(
        pk=application.pk,
        status=TeamApplication.STATUS_PENDING,
    ).delete()
    if not deleted:
        return ServiceResult.fail(ErrorCode.CONFLICT, "Can only withdraw pending applications")

    ActivityService.log_activity_safely(
        actor=actor,
        verb=ACTIVITY_APPLICATION_WITHDRAWN,
        target=application.team,
        visibility=DomainActivity.VISIBILITY_PRIVATE,
        metadata={"application_id": application_id},
    )
    return ServiceResult.ok("Application withdrawn")


def list_my_applications(actor, event_id=None, tournament_id=None):
    applications = TeamApplication.objects.filter(applicant=actor).select_related("team", "applicant")
    if event_id:
        applications = applications.filter(event_id=event_id)
    if tournament_id:
        applications = applications.filter(tournament_id=tournament_id)
    return ServiceResult.ok(data=TeamApplicationSerializer(applications, many=True).data)


def list_team_applications(actor, event_id=None, tournament_id=None):
    """Pending applications for the teams ``actor`` leads."""
    applications = TeamApplication.objects.filter(
        team__leader=actor,
        status=TeamApplication.STATUS_PENDING,
    ).select_related("team", "applicant")
    if event_id:
        applications = applications.filter(event_id=event_id)
    if tournament_id:
        applications = applications.filter(tournament_id=tournament_id)
    return ServiceResult.ok(data=TeamApplicationSerializer(applications, many=True).data)


# -------------------------------------------------------------------
# QUERIES
# -------------------------------------------------------------------

def get_teams_needing_members(actor, event_id=None, tournament_id=None):
    """
    Teams in an event or tournament that still have open slots.

    Advisory only: capacity is enforced again when a member is admitted.
    """
    if event_id is not None:
        event = Event.objects.filter(pk=event_id).first()
        if event is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Event not found")
        teams = _scope_teams(event=event)
        required = event.team_size
    elif tournament_id is not None:
        tournament = Tournament.objects.filter(pk=tournament_id).first()
        if tournament is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Tournament not found")
        teams = _scope_teams(tournament=tournament)
        required = tournament.team_size
    else:
        return ServiceResult.fail(ErrorCode.VALIDATION, "An event or tournament is required")

    if teams.filter(members__member=actor).exists():
        return ServiceResult.ok("User already in a team", data={"user_in_team": True, "teams": []})

    needing = (
        teams.annotate(member_total=Count("members", distinct=True))
        .filter(member_total__lt=required)
        .select_related("leader")
        .prefetch_related("members__member")
        .order_by("created_at")
    )
    return ServiceResult.ok(data={
        "user_in_team": False,
        "teams": TeamSerializer(needing, many=True).data,
    })


def get_my_teams(actor):
    """Teams led by ``actor`` with their member counts."""
    teams = (
        Team.objects.filter(leader=actor)
        .select_related("event", "tournament")
        .annotate(member_total=Count("members", distinct=True))
    )
    return ServiceResult.ok(data=TeamSummarySerializer(teams, many=True).data)


def get_available_members(team_id, actor):
    """
    Members the leader can still invite: not on the team, not already
    registered in the team's event or tournament, no pending invitation,
    and not organizers.
    """
    team = Team.objects.select_related("event", "tournament").filter(pk=team_id).first()
    if team is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Team not found")
    if team.leader_id != actor.id:
        return ServiceResult.fail(ErrorCode.FORBIDDEN, "Not authorized")

    if team.is_tournament:
        registered_teams = TournamentRegistration.objects.filter(tournament_id=team.tournament_id).values("team_id")
        registered = Q(team_memberships__team__in=registered_teams)
    else:
        registered_teams = EventRegistration.objects.filter(
            event_id=team.event_id, team__isnull=False
        ).values("team_id")
        registered = Q(team_memberships__team__in=registered_teams) | Q(event_registrations__event_id=team.event_id)

    pending_invitees = TeamInvitation.objects.filter(
        team=team,
        status=TeamInvitation.STATUS_PENDING,
    ).values("invitee_id")

    candidates = (
        User.objects.filter(is_active=True)
        .exclude(role=User.ROLE_CORE)
        .exclude(pk=actor.pk)
        .exclude(team_memberships__team=team)
        .exclude(pk__in=pending_invitees)
        .exclude(pk__in=User.objects.filter(registered).values("pk"))
        .order_by("full_name", "username")
        .distinct()
    )

    return ServiceResult.ok(data=UserSummarySerializer(candidates, many=True).data)


def get_team(team_id):
    team = (
        Team.objects.select_related("leader", "event", "tournament")
        .prefetch_related("members__member")
        .filter(pk=team_id)
        .first()
    )
    if team is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Team not found")

    data = TeamSerializer(team).data
    data["state"] = team_state(team)
    return ServiceResult.ok(data=data)
