# events/services.py
"""
Event registration services: individual sign-ups, tournament team sign-ups,
and the organizer's view of who is registered.
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, Q

from core.constants import ACTIVITY_EVENT_REGISTERED, ACTIVITY_EVENT_STATUS_CHANGED, ACTIVITY_TEAM_REGISTERED
from core.results import ErrorCode, ServiceResult
from core.services import ActivityService
from teams.models import Team, TeamInvitation, TeamMember
from teams.serializers import TeamInvitationSerializer, TeamSerializer
from tournaments.models import TournamentRegistration
from users.permissions import user_is_core

from . import state_machine
from .models import Event, EventRegistration
from .serializers import EventRegistrationSerializer, EventSerializer

logger = logging.getLogger("cos.events")


def update_event_status(event_id, new_status, actor):
    if not user_is_core(actor):
        return ServiceResult.fail(ErrorCode.FORBIDDEN, "Only core team members can change event status")

    event = Event.objects.filter(pk=event_id).first()
    if event is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Event not found")

    old_status = event.status
    ok, reason = state_machine.transition(event, new_status, actor=actor)
    if not ok:
        return ServiceResult.fail(ErrorCode.VALIDATION, reason)

    if old_status != new_status:
        ActivityService.log_activity_safely(
            actor=actor,
            verb=ACTIVITY_EVENT_STATUS_CHANGED,
            target=event,
            metadata={"from": old_status, "to": new_status},
        )
    return ServiceResult.ok(reason, data={"event_id": event.id, "status": event.status})


def register_for_individual_event(event_id, actor):
    """
    Register ``actor`` for an individual event before its deadline.
    The event row is locked so the participant cap holds under concurrency.
    """
    with transaction.atomic():
        event = Event.objects.select_for_update().filter(pk=event_id).first()
        if event is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Event not found")

        if event.type != Event.TYPE_INDIVIDUAL:
            return ServiceResult.fail(ErrorCode.VALIDATION, "Event is not individual")

        if event.status != Event.STATUS_REGISTRATION_OPEN:
            return ServiceResult.fail(ErrorCode.CONFLICT, "Registration is not open for this event")

        if event.registration_deadline_passed:
            return ServiceResult.fail(ErrorCode.CONFLICT, "Registration deadline passed")

        if EventRegistration.objects.filter(event=event, user=actor).exists():
            return ServiceResult.fail(ErrorCode.CONFLICT, "Already registered for this event")

        if event.max_participants and event.registrations.count() >= event.max_participants:
            logger.warning(f"Registration failed: event {event.id} is full ({event.max_participants})")
            return ServiceResult.fail(ErrorCode.CONFLICT, "Event is full")

        try:
            with transaction.atomic():
                registration = EventRegistration.objects.create(
                    event=event,
                    user=actor,
                    registration_type=EventRegistration.TYPE_INDIVIDUAL,
                    status=EventRegistration.STATUS_REGISTERED,
                )
        except IntegrityError:
            return ServiceResult.fail(ErrorCode.CONFLICT, "Already registered for this event")

    ActivityService.log_activity_safely(
        actor=actor,
        verb=ACTIVITY_EVENT_REGISTERED,
        target=event,
        metadata={"registration_id": registration.id},
    )
    logger.info(f"Individual registration: event={event.id}, user={actor.id}")
    return ServiceResult.ok("Registered for event", data={"registration_id": registration.id})


def register_existing_tournament_team(event_id, team_id, actor):
    """
    A member of a tournament team signs the whole team up for one of the
    tournament's events.
    """
    event = Event.objects.filter(pk=event_id).first()
    if event is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Event not found")

    if not event.is_tournament:
        return ServiceResult.fail(ErrorCode.VALIDATION, "Event is not a tournament event")

    if event.registration_deadline_passed:
        return ServiceResult.fail(ErrorCode.CONFLICT, "Registration deadline passed")

    team = Team.objects.filter(pk=team_id).first()
    if team is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Team not found")

    if not team.is_tournament or team.tournament_id != event.tournament_id:
        return ServiceResult.fail(ErrorCode.VALIDATION, "Team is not part of this event's tournament")

    if not TeamMember.objects.filter(team=team, member=actor).exists():
        return ServiceResult.fail(ErrorCode.FORBIDDEN, "You are not a member of this team")

    if EventRegistration.objects.filter(event=event, team=team).exists():
        return ServiceResult.fail(ErrorCode.CONFLICT, "Team is already registered for this event")

    try:
        with transaction.atomic():
            registration = EventRegistration.objects.create(
                event=event,
                team=team,
                registration_type=EventRegistration.TYPE_TEAM,
                status=EventRegistration.STATUS_REGISTERED,
            )
    except IntegrityError:
        return ServiceResult.fail(ErrorCode.CONFLICT, "Team is already registered for this event")

    ActivityService.log_activity_safely(
        actor=actor,
        verb=ACTIVITY_TEAM_REGISTERED,
        target=team,
        metadata={"context_type": "event", "context_id": event.id},
    )
    logger.info(f"Tournament team registered for event: event={event.id}, team={team.id}, actor={actor.id}")
    return ServiceResult.ok("Tournament team registered successfully", data={"registration_id": registration.id})


def _user_team_for_event(event, user):
    """The team ``user`` plays in for ``event``, tournament team first."""
    memberships = TeamMember.objects.filter(member=user).select_related("team")
    if event.is_tournament and event.tournament_id:
        membership = memberships.filter(team__is_tournament=True, team__tournament_id=event.tournament_id).first()
        if membership:
            return membership.team
    membership = memberships.filter(team__is_tournament=False, team__event=event).first()
    return membership.team if membership else None


def is_user_registered(event_id, actor):
    event = Event.objects.filter(pk=event_id).first()
    if event is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Event not found")

    team = _user_team_for_event(event, actor)
    registered = EventRegistration.objects.filter(
        Q(user=actor) | Q(team__members__member=actor),
        event=event,
    ).exists()

    return ServiceResult.ok(data={
        "registered": registered,
        "in_team": team is not None,
        "team_id": team.id if team else None,
    })


def get_your_registered_team(event_id, actor):
    event = Event.objects.filter(pk=event_id).first()
    if event is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Event not found")

    team = _user_team_for_event(event, actor)
    if team is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Team not found")

    registration = (
        EventRegistration.objects.select_related("team__leader")
        .prefetch_related("team__members__member")
        .filter(event=event, team=team)
        .first()
    )
    if registration is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Registration not found")

    return ServiceResult.ok(data=EventRegistrationSerializer(registration).data)


def get_event_registrations(event_id, actor):
    """
    Organizer overview of an event, partitioned into:

    - complete_teams: registered teams at full size
    - undersized_teams: registered teams now below the event's team size
    - incomplete_teams: teams still forming, with their pending invitations
    - individual_registrations
    - tournament_pending: for tournament events, teams registered for the
      tournament that have not signed up for this event yet
    """
    if not user_is_core(actor):
        return ServiceResult.fail(ErrorCode.FORBIDDEN, "Only core team members can view registrations")

    event = Event.objects.select_related("tournament").filter(pk=event_id).first()
    if event is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Event not found")

    registrations = list(
        EventRegistration.objects.filter(event=event)
        .select_related("user", "team__leader", "team__event", "team__tournament")
        .prefetch_related("team__members__member")
        .order_by("registered_at")
    )
    registered_team_ids = {r.team_id for r in registrations if r.team_id}

    complete_teams = []
    undersized_teams = []
    for registration in registrations:
        if registration.registration_type != EventRegistration.TYPE_TEAM:
            continue
        team = registration.team
        # Tournament teams are complete once the tournament accepted them
        if event.is_tournament or team.members.count() >= event.team_size:
            complete_teams.append(team)
        else:
            # Registered, then the event's team_size was raised
            undersized_teams.append(team)

    forming = (
        Team.objects.filter(event=event, is_tournament=False)
        .exclude(pk__in=registered_team_ids)
        .select_related("leader", "event")
        .prefetch_related("members__member")
        .annotate(
            member_total=Count("members", distinct=True),
            pending_total=Count(
                "invitations",
                filter=Q(invitations__status=TeamInvitation.STATUS_PENDING),
                distinct=True,
            ),
        )
        .order_by("created_at")
    )
    incomplete_teams = []
    for team in forming:
        data = TeamSerializer(team).data
        data["has_pending_invitations"] = team.pending_total > 0
        data["pending_invitations"] = TeamInvitationSerializer(
            team.invitations.filter(status=TeamInvitation.STATUS_PENDING).select_related("team", "inviter", "invitee"),
            many=True,
        ).data
        incomplete_teams.append(data)

    individual_registrations = [
        r for r in registrations if r.registration_type == EventRegistration.TYPE_INDIVIDUAL
    ]

    tournament_pending = []
    if event.is_tournament and event.tournament_id:
        tournament_team_ids = TournamentRegistration.objects.filter(
            tournament_id=event.tournament_id
        ).values("team_id")
        pending = (
            Team.objects.filter(pk__in=tournament_team_ids)
            .exclude(pk__in=registered_team_ids)
            .select_related("leader", "tournament")
            .prefetch_related("members__member")
            .order_by("name")
        )
        tournament_pending = TeamSerializer(pending, many=True).data

    return ServiceResult.ok(data={
        "event": EventSerializer(event).data,
        "complete_teams": TeamSerializer(complete_teams, many=True).data,
        "undersized_teams": TeamSerializer(undersized_teams, many=True).data,
        "incomplete_teams": incomplete_teams,
        "individual_registrations": EventRegistrationSerializer(individual_registrations, many=True).data,
        "tournament_pending": tournament_pending,
    })
