# teams/registration.py
"""
Auto-registration core for teams.

A team moves through three observable states for its event or tournament:

    forming            fewer members than the required size, no registration
    full_unregistered  required size reached but the registration row is missing
    registered         registration row exists (terminal)

Registration happens exactly once, when the member count first equals the
required size. Two mechanisms keep it exactly-once under concurrent accepts:

1. The team row is locked with ``select_for_update`` before counting, so
   membership admission and registration insertion are serialized per team.
2. Unique constraints on (event, team) and (tournament, team). A constraint
   violation on insert is treated as "already registered".

All helpers that take a locked team must be called inside
``transaction.atomic()``.
"""
import logging

from django.db import IntegrityError, transaction

from core.constants import ACTIVITY_TEAM_REGISTERED
from core.results import ErrorCode, ServiceResult
from core.services import ActivityService
from events.models import EventRegistration
from tournaments.models import TournamentPoints, TournamentRegistration

from .models import Team, TeamMember

logger = logging.getLogger("cos.teams")

STATE_FORMING = "forming"
STATE_FULL_UNREGISTERED = "full_unregistered"
STATE_REGISTERED = "registered"


def lock_team(team_id) -> Team:
    """
    Fetch a team with its row locked until the surrounding transaction ends.
    """
    return Team.objects.select_for_update().select_related("event", "tournament").get(pk=team_id)


def member_count(team: Team) -> int:
    return TeamMember.objects.filter(team=team).count()


def is_registered(team: Team) -> bool:
    if team.is_tournament:
        return TournamentRegistration.objects.filter(tournament_id=team.tournament_id, team=team).exists()
    return EventRegistration.objects.filter(event_id=team.event_id, team=team).exists()


def registers_on_creation(team: Team) -> bool:
    """
    Teams that need no further acceptances before registering.

    Event teams formed for a tournament-linked event are registered as soon
    as they exist. Otherwise a team registers at creation only when the
    leader alone fills it.
    """
    if team.is_tournament:
        return team.tournament.team_size <= 1
    return team.event.is_tournament or team.event.team_size <= 1


def admit_member(team: Team, user) -> ServiceResult:
    """
    Insert a membership row for ``user``. ``team`` must have been fetched
    with :func:`lock_team` in the current transaction.
    """
    if TeamMember.objects.filter(team=team, member=user).exists():
        return ServiceResult.fail(ErrorCode.CONFLICT, "Already a member of this team")

    if member_count(team) >= team.required_size:
        return ServiceResult.fail(ErrorCode.CONFLICT, "Team is full")

    try:
        with transaction.atomic():
            membership = TeamMember.objects.create(team=team, member=user)
    except IntegrityError:
        return ServiceResult.fail(ErrorCode.CONFLICT, "Already a member of this team")

    logger.info(f"Member joined team: team={team.id}, member={user.id}")
    return ServiceResult.ok("Member added", data={"membership_id": membership.id})


def ensure_event_registration(team: Team) -> bool:
    """
    Insert the team's EventRegistration. Returns True when a row was created,
    False when the team was already registered.
    """
    if EventRegistration.objects.filter(event_id=team.event_id, team=team).exists():
        return False

    try:
        with transaction.atomic():
            EventRegistration.objects.create(
                event_id=team.event_id,
                team=team,
                registration_type=EventRegistration.TYPE_TEAM,
                status=EventRegistration.STATUS_REGISTERED,
            )
    except IntegrityError:
        logger.info(f"Event registration already present: team={team.id}, event={team.event_id}")
        return False

    return True


def ensure_tournament_registration(team: Team) -> bool:
    """
    Insert the team's TournamentRegistration together with its zeroed
    TournamentPoints row. Both rows commit or neither does.
    """
    if TournamentRegistration.objects.filter(tournament_id=team.tournament_id, team=team).exists():
        return False

    try:
        with transaction.atomic():
            TournamentRegistration.objects.create(
                tournament_id=team.tournament_id,
                team=team,
                status=TournamentRegistration.STATUS_REGISTERED,
            )
            # A repair run may already have initialized the points row
            TournamentPoints.objects.get_or_create(tournament_id=team.tournament_id, team=team)
    except IntegrityError:
        logger.info(f"Tournament registration already present: team={team.id}, tournament={team.tournament_id}")
        return False

    return True


def register_team(team: Team, actor=None) -> bool:
    """
    Register a locked team for its context regardless of member count.
    Used for teams that register on creation.
    """
    if team.is_tournament:
        created = ensure_tournament_registration(team)
    else:
        created = ensure_event_registration(team)

    if created:
        context = team.context
        logger.info(
            f"Team registered: team={team.id}, "
            f"{'tournament' if team.is_tournament else 'event'}={context.id}, "
            f"actor={getattr(actor, 'id', 'unknown')}"
        )
        ActivityService.log_activity_safely(
            actor=actor or team.leader,
            verb=ACTIVITY_TEAM_REGISTERED,
            target=team,
            metadata={
                "team_name": team.name,
                "context_type": "tournament" if team.is_tournament else "event",
                "context_id": context.id,
            },
        )
    return created


def auto_register_if_full(team_id, actor=None) -> bool:
    """
    Register the team if its member count has just reached the required size.

    Safe to call any number of times: at most one registration row is ever
    created per (team, event) or (team, tournament). Returns True only for
    the call that created it.
    """
    with transaction.atomic():
        team = lock_team(team_id)

        if not team.is_tournament and team.event.is_tournament:
            # Registered at creation
            return False

        count = member_count(team)
        required = team.required_size
        if count != required:
            logger.debug(f"Team not full: team={team.id}, members={count}, required={required}")
            return False

        return register_team(team, actor=actor)


def team_state(team: Team) -> str:
    if is_registered(team):
        return STATE_REGISTERED
    if member_count(team) >= team.required_size:
        return STATE_FULL_UNREGISTERED
    return STATE_FORMING
