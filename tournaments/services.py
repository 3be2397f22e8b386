# tournaments/services.py
"""
Tournament administration for core members: lifecycle, points table,
leaderboard, reset and points repair.
"""
import logging

from django.db import transaction
from django.db.models import F

from core.constants import (
    ACTIVITY_TOURNAMENT_POINTS_UPDATED,
    ACTIVITY_TOURNAMENT_RESET,
    ACTIVITY_TOURNAMENT_STATUS_CHANGED,
)
from core.results import ErrorCode, ServiceResult
from core.services import ActivityService
from users.permissions import user_is_core

from . import state_machine
from .models import Tournament, TournamentPoints, TournamentRegistration
from .serializers import TournamentPointsSerializer

logger = logging.getLogger("cos.tournaments")


def _core_only(actor):
    if not user_is_core(actor):
        return ServiceResult.fail(ErrorCode.FORBIDDEN, "Only core team members can manage tournaments")
    return None


def update_tournament_status(tournament_id, new_status, actor):
    denied = _core_only(actor)
    if denied is not None:
        return denied

    tournament = Tournament.objects.filter(pk=tournament_id).first()
    if tournament is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Tournament not found")

    old_status = tournament.status
    ok, reason = state_machine.transition(tournament, new_status, actor=actor)
    if not ok:
        return ServiceResult.fail(ErrorCode.VALIDATION, reason)

    if old_status != new_status:
        ActivityService.log_activity_safely(
            actor=actor,
            verb=ACTIVITY_TOURNAMENT_STATUS_CHANGED,
            target=tournament,
            metadata={"from": old_status, "to": new_status},
        )
    return ServiceResult.ok(reason, data={"tournament_id": tournament.id, "status": tournament.status})


def update_tournament_points(tournament_id, team_id, actor, points=0, wins=0, losses=0, draws=0, match_played=False):
    """
    Add ``points`` to a registered team. When a match result is recorded
    (``match_played`` or any of wins/losses/draws) the match counters move too.
    Increments are applied with F() expressions so concurrent updates add up.
    """
    denied = _core_only(actor)
    if denied is not None:
        return denied

    if min(wins, losses, draws) < 0:
        return ServiceResult.fail(ErrorCode.VALIDATION, "Match results cannot be negative")

    tournament = Tournament.objects.filter(pk=tournament_id).first()
    if tournament is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Tournament not found")

    if not TournamentRegistration.objects.filter(tournament=tournament, team_id=team_id).exists():
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Team is not registered for this tournament")

    changes = {"points": F("points") + points}
    if match_played or wins or losses or draws:
        changes.update(
            matches_played=F("matches_played") + 1,
            wins=F("wins") + wins,
            losses=F("losses") + losses,
            draws=F("draws") + draws,
        )

    with transaction.atomic():
        # Registered teams missing their points row get one here
        row, created = TournamentPoints.objects.get_or_create(tournament=tournament, team_id=team_id)
        if created:
            logger.warning(f"Initialized missing points row: tournament={tournament.id}, team={team_id}")
        TournamentPoints.objects.filter(pk=row.pk).update(**changes)
        row.refresh_from_db()

    ActivityService.log_activity_safely(
        actor=actor,
        verb=ACTIVITY_TOURNAMENT_POINTS_UPDATED,
        target=tournament,
        metadata={"team_id": int(team_id), "points": points, "wins": wins, "losses": losses, "draws": draws},
    )
    logger.info(f"Tournament points updated: tournament={tournament.id}, team={team_id}, points={points:+d}")
    return ServiceResult.ok(
        "Tournament points updated successfully",
        data=TournamentPointsSerializer(row).data,
    )


def get_tournament_leaderboard(tournament_id):
    tournament = Tournament.objects.filter(pk=tournament_id).first()
    if tournament is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Tournament not found")

    rows = (
        TournamentPoints.objects.filter(tournament=tournament)
        .select_related("team")
        .order_by("-points", "-wins", "team__name")
    )
    leaderboard = TournamentPointsSerializer(rows, many=True).data
    for rank, entry in enumerate(leaderboard, start=1):
        entry["rank"] = rank
    return ServiceResult.ok(data=leaderboard)


def reset_tournament(tournament_id, actor):
    """
    Drop every registration and points row and move the tournament back to
    upcoming. Teams themselves are kept.
    """
    denied = _core_only(actor)
    if denied is not None:
        return denied

    tournament = Tournament.objects.filter(pk=tournament_id).first()
    if tournament is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Tournament not found")

    with transaction.atomic():
        points_deleted, _ = TournamentPoints.objects.filter(tournament=tournament).delete()
        registrations_deleted, _ = TournamentRegistration.objects.filter(tournament=tournament).delete()
        previous_status = tournament.status
        tournament.status = Tournament.STATUS_UPCOMING
        tournament.save(update_fields=["status"])

    ActivityService.log_activity_safely(
        actor=actor,
        verb=ACTIVITY_TOURNAMENT_RESET,
        target=tournament,
        metadata={
            "previous_status": previous_status,
            "registrations_deleted": registrations_deleted,
            "points_deleted": points_deleted,
        },
    )
    logger.info(
        f"Tournament reset: tournament={tournament.id}, registrations={registrations_deleted}, "
        f"points={points_deleted}, actor={actor.id}"
    )
    return ServiceResult.ok("Tournament reset successfully")


def repair_tournament_points(tournament_id, actor):
    """
    Create the zeroed points row for any registered team that lacks one.
    Running it again creates nothing.
    """
    denied = _core_only(actor)
    if denied is not None:
        return denied

    tournament = Tournament.objects.filter(pk=tournament_id).first()
    if tournament is None:
        return ServiceResult.fail(ErrorCode.NOT_FOUND, "Tournament not found")

    missing = (
        TournamentRegistration.objects.filter(tournament=tournament)
        .exclude(team_id__in=TournamentPoints.objects.filter(tournament=tournament).values("team_id"))
        .values_list("team_id", flat=True)
    )
    created = 0
    for team_id in list(missing):
        _, was_created = TournamentPoints.objects.get_or_create(tournament=tournament, team_id=team_id)
        created += int(was_created)

    if created:
        logger.warning(f"Repaired tournament points: tournament={tournament.id}, rows_created={created}")
    return ServiceResult.ok(f"Initialized {created} missing points rows", data={"created": created})
