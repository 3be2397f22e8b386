# tournaments/state_machine.py
"""
Tournament lifecycle:
upcoming → registration_open → ongoing → completed

Resetting a tournament (see services.reset_tournament) is the only way
back to upcoming from a later state.
"""
from typing import Tuple
import logging

from .models import Tournament

logger = logging.getLogger('cos.tournaments')


VALID_TRANSITIONS = {
    Tournament.STATUS_UPCOMING: [Tournament.STATUS_REGISTRATION_OPEN],
    Tournament.STATUS_REGISTRATION_OPEN: [Tournament.STATUS_ONGOING, Tournament.STATUS_UPCOMING],
    Tournament.STATUS_ONGOING: [Tournament.STATUS_COMPLETED],
    Tournament.STATUS_COMPLETED: [],
}


def can_transition(tournament: Tournament, new_status: str) -> Tuple[bool, str]:
    if new_status == tournament.status:
        return True, "Same status"

    if new_status not in dict(Tournament.STATUS_CHOICES):
        return False, f"Invalid status: {new_status}"

    if new_status not in VALID_TRANSITIONS.get(tournament.status, []):
        return False, f"Cannot transition from '{tournament.status}' to '{new_status}'"

    return True, ""


def transition(tournament: Tournament, new_status: str, actor=None) -> Tuple[bool, str]:
    can, reason = can_transition(tournament, new_status)

    if not can:
        logger.warning(
            f"Invalid state transition attempted: tournament={tournament.id}, "
            f"from={tournament.status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}. "
            f"Reason: {reason}"
        )
        return False, reason

    old_status = tournament.status
    tournament.status = new_status
    tournament.save(update_fields=['status'])

    logger.info(
        f"Tournament state transition: tournament={tournament.id}, "
        f"from={old_status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}"
    )
    return True, f"Transitioned from '{old_status}' to '{new_status}'"
