# events/state_machine.py
"""
Event State Machine.

Enforces valid state transitions for the event lifecycle:
upcoming → registration_open → ongoing → completed
   └────────────┴──────────────────┴→ cancelled

Registration can be paused by moving back to upcoming.
Any transition not in VALID_TRANSITIONS is rejected.
"""
from typing import Tuple
import logging

from .models import Event

logger = logging.getLogger('cos.events')


# Valid state transitions: from_status -> list of allowed to_statuses
VALID_TRANSITIONS = {
    Event.STATUS_UPCOMING: [Event.STATUS_REGISTRATION_OPEN, Event.STATUS_CANCELLED],
    Event.STATUS_REGISTRATION_OPEN: [Event.STATUS_ONGOING, Event.STATUS_UPCOMING, Event.STATUS_CANCELLED],
    Event.STATUS_ONGOING: [Event.STATUS_COMPLETED, Event.STATUS_CANCELLED],
    Event.STATUS_COMPLETED: [],
    Event.STATUS_CANCELLED: [],
}


def can_transition(event: Event, new_status: str) -> Tuple[bool, str]:
    """
    Check if an event can transition to a new status.

    Returns (can_transition: bool, reason: str)
    """
    current_status = event.status

    if new_status == current_status:
        return True, "Same status"

    if new_status not in dict(Event.STATUS_CHOICES):
        return False, f"Invalid status: {new_status}"

    allowed = VALID_TRANSITIONS.get(current_status, [])

    if new_status not in allowed:
        return False, f"Cannot transition from '{current_status}' to '{new_status}'"

    return True, ""


def transition(event: Event, new_status: str, actor=None, save: bool = True) -> Tuple[bool, str]:
    """
    Attempt to transition an event to a new status.

    Args:
        event: The event to transition
        new_status: The target status
        actor: The user performing the action (for logging)
        save: Whether to save the event after transitioning

    Returns (success: bool, message: str)
    """
    can, reason = can_transition(event, new_status)

    if not can:
        logger.warning(
            f"Invalid state transition attempted: event={event.id}, "
            f"from={event.status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}. "
            f"Reason: {reason}"
        )
        return False, reason

    old_status = event.status
    event.status = new_status

    if save:
        event.save(update_fields=['status'])

    logger.info(
        f"Event state transition: event={event.id}, "
        f"from={old_status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}"
    )

    return True, f"Transitioned from '{old_status}' to '{new_status}'"


def get_allowed_transitions(event: Event) -> list:
    return VALID_TRANSITIONS.get(event.status, [])


def is_terminal_status(status: str) -> bool:
    """Completed and cancelled events accept no further transitions."""
    return len(VALID_TRANSITIONS.get(status, [])) == 0
