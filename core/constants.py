# core/constants.py

# --- Activity Verbs (Standard Registry) ---

# Team formation
ACTIVITY_TEAM_CREATED = "team.created"
ACTIVITY_TEAM_REGISTERED = "team.registered"
ACTIVITY_INVITATION_SENT = "invitation.sent"
ACTIVITY_INVITATION_ACCEPTED = "invitation.accepted"
ACTIVITY_INVITATION_DECLINED = "invitation.declined"
ACTIVITY_INVITATION_CANCELLED = "invitation.cancelled"
ACTIVITY_APPLICATION_SUBMITTED = "application.submitted"
ACTIVITY_APPLICATION_ACCEPTED = "application.accepted"
ACTIVITY_APPLICATION_REJECTED = "application.rejected"
ACTIVITY_APPLICATION_WITHDRAWN = "application.withdrawn"

# Event lifecycle
ACTIVITY_EVENT_REGISTERED = "event.registered"  # Individual registered for event
ACTIVITY_EVENT_STATUS_CHANGED = "event.status_changed"

# Tournaments
ACTIVITY_TOURNAMENT_STATUS_CHANGED = "tournament.status_changed"
ACTIVITY_TOURNAMENT_POINTS_UPDATED = "tournament.points_updated"
ACTIVITY_TOURNAMENT_RESET = "tournament.reset"
