from rest_framework.permissions import BasePermission


def user_is_core(user) -> bool:
    """
    Core team members organize events and tournaments.
    Superusers are treated as core.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return bool(getattr(user, "is_core", False))


class IsCoreMember(BasePermission):
    """
    Organizer-only endpoints (registration overviews, tournament admin).
    """
    message = "Only core team members can perform this action."

    def has_permission(self, request, view):
        return user_is_core(request.user)
