import logging

from django.contrib.contenttypes.models import ContentType
from django.db import DatabaseError, transaction

from .models import DomainActivity

logger = logging.getLogger("cos")


class ActivityService:
    @staticmethod
    def log_activity(actor, verb, target, visibility=DomainActivity.VISIBILITY_PUBLIC, metadata=None):
        """
        Logs a domain activity (immutable record).
        """
        if metadata is None:
            metadata = {}

        return DomainActivity.objects.create(
            actor=actor,
            verb=verb,
            content_type=ContentType.objects.get_for_model(target),
            object_id=target.pk,
            visibility=visibility,
            metadata=metadata,
        )

    @staticmethod
    def log_activity_safely(actor, verb, target, **kwargs):
        """
        Best-effort variant for audit writes that must never fail the
        surrounding operation. Runs in its own savepoint so a failed insert
        does not poison an enclosing transaction.
        """
        try:
            with transaction.atomic():
                return ActivityService.log_activity(actor, verb, target, **kwargs)
        except DatabaseError as e:
            logger.warning(f"Failed to log activity {verb} for {target!r}: {e}")
            return None
