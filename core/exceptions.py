from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("cos")


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into the same envelope service results use.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        detail = response.data.get("detail") if isinstance(response.data, dict) else None
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "error": str(detail) if detail else "Request failed.",
                "errors": response.data,
            },
            status=response.status_code,
        )

    # Unhandled exceptions -> 500
    view = context.get("view")
    logger.exception(f"Unhandled API exception in {view.__class__.__name__ if view else 'unknown view'}", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "error": "Internal server error.",
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
