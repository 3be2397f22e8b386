from rest_framework import status
from rest_framework.response import Response

from .results import ServiceResult


def api_error(message: str, status_code=status.HTTP_400_BAD_REQUEST, code: str = None):
    """
    Small helper to standardize error responses across the apps.
    Always returns: {"success": false, "error": "<message>"} with the given status code.
    """
    payload = {"success": False, "error": message}
    if code:
        payload["code"] = code
    return Response(payload, status=status_code)


def result_response(result: ServiceResult, success_status=status.HTTP_200_OK):
    """
    Translate a ServiceResult into the API envelope.
    """
    if not result.success:
        return api_error(result.message, result.http_status, code=result.error_code)

    payload = {"success": True, "message": result.message}
    if result.data is not None:
        payload["data"] = result.data
    return Response(payload, status=success_status)
