"""Map domain and store failures to the API error shape.

Every error body is {"error": <code>, "message": <user-safe text>}.
Internal details never leave the process; they are logged instead.
"""

import typing as t

import structlog
from rest_framework import status
from rest_framework.exceptions import ParseError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from eventreg.domain.errors import DomainError, ErrorCode, InternalError, InvalidRequestError
from eventreg.stores.errors import StoreError

logger = structlog.get_logger(__name__)

STATUS_BY_CODE = {
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.EVENT_FULL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DUPLICATE_REGISTRATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_EMAIL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INSUFFICIENT_CAPACITY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(error: DomainError) -> Response:
    body: dict[str, t.Any] = {"error": error.code.value, "message": error.message}
    if isinstance(error, InternalError) and error.outcome_unknown:
        body["outcomeUnknown"] = True
    return Response(body, status=STATUS_BY_CODE[error.code])


def exception_handler(exc: Exception, context: dict[str, t.Any]) -> Response | None:
    """DRF exception handler (REST_FRAMEWORK["EXCEPTION_HANDLER"])."""
    if isinstance(exc, DomainError):
        return error_response(exc)
    if isinstance(exc, ParseError):
        return error_response(InvalidRequestError("Invalid JSON in request body"))
    if isinstance(exc, StoreError):
        logger.exception("store_error", view=type(context.get("view")).__name__)
        return error_response(InternalError())
    response = drf_exception_handler(exc, context)
    if response is not None:
        # Framework rejections (405, 406, 415, ...) keep their status and headers
        detail = getattr(exc, "detail", None)
        response.data = {
            "error": ErrorCode.INVALID_REQUEST.value,
            "message": str(detail) if isinstance(detail, str) else "Invalid request",
        }
        return response

    logger.exception("INTERNAL_SERVER_ERROR", view=type(context.get("view")).__name__)
    return error_response(InternalError())
