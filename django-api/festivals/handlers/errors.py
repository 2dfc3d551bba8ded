"""Mapping from domain errors to HTTP responses.

Installed as REST_FRAMEWORK["EXCEPTION_HANDLER"]. Internal details never
reach the response body.
"""

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from festivals.domain.errors import DomainError, ErrorCode

STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.AUTHENTICATION_FAILED: status.HTTP_401_UNAUTHORIZED,
}


def error_body(code: str, message: str, **extra) -> dict:
    return {"error": {"code": code, "message": message, **extra}}


def domain_error_response(error: DomainError) -> Response:
    return Response(
        error_body(error.code.value, error.message, **error.details),
        status=STATUS_BY_CODE[error.code],
    )


def exception_handler(exc, context):
    if isinstance(exc, DomainError):
        return domain_error_response(exc)

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        response.data = error_body(
            ErrorCode.VALIDATION_FAILED.value, "Invalid request payload", fields=exc.detail
        )
    elif isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        response.data = error_body(ErrorCode.AUTHENTICATION_FAILED.value, str(exc.detail))
    elif isinstance(exc, exceptions.PermissionDenied):
        response.data = error_body(ErrorCode.FORBIDDEN.value, str(exc.detail))
    elif isinstance(exc, exceptions.NotFound):
        response.data = error_body(ErrorCode.NOT_FOUND.value, str(exc.detail))
    else:
        response.data = error_body(exc.default_code.upper(), str(exc.detail))
    return response
