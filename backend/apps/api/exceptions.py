from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from django.core.exceptions import (
    PermissionDenied as DjangoPermissionDenied,
    ValidationError as DjangoValidationError,
)
from django.http import Http404
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import (
    AuthenticationFailed,
    MethodNotAllowed,
    NotAuthenticated,
    NotFound,
    ParseError,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from apps.api.utils import error_response
from apps.common import get_logger

logger = get_logger(__name__).bind(component="api", layer="exception")

STATUS_CODE_DEFAULTS: Dict[int, Tuple[str, str]] = {
    status.HTTP_400_BAD_REQUEST: ("VALIDATION_ERROR", _("Validation failed")),
    status.HTTP_401_UNAUTHORIZED: ("UNAUTHORIZED", _("Authentication required")),
    status.HTTP_403_FORBIDDEN: (
        "FORBIDDEN",
        _("You do not have permission to perform this action"),
    ),
    status.HTTP_404_NOT_FOUND: ("NOT_FOUND", _("Resource not found")),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("METHOD_NOT_ALLOWED", _("Method not allowed")),
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: (
        "UNSUPPORTED_MEDIA_TYPE",
        _("Unsupported media type"),
    ),
    status.HTTP_500_INTERNAL_SERVER_ERROR: ("SERVER_ERROR", _("Something went wrong")),
}


class ApplicationError(Exception):
    """
    Base class for errors raised by services and translated by the API layer.

    Args:
        code: Machine readable error code.
        message: Human readable explanation of the error.
        status_code: Optional explicit HTTP status. If omitted, code mapping is used.
        details: Optional structured details for clients.
        hint: Optional hint for remediation.
    """

    default_code = "APPLICATION_ERROR"
    default_status: Optional[int] = None

    def __init__(
        self,
        code: Optional[str] = None,
        message: str = "",
        *,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status
        self.details = details
        self.hint = hint

    def to_response(self) -> Response:
        return error_response(
            self.code,
            self.message,
            self.details,
            http_status=self.status_code,
            hint=self.hint,
        )


class ResourceNotFound(ApplicationError):
    """The addressed record does not exist."""

    default_code = "NOT_FOUND"
    default_status = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, identifier: Any, message: Optional[str] = None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            message=message or f"{resource.capitalize()} not found",
            details={"resource": resource, "id": str(identifier)},
        )


class AssociationNotFound(ResourceNotFound):
    """A referenced record (e.g. a category id inside a product payload) does not exist."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            resource,
            identifier,
            message=f"Referenced {resource} not found",
        )


class ValidationFailed(ApplicationError):
    """Carries every field violation found for a request, keyed by field name."""

    default_code = "VALIDATION_ERROR"
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: Mapping[str, Iterable[str]], message: str = "Validation failed"):
        self.errors: Dict[str, List[str]] = {
            field: [str(msg) for msg in messages] for field, messages in errors.items()
        }
        super().__init__(message=message, details=self.errors)


class ReferentialConflict(ApplicationError):
    """Deletion blocked because other records still reference the target."""

    default_code = "INTEGRITY_VIOLATION"
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            message=f"{resource.capitalize()} is referenced by other records",
            details={"resource": resource, "id": str(identifier)},
            hint="Remove the dependent records before deleting.",
        )


def global_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """
    Central exception handler for DRF views returning structured JSON errors.
    """

    bound_logger = _bind_logger(context)

    if isinstance(exc, ApplicationError):
        bound_logger.info(
            "Handled application error",
            code=exc.code,
            status=exc.status_code,
        )
        return exc.to_response()

    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(_normalize_django_validation_error(exc))

    response = drf_exception_handler(exc, context)
    if response is not None:
        return _from_drf_exception(exc, response, bound_logger)

    bound_logger.exception("Unhandled exception bubbled to global handler")
    return error_response(
        "SERVER_ERROR",
        "Something went wrong",
        http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _bind_logger(context: Dict[str, Any]):
    log = logger
    view = context.get("view")
    request = context.get("request")
    if view:
        log = log.bind(view=type(view).__name__)
    if request is not None:
        log = log.bind(
            method=getattr(request, "method", None),
            path=getattr(request, "path", None),
        )
    return log


def _from_drf_exception(exc: Exception, response: Response, bound_logger) -> Response:
    status_code = response.status_code
    code, message, details = _normalize_payload(exc, response.data, status_code)
    headers = dict(response.headers) if getattr(response, "headers", None) else None
    if status_code >= 500:
        bound_logger.error("Converted server error", code=code, status=status_code)
    else:
        bound_logger.info("Converted API exception", code=code, status=status_code)
    return error_response(code, message, details, http_status=status_code, headers=headers)


def _normalize_django_validation_error(
    exc: DjangoValidationError,
) -> Union[Dict[str, Any], List[str]]:
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    return list(exc.messages)


def _normalize_payload(
    exc: Exception,
    payload: Any,
    status_code: int,
) -> Tuple[str, str, Optional[Any]]:
    if isinstance(exc, ValidationError):
        return "VALIDATION_ERROR", "Validation failed", payload
    if isinstance(exc, ParseError):
        return (
            "VALIDATION_ERROR",
            _extract_message(payload, "Malformed request", status_code),
            None,
        )
    if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
        return (
            "UNAUTHORIZED",
            _extract_message(payload, "Authentication required", status_code),
            None,
        )
    if isinstance(exc, (PermissionDenied, DjangoPermissionDenied)):
        return (
            "FORBIDDEN",
            _extract_message(
                payload, "You do not have permission to perform this action", status_code
            ),
            None,
        )
    if isinstance(exc, (NotFound, Http404)):
        return (
            "NOT_FOUND",
            _extract_message(payload, "Resource not found", status_code),
            None,
        )
    if isinstance(exc, MethodNotAllowed):
        return (
            "METHOD_NOT_ALLOWED",
            _extract_message(payload, "Method not allowed", status_code),
            None,
        )

    code, default_message = STATUS_CODE_DEFAULTS.get(
        status_code,
        (
            "SERVER_ERROR" if status_code >= 500 else "UNKNOWN_ERROR",
            "Something went wrong" if status_code >= 500 else "Request failed",
        ),
    )
    details = payload if status_code < 500 and isinstance(payload, (dict, list)) and payload else None
    return code, _extract_message(payload, str(default_message), status_code), details


def _extract_message(payload: Any, fallback: str, status_code: int) -> str:
    if status_code >= 500:
        return "Something went wrong"
    if isinstance(payload, str):
        return payload
    if isinstance(payload, dict):
        detail = payload.get("detail")
        if isinstance(detail, str):
            return detail
    if isinstance(payload, list) and payload and isinstance(payload[0], str):
        return payload[0]
    return fallback


__all__ = [
    "ApplicationError",
    "AssociationNotFound",
    "ReferentialConflict",
    "ResourceNotFound",
    "ValidationFailed",
    "global_exception_handler",
]
