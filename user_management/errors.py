"""
Domain exceptions and their stable error codes.

Every exception carries an ErrorCode and a list of human-readable messages so
the HTTP layer can render a uniform error body without inspecting the type.
"""

from enum import Enum
from typing import Any, List, Optional, Sequence


class ErrorCode(Enum):
    """Stable numeric codes returned to API clients."""

    RESOURCE_NOT_FOUND = (30000, "Cannot find resource with id %s")
    DUPLICATE_RESOURCE = (30001, "Record with unique value %s already exists in the system")
    INVALID_REQUEST = (30002, "Invalid value for field %s, rejected value: %s")
    SYSTEM_ERROR = (80000, "System error, we're unable to process your request at the moment")

    def __init__(self, code: int, message_template: str) -> None:
        self.code = code
        self.message_template = message_template

    def format_message(self, *args: Any) -> str:
        return self.message_template % args


class UserManagementError(Exception):
    """Base class for all errors raised by the service layer."""

    error_code: ErrorCode = ErrorCode.SYSTEM_ERROR
    http_status: int = 500

    def __init__(self, message: str, errors: Optional[Sequence[str]] = None) -> None:
        super().__init__(message)
        self.errors: List[str] = list(errors) if errors else [message]

    @property
    def code(self) -> int:
        return self.error_code.code


class ResourceNotFoundError(UserManagementError):
    error_code = ErrorCode.RESOURCE_NOT_FOUND
    http_status = 404

    def __init__(self, resource_id: Any) -> None:
        super().__init__(ErrorCode.RESOURCE_NOT_FOUND.format_message(resource_id))
        self.resource_id = resource_id


class DuplicateResourceError(UserManagementError):
    error_code = ErrorCode.DUPLICATE_RESOURCE
    http_status = 409

    def __init__(self, unique_value: str) -> None:
        super().__init__(ErrorCode.DUPLICATE_RESOURCE.format_message(unique_value))
        self.unique_value = unique_value


class InvalidRequestError(UserManagementError):
    """
    Semantic validation failure.

    Accepts either a single message or a list of messages, one per offending
    field or setting.
    """

    error_code = ErrorCode.INVALID_REQUEST
    http_status = 422

    def __init__(self, errors: str | Sequence[str]) -> None:
        if isinstance(errors, str):
            super().__init__(errors)
        else:
            super().__init__("Invalid request", errors)

    @classmethod
    def for_field(cls, field: str, rejected_value: Any) -> "InvalidRequestError":
        return cls(ErrorCode.INVALID_REQUEST.format_message(field, rejected_value))


class SystemFailureError(UserManagementError):
    """Unclassified failure. Only the generic message ever reaches the caller."""

    error_code = ErrorCode.SYSTEM_ERROR
    http_status = 500

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(ErrorCode.SYSTEM_ERROR.message_template)
        self.detail = detail
