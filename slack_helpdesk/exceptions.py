"""Exception hierarchy for the Slack helpdesk receiver."""

from __future__ import annotations

from typing import Iterable, Tuple


class HelpdeskError(Exception):
    """Base class for all errors raised by the receiver."""


class AuthError(HelpdeskError):
    """Raised when a request cannot be proven to come from Slack."""

    reason = "auth_failed"


class InvalidIdentityError(AuthError):
    reason = "invalid_identity"


class InvalidTimestampError(AuthError):
    reason = "invalid_timestamp"


class StaleRequestError(AuthError):
    reason = "stale_request"


class BodyReadError(AuthError):
    reason = "body_read_error"


class SignatureMismatchError(AuthError):
    reason = "signature_mismatch"


class ClassifyError(HelpdeskError):
    """Raised when a validated request body is not a usable Slack payload."""


class MissingFieldError(ClassifyError):
    """An interaction payload lacks one or more required keys."""

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields: Tuple[str, ...] = tuple(fields)
        message = ", ".join(f"Missing value for '{field}' key" for field in self.fields)
        super().__init__(message)


class MalformedJSONError(ClassifyError):
    pass


class UnparseablePayloadError(ClassifyError):
    pass


class RouteError(HelpdeskError):
    """Base class for route table errors."""


class DuplicateRouteError(RouteError):
    pass


class RouteNotFoundError(RouteError):
    pass


class HandlerError(HelpdeskError):
    """Wraps whatever a route handler raised."""


class ContextTypeError(HelpdeskError, TypeError):
    """A handler received a context of a different payload kind than it expects."""
