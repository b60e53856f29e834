"""Domain error taxonomy.

Every rejected operation maps to one of these. Each carries a stable
machine-checkable ``kind`` and the HTTP status the API answers with; the
global handler in ``microlearn.middleware.error_handler`` renders them as
``{"error": kind, "detail": message}``.
"""

from __future__ import annotations


class MicrolearnError(Exception):
    """Base class for all user-facing domain errors."""

    kind: str = "internal_fault"
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(MicrolearnError):
    kind = "unauthenticated"
    status_code = 401
    default_message = "Authentication required"


class Forbidden(MicrolearnError):
    kind = "forbidden"
    status_code = 403
    default_message = "Forbidden"


class ValidationError(MicrolearnError):
    kind = "validation_error"
    status_code = 422
    default_message = "Validation error"


class InvalidSignature(MicrolearnError):
    kind = "invalid_signature"
    status_code = 400
    default_message = "Invalid signature"


class NotFound(MicrolearnError):
    kind = "not_found"
    status_code = 404
    default_message = "Not found"


class InsufficientCredits(MicrolearnError):
    kind = "insufficient_credits"
    status_code = 402
    default_message = "Insufficient hint credits. Upgrade to Premium for more."


class HintUnavailable(MicrolearnError):
    kind = "hint_unavailable"
    status_code = 404
    default_message = "Hint not available for this content."


class NoSourceText(MicrolearnError):
    kind = "no_source_text"
    status_code = 400
    default_message = "No transcript or source text found for this content."


class AlreadyScored(MicrolearnError):
    kind = "already_scored"
    status_code = 409
    default_message = "This quiz attempt has already been scored."


class ExternalDependencyFailure(MicrolearnError):
    """An oracle, the queue or the link resolver is unreachable. Retryable."""

    kind = "external_dependency_failure"
    status_code = 503
    default_message = "A dependency is temporarily unavailable. Please retry."


class InternalFault(MicrolearnError):
    kind = "internal_fault"
    status_code = 500
    default_message = "Internal server error"
