class DomainError(Exception):
    """Base exception for business rule violations.

    `code` is the stable identifier sent to callers; the message is shown verbatim.
    """

    code = "DomainError"


class ValidationError(DomainError):
    """Raised when input data is malformed or violates a caller-fixable rule."""

    code = "Validation"


class TimestampOutOfBoundsError(ValidationError):
    """Raised when a supplied scan timestamp is too far from server time."""

    code = "TimestampOutOfBounds"


class AuthorizationError(DomainError):
    """Raised when the caller may not perform an action."""

    code = "Forbidden"


class NotFoundError(DomainError):
    """Raised when a slot, override, enrollment or student does not exist."""

    code = "NotFound"


class DuplicateEnrollmentMissing(NotFoundError):
    """Raised when the scanned student is not enrolled in the slot's subject."""

    code = "DuplicateEnrollmentMissing"


class ConflictError(DomainError):
    """Raised when the request lost a race or was based on a stale view."""

    code = "Conflict"


class AlreadyCompleteError(ConflictError):
    """Raised on a third scan for a day that already has time-in and time-out."""

    code = "AlreadyComplete"


class BusinessRuleError(DomainError):
    """Raised when a scan is well-formed but not admissible right now."""

    code = "BusinessRule"


class NoActiveSessionError(BusinessRuleError):
    code = "NoActiveSession"


class SessionCancelledError(BusinessRuleError):
    code = "SessionCancelled"


class OutsideWindowError(BusinessRuleError):
    code = "OutsideWindow"


class AudienceMismatchError(BusinessRuleError):
    code = "AudienceMismatch"
