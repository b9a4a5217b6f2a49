class ServiceError(Exception):
    """Base class for grading-engine errors."""


class ValidationError(ServiceError):
    """Raised when input is rejected before any state is mutated."""


class PermissionDeniedError(ServiceError):
    """Raised when the acting user may not perform the operation."""


class SessionStateError(ServiceError):
    """Raised when an exam session is not in the state an operation needs."""
