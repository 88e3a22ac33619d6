"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class AuthenticationException(AppException):
    """Missing, invalid or expired session, or bad credentials."""

    def __init__(self, message: str = "Unauthorized: Please log in"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class ValidationException(AppException):
    """Missing or malformed request data."""

    def __init__(self, message: str = "Invalid request data"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ConflictException(AppException):
    """Request conflicts with the current state of a resource."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class SlotUnavailableException(ConflictException):
    """Slot is absent, already claimed, or the claim lost a race."""

    def __init__(self, message: str = "Time slot not available"):
        """Initialize with the public slot conflict message."""
        super().__init__(message)


class DoctorSlotMismatchException(ConflictException):
    """Slot belongs to a different doctor than the one requested."""

    def __init__(self, message: str = "Time slot does not belong to the selected doctor"):
        """Initialize with the public mismatch message."""
        super().__init__(message)


class SequenceExhaustedException(ConflictException):
    """A daily identifier counter has no numbers left in its fixed width."""

    def __init__(self, message: str = "Daily appointment capacity reached"):
        """Initialize with the public capacity message."""
        super().__init__(message)


class InvalidTransitionException(ConflictException):
    """Appointment status change not allowed from its current state."""

    def __init__(self, message: str = "Invalid status transition"):
        """Initialize with the public transition message."""
        super().__init__(message)


class RateLimitException(AppException):
    """Rate limit exceeded exception."""

    def __init__(self, message: str = "Rate limit exceeded"):
        """Initialize with 429 status code."""
        super().__init__(message, status_code=429)


class PersistenceException(AppException):
    """Storage failure; the cause is logged, never returned."""

    def __init__(self, message: str = "Internal server error"):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500)
