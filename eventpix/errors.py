"""Domain errors raised by the services and storage backends."""


class EventPixError(Exception):
    """Base exception for service errors."""

    pass


class ValidationError(EventPixError):
    """Raised when a request is missing a field or carries an invalid value."""

    pass


class NotFound(EventPixError):
    """Raised when an event does not exist."""

    pass


class Expired(EventPixError):
    """Raised when an event is past its expiry time."""

    def __init__(self, message: str, expires_at=None):
        super().__init__(message)
        self.expires_at = expires_at


class Conflict(EventPixError):
    """Raised when a record with the same key already exists."""

    def __init__(self, message: str, table: str | None = None, key: tuple | None = None):
        super().__init__(message)
        self.table = table
        self.key = key


class PayloadTooLarge(ValidationError):
    """Raised when an uploaded file exceeds the size limit."""

    def __init__(self, message: str, size: int = 0, limit: int = 0):
        super().__init__(message)
        self.size = size
        self.limit = limit


class Internal(EventPixError):
    """Raised for unexpected storage or provisioning failures."""

    pass
