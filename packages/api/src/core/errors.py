# This project was developed with assistance from AI tools.
"""KYC domain errors.

Services raise these; ``main.py`` maps them to RFC 7807 responses so routes
never translate them by hand.
"""


class KYCError(Exception):
    """Base class for KYC lifecycle failures."""

    status_code = 500
    title = "Internal Server Error"
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(KYCError):
    """Malformed or incomplete submission."""

    status_code = 400
    title = "Bad Request"

    def __init__(self, message: str, *, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []


class NotFoundError(KYCError):
    """Driver, document or reference does not exist."""

    status_code = 404
    title = "Not Found"


class ConflictError(KYCError):
    """Operation not allowed in the current category state."""

    status_code = 409
    title = "Conflict"


class StorageError(KYCError):
    """Ledger, aggregate or artifact persistence failed. Safe to retry."""

    status_code = 503
    title = "Service Unavailable"
    retryable = True
