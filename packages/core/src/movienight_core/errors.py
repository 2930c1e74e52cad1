"""Domain errors raised by the services and mapped to HTTP status codes."""


class MovieNightError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MovieNightError):
    """A required field is missing or empty."""
    status_code = 400


class AuthError(MovieNightError):
    """The bearer token is unknown."""
    status_code = 401


class ForbiddenError(MovieNightError):
    """Authenticated, but not allowed (a guest trying to finish a room)."""
    status_code = 403


class NotFoundError(MovieNightError):
    status_code = 404


class InvalidStateError(MovieNightError):
    """Operation not valid for the room's current status."""
    status_code = 400


class ConflictError(MovieNightError):
    """Could not generate a unique code or token after several attempts."""
    status_code = 409


__all__ = [
    "MovieNightError",
    "ValidationError",
    "AuthError",
    "ForbiddenError",
    "NotFoundError",
    "InvalidStateError",
    "ConflictError",
]
