"""
Business error taxonomy for the authorization and membership core.

Services raise these for expected conditions (a missing invitation, a
forbidden role change, a duplicate pending invite). Storage failures and
other unexpected errors are not wrapped and propagate unchanged.

The HTTP layer maps each class to a status code in one place
(tasklane.api.errors); nothing in the core knows about status codes.
"""


class TasklaneError(Exception):
    """Base class for expected business errors."""

    code = "TASKLANE_ERROR"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        if code:
            self.code = code
        super().__init__(message)


class UnauthorizedError(TasklaneError):
    """No valid actor context on the request."""

    code = "UNAUTHORIZED"


class ForbiddenError(TasklaneError):
    """Actor is known but lacks the role, permission or ownership."""

    code = "FORBIDDEN"


class NotFoundError(TasklaneError):
    code = "NOT_FOUND"


class ConflictError(TasklaneError):
    """Duplicate pending invitation, double accept, already a member."""

    code = "CONFLICT"


class ExpiredError(TasklaneError):
    code = "EXPIRED"


class ValidationError(TasklaneError):
    """Malformed input, e.g. an empty or invalid email."""

    code = "VALIDATION_ERROR"


class TokenGenerationError(RuntimeError):
    """Could not produce a unique invitation token. Not a business error."""
