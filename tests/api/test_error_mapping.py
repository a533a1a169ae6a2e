import pytest

from tasklane.api.errors import status_for
from tasklane.errors import (
    ConflictError,
    ExpiredError,
    ForbiddenError,
    NotFoundError,
    TasklaneError,
    UnauthorizedError,
    ValidationError,
)


@pytest.mark.parametrize("error,expected", [
    (UnauthorizedError("x"), 401),
    (ForbiddenError("x"), 403),
    (NotFoundError("x"), 404),
    (ConflictError("x"), 409),
    (ExpiredError("x"), 410),
    (ValidationError("x"), 400),
    (TasklaneError("x"), 400),
])
def test_status_for(error, expected):
    assert status_for(error) == expected


def test_error_code_override():
    error = ConflictError("Already there", code="ALREADY_MEMBER")

    assert error.code == "ALREADY_MEMBER"
    assert error.message == "Already there"
    assert ConflictError("x").code == "CONFLICT"
