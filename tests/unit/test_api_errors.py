"""Tests for mapping engine errors to HTTP responses."""

import pytest

from src.api.errors import error_response, http_status_for
from src.services.errors import (
    AllocationError,
    AmbiguousRuleError,
    NotFoundError,
    UnsupportedMethodError,
    UnsupportedTargetTypeError,
)


@pytest.mark.parametrize(
    "error,status_code",
    [
        (NotFoundError("Expense 1 not found"), 404),
        (UnsupportedTargetTypeError("BUILDING"), 422),
        (UnsupportedMethodError("BY_FLOOR"), 422),
        (AmbiguousRuleError("two rules"), 422),
        (AllocationError("boom"), 400),
    ],
)
def test_http_status_for(error, status_code):
    assert http_status_for(error) == status_code


def test_error_response_body():
    body = error_response(UnsupportedMethodError("BY_FLOOR"))

    assert body == {
        "error": {
            "code": "unsupported_method",
            "message": "Unsupported allocation method 'BY_FLOOR'",
        }
    }
