"""Tests for mapping user errors to HTTP responses."""

import json

import pytest

from harborops.errors import (
    AccessDeniedError,
    AuthenticationError,
    InvalidFieldError,
    InvalidOperatorError,
    InvalidValueError,
    NotFoundError,
    ValidationError,
)
from harborops.web.error_handlers import general_exception_handler, user_error_handler


class TestUserErrorHandler:
    """Tests for user_error_handler function."""

    @pytest.mark.parametrize(
        ("error", "status_code", "error_type"),
        [
            (InvalidFieldError("Unknown filter field 'x'"), 400, "invalid_field"),
            (InvalidOperatorError("bad operator"), 400, "invalid_operator"),
            (InvalidValueError("bad value"), 400, "invalid_value"),
            (ValidationError("bad input"), 400, "validation_error"),
            (NotFoundError(), 404, "not_found"),
            (AuthenticationError(), 401, "authentication_error"),
            (AccessDeniedError("no"), 403, "access_denied"),
        ],
    )
    async def test_mapping(self, error, status_code, error_type):
        response = await user_error_handler(None, error)
        assert response.status_code == status_code
        assert json.loads(response.body) == {"message": str(error), "type": error_type}

    async def test_unexpected_error_hides_details(self):
        response = await general_exception_handler(None, RuntimeError("connection string with password"))
        assert response.status_code == 500
        assert json.loads(response.body) == {"message": "An unexpected error occurred.", "type": "internal_server_error"}
