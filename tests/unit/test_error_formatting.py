"""Unit tests for error types and message formatting."""

import pytest

from rentalcore.errors import (
    ERROR_TEMPLATES,
    InvalidPeriodError,
    NotFoundError,
    RentalError,
    ValidationFailedError,
    format_error_message,
)


def test_format_error_message_structure():
    """Test error message follows [problem] [action] pattern."""
    error = format_error_message("Something went wrong.", "Try again later.")

    assert error.startswith("Something went wrong.")
    assert error.endswith("Try again later.")
    assert "\n\n" in error  # Should have proper spacing


def test_error_keys_default_per_type():
    """Test each error type carries its translation key."""
    assert RentalError().key == "errors.generic"
    assert ValidationFailedError("bad").key == "errors.invalidData"
    assert InvalidPeriodError("bad").key == "errors.invalidData"
    assert NotFoundError("missing").key == "errors.notFound"


def test_error_key_and_params_override():
    """Test explicit key and params are kept."""
    error = NotFoundError("Store not found: x", key="errors.storeNotFound", params={"slug": "x"})

    assert error.key == "errors.storeNotFound"
    assert error.params == {"slug": "x"}
    assert str(error) == "Store not found: x"


def test_error_without_message_uses_key():
    """Test the key doubles as message."""
    assert str(NotFoundError()) == "errors.notFound"


def test_invalid_period_is_validation_error():
    """Test callers can catch every validation failure at once."""
    with pytest.raises(ValidationFailedError):
        raise InvalidPeriodError("End date must be after start date")


def test_error_template_invalid_period():
    """Test invalid_period error template."""
    error = ERROR_TEMPLATES["invalid_period"]()

    assert "invalid" in error.lower()
    assert "return date" in error


def test_error_template_store_not_found():
    """Test store_not_found error template names the slug."""
    error = ERROR_TEMPLATES["store_not_found"]("alpine")

    assert "Store not found: alpine." in error
    assert "store address" in error


def test_user_message_follows_error_template():
    """Test each error type renders its own template."""
    assert RentalError().user_message == ERROR_TEMPLATES["generic"]()
    assert ValidationFailedError("bad").user_message == ERROR_TEMPLATES["invalid_data"]()
    assert "return date" in InvalidPeriodError("bad").user_message
    assert NotFoundError().user_message == ERROR_TEMPLATES["not_found"]()


def test_user_message_uses_params():
    """Test template arguments come from the error params."""
    error = NotFoundError(
        "Store not found: alpine",
        key="errors.storeNotFound",
        params={"slug": "alpine"},
        template="store_not_found",
    )

    assert error.template == "store_not_found"
    assert error.user_message.startswith("Store not found: alpine.")
    assert NotFoundError().template == "not_found"
