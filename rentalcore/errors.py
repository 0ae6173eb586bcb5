"""Error types and user-facing error messages."""

from typing import Any, Optional


class RentalError(Exception):
    """Base error carrying a translation key for the user-facing message.

    ``template`` names an entry of ERROR_TEMPLATES; ``params`` must match its
    arguments, which build :attr:`user_message`.
    """

    default_key = "errors.generic"
    template = "generic"

    def __init__(
        self,
        message: str = "",
        key: Optional[str] = None,
        params: Optional[dict[str, Any]] = None,
        template: Optional[str] = None,
    ):
        self.key = key or self.default_key
        self.params = params or {}
        if template:
            self.template = template
        super().__init__(message or self.key)

    @property
    def user_message(self) -> str:
        return ERROR_TEMPLATES[self.template](**self.params)


class ValidationFailedError(RentalError):
    """Input rejected by validation."""

    default_key = "errors.invalidData"
    template = "invalid_data"


class InvalidPeriodError(ValidationFailedError):
    """Start/end dates are unparsable or not in order."""

    template = "invalid_period"


class NotFoundError(RentalError):
    """Requested store, product or reservation does not exist."""

    default_key = "errors.notFound"
    template = "not_found"


def format_error_message(problem: str, action: str) -> str:
    """
    Format error messages following the pattern: [problem] [action].

    Example:
        >>> format_error_message("Store not found.", "Check the store address.")
        'Store not found.\\n\\nCheck the store address.'
    """
    return f"{problem}\n\n{action}"


# Common error templates
ERROR_TEMPLATES = {
    "generic": lambda: format_error_message(
        "Something went wrong.",
        "Please try again in a few minutes.",
    ),
    "invalid_data": lambda: format_error_message(
        "Some of the values entered are invalid.",
        "Check the form and try again.",
    ),
    "invalid_period": lambda: format_error_message(
        "The selected dates are invalid.",
        "Choose a return date after the pickup date.",
    ),
    "not_found": lambda: format_error_message(
        "This page does not exist.",
        "Check the address and try again.",
    ),
    "store_not_found": lambda slug: format_error_message(
        f"Store not found: {slug}.",
        "Check the store address and try again.",
    ),
    "invalid_store_settings": lambda source: format_error_message(
        f"The store settings in {source} are invalid.",
        "Fix the listed values and reload the settings.",
    ),
}
