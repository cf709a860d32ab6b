from .base import (
    FORM_FIELD,
    GENERIC_FAILURE_MESSAGE,
    AppError,
    AuthenticationRequiredError,
    DomainError,
    InfrastructureError,
    RateLimitedError,
    ValidationError,
)
from .http import handle_app_error, register_error_handler
from .validation import FormResult, format_pydantic_errors, validate_form

__all__ = [
    "FORM_FIELD",
    "GENERIC_FAILURE_MESSAGE",
    "AppError",
    "AuthenticationRequiredError",
    "DomainError",
    "FormResult",
    "InfrastructureError",
    "RateLimitedError",
    "ValidationError",
    "format_pydantic_errors",
    "handle_app_error",
    "register_error_handler",
    "validate_form",
]
