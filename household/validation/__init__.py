"""Validation package."""

from household.validation.validator import FormValidator, InputValidationError

__all__ = ["FormValidator", "InputValidationError"]
