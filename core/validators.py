"""
Core Validators

Shared input checks run before a request is built.
All raise core.errors.ValidationError so callers see one error kind.
"""

from typing import Optional

from .errors import ValidationError


def validate_required_field(
    value: Optional[str],
    field_name: str,
    module_name: str = "Module"
) -> None:
    """
    Validate that a required field is not empty.

    Raises:
        ValidationError: If value is None, not a string, or blank
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{module_name}: {field_name} is required and cannot be empty."
        )


def validate_text_length(
    text: str,
    min_chars: int,
    max_chars: int,
    module_name: str = "Module"
) -> None:
    """
    Validate that text length is within [min_chars, max_chars].

    Raises:
        ValidationError: If the text is too short or too long
    """
    if len(text) < min_chars:
        raise ValidationError(
            f"{module_name}: Text length ({len(text)}) is below "
            f"the minimum of {min_chars} characters."
        )
    if len(text) > max_chars:
        raise ValidationError(
            f"{module_name}: Text length ({len(text)}) exceeds "
            f"maximum of {max_chars} characters."
        )

