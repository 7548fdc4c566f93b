"""
Input validation functions for the Cost Chain application.

Each validator returns a (is_valid, error_message) tuple; the *_data
functions collect every error of a record so the caller can raise one
ValidationError listing all of them.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from .constants import (
    MAX_NAME_LENGTH,
    MAX_BRAND_LENGTH,
    MAX_UNIT_LENGTH,
    MAX_TYPE_LENGTH,
    ERROR_REQUIRED_FIELD,
    ERROR_INVALID_NUMBER,
    ERROR_INVALID_POSITIVE,
    ERROR_INVALID_NON_NEGATIVE,
    ERROR_INVALID_INTEGER,
)


def _as_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not result.is_finite():
        return None
    return result


def validate_required_string(value: Optional[str], field_name: str = "Field") -> Tuple[bool, str]:
    """Validate that a string field is not empty."""
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    return True, ""


def validate_string_length(
    value: Optional[str], max_length: int, field_name: str = "Field"
) -> Tuple[bool, str]:
    """Validate that a string doesn't exceed maximum length."""
    if value and len(value) > max_length:
        return False, f"{field_name}: Must be {max_length} characters or less"
    return True, ""


def validate_positive_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """Validate that a value is a number greater than zero."""
    number = _as_decimal(value)
    if number is None:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if number <= 0:
        return False, f"{field_name}: {ERROR_INVALID_POSITIVE}"
    return True, ""


def validate_non_negative_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """Validate that a value is a number greater than or equal to zero."""
    number = _as_decimal(value)
    if number is None:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if number < 0:
        return False, f"{field_name}: {ERROR_INVALID_NON_NEGATIVE}"
    return True, ""


def validate_portions(value: Any, field_name: str = "Portions") -> Tuple[bool, str]:
    """Validate a recipe portion count: a whole number of at least 1."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{field_name}: {ERROR_INVALID_INTEGER}"
    if value < 1:
        return False, f"{field_name}: {ERROR_INVALID_POSITIVE}"
    return True, ""


def _collect_name_errors(data: dict, errors: list) -> None:
    name = data.get("name")
    is_valid, error = validate_required_string(name, "Name")
    if not is_valid:
        errors.append(error)
        return
    is_valid, error = validate_string_length(name, MAX_NAME_LENGTH, "Name")
    if not is_valid:
        errors.append(error)


def validate_ingredient_data(data: dict) -> Tuple[bool, list]:
    """
    Validate the fields of an ingredient.

    Args:
        data: Dictionary with name, unit_cost and optional unit, brand

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []
    _collect_name_errors(data, errors)

    is_valid, error = validate_non_negative_number(data.get("unit_cost", 0), "Unit cost")
    if not is_valid:
        errors.append(error)

    for field_name, key, max_length in (
        ("Unit", "unit", MAX_UNIT_LENGTH),
        ("Brand", "brand", MAX_BRAND_LENGTH),
    ):
        is_valid, error = validate_string_length(data.get(key), max_length, field_name)
        if not is_valid:
            errors.append(error)

    return len(errors) == 0, errors


def validate_packaging_data(data: dict) -> Tuple[bool, list]:
    """
    Validate the fields of a packaging record.

    Args:
        data: Dictionary with name, unit_cost and optional type

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []
    _collect_name_errors(data, errors)

    is_valid, error = validate_non_negative_number(data.get("unit_cost", 0), "Unit cost")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_string_length(data.get("type"), MAX_TYPE_LENGTH, "Type")
    if not is_valid:
        errors.append(error)

    return len(errors) == 0, errors


def validate_recipe_data(data: dict) -> Tuple[bool, list]:
    """
    Validate the fields of a recipe.

    Args:
        data: Dictionary with name and optional portions (default 1)

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []
    _collect_name_errors(data, errors)

    is_valid, error = validate_portions(data.get("portions", 1))
    if not is_valid:
        errors.append(error)

    return len(errors) == 0, errors


def validate_product_data(data: dict) -> Tuple[bool, list]:
    """Validate the fields of a product."""
    errors = []
    _collect_name_errors(data, errors)
    return len(errors) == 0, errors
