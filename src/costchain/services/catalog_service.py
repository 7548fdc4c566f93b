"""
Catalog Service - ingredients and packaging, and their price edits.

Ingredient and packaging prices are the inputs of every cost chain. This
service creates and reads them and provides the "save a new price" flow:
the unit cost is stored and the matching chain recalculation runs in the
same transaction, so a failed recalculation also discards the price edit.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from costchain.models import Ingredient, Packaging
from costchain.services.cost_update_service import (
    recalculate_ingredient_chain,
    recalculate_packaging_chain,
)
from costchain.services.database import session_scope
from costchain.services.dto import UpdateChainResult
from costchain.services.dto_utils import Number, to_decimal
from costchain.services.exceptions import IngredientNotFound, PackagingNotFound, ValidationError
from costchain.services.logging_utils import get_service_logger, log_operation
from costchain.utils.validators import (
    validate_ingredient_data,
    validate_non_negative_number,
    validate_packaging_data,
)

logger = get_service_logger(__name__)


# =============================================================================
# Ingredients
# =============================================================================


def create_ingredient(data: Dict[str, Any], *, session: Optional[Session] = None) -> Ingredient:
    """
    Create an ingredient.

    Args:
        data: Dictionary with:
            - name (required)
            - unit_cost (default 0)
            - unit, brand (optional)
            - id (optional, generated when missing)
        session: Optional database session

    Returns:
        The created Ingredient

    Raises:
        ValidationError: If the data is invalid
    """
    is_valid, errors = validate_ingredient_data(data)
    if not is_valid:
        raise ValidationError(errors)

    def _impl(s: Session) -> Ingredient:
        ingredient = Ingredient(
            name=data["name"].strip(),
            unit_cost=to_decimal(data.get("unit_cost", 0)),
            unit=data.get("unit"),
            brand=data.get("brand"),
        )
        if data.get("id"):
            ingredient.id = data["id"]
        s.add(ingredient)
        s.flush()
        log_operation(logger, "create_ingredient", "success", ingredient_id=ingredient.id)
        return ingredient

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def get_ingredient(ingredient_id: str, *, session: Optional[Session] = None) -> Ingredient:
    """
    Get an ingredient by ID.

    Raises:
        IngredientNotFound: If the ingredient doesn't exist
    """

    def _impl(s: Session) -> Ingredient:
        ingredient = s.get(Ingredient, ingredient_id)
        if ingredient is None:
            raise IngredientNotFound(ingredient_id)
        return ingredient

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def update_ingredient_unit_cost(
    ingredient_id: str,
    unit_cost: Number,
    *,
    recalculate: bool = True,
    session: Optional[Session] = None,
) -> Optional[UpdateChainResult]:
    """
    Store a new ingredient price and propagate it.

    Args:
        ingredient_id: Ingredient to reprice
        unit_cost: New price per unit (>= 0)
        recalculate: When False only the price is stored; the derived costs
            stay stale until a chain or full recalculation runs
        session: Optional database session

    Returns:
        The chain result, or None when recalculate is False

    Raises:
        ValidationError: If unit_cost is not a non-negative number
        IngredientNotFound: If the ingredient doesn't exist
    """
    new_cost = _validated_unit_cost(unit_cost)

    def _impl(s: Session) -> Optional[UpdateChainResult]:
        ingredient = get_ingredient(ingredient_id, session=s)
        old_cost = ingredient.unit_cost
        ingredient.unit_cost = new_cost
        s.flush()
        log_operation(
            logger,
            "update_ingredient_unit_cost",
            "success",
            ingredient_id=ingredient_id,
            old_unit_cost=str(old_cost),
            new_unit_cost=str(new_cost),
        )
        if not recalculate:
            return None
        return recalculate_ingredient_chain([ingredient_id], session=s)

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


# =============================================================================
# Packaging
# =============================================================================


def create_packaging(data: Dict[str, Any], *, session: Optional[Session] = None) -> Packaging:
    """
    Create a packaging record.

    Args:
        data: Dictionary with name (required), unit_cost (default 0),
            type and id (optional)
        session: Optional database session

    Returns:
        The created Packaging

    Raises:
        ValidationError: If the data is invalid
    """
    is_valid, errors = validate_packaging_data(data)
    if not is_valid:
        raise ValidationError(errors)

    def _impl(s: Session) -> Packaging:
        packaging = Packaging(
            name=data["name"].strip(),
            unit_cost=to_decimal(data.get("unit_cost", 0)),
            type=data.get("type"),
        )
        if data.get("id"):
            packaging.id = data["id"]
        s.add(packaging)
        s.flush()
        log_operation(logger, "create_packaging", "success", packaging_id=packaging.id)
        return packaging

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def get_packaging(packaging_id: str, *, session: Optional[Session] = None) -> Packaging:
    """
    Get a packaging record by ID.

    Raises:
        PackagingNotFound: If the packaging doesn't exist
    """

    def _impl(s: Session) -> Packaging:
        packaging = s.get(Packaging, packaging_id)
        if packaging is None:
            raise PackagingNotFound(packaging_id)
        return packaging

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def update_packaging_unit_cost(
    packaging_id: str,
    unit_cost: Number,
    *,
    recalculate: bool = True,
    session: Optional[Session] = None,
) -> Optional[UpdateChainResult]:
    """
    Store a new packaging price and propagate it to products.

    Raises:
        ValidationError: If unit_cost is not a non-negative number
        PackagingNotFound: If the packaging doesn't exist
    """
    new_cost = _validated_unit_cost(unit_cost)

    def _impl(s: Session) -> Optional[UpdateChainResult]:
        packaging = get_packaging(packaging_id, session=s)
        old_cost = packaging.unit_cost
        packaging.unit_cost = new_cost
        s.flush()
        log_operation(
            logger,
            "update_packaging_unit_cost",
            "success",
            packaging_id=packaging_id,
            old_unit_cost=str(old_cost),
            new_unit_cost=str(new_cost),
        )
        if not recalculate:
            return None
        return recalculate_packaging_chain([packaging_id], session=s)

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def _validated_unit_cost(unit_cost: Number) -> Decimal:
    is_valid, error = validate_non_negative_number(unit_cost, "Unit cost")
    if not is_valid:
        raise ValidationError([error])
    return to_decimal(unit_cost)
