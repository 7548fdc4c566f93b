"""
Recipe Service - recipe authoring with costs kept current.

Ingredient lines are never given a cost by the caller: adding a line
computes its cost from the ingredient's current price and recalculates the
recipe, which cascades into the products that use it.
"""

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from costchain.models import Recipe, RecipeBaseIngredient, RecipePortionIngredient
from costchain.services.catalog_service import get_ingredient
from costchain.services.cost_calculator import compute_line_cost, recalculate_recipe
from costchain.services.database import session_scope
from costchain.services.dto_utils import Number, to_decimal
from costchain.services.exceptions import RecipeNotFound, ValidationError
from costchain.services.logging_utils import get_service_logger, log_operation
from costchain.utils.validators import (
    validate_portions,
    validate_positive_number,
    validate_recipe_data,
)

logger = get_service_logger(__name__)


def create_recipe(data: Dict[str, Any], *, session: Optional[Session] = None) -> Recipe:
    """
    Create a recipe with no ingredients (zero cost).

    Args:
        data: Dictionary with name (required), portions (default 1) and
            id (optional)
        session: Optional database session

    Returns:
        The created Recipe

    Raises:
        ValidationError: If the name is missing or portions is not a whole number >= 1
    """
    is_valid, errors = validate_recipe_data(data)
    if not is_valid:
        raise ValidationError(errors)

    def _impl(s: Session) -> Recipe:
        recipe = Recipe(name=data["name"].strip(), portions=data.get("portions", 1))
        if data.get("id"):
            recipe.id = data["id"]
        s.add(recipe)
        s.flush()
        log_operation(logger, "create_recipe", "success", recipe_id=recipe.id)
        return recipe

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def get_recipe(recipe_id: str, *, session: Optional[Session] = None) -> Recipe:
    """
    Get a recipe by ID.

    Raises:
        RecipeNotFound: If the recipe doesn't exist
    """

    def _impl(s: Session) -> Recipe:
        recipe = s.get(Recipe, recipe_id)
        if recipe is None:
            raise RecipeNotFound(recipe_id)
        return recipe

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def add_base_ingredient(
    recipe_id: str,
    ingredient_id: str,
    quantity: Number,
    *,
    session: Optional[Session] = None,
) -> RecipeBaseIngredient:
    """
    Add an ingredient consumed once per batch.

    Raises:
        RecipeNotFound / IngredientNotFound: If either doesn't exist
        ValidationError: If quantity is not a positive number
    """
    return _add_ingredient_line(RecipeBaseIngredient, recipe_id, ingredient_id, quantity, session)


def add_portion_ingredient(
    recipe_id: str,
    ingredient_id: str,
    quantity: Number,
    *,
    session: Optional[Session] = None,
) -> RecipePortionIngredient:
    """
    Add an ingredient consumed once per portion.

    Raises:
        RecipeNotFound / IngredientNotFound: If either doesn't exist
        ValidationError: If quantity is not a positive number
    """
    return _add_ingredient_line(
        RecipePortionIngredient, recipe_id, ingredient_id, quantity, session
    )


def update_recipe_portions(
    recipe_id: str, portions: int, *, session: Optional[Session] = None
) -> Recipe:
    """
    Change a recipe's portion count and recalculate it.

    The unit cost changes with the portion count, so product items using the
    recipe are refreshed by the cascade.

    Raises:
        RecipeNotFound: If the recipe doesn't exist
        ValidationError: If portions is not a whole number >= 1
    """
    is_valid, error = validate_portions(portions)
    if not is_valid:
        raise ValidationError([error])

    def _impl(s: Session) -> Recipe:
        recipe = get_recipe(recipe_id, session=s)
        recipe.portions = portions
        s.flush()
        recalculate_recipe(s, recipe_id)
        log_operation(
            logger, "update_recipe_portions", "success", recipe_id=recipe_id, portions=portions
        )
        return recipe

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def _add_ingredient_line(line_model, recipe_id, ingredient_id, quantity, session):
    is_valid, error = validate_positive_number(quantity, "Quantity")
    if not is_valid:
        raise ValidationError([error])
    quantity = to_decimal(quantity)

    def _impl(s: Session):
        get_recipe(recipe_id, session=s)
        ingredient = get_ingredient(ingredient_id, session=s)

        line = line_model(
            recipe_id=recipe_id,
            ingredient_id=ingredient_id,
            quantity=quantity,
            cost=compute_line_cost(quantity, ingredient.unit_cost),
        )
        s.add(line)
        s.flush()

        recalculate_recipe(s, recipe_id)
        log_operation(
            logger,
            f"add_{line_model.__tablename__}",
            "success",
            recipe_id=recipe_id,
            ingredient_id=ingredient_id,
        )
        return line

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)
