"""
Cost Calculator - aggregate costs of recipes and products.

Formulas:

    line cost          = quantity x unit_cost
    recipe total_cost  = sum(base line costs) + portions x sum(portion line costs)
    recipe unit_cost   = total_cost / portions
    product total_cost = sum(product item costs) + sum(product packaging costs)

Aggregates are built from the stored line costs, so the lines must be
refreshed (ingredient_cost_updater / packaging_cost_updater) before a
recipe or product is recalculated. Recalculating a recipe cascades: the
product items that use it get ``quantity x`` the new unit cost and each
owning product is recalculated.

Every stored value is rounded to 4 decimal places. Product items use the
rounded unit cost, so items covering a whole batch can differ from the
batch total in the last place (10.0000 over 3 portions gives a unit cost of
3.3333 and 3 items cost 9.9999).

The pure compute_* helpers are shared with the bulk recalculation so both
paths produce the same numbers.
"""

import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from costchain.models import (
    Product,
    ProductItem,
    ProductPackaging,
    Recipe,
    RecipeBaseIngredient,
    RecipePortionIngredient,
)
from costchain.services.cost_data_service import get_product_items_for_recipe, sum_line_costs
from costchain.services.database import session_scope
from costchain.services.dto import RecipeCostResult
from costchain.services.dto_utils import Number, quantize_cost, to_decimal
from costchain.services.exceptions import ProductNotFound, RecipeNotFound, ValidationError
from costchain.services.logging_utils import get_service_logger, log_operation
from costchain.utils.constants import DEFAULT_PORTIONS

logger = get_service_logger(__name__)


# =============================================================================
# Pure Formulas
# =============================================================================


def compute_line_cost(quantity: Number, unit_cost: Number) -> Decimal:
    """
    Cost of a usage line: quantity x unit_cost, at stored precision.

    Examples:
        >>> compute_line_cost(3, Decimal("2.00"))
        Decimal('6.0000')
    """
    return quantize_cost(to_decimal(quantity) * to_decimal(unit_cost))


def resolve_portions(portions: Optional[int]) -> int:
    """
    Portion count used for costing.

    A missing or zero portion count is costed as one portion. Negative
    counts are rejected.

    Raises:
        ValidationError: If portions is negative
    """
    if portions is None or portions == 0:
        return DEFAULT_PORTIONS
    if portions < 0:
        raise ValidationError([f"Portions must not be negative (got {portions})"])
    return int(portions)


def compute_recipe_totals(
    total_base_cost: Number, total_portion_cost: Number, portions: int
) -> Tuple[Decimal, Decimal]:
    """
    Recipe total and per-portion cost.

    Args:
        total_base_cost: Sum of base line costs
        total_portion_cost: Sum of per-portion line costs
        portions: Resolved portion count (>= 1)

    Returns:
        (total_cost, unit_cost)

    Examples:
        >>> compute_recipe_totals(Decimal("6"), Decimal("0"), 2)
        (Decimal('6.0000'), Decimal('3.0000'))
    """
    total_cost = quantize_cost(
        to_decimal(total_base_cost) + to_decimal(total_portion_cost) * portions
    )
    unit_cost = quantize_cost(total_cost / portions)
    return total_cost, unit_cost


def compute_product_total(total_items_cost: Number, total_packaging_cost: Number) -> Decimal:
    """Product total cost from its item and packaging line sums."""
    return quantize_cost(to_decimal(total_items_cost) + to_decimal(total_packaging_cost))


# =============================================================================
# Recipe Recalculation
# =============================================================================


def recalculate_recipe_cost(
    recipe_id: str, *, session: Optional[Session] = None
) -> RecipeCostResult:
    """
    Recalculate and store a recipe's total and unit cost, then cascade.

    Steps:
    1. Resolve portions (missing/zero -> 1)
    2. Sum base line costs and portion line costs
    3. Store total_cost and unit_cost on the recipe
    4. Set cost = quantity x unit_cost on every product item using the recipe
    5. Recalculate each distinct product owning one of those items

    Args:
        recipe_id: Recipe to recalculate
        session: Optional database session

    Returns:
        RecipeCostResult with the stored values and cascaded product ids

    Raises:
        RecipeNotFound: If the recipe doesn't exist
        ValidationError: If the recipe has a negative portion count
    """

    def _impl(s: Session) -> RecipeCostResult:
        return recalculate_recipe(s, recipe_id)

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def recalculate_recipe(s: Session, recipe_id: str) -> RecipeCostResult:
    """Session-bound body of recalculate_recipe_cost()."""
    recipe = s.get(Recipe, recipe_id)
    if recipe is None:
        raise RecipeNotFound(recipe_id)

    portions = resolve_portions(recipe.portions)
    if portions != recipe.portions:
        log_operation(
            logger,
            "recalculate_recipe_cost",
            "portions_defaulted",
            level=logging.WARNING,
            recipe_id=recipe_id,
            stored_portions=recipe.portions,
            portions=portions,
        )

    total_base_cost = sum_line_costs(
        s, RecipeBaseIngredient, RecipeBaseIngredient.recipe_id, recipe_id
    )
    total_portion_cost = sum_line_costs(
        s, RecipePortionIngredient, RecipePortionIngredient.recipe_id, recipe_id
    )
    total_cost, unit_cost = compute_recipe_totals(total_base_cost, total_portion_cost, portions)

    recipe.total_cost = total_cost
    recipe.unit_cost = unit_cost
    s.flush()

    log_operation(
        logger,
        "recalculate_recipe_cost",
        "success",
        level=logging.DEBUG,
        recipe_id=recipe_id,
        total_cost=str(total_cost),
        unit_cost=str(unit_cost),
    )

    product_ids = _update_product_items_costs(s, recipe_id, unit_cost)

    return RecipeCostResult(
        recipe_id=recipe_id,
        portions=portions,
        total_base_cost=quantize_cost(total_base_cost),
        total_portion_cost=quantize_cost(total_portion_cost),
        total_cost=total_cost,
        unit_cost=unit_cost,
        product_ids=product_ids,
    )


def _update_product_items_costs(s: Session, recipe_id: str, unit_cost: Decimal) -> List[str]:
    """
    Refresh the product items using a recipe and recalculate their products.

    Returns:
        Distinct product ids in first-seen order
    """
    items: List[ProductItem] = get_product_items_for_recipe(s, recipe_id)
    if not items:
        logger.debug(f"No product items use recipe {recipe_id}")
        return []

    for item in items:
        new_cost = compute_line_cost(item.quantity, unit_cost)
        logger.debug(f"product_items {item.id}: {item.quantity} x {unit_cost} = {new_cost}")
        item.cost = new_cost
        s.flush()

    product_ids = list(dict.fromkeys(item.product_id for item in items))
    for product_id in product_ids:
        recalculate_product(s, product_id)

    return product_ids


# =============================================================================
# Product Recalculation
# =============================================================================


def recalculate_product_cost(product_id: str, *, session: Optional[Session] = None) -> Decimal:
    """
    Recalculate and store a product's total cost.

    total_cost = sum(product item costs) + sum(product packaging costs)

    Args:
        product_id: Product to recalculate
        session: Optional database session

    Returns:
        The stored total cost

    Raises:
        ProductNotFound: If the product doesn't exist
    """

    def _impl(s: Session) -> Decimal:
        return recalculate_product(s, product_id)

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def recalculate_product(s: Session, product_id: str) -> Decimal:
    """Session-bound body of recalculate_product_cost()."""
    product = s.get(Product, product_id)
    if product is None:
        raise ProductNotFound(product_id)

    total_items_cost = sum_line_costs(s, ProductItem, ProductItem.product_id, product_id)
    total_packaging_cost = sum_line_costs(
        s, ProductPackaging, ProductPackaging.product_id, product_id
    )
    total_cost = compute_product_total(total_items_cost, total_packaging_cost)

    product.total_cost = total_cost
    s.flush()

    log_operation(
        logger,
        "recalculate_product_cost",
        "success",
        level=logging.DEBUG,
        product_id=product_id,
        total_cost=str(total_cost),
    )
    return total_cost
