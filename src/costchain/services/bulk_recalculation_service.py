"""
Bulk Recalculation Service - recomputes every recipe and product aggregate.

Used as the last phase of cost_update_service.recalculate_all_costs(), after
all ingredient and packaging lines have been refreshed. It applies exactly the
same calculator functions as the targeted chains, so a full run and a chain
run agree to the last stored digit.

Unlike the chains, a failure on one entity does not stop the run: each recipe
and product is recalculated inside its own SAVEPOINT, a failing entity is
rolled back to it and reported in UpdateAllResult.errors, and the run moves
on. Failing to list the recipes or products still aborts.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from costchain.models import Product, Recipe
from costchain.services.cost_calculator import recalculate_product, recalculate_recipe
from costchain.services.database import session_scope
from costchain.services.dto import UpdateAllResult
from costchain.services.exceptions import ServiceError
from costchain.services.logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)


def recalculate_all_aggregates(*, session: Optional[Session] = None) -> UpdateAllResult:
    """
    Recalculate every recipe (with its product item cascade), then every product.

    Args:
        session: Optional database session

    Returns:
        UpdateAllResult with success counts and one error message per failed
        entity, formatted "Recipe <id>: <message>" / "Product <id>: <message>"
    """

    def _impl(s: Session) -> UpdateAllResult:
        result = UpdateAllResult()

        recipe_ids = [row[0] for row in s.query(Recipe.id).order_by(Recipe.name, Recipe.id)]
        for recipe_id in recipe_ids:
            if _run_isolated(s, "Recipe", recipe_id, recalculate_recipe, result):
                result.updated_recipes += 1

        product_ids = [row[0] for row in s.query(Product.id).order_by(Product.name, Product.id)]
        for product_id in product_ids:
            if _run_isolated(s, "Product", product_id, recalculate_product, result):
                result.updated_products += 1

        log_operation(
            logger,
            "recalculate_all_aggregates",
            "completed_with_errors" if result.errors else "success",
            level=logging.WARNING if result.errors else logging.INFO,
            updated_recipes=result.updated_recipes,
            updated_products=result.updated_products,
            error_count=len(result.errors),
        )
        return result

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def _run_isolated(
    s: Session,
    label: str,
    entity_id: str,
    recalculate: Callable[[Session, str], object],
    result: UpdateAllResult,
) -> bool:
    """Recalculate one entity inside a savepoint; record the error on failure."""
    try:
        with s.begin_nested():
            recalculate(s, entity_id)
    except (ServiceError, SQLAlchemyError) as e:
        logger.warning(f"Failed to recalculate {label.lower()} {entity_id}: {e}")
        result.errors.append(f"{label} {entity_id}: {e}")
        return False
    return True
