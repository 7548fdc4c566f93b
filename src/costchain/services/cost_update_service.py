"""
Cost Update Service - entry points for recalculating cost chains.

These are the functions callers use after persisting a price change:

- recalculate_ingredient_chain(ingredient_ids)
      ingredient lines -> affected recipes -> their product items -> products
- recalculate_packaging_chain(packaging_ids)
      packaging lines -> affected products
- recalculate_all_costs()
      every line, then every recipe and product

Each call is one linear pipeline whose phases run strictly in order, because
aggregates are sums of line costs written by the earlier phases. The whole
call runs in a single transaction: when no session is passed, a failure in
any phase rolls back every write made by the call and the error propagates.
Passing ``session=`` joins the caller's transaction instead.

Nothing is retried. SQLAlchemy errors are re-raised as DatabaseError; service
errors (e.g. RecipeNotFound) propagate unchanged.
"""

import logging
from typing import Callable, Iterable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from costchain.services.bulk_recalculation_service import recalculate_all_aggregates
from costchain.services.cost_calculator import recalculate_product, recalculate_recipe
from costchain.services.cost_data_service import (
    get_products_affected_by_packaging,
    get_products_affected_by_recipes,
    get_recipes_affected_by_ingredients,
)
from costchain.services.database import session_scope
from costchain.services.dto import UpdateAllResult, UpdateChainResult
from costchain.services.exceptions import DatabaseError, ServiceError
from costchain.services.ingredient_cost_updater import (
    update_all_ingredient_costs,
    update_specific_ingredient_costs,
)
from costchain.services.logging_utils import get_service_logger, log_operation
from costchain.services.packaging_cost_updater import (
    update_all_packaging_costs,
    update_specific_packaging_costs,
)

logger = get_service_logger(__name__)

R = TypeVar("R")


def recalculate_all_costs(*, session: Optional[Session] = None) -> UpdateAllResult:
    """
    Recalculate every derived cost in the database.

    Phase 1: all recipe ingredient lines
    Phase 2: all product packaging lines
    Phase 3: every recipe (with product item cascade), then every product

    Phase 3 reports per-entity failures in the result's errors list; failures
    in phases 1 and 2 abort the call.

    Args:
        session: Optional database session

    Returns:
        UpdateAllResult(updated_recipes, updated_products, errors)

    Raises:
        DatabaseError: If a read or write fails outside phase 3's per-entity isolation
    """

    def _impl(s: Session) -> UpdateAllResult:
        log_operation(logger, "recalculate_all_costs", "started")

        ingredient_lines = update_all_ingredient_costs(session=s)
        packaging_lines = update_all_packaging_costs(session=s)
        result = recalculate_all_aggregates(session=s)

        log_operation(
            logger,
            "recalculate_all_costs",
            "success",
            ingredient_lines=ingredient_lines,
            packaging_lines=packaging_lines,
            **result.to_dict(),
        )
        return result

    return _run("recalculate_all_costs", _impl, session)


def recalculate_ingredient_chain(
    ingredient_ids: Iterable[str], *, session: Optional[Session] = None
) -> UpdateChainResult:
    """
    Propagate ingredient price changes through recipes into products.

    Phase 1: refresh the base and portion lines using these ingredients
    Phase 2: find recipes with a base or portion line using any of them
    Phase 3: recalculate each recipe (cascades into its products)
    Phase 4: find the products using any recalculated recipe

    Args:
        ingredient_ids: Ingredients whose unit cost changed. An empty
            collection does nothing and returns zero counts.
        session: Optional database session

    Returns:
        UpdateChainResult with the recalculated recipes and affected products

    Example:
        >>> result = recalculate_ingredient_chain(["flour-id"])
        >>> result.to_dict()
        {'affected_recipes': 1, 'affected_products': 1, 'recipe_ids': [...], ...}
    """
    ids = list(dict.fromkeys(ingredient_ids))

    def _impl(s: Session) -> UpdateChainResult:
        if not ids:
            log_operation(logger, "recalculate_ingredient_chain", "no_ingredients")
            return UpdateChainResult()

        log_operation(logger, "recalculate_ingredient_chain", "started", ingredient_ids=ids)

        update_specific_ingredient_costs(ids, session=s)

        affected_recipes = get_recipes_affected_by_ingredients(ids, session=s)
        recipe_ids = [recipe["id"] for recipe in affected_recipes]

        for recipe_id in recipe_ids:
            recalculate_recipe(s, recipe_id)

        affected_products = get_products_affected_by_recipes(recipe_ids, session=s)
        product_ids = [product["id"] for product in affected_products]

        result = UpdateChainResult(
            affected_recipes=len(recipe_ids),
            affected_products=len(product_ids),
            recipe_ids=recipe_ids,
            product_ids=product_ids,
        )
        log_operation(
            logger,
            "recalculate_ingredient_chain",
            "success",
            affected_recipes=result.affected_recipes,
            affected_products=result.affected_products,
        )
        return result

    return _run("recalculate_ingredient_chain", _impl, session)


def recalculate_packaging_chain(
    packaging_ids: Iterable[str], *, session: Optional[Session] = None
) -> UpdateChainResult:
    """
    Propagate packaging price changes into products.

    Phase 1: refresh the product packaging lines using these packaging records
    Phase 2: find products with a packaging line using any of them
    Phase 3: recalculate each product

    Args:
        packaging_ids: Packaging whose unit cost changed. An empty collection
            does nothing and returns zero counts.
        session: Optional database session

    Returns:
        UpdateChainResult with affected_recipes always 0
    """
    ids = list(dict.fromkeys(packaging_ids))

    def _impl(s: Session) -> UpdateChainResult:
        if not ids:
            log_operation(logger, "recalculate_packaging_chain", "no_packaging")
            return UpdateChainResult()

        log_operation(logger, "recalculate_packaging_chain", "started", packaging_ids=ids)

        update_specific_packaging_costs(ids, session=s)

        affected_products = get_products_affected_by_packaging(ids, session=s)
        product_ids = [product["id"] for product in affected_products]

        for product_id in product_ids:
            recalculate_product(s, product_id)

        result = UpdateChainResult(
            affected_recipes=0,
            affected_products=len(product_ids),
            recipe_ids=[],
            product_ids=product_ids,
        )
        log_operation(
            logger,
            "recalculate_packaging_chain",
            "success",
            affected_products=result.affected_products,
        )
        return result

    return _run("recalculate_packaging_chain", _impl, session)


def _run(operation: str, impl: Callable[[Session], R], session: Optional[Session]) -> R:
    """Run an orchestrator body in the given session or its own transaction."""
    try:
        if session is not None:
            return impl(session)
        with session_scope() as s:
            return impl(s)
    except ServiceError as e:
        log_operation(logger, operation, "error", level=logging.ERROR, error=str(e))
        raise
    except SQLAlchemyError as e:
        log_operation(logger, operation, "database_error", level=logging.ERROR, error=str(e))
        raise DatabaseError(f"{operation} failed", original_error=e) from e
