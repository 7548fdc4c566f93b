"""
Ingredient Cost Updater - refreshes the cost of recipe ingredient lines.

Every recipe base line and portion line stores ``cost = quantity x
ingredient.unit_cost``. When ingredient prices change, these functions read
the affected lines joined with their ingredient and write the new cost back,
one row at a time, base lines first and portion lines second.

Errors are not caught here: the first failing read or write aborts the update
and propagates to the caller, whose transaction decides what is kept.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from costchain.services.cost_calculator import compute_line_cost
from costchain.services.cost_data_service import INGREDIENT_LINE_MODELS, get_ingredient_lines
from costchain.services.database import session_scope
from costchain.services.logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)


def update_all_ingredient_costs(*, session: Optional[Session] = None) -> int:
    """
    Recompute the cost of every base and portion ingredient line.

    Args:
        session: Optional database session

    Returns:
        Number of lines written
    """

    def _impl(s: Session) -> int:
        updated = 0
        for line_model in INGREDIENT_LINE_MODELS:
            updated += _update_ingredient_lines(s, line_model, None)
        log_operation(logger, "update_all_ingredient_costs", "success", lines_updated=updated)
        return updated

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def update_specific_ingredient_costs(
    ingredient_ids: Iterable[str], *, session: Optional[Session] = None
) -> int:
    """
    Recompute the cost of the lines that use any of the given ingredients.

    An empty id collection is a no-op.

    Args:
        ingredient_ids: Ingredients whose price changed
        session: Optional database session

    Returns:
        Number of lines written
    """
    ids = list(dict.fromkeys(ingredient_ids))

    def _impl(s: Session) -> int:
        if not ids:
            log_operation(
                logger, "update_specific_ingredient_costs", "no_ingredients", level=logging.DEBUG
            )
            return 0

        updated = 0
        for line_model in INGREDIENT_LINE_MODELS:
            updated += _update_ingredient_lines(s, line_model, ids)
        log_operation(
            logger,
            "update_specific_ingredient_costs",
            "success",
            ingredient_ids=ids,
            lines_updated=updated,
        )
        return updated

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def _update_ingredient_lines(s: Session, line_model, ingredient_ids) -> int:
    """Write quantity x unit_cost to each line of one ingredient line table."""
    rows = get_ingredient_lines(s, line_model, ingredient_ids)
    if not rows:
        logger.debug(f"No {line_model.__tablename__} lines to update")
        return 0

    for line, ingredient in rows:
        new_cost = compute_line_cost(line.quantity, ingredient.unit_cost)
        logger.debug(
            f"{line_model.__tablename__} {line.id} - {ingredient.name}: "
            f"{line.quantity} x {ingredient.unit_cost} = {new_cost}"
        )
        line.cost = new_cost
        s.flush()

    logger.debug(f"{len(rows)} {line_model.__tablename__} lines updated")
    return len(rows)
