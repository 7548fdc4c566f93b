"""
Packaging Cost Updater - refreshes the cost of product packaging lines.

Each product packaging line stores ``cost = quantity x packaging.unit_cost``.
Lines are rewritten one at a time; the first failure propagates.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from costchain.services.cost_calculator import compute_line_cost
from costchain.services.cost_data_service import get_packaging_lines
from costchain.services.database import session_scope
from costchain.services.logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)


def update_all_packaging_costs(*, session: Optional[Session] = None) -> int:
    """
    Recompute the cost of every product packaging line.

    Returns:
        Number of lines written
    """

    def _impl(s: Session) -> int:
        updated = _update_packaging_lines(s, None)
        log_operation(logger, "update_all_packaging_costs", "success", lines_updated=updated)
        return updated

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def update_specific_packaging_costs(
    packaging_ids: Iterable[str], *, session: Optional[Session] = None
) -> int:
    """
    Recompute the cost of the lines that use any of the given packaging.

    An empty id collection is a no-op.

    Args:
        packaging_ids: Packaging whose price changed
        session: Optional database session

    Returns:
        Number of lines written
    """
    ids = list(dict.fromkeys(packaging_ids))

    def _impl(s: Session) -> int:
        if not ids:
            log_operation(
                logger, "update_specific_packaging_costs", "no_packaging", level=logging.DEBUG
            )
            return 0

        updated = _update_packaging_lines(s, ids)
        log_operation(
            logger,
            "update_specific_packaging_costs",
            "success",
            packaging_ids=ids,
            lines_updated=updated,
        )
        return updated

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def _update_packaging_lines(s: Session, packaging_ids) -> int:
    rows = get_packaging_lines(s, packaging_ids)
    if not rows:
        logger.debug("No product packaging lines to update")
        return 0

    for line, packaging in rows:
        new_cost = compute_line_cost(line.quantity, packaging.unit_cost)
        logger.debug(
            f"product_packaging {line.id} - {packaging.name}: "
            f"{line.quantity} x {packaging.unit_cost} = {new_cost}"
        )
        line.cost = new_cost
        s.flush()

    logger.debug(f"{len(rows)} product packaging lines updated")
    return len(rows)
