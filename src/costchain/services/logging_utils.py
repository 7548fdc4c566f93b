"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across the cost update services.

Usage:
    from costchain.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="recalculate_ingredient_chain",
        outcome="success",
        affected_recipes=3,
        affected_products=5,
    )
"""

import logging
from typing import Any


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger named 'costchain.services.<module>'.

    Example:
        >>> get_service_logger("costchain.services.cost_calculator").name
        'costchain.services.cost_calculator'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"costchain.services.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The message reads "<operation>: <outcome>" and the context is attached
    through the 'extra' parameter for structured handlers.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "recalculate_recipe_cost")
        outcome: Outcome description (e.g., "success", "portions_defaulted", "error")
        level: Log level (default: INFO). Use DEBUG for per-row logs.
        **context: Additional context fields (entity IDs, counts, error details)
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
