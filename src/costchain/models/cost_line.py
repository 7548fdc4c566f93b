"""
Shared columns for usage lines that carry a derived cost.

Every usage line (recipe ingredient lines, product recipe lines, product
packaging lines) stores the quantity consumed and the derived
``cost = quantity x unit_cost`` of the referenced entity. The cost column is
written only by the cost services.
"""

from sqlalchemy import Column, Numeric


class CostLineMixin:
    """Quantity and derived cost columns."""

    quantity = Column(Numeric(12, 4), nullable=False)
    cost = Column(Numeric(14, 4), nullable=False, default=0)
