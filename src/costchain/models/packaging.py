"""
Packaging model.

Packaging (boxes, bags, labels) is priced per unit like ingredients and is
consumed directly by products.
"""

from sqlalchemy import Column, String, Numeric, Index, CheckConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class Packaging(BaseModel):
    """
    Packaging model.

    Attributes:
        name: Packaging name (required)
        unit_cost: Price per unit
        type: Free-form packaging type (e.g., "box", "label")
    """

    __tablename__ = "packaging"

    name = Column(String(200), nullable=False)
    unit_cost = Column(Numeric(12, 4), nullable=False, default=0)
    type = Column(String(100), nullable=True)

    product_usages = relationship(
        "ProductPackaging", back_populates="packaging", passive_deletes=True
    )

    __table_args__ = (
        Index("idx_packaging_name", "name"),
        CheckConstraint("unit_cost >= 0", name="ck_packaging_unit_cost_non_negative"),
    )
