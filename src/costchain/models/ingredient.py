"""
Ingredient model.

An ingredient is a purchasable raw material (flour, sugar, butter) with a
price per unit. The price is edited by users; the cost engine only reads it
and propagates it into recipe ingredient lines.
"""

from sqlalchemy import Column, String, Numeric, Index, CheckConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class Ingredient(BaseModel):
    """
    Ingredient model.

    Attributes:
        name: Ingredient name (required)
        unit_cost: Price per unit
        unit: Unit the price refers to (e.g., "kg", "un")
        brand: Optional brand name
    """

    __tablename__ = "ingredients"

    name = Column(String(200), nullable=False)
    unit_cost = Column(Numeric(12, 4), nullable=False, default=0)
    unit = Column(String(50), nullable=True)
    brand = Column(String(200), nullable=True)

    # Relationships
    base_usages = relationship(
        "RecipeBaseIngredient", back_populates="ingredient", passive_deletes=True
    )
    portion_usages = relationship(
        "RecipePortionIngredient", back_populates="ingredient", passive_deletes=True
    )

    __table_args__ = (
        Index("idx_ingredient_name", "name"),
        CheckConstraint("unit_cost >= 0", name="ck_ingredient_unit_cost_non_negative"),
    )
