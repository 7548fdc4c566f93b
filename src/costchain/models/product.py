"""
Product models.

This module contains:
- Product: a sellable product with an aggregate cost
- ProductItem: a quantity of a recipe's portions used by a product
- ProductPackaging: a quantity of packaging used by a product
"""

from sqlalchemy import Column, String, Numeric, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel
from .cost_line import CostLineMixin


class Product(BaseModel):
    """
    Product model.

    Attributes:
        name: Product name (required)
        total_cost: sum of item costs + sum of packaging costs
    """

    __tablename__ = "products"

    name = Column(String(200), nullable=False)
    total_cost = Column(Numeric(14, 4), nullable=False, default=0)

    items = relationship(
        "ProductItem",
        back_populates="product",
        cascade="all, delete-orphan",
    )
    packaging_usages = relationship(
        "ProductPackaging",
        back_populates="product",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("idx_product_name", "name"),)


class ProductItem(CostLineMixin, BaseModel):
    """
    Recipe portions used by a product.

    Attributes:
        product_id: Foreign key to Product
        recipe_id: Foreign key to Recipe
        quantity: Number of recipe portions
        cost: quantity x recipe.unit_cost
    """

    __tablename__ = "product_items"

    product_id = Column(String(64), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    recipe_id = Column(String(64), ForeignKey("recipes.id", ondelete="RESTRICT"), nullable=False)

    product = relationship("Product", back_populates="items")
    recipe = relationship("Recipe", back_populates="product_items")

    __table_args__ = (
        Index("idx_product_item_product", "product_id"),
        Index("idx_product_item_recipe", "recipe_id"),
        CheckConstraint("quantity >= 0", name="ck_product_item_quantity"),
    )

    def __repr__(self) -> str:
        return (
            f"ProductItem(product_id='{self.product_id}', recipe_id='{self.recipe_id}', "
            f"quantity={self.quantity}, cost={self.cost})"
        )


class ProductPackaging(CostLineMixin, BaseModel):
    """
    Packaging used by a product.

    Attributes:
        product_id: Foreign key to Product
        packaging_id: Foreign key to Packaging
        quantity: Number of packaging units
        cost: quantity x packaging.unit_cost
    """

    __tablename__ = "product_packaging"

    product_id = Column(String(64), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    packaging_id = Column(
        String(64), ForeignKey("packaging.id", ondelete="RESTRICT"), nullable=False
    )

    product = relationship("Product", back_populates="packaging_usages")
    packaging = relationship("Packaging", back_populates="product_usages")

    __table_args__ = (
        Index("idx_product_packaging_product", "product_id"),
        Index("idx_product_packaging_packaging", "packaging_id"),
        CheckConstraint("quantity >= 0", name="ck_product_packaging_quantity"),
    )

    def __repr__(self) -> str:
        return (
            f"ProductPackaging(product_id='{self.product_id}', "
            f"packaging_id='{self.packaging_id}', quantity={self.quantity}, cost={self.cost})"
        )
