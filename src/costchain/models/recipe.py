"""
Recipe models.

This module contains:
- Recipe: a batch recipe with a portion count and aggregate costs
- RecipeBaseIngredient: ingredient consumed once per batch
- RecipePortionIngredient: ingredient consumed once per portion
"""

from sqlalchemy import (
    Column,
    String,
    Integer,
    Numeric,
    ForeignKey,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from .cost_line import CostLineMixin


class Recipe(BaseModel):
    """
    Recipe model.

    Attributes:
        name: Recipe name (required)
        portions: Number of portions one batch yields
        total_cost: Aggregate batch cost (written by the cost calculator)
        unit_cost: Cost per portion, total_cost / portions
    """

    __tablename__ = "recipes"

    name = Column(String(200), nullable=False)
    portions = Column(Integer, nullable=True, default=1)
    total_cost = Column(Numeric(14, 4), nullable=False, default=0)
    unit_cost = Column(Numeric(14, 4), nullable=False, default=0)

    # Relationships
    base_ingredients = relationship(
        "RecipeBaseIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
    )
    portion_ingredients = relationship(
        "RecipePortionIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
    )
    product_items = relationship("ProductItem", back_populates="recipe")

    __table_args__ = (Index("idx_recipe_name", "name"),)


class RecipeBaseIngredient(CostLineMixin, BaseModel):
    """
    Ingredient consumed once per recipe batch, regardless of portion count.

    Attributes:
        recipe_id: Foreign key to Recipe
        ingredient_id: Foreign key to Ingredient
        quantity: Amount used per batch
        cost: quantity x ingredient.unit_cost
    """

    __tablename__ = "recipe_base_ingredients"

    recipe_id = Column(String(64), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    ingredient_id = Column(
        String(64), ForeignKey("ingredients.id", ondelete="RESTRICT"), nullable=False
    )

    recipe = relationship("Recipe", back_populates="base_ingredients")
    ingredient = relationship("Ingredient", back_populates="base_usages")

    __table_args__ = (
        Index("idx_recipe_base_ingredient_recipe", "recipe_id"),
        Index("idx_recipe_base_ingredient_ingredient", "ingredient_id"),
        CheckConstraint("quantity >= 0", name="ck_recipe_base_ingredient_quantity"),
    )

    def __repr__(self) -> str:
        return (
            f"RecipeBaseIngredient(recipe_id='{self.recipe_id}', "
            f"ingredient_id='{self.ingredient_id}', quantity={self.quantity}, cost={self.cost})"
        )


class RecipePortionIngredient(CostLineMixin, BaseModel):
    """
    Ingredient consumed once per portion of a recipe.

    Attributes:
        recipe_id: Foreign key to Recipe
        ingredient_id: Foreign key to Ingredient
        quantity: Amount used per portion
        cost: quantity x ingredient.unit_cost (per portion)
    """

    __tablename__ = "recipe_portion_ingredients"

    recipe_id = Column(String(64), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    ingredient_id = Column(
        String(64), ForeignKey("ingredients.id", ondelete="RESTRICT"), nullable=False
    )

    recipe = relationship("Recipe", back_populates="portion_ingredients")
    ingredient = relationship("Ingredient", back_populates="portion_usages")

    __table_args__ = (
        Index("idx_recipe_portion_ingredient_recipe", "recipe_id"),
        Index("idx_recipe_portion_ingredient_ingredient", "ingredient_id"),
        CheckConstraint("quantity >= 0", name="ck_recipe_portion_ingredient_quantity"),
    )

    def __repr__(self) -> str:
        return (
            f"RecipePortionIngredient(recipe_id='{self.recipe_id}', "
            f"ingredient_id='{self.ingredient_id}', quantity={self.quantity}, cost={self.cost})"
        )
