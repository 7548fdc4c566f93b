"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .ingredient import Ingredient
from .packaging import Packaging
from .recipe import Recipe, RecipeBaseIngredient, RecipePortionIngredient
from .product import Product, ProductItem, ProductPackaging

__all__ = [
    "Base",
    "BaseModel",
    # Priced sources
    "Ingredient",
    "Packaging",
    # Recipes
    "Recipe",
    "RecipeBaseIngredient",
    "RecipePortionIngredient",
    # Products
    "Product",
    "ProductItem",
    "ProductPackaging",
]
