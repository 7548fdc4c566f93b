"""Data Transfer Objects for service layer.

This module provides type-safe data structures returned by the cost update
services, and the pagination containers used by the catalog listings.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Generic, List, TypeVar

T = TypeVar("T")


@dataclass
class UpdateChainResult:
    """Summary of a targeted chain recalculation.

    Attributes:
        affected_recipes: Number of recipes recalculated
        affected_products: Number of products whose cost depends on the change
        recipe_ids: IDs of the recalculated recipes
        product_ids: IDs of the affected products

    Examples:
        >>> UpdateChainResult(0, 1, [], ["bread"]).to_dict()["affected_products"]
        1
    """

    affected_recipes: int = 0
    affected_products: int = 0
    recipe_ids: List[str] = field(default_factory=list)
    product_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "affected_recipes": self.affected_recipes,
            "affected_products": self.affected_products,
            "recipe_ids": list(self.recipe_ids),
            "product_ids": list(self.product_ids),
        }


@dataclass
class UpdateAllResult:
    """Summary of a full recalculation.

    Attributes:
        updated_recipes: Recipes recalculated successfully
        updated_products: Products recalculated successfully
        errors: One message per entity that failed; the run continues past them
    """

    updated_recipes: int = 0
    updated_products: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updated_recipes": self.updated_recipes,
            "updated_products": self.updated_products,
            "errors": list(self.errors),
        }


@dataclass
class RecipeCostResult:
    """Outcome of recalculating one recipe.

    Attributes:
        recipe_id: Recipe that was recalculated
        portions: Portion count used for the calculation (after defaulting)
        total_base_cost: Sum of base ingredient line costs
        total_portion_cost: Sum of per-portion ingredient line costs
        total_cost: total_base_cost + portions * total_portion_cost
        unit_cost: total_cost / portions
        product_ids: Products recalculated by the cascade
    """

    recipe_id: str
    portions: int
    total_base_cost: Decimal
    total_portion_cost: Decimal
    total_cost: Decimal
    unit_cost: Decimal
    product_ids: List[str] = field(default_factory=list)


@dataclass
class PaginationParams:
    """Pagination parameters for list operations.

    Attributes:
        page: Page number (1-indexed, default 1)
        per_page: Items per page (default 50, max 1000)

    Raises:
        ValueError: If page < 1, per_page < 1, or per_page > 1000
    """

    page: int = 1
    per_page: int = 50

    def __post_init__(self) -> None:
        """Validate pagination parameters."""
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.per_page < 1:
            raise ValueError("per_page must be >= 1")
        if self.per_page > 1000:
            raise ValueError("per_page must be <= 1000")

    def offset(self) -> int:
        """Calculate SQL OFFSET value.

        Examples:
            >>> PaginationParams(page=1, per_page=50).offset()
            0
            >>> PaginationParams(page=3, per_page=25).offset()
            50
        """
        return (self.page - 1) * self.per_page


@dataclass
class PaginatedResult(Generic[T]):
    """Generic paginated result container.

    Attributes:
        items: List of items for this page
        total: Total number of items across all pages
        page: Current page number (1-indexed)
        per_page: Items per page
    """

    items: List[T]
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        """Total number of pages (minimum 1, even for empty results).

        Examples:
            >>> PaginatedResult(items=[], total=101, page=1, per_page=50).pages
            3
            >>> PaginatedResult(items=[], total=0, page=1, per_page=50).pages
            1
        """
        if self.total == 0:
            return 1
        return (self.total + self.per_page - 1) // self.per_page

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 1
