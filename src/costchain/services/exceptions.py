"""Service layer exception classes for Cost Chain.

This module defines the custom exceptions used by the service layer to
provide consistent error handling across the application.

Exception Hierarchy:
    ServiceError (base)
    ├── IngredientNotFound
    ├── PackagingNotFound
    ├── RecipeNotFound
    ├── ProductNotFound
    ├── ValidationError
    └── DatabaseError
"""


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


class IngredientNotFound(ServiceError):
    """Raised when an ingredient cannot be found by ID.

    Example:
        >>> raise IngredientNotFound("flour-id")
        IngredientNotFound: Ingredient with ID flour-id not found
    """

    def __init__(self, ingredient_id: str):
        self.ingredient_id = ingredient_id
        super().__init__(f"Ingredient with ID {ingredient_id} not found")


class PackagingNotFound(ServiceError):
    """Raised when a packaging record cannot be found by ID."""

    def __init__(self, packaging_id: str):
        self.packaging_id = packaging_id
        super().__init__(f"Packaging with ID {packaging_id} not found")


class RecipeNotFound(ServiceError):
    """Raised when a recipe cannot be found by ID."""

    def __init__(self, recipe_id: str):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe with ID {recipe_id} not found")


class ProductNotFound(ServiceError):
    """Raised when a product cannot be found by ID.

    Example:
        >>> raise ProductNotFound("bread-id")
        ProductNotFound: Product with ID bread-id not found
    """

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found")


class ValidationError(ServiceError):
    """Raised when data validation fails.

    Args:
        errors: List of human-readable validation messages
    """

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class DatabaseError(ServiceError):
    """Raised when a database read or write fails.

    Args:
        message: What the service was doing when the failure happened
        original_error: The underlying driver/ORM exception
    """

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
