"""
Product Service - product authoring with costs kept current.

Adding a recipe item or a packaging line computes the line cost from the
recipe's unit cost / packaging price and recalculates the product total.
"""

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from costchain.models import Product, ProductItem, ProductPackaging
from costchain.services.catalog_service import get_packaging
from costchain.services.cost_calculator import compute_line_cost, recalculate_product
from costchain.services.database import session_scope
from costchain.services.dto_utils import Number, to_decimal
from costchain.services.exceptions import ProductNotFound, ValidationError
from costchain.services.logging_utils import get_service_logger, log_operation
from costchain.services.recipe_service import get_recipe
from costchain.utils.validators import validate_positive_number, validate_product_data

logger = get_service_logger(__name__)


def create_product(data: Dict[str, Any], *, session: Optional[Session] = None) -> Product:
    """
    Create a product with no items or packaging (zero cost).

    Args:
        data: Dictionary with name (required) and id (optional)
        session: Optional database session

    Returns:
        The created Product

    Raises:
        ValidationError: If the name is missing
    """
    is_valid, errors = validate_product_data(data)
    if not is_valid:
        raise ValidationError(errors)

    def _impl(s: Session) -> Product:
        product = Product(name=data["name"].strip())
        if data.get("id"):
            product.id = data["id"]
        s.add(product)
        s.flush()
        log_operation(logger, "create_product", "success", product_id=product.id)
        return product

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def get_product(product_id: str, *, session: Optional[Session] = None) -> Product:
    """
    Get a product by ID.

    Raises:
        ProductNotFound: If the product doesn't exist
    """

    def _impl(s: Session) -> Product:
        product = s.get(Product, product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def add_product_item(
    product_id: str,
    recipe_id: str,
    quantity: Number,
    *,
    session: Optional[Session] = None,
) -> ProductItem:
    """
    Add portions of a recipe to a product.

    The item cost is quantity x the recipe's stored unit cost.

    Raises:
        ProductNotFound / RecipeNotFound: If either doesn't exist
        ValidationError: If quantity is not a positive number
    """
    quantity = _validated_quantity(quantity)

    def _impl(s: Session) -> ProductItem:
        get_product(product_id, session=s)
        recipe = get_recipe(recipe_id, session=s)

        item = ProductItem(
            product_id=product_id,
            recipe_id=recipe_id,
            quantity=quantity,
            cost=compute_line_cost(quantity, recipe.unit_cost),
        )
        s.add(item)
        s.flush()

        recalculate_product(s, product_id)
        log_operation(
            logger, "add_product_item", "success", product_id=product_id, recipe_id=recipe_id
        )
        return item

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def add_product_packaging(
    product_id: str,
    packaging_id: str,
    quantity: Number,
    *,
    session: Optional[Session] = None,
) -> ProductPackaging:
    """
    Add packaging to a product.

    Raises:
        ProductNotFound / PackagingNotFound: If either doesn't exist
        ValidationError: If quantity is not a positive number
    """
    quantity = _validated_quantity(quantity)

    def _impl(s: Session) -> ProductPackaging:
        get_product(product_id, session=s)
        packaging = get_packaging(packaging_id, session=s)

        line = ProductPackaging(
            product_id=product_id,
            packaging_id=packaging_id,
            quantity=quantity,
            cost=compute_line_cost(quantity, packaging.unit_cost),
        )
        s.add(line)
        s.flush()

        recalculate_product(s, product_id)
        log_operation(
            logger,
            "add_product_packaging",
            "success",
            product_id=product_id,
            packaging_id=packaging_id,
        )
        return line

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def _validated_quantity(quantity: Number):
    is_valid, error = validate_positive_number(quantity, "Quantity")
    if not is_valid:
        raise ValidationError([error])
    return to_decimal(quantity)
