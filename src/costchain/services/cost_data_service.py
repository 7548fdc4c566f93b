"""
Cost Data Service - reads and writes the raw records the cost engine works on.

This module provides:
- Catalog listings of ingredients and packaging (with optional pagination)
- Usage line reads joined with their priced source (ingredient / packaging)
- Line cost sums for recipes and products
- The cost dependency graph and the "affected entity" lookups built on it

Functions taking a required ``session`` are building blocks for the other cost
services and run inside the caller's transaction. Functions with an optional
keyword ``session`` open their own session_scope() when none is given.
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type, Union

from sqlalchemy.orm import Session

from costchain.models import (
    Ingredient,
    Packaging,
    Product,
    ProductItem,
    ProductPackaging,
    Recipe,
    RecipeBaseIngredient,
    RecipePortionIngredient,
)
from costchain.services.cost_graph import (
    CostGraph,
    Node,
    INGREDIENT,
    PACKAGING,
    PRODUCT,
    RECIPE,
)
from costchain.services.database import session_scope
from costchain.services.dto import PaginatedResult, PaginationParams
from costchain.services.dto_utils import to_decimal
from costchain.services.logging_utils import get_service_logger

logger = get_service_logger(__name__)

IngredientLineModel = Type[Union[RecipeBaseIngredient, RecipePortionIngredient]]

INGREDIENT_LINE_MODELS: Tuple[IngredientLineModel, ...] = (
    RecipeBaseIngredient,
    RecipePortionIngredient,
)


# =============================================================================
# Catalog Listings
# =============================================================================


def fetch_ingredients(
    pagination: Optional[PaginationParams] = None, *, session: Optional[Session] = None
) -> Union[List[Dict[str, Any]], PaginatedResult[Dict[str, Any]]]:
    """
    List ingredients ordered by name.

    Args:
        pagination: Optional page to return. When None, all ingredients are
            returned as a plain list.
        session: Optional database session

    Returns:
        Dicts with id, name, unit_cost, brand, unit (a PaginatedResult of them
        when pagination is given)
    """

    def _impl(s: Session):
        query = s.query(Ingredient).order_by(Ingredient.name, Ingredient.id)
        return _list_page(query, pagination, _ingredient_to_dict)

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def fetch_packaging(
    pagination: Optional[PaginationParams] = None, *, session: Optional[Session] = None
) -> Union[List[Dict[str, Any]], PaginatedResult[Dict[str, Any]]]:
    """
    List packaging ordered by name.

    Args:
        pagination: Optional page to return
        session: Optional database session

    Returns:
        Dicts with id, name, unit_cost, type (a PaginatedResult of them when
        pagination is given)
    """

    def _impl(s: Session):
        query = s.query(Packaging).order_by(Packaging.name, Packaging.id)
        return _list_page(query, pagination, _packaging_to_dict)

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def _list_page(query, pagination: Optional[PaginationParams], to_dict):
    if pagination is None:
        return [to_dict(row) for row in query.all()]

    total = query.count()
    rows = query.offset(pagination.offset()).limit(pagination.per_page).all()
    return PaginatedResult(
        items=[to_dict(row) for row in rows],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
    )


def _ingredient_to_dict(ingredient: Ingredient) -> Dict[str, Any]:
    return {
        "id": ingredient.id,
        "name": ingredient.name,
        "unit_cost": to_decimal(ingredient.unit_cost),
        "brand": ingredient.brand,
        "unit": ingredient.unit,
    }


def _packaging_to_dict(packaging: Packaging) -> Dict[str, Any]:
    return {
        "id": packaging.id,
        "name": packaging.name,
        "unit_cost": to_decimal(packaging.unit_cost),
        "type": packaging.type,
    }


# =============================================================================
# Usage Lines
# =============================================================================


def get_ingredient_lines(
    session: Session,
    line_model: IngredientLineModel,
    ingredient_ids: Optional[Iterable[str]] = None,
) -> List[Tuple[Any, Ingredient]]:
    """
    Read recipe ingredient lines joined with their ingredient.

    Args:
        session: Database session
        line_model: RecipeBaseIngredient or RecipePortionIngredient
        ingredient_ids: Restrict to lines referencing these ingredients.
            None reads every line of the table.

    Returns:
        (line, ingredient) pairs
    """
    query = session.query(line_model, Ingredient).join(
        Ingredient, line_model.ingredient_id == Ingredient.id
    )
    if ingredient_ids is not None:
        query = query.filter(line_model.ingredient_id.in_(list(ingredient_ids)))
    return query.order_by(line_model.recipe_id, line_model.id).all()


def get_packaging_lines(
    session: Session, packaging_ids: Optional[Iterable[str]] = None
) -> List[Tuple[ProductPackaging, Packaging]]:
    """
    Read product packaging lines joined with their packaging.

    Args:
        session: Database session
        packaging_ids: Restrict to lines referencing these packaging records.
            None reads every line.

    Returns:
        (line, packaging) pairs
    """
    query = session.query(ProductPackaging, Packaging).join(
        Packaging, ProductPackaging.packaging_id == Packaging.id
    )
    if packaging_ids is not None:
        query = query.filter(ProductPackaging.packaging_id.in_(list(packaging_ids)))
    return query.order_by(ProductPackaging.product_id, ProductPackaging.id).all()


def get_product_items_for_recipe(session: Session, recipe_id: str) -> List[ProductItem]:
    """Product items that consume portions of a recipe."""
    return (
        session.query(ProductItem)
        .filter(ProductItem.recipe_id == recipe_id)
        .order_by(ProductItem.product_id, ProductItem.id)
        .all()
    )


def sum_line_costs(session: Session, line_model, owner_column, owner_id: str) -> Decimal:
    """
    Sum the stored cost of every line owned by one recipe or product.

    Summed in Decimal on the Python side; SQL SUM() over NUMERIC comes back
    as float on SQLite.

    Args:
        session: Database session
        line_model: Usage line model to read
        owner_column: The line's foreign key column to filter on
        owner_id: Owning recipe/product id

    Returns:
        Sum of line costs, Decimal("0") when there are no lines
    """
    rows = session.query(line_model.cost).filter(owner_column == owner_id).all()
    return sum((to_decimal(row[0]) for row in rows), Decimal("0"))


# =============================================================================
# Dependency Graph
# =============================================================================


def load_cost_graph(session: Session) -> CostGraph:
    """
    Build the cost dependency graph from the usage tables.

    Only id columns are read; edges are added in (source, target) id order.
    """
    graph = CostGraph()

    for line_model in INGREDIENT_LINE_MODELS:
        pairs = (
            session.query(line_model.ingredient_id, line_model.recipe_id)
            .distinct()
            .order_by(line_model.ingredient_id, line_model.recipe_id)
            .all()
        )
        for ingredient_id, recipe_id in pairs:
            graph.add_edge(Node(INGREDIENT, ingredient_id), Node(RECIPE, recipe_id))

    pairs = (
        session.query(ProductItem.recipe_id, ProductItem.product_id)
        .distinct()
        .order_by(ProductItem.recipe_id, ProductItem.product_id)
        .all()
    )
    for recipe_id, product_id in pairs:
        graph.add_edge(Node(RECIPE, recipe_id), Node(PRODUCT, product_id))

    pairs = (
        session.query(ProductPackaging.packaging_id, ProductPackaging.product_id)
        .distinct()
        .order_by(ProductPackaging.packaging_id, ProductPackaging.product_id)
        .all()
    )
    for packaging_id, product_id in pairs:
        graph.add_edge(Node(PACKAGING, packaging_id), Node(PRODUCT, product_id))

    logger.debug(f"Loaded cost graph with {len(graph)} edges")
    return graph


def _affected(
    session: Session, source_kind: str, source_ids: Sequence[str], target_kind: str, model
) -> List[Dict[str, str]]:
    """Resolve affected nodes of one kind to {"id", "name"} dicts, ordered by name."""
    if not source_ids:
        return []

    graph = load_cost_graph(session)
    nodes = graph.affected([Node(source_kind, sid) for sid in source_ids], kind=target_kind)
    if not nodes:
        return []

    rows = (
        session.query(model.id, model.name)
        .filter(model.id.in_([node.id for node in nodes]))
        .order_by(model.name, model.id)
        .all()
    )
    return [{"id": row_id, "name": name} for row_id, name in rows]


def get_recipes_affected_by_ingredients(
    ingredient_ids: Sequence[str], *, session: Optional[Session] = None
) -> List[Dict[str, str]]:
    """
    Recipes with at least one base or portion line using any given ingredient.

    Args:
        ingredient_ids: Changed ingredient ids
        session: Optional database session

    Returns:
        {"id", "name"} dicts ordered by name, each recipe once
    """

    def _impl(s: Session) -> List[Dict[str, str]]:
        return _affected(s, INGREDIENT, list(ingredient_ids), RECIPE, Recipe)

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def get_products_affected_by_recipes(
    recipe_ids: Sequence[str], *, session: Optional[Session] = None
) -> List[Dict[str, str]]:
    """
    Products with a product item using any given recipe.

    An empty recipe list returns an empty list without querying.
    """

    def _impl(s: Session) -> List[Dict[str, str]]:
        return _affected(s, RECIPE, list(recipe_ids), PRODUCT, Product)

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)


def get_products_affected_by_packaging(
    packaging_ids: Sequence[str], *, session: Optional[Session] = None
) -> List[Dict[str, str]]:
    """Products with a packaging line using any given packaging."""

    def _impl(s: Session) -> List[Dict[str, str]]:
        return _affected(s, PACKAGING, list(packaging_ids), PRODUCT, Product)

    if session is not None:
        return _impl(session)
    with session_scope() as s:
        return _impl(s)
