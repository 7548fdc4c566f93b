"""
Tests for the bulk recalculation service.

Tests cover:
- Every recipe and product recalculated
- Per-entity error isolation and error message format
- Failed entities rolled back to their savepoint, including writes made
  before the failure
"""

from decimal import Decimal

import costchain.services.cost_calculator as cost_calculator
from costchain.models import Product, ProductItem, Recipe, RecipeBaseIngredient
from costchain.services.bulk_recalculation_service import recalculate_all_aggregates
from costchain.services.database import session_scope
from costchain.services.dto import UpdateAllResult
from costchain.services.exceptions import ProductNotFound


class TestRecalculateAllAggregates:
    """Tests for recalculate_all_aggregates()."""

    def test_counts(self, boxed_bakery):
        result = recalculate_all_aggregates()

        assert result == UpdateAllResult(updated_recipes=1, updated_products=2, errors=[])
        assert not result.has_errors

    def test_uses_stored_line_costs(self, bakery):
        with session_scope() as session:
            line = session.query(RecipeBaseIngredient).filter_by(recipe_id="dough-id").one()
            line.cost = Decimal("10")

        recalculate_all_aggregates()

        with session_scope() as session:
            assert session.get(Recipe, "dough-id").unit_cost == Decimal("5")
            assert session.get(Product, "bread-id").total_cost == Decimal("5")

    def test_failing_recipe_reported_and_run_continues(self, bakery):
        with session_scope() as session:
            session.add(Recipe(id="bad-id", name="Bad Batch", portions=-2))
            session.add(Recipe(id="cake-id", name="Cake", portions=1))

        result = recalculate_all_aggregates()

        assert result.updated_recipes == 2
        assert result.updated_products == 1
        assert result.has_errors
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Recipe bad-id: Validation failed")

    def test_failed_recipe_left_unchanged(self, bakery):
        with session_scope() as session:
            session.add(
                Recipe(
                    id="bad-id",
                    name="Bad Batch",
                    portions=-2,
                    total_cost=Decimal("1.25"),
                    unit_cost=Decimal("1.25"),
                )
            )

        recalculate_all_aggregates()

        with session_scope() as session:
            assert session.get(Recipe, "bad-id").total_cost == Decimal("1.25")
            assert session.get(Recipe, "dough-id").unit_cost == Decimal("3")

    def test_failed_cascade_rolls_back_recipe_writes(self, bakery, monkeypatch):
        with session_scope() as session:
            line = session.query(RecipeBaseIngredient).filter_by(recipe_id="dough-id").one()
            line.cost = Decimal("10")

        def fail(session, product_id):
            raise ProductNotFound(product_id)

        # Fails inside the recipe cascade, after the recipe totals are flushed
        monkeypatch.setattr(cost_calculator, "recalculate_product", fail)

        result = recalculate_all_aggregates()

        assert result.errors == ["Recipe dough-id: Product with ID bread-id not found"]
        assert result.updated_recipes == 0
        assert result.updated_products == 1
        with session_scope() as session:
            recipe = session.get(Recipe, "dough-id")
            item = session.query(ProductItem).filter_by(product_id="bread-id").one()
            assert (recipe.total_cost, recipe.unit_cost) == (Decimal("6"), Decimal("3"))
            assert item.cost == Decimal("3")
            assert session.get(Product, "bread-id").total_cost == Decimal("3")

    def test_empty_database(self, test_db):
        assert recalculate_all_aggregates().to_dict() == {
            "updated_recipes": 0,
            "updated_products": 0,
            "errors": [],
        }
