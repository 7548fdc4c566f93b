"""
Tests for the cost calculator.

Tests cover:
- Pure formulas (line cost, portions, recipe totals, product total)
- recalculate_recipe_cost() including the product item cascade
- recalculate_product_cost()
- Portion defaulting and negative portions
- Rounding of the unit cost used by product items
- Not-found errors
"""

import logging
from decimal import Decimal

import pytest

from costchain.models import Product, ProductItem, Recipe, RecipeBaseIngredient
from costchain.services import catalog_service, product_service, recipe_service
from costchain.services.cost_calculator import (
    compute_line_cost,
    compute_product_total,
    compute_recipe_totals,
    recalculate_product_cost,
    recalculate_recipe_cost,
    resolve_portions,
)
from costchain.services.database import session_scope
from costchain.services.exceptions import ProductNotFound, RecipeNotFound, ValidationError


# ============================================================================
# Pure Formulas
# ============================================================================


class TestComputeLineCost:
    """Tests for compute_line_cost()."""

    def test_quantity_times_unit_cost(self):
        assert compute_line_cost(3, Decimal("2.00")) == Decimal("6.0000")

    def test_rounds_half_up_to_four_places(self):
        assert compute_line_cost(Decimal("0.5"), Decimal("0.00015")) == Decimal("0.0001")

    def test_floats_converted_exactly(self):
        assert compute_line_cost(0.1, 3) == Decimal("0.3000")

    def test_missing_unit_cost_is_zero(self):
        assert compute_line_cost(5, None) == Decimal("0")


class TestResolvePortions:
    """Tests for resolve_portions()."""

    @pytest.mark.parametrize("portions", [None, 0])
    def test_missing_or_zero_defaults_to_one(self, portions):
        assert resolve_portions(portions) == 1

    def test_positive_kept(self):
        assert resolve_portions(12) == 12

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="must not be negative"):
            resolve_portions(-3)


class TestComputeRecipeTotals:
    """Tests for compute_recipe_totals()."""

    def test_base_only(self):
        assert compute_recipe_totals(Decimal("6"), Decimal("0"), 2) == (
            Decimal("6.0000"),
            Decimal("3.0000"),
        )

    def test_portion_cost_multiplied_by_portions(self):
        total, unit = compute_recipe_totals(Decimal("6"), Decimal("1"), 4)
        assert total == Decimal("10.0000")
        assert unit == Decimal("2.5000")

    def test_unit_cost_rounded(self):
        total, unit = compute_recipe_totals(Decimal("10"), Decimal("0"), 3)
        assert total == Decimal("10.0000")
        assert unit == Decimal("3.3333")


class TestComputeProductTotal:
    """Tests for compute_product_total()."""

    def test_items_plus_packaging(self):
        assert compute_product_total(Decimal("4"), Decimal("0.5")) == Decimal("4.5000")

    def test_empty_product_is_zero(self):
        assert compute_product_total(Decimal("0"), Decimal("0")) == Decimal("0")


# ============================================================================
# Recipe Recalculation
# ============================================================================


class TestRecalculateRecipeCost:
    """Tests for recalculate_recipe_cost()."""

    def test_stores_totals(self, bakery):
        result = recalculate_recipe_cost("dough-id")

        assert result.portions == 2
        assert result.total_base_cost == Decimal("6")
        assert result.total_portion_cost == Decimal("0")
        assert result.total_cost == Decimal("6")
        assert result.unit_cost == Decimal("3")

        with session_scope() as session:
            recipe = session.get(Recipe, "dough-id")
            assert recipe.total_cost == Decimal("6")
            assert recipe.unit_cost == Decimal("3")

    def test_includes_portion_lines(self, boxed_bakery):
        result = recalculate_recipe_cost("dough-id")
        assert result.total_portion_cost == Decimal("1")
        assert result.total_cost == Decimal("8")
        assert result.unit_cost == Decimal("4")

    def test_cascades_into_product_items(self, bakery, test_db):
        # Stale line cost, as after a price change with no chain run
        with session_scope() as session:
            line = session.query(RecipeBaseIngredient).filter_by(recipe_id="dough-id").one()
            line.cost = Decimal("9")

        result = recalculate_recipe_cost("dough-id")

        assert result.unit_cost == Decimal("4.5")
        assert result.product_ids == ["bread-id"]
        with session_scope() as session:
            item = session.query(ProductItem).filter_by(product_id="bread-id").one()
            assert item.cost == Decimal("4.5")
            assert session.get(Product, "bread-id").total_cost == Decimal("4.5")

    def test_unused_recipe_has_no_cascade(self, test_db):
        with session_scope() as session:
            session.add(Recipe(id="plain-id", name="Plain", portions=1))

        result = recalculate_recipe_cost("plain-id")

        assert result.total_cost == Decimal("0")
        assert result.product_ids == []

    def test_items_use_rounded_unit_cost(self, test_db):
        catalog_service.create_ingredient(
            {"id": "butter-id", "name": "Butter", "unit_cost": "10"}
        )
        recipe_service.create_recipe({"id": "tray-id", "name": "Tray Bake", "portions": 3})
        recipe_service.add_base_ingredient("tray-id", "butter-id", 1)
        product_service.create_product({"id": "whole-id", "name": "Whole Tray"})
        product_service.add_product_item("whole-id", "tray-id", 3)

        result = recalculate_recipe_cost("tray-id")

        assert result.total_cost == Decimal("10.0000")
        assert result.unit_cost == Decimal("3.3333")
        with session_scope() as session:
            assert session.get(Product, "whole-id").total_cost == Decimal("9.9999")

    @pytest.mark.parametrize("portions", [None, 0])
    def test_missing_portions_costed_as_one(self, bakery, portions, caplog):
        with session_scope() as session:
            session.query(Recipe).filter_by(id="dough-id").update({"portions": portions})

        with caplog.at_level(logging.WARNING):
            result = recalculate_recipe_cost("dough-id")

        assert result.portions == 1
        assert result.total_cost == Decimal("6")
        assert result.unit_cost == Decimal("6")
        assert "recalculate_recipe_cost: portions_defaulted" in caplog.text

    def test_negative_portions_rejected(self, bakery):
        with session_scope() as session:
            session.query(Recipe).filter_by(id="dough-id").update({"portions": -2})

        with pytest.raises(ValidationError):
            recalculate_recipe_cost("dough-id")

        with session_scope() as session:
            assert session.get(Recipe, "dough-id").unit_cost == Decimal("3")

    def test_not_found(self, test_db):
        with pytest.raises(RecipeNotFound):
            recalculate_recipe_cost("nonexistent")

    def test_joins_caller_session(self, bakery):
        with session_scope() as session:
            line = session.query(RecipeBaseIngredient).filter_by(recipe_id="dough-id").one()
            line.cost = Decimal("12")
            session.flush()

            result = recalculate_recipe_cost("dough-id", session=session)

            assert result.unit_cost == Decimal("6")
            assert session.get(Product, "bread-id").total_cost == Decimal("6")


# ============================================================================
# Product Recalculation
# ============================================================================


class TestRecalculateProductCost:
    """Tests for recalculate_product_cost()."""

    def test_items_and_packaging(self, boxed_bakery):
        assert recalculate_product_cost("bread-id") == Decimal("4.5")
        assert recalculate_product_cost("gift-id") == Decimal("12.25")

    def test_uses_stored_item_costs(self, bakery):
        with session_scope() as session:
            item = session.query(ProductItem).filter_by(product_id="bread-id").one()
            item.cost = Decimal("7.25")

        assert recalculate_product_cost("bread-id") == Decimal("7.25")
        with session_scope() as session:
            assert session.get(Product, "bread-id").total_cost == Decimal("7.25")

    def test_empty_product(self, test_db):
        with session_scope() as session:
            session.add(Product(id="empty-id", name="Empty"))

        assert recalculate_product_cost("empty-id") == Decimal("0")

    def test_not_found(self, test_db):
        with pytest.raises(ProductNotFound):
            recalculate_product_cost("nonexistent")
