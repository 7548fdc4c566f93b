"""
Tests for recipe and product authoring.

Tests cover:
- create_recipe() / create_product() validation
- Adding ingredient lines computes line cost and recalculates the recipe
- Adding product items and packaging recalculates the product
- Changing portions cascades into products
"""

from decimal import Decimal

import pytest

from costchain.models import ProductItem, RecipePortionIngredient
from costchain.services import product_service, recipe_service
from costchain.services.database import session_scope
from costchain.services.exceptions import (
    IngredientNotFound,
    PackagingNotFound,
    ProductNotFound,
    RecipeNotFound,
    ValidationError,
)


# ============================================================================
# Recipes
# ============================================================================


class TestCreateRecipe:
    """Tests for create_recipe()."""

    def test_defaults(self, test_db):
        recipe = recipe_service.create_recipe({"name": "Shortbread"})

        fetched = recipe_service.get_recipe(recipe.id)
        assert fetched.portions == 1
        assert fetched.total_cost == Decimal("0")
        assert fetched.unit_cost == Decimal("0")

    @pytest.mark.parametrize("portions", [0, -1, 1.5, "2", True])
    def test_invalid_portions(self, test_db, portions):
        with pytest.raises(ValidationError):
            recipe_service.create_recipe({"name": "Shortbread", "portions": portions})

    def test_missing_name(self, test_db):
        with pytest.raises(ValidationError, match="Name"):
            recipe_service.create_recipe({"portions": 2})

    def test_get_missing(self, test_db):
        with pytest.raises(RecipeNotFound):
            recipe_service.get_recipe("missing")


class TestRecipeIngredientLines:
    """Tests for add_base_ingredient() / add_portion_ingredient()."""

    def test_base_line_cost(self, bakery):
        recipe = recipe_service.get_recipe("dough-id")
        assert recipe.total_cost == Decimal("6")
        assert recipe.unit_cost == Decimal("3")

    def test_portion_line_cost(self, boxed_bakery):
        with session_scope() as session:
            line = session.query(RecipePortionIngredient).filter_by(recipe_id="dough-id").one()
            assert line.cost == Decimal("1")

        assert recipe_service.get_recipe("dough-id").total_cost == Decimal("8")

    def test_zero_quantity_rejected(self, bakery):
        with pytest.raises(ValidationError, match="Quantity"):
            recipe_service.add_base_ingredient("dough-id", "flour-id", 0)

    def test_missing_ingredient(self, bakery):
        with pytest.raises(IngredientNotFound):
            recipe_service.add_portion_ingredient("dough-id", "missing", 1)

    def test_missing_recipe(self, bakery):
        with pytest.raises(RecipeNotFound):
            recipe_service.add_base_ingredient("missing", "flour-id", 1)


class TestUpdateRecipePortions:
    """Tests for update_recipe_portions()."""

    def test_cascades_into_products(self, bakery):
        recipe_service.update_recipe_portions("dough-id", 3)

        assert recipe_service.get_recipe("dough-id").unit_cost == Decimal("2")
        assert product_service.get_product("bread-id").total_cost == Decimal("2")

    def test_portion_lines_scale_with_portions(self, boxed_bakery):
        recipe_service.update_recipe_portions("dough-id", 4)

        # 6 + 4 x 1.00 = 10, unit 2.5
        recipe = recipe_service.get_recipe("dough-id")
        assert recipe.total_cost == Decimal("10")
        assert recipe.unit_cost == Decimal("2.5")

    def test_invalid(self, bakery):
        with pytest.raises(ValidationError):
            recipe_service.update_recipe_portions("dough-id", 0)


# ============================================================================
# Products
# ============================================================================


class TestProducts:
    """Tests for product authoring."""

    def test_create_empty_product(self, test_db):
        product = product_service.create_product({"name": "Sampler"})
        assert product_service.get_product(product.id).total_cost == Decimal("0")

    def test_item_cost_uses_recipe_unit_cost(self, bakery):
        product_service.create_product({"id": "duo-id", "name": "Duo"})
        product_service.add_product_item("duo-id", "dough-id", Decimal("2"))

        with session_scope() as session:
            item = session.query(ProductItem).filter_by(product_id="duo-id").one()
            assert item.cost == Decimal("6")
        assert product_service.get_product("duo-id").total_cost == Decimal("6")

    def test_packaging_added_to_total(self, boxed_bakery):
        assert product_service.get_product("bread-id").total_cost == Decimal("4.5")
        assert product_service.get_product("gift-id").total_cost == Decimal("12.25")

    def test_missing_product(self, bakery):
        with pytest.raises(ProductNotFound):
            product_service.add_product_item("missing", "dough-id", 1)

    def test_missing_packaging(self, bakery):
        with pytest.raises(PackagingNotFound):
            product_service.add_product_packaging("bread-id", "missing", 1)

    def test_negative_quantity(self, bakery):
        with pytest.raises(ValidationError):
            product_service.add_product_item("bread-id", "dough-id", -1)
