"""
Integration tests for the cost chain on a file-backed SQLite database.

Tests cover:
- Engine setup (foreign keys, WAL) and table creation
- Authoring -> price edits -> chain recalculation -> full recalculation
- Savepoint isolation of the bulk recalculation on a real file database,
  including rollback of writes made before the failure
"""

from decimal import Decimal

import pytest
from sqlalchemy import text

import costchain.services.cost_calculator as cost_calculator
import costchain.services.database as db_module
from costchain.models import Product, ProductItem, Recipe, RecipeBaseIngredient
from costchain.services import (
    recalculate_all_costs,
    recalculate_ingredient_chain,
    recalculate_packaging_chain,
)
from costchain.services import catalog_service, product_service, recipe_service
from costchain.services.database import (
    create_database_engine,
    init_database,
    session_scope,
    verify_database,
)
from costchain.services.exceptions import ProductNotFound


@pytest.fixture
def file_db(tmp_path, monkeypatch):
    """Point the services at a fresh SQLite file."""
    engine = create_database_engine(f"sqlite:///{tmp_path / 'costs.db'}")
    init_database(engine)
    monkeypatch.setattr(db_module, "_engine", engine)
    monkeypatch.setattr(db_module, "_SessionFactory", None)

    yield engine

    db_module._SessionFactory = None
    engine.dispose()


def _costs():
    with session_scope() as session:
        recipes = {r.id: (r.total_cost, r.unit_cost) for r in session.query(Recipe).all()}
        products = {p.id: p.total_cost for p in session.query(Product).all()}
    return recipes, products


class TestDatabaseSetup:
    """Tests for engine configuration."""

    def test_pragmas(self, file_db):
        with file_db.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
            assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"

    def test_tables_created(self, file_db):
        assert verify_database()


class TestCostChainFlow:
    """End-to-end pricing workflow."""

    def test_price_edits_flow_through(self, file_db):
        catalog_service.create_ingredient({"id": "flour", "name": "Flour", "unit_cost": "2"})
        catalog_service.create_ingredient({"id": "egg", "name": "Egg", "unit_cost": "0.30"})
        catalog_service.create_packaging({"id": "tray", "name": "Tray", "unit_cost": "0.20"})

        recipe_service.create_recipe({"id": "muffin", "name": "Muffin Batter", "portions": 12})
        recipe_service.add_base_ingredient("muffin", "flour", "1.5")
        recipe_service.add_portion_ingredient("muffin", "egg", "0.25")

        product_service.create_product({"id": "six", "name": "Six Muffins"})
        product_service.add_product_item("six", "muffin", 6)
        product_service.add_product_packaging("six", "tray", 1)

        # 3.00 + 12 x 0.075 = 3.90, 0.325 per muffin
        recipes, products = _costs()
        assert recipes["muffin"] == (Decimal("3.9"), Decimal("0.325"))
        assert products["six"] == Decimal("2.15")

        catalog_service.update_ingredient_unit_cost("egg", "0.50", recalculate=False)
        catalog_service.update_packaging_unit_cost("tray", "0.35", recalculate=False)
        recalculate_ingredient_chain(["egg"])
        recalculate_packaging_chain(["tray"])

        # 3.00 + 12 x 0.125 = 4.50, 0.375 per muffin; 6 x 0.375 + 0.35
        recipes, products = _costs()
        assert recipes["muffin"] == (Decimal("4.5"), Decimal("0.375"))
        assert products["six"] == Decimal("2.6")

        result = recalculate_all_costs()
        assert result.errors == []
        assert _costs() == (recipes, products)

    def test_bulk_isolation(self, file_db):
        catalog_service.create_ingredient({"id": "flour", "name": "Flour", "unit_cost": "2"})
        recipe_service.create_recipe({"id": "good", "name": "Good", "portions": 2})
        recipe_service.add_base_ingredient("good", "flour", 1)
        with session_scope() as session:
            session.add(Recipe(id="bad", name="Bad", portions=-5))

        result = recalculate_all_costs()

        assert result.updated_recipes == 1
        assert result.errors and result.errors[0].startswith("Recipe bad:")
        recipes, _ = _costs()
        assert recipes["good"] == (Decimal("2"), Decimal("1"))

    def test_savepoint_undoes_partial_recipe_writes(self, file_db, monkeypatch):
        catalog_service.create_ingredient({"id": "flour", "name": "Flour", "unit_cost": "2"})
        recipe_service.create_recipe({"id": "good", "name": "Good", "portions": 2})
        recipe_service.add_base_ingredient("good", "flour", 1)
        product_service.create_product({"id": "loaf", "name": "Loaf"})
        product_service.add_product_item("loaf", "good", 1)
        catalog_service.update_ingredient_unit_cost("flour", "4", recalculate=False)

        def fail(session, product_id):
            raise ProductNotFound(product_id)

        monkeypatch.setattr(cost_calculator, "recalculate_product", fail)

        result = recalculate_all_costs()

        assert result.errors == ["Recipe good: Product with ID loaf not found"]
        # The line refresh is kept, the recipe and its cascade are not
        recipes, products = _costs()
        assert recipes["good"] == (Decimal("2"), Decimal("1"))
        assert products["loaf"] == Decimal("1")
        with session_scope() as session:
            line = session.query(RecipeBaseIngredient).filter_by(recipe_id="good").one()
            item = session.query(ProductItem).filter_by(product_id="loaf").one()
            assert line.cost == Decimal("4")
            assert item.cost == Decimal("1")
