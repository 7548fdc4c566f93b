"""Pytest configuration and fixtures for Cost Chain tests."""

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool

import costchain.services.database as db_module
from costchain.models.base import Base


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Points the global session factory at it
    4. Drops all tables after the test completes
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    original_get_session_factory = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()

    db_module.get_session_factory = original_get_session_factory


@pytest.fixture(scope="function")
def bakery(test_db):
    """Provide the Flour / Dough / Bread chain.

    Creates:
    - Ingredient "Flour" (flour-id) at 2.00 per unit
    - Recipe "Dough" (dough-id), 2 portions, one base line of 3 Flour
      -> total 6.00, unit 3.00
    - Product "Bread" (bread-id) with 1 portion of Dough -> total 3.00
    """
    from costchain.services import catalog_service, product_service, recipe_service

    catalog_service.create_ingredient(
        {"id": "flour-id", "name": "Flour", "unit_cost": Decimal("2.00"), "unit": "kg"}
    )
    recipe_service.create_recipe({"id": "dough-id", "name": "Dough", "portions": 2})
    recipe_service.add_base_ingredient("dough-id", "flour-id", Decimal("3"))
    product_service.create_product({"id": "bread-id", "name": "Bread"})
    product_service.add_product_item("bread-id", "dough-id", Decimal("1"))

    return {
        "ingredient_id": "flour-id",
        "recipe_id": "dough-id",
        "product_id": "bread-id",
    }


@pytest.fixture(scope="function")
def boxed_bakery(bakery):
    """Extend the bakery with packaging and a per-portion ingredient.

    Adds:
    - Ingredient "Sugar" (sugar-id) at 0.50, used per portion of Dough (qty 2)
      -> Dough total 6.00 + 2 x 1.00 = 8.00, unit 4.00
    - Packaging "Box" (box-id) at 0.25, 2 per Bread
    - Bread total: 4.00 + 0.50 = 4.50
    - Product "Gift Box" (gift-id) with 3 portions of Dough and 1 Box
      -> 12.00 + 0.25 = 12.25
    """
    from costchain.services import catalog_service, product_service, recipe_service

    catalog_service.create_ingredient({"id": "sugar-id", "name": "Sugar", "unit_cost": "0.50"})
    recipe_service.add_portion_ingredient("dough-id", "sugar-id", Decimal("2"))

    catalog_service.create_packaging(
        {"id": "box-id", "name": "Box", "unit_cost": "0.25", "type": "box"}
    )
    product_service.add_product_packaging("bread-id", "box-id", Decimal("2"))

    product_service.create_product({"id": "gift-id", "name": "Gift Box"})
    product_service.add_product_item("gift-id", "dough-id", Decimal("3"))
    product_service.add_product_packaging("gift-id", "box-id", Decimal("1"))

    return dict(bakery, sugar_id="sugar-id", packaging_id="box-id", gift_id="gift-id")
