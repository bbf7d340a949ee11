"""
Pytest fixtures for warehouse engine tests.

Provides the app on an in-memory database, a per-test table wipe, and a small
world: one player/company with a warehouse in the US zone, a second company
for isolation checks, a category tree with one product, capacity levels and
a game clock.
"""

import random
from datetime import date

import pytest

from warehouse_engine import create_app
from warehouse_engine.extensions import db
from warehouse_engine.models import (
    CategoryNode,
    Company,
    Country,
    GameClock,
    InventoryItem,
    MetricLevelConfig,
    Player,
    PlayerWallet,
    ProductTemplate,
    Warehouse,
)
from warehouse_engine.models.metrics import BUILDING_ROLE_WAREHOUSE, METRIC_SALES_COUNT


GAME_DAY = date(2026, 3, 2)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    # Clear all data but keep schema
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    # Cleanup after test
    db.session.rollback()
    db.session.remove()


@pytest.fixture(scope='function')
def level_configs(db_session):
    """Daily capacity per tier: 100, 250, 500, 1000, 2000."""
    for level, units in {1: 100, 2: 250, 3: 500, 4: 1000, 5: 2000}.items():
        db_session.add(MetricLevelConfig(
            building_role=BUILDING_ROLE_WAREHOUSE,
            metric_type=METRIC_SALES_COUNT,
            level=level,
            max_allowed=units,
        ))
    db_session.commit()


@pytest.fixture(scope='function')
def country_us(db_session):
    country = Country(code="US", name="United States", salary_multiplier=1.0)
    db_session.add(country)
    db_session.commit()
    return country


@pytest.fixture(scope='function')
def player_a(db_session):
    player = Player(display_name="Player A")
    db_session.add(player)
    db_session.commit()
    return player


@pytest.fixture(scope='function')
def company_a(db_session, player_a):
    """Create Company A (first tenant)."""
    company = Company(player_id=player_a.id, name="Acme Trading")
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture(scope='function')
def company_b(db_session):
    """Create Company B (second tenant) with its own player."""
    player = Player(display_name="Player B")
    db_session.add(player)
    db_session.flush()
    company = Company(player_id=player.id, name="Beta Goods")
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture(scope='function')
def game_clock(db_session, company_a):
    clock = GameClock(company_id=company_a.id, current_day_key=GAME_DAY)
    db_session.add(clock)
    db_session.commit()
    return clock


@pytest.fixture(scope='function')
def warehouse_a(db_session, company_a, country_us, level_configs, game_clock):
    """US warehouse of Company A (tier 1, capacity 100)."""
    warehouse = Warehouse(company_id=company_a.id, country_id=country_us.id, market_zone="USA")
    db_session.add(warehouse)
    db_session.commit()
    return warehouse


@pytest.fixture(scope='function')
def warehouse_b(db_session, company_b, country_us):
    """Warehouse of Company B."""
    warehouse = Warehouse(company_id=company_b.id, country_id=country_us.id, name="Beta Depot", market_zone="USA")
    db_session.add(warehouse)
    db_session.commit()
    return warehouse


@pytest.fixture(scope='function')
def category_tree(db_session):
    """L1 Home > L2 Kitchen > L3 Cookware. Returns (l2, l3)."""
    l1 = CategoryNode(level="L1", name="Home")
    db_session.add(l1)
    db_session.flush()
    l2 = CategoryNode(level="L2", name="Kitchen", parent_id=l1.id)
    db_session.add(l2)
    db_session.flush()
    l3 = CategoryNode(level="L3", name="Cookware", parent_id=l2.id)
    db_session.add(l3)
    db_session.commit()
    return l2, l3


@pytest.fixture(scope='function')
def product(db_session, category_tree):
    """Standard-quality product with a 10.00 suggested price."""
    _, l3 = category_tree
    template = ProductTemplate(
        code="PAN-001",
        name="Frying Pan",
        category_id=l3.id,
        quality="STANDARD",
        suggested_sale_price_cents=1000,
    )
    db_session.add(template)
    db_session.commit()
    return template


@pytest.fixture(scope='function')
def inventory_item(db_session, warehouse_a, product):
    """1000 units on hand at an average cost of 10 cents."""
    item = InventoryItem(
        warehouse_id=warehouse_a.id,
        product_template_id=product.id,
        qty_on_hand=1000,
        qty_reserved=0,
        avg_unit_cost_cents=10,
        last_unit_cost_cents=10,
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture(scope='function')
def listing(db_session, company_a, warehouse_a, inventory_item):
    """Listing of inventory_item at the suggested price (no band configured)."""
    from warehouse_engine.services.listing_service import upsert_listing

    return upsert_listing(
        company_id=company_a.id,
        warehouse_id=warehouse_a.id,
        inventory_item_id=inventory_item.id,
        sale_price_cents=1000,
        rng=random.Random(7),
    )


@pytest.fixture(scope='function')
def funded_wallet(db_session, player_a):
    """Player A holds 1,000.00 USD."""
    wallet = PlayerWallet(player_id=player_a.id, balance_usd_cents=100_000, balance_xp=0, balance_diamond=0)
    db_session.add(wallet)
    db_session.commit()
    return wallet
