"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.

Environment variables are set before any application module is imported:
config.py reads them at import time and db.py creates its engine from
DB_URL at import time.
"""

import os
import sys
import tempfile
from datetime import datetime, time, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

_TEST_DB_DIR = tempfile.mkdtemp(prefix="restaurant-tests-")

os.environ["RUNTIME_ENVIRONMENT"] = "TEST"
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ["CURRENCY"] = "INR"
os.environ["DEFAULT_TAX_RATE"] = "5.00"
os.environ["DEFAULT_DELIVERY_CHARGE"] = "25.00"
os.environ["RESTAURANT_TIMEZONE"] = "Asia/Kolkata"
os.environ["RESTAURANT_STATUS_TTL_SECONDS"] = "0"
os.environ["PAYMENT_TEST_MODE"] = "true"
os.environ["PAYMENT_WEBHOOK_SECRET"] = "test_webhook_secret_0123456789abcdef"
os.environ["STAFF_API_TOKEN"] = "test_staff_token_0123456789abcdef0123"
os.environ["PUSH_NOTIFICATIONS_ENABLED"] = "false"
os.environ["TOKEN"] = ""
os.environ["ADMIN_ID_LIST"] = ""
os.environ["MAX_ORDERS_PER_USER_PER_HOUR"] = "3"
os.environ["MAX_PAYMENT_INITIATIONS_PER_HOUR"] = "5"

STAFF_TOKEN = os.environ["STAFF_API_TOKEN"]


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def db_engine():
    """Fresh schema in the file-backed test database."""
    import db
    from models.base import Base
    from services.restaurant import RestaurantStatusService

    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    RestaurantStatusService.invalidate_cache()

    yield db.engine

    await db.engine.dispose()


@pytest_asyncio.fixture
async def session(db_engine):
    """Database session on the test database."""
    import db

    async with db.session_maker() as test_session:
        yield test_session
        await test_session.rollback()


@pytest_asyncio.fixture
async def seeded(db_engine):
    """
    Catalog, delivery zones, users, addresses, offers and all-day opening hours.

    Ids are fixed so tests can refer to them directly:
    - item 1 "Paneer Tikka" (Mains, 5% GST): size 10 Full 299.00, size 11 Half (unavailable)
      add-on 3 Extra Cheese 20.00 (item link), add-on 4 Mint Chutney 15.00 (category link),
      add-on 5 Truffle Oil (unavailable)
    - item 2 "Cold Coffee" (Beverages, 18% GST): size 20 Regular 150.00
    - item 3 "Gulab Jamun" (Desserts, no rate -> DEFAULT_TAX_RATE): size 30 80.00
    - item 4 "Mango Kulfi" in an unavailable category; item 5 "Biryani" unavailable
    - zone 1 Koramangala 40.00, zone 2 Whitefield (not served)
    - users 1 and 2 are customers, user 9 is staff
    - address 1 (user 1, zone 1), 2 (user 2, zone 1), 3 (guest, zone 1),
      4 (user 1, zone 2), 5 (user 1, no zone)
    """
    import db
    from enums.discount_type import DiscountType
    from models.add_on import AddOn, CategoryAddOn, ItemAddOn
    from models.address import Address
    from models.category import Category
    from models.item import Item, ItemSize
    from models.location import Location
    from models.offer import Offer
    from models.restaurant import OperatingHours
    from models.user import User

    now = datetime.utcnow()
    async with db.session_maker() as seed_session:
        seed_session.add_all([
            Category(id=1, name="Mains", tax_rate=Decimal("5.00")),
            Category(id=2, name="Beverages", tax_rate=Decimal("18.00")),
            Category(id=3, name="Desserts", tax_rate=None),
            Category(id=4, name="Seasonal", tax_rate=Decimal("5.00"), is_available=False),
        ])
        await seed_session.flush()
        seed_session.add_all([
            Item(id=1, category_id=1, name="Paneer Tikka"),
            Item(id=2, category_id=2, name="Cold Coffee"),
            Item(id=3, category_id=3, name="Gulab Jamun"),
            Item(id=4, category_id=4, name="Mango Kulfi"),
            Item(id=5, category_id=1, name="Biryani", is_available=False),
        ])
        await seed_session.flush()
        seed_session.add_all([
            ItemSize(id=10, item_id=1, name="Full", price=Decimal("299.00")),
            ItemSize(id=11, item_id=1, name="Half", price=Decimal("179.00"), is_available=False),
            ItemSize(id=20, item_id=2, name="Regular", price=Decimal("150.00")),
            ItemSize(id=30, item_id=3, name="2 pcs", price=Decimal("80.00")),
            ItemSize(id=40, item_id=4, name="Single", price=Decimal("90.00")),
            ItemSize(id=50, item_id=5, name="Full", price=Decimal("250.00")),
            AddOn(id=3, name="Extra Cheese", price=Decimal("20.00")),
            AddOn(id=4, name="Mint Chutney", price=Decimal("15.00")),
            AddOn(id=5, name="Truffle Oil", price=Decimal("50.00"), is_available=False),
            Location(id=1, name="Koramangala", city="Bengaluru", pincode="560034",
                     delivery_charge=Decimal("40.00"), estimated_delivery_time=35),
            Location(id=2, name="Whitefield", city="Bengaluru", pincode="560066",
                     delivery_charge=Decimal("80.00"), is_available=False),
            User(id=1, name="Asha", phone="9800000001", push_token="ExponentPushToken[asha]"),
            User(id=2, name="Ravi", phone="9800000002"),
            User(id=9, name="Kitchen", phone="9800000009", is_staff=True),
        ])
        await seed_session.flush()
        seed_session.add_all([
            ItemAddOn(item_id=1, add_on_id=3),
            ItemAddOn(item_id=1, add_on_id=5),
            CategoryAddOn(category_id=1, add_on_id=4),
            Address(id=1, user_id=1, label="Home", address_line1="12 MG Road", city="Bengaluru",
                    postal_code="560034", location_id=1),
            Address(id=2, user_id=2, label="Home", address_line1="7 Brigade Road", city="Bengaluru",
                    location_id=1),
            Address(id=3, user_id=None, address_line1="3 Church Street", city="Bengaluru", location_id=1),
            Address(id=4, user_id=1, label="Office", address_line1="99 ITPL Main Road", city="Bengaluru",
                    location_id=2),
            Address(id=5, user_id=1, label="Parents", address_line1="5 Temple Street", city="Mysuru"),
            Offer(id=1, code="FLAT100", title="Flat 100 off", discount_type=DiscountType.FLAT,
                  discount_value=Decimal("100.00"), min_order_value=Decimal("500.00")),
            Offer(id=2, code="FREEDEL", title="Free delivery", discount_type=DiscountType.FREE_DELIVERY),
            Offer(id=3, code="SAVE10", title="10% off", discount_type=DiscountType.PERCENTAGE,
                  discount_value=Decimal("10.00"), max_discount_amount=Decimal("50.00")),
            Offer(id=4, code="WELCOME", title="First order", discount_type=DiscountType.PERCENTAGE,
                  discount_value=Decimal("20.00"), first_order_only=True),
            Offer(id=5, code="OLDDEAL", title="Expired", discount_type=DiscountType.FLAT,
                  discount_value=Decimal("50.00"), valid_to=now - timedelta(days=1)),
            Offer(id=6, code="COFFEE20", title="Coffee deal", discount_type=DiscountType.FLAT,
                  discount_value=Decimal("20.00"), applicable_category_id=2),
            Offer(id=7, code="ONCE", title="One per customer", discount_type=DiscountType.FLAT,
                  discount_value=Decimal("30.00"), max_uses_per_user=1),
        ])
        seed_session.add_all([
            OperatingHours(day_of_week=day, open_time=time(0, 0), close_time=time(23, 59, 59, 999999))
            for day in range(7)
        ])
        await seed_session.commit()

    return SimpleNamespace(
        customer_id=1,
        other_customer_id=2,
        staff_id=9,
        home_address_id=1,
        other_address_id=2,
        guest_address_id=3,
        closed_zone_address_id=4,
        no_zone_address_id=5,
    )


@pytest.fixture
def paneer_line():
    """Paneer Tikka Full with Extra Cheese, quantity 2: 638.00 before tax."""
    from models.cart import CartLineDTO
    return CartLineDTO(item_id=1, size_id=10, add_on_ids=[3], quantity=2)


@pytest_asyncio.fixture
async def create_order(seeded):
    """Factory placing an order for a customer with the restaurant open and notifications stubbed."""
    from unittest.mock import patch

    from models.cart import CartLineDTO, CreateOrderRequestDTO
    from services.order import OrderService

    async def _create(user_id=1, address_id=1, items=None, offer_code=None):
        request = CreateOrderRequestDTO(
            items=items or [CartLineDTO(item_id=1, size_id=10, add_on_ids=[3], quantity=2)],
            address_id=address_id,
            offer_code=offer_code,
        )
        with patch('services.order.NotificationService.emit'):
            return await OrderService.create_order(request, user_id)

    return _create


# ============================================================================
# Redis Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()
