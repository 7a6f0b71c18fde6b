"""
conftest.py — Shared pytest fixtures for the configurator backend test suite.

No database or external service fixtures are defined here. The category
repository and the order-request store are replaced by in-memory fakes built
on the reference catalog, so every test runs without PostgreSQL.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``app.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import sys
import os
import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any app imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------

class FakeCategoryRepository:
    """Serves the seeded reference catalog from memory."""

    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.calls = []

    async def get_active_product_type(self, product_type):
        from app.db.seed_catalog import CATALOGS
        from app.services.errors import ProductTypeNotFoundError
        if self.fail_with is not None:
            raise self.fail_with
        catalog = CATALOGS.get(product_type)
        if catalog is None:
            raise ProductTypeNotFoundError(product_type)
        return SimpleNamespace(name=product_type, display_name=catalog["display_name"])

    async def get_categories(self, product_type):
        from app.db.seed_catalog import catalog_categories
        self.calls.append(product_type)
        if self.fail_with is not None:
            raise self.fail_with
        return catalog_categories(product_type)


class FakeOrderStore:
    """Records submissions; optionally fails every submit."""

    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.submitted = []
        self.records = {}

    async def submit(self, product_type, selections, client_contact, notes):
        if self.fail_with is not None:
            raise self.fail_with
        order_id = str(uuid.uuid4())
        self.submitted.append({
            "product_type": product_type,
            "selections": copy.deepcopy(selections),
            "client_contact": dict(client_contact),
            "notes": notes,
        })
        self.records[order_id] = {
            "id": order_id,
            "productType": product_type,
            "status": "SUBMITTED",
            "clientData": dict(client_contact),
            "configurationData": {"productType": product_type, "selections": selections, "notes": notes},
            "notes": notes,
        }
        return {"id": order_id}

    async def get_by_id(self, order_request_id):
        return self.records.get(order_request_id)


class FixedClock:
    """Manually advanced clock for save-point expiry tests."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def category_repo():
    return FakeCategoryRepository()


@pytest.fixture
def order_store():
    return FakeOrderStore()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def savepoint_backend():
    from app.services.savepoint_store import InMemorySavePointBackend
    return InMemorySavePointBackend()


# ---------------------------------------------------------------------------
# Sample selections
# ---------------------------------------------------------------------------

@pytest.fixture
def kitchen_selections():
    """
    A complete linear kitchen that passes every kitchen rule.
    No doorType is set, so handles are not required.
    """
    return {
        "typeAndSize": {
            "layoutType": "linear",
            "dimensions": {"length": 3600, "width": 600, "height": 2400, "unit": "mm"},
        },
        "style": "modern",
        "corpusMaterial": {"material": "mdf"},
        "facadeMaterial": {
            "material": "lacquered_mdf",
            "finish": "matte",
            "color": "white",
            "profile": "flat",
        },
        "countertop": {"material": "engineered_quartz", "thickness": 20},
        "splashback": {"material": "glass"},
        "hardware": {"hinges": "soft_close", "drawerSlides": "full_extension", "manufacturer": "blum"},
    }


@pytest.fixture
def wardrobe_selections():
    """
    A complete 2400 x 2600 mm sliding wardrobe that passes every wardrobe rule.
    Two filling sections total 2200 mm; the pantograph fits the 2600 mm height.
    """
    return {
        "typeAndSize": {
            "layoutType": "built-in",
            "dimensions": {"length": 600, "width": 2400, "height": 2600, "unit": "mm"},
        },
        "style": "minimalist",
        "doorType": "sliding",
        "doorMaterials": ["mirror", "lacobel"],
        "slidingSystem": {"type": "top_hung", "profileColor": "silver"},
        "corpusMaterial": {"material": "mr_particle_board"},
        "facadeMaterial": {
            "material": "laminated_mdf",
            "finish": "textured",
            "color": "oak",
            "profile": "flat",
        },
        "internalFilling": [
            {"sectionWidth": 1200, "elements": [{"type": "rod", "quantity": 1}, {"type": "shelf", "quantity": 3}]},
            {"sectionWidth": 1000, "elements": [{"type": "pantograph", "height": 900, "quantity": 1}]},
        ],
        "hardware": {"hinges": "soft_close", "drawerSlides": "full_extension", "manufacturer": "hettich"},
    }


@pytest.fixture
def client_contact():
    return {"name": "Layla Haddad", "phone": "+971 50 123 4567", "email": "layla@example.com"}
