"""
Shared fixtures.

Everything runs against in-memory storage; no database or network
is touched by the test suite.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from expenseshub.api import create_app
from expenseshub.config import AppSettings
from expenseshub.models import Category, Transaction, TransactionType
from expenseshub.orchestrator import create_memory_components


def make_transaction(
    amount,
    category_id: str = "food",
    type: TransactionType = TransactionType.EXPENSE,
    date: Optional[datetime] = None,
    description: str = "",
    id: Optional[str] = None,
) -> Transaction:
    return Transaction(
        id=id or uuid4().hex,
        type=type,
        amount=Decimal(str(amount)),
        category_id=category_id,
        description=description,
        date=date or datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc),
    )


def make_category(
    id: str,
    name: str,
    color: str = "#10B981",
    type: TransactionType = TransactionType.EXPENSE,
    order: int = 1,
) -> Category:
    return Category(id=id, name=name, color=color, type=type, order=order)


@pytest.fixture
def app_settings():
    return AppSettings(app_timezone="UTC", app_name="expenseshub")


@pytest.fixture
def components(app_settings):
    return create_memory_components(app_settings)


@pytest.fixture
async def ready_components(components):
    """Memory components after the startup gate (defaults seeded)."""
    await components.initialize()
    return components


@pytest.fixture
def api(components):
    """In-process HTTP client; the lifespan seeds the memory store."""
    with TestClient(create_app(components)) as client:
        yield client
