"""
Database Bootstrap

Seeds the default categories and the settings record on startup.

Idempotent: categories are only seeded when the collection is empty,
settings only when no record exists. Safe to run on every start.
"""

from typing import Callable, Optional

from expenseshub.logger import get_logger
from expenseshub.models import CategoryCreate, TransactionType
from expenseshub.services.storage import (
    CategoryStorageInterface,
    SettingsStorageInterface,
)


logger = get_logger(__name__)


DEFAULT_EXPENSE_CATEGORIES = [
    CategoryCreate(name="Food", icon="🍔", color="#10B981", type=TransactionType.EXPENSE, order=1),
    CategoryCreate(name="Transport", icon="🚗", color="#3B82F6", type=TransactionType.EXPENSE, order=2),
    CategoryCreate(name="Bills", icon="📄", color="#F59E0B", type=TransactionType.EXPENSE, order=3),
    CategoryCreate(name="Shopping", icon="🛍️", color="#EF4444", type=TransactionType.EXPENSE, order=4),
    CategoryCreate(name="Other", icon="🔷", color="#8B5CF6", type=TransactionType.EXPENSE, order=5),
]

DEFAULT_INCOME_CATEGORIES = [
    CategoryCreate(name="Salary", icon="💰", color="#10B981", type=TransactionType.INCOME, order=1),
    CategoryCreate(name="Freelance", icon="💻", color="#3B82F6", type=TransactionType.INCOME, order=2),
    CategoryCreate(name="Gifts", icon="🎁", color="#EC4899", type=TransactionType.INCOME, order=3),
    CategoryCreate(name="Other", icon="🔷", color="#8B5CF6", type=TransactionType.INCOME, order=4),
]

# Model defaults already match; kept explicit so the seeded values are visible
DEFAULT_SETTINGS = {
    "default_period": "monthly",
    "default_chart_type": "bar",
    "default_data_view": "expenses",
    "currency": "EUR",
}


async def initialize_database(
    categories: CategoryStorageInterface,
    settings: SettingsStorageInterface,
    ensure_indexes: Optional[Callable[[], None]] = None,
) -> dict[str, int | bool]:
    """
    Seed default data.

    Args:
        categories: Category storage to seed
        settings: Settings storage to seed
        ensure_indexes: Optional hook run first (MongoDB index creation)

    Returns:
        {"categories_created": n, "settings_created": bool}
    """
    if ensure_indexes is not None:
        ensure_indexes()

    result: dict[str, int | bool] = {"categories_created": 0, "settings_created": False}

    existing = await categories.count_categories()
    if existing == 0:
        # Both tables in one batch: a failed seed leaves no categories behind
        created = await categories.insert_categories(
            DEFAULT_EXPENSE_CATEGORIES + DEFAULT_INCOME_CATEGORIES, is_default=True
        )
        result["categories_created"] = len(created)
        logger.info(
            "default_categories_seeded",
            expense=sum(1 for c in created if c.type == TransactionType.EXPENSE),
            income=sum(1 for c in created if c.type == TransactionType.INCOME),
        )
    else:
        logger.info("categories_already_present", count=existing)

    if await settings.get_settings() is None:
        await settings.create_settings(DEFAULT_SETTINGS)
        result["settings_created"] = True
        logger.info("default_settings_seeded")
    else:
        logger.info("settings_already_present")

    return result
