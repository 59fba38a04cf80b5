"""Services package."""

from expenseshub.services.bootstrap import (
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_INCOME_CATEGORIES,
    DEFAULT_SETTINGS,
    initialize_database,
)
from expenseshub.services.storage import (
    CategoryStorageInterface,
    ConflictError,
    DependencyError,
    MemoryCategoryStorage,
    MemorySettingsStorage,
    MemoryTransactionStorage,
    MongoCategoryStorage,
    MongoClientWrapper,
    MongoSettingsStorage,
    MongoTransactionStorage,
    NotFoundError,
    SettingsStorageInterface,
    TransactionStorageInterface,
)

__all__ = [
    # Bootstrap
    "DEFAULT_EXPENSE_CATEGORIES",
    "DEFAULT_INCOME_CATEGORIES",
    "DEFAULT_SETTINGS",
    "initialize_database",
    # Storage services
    "CategoryStorageInterface",
    "ConflictError",
    "DependencyError",
    "MemoryCategoryStorage",
    "MemorySettingsStorage",
    "MemoryTransactionStorage",
    "MongoCategoryStorage",
    "MongoClientWrapper",
    "MongoSettingsStorage",
    "MongoTransactionStorage",
    "NotFoundError",
    "SettingsStorageInterface",
    "TransactionStorageInterface",
]
