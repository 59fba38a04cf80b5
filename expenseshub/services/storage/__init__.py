"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
MongoDB is the production backend; the in-memory backend serves tests and
database-less runs.
"""

from expenseshub.services.storage.interface import (
    CategoryStorageInterface,
    ConflictError,
    DependencyError,
    NotFoundError,
    SettingsStorageInterface,
    TransactionStorageInterface,
)
from expenseshub.services.storage.memory import (
    MemoryCategoryStorage,
    MemorySettingsStorage,
    MemoryTransactionStorage,
)
from expenseshub.services.storage.mongo import (
    MongoCategoryStorage,
    MongoClientWrapper,
    MongoSettingsStorage,
    MongoTransactionStorage,
)

__all__ = [
    # Interfaces
    "CategoryStorageInterface",
    "SettingsStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "ConflictError",
    "DependencyError",
    "NotFoundError",
    # In-memory implementation
    "MemoryCategoryStorage",
    "MemorySettingsStorage",
    "MemoryTransactionStorage",
    # MongoDB implementation
    "MongoCategoryStorage",
    "MongoClientWrapper",
    "MongoSettingsStorage",
    "MongoTransactionStorage",
]
