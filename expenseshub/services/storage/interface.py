"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Run against MongoDB in production
2. Use in-memory storage for testing and demos
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Just the operations the three record kinds need.

Every implementation must:
- Return fully populated records (id + timestamps)
- Raise NotFoundError for id-targeted operations on missing records
- Raise ConflictError when (category name, type) would be duplicated
- Raise DependencyError when the backend cannot be reached
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from expenseshub.errors import ConflictError, DependencyError, NotFoundError
from expenseshub.models import (
    Category,
    CategoryCreate,
    Transaction,
    TransactionCreate,
    TransactionType,
    UserSettings,
)


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage operations.
    """

    @abstractmethod
    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        """
        Persist a new transaction.

        Args:
            data: Normalized payload. `date` is always set by the caller.

        Returns:
            The stored transaction with generated id and timestamps
        """
        pass

    @abstractmethod
    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """
        Retrieve a transaction by its ID.

        Returns:
            The transaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_transaction(self, transaction_id: str, changes: dict[str, Any]) -> Transaction:
        """
        Apply a partial update.

        Args:
            transaction_id: Target id
            changes: Normalized field -> value mapping (snake_case keys)

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> None:
        """
        Permanently remove a transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        pass

    @abstractmethod
    async def list_transactions(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        type: Optional[TransactionType] = None,
        category_id: Optional[str] = None,
    ) -> list[Transaction]:
        """
        List transactions with optional filters.

        Args:
            date_from: Keep transactions on or after this instant
            date_to: Keep transactions strictly before this instant
            type: Exact match on transaction type
            category_id: Exact match on category reference

        Returns:
            Matching transactions, newest first
        """
        pass


class CategoryStorageInterface(ABC):
    """
    Abstract interface for category storage.

    Categories are read and created only.
    """

    @abstractmethod
    async def create_category(self, data: CategoryCreate, is_default: bool = False) -> Category:
        """
        Persist a new category.

        Args:
            data: Payload with `order` already resolved
            is_default: True when seeding system categories

        Raises:
            ConflictError: If (name, type) already exists
        """
        pass

    @abstractmethod
    async def insert_categories(
        self,
        items: list[CategoryCreate],
        is_default: bool = False,
    ) -> list[Category]:
        """Bulk insert, used by seeding."""
        pass

    @abstractmethod
    async def get_category(self, category_id: str) -> Optional[Category]:
        pass

    @abstractmethod
    async def list_categories(self, type: Optional[TransactionType] = None) -> list[Category]:
        """
        List categories, optionally of one type.

        Returns:
            Categories sorted by `order` ascending
        """
        pass

    @abstractmethod
    async def max_category_order(self, type: TransactionType) -> Optional[int]:
        """Highest `order` among categories of a type, None if there are none."""
        pass

    @abstractmethod
    async def count_categories(self) -> int:
        pass


class SettingsStorageInterface(ABC):
    """
    Abstract interface for the settings singleton.
    """

    @abstractmethod
    async def get_settings(self) -> Optional[UserSettings]:
        """Return the settings record, or None if it was never created."""
        pass

    @abstractmethod
    async def create_settings(self, values: Optional[dict[str, Any]] = None) -> UserSettings:
        """
        Create the settings record.

        Args:
            values: Overrides for the model defaults
        """
        pass

    @abstractmethod
    async def update_settings(self, changes: dict[str, Any]) -> UserSettings:
        """
        Update the settings record in place.

        Raises:
            NotFoundError: If the record doesn't exist yet
        """
        pass


__all__ = [
    "CategoryStorageInterface",
    "ConflictError",
    "DependencyError",
    "NotFoundError",
    "SettingsStorageInterface",
    "TransactionStorageInterface",
]
