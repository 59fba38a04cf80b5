"""
In-Memory Storage Implementation

Plain dictionaries behind the storage interfaces. Used by the test
suite and for running the API without a database.

Records are copied on the way in and on the way out, so callers can
never mutate stored state by holding on to a returned model.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from expenseshub.errors import ConflictError, NotFoundError
from expenseshub.models import (
    Category,
    CategoryCreate,
    Transaction,
    TransactionCreate,
    TransactionType,
    UserSettings,
    utcnow,
)
from expenseshub.services.storage.interface import (
    CategoryStorageInterface,
    SettingsStorageInterface,
    TransactionStorageInterface,
)


def _new_id() -> str:
    return uuid4().hex


class MemoryTransactionStorage(TransactionStorageInterface):
    """Transactions keyed by id, in insertion order."""

    def __init__(self):
        self._records: dict[str, Transaction] = {}

    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        now = utcnow()
        transaction = Transaction(
            id=_new_id(),
            type=data.type,
            amount=data.amount,
            category_id=data.category_id,
            description=data.description or "",
            date=data.date or now,
            created_at=now,
            updated_at=now,
        )
        self._records[transaction.id] = transaction
        return transaction.model_copy()

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        transaction = self._records.get(transaction_id)
        return transaction.model_copy() if transaction else None

    async def update_transaction(self, transaction_id: str, changes: dict[str, Any]) -> Transaction:
        current = self._records.get(transaction_id)
        if current is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        updated = current.model_copy(update={**changes, "updated_at": utcnow()})
        self._records[transaction_id] = updated
        return updated.model_copy()

    async def delete_transaction(self, transaction_id: str) -> None:
        if self._records.pop(transaction_id, None) is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

    async def list_transactions(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        type: Optional[TransactionType] = None,
        category_id: Optional[str] = None,
    ) -> list[Transaction]:
        results = []
        for transaction in self._records.values():
            if date_from and transaction.date < date_from:
                continue
            if date_to and transaction.date >= date_to:
                continue
            if type and transaction.type != type:
                continue
            if category_id and transaction.category_id != category_id:
                continue
            results.append(transaction.model_copy())

        # Newest first
        results.sort(key=lambda t: t.date, reverse=True)
        return results


class MemoryCategoryStorage(CategoryStorageInterface):
    """Categories keyed by id; (name, type) uniqueness checked on insert."""

    def __init__(self):
        self._records: dict[str, Category] = {}

    def _exists(self, name: str, type: TransactionType) -> bool:
        return any(
            c.name == name and c.type == type
            for c in self._records.values()
        )

    def _build(self, data: CategoryCreate, is_default: bool) -> Category:
        now = utcnow()
        return Category(
            id=_new_id(),
            name=data.name,
            icon=data.icon,
            color=data.color,
            type=data.type,
            is_default=is_default,
            order=data.order or 0,
            created_at=now,
            updated_at=now,
        )

    async def create_category(self, data: CategoryCreate, is_default: bool = False) -> Category:
        if self._exists(data.name, data.type):
            raise ConflictError(
                f"Category '{data.name}' already exists for type {data.type.value}"
            )
        category = self._build(data, is_default)
        self._records[category.id] = category
        return category.model_copy()

    async def insert_categories(
        self,
        items: list[CategoryCreate],
        is_default: bool = False,
    ) -> list[Category]:
        # All-or-nothing, like a single bulk write with a unique index
        seen = set()
        for item in items:
            key = (item.name, item.type)
            if key in seen or self._exists(item.name, item.type):
                raise ConflictError(
                    f"Category '{item.name}' already exists for type {item.type.value}"
                )
            seen.add(key)

        created = [self._build(item, is_default) for item in items]
        for category in created:
            self._records[category.id] = category
        return [category.model_copy() for category in created]

    async def get_category(self, category_id: str) -> Optional[Category]:
        category = self._records.get(category_id)
        return category.model_copy() if category else None

    async def list_categories(self, type: Optional[TransactionType] = None) -> list[Category]:
        results = [
            c.model_copy()
            for c in self._records.values()
            if type is None or c.type == type
        ]
        results.sort(key=lambda c: c.order)
        return results

    async def max_category_order(self, type: TransactionType) -> Optional[int]:
        orders = [c.order for c in self._records.values() if c.type == type]
        return max(orders) if orders else None

    async def count_categories(self) -> int:
        return len(self._records)


class MemorySettingsStorage(SettingsStorageInterface):
    """Holds at most one UserSettings record."""

    def __init__(self):
        self._record: Optional[UserSettings] = None

    async def get_settings(self) -> Optional[UserSettings]:
        return self._record.model_copy() if self._record else None

    async def create_settings(self, values: Optional[dict[str, Any]] = None) -> UserSettings:
        if self._record is not None:
            return self._record.model_copy()
        now = utcnow()
        self._record = UserSettings(
            id=_new_id(),
            created_at=now,
            updated_at=now,
            **(values or {}),
        )
        return self._record.model_copy()

    async def update_settings(self, changes: dict[str, Any]) -> UserSettings:
        if self._record is None:
            raise NotFoundError("Settings have not been created yet")
        self._record = self._record.model_copy(update={**changes, "updated_at": utcnow()})
        return self._record.model_copy()
