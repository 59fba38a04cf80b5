"""
MongoDB Storage Implementation

DESIGN DECISION: A document store fits the data: three flat record
kinds, no joins, and single-document writes are atomic on their own.

TRADEOFFS:
- No cross-document transactions (last write wins)
- Category references are not enforced (a category may be removed
  while transactions still point at it)

Amounts are stored as Decimal128 so the 2-decimal values written by
the validation layer read back exactly.

pymongo calls are synchronous; they are wrapped in async methods so
the rest of the system only sees the storage interface.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from bson import Decimal128, ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from expenseshub.config import MongoSettings, get_settings
from expenseshub.errors import ConflictError, DependencyError, NotFoundError
from expenseshub.logger import get_logger
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


TRANSACTIONS_COLLECTION = "transactions"
CATEGORIES_COLLECTION = "categories"
SETTINGS_COLLECTION = "settings"

logger = get_logger(__name__)


class MongoClientWrapper:
    """
    Low-level MongoDB client wrapper.

    Handles connection (with retry) and index creation.
    """

    def __init__(self, settings: Optional[MongoSettings] = None):
        self._settings = settings or get_settings().mongo
        self._client: Optional[MongoClient] = None
        self._db: Optional[Database] = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(PyMongoError),
        reraise=True,
    )
    def _ping(self, client: MongoClient) -> None:
        client.admin.command("ping")

    def connect(self) -> Database:
        """
        Establish connection to MongoDB.

        Raises:
            DependencyError: If no URI is configured or the server can't be reached
        """
        if self._db is None:
            if not self._settings.is_configured:
                raise DependencyError("MONGODB_URI is not configured")

            client = MongoClient(
                self._settings.uri,
                tz_aware=True,
                maxPoolSize=self._settings.max_pool_size,
                serverSelectionTimeoutMS=self._settings.server_selection_timeout_ms,
                socketTimeoutMS=self._settings.socket_timeout_ms,
            )
            try:
                self._ping(client)
            except PyMongoError as e:
                client.close()
                raise DependencyError(f"Failed to connect to MongoDB: {e}")

            self._client = client
            self._db = client[self._settings.db_name]
            logger.info("mongo_connected", database=self._settings.db_name)

        return self._db

    @property
    def db(self) -> Database:
        return self.connect()

    def ensure_indexes(self) -> None:
        """Create indexes. Idempotent."""
        try:
            transactions = self.db[TRANSACTIONS_COLLECTION]
            transactions.create_index([("date", DESCENDING)])
            transactions.create_index([("category_id", ASCENDING), ("date", DESCENDING)])
            transactions.create_index([("type", ASCENDING), ("date", DESCENDING)])

            categories = self.db[CATEGORIES_COLLECTION]
            categories.create_index([("type", ASCENDING), ("order", ASCENDING)])
            categories.create_index(
                [("name", ASCENDING), ("type", ASCENDING)],
                unique=True,
            )
        except PyMongoError as e:
            raise DependencyError(f"Failed to create indexes: {e}")

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("mongo_closed")
        self._client = None
        self._db = None


def _object_id(value: str) -> Optional[ObjectId]:
    """Parse an id; malformed ids simply match nothing."""
    return ObjectId(value) if ObjectId.is_valid(value) else None


def _to_bson(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return Decimal128(str(value))
    return value


def _to_document(fields: dict[str, Any]) -> dict[str, Any]:
    """Convert model values (enums, decimals) into BSON-friendly values."""
    return {key: _to_bson(value) for key, value in fields.items()}


def _transaction_to_document(data: TransactionCreate, now: datetime) -> dict[str, Any]:
    return _to_document({
        "type": data.type,
        "amount": data.amount,
        "category_id": data.category_id,
        "description": data.description or "",
        "date": data.date or now,
        "created_at": now,
        "updated_at": now,
    })


def _document_to_transaction(doc: dict[str, Any]) -> Transaction:
    amount = doc["amount"]
    if isinstance(amount, Decimal128):
        amount = amount.to_decimal()
    return Transaction(
        id=str(doc["_id"]),
        type=TransactionType(doc["type"]),
        amount=Decimal(str(amount)),
        category_id=str(doc["category_id"]),
        description=doc.get("description", ""),
        date=doc["date"],
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


def _category_to_document(data: CategoryCreate, is_default: bool, now: datetime) -> dict[str, Any]:
    return _to_document({
        "name": data.name,
        "icon": data.icon,
        "color": data.color,
        "type": data.type,
        "is_default": is_default,
        "order": data.order or 0,
        "created_at": now,
        "updated_at": now,
    })


def _document_to_category(doc: dict[str, Any]) -> Category:
    return Category(
        id=str(doc["_id"]),
        name=doc["name"],
        icon=doc["icon"],
        color=doc["color"],
        type=TransactionType(doc["type"]),
        is_default=doc.get("is_default", False),
        order=doc.get("order", 0),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


def _document_to_settings(doc: dict[str, Any]) -> UserSettings:
    fields = {k: v for k, v in doc.items() if k != "_id"}
    return UserSettings(id=str(doc["_id"]), **fields)


class MongoTransactionStorage(TransactionStorageInterface):
    """Transactions collection; one document per transaction."""

    def __init__(self, client: Optional[MongoClientWrapper] = None):
        self._client = client or MongoClientWrapper()

    @property
    def _collection(self):
        return self._client.db[TRANSACTIONS_COLLECTION]

    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        try:
            doc = _transaction_to_document(data, utcnow())
            result = self._collection.insert_one(doc)
            doc["_id"] = result.inserted_id
            return _document_to_transaction(doc)
        except PyMongoError as e:
            raise DependencyError(f"Failed to save transaction: {e}")

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        oid = _object_id(transaction_id)
        if oid is None:
            return None
        try:
            doc = self._collection.find_one({"_id": oid})
        except PyMongoError as e:
            raise DependencyError(f"Failed to get transaction: {e}")
        return _document_to_transaction(doc) if doc else None

    async def update_transaction(self, transaction_id: str, changes: dict[str, Any]) -> Transaction:
        oid = _object_id(transaction_id)
        if oid is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        try:
            doc = self._collection.find_one_and_update(
                {"_id": oid},
                {"$set": _to_document({**changes, "updated_at": utcnow()})},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise DependencyError(f"Failed to update transaction: {e}")
        if doc is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        return _document_to_transaction(doc)

    async def delete_transaction(self, transaction_id: str) -> None:
        oid = _object_id(transaction_id)
        if oid is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        try:
            result = self._collection.delete_one({"_id": oid})
        except PyMongoError as e:
            raise DependencyError(f"Failed to delete transaction: {e}")
        if result.deleted_count == 0:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

    async def list_transactions(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        type: Optional[TransactionType] = None,
        category_id: Optional[str] = None,
    ) -> list[Transaction]:
        query: dict[str, Any] = {}
        if type:
            query["type"] = type.value
        if category_id:
            query["category_id"] = category_id
        if date_from or date_to:
            date_query = {}
            if date_from:
                date_query["$gte"] = date_from
            if date_to:
                date_query["$lt"] = date_to
            query["date"] = date_query

        try:
            docs = self._collection.find(query).sort("date", DESCENDING)
            return [_document_to_transaction(doc) for doc in docs]
        except PyMongoError as e:
            raise DependencyError(f"Failed to list transactions: {e}")


class MongoCategoryStorage(CategoryStorageInterface):
    """Categories collection; uniqueness enforced by the (name, type) index."""

    def __init__(self, client: Optional[MongoClientWrapper] = None):
        self._client = client or MongoClientWrapper()

    @property
    def _collection(self):
        return self._client.db[CATEGORIES_COLLECTION]

    async def create_category(self, data: CategoryCreate, is_default: bool = False) -> Category:
        try:
            doc = _category_to_document(data, is_default, utcnow())
            result = self._collection.insert_one(doc)
            doc["_id"] = result.inserted_id
            return _document_to_category(doc)
        except DuplicateKeyError:
            raise ConflictError(
                f"Category '{data.name}' already exists for type {data.type.value}"
            )
        except PyMongoError as e:
            raise DependencyError(f"Failed to save category: {e}")

    async def insert_categories(
        self,
        items: list[CategoryCreate],
        is_default: bool = False,
    ) -> list[Category]:
        if not items:
            return []
        now = utcnow()
        docs = [_category_to_document(item, is_default, now) for item in items]
        try:
            result = self._collection.insert_many(docs)
        except DuplicateKeyError as e:
            raise ConflictError(f"Duplicate category in bulk insert: {e}")
        except PyMongoError as e:
            raise DependencyError(f"Failed to insert categories: {e}")
        for doc, inserted_id in zip(docs, result.inserted_ids):
            doc["_id"] = inserted_id
        return [_document_to_category(doc) for doc in docs]

    async def get_category(self, category_id: str) -> Optional[Category]:
        oid = _object_id(category_id)
        if oid is None:
            return None
        try:
            doc = self._collection.find_one({"_id": oid})
        except PyMongoError as e:
            raise DependencyError(f"Failed to get category: {e}")
        return _document_to_category(doc) if doc else None

    async def list_categories(self, type: Optional[TransactionType] = None) -> list[Category]:
        query = {"type": type.value} if type else {}
        try:
            docs = self._collection.find(query).sort("order", ASCENDING)
            return [_document_to_category(doc) for doc in docs]
        except PyMongoError as e:
            raise DependencyError(f"Failed to list categories: {e}")

    async def max_category_order(self, type: TransactionType) -> Optional[int]:
        try:
            doc = self._collection.find_one(
                {"type": type.value},
                projection={"order": 1},
                sort=[("order", DESCENDING)],
            )
        except PyMongoError as e:
            raise DependencyError(f"Failed to read category order: {e}")
        return doc["order"] if doc else None

    async def count_categories(self) -> int:
        try:
            return self._collection.count_documents({})
        except PyMongoError as e:
            raise DependencyError(f"Failed to count categories: {e}")


class MongoSettingsStorage(SettingsStorageInterface):
    """Settings collection holding a single document."""

    def __init__(self, client: Optional[MongoClientWrapper] = None):
        self._client = client or MongoClientWrapper()

    @property
    def _collection(self):
        return self._client.db[SETTINGS_COLLECTION]

    async def get_settings(self) -> Optional[UserSettings]:
        try:
            doc = self._collection.find_one({})
        except PyMongoError as e:
            raise DependencyError(f"Failed to get settings: {e}")
        return _document_to_settings(doc) if doc else None

    async def create_settings(self, values: Optional[dict[str, Any]] = None) -> UserSettings:
        now = utcnow()
        # Validate defaults + overrides through the model before writing
        draft = UserSettings(id="pending", created_at=now, updated_at=now, **(values or {}))
        doc = _to_document(draft.model_dump(exclude={"id"}))
        try:
            result = self._collection.insert_one(doc)
        except PyMongoError as e:
            raise DependencyError(f"Failed to create settings: {e}")
        doc["_id"] = result.inserted_id
        return _document_to_settings(doc)

    async def update_settings(self, changes: dict[str, Any]) -> UserSettings:
        try:
            doc = self._collection.find_one_and_update(
                {},
                {"$set": _to_document({**changes, "updated_at": utcnow()})},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise DependencyError(f"Failed to update settings: {e}")
        if doc is None:
            raise NotFoundError("Settings have not been created yet")
        return _document_to_settings(doc)
