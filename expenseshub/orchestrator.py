"""
Main Orchestrator for ExpensesHub

This module ties together validation, storage and aggregation and
defines the flows behind every API operation:
1. Transactions (list / create / update / delete / export)
2. Categories (list / create)
3. Settings (get-or-create / update)
4. Reports (period breakdown)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches storage without passing the validation layer
- Storage is initialized (connected + seeded) before any flow runs
- If storage is unavailable, every flow fails with DependencyError
  instead of the process crashing

This is the "glue" the HTTP layer calls into; route handlers stay thin.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Union

from expenseshub.config import AppSettings, get_settings
from expenseshub.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
)
from expenseshub.export import export_filename, generate_csv
from expenseshub.logger import get_logger
from expenseshub.models import (
    BreakdownReport,
    Category,
    PeriodType,
    Transaction,
    TransactionType,
    TransactionView,
    UserSettings,
    ValidationIssue,
)
from expenseshub.queries import breakdown, period_range, summarize
from expenseshub.services import (
    CategoryStorageInterface,
    MemoryCategoryStorage,
    MemorySettingsStorage,
    MemoryTransactionStorage,
    MongoCategoryStorage,
    MongoClientWrapper,
    MongoSettingsStorage,
    MongoTransactionStorage,
    SettingsStorageInterface,
    TransactionStorageInterface,
    initialize_database,
)
from expenseshub.validation import PayloadValidator


logger = get_logger(__name__)

STORAGE_UNAVAILABLE = "Database is not available"


def _require(storage):
    if storage is None:
        raise DependencyError(STORAGE_UNAVAILABLE)
    return storage


def parse_transaction_type(value: Union[str, TransactionType, None]) -> Optional[TransactionType]:
    """Resolve an optional `type` filter, rejecting unknown values."""
    if value is None or isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(value)
    except ValueError:
        raise ValidationError("Invalid type filter", [
            ValidationIssue(
                field="type",
                issue_type="invalid_choice",
                message=f"Unknown transaction type: {value!r}",
            )
        ])


class TransactionFlow:
    """
    Orchestrates transaction operations.

    Listing embeds each transaction's category; creation fills in the
    date; updates are partial and strict.
    """

    def __init__(
        self,
        transaction_storage: Optional[TransactionStorageInterface] = None,
        category_storage: Optional[CategoryStorageInterface] = None,
        validator: Optional[PayloadValidator] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self._transactions = transaction_storage
        self._categories = category_storage
        self._app_settings = app_settings or get_settings().app
        self._validator = validator or PayloadValidator(self._app_settings)

    async def list_transactions(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        type: Union[str, TransactionType, None] = None,
    ) -> list[TransactionView]:
        """
        List transactions, newest first, each with its category resolved.

        Args:
            start_date: Inclusive lower bound
            end_date: Exclusive upper bound
            type: Optional expense/income filter
        """
        storage = _require(self._transactions)
        kind = parse_transaction_type(type)
        if start_date is not None:
            start_date = self._validator.normalize_date(start_date)
        if end_date is not None:
            end_date = self._validator.normalize_date(end_date)

        transactions = await storage.list_transactions(
            date_from=start_date,
            date_to=end_date,
            type=kind,
        )
        categories = {c.id: c for c in await _require(self._categories).list_categories()}

        return [
            TransactionView(
                **transaction.model_dump(),
                category=categories.get(transaction.category_id),
            )
            for transaction in transactions
        ]

    async def create_transaction(self, payload: Any) -> Transaction:
        storage = _require(self._transactions)
        data = self._validator.validate_transaction_create(payload)
        transaction = await storage.create_transaction(data)
        logger.info(
            "transaction_created",
            transaction_id=transaction.id,
            type=transaction.type.value,
            amount=str(transaction.amount),
        )
        return transaction

    async def update_transaction(self, transaction_id: str, payload: Any) -> Transaction:
        storage = _require(self._transactions)
        changes = self._validator.validate_transaction_update(payload)

        if not changes:
            transaction = await storage.get_transaction(transaction_id)
            if transaction is None:
                raise NotFoundError(f"Transaction not found: {transaction_id}")
            return transaction

        transaction = await storage.update_transaction(transaction_id, changes)
        logger.info(
            "transaction_updated",
            transaction_id=transaction_id,
            fields=sorted(changes),
        )
        return transaction

    async def delete_transaction(self, transaction_id: str) -> None:
        storage = _require(self._transactions)
        await storage.delete_transaction(transaction_id)
        logger.info("transaction_deleted", transaction_id=transaction_id)

    async def export_csv(
        self,
        period: Union[str, PeriodType] = PeriodType.MONTHLY,
        reference: Optional[datetime] = None,
    ) -> tuple[str, str]:
        """
        Export one period's transactions.

        Returns:
            (filename, csv_text)
        """
        window = period_range(period, reference, self._app_settings.tzinfo)
        transactions = await _require(self._transactions).list_transactions(
            date_from=window.start,
            date_to=window.end,
        )
        categories = await _require(self._categories).list_categories()

        content = generate_csv(transactions, categories, self._app_settings.tzinfo)
        filename = export_filename(window.period, app_name=self._app_settings.app_name)
        return filename, content


class CategoryFlow:
    """Orchestrates category listing and creation."""

    def __init__(
        self,
        category_storage: Optional[CategoryStorageInterface] = None,
        validator: Optional[PayloadValidator] = None,
    ):
        self._categories = category_storage
        self._validator = validator or PayloadValidator()

    async def list_categories(
        self,
        type: Union[str, TransactionType, None] = None,
    ) -> list[Category]:
        return await _require(self._categories).list_categories(parse_transaction_type(type))

    async def create_category(self, payload: Any) -> Category:
        """
        Create a user category.

        When `order` is omitted it becomes one more than the current
        maximum for the category's type (1 for an empty type).

        Raises:
            ValidationError: Malformed payload
            ConflictError: (name, type) already exists
        """
        storage = _require(self._categories)
        data = self._validator.validate_category_create(payload)

        if data.order is None:
            current_max = await storage.max_category_order(data.type)
            data = data.model_copy(update={
                "order": current_max + 1 if current_max is not None else 1,
            })

        try:
            category = await storage.create_category(data, is_default=False)
        except ConflictError:
            logger.warning("category_conflict", name=data.name, type=data.type.value)
            raise
        logger.info(
            "category_created",
            category_id=category.id,
            name=category.name,
            type=category.type.value,
            order=category.order,
        )
        return category


class SettingsFlow:
    """Orchestrates the settings singleton."""

    def __init__(
        self,
        settings_storage: Optional[SettingsStorageInterface] = None,
        validator: Optional[PayloadValidator] = None,
    ):
        self._settings = settings_storage
        self._validator = validator or PayloadValidator()

    async def get_settings(self) -> UserSettings:
        """Return the settings record, creating it with defaults if absent."""
        storage = _require(self._settings)
        settings = await storage.get_settings()
        if settings is None:
            settings = await storage.create_settings()
            logger.info("settings_created", settings_id=settings.id)
        return settings

    async def update_settings(self, payload: Any) -> UserSettings:
        changes = self._validator.validate_settings_update(payload)
        current = await self.get_settings()
        if not changes:
            return current

        settings = await _require(self._settings).update_settings(changes)
        logger.info("settings_updated", fields=sorted(changes))
        return settings


class ReportFlow:
    """Period breakdowns computed from stored transactions."""

    def __init__(
        self,
        transaction_storage: Optional[TransactionStorageInterface] = None,
        category_storage: Optional[CategoryStorageInterface] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self._transactions = transaction_storage
        self._categories = category_storage
        self._app_settings = app_settings or get_settings().app

    async def breakdown_report(
        self,
        period: Union[str, PeriodType] = PeriodType.MONTHLY,
        reference: Optional[datetime] = None,
        type: Union[str, TransactionType, None] = TransactionType.EXPENSE,
    ) -> BreakdownReport:
        """
        Category breakdown of one transaction type over one period.

        The summary covers both types over the same period.

        Raises:
            InvalidPeriodError: Unknown period selector
        """
        kind = parse_transaction_type(type) or TransactionType.EXPENSE
        window = period_range(period, reference, self._app_settings.tzinfo)

        transactions = await _require(self._transactions).list_transactions(
            date_from=window.start,
            date_to=window.end,
        )
        categories = await _require(self._categories).list_categories(kind)

        points = breakdown(
            (t for t in transactions if t.type == kind),
            categories,
        )
        return BreakdownReport(
            range=window,
            type=kind,
            points=points,
            summary=summarize(transactions),
        )


@dataclass
class AppComponents:
    """
    Everything the API needs, built once per process.

    `initialize()` is the startup gate: connect + seed, exactly once.
    """

    transactions: TransactionFlow
    categories: CategoryFlow
    settings: SettingsFlow
    reports: ReportFlow
    transaction_storage: Optional[TransactionStorageInterface] = None
    category_storage: Optional[CategoryStorageInterface] = None
    settings_storage: Optional[SettingsStorageInterface] = None
    mongo_client: Optional[MongoClientWrapper] = None
    storage_available: bool = False
    initialized: bool = False
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def initialize(self) -> bool:
        """
        Connect storage and seed defaults. Idempotent.

        On DependencyError the components stay up in degraded mode
        (storage_available = False) and every flow reports 503.

        Returns:
            Whether storage is available
        """
        async with self._lock:
            if self.initialized:
                return self.storage_available

            if self.category_storage is None or self.settings_storage is None:
                logger.warning("storage_not_configured", mode="degraded")
                self.storage_available = False
                self.initialized = True
                return False

            try:
                ensure_indexes = None
                if self.mongo_client is not None:
                    self.mongo_client.connect()
                    ensure_indexes = self.mongo_client.ensure_indexes
                result = await initialize_database(
                    self.category_storage,
                    self.settings_storage,
                    ensure_indexes=ensure_indexes,
                )
                self.storage_available = True
                logger.info("database_initialized", **result)
            except DependencyError as e:
                logger.error("database_initialization_failed", error=str(e), mode="degraded")
                self._degrade()

            self.initialized = True
            return self.storage_available

    def _degrade(self) -> None:
        """Detach storage from every flow."""
        self.storage_available = False
        self.transactions._transactions = None
        self.transactions._categories = None
        self.categories._categories = None
        self.settings._settings = None
        self.reports._transactions = None
        self.reports._categories = None

    def close(self) -> None:
        if self.mongo_client is not None:
            self.mongo_client.close()


def _build_components(
    transaction_storage: Optional[TransactionStorageInterface],
    category_storage: Optional[CategoryStorageInterface],
    settings_storage: Optional[SettingsStorageInterface],
    mongo_client: Optional[MongoClientWrapper] = None,
    app_settings: Optional[AppSettings] = None,
) -> AppComponents:
    app_settings = app_settings or get_settings().app
    validator = PayloadValidator(app_settings)
    return AppComponents(
        transactions=TransactionFlow(
            transaction_storage, category_storage, validator, app_settings
        ),
        categories=CategoryFlow(category_storage, validator),
        settings=SettingsFlow(settings_storage, validator),
        reports=ReportFlow(transaction_storage, category_storage, app_settings),
        transaction_storage=transaction_storage,
        category_storage=category_storage,
        settings_storage=settings_storage,
        mongo_client=mongo_client,
    )


def create_memory_components(app_settings: Optional[AppSettings] = None) -> AppComponents:
    """Components backed by in-memory storage (tests, demos)."""
    return _build_components(
        MemoryTransactionStorage(),
        MemoryCategoryStorage(),
        MemorySettingsStorage(),
        app_settings=app_settings,
    )


def create_app_components(
    use_storage: bool = True,
    app_settings: Optional[AppSettings] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to wire MongoDB storage.
                    Set to False for a degraded, storage-less instance.

    Returns:
        AppComponents; call `await components.initialize()` before use
    """
    if use_storage and get_settings().mongo.is_configured:
        mongo_client = MongoClientWrapper()
        return _build_components(
            MongoTransactionStorage(mongo_client),
            MongoCategoryStorage(mongo_client),
            MongoSettingsStorage(mongo_client),
            mongo_client=mongo_client,
            app_settings=app_settings,
        )

    if use_storage:
        logger.warning("mongo_uri_missing", hint="Set MONGODB_URI to enable the database")
    return _build_components(None, None, None, app_settings=app_settings)
