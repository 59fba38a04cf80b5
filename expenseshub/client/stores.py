"""
Client State Stores

DESIGN DECISION: State lives in explicit store objects that the
application shell creates and hands to its views. There are no
module-level singletons, so two dashboards (or two tests) never share
state by accident.

Each store follows the same rules:
- fetch replaces the whole list; failures are swallowed into `error`
- create adds the record only after the server confirms it
- update and delete apply locally first, then call the server, and
  undo the local change if the server refuses
- mutation failures set `error` and re-raise; nothing is retried
"""

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel
from pydantic.alias_generators import to_snake

from expenseshub.client.api_client import ApiClient
from expenseshub.errors import ExpensesHubError
from expenseshub.export import export_filename, generate_csv
from expenseshub.logger import get_logger
from expenseshub.models import (
    Category,
    ChartDataPoint,
    PeriodType,
    TransactionType,
    TransactionView,
    UserSettings,
)
from expenseshub.queries import breakdown


logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _field_changes(changes: Union[BaseModel, dict[str, Any]]) -> dict[str, Any]:
    """Change set keyed by attribute name, whichever spelling the caller used."""
    if isinstance(changes, BaseModel):
        return changes.model_dump(exclude_unset=True)
    return {to_snake(key): value for key, value in changes.items()}


class _ListStore(Generic[RecordT]):
    """Shared list bookkeeping for the transaction and category stores."""

    def __init__(self, api: ApiClient):
        self._api = api
        self._items: list[RecordT] = []
        self.loading = False
        self.error: Optional[str] = None

    @property
    def items(self) -> tuple[RecordT, ...]:
        """Read-only snapshot of the current records."""
        return tuple(self._items)

    def get(self, record_id: str) -> Optional[RecordT]:
        for item in self._items:
            if item.id == record_id:
                return item
        return None

    def _index(self, record_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == record_id:
                return index
        return None

    def _run_fetch(self, load, **context) -> None:
        self.loading = True
        try:
            self._items = list(load())
            self.error = None
        except ExpensesHubError as e:
            self.error = e.message
            logger.warning("store_fetch_failed", store=type(self).__name__, error=e.message, **context)
        finally:
            self.loading = False

    def _fail(self, exc: ExpensesHubError, action: str, record_id: Optional[str] = None) -> None:
        self.error = exc.message
        logger.warning(
            "store_mutation_failed",
            store=type(self).__name__,
            action=action,
            record_id=record_id,
            error=exc.message,
        )

    def _confirmed(self, previous: Optional[RecordT], confirmed) -> RecordT:
        return confirmed

    def _optimistic_update(self, record_id: str, changes, send) -> RecordT:
        index = self._index(record_id)
        previous = self._items[index] if index is not None else None
        if previous is not None:
            self._items[index] = previous.model_copy(update=_field_changes(changes))

        try:
            confirmed = send()
        except ExpensesHubError as e:
            if previous is not None:
                current = self._index(record_id)
                if current is not None:
                    self._items[current] = previous
            self._fail(e, "update", record_id)
            raise

        confirmed = self._confirmed(previous, confirmed)
        current = self._index(record_id)
        if current is not None:
            self._items[current] = confirmed
        self.error = None
        return confirmed

    def _optimistic_delete(self, record_id: str, send) -> None:
        index = self._index(record_id)
        removed = self._items.pop(index) if index is not None else None

        try:
            send()
        except ExpensesHubError as e:
            if removed is not None:
                self._items.insert(min(index, len(self._items)), removed)
            self._fail(e, "delete", record_id)
            raise
        self.error = None


class TransactionStore(_ListStore[TransactionView]):
    """Transactions currently shown by the dashboard, newest first."""

    def _confirmed(self, previous, confirmed) -> TransactionView:
        """Server records come back bare; keep the embedded category while it still applies."""
        category = None
        if previous is not None and previous.category_id == confirmed.category_id:
            category = getattr(previous, "category", None)
        return TransactionView(**confirmed.model_dump(exclude={"category"}), category=category)

    def fetch(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        type: Union[str, TransactionType, None] = None,
    ) -> None:
        self._run_fetch(lambda: self._api.list_transactions(start_date, end_date, type))

    def create(self, payload: Union[BaseModel, dict[str, Any]]) -> TransactionView:
        try:
            transaction = self._confirmed(None, self._api.create_transaction(payload))
        except ExpensesHubError as e:
            self._fail(e, "create")
            raise
        self._items.insert(0, transaction)
        self.error = None
        return transaction

    def update(self, transaction_id: str, changes: Union[BaseModel, dict[str, Any]]) -> TransactionView:
        return self._optimistic_update(
            transaction_id,
            changes,
            lambda: self._api.update_transaction(transaction_id, changes),
        )

    def delete(self, transaction_id: str) -> None:
        self._optimistic_delete(
            transaction_id,
            lambda: self._api.delete_transaction(transaction_id),
        )

    def breakdown(
        self,
        categories: Union[tuple[Category, ...], list[Category]],
        type: TransactionType = TransactionType.EXPENSE,
    ) -> list[ChartDataPoint]:
        """Chart points for the loaded transactions of one type."""
        return breakdown((t for t in self._items if t.type == type), categories)

    def export_csv(
        self,
        categories: Union[tuple[Category, ...], list[Category]],
        period: Union[str, PeriodType] = PeriodType.MONTHLY,
    ) -> tuple[str, str]:
        """(filename, csv_text) for the loaded transactions."""
        return export_filename(period), generate_csv(self._items, categories)


class CategoryStore(_ListStore[Category]):
    """Categories, in server order (display order within each type)."""

    def fetch(self, type: Union[str, TransactionType, None] = None) -> None:
        self._run_fetch(lambda: self._api.list_categories(type))

    def by_type(self, type: TransactionType) -> tuple[Category, ...]:
        return tuple(c for c in self._items if c.type == type)

    def create(self, payload: Union[BaseModel, dict[str, Any]]) -> Category:
        try:
            category = self._api.create_category(payload)
        except ExpensesHubError as e:
            self._fail(e, "create")
            raise
        self._items.append(category)
        self.error = None
        return category


class SettingsStore:
    """The preferences singleton."""

    def __init__(self, api: ApiClient):
        self._api = api
        self._settings: Optional[UserSettings] = None
        self.loading = False
        self.error: Optional[str] = None

    @property
    def settings(self) -> Optional[UserSettings]:
        return self._settings

    def fetch(self) -> None:
        self.loading = True
        try:
            self._settings = self._api.get_settings()
            self.error = None
        except ExpensesHubError as e:
            self.error = e.message
            logger.warning("store_fetch_failed", store="SettingsStore", error=e.message)
        finally:
            self.loading = False

    def update(self, changes: Union[BaseModel, dict[str, Any]]) -> UserSettings:
        previous = self._settings
        if previous is not None:
            self._settings = previous.model_copy(update=_field_changes(changes))

        try:
            confirmed = self._api.update_settings(changes)
        except ExpensesHubError as e:
            self._settings = previous
            self.error = e.message
            logger.warning("store_mutation_failed", store="SettingsStore", action="update", error=e.message)
            raise

        self._settings = confirmed
        self.error = None
        return confirmed
