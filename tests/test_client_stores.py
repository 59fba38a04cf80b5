"""
Tests for the API client and the client state stores.

The client talks to the real app through TestClient. Rollback paths
use a stub API whose mutations fail on demand.
"""

import httpx
import pytest
from datetime import datetime, timezone
from decimal import Decimal

from conftest import make_category, make_transaction
from expenseshub.client import ApiClient, CategoryStore, SettingsStore, TransactionStore, error_from_response
from expenseshub.errors import (
    ConflictError,
    DependencyError,
    ExpensesHubError,
    NotFoundError,
    ValidationError,
)
from expenseshub.models import TransactionType, TransactionView, UserSettings


@pytest.fixture
def client(api):
    return ApiClient(api)


class StubApi:
    """Stands in for ApiClient; fails mutations when `fail` is set."""

    def __init__(self, transactions=(), categories=(), settings=None):
        self.transactions = list(transactions)
        self.categories = list(categories)
        self.settings = settings
        self.fail = None

    def _maybe_fail(self):
        if self.fail is not None:
            raise self.fail

    def list_transactions(self, *args):
        self._maybe_fail()
        return list(self.transactions)

    def create_transaction(self, payload):
        self._maybe_fail()
        return make_transaction(payload["amount"], id="new")

    def update_transaction(self, transaction_id, changes):
        self._maybe_fail()
        current = next(t for t in self.transactions if t.id == transaction_id)
        return current.model_copy(update={"description": changes["description"]})

    def delete_transaction(self, transaction_id):
        self._maybe_fail()

    def list_categories(self, type=None):
        self._maybe_fail()
        return list(self.categories)

    def create_category(self, payload):
        self._maybe_fail()
        return make_category("new", payload["name"], order=9)

    def get_settings(self):
        self._maybe_fail()
        return self.settings

    def update_settings(self, changes):
        self._maybe_fail()
        return self.settings.model_copy(update={"currency": changes["currency"]})


@pytest.fixture
def seeded():
    return [
        make_transaction("10", id="a", date=datetime(2024, 3, 3, tzinfo=timezone.utc)),
        make_transaction("20", id="b", date=datetime(2024, 3, 2, tzinfo=timezone.utc)),
        make_transaction("30", id="c", date=datetime(2024, 3, 1, tzinfo=timezone.utc)),
    ]


class TestApiClient:
    """Tests for the HTTP client over the in-process app."""

    def test_round_trip(self, client):
        food = next(c for c in client.list_categories("expense") if c.name == "Food")

        created = client.create_transaction({
            "type": "expense",
            "amount": Decimal("19.999"),
            "categoryId": food.id,
            "date": datetime(2024, 3, 15, 12, tzinfo=timezone.utc),
        })
        listed = client.list_transactions(type=TransactionType.EXPENSE)

        assert created.amount == Decimal("20.00")
        assert [t.id for t in listed] == [created.id]
        assert listed[0].category.name == "Food"

    def test_validation_error_carries_issues(self, client):
        with pytest.raises(ValidationError) as exc_info:
            client.create_category({"name": "", "type": "expense"})
        assert exc_info.value.fields == ["name"]

    def test_conflict(self, client):
        with pytest.raises(ConflictError):
            client.create_category({"name": "Food", "type": "expense"})

    def test_not_found(self, client):
        with pytest.raises(NotFoundError):
            client.delete_transaction("missing")

    def test_settings_and_report(self, client):
        assert client.get_settings().currency == "EUR"
        assert client.update_settings({"currency": "gbp"}).currency == "GBP"
        report = client.get_breakdown("weekly", datetime(2024, 3, 14, tzinfo=timezone.utc))
        assert report.points == []

    def test_export(self, client):
        content = client.export_csv("daily", datetime(2024, 3, 14, tzinfo=timezone.utc))
        assert content == '"Date","Type","Category","Description","Amount"\n'

    def test_network_failure_is_dependency_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        http = httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://api.test")
        with pytest.raises(DependencyError):
            ApiClient(http).list_categories()

    def test_malformed_body_is_reported(self):
        def html(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        http = httpx.Client(transport=httpx.MockTransport(html), base_url="http://api.test")
        with pytest.raises(ExpensesHubError) as exc_info:
            ApiClient(http).list_categories()
        assert exc_info.value.message.startswith("Malformed response")

    def test_unknown_error_body(self):
        response = httpx.Response(502, text="Bad gateway")
        error = error_from_response(response)
        assert type(error) is ExpensesHubError
        assert error.message == "HTTP 502"


class TestTransactionStore:
    """Tests for transaction state and optimistic mutations."""

    def test_fetch_replaces_items(self, seeded):
        store = TransactionStore(StubApi(transactions=seeded))
        store.fetch()

        assert [t.id for t in store.items] == ["a", "b", "c"]
        assert isinstance(store.items, tuple)
        assert store.loading is False
        assert store.error is None

    def test_fetch_failure_is_swallowed(self, seeded):
        api = StubApi(transactions=seeded)
        store = TransactionStore(api)
        store.fetch()
        api.fail = DependencyError("API unreachable")

        store.fetch()

        assert store.error == "API unreachable"
        assert store.loading is False
        assert len(store.items) == 3

    def test_create_prepends_after_confirmation(self, seeded):
        store = TransactionStore(StubApi(transactions=seeded))
        store.fetch()

        store.create({"amount": "5"})

        assert store.items[0].id == "new"
        assert len(store.items) == 4

    def test_failed_create_leaves_items(self, seeded):
        api = StubApi(transactions=seeded)
        store = TransactionStore(api)
        store.fetch()
        api.fail = ValidationError("Invalid transaction data")

        with pytest.raises(ValidationError):
            store.create({"amount": "-1"})

        assert len(store.items) == 3
        assert store.error == "Invalid transaction data"

    def test_update_replaces_by_id(self, seeded):
        store = TransactionStore(StubApi(transactions=seeded))
        store.fetch()

        store.update("b", {"description": "Dinner"})

        assert store.get("b").description == "Dinner"
        assert [t.id for t in store.items] == ["a", "b", "c"]

    def test_failed_update_rolls_back(self, seeded):
        api = StubApi(transactions=seeded)
        store = TransactionStore(api)
        store.fetch()
        before = store.items
        api.fail = NotFoundError("Transaction not found: b")

        with pytest.raises(NotFoundError):
            store.update("b", {"description": "Dinner"})

        assert store.items == before
        assert store.error == "Transaction not found: b"

    def test_update_keeps_embedded_category(self, seeded):
        food = make_category("food", "Food")
        views = [TransactionView(**t.model_dump(), category=food) for t in seeded]
        store = TransactionStore(StubApi(transactions=views))
        store.fetch()

        updated = store.update("b", {"description": "Dinner"})

        assert all(type(t) is TransactionView for t in store.items)
        assert updated.category == food
        assert store.get("b").category == food

    def test_malformed_update_response_rolls_back(self):
        listed = make_transaction("5", id="t1").model_dump(mode="json", by_alias=True)

        def handler(request):
            if request.method == "GET":
                return httpx.Response(200, json=[listed])
            return httpx.Response(200, text="<html>gateway</html>")

        http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://api.test")
        store = TransactionStore(ApiClient(http))
        store.fetch()

        with pytest.raises(ExpensesHubError):
            store.update("t1", {"amount": 6})

        assert store.get("t1").amount == Decimal("5.00")
        assert store.error.startswith("Malformed response")

    def test_delete_removes(self, seeded):
        store = TransactionStore(StubApi(transactions=seeded))
        store.fetch()

        store.delete("b")

        assert [t.id for t in store.items] == ["a", "c"]

    def test_failed_delete_restores_position(self, seeded):
        api = StubApi(transactions=seeded)
        store = TransactionStore(api)
        store.fetch()
        api.fail = DependencyError("Database is not available")

        with pytest.raises(DependencyError):
            store.delete("b")

        assert [t.id for t in store.items] == ["a", "b", "c"]
        assert store.error == "Database is not available"

    def test_breakdown_and_export(self, seeded):
        store = TransactionStore(StubApi(transactions=seeded))
        store.fetch()
        categories = [make_category("food", "Food")]

        points = store.breakdown(categories, TransactionType.EXPENSE)
        filename, content = store.export_csv(categories, "weekly")

        assert [(p.label, p.value) for p in points] == [("Food", Decimal("60"))]
        assert "-transactions-weekly-" in filename
        assert len(content.splitlines()) == 4

    def test_store_over_real_api(self, client):
        store = TransactionStore(client)
        categories = CategoryStore(client)
        categories.fetch()
        food = next(c for c in categories.by_type(TransactionType.EXPENSE) if c.name == "Food")

        created = store.create({"type": "expense", "amount": 3, "categoryId": food.id})
        store.fetch()
        store.delete(created.id)

        assert store.items == ()
        assert client.list_transactions() == []


class TestCategoryStore:
    """Tests for category state."""

    def test_create_appends(self):
        store = CategoryStore(StubApi(categories=[make_category("food", "Food")]))
        store.fetch()

        store.create({"name": "Pets"})

        assert [c.name for c in store.items] == ["Food", "Pets"]

    def test_conflict_reraises(self):
        api = StubApi(categories=[make_category("food", "Food")])
        store = CategoryStore(api)
        store.fetch()
        api.fail = ConflictError("Category 'Food' already exists for type expense")

        with pytest.raises(ConflictError):
            store.create({"name": "Food"})

        assert [c.name for c in store.items] == ["Food"]
        assert store.error.startswith("Category 'Food'")


class TestSettingsStore:
    """Tests for the settings singleton store."""

    def test_update(self):
        store = SettingsStore(StubApi(settings=UserSettings(id="s1")))
        store.fetch()

        store.update({"currency": "USD"})

        assert store.settings.currency == "USD"

    def test_failed_update_rolls_back(self):
        api = StubApi(settings=UserSettings(id="s1"))
        store = SettingsStore(api)
        store.fetch()
        api.fail = DependencyError("Database is not available")

        with pytest.raises(DependencyError):
            store.update({"currency": "USD"})

        assert store.settings.currency == "EUR"
        assert store.error == "Database is not available"
