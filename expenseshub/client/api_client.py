"""
HTTP API Client

Thin wrapper over httpx that speaks the ExpensesHub API and turns
error responses back into the same exception classes the server
raised. Network failures surface as DependencyError.
"""

from datetime import datetime
from typing import Any, Optional, Union

import httpx
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from expenseshub.config import get_settings
from expenseshub.errors import (
    ConflictError,
    DependencyError,
    ExpensesHubError,
    NotFoundError,
    ValidationError,
)
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


logger = get_logger(__name__)

ERRORS_BY_STATUS: dict[int, type[ExpensesHubError]] = {
    404: NotFoundError,
    409: ConflictError,
    503: DependencyError,
}


def error_from_response(response: httpx.Response) -> ExpensesHubError:
    """Rebuild the server-side exception from an error response."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = body.get("message") or f"HTTP {response.status_code}"

    if response.status_code == 400:
        issues = [ValidationIssue(**issue) for issue in body.get("issues") or []]
        return ValidationError(message, issues)

    error_class = ERRORS_BY_STATUS.get(response.status_code, ExpensesHubError)
    return error_class(message)


def _decode(response: httpx.Response, model: type[BaseModel], many: bool = False) -> Any:
    """Parse a success body, reporting malformed ones as ExpensesHubError."""
    try:
        body = response.json()
        if many:
            return [model.model_validate(item) for item in body]
        return model.model_validate(body)
    except (ValueError, TypeError) as e:
        logger.error("api_malformed_response", url=str(response.url), status=response.status_code)
        raise ExpensesHubError(f"Malformed response from API: {type(e).__name__}") from e


def _encode(payload: Union[BaseModel, dict[str, Any], None]) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True, exclude_unset=True)
    return to_jsonable_python(payload)


def _params(**values: Any) -> dict[str, str]:
    params = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, (PeriodType, TransactionType)):
            value = value.value
        params[key] = value
    return params


class ApiClient:
    """
    Synchronous API client.

    Accepts any httpx.Client, so tests can pass FastAPI's TestClient
    and talk to the app in process.
    """

    def __init__(
        self,
        http: Optional[httpx.Client] = None,
        base_url: Optional[str] = None,
        timeout: float = 15.0,
    ):
        if http is None:
            http = httpx.Client(
                base_url=base_url or get_settings().app.api_base_url,
                timeout=timeout,
            )
        self._http = http

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error("api_unreachable", method=method, path=path, error=str(e))
            raise DependencyError(f"API unreachable: {e}") from e

        if response.is_error:
            raise error_from_response(response)
        return response

    # Transactions

    def list_transactions(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        type: Union[str, TransactionType, None] = None,
    ) -> list[TransactionView]:
        response = self._request(
            "GET",
            "/api/transactions",
            params=_params(startDate=start_date, endDate=end_date, type=type),
        )
        return _decode(response, TransactionView, many=True)

    def create_transaction(self, payload: Union[BaseModel, dict[str, Any]]) -> Transaction:
        response = self._request("POST", "/api/transactions", json=_encode(payload))
        return _decode(response, Transaction)

    def update_transaction(
        self,
        transaction_id: str,
        changes: Union[BaseModel, dict[str, Any]],
    ) -> Transaction:
        response = self._request(
            "PATCH", f"/api/transactions/{transaction_id}", json=_encode(changes)
        )
        return _decode(response, Transaction)

    def delete_transaction(self, transaction_id: str) -> None:
        self._request("DELETE", f"/api/transactions/{transaction_id}")

    def export_csv(
        self,
        period: Union[str, PeriodType] = PeriodType.MONTHLY,
        date: Optional[datetime] = None,
    ) -> str:
        response = self._request(
            "GET",
            "/api/transactions/export",
            params=_params(period=period, date=date),
        )
        return response.text

    # Categories

    def list_categories(self, type: Union[str, TransactionType, None] = None) -> list[Category]:
        response = self._request("GET", "/api/categories", params=_params(type=type))
        return _decode(response, Category, many=True)

    def create_category(self, payload: Union[BaseModel, dict[str, Any]]) -> Category:
        response = self._request("POST", "/api/categories", json=_encode(payload))
        return _decode(response, Category)

    # Settings

    def get_settings(self) -> UserSettings:
        return _decode(self._request("GET", "/api/settings"), UserSettings)

    def update_settings(self, changes: Union[BaseModel, dict[str, Any]]) -> UserSettings:
        response = self._request("PATCH", "/api/settings", json=_encode(changes))
        return _decode(response, UserSettings)

    # Reports

    def get_breakdown(
        self,
        period: Union[str, PeriodType] = PeriodType.MONTHLY,
        date: Optional[datetime] = None,
        type: Union[str, TransactionType] = TransactionType.EXPENSE,
    ) -> BreakdownReport:
        response = self._request(
            "GET",
            "/api/reports/breakdown",
            params=_params(period=period, date=date, type=type),
        )
        return _decode(response, BreakdownReport)

    def health(self) -> dict[str, Any]:
        return self._request("GET", "/health").json()

    def close(self) -> None:
        self._http.close()
