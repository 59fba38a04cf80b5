"""
Client Package

API client and the state stores the dashboard is built on.
"""

from expenseshub.client.api_client import ApiClient, error_from_response
from expenseshub.client.stores import CategoryStore, SettingsStore, TransactionStore

__all__ = [
    "ApiClient",
    "CategoryStore",
    "SettingsStore",
    "TransactionStore",
    "error_from_response",
]
