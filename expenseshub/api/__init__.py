"""
HTTP API Package

FastAPI application factory and route modules.
"""

from expenseshub.api.app import create_app, run

__all__ = ["create_app", "run"]
