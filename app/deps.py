"""Shared FastAPI dependencies."""

from fastapi import Request

from app.store.client import Store


def get_store(request: Request) -> Store:
    """Store opened at startup; one client (and connection pool) per process."""
    return request.app.state.store
