from fastapi import Request

from .session_store import SessionStore
from .spreads import SpreadLayoutRegistry


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_registry(request: Request) -> SpreadLayoutRegistry:
    return request.app.state.store.registry
