# -*- coding: utf-8 -*-
"""FastAPI dependencies resolving the process-wide clients held on app.state.

They take an `HTTPConnection` so WebSocket routes can use them too.
"""

from __future__ import annotations

from starlette.requests import HTTPConnection

from .ai.service import AIDraftingService
from .cache import CacheService
from .config import Settings
from .documents import DocumentStore


def get_settings(conn: HTTPConnection) -> Settings:
    return conn.app.state.settings


def get_store(conn: HTTPConnection) -> DocumentStore:
    return conn.app.state.store


def get_cache(conn: HTTPConnection) -> CacheService:
    return conn.app.state.cache


def get_ai(conn: HTTPConnection) -> AIDraftingService:
    return conn.app.state.ai
