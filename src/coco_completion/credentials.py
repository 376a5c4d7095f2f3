"""Credential stores for the inference API token."""

from __future__ import annotations

import os
import sqlite3
import threading
from typing import Dict, Optional, Protocol

from .models import get_setting, set_setting

API_TOKEN_KEY = "apiToken"
API_TOKEN_ENV = "COCO_API_TOKEN"


class CredentialStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryCredentialStore:
    def __init__(self, values: Dict[str, str] | None = None) -> None:
        self._values = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class SQLiteCredentialStore:
    """Keeps secrets in the ``settings`` table of the local database."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return get_setting(self.conn, key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            set_setting(self.conn, key, value)


class EnvCredentialStore:
    """Falls back to an environment variable when the wrapped store has no value."""

    def __init__(self, inner: CredentialStore, env_var: str = API_TOKEN_ENV) -> None:
        self.inner = inner
        self.env_var = env_var

    def get(self, key: str) -> Optional[str]:
        value = self.inner.get(key)
        if value:
            return value
        return os.getenv(self.env_var) or None

    def set(self, key: str, value: str) -> None:
        self.inner.set(key, value)
