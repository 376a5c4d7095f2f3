"""Host-facing commands and default wiring of the completion client."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Optional

from .credentials import (
    API_TOKEN_KEY,
    CredentialStore,
    EnvCredentialStore,
    MemoryCredentialStore,
    SQLiteCredentialStore,
)
from .llm.dispatcher import RequestDispatcher
from .llm.endpoint import TOKEN_DOCS_URL, EndpointResolver
from .llm.providers.base import CompletionProvider
from .llm.providers.http_provider import HttpInferenceProvider
from .notifications import BrowserUrlOpener, ErrorNotifier, LoggingNotifier, Notifier, UrlOpener
from .orchestrator import CompletionOrchestrator
from .output import FanOutLogSink, LoggingLogSink, SQLiteCallHistory, SQLiteLogSink
from .status import LoggingStatusSurface, StatusReporter, StatusSurface

TOKEN_SAVED_MESSAGE = "CoCo: API Token was successfully saved"


def set_api_token(
    store: CredentialStore,
    value: Optional[str],
    notifier: Notifier,
    key: str = API_TOKEN_KEY,
) -> bool:
    """Stores the token entered by the user. ``None`` means the input was dismissed."""
    if value is None:
        return False
    store.set(key, value)
    notifier.show_info(TOKEN_SAVED_MESSAGE)
    return True


def open_token_docs(opener: UrlOpener, url: str = TOKEN_DOCS_URL) -> None:
    opener.open(url)


def create_orchestrator(
    settings: Dict[str, Any],
    conn: sqlite3.Connection | None = None,
    notifier: Notifier | None = None,
    status_surface: StatusSurface | None = None,
    url_opener: UrlOpener | None = None,
    provider: CompletionProvider | None = None,
    credential_store: CredentialStore | None = None,
) -> CompletionOrchestrator:
    notifier = notifier or LoggingNotifier()
    auth_cfg = settings.get("auth", {})
    completion_cfg = settings.get("completion", {})

    if credential_store is None:
        inner = SQLiteCredentialStore(conn) if conn is not None else MemoryCredentialStore()
        credential_store = EnvCredentialStore(inner)

    if conn is not None:
        log_sink = FanOutLogSink(LoggingLogSink(), SQLiteLogSink(conn))
        history = SQLiteCallHistory(conn)
    else:
        log_sink = LoggingLogSink()
        history = None

    error_notifier = ErrorNotifier(
        notifier,
        cooldown_ms=int(settings.get("notifications", {}).get("error_cooldown_ms", 300_000)),
    )
    resolver = EndpointResolver(
        notifier,
        url_opener or BrowserUrlOpener(),
        docs_url=str(auth_cfg.get("token_docs_url", TOKEN_DOCS_URL)),
    )
    return CompletionOrchestrator(
        credential_store=credential_store,
        status=StatusReporter(status_surface or LoggingStatusSurface()),
        resolver=resolver,
        dispatcher=RequestDispatcher(provider or HttpInferenceProvider(), error_notifier),
        log_sink=log_sink,
        history=history,
        char_limit=int(completion_cfg.get("char_limit", 4000)),
        timeout_seconds=float(completion_cfg.get("timeout_seconds", 30)),
        token_key=str(auth_cfg.get("token_key", API_TOKEN_KEY)),
    )
