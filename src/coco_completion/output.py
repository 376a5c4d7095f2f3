"""Output channel for prompts sent and completions received."""

from __future__ import annotations

import logging
import sqlite3
import threading
from typing import Any, Dict, Protocol

from .models import append_output_log, log_completion_call

logger = logging.getLogger("coco_completion.output")


class LogSink(Protocol):
    def log_input(self, prompt: str, parameters: Dict[str, Any]) -> None:
        ...

    def log_output(self, text: str) -> None:
        ...


class LoggingLogSink:
    def log_input(self, prompt: str, parameters: Dict[str, Any]) -> None:
        logger.info("INPUT parameters=%s\n%s", parameters, prompt)

    def log_output(self, text: str) -> None:
        logger.info("OUTPUT\n%s", text)


class SQLiteLogSink:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._lock = threading.Lock()

    def log_input(self, prompt: str, parameters: Dict[str, Any]) -> None:
        with self._lock:
            append_output_log(self.conn, "input", prompt, parameters)

    def log_output(self, text: str) -> None:
        with self._lock:
            append_output_log(self.conn, "output", text)


class FanOutLogSink:
    def __init__(self, *sinks: LogSink) -> None:
        self.sinks = sinks

    def log_input(self, prompt: str, parameters: Dict[str, Any]) -> None:
        for sink in self.sinks:
            sink.log_input(prompt, parameters)

    def log_output(self, text: str) -> None:
        for sink in self.sinks:
            sink.log_output(text)


class SQLiteCallHistory:
    """Records one ``completion_calls`` row per finished request."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._lock = threading.Lock()

    def record(self, **fields: Any) -> None:
        with self._lock:
            log_completion_call(self.conn, **fields)
