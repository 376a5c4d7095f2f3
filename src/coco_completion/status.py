"""Working/idle indicator around completion requests."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Protocol

logger = logging.getLogger(__name__)

BRAND_LABEL = "CoCo"


class Status(str, Enum):
    LOADING = "loading"
    IDLE = "idle"


class StatusSurface(Protocol):
    def set_loading(self, label: str) -> None:
        ...

    def set_idle(self) -> None:
        ...


class LoggingStatusSurface:
    def set_loading(self, label: str) -> None:
        logger.debug("%s: working", label)

    def set_idle(self) -> None:
        logger.debug("idle")


class StatusReporter:
    """Loading/Idle indicator shared by every call on one orchestrator.

    Overlapping calls are counted; the surface returns to Idle only once the
    last of them has finished.
    """

    def __init__(self, surface: StatusSurface, label: str = BRAND_LABEL) -> None:
        self.surface = surface
        self.label = label
        self.status = Status.IDLE
        self._in_flight = 0
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    def loading(self) -> None:
        with self._lock:
            self._in_flight += 1
            if self._in_flight > 1:
                return
            self.status = Status.LOADING
            self.surface.set_loading(self.label)

    def idle(self) -> None:
        with self._lock:
            if self._in_flight == 0:
                return
            self._in_flight -= 1
            if self._in_flight:
                return
            self.status = Status.IDLE
            self.surface.set_idle()

    @contextmanager
    def working(self) -> Iterator["StatusReporter"]:
        """Holds the Loading state for the body and always falls back to Idle."""
        self.loading()
        try:
            yield self
        finally:
            self.idle()
