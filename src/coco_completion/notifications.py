"""User-facing notifications: popups, URL opening and error throttling."""

from __future__ import annotations

import logging
import threading
import webbrowser
from typing import Callable, Dict, Optional, Protocol

from .utils import now_ms

ERROR_COOLDOWN_MS = 300_000

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def show_error(self, message: str) -> None:
        ...

    def show_info(self, message: str, *actions: str) -> Optional[str]:
        ...


class UrlOpener(Protocol):
    def open(self, url: str) -> None:
        ...


class LoggingNotifier:
    """Writes notifications to the log; never picks an action."""

    def show_error(self, message: str) -> None:
        logger.error(message)

    def show_info(self, message: str, *actions: str) -> Optional[str]:
        if actions:
            logger.info("%s [%s]", message, ", ".join(actions))
        else:
            logger.info(message)
        return None


class BrowserUrlOpener:
    def open(self, url: str) -> None:
        webbrowser.open(url)


class ErrorNotifier:
    """Shows at most one error popup per HTTP status code per cooldown window."""

    def __init__(
        self,
        notifier: Notifier,
        cooldown_ms: int = ERROR_COOLDOWN_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.notifier = notifier
        self.cooldown_ms = cooldown_ms
        self._clock = clock
        self._shown_at: Dict[int, int] = {}
        self._lock = threading.Lock()

    def should_show(self, status_code: int) -> bool:
        now = self._clock()
        with self._lock:
            last = self._shown_at.get(status_code)
            if last is not None and now - last <= self.cooldown_ms:
                return False
            self._shown_at[status_code] = now
            return True

    def notify(self, status_code: int, reason: str) -> bool:
        if not self.should_show(status_code):
            logger.debug("Suppressed error popup for HTTP %s", status_code)
            return False
        try:
            self.notifier.show_error(f"CoCo Error: code - {status_code}; msg - {reason}")
        except Exception as exc:
            logger.warning("Error popup could not be shown: %s", exc)
            return False
        return True

    def last_shown(self, status_code: int) -> Optional[int]:
        with self._lock:
            return self._shown_at.get(status_code)
