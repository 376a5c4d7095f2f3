"""Endpoint resolution and the one-time missing-token advisory."""

from __future__ import annotations

import logging
import threading
from urllib.parse import urlparse

from ..notifications import Notifier, UrlOpener

GET_TOKEN_ACTION = "Get your token"
TOKEN_DOCS_URL = "https://github.com/CapcoDigitalEngineering/coco-vscode#api-token"

logger = logging.getLogger(__name__)


def is_absolute_url(value: str) -> bool:
    """True when ``value`` carries a URL scheme, e.g. ``https:`` or ``localhost:``."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme)


class EndpointResolver:
    """Maps the configured model id or URL to the endpoint to POST to.

    The advisory flag lives on the instance: each resolver shows the
    missing-token advisory at most once.
    """

    def __init__(
        self,
        notifier: Notifier,
        url_opener: UrlOpener,
        docs_url: str = TOKEN_DOCS_URL,
    ) -> None:
        self.notifier = notifier
        self.url_opener = url_opener
        self.docs_url = docs_url
        self._warned = False
        self._lock = threading.Lock()

    @property
    def did_show_token_warning(self) -> bool:
        return self._warned

    def resolve(self, model_id_or_endpoint: str, credential: str | None) -> str:
        if not is_absolute_url(model_id_or_endpoint) and not credential:
            self._warn_missing_token(model_id_or_endpoint)
        return model_id_or_endpoint

    def _warn_missing_token(self, model_id: str) -> None:
        with self._lock:
            if self._warned:
                return
            self._warned = True

        logger.info("No API token stored for model id %s", model_id)
        try:
            clicked = self.notifier.show_info(
                f'In order to use "{model_id}" through CoCo API Inference, '
                "you'd need a CoCo token",
                GET_TOKEN_ACTION,
            )
            if clicked:
                self.url_opener.open(self.docs_url)
        except Exception as exc:
            logger.warning("Token advisory could not be shown: %s", exc)
