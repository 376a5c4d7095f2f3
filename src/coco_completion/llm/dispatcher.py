"""Outbound request handling and response classification."""

from __future__ import annotations

import logging
from typing import Optional

from ..notifications import ErrorNotifier
from .providers.base import CompletionProvider
from .response import decode_response
from .types import GenerationRequest, ProviderResponse

logger = logging.getLogger(__name__)


class RequestDispatcher:
    def __init__(self, provider: CompletionProvider, error_notifier: ErrorNotifier) -> None:
        self.provider = provider
        self.error_notifier = error_notifier

    def send(
        self,
        endpoint: str,
        request: GenerationRequest,
        credential: str | None,
        timeout_seconds: float,
    ) -> ProviderResponse:
        """Posts the request. Transport failures propagate as ``CompletionTransportError``."""
        return self.provider.generate(endpoint, request, credential, timeout_seconds)

    def interpret(self, response: ProviderResponse) -> Optional[str]:
        """Returns the generated text, or ``None`` for a non-success status."""
        if not response.ok:
            logger.error("Error sending a request: %s %s", response.status_code, response.reason)
            self.error_notifier.notify(response.status_code, response.reason)
            return None
        decoded = decode_response(response.body)
        logger.debug("Decoded %s response (%d chars)", decoded.shape.value, len(decoded.text))
        return decoded.text
