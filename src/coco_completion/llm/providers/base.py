"""Completion provider interface."""

from __future__ import annotations

from typing import Protocol

from ..types import GenerationRequest, ProviderResponse


class CompletionProvider(Protocol):
    name: str

    def generate(
        self,
        endpoint: str,
        request: GenerationRequest,
        credential: str | None,
        timeout_seconds: float,
    ) -> ProviderResponse:
        ...
