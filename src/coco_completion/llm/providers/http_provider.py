"""Text-generation inference endpoint over plain HTTP."""

from __future__ import annotations

import time
from typing import Dict

import requests

from ..types import CompletionTransportError, GenerationRequest, ProviderResponse


def build_headers(credential: str | None) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if credential:
        headers["Authorization"] = f"Bearer {credential}"
    return headers


class HttpInferenceProvider:
    name = "http"

    def generate(
        self,
        endpoint: str,
        request: GenerationRequest,
        credential: str | None,
        timeout_seconds: float,
    ) -> ProviderResponse:
        start = time.perf_counter()
        try:
            res = requests.post(
                endpoint,
                json=request.to_payload(),
                headers=build_headers(credential),
                timeout=timeout_seconds,
            )
        except requests.RequestException as exc:
            raise CompletionTransportError(str(exc)) from exc

        latency_ms = int((time.perf_counter() - start) * 1000)
        if not 200 <= res.status_code < 300:
            return ProviderResponse(
                status_code=res.status_code,
                reason=res.reason or "",
                latency_ms=latency_ms,
            )

        try:
            data = res.json() if res.text else None
        except ValueError:
            data = None

        return ProviderResponse(
            status_code=res.status_code,
            reason=res.reason or "",
            body=data,
            latency_ms=latency_ms,
        )
