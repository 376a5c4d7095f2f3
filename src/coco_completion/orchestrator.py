"""Completion request orchestration: context -> prompt -> request -> insertion text."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional, Protocol

from .context import CHAR_LIMIT, context_from_document
from .credentials import API_TOKEN_KEY, CredentialStore
from .document import Position, TextSource
from .llm.dispatcher import RequestDispatcher
from .llm.endpoint import EndpointResolver
from .llm.response import sanitize_generated_text
from .llm.types import (
    CompletionRequestContext,
    CompletionTransportError,
    GenerationRequest,
    GenerationResult,
    PromptConfig,
)
from .output import LogSink
from .prompts import build_prompt
from .status import StatusReporter
from .validators import clip_max_new_tokens

DEFAULT_TIMEOUT_SECONDS = 30.0

logger = logging.getLogger(__name__)


class CallHistory(Protocol):
    def record(self, **fields: Any) -> None:
        ...


def build_generation_request(context: CompletionRequestContext, config: PromptConfig) -> GenerationRequest:
    prompt, fim = build_prompt(context.prefix, context.suffix, config)
    return GenerationRequest(
        prompt=prompt,
        max_new_tokens=clip_max_new_tokens(config.max_new_tokens),
        fim=fim,
        language=context.language_id,
        temperature=config.temperature,
        do_sample=config.temperature > 0,
        stop=list(config.stop_tokens),
    )


class CompletionOrchestrator:
    def __init__(
        self,
        credential_store: CredentialStore,
        status: StatusReporter,
        resolver: EndpointResolver,
        dispatcher: RequestDispatcher,
        log_sink: LogSink,
        history: CallHistory | None = None,
        char_limit: int = CHAR_LIMIT,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        token_key: str = API_TOKEN_KEY,
    ) -> None:
        self.credential_store = credential_store
        self.status = status
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.log_sink = log_sink
        self.history = history
        self.char_limit = char_limit
        self.timeout_seconds = timeout_seconds
        self.token_key = token_key

    def run_completion(
        self,
        document: TextSource,
        position: Position,
        config: PromptConfig,
        timeout: float | None = None,
        current_suggestion_text: str = "",
        cancel_event: threading.Event | None = None,
    ) -> Optional[GenerationResult]:
        """Produces a completion for the cursor ``position`` in ``document``.

        Returns ``None`` when the endpoint answered with a non-success status
        or the call was cancelled through ``cancel_event``. Transport failures
        raise ``CompletionTransportError``. The status surface is back to idle
        on every path.

        ``cancel_event`` is checked twice: before the request is sent and after
        the response comes back. A request already on the wire is not
        interrupted; it is bounded only by ``timeout``.
        """
        with self.status.working():
            context = context_from_document(
                document,
                position,
                char_limit=self.char_limit,
                current_suggestion_text=current_suggestion_text,
            )
            return self._complete(context, config, timeout, cancel_event)

    def complete(
        self,
        context: CompletionRequestContext,
        config: PromptConfig,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Optional[GenerationResult]:
        with self.status.working():
            return self._complete(context, config, timeout, cancel_event)

    def _complete(
        self,
        context: CompletionRequestContext,
        config: PromptConfig,
        timeout: float | None,
        cancel_event: threading.Event | None,
    ) -> Optional[GenerationResult]:
        credential = self.credential_store.get(self.token_key)
        endpoint = self.resolver.resolve(config.model_id_or_endpoint, credential)
        request = build_generation_request(context, config)
        self._log_input(request)

        if cancel_event is not None and cancel_event.is_set():
            logger.debug("Completion cancelled before dispatch")
            self._record(endpoint, request, status="cancelled")
            return None

        try:
            response = self.dispatcher.send(
                endpoint,
                request,
                credential,
                timeout if timeout is not None else self.timeout_seconds,
            )
        except CompletionTransportError as exc:
            logger.error("Completion request to %s failed: %s", endpoint, exc)
            self._record(endpoint, request, status="transport_error", meta={"error": str(exc)})
            raise

        if cancel_event is not None and cancel_event.is_set():
            logger.debug("Completion cancelled, dropping response")
            self._record(endpoint, request, status="cancelled", status_code=response.status_code)
            return None

        generated = self.dispatcher.interpret(response)
        if generated is None:
            self._record(
                endpoint,
                request,
                status="http_error",
                status_code=response.status_code,
                latency_ms=response.latency_ms,
                meta={"reason": response.reason},
            )
            return None

        insertion_text = sanitize_generated_text(
            generated,
            request.prompt,
            config.stop_tokens,
            config.tokens_to_clear,
        )
        self._log_output(insertion_text)
        self._record(
            endpoint,
            request,
            status="ok",
            status_code=response.status_code,
            latency_ms=response.latency_ms,
            output_chars=len(insertion_text),
        )
        return GenerationResult(
            insertion_text=insertion_text,
            endpoint=endpoint,
            fim=request.fim,
            latency_ms=response.latency_ms,
        )

    def _log_input(self, request: GenerationRequest) -> None:
        try:
            self.log_sink.log_input(request.prompt, request.parameters())
        except Exception as exc:
            logger.warning("Output channel rejected input log: %s", exc)

    def _log_output(self, text: str) -> None:
        try:
            self.log_sink.log_output(text)
        except Exception as exc:
            logger.warning("Output channel rejected output log: %s", exc)

    def _record(self, endpoint: str, request: GenerationRequest, status: str, **fields: Any) -> None:
        if self.history is None:
            return
        try:
            self.history.record(
                endpoint=endpoint,
                language=request.language,
                fim=request.fim,
                status=status,
                prompt_chars=len(request.prompt),
                **fields,
            )
        except Exception as exc:
            logger.warning("Could not record completion call: %s", exc)
