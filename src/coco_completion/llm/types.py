"""Shared completion data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

TOP_P = 0.95


@dataclass(frozen=True)
class CompletionRequestContext:
    prefix: str
    suffix: str
    language_id: str


@dataclass(frozen=True)
class PromptConfig:
    is_fill_mode: bool
    autoregressive_template: str
    fill_mode_template: str
    stop_tokens: Tuple[str, ...]
    tokens_to_clear: Tuple[str, ...]
    temperature: float
    max_new_tokens: int
    model_id_or_endpoint: str


@dataclass
class GenerationRequest:
    prompt: str
    max_new_tokens: int
    fim: bool
    language: str
    temperature: float
    do_sample: bool
    top_p: float = TOP_P
    stop: List[str] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "prompt": self.prompt,
            "parameters": self.parameters(),
        }

    def parameters(self) -> Dict[str, Any]:
        return {
            "max_new_tokens": self.max_new_tokens,
            "fim": self.fim,
            "language": self.language,
            "temperature": self.temperature,
            "do_sample": self.do_sample,
            "top_p": self.top_p,
            "stop": list(self.stop),
        }


@dataclass
class GenerationResult:
    insertion_text: str
    endpoint: str = ""
    fim: bool = False
    latency_ms: int = 0


@dataclass
class ProviderResponse:
    """Raw outcome of one HTTP exchange with the inference endpoint."""

    status_code: int
    reason: str = ""
    body: Any = None
    latency_ms: int = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class CompletionError(RuntimeError):
    """Base class for completion client failures."""


class CompletionTransportError(CompletionError):
    """The inference endpoint could not be reached or timed out."""


class ConfigError(CompletionError):
    """Completion settings cannot be turned into a usable prompt config."""
