"""Response decoding and clean-up of generated text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Pattern


class ResponseShape(str, Enum):
    CHOICES_LIST = "choices_list"
    CHOICES_OBJECT = "choices_object"
    EMPTY = "empty"


@dataclass(frozen=True)
class DecodedResponse:
    shape: ResponseShape
    text: str


def _text_of(item: Any) -> Optional[str]:
    if isinstance(item, dict) and isinstance(item.get("text"), str):
        return item["text"]
    return None


def _decode_choices_list(body: Any) -> Optional[DecodedResponse]:
    choices = body.get("choices") if isinstance(body, dict) else None
    if isinstance(choices, list) and choices:
        text = _text_of(choices[0])
        if text is not None:
            return DecodedResponse(ResponseShape.CHOICES_LIST, text)
    return None


def _decode_choices_object(body: Any) -> Optional[DecodedResponse]:
    choices = body.get("choices") if isinstance(body, dict) else None
    text = _text_of(choices)
    if text is not None:
        return DecodedResponse(ResponseShape.CHOICES_OBJECT, text)
    return None


# Tried in order; the first decoder that recognizes the body wins.
DECODERS = (_decode_choices_list, _decode_choices_object)


def decode_response(body: Any) -> DecodedResponse:
    """Reads generated text from either known backend response convention.

    ``{"choices": [{"text": ...}, ...]}`` is preferred, ``{"choices": {"text": ...}}``
    is the fallback, and anything else decodes to empty text.
    """
    for decoder in DECODERS:
        decoded = decoder(body)
        if decoded is not None:
            return decoded
    return DecodedResponse(ResponseShape.EMPTY, "")


def build_clear_pattern(stop_tokens: Iterable[str], tokens_to_clear: Iterable[str]) -> Optional[Pattern[str]]:
    tokens = [token for token in [*stop_tokens, *tokens_to_clear] if token]
    if not tokens:
        return None
    return re.compile("|".join(re.escape(token) for token in tokens))


def sanitize_generated_text(
    text: str,
    prompt: str,
    stop_tokens: Iterable[str],
    tokens_to_clear: Iterable[str],
) -> str:
    if prompt and text.startswith(prompt):
        text = text[len(prompt):]
    pattern = build_clear_pattern(stop_tokens, tokens_to_clear)
    if pattern is None:
        return text
    return pattern.sub("", text)
