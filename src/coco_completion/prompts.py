"""Prompt templates and builders."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .llm.types import PromptConfig

PREFIX = "[PREFIX]"
SUFFIX = "[SUFFIX]"

CUSTOM_TEMPLATE = "Custom"

CONFIG_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "bigcode/starcoder": {
        "model_id_or_endpoint": "bigcode/starcoder",
        "is_fill_mode": True,
        "autoregressive_mode_template": PREFIX,
        "fill_mode_template": f"<fim_prefix>{PREFIX}<fim_suffix>{SUFFIX}<fim_middle>",
        "stop_tokens": ["<|endoftext|>"],
        "tokens_to_clear": ["<fim_middle>"],
        "temperature": 0.2,
        "max_new_tokens": 60,
    },
    "codellama/CodeLlama-13b-hf": {
        "model_id_or_endpoint": "codellama/CodeLlama-13b-hf",
        "is_fill_mode": True,
        "autoregressive_mode_template": PREFIX,
        "fill_mode_template": f"<PRE> {PREFIX} <SUF>{SUFFIX} <MID>",
        "stop_tokens": ["<EOT>"],
        "tokens_to_clear": ["<MID>"],
        "temperature": 0.2,
        "max_new_tokens": 60,
    },
    "WizardLM/WizardCoder-Python-34B-V1.0": {
        "model_id_or_endpoint": "WizardLM/WizardCoder-Python-34B-V1.0",
        "is_fill_mode": False,
        "autoregressive_mode_template": PREFIX,
        "fill_mode_template": f"{PREFIX}{SUFFIX}",
        "stop_tokens": ["</s>"],
        "tokens_to_clear": [],
        "temperature": 0.2,
        "max_new_tokens": 60,
    },
    CUSTOM_TEMPLATE: {
        "model_id_or_endpoint": "http://localhost:8080/generate",
        "is_fill_mode": False,
        "autoregressive_mode_template": PREFIX,
        "fill_mode_template": f"{PREFIX}{SUFFIX}",
        "stop_tokens": [],
        "tokens_to_clear": [],
        "temperature": 0.2,
        "max_new_tokens": 60,
    },
}


def list_config_templates() -> List[str]:
    return list(CONFIG_TEMPLATES)


def render_template(template: str, prefix: str, suffix: str) -> str:
    # Splices the first occurrence of each placeholder in one pass, so a
    # placeholder appearing inside the inserted context is left alone.
    values = {PREFIX: prefix, SUFFIX: suffix}
    spans = sorted((template.find(token), token) for token in values if token in template)
    parts: List[str] = []
    cursor = 0
    for index, token in spans:
        parts.append(template[cursor:index])
        parts.append(values[token])
        cursor = index + len(token)
    parts.append(template[cursor:])
    return "".join(parts)


def use_fill_mode(is_fill_mode: bool, suffix: str) -> bool:
    return bool(is_fill_mode and suffix.strip())


def build_prompt(prefix: str, suffix: str, config: PromptConfig) -> Tuple[str, bool]:
    """Renders the prompt for the given context.

    Returns ``(prompt, fim)``. ``fim`` only reports whether any right-hand
    context exists; it does not say which template was rendered.
    """
    if use_fill_mode(config.is_fill_mode, suffix):
        template = config.fill_mode_template
    else:
        template = config.autoregressive_template
    prompt = render_template(template, prefix, suffix)
    fim = bool(suffix.strip())
    return prompt, fim
