"""Configuration loading and defaults."""

from __future__ import annotations

import math
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml

from .llm.types import ConfigError, PromptConfig
from .prompts import CONFIG_TEMPLATES, PREFIX
from .validators import template_issues

DEFAULT_SETTINGS: Dict[str, Any] = {
    "completion": {
        "config_template": "bigcode/starcoder",
        "model_id_or_endpoint": "bigcode/starcoder",
        "is_fill_mode": True,
        "autoregressive_mode_template": PREFIX,
        "fill_mode_template": CONFIG_TEMPLATES["bigcode/starcoder"]["fill_mode_template"],
        "stop_tokens": ["<|endoftext|>"],
        "tokens_to_clear": ["<fim_middle>"],
        "temperature": 0.2,
        "max_new_tokens": 60,
        "char_limit": 4000,
        "timeout_seconds": 30,
    },
    "notifications": {
        "error_cooldown_ms": 300_000,
    },
    "auth": {
        "token_key": "apiToken",
        "token_docs_url": "https://github.com/CapcoDigitalEngineering/coco-vscode#api-token",
    },
    "database": {
        "path": "data/coco_completion.db",
    },
    "logging": {
        "level": "INFO",
    },
}

PROMPT_KEYS = (
    "model_id_or_endpoint",
    "is_fill_mode",
    "autoregressive_mode_template",
    "fill_mode_template",
    "stop_tokens",
    "tokens_to_clear",
    "temperature",
    "max_new_tokens",
)

REQUIRED_PROMPT_KEYS = (
    "model_id_or_endpoint",
    "is_fill_mode",
    "autoregressive_mode_template",
    "fill_mode_template",
    "max_new_tokens",
)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(settings: Dict[str, Any]) -> Dict[str, Any]:
    endpoint = os.getenv("COCO_MODEL_ID_OR_ENDPOINT")
    if endpoint:
        settings["completion"]["model_id_or_endpoint"] = endpoint
        settings["completion"].setdefault("_explicit", []).append("model_id_or_endpoint")
    level = os.getenv("COCO_LOG_LEVEL")
    if level:
        settings["logging"]["level"] = level.upper()
    return settings


def load_settings(settings_path: str = "config/settings.yaml") -> Dict[str, Any]:
    """Loads settings.yaml and merges it onto defaults.

    The names of ``completion`` keys the user set explicitly are kept under
    ``completion._explicit`` so a template preset never overrides them.
    """
    merged = deepcopy(DEFAULT_SETTINGS)
    config_path = Path(settings_path)
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as f:
            user_cfg = yaml.safe_load(f) or {}
        merged = _deep_merge(merged, user_cfg)
        merged["completion"]["_explicit"] = sorted(
            key for key in (user_cfg.get("completion") or {}) if key in PROMPT_KEYS
        )
    return _apply_env_overrides(merged)


def prompt_config_from_settings(settings: Dict[str, Any]) -> PromptConfig:
    """Builds the read-only prompt snapshot used by one completion call."""
    completion = dict(settings.get("completion", {}))
    explicit = set(completion.pop("_explicit", []))

    template_name = completion.get("config_template")
    if template_name:
        preset = CONFIG_TEMPLATES.get(template_name)
        if preset is None:
            raise ConfigError(f"Unknown config template: {template_name}")
        for key, value in preset.items():
            if key not in explicit:
                completion[key] = value

    missing = [key for key in REQUIRED_PROMPT_KEYS if key not in completion]
    if missing:
        raise ConfigError("Missing completion settings: " + ", ".join(missing))

    issues = template_issues(
        str(completion["autoregressive_mode_template"]),
        str(completion["fill_mode_template"]),
    )
    if issues:
        raise ConfigError("; ".join(issues))

    try:
        temperature = float(completion.get("temperature", 0.0))
        max_new_tokens = int(completion["max_new_tokens"])
    except (TypeError, ValueError, OverflowError) as exc:
        raise ConfigError(f"Invalid numeric completion setting: {exc}") from exc
    if not math.isfinite(temperature) or temperature < 0:
        raise ConfigError(f"temperature must be a finite number >= 0, got {temperature}")

    return PromptConfig(
        is_fill_mode=bool(completion["is_fill_mode"]),
        autoregressive_template=str(completion["autoregressive_mode_template"]),
        fill_mode_template=str(completion["fill_mode_template"]),
        stop_tokens=tuple(str(t) for t in completion.get("stop_tokens") or []),
        tokens_to_clear=tuple(str(t) for t in completion.get("tokens_to_clear") or []),
        temperature=temperature,
        max_new_tokens=max_new_tokens,
        model_id_or_endpoint=str(completion["model_id_or_endpoint"]),
    )
