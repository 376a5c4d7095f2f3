"""Bounds and sanity checks for completion settings."""

from __future__ import annotations

import math
from typing import Dict, List

from .prompts import PREFIX, SUFFIX

MIN_NEW_TOKENS = 50
MAX_NEW_TOKENS = 500


def clip_max_new_tokens(max_new_tokens: float) -> int:
    if math.isnan(max_new_tokens):
        return MIN_NEW_TOKENS
    return int(min(max(max_new_tokens, MIN_NEW_TOKENS), MAX_NEW_TOKENS))


def template_issues(autoregressive_template: str, fill_mode_template: str) -> List[str]:
    issues = []
    if PREFIX not in autoregressive_template:
        issues.append(f"autoregressive_mode_template is missing {PREFIX}")
    if PREFIX not in fill_mode_template:
        issues.append(f"fill_mode_template is missing {PREFIX}")
    if SUFFIX not in fill_mode_template:
        issues.append(f"fill_mode_template is missing {SUFFIX}")
    return issues


def validate_templates(autoregressive_template: str, fill_mode_template: str) -> Dict[str, object]:
    issues = template_issues(autoregressive_template, fill_mode_template)
    return {
        "ok": not issues,
        "issues": issues,
    }
