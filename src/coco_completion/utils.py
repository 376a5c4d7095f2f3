"""Utility helpers."""

from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from typing import Any, Dict


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def now_ms() -> int:
    return int(time.time() * 1000)


def json_dumps(data: Dict[str, Any] | list[Any] | None) -> str:
    return json.dumps(data or {}, ensure_ascii=True, sort_keys=True)
