"""Storage codec for answer values.

An answer is either a free-text scalar or a JSON document (numbers, lists of
selected options, booleans). The kind is decided when the answer is written and
stored next to the value, so reading never has to guess. Rows written before the
kind column existed carry no tag; for those the legacy rule applies: a value that
starts with ``[`` or ``{`` is parsed as JSON and kept verbatim if parsing fails.
"""

import json
from typing import Any, Optional, Tuple

TEXT = "text"
JSON = "json"


def encode_answer_value(value: Any) -> Tuple[str, str]:
    """Return ``(stored_value, kind)`` for a submitted answer value."""
    if isinstance(value, str):
        return value, TEXT
    return json.dumps(value, ensure_ascii=False), JSON


def _decode_legacy(raw: str) -> Any:
    if raw.startswith("[") or raw.startswith("{"):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
    return raw


def decode_answer_value(raw: Optional[str], kind: Optional[str] = None) -> Any:
    if raw is None:
        return None
    if kind == TEXT:
        return raw
    if kind == JSON:
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
    return _decode_legacy(str(raw))
