"""Defensive parsing of model output.

Every model response path (article generation, categorization, fact-check)
goes through :func:`extract_json` and the ``coerce_*`` helpers, so a field is
validated by the same rule wherever it appears.
"""

import json
import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, TypeVar

from factdesk.errors import MalformedResponseError

E = TypeVar("E", bound=StrEnum)

_RENDER_TAGS = re.compile(r"<(\w+):render\b[\s\S]*?</\1:render>")
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def extract_json(text: str | None) -> dict[str, Any]:
    """Extract a JSON object from free-form model text.

    Strategies, in order:
        1. The body of the first markdown code fence, if any.
        2. The whole text.
        3. The outermost ``{...}`` span.

    Raises:
        MalformedResponseError: If no strategy yields a JSON object.
    """
    if not text or not text.strip():
        raise MalformedResponseError("Empty model response")

    cleaned = _RENDER_TAGS.sub("", text).strip()
    candidates: list[str] = []

    fenced = _FENCED_BLOCK.search(cleaned)
    if fenced:
        candidates.append(fenced.group(1).strip())
    candidates.append(cleaned)
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        candidates.append(cleaned[start : end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    preview = cleaned[:120].replace("\n", " ")
    raise MalformedResponseError(f"No JSON object found in model response: {preview!r}")


def coerce_enum(
    value: Any,
    enum_cls: type[E],
    fallback: E,
    aliases: Mapping[str, E] | None = None,
) -> E:
    """Map ``value`` onto ``enum_cls``, or return ``fallback``.

    Matching is case-insensitive and treats ``_`` and ``-`` alike.
    """
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return fallback
    key = value.strip().lower()
    if aliases and key in aliases:
        return aliases[key]
    for candidate in (key, key.replace("_", "-"), key.replace("-", "_")):
        try:
            return enum_cls(candidate)
        except ValueError:
            continue
    return fallback


def coerce_score(value: Any, default: int, low: int = 0, high: int = 100) -> int:
    """Clamp a numeric score into ``[low, high]``; ``default`` if non-numeric."""
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if not isinstance(value, (int, float)) or math.isnan(value) or math.isinf(value):
        return default
    return int(max(low, min(high, round(value))))


def coerce_str(value: Any, default: str = "") -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def coerce_str_list(value: Any) -> list[str]:
    """Keep the non-empty string members of a list; anything else becomes []."""
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def coerce_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1"}
    if isinstance(value, (int, float)):
        return bool(value)
    return default


@dataclass(frozen=True)
class FieldRule:
    """How to read one field out of a model response.

    Args:
        key: Key in the raw JSON object.
        coerce: Function mapping the raw value (or None) to a valid value.
        target: Output name, defaults to ``key``.
    """

    key: str
    coerce: Callable[[Any], Any]
    target: str | None = None


def apply_rules(raw: Mapping[str, Any], rules: Sequence[FieldRule]) -> dict[str, Any]:
    """Apply a validation table to a raw response object."""
    return {rule.target or rule.key: rule.coerce(raw.get(rule.key)) for rule in rules}


def coerce_datetime(value: Any, default: datetime) -> datetime:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str) or not value.strip():
        return default
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return default
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
