"""Value helpers shared by the stored document models."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from bson import ObjectId
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

_NUMERIC_TEXT = re.compile(r"^\s*[+-]?\d+(\.\d+)?\s*$")
_DATETIME_ADAPTER = TypeAdapter(datetime)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_tzaware(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp


def to_object_id(value: Any) -> ObjectId | None:
    """Return ``value`` as an ``ObjectId`` or ``None`` when it cannot be one."""

    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def parse_instant(value: Any) -> datetime:
    """Parse an absolute instant from epoch milliseconds or date/time text.

    Numbers and numeric strings are read as milliseconds since the epoch.
    Any other string is parsed as an ISO-8601 style date or date/time, or
    failing that as an RFC 2822 date such as ``"Sat, 01 Jun 2024 17:00:00 GMT"``;
    values without an offset are taken to be UTC. Raises ``ValueError`` for every
    other shape and for values outside the representable range.
    """

    if isinstance(value, bool):
        raise ValueError("booleans are not instants")
    if isinstance(value, datetime):
        return ensure_tzaware(value)
    if isinstance(value, (int, float)) or (isinstance(value, str) and _NUMERIC_TEXT.match(value)):
        try:
            millis = float(value)
            return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise ValueError(f"epoch milliseconds out of range: {value!r}") from exc
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return ensure_tzaware(datetime.fromisoformat(text))
        except ValueError:
            pass
        try:
            return ensure_tzaware(_DATETIME_ADAPTER.validate_python(text))
        except PydanticValidationError:
            pass
        try:
            return ensure_tzaware(parsedate_to_datetime(text))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"unparseable date/time: {value!r}") from exc
    raise ValueError(f"unsupported instant value: {value!r}")


__all__ = ["ensure_tzaware", "parse_instant", "to_object_id", "utcnow"]
