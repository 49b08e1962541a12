"""
Firestore query and document helpers.

NOTE: For firebase_admin SDK, we use positional arguments in where() which still work.
The deprecation warning is just a warning - the functionality is still supported.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


def where_filter(query, field_path: str, op_string: str, value):
    """
    Helper function for Firestore queries.

    Usage:
        query = where_filter(collection, "email", "==", "asha@example.com")
    """
    return query.where(field_path, op_string, value)


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse various timestamp formats to timezone-aware datetime (UTC).

    Accepts datetimes, Firestore Timestamps / DatetimeWithNanoseconds,
    ISO strings (with or without "Z") and epoch milliseconds.
    CRITICAL: All datetimes must be timezone-aware to prevent comparison bugs.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    # Common Firestore Timestamp interfaces
    if hasattr(value, "to_datetime"):
        return parse_timestamp(value.to_datetime())
    if hasattr(value, "ToDatetime"):
        return parse_timestamp(value.ToDatetime())
    if hasattr(value, "timestamp"):
        try:
            return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
        except (TypeError, ValueError, OSError):
            return None
    return None


def _to_json_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return parse_timestamp(value).isoformat()
    if isinstance(value, dict):
        return {k: _to_json_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_json_value(v) for v in value]
    return value


def document_to_dict(doc) -> Dict:
    """Convert a Firestore snapshot into a JSON-friendly dict including its id."""
    data = doc.to_dict() or {}
    data = _to_json_value(data)
    data["id"] = doc.id
    return data
