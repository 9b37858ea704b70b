# bootcamp_api/utils/documents.py
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId

# never leave the API
HIDDEN_FIELDS = {"password", "resetPasswordToken", "resetPasswordExpire", "singleOwner"}


def to_object_id(value: str | ObjectId) -> ObjectId:
    """Parse an id; malformed ids raise bson.errors.InvalidId (reported as 404)."""
    if isinstance(value, ObjectId):
        return value
    return ObjectId(value)


def parse_bool(raw: str) -> bool:
    if raw in ("true", "1"):
        return True
    if raw in ("false", "0"):
        return False
    raise ValueError(f"{raw!r} is not a boolean")


def parse_datetime(raw: str) -> datetime:
    """ISO 8601 timestamp; naive values are taken as UTC."""
    value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def serialize(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, list):
        return [serialize(v) for v in value]
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items() if k not in HIDDEN_FIELDS}
    return value


def same_id(a: Any, b: Any) -> bool:
    return a is not None and b is not None and str(a) == str(b)
