"""Input validation helpers shared by the endpoints.

Handlers apply the checks in a fixed order: path UUIDs, body parse,
required fields, type/enum checks, then format checks. Each helper raises
``BadRequestError`` naming the offending field.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, Optional
import json
import re

from dateutil.parser import isoparse
from fastapi import Request

from .exceptions import BadRequestError

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
ISO_DATETIME_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))


def require_uuid(value: Any, field: str) -> str:
    """Return ``value`` lower-cased if it is a UUID string."""
    if not is_uuid(value):
        raise BadRequestError(f"Invalid {field} format")
    return value.lower()


def optional_uuid(value: Any, field: str) -> Optional[str]:
    if value is None or value == "":
        return None
    return require_uuid(value, field)


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Parse the request body as a JSON object."""
    raw = await request.body()
    try:
        payload = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        raise BadRequestError("Invalid JSON in request body")
    if not isinstance(payload, dict):
        raise BadRequestError("Request body must be a JSON object")
    return payload


def is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(payload: Dict[str, Any], fields: Iterable[str]) -> None:
    """Fail on the first field that is absent, null or blank."""
    for field in fields:
        if is_missing(payload.get(field)):
            raise BadRequestError(f"{field} is required")


def require_string(
    payload: Dict[str, Any],
    field: str,
    *,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    required: bool = True,
) -> Optional[str]:
    """Type and length check for a string field."""
    value = payload.get(field)
    if value is None:
        if required:
            raise BadRequestError(f"{field} is required")
        return None
    if not isinstance(value, str):
        raise BadRequestError(f"{field} must be a string")
    value = value.strip()
    if min_length is not None and len(value) < min_length:
        raise BadRequestError(f"{field} must be at least {min_length} characters")
    if max_length is not None and len(value) > max_length:
        raise BadRequestError(f"{field} must not exceed {max_length} characters")
    return value


def require_enum(value: Any, field: str, allowed: Iterable[str]) -> str:
    allowed = tuple(allowed)
    if value not in allowed:
        raise BadRequestError(f"{field} must be one of: {', '.join(allowed)}")
    return value


def optional_enum(value: Any, field: str, allowed: Iterable[str]) -> Optional[str]:
    if value is None:
        return None
    return require_enum(value, field, allowed)


def parse_iso_datetime(value: Any, field: str) -> datetime:
    """Parse an ISO-8601 timestamp with at least second precision."""
    if not isinstance(value, str) or not ISO_DATETIME_PREFIX.match(value):
        raise BadRequestError(f"{field} must be an ISO 8601 date-time")
    try:
        return isoparse(value)
    except ValueError:
        raise BadRequestError(f"{field} must be an ISO 8601 date-time")


def parse_int_param(
    value: Optional[str],
    field: str,
    *,
    default: int,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> int:
    """Parse an integer query parameter with bounds."""
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except ValueError:
        raise BadRequestError(f"{field} parameter must be an integer")
    if minimum is not None and maximum is not None and not minimum <= number <= maximum:
        raise BadRequestError(f"{field} parameter must be between {minimum} and {maximum}")
    if minimum is not None and number < minimum:
        raise BadRequestError(f"{field} parameter must be at least {minimum}")
    if maximum is not None and number > maximum:
        raise BadRequestError(f"{field} parameter must be at most {maximum}")
    return number


def parse_bool_param(value: Optional[str]) -> bool:
    """Only the literal ``true`` switches a flag on."""
    return value == "true"
