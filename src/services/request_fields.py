"""Request field definitions and submitted values.

A request's ``fields`` is an ordered list of
``{name, type, required, options?}``; ``options`` is mandatory exactly for
``select`` fields. Submissions are checked against that list.
"""

from typing import Any, Dict, List
from numbers import Number

from core.exceptions import BadRequestError
from core.validation import ISO_DATETIME_PREFIX
from models.request import FieldType
from schemas.request import RequestField


def parse_fields(raw: Any) -> List[RequestField]:
    """Validate a request's field definitions.

    An empty list is accepted. Checks run per entry in order: presence of
    ``name``/``type``/``required``, the ``type`` enum, then ``options`` for
    select fields.
    """
    if not isinstance(raw, list):
        raise BadRequestError("fields must be an array")

    fields: List[RequestField] = []
    names = set()
    for index, entry in enumerate(raw):
        label = f"fields[{index}]"
        if not isinstance(entry, dict):
            raise BadRequestError(f"{label} must be an object")
        for key in ("name", "type", "required"):
            if entry.get(key) is None or entry.get(key) == "":
                raise BadRequestError(f"{label}.{key} is required")

        name = entry["name"]
        if not isinstance(name, str) or not name.strip():
            raise BadRequestError(f"{label}.name must be a non-empty string")
        if entry["type"] not in FieldType.ALL:
            raise BadRequestError(f"{label}.type must be one of: {', '.join(FieldType.ALL)}")
        if not isinstance(entry["required"], bool):
            raise BadRequestError(f"{label}.required must be a boolean")

        options = entry.get("options")
        if entry["type"] == FieldType.SELECT:
            if not isinstance(options, list) or not options:
                raise BadRequestError(f"{label}.options is required for select fields")
            if not all(isinstance(option, str) for option in options):
                raise BadRequestError(f"{label}.options must be an array of strings")
        else:
            options = None

        name = name.strip()
        if name in names:
            raise BadRequestError(f"Duplicate field name: {name}")
        names.add(name)
        fields.append(RequestField(name=name, type=entry["type"], required=entry["required"], options=options))
    return fields


def validate_values(fields: List[Dict[str, Any]], values: Any) -> Dict[str, Any]:
    """Check a submission against the request's fields.

    Unknown keys are rejected; missing optional fields are allowed.
    """
    if not isinstance(values, dict):
        raise BadRequestError("values must be an object")

    definitions = {field["name"]: field for field in fields}
    unknown = sorted(set(values) - set(definitions))
    if unknown:
        raise BadRequestError(f"Unknown field: {unknown[0]}")

    for field in fields:
        name = field["name"]
        value = values.get(name)
        if value is None or value == "":
            if field.get("required"):
                raise BadRequestError(f"{name} is required")
            continue

        field_type = field["type"]
        if field_type == FieldType.NUMBER:
            if isinstance(value, bool) or not isinstance(value, Number):
                raise BadRequestError(f"{name} must be a number")
        elif field_type == FieldType.DATE:
            if not isinstance(value, str) or not (
                ISO_DATETIME_PREFIX.match(value) or _is_plain_date(value)
            ):
                raise BadRequestError(f"{name} must be an ISO 8601 date")
        elif field_type == FieldType.SELECT:
            if value not in (field.get("options") or []):
                raise BadRequestError(f"{name} must be one of: {', '.join(field.get('options') or [])}")
        elif not isinstance(value, str):
            # text and file (a stored attachment id or URL) are strings
            raise BadRequestError(f"{name} must be a string")
    return dict(values)


def _is_plain_date(value: str) -> bool:
    parts = value.split("-")
    return (
        len(value) == 10
        and len(parts) == 3
        and all(part.isdigit() for part in parts)
    )
