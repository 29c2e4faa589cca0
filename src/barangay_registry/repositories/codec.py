"""
Entity codec: models to and from flat Redis hash field maps.

Redis hashes hold strings only. Lists (category tags) are stored as a JSON
array string, booleans as ``"true"``/``"false"``, and ``None`` as an empty
string. The serialized form never leaves this module.
"""

import json
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from barangay_registry.repositories.errors import RecordValidationError

M = TypeVar("M", bound=BaseModel)

LIST_FIELDS = ("categoryTags",)


def _encode_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value))
    return str(value)


def encode(model: BaseModel) -> dict[str, str]:
    """Flatten a model into a Redis field map keyed by alias."""
    data = model.model_dump(by_alias=True, mode="json")
    return {key: _encode_value(value) for key, value in data.items()}


def decode_tags(raw: str | None) -> list[str]:
    """Decode a stored category-tag value into a list of strings."""
    if not raw:
        return []
    try:
        tags = json.loads(raw)
    except json.JSONDecodeError as e:
        raise RecordValidationError(f"Malformed categoryTags value: {raw!r}", ["categoryTags"]) from e
    if not isinstance(tags, list):
        raise RecordValidationError(f"categoryTags is not a list: {raw!r}", ["categoryTags"])
    return [str(tag) for tag in tags]


def decode(model_cls: type[M], fields: Mapping[str, str]) -> M | None:
    """Rebuild a model from a stored field map.

    Returns:
        The model, or None when the field map is empty (record absent).
    """
    if not fields:
        return None

    data: dict[str, Any] = dict(fields)
    for name in LIST_FIELDS:
        if name in data:
            data[name] = decode_tags(data[name])
    return validate(model_cls, data)


def validate(model_cls: type[M], data: Mapping[str, Any]) -> M:
    """Build a model, converting pydantic errors into RecordValidationError."""
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        raise RecordValidationError(
            f"Invalid {model_cls.__name__}: {', '.join(fields)}", fields
        ) from e


def normalize_keys(model_cls: type[BaseModel], data: Mapping[str, Any]) -> dict[str, Any]:
    """Map snake_case attribute names onto stored aliases.

    Keys that are neither a field name nor an alias of ``model_cls`` are
    dropped.
    """
    lookup: dict[str, str] = {}
    for name, info in model_cls.model_fields.items():
        alias = info.alias or name
        lookup[name] = alias
        lookup[alias] = alias

    return {lookup[key]: value for key, value in data.items() if key in lookup}
