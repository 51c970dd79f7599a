"""
Field level validation for request payloads.

Shape rules (types, required fields, lengths) are declared as pydantic models and
checked by validate(). Rules that need the store, such as uniqueness or existence
of referenced rows, are collected in an ErrorBag by the service. Both produce the
same mapping of dotted field path to a list of human readable messages, e.g.
{"0.name": ["The 0.name has already been taken."]}.
"""

import functools
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Sequence

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from rbac_admin.errors import ValidationFailed

# location prefixes FastAPI adds in front of the field path
REQUEST_LOCATIONS = ("body", "path", "query")

_TEMPLATES = {
    "missing": "The {field} field is required.",
    "string_type": "The {field} field must be a string.",
    "int_type": "The {field} field must be an integer.",
    "int_parsing": "The {field} field must be an integer.",
    "int_from_float": "The {field} field must be an integer.",
    "list_type": "The {field} field must be an array.",
    "model_type": "The {field} field must be an object.",
    "model_attributes_type": "The {field} field must be an object.",
    "dict_type": "The {field} field must be an object.",
    "date_type": "The {field} field must be a valid date.",
    "date_parsing": "The {field} field must be a valid date.",
    "date_from_datetime_parsing": "The {field} field must be a valid date.",
    "date_from_datetime_inexact": "The {field} field must be a valid date.",
    "string_too_long": "The {field} field must not be greater than {max_length} characters.",
    "too_short": "The {field} field must have at least {min_length} items.",
    "json_invalid": "The {field} field must be valid JSON.",
}


class ErrorBag:
    def __init__(self):
        self._errors: Dict[str, List[str]] = defaultdict(list)

    def add(self, field: str, message: str):
        self._errors[field].append(message)

    def __bool__(self):
        return bool(self._errors)

    def to_dict(self) -> Dict[str, List[str]]:
        return dict(self._errors)

    def raise_if_any(self):
        if self._errors:
            raise ValidationFailed(self.to_dict())


def field_path(loc: Sequence[Any], strip_request_location: bool = False) -> str:
    parts = list(loc)
    if strip_request_location and parts and parts[0] in REQUEST_LOCATIONS:
        parts = parts[1:]
    if not parts:
        return "body"
    return ".".join(str(part) for part in parts)


def describe_error(field: str, error: Dict[str, Any]) -> str:
    error_type = error.get("type")
    ctx = error.get("ctx") or {}

    # an empty string is treated like an absent one
    if error_type == "string_too_short" and ctx.get("min_length") == 1:
        return _TEMPLATES["missing"].format(field=field)

    template = _TEMPLATES.get(error_type)
    if template is None:
        return error.get("msg") or f"The {field} field is invalid."
    return template.format(field=field, **ctx)


def translate_errors(
    errors: Iterable[Dict[str, Any]], strip_request_location: bool = False
) -> Dict[str, List[str]]:
    bag = ErrorBag()
    for error in errors:
        # the loc of a decode error points into the raw document, not a field
        if error.get("type") == "json_invalid":
            field = "body"
        else:
            field = field_path(error.get("loc", ()), strip_request_location)
        bag.add(field, describe_error(field, error))
    return bag.to_dict()


@functools.lru_cache(maxsize=None)
def _adapter(schema) -> TypeAdapter:
    return TypeAdapter(schema)


def validate(schema, payload: Any):
    """
    Validate payload against schema and return the parsed value.

    Args:
        schema: A pydantic model class or any type TypeAdapter accepts, such as
            List[SomeModel] for batch payloads
        payload: The decoded JSON body

    Raises:
        ValidationFailed: With the field to messages mapping when any rule fails
    """
    try:
        return _adapter(schema).validate_python(payload)
    except PydanticValidationError as e:
        raise ValidationFailed(translate_errors(e.errors()))
