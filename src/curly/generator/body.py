"""Body extractor: picks a request body example and derives its variables."""

import datetime
from typing import Any

from pydantic import BaseModel

from curly.parser.base import Operation

from .examples import synthesize
from .params import VariableSpec, to_variable

JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"
URLENCODED_CONTENT_TYPE = "application/x-www-form-urlencoded"

FORM_CONTENT_TYPES = (MULTIPART_CONTENT_TYPE, URLENCODED_CONTENT_TYPE)

SCALAR_TYPES = (str, int, float, bool, type(None))


class BodyInfo(BaseModel):
    content_type: str = ""
    value: Any = None
    variables: dict[str, Any] = {}  # field name -> scalar value
    form_fields: list[VariableSpec] = []
    form_content_type: str = ""  # how form fields are sent, if there are any
    declared: bool = False  # the operation declares some request body

    @property
    def has_value(self) -> bool:
        return self.value is not None

    @property
    def urlencoded(self) -> bool:
        return self.form_content_type == URLENCODED_CONTENT_TYPE


def content_type_order(content_types) -> list[str]:
    """application/json first, then the rest lexicographically."""
    rest = sorted(ct for ct in content_types if ct != JSON_CONTENT_TYPE)
    return ([JSON_CONTENT_TYPE] if JSON_CONTENT_TYPE in content_types else []) + rest


def extract_body(operation: Operation) -> BodyInfo:
    """Find the request body example for ``operation``.

    The OpenAPI 3 ``requestBody`` is tried first, then a Swagger 2.0
    ``in: body`` parameter.
    """
    body_params = [p for p in operation.parameters if p.location == "body"]
    declared = operation.request_body is not None or bool(body_params)
    form_content_type = _form_data_content_type(operation)

    content_type, value = _from_request_body(operation)
    if value is None:
        for param in body_params:
            if param.type_schema is None:
                continue
            value = synthesize(param.type_schema)
            if value is not None:
                content_type = JSON_CONTENT_TYPE
                break

    if value is None:
        return BodyInfo(declared=declared, form_content_type=form_content_type)

    value = _stringify_dates(value)

    if content_type in FORM_CONTENT_TYPES and isinstance(value, dict):
        return BodyInfo(
            content_type=content_type,
            form_fields=[to_variable(name) for name in sorted(value)],
            form_content_type=content_type,
            declared=True,
        )

    return BodyInfo(
        content_type=content_type,
        value=value,
        variables=extract_variables(value),
        form_content_type=form_content_type,
        declared=True,
    )


def _form_data_content_type(operation: Operation) -> str:
    """Encoding for Swagger 2.0 ``in: formData`` parameters.

    Multipart unless ``consumes`` names only the urlencoded form type.
    """
    if not any(p.location == "formData" for p in operation.parameters):
        return ""
    consumes = [ct.split(";")[0].strip().lower() for ct in operation.consumes]
    if URLENCODED_CONTENT_TYPE in consumes and MULTIPART_CONTENT_TYPE not in consumes:
        return URLENCODED_CONTENT_TYPE
    return MULTIPART_CONTENT_TYPE


def _from_request_body(operation: Operation) -> tuple[str, Any]:
    body = operation.request_body
    if body is None:
        return "", None

    for content_type in content_type_order(body.content):
        media = body.content[content_type]
        if media.example is not None:
            return content_type, media.example

        named = [v for v in media.examples.values() if v is not None]
        if named:
            return content_type, named[0]

        value = synthesize(media.type_schema)
        if value is not None:
            return content_type, value
    return "", None


def extract_variables(value: Any) -> dict[str, Any]:
    """Top-level scalar fields of an object, or of an array's first object.

    Nested objects and arrays are left out; they stay inline in the body.
    Dates come back as ISO 8601 strings.
    """
    value = _stringify_dates(value)
    if isinstance(value, list):
        value = value[0] if value else None
    if not isinstance(value, dict):
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, SCALAR_TYPES)}


def _stringify_dates(value: Any) -> Any:
    # YAML loads unquoted dates as date/datetime objects
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _stringify_dates(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify_dates(v) for v in value]
    return value
