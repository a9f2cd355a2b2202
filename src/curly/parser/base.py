"""Data models for a parsed API document.

The loader converts OpenAPI 3.x and Swagger 2.0 documents into these
models; the generator only ever reads them.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD")


class SchemaKind(str, Enum):
    """The primitive kind of a schema node."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


class Schema(BaseModel):
    """A JSON-Schema-like type node.

    Unresolved or cyclic references are represented as ``None`` in
    ``properties`` and ``items``.
    """

    kind: SchemaKind | None = None
    example: Any = None
    default: Any = None
    enum: list[Any] = []
    properties: dict[str, "Schema | None"] = {}
    items: "Schema | None" = None
    description: str = ""


class Parameter(BaseModel):
    """A declared operation parameter."""

    name: str
    location: str  # path / query / header / formData / body / cookie
    required: bool = False
    description: str = ""
    type_schema: Schema | None = None
    example: Any = None
    default: Any = None


class MediaType(BaseModel):
    """One content type entry of a request body."""

    example: Any = None
    examples: dict[str, Any] = {}  # name -> example value
    type_schema: Schema | None = None


class RequestBody(BaseModel):
    content: dict[str, MediaType] = {}
    required: bool = False


class Operation(BaseModel):
    """One HTTP verb bound to one path template."""

    method: str  # GET / POST / PUT / PATCH / DELETE / OPTIONS / HEAD
    path: str  # /users/{id}
    summary: str = ""
    parameters: list[Parameter] = []
    request_body: RequestBody | None = None
    consumes: list[str] = []  # Swagger 2.0 only


class ApiDocument(BaseModel):
    base_url: str
    operations: list[Operation] = []


Schema.model_rebuild()
