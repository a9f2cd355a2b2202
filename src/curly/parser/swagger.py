"""OpenAPI / Swagger document parser.

Parses OpenAPI 3.x and Swagger 2.0 documents into an ApiDocument.
Missing or partial information never fails the parse; it just leaves
the corresponding model fields empty.
"""

from pathlib import Path
from typing import Any

from pydantic import ValidationError

from curly.errors import DocumentLoadError

from .base import (
    HTTP_METHODS,
    ApiDocument,
    MediaType,
    Operation,
    Parameter,
    RequestBody,
    Schema,
    SchemaKind,
)
from .loader import load_document

DEFAULT_BASE_URL = "http://localhost"
MAX_REF_HOPS = 16

_KINDS = {kind.value: kind for kind in SchemaKind}


def parse_file(source: str | Path) -> ApiDocument:
    """Load and parse a document from a local path or an http(s) URI."""
    return parse_openapi(load_document(source))


def parse_openapi(doc: dict) -> ApiDocument:
    """Parse an already loaded OpenAPI/Swagger mapping."""
    try:
        return _parse(doc)
    except ValidationError as e:
        raise DocumentLoadError(f"failed to parse OpenAPI document: {e}") from e


def _parse(doc: dict) -> ApiDocument:
    resolver = _RefResolver(doc)
    operations = []
    doc_consumes = doc.get("consumes")

    for path, item in _mapping(doc.get("paths")).items():
        item = resolver.deref(item)
        if not isinstance(item, dict):
            continue
        shared = _parse_parameters(item.get("parameters") or [], resolver)

        for method in HTTP_METHODS:
            op = item.get(method.lower())
            if not isinstance(op, dict):
                continue
            own = _parse_parameters(op.get("parameters") or [], resolver)
            operations.append(
                Operation(
                    method=method,
                    path=str(path),
                    summary=_text(op.get("summary")),
                    parameters=_merge_parameters(shared, own),
                    request_body=_parse_request_body(op.get("requestBody"), resolver),
                    consumes=_string_list(op.get("consumes", doc_consumes)),
                )
            )

    return ApiDocument(base_url=_base_url(doc), operations=operations)


def _base_url(doc: dict) -> str:
    servers = doc.get("servers") or []
    if servers and isinstance(servers[0], dict) and servers[0].get("url"):
        server = servers[0]
        url = server["url"]
        for name, var in _mapping(server.get("variables")).items():
            if isinstance(var, dict) and "default" in var:
                url = url.replace("{" + name + "}", str(var["default"]))
        return url

    # Swagger 2.0
    host = doc.get("host")
    if host:
        schemes = doc.get("schemes") or ["http"]
        return f"{schemes[0]}://{host}{doc.get('basePath', '')}"
    return DEFAULT_BASE_URL


def _merge_parameters(shared: list[Parameter], own: list[Parameter]) -> list[Parameter]:
    """Path-item parameters apply to every operation unless overridden."""
    overridden = {(p.name, p.location) for p in own}
    return [p for p in shared if (p.name, p.location) not in overridden] + own


def _parse_parameters(params: list, resolver: "_RefResolver") -> list[Parameter]:
    result = []
    for raw in params:
        p = resolver.deref(raw)
        if not isinstance(p, dict) or "name" not in p:
            continue
        location = p.get("in", "query")

        if "schema" in p:
            schema = resolver.schema(p["schema"])
        elif location != "body" and "type" in p:
            # Swagger 2.0 keeps the type information on the parameter itself
            schema = resolver.schema(p)
        else:
            schema = None

        result.append(
            Parameter(
                name=str(p["name"]),
                location=location,
                required=bool(p.get("required", location == "path")),
                description=_text(p.get("description")),
                type_schema=schema,
                example=_first_example(p, resolver),
                default=p.get("default", schema.default if schema else None),
            )
        )
    return result


def _parse_request_body(body: Any, resolver: "_RefResolver") -> RequestBody | None:
    body = resolver.deref(body)
    if not isinstance(body, dict):
        return None

    content = {}
    for content_type, media in _mapping(body.get("content")).items():
        media = _mapping(media)
        content[str(content_type)] = MediaType(
            example=media.get("example"),
            examples=_named_examples(media.get("examples"), resolver),
            type_schema=resolver.schema(media.get("schema")),
        )
    return RequestBody(content=content, required=bool(body.get("required", False)))


def _named_examples(examples: Any, resolver: "_RefResolver") -> dict[str, Any]:
    """Example values keyed by name.

    A mapping holds Example objects; a plain list (seen in the wild, and
    in JSON Schema style documents) holds bare values keyed by position.
    """
    if isinstance(examples, list):
        return {str(i): ex for i, ex in enumerate(examples)}
    result = {}
    for name, ex in _mapping(examples).items():
        ex = resolver.deref(ex)
        if isinstance(ex, dict):
            result[str(name)] = ex.get("value")
    return result


def _first_example(node: dict, resolver: "_RefResolver") -> Any:
    if node.get("example") is not None:
        return node["example"]
    for ex in _named_examples(node.get("examples"), resolver).values():
        if ex is not None:
            return ex
    return None


def _mapping(node: Any) -> dict:
    return node if isinstance(node, dict) else {}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value]
    return []


class _RefResolver:
    """Resolves local ``#/...`` references and builds Schema trees.

    A reference that is already being resolved further up the current
    chain becomes ``None``, which keeps self-referencing schemas finite.
    """

    def __init__(self, doc: dict):
        self.doc = doc
        self._cache: dict[str, Schema | None] = {}
        self._resolving: set[str] = set()

    def lookup(self, ref: str) -> Any:
        if not ref.startswith("#/"):
            return None
        node: Any = self.doc
        for part in ref[2:].split("/"):
            part = part.replace("~1", "/").replace("~0", "~")
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def deref(self, node: Any) -> Any:
        """Follow ``$ref`` chains for non-schema objects."""
        for _ in range(MAX_REF_HOPS):
            if not (isinstance(node, dict) and "$ref" in node):
                break
            node = self.lookup(str(node["$ref"]))
        return node

    def schema(self, node: Any) -> Schema | None:
        if not isinstance(node, dict):
            return None

        if "$ref" in node:
            ref = str(node["$ref"])
            if ref in self._resolving:
                return None
            if ref not in self._cache:
                self._resolving.add(ref)
                try:
                    self._cache[ref] = self.schema(self.lookup(ref))
                finally:
                    self._resolving.discard(ref)
            return self._cache[ref]

        if node.get("allOf"):
            return self._merge_all_of(node)
        for key in ("oneOf", "anyOf"):
            for option in node.get(key) or []:
                resolved = self.schema(option)
                if resolved is not None:
                    return resolved

        items = node.get("items")
        if isinstance(items, list):
            items = items[0] if items else None

        return Schema(
            kind=_kind(node.get("type")),
            example=_schema_example(node),
            default=node.get("default"),
            enum=list(node.get("enum") or []),
            properties={
                str(name): self.schema(child)
                for name, child in _mapping(node.get("properties")).items()
            },
            items=self.schema(items),
            description=_text(node.get("description")),
        )

    def _merge_all_of(self, node: dict) -> Schema:
        properties: dict[str, Schema | None] = {}
        example = node.get("example")
        for part in node["allOf"]:
            resolved = self.schema(part)
            if resolved is None:
                continue
            properties.update(resolved.properties)
            if example is None:
                example = resolved.example
        for name, child in _mapping(node.get("properties")).items():
            properties[str(name)] = self.schema(child)
        return Schema(
            kind=SchemaKind.OBJECT,
            example=example,
            properties=properties,
            description=_text(node.get("description")),
        )


def _kind(value: Any) -> SchemaKind | None:
    # OpenAPI 3.1 allows a list of types, e.g. ["string", "null"]
    if isinstance(value, list):
        value = next((v for v in value if v != "null"), None)
    return _KINDS.get(value) if isinstance(value, str) else None


def _schema_example(node: dict) -> Any:
    if node.get("example") is not None:
        return node["example"]
    examples = node.get("examples")
    if isinstance(examples, list) and examples:
        return examples[0]
    return None
