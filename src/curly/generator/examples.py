"""Example synthesizer: builds a representative value from a Schema tree.

``synthesize`` is pure and reentrant. Each call tracks the schemas on the
current recursion path, so a self-referencing graph yields ``None`` at the
point where it loops back instead of recursing forever.
"""

from typing import Any, Callable

from curly.parser.base import Schema, SchemaKind

MAX_DEPTH = 32

STRING_PLACEHOLDER = "string"


def synthesize(schema: Schema | None) -> Any:
    """Return an example value for ``schema``, or None when nothing can be inferred."""
    return _synthesize(schema, frozenset(), 0)


def _synthesize(schema: Schema | None, visiting: frozenset[int], depth: int) -> Any:
    if schema is None or id(schema) in visiting or depth > MAX_DEPTH:
        return None
    if schema.example is not None:
        return schema.example

    handler = _HANDLERS.get(schema.kind) if schema.kind is not None else None
    if handler is None:
        return None
    return handler(schema, visiting | {id(schema)}, depth + 1)


def _object(schema: Schema, visiting: frozenset[int], depth: int) -> Any:
    # No declared shape: let the caller fall back to a placeholder body.
    if not schema.properties:
        return None

    example = {}
    for name, child in schema.properties.items():
        if child is None:
            continue
        value = _synthesize(child, visiting, depth)
        if value is not None:
            example[name] = value
    return example or None


def _array(schema: Schema, visiting: frozenset[int], depth: int) -> Any:
    item = _synthesize(schema.items, visiting, depth)
    return [item] if item is not None else []


def _string(schema: Schema, visiting: frozenset[int], depth: int) -> Any:
    if schema.enum:
        return schema.enum[0]
    if schema.default is not None:
        return schema.default
    return STRING_PLACEHOLDER


def _integer(schema: Schema, visiting: frozenset[int], depth: int) -> Any:
    return schema.default if schema.default is not None else 0


def _number(schema: Schema, visiting: frozenset[int], depth: int) -> Any:
    return schema.default if schema.default is not None else 0.0


def _boolean(schema: Schema, visiting: frozenset[int], depth: int) -> Any:
    return schema.default if schema.default is not None else True


_HANDLERS: dict[SchemaKind, Callable[[Schema, frozenset[int], int], Any]] = {
    SchemaKind.OBJECT: _object,
    SchemaKind.ARRAY: _array,
    SchemaKind.STRING: _string,
    SchemaKind.INTEGER: _integer,
    SchemaKind.NUMBER: _number,
    SchemaKind.BOOLEAN: _boolean,
}
