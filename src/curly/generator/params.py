"""Parameter classifier: sorts an operation's parameters into variable buckets."""

import re
from typing import Any

from pydantic import BaseModel

from curly.parser.base import Operation, Parameter, SchemaKind

PATH_TOKEN = re.compile(r"\{([^}]+)\}")

LOCATIONS = ("path", "query", "header", "formData")


class VariableSpec(BaseModel):
    """A shell variable derived from one request parameter."""

    source_name: str
    variable_name: str
    required: bool = False
    kind: SchemaKind | None = None
    enum: list[Any] = []
    example: Any = None
    default: Any = None
    description: str = ""


class ClassifiedParams(BaseModel):
    path: list[VariableSpec] = []
    query: list[VariableSpec] = []
    header: list[VariableSpec] = []
    form_data: list[VariableSpec] = []


def variable_name(name: str) -> str:
    """Turn a parameter or field name into a shell variable name.

    >>> variable_name("X-Request-Id")
    'X_REQUEST_ID'
    """
    var = re.sub(r"[^A-Z0-9_]", "_", name.upper())
    if not var or var[0].isdigit():
        var = "_" + var
    return var


def extract_path_params(path: str) -> list[str]:
    """Return ``{name}`` tokens of a path template in order of first appearance."""
    names: list[str] = []
    for name in PATH_TOKEN.findall(path):
        if name not in names:
            names.append(name)
    return names


def classify(path: str, operation: Operation) -> ClassifiedParams:
    """Partition the declared parameters of ``operation`` into buckets.

    Every ``{token}`` in ``path`` becomes a required path variable, whether
    or not the operation declares it.
    """
    declared: dict[str, dict[str, Parameter]] = {loc: {} for loc in LOCATIONS}
    for param in operation.parameters:
        if param.location in declared:
            declared[param.location].setdefault(param.name, param)

    result = ClassifiedParams()
    for name in extract_path_params(path):
        spec = to_variable(name, declared["path"].get(name))
        spec.required = True
        result.path.append(spec)

    result.query = [to_variable(p.name, p) for p in declared["query"].values()]
    result.header = [to_variable(p.name, p) for p in declared["header"].values()]
    result.form_data = [to_variable(p.name, p) for p in declared["formData"].values()]
    return result


def to_variable(name: str, param: Parameter | None = None) -> VariableSpec:
    spec = VariableSpec(source_name=name, variable_name=variable_name(name))
    if param is None:
        return spec

    schema = param.type_schema
    spec.required = param.required
    spec.description = param.description
    spec.example = param.example
    spec.default = param.default
    if schema is not None:
        spec.kind = schema.kind
        spec.enum = list(schema.enum)
        if spec.example is None:
            spec.example = schema.example
    return spec
