"""Template renderer: turns one operation into a runnable .curl script.

A script looks like::

    # GET /users/{id}
    # Find a user

    # Variables
    BASE_URL="http://localhost"

    # Path Parameters
    ID="VALUE"

    curl -s -X GET "${BASE_URL}/users/${ID}" \\
      -H "Accept: application/json"

Every value in the variable block is a double-quoted ``NAME="value"``
assignment; the runner's environment substitution depends on that shape.
"""

import json
import re
from typing import Any

from pydantic import BaseModel

from curly.parser.base import Operation

from .body import SCALAR_TYPES, URLENCODED_CONTENT_TYPE, BodyInfo, extract_body
from .params import PATH_TOKEN, ClassifiedParams, VariableSpec, classify, variable_name

SCRIPT_EXT = "curl"

PLACEHOLDER_VALUE = "VALUE"
ACCEPT_HEADER = "application/json"
FALLBACK_CONTENT_TYPE = "application/json"
FALLBACK_BODY = '{"foo": "bar"}'
FILE_FIELD_HINTS = ("file", "image", "attachment")

BASE_URL_VAR = "BASE_URL"
RESERVED_PREFIX = "BODY_"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9_\-.]")
_SHELL_SPECIAL = re.compile(r'([\\"$`])')
_HEREDOC_SPECIAL = re.compile(r"([\\$`])")


class GeneratedArtifact(BaseModel):
    filename: str
    content: str


def sanitize_path(path: str) -> str:
    """Make a filesystem-safe name from a path template.

    >>> sanitize_path("/users/{id}")
    'users__id'
    """
    s = path.strip("/").replace("/", "_").replace("{", "_").replace("}", "")
    s = _UNSAFE_FILENAME_CHARS.sub("", s)
    return s or "root"


def script_filename(method: str, path: str) -> str:
    return f"{method.upper()}_{sanitize_path(path)}.{SCRIPT_EXT}"


def shell_quote(text: str) -> str:
    """Wrap ``text`` in double quotes, escaping what the shell would expand."""
    return '"' + _SHELL_SPECIAL.sub(r"\\\1", text) + '"'


def body_variable_name(key: str) -> str:
    """Variable name for a top-level body field.

    A field that would shadow ``BASE_URL`` gets a ``BODY_`` prefix.
    """
    var = variable_name(key)
    if var == BASE_URL_VAR:
        return RESERVED_PREFIX + var
    return var


def format_variable_value(value: Any) -> str:
    """Format a body field value for a ``NAME=...`` assignment.

    Strings are JSON-escaped so that ``"${NAME}"`` inside the body stays
    valid JSON once the shell expands it.
    """
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif value is None:
        text = "null"
    elif isinstance(value, float) and value.is_integer():
        text = str(int(value))
    elif isinstance(value, str):
        text = json.dumps(value, ensure_ascii=False)[1:-1]
    elif isinstance(value, (int, float)):
        text = json.dumps(value)
    else:
        text = str(value)
    return shell_quote(text)


def format_body(value: Any) -> str:
    """Pretty-print a body example for an unquoted heredoc.

    Top-level scalar fields of an object become ``${NAME}`` placeholders;
    nested structure is written out as literal JSON.
    """
    if isinstance(value, dict):
        return _format_object(value)
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return "[\n" + _indent(_format_object(value[0])) + "\n]"
    return _escape_heredoc(_dump(value))


def _format_object(obj: dict) -> str:
    if not obj:
        return "{}"
    lines = []
    for key in sorted(obj, key=str):
        value = obj[key]
        var = body_variable_name(str(key))
        if isinstance(value, str):
            rendered = f'"${{{var}}}"'
        elif isinstance(value, SCALAR_TYPES):
            rendered = f"${{{var}}}"
        else:
            rendered = _indent(_escape_heredoc(_dump(value)), first=False)
        lines.append(f"  {_escape_heredoc(json.dumps(str(key), ensure_ascii=False))}: {rendered}")
    return "{\n" + ",\n".join(lines) + "\n}"


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False, default=str)


def _escape_heredoc(text: str) -> str:
    return _HEREDOC_SPECIAL.sub(r"\\\1", text)


def _indent(text: str, prefix: str = "  ", first: bool = True) -> str:
    lines = text.split("\n")
    return "\n".join(
        prefix + line if line and (first or i > 0) else line
        for i, line in enumerate(lines)
    )


def render_url(path: str) -> str:
    """Replace every ``{param}`` in the path with ``${PARAM}``."""
    escaped = _SHELL_SPECIAL.sub(r"\\\1", path)
    return PATH_TOKEN.sub(lambda m: "${" + variable_name(m.group(1)) + "}", escaped)


def render(
    method: str,
    path: str,
    operation: Operation,
    classified: ClassifiedParams,
    body: BodyInfo,
    base_url: str,
    *,
    hints: bool = False,
) -> str:
    """Assemble the script text for one operation."""
    method = method.upper()
    out = [f"# {method} {path}"]
    summary = " ".join(operation.summary.split())
    if summary:
        out.append(f"# {summary}")

    out += ["", "# Variables", f"BASE_URL={shell_quote(base_url)}"]

    assigned = {BASE_URL_VAR}
    form = _dedupe(classified.form_data + body.form_fields)
    sections = [
        ("Path Parameters", classified.path),
        ("Query Parameters", classified.query),
        ("Headers", classified.header),
        ("Form Data", form),
    ]
    for title, specs in sections:
        lines = []
        for spec in specs:
            if spec.variable_name in assigned:
                continue
            assigned.add(spec.variable_name)
            if hints:
                lines.append(_hint(spec))
            lines.append(f"{spec.variable_name}={_param_value(spec, hints)}")
        if lines:
            out += ["", f"# {title}"] + lines

    inline = body.has_value and not form
    if inline and body.variables:
        lines = []
        for key in sorted(body.variables):
            var = body_variable_name(key)
            if var in assigned:
                continue
            assigned.add(var)
            lines.append(f"{var}={format_variable_value(body.variables[key])}")
        if lines:
            out += ["", "# Body"] + lines

    out += ["", _render_command(method, path, classified, body, form, inline)]
    return "\n".join(out) + "\n"


def _render_command(
    method: str,
    path: str,
    classified: ClassifiedParams,
    body: BodyInfo,
    form: list[VariableSpec],
    inline: bool,
) -> str:
    url = render_url(path)
    query = "&".join(f"{spec.source_name}=${{{spec.variable_name}}}" for spec in classified.query)
    if query:
        url += "?" + query

    flags = []
    if inline:
        flags.append(f'-H "Content-Type: {body.content_type}"')
    elif form and body.urlencoded:
        flags.append(f'-H "Content-Type: {URLENCODED_CONTENT_TYPE}"')
    elif body.declared and not form:
        flags.append(f'-H "Content-Type: {FALLBACK_CONTENT_TYPE}"')
    flags.append(f'-H "Accept: {ACCEPT_HEADER}"')
    for spec in classified.header:
        flags.append(f'-H "{spec.source_name}: ${{{spec.variable_name}}}"')

    if form:
        flags += [_form_flag(spec, body.urlencoded) for spec in form]
    elif inline:
        flags.append(f"--data-binary @- << EOF\n{format_body(body.value)}\nEOF")
    elif body.declared:
        flags.append(f"-d '{FALLBACK_BODY}'")

    command = f'curl -s -X {method} "${{BASE_URL}}{url}"'
    return command + "".join(f" \\\n  {flag}" for flag in flags)


def _form_flag(spec: VariableSpec, urlencoded: bool = False) -> str:
    if urlencoded:
        return f'--data-urlencode "{spec.source_name}=${{{spec.variable_name}}}"'
    lowered = spec.source_name.lower()
    if any(hint in lowered for hint in FILE_FIELD_HINTS):
        return f'-F "{spec.source_name}=@${{{spec.variable_name}}}"'
    return f'-F "{spec.source_name}=${{{spec.variable_name}}}"'


def _dedupe(specs: list[VariableSpec]) -> list[VariableSpec]:
    seen = set()
    result = []
    for spec in specs:
        if spec.source_name not in seen:
            seen.add(spec.source_name)
            result.append(spec)
    return result


def _param_value(spec: VariableSpec, hints: bool) -> str:
    if hints:
        for value in (spec.example, spec.default):
            if value is not None:
                return shell_quote(_plain(value))
    return shell_quote(PLACEHOLDER_VALUE)


def _plain(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, ensure_ascii=False)
    return str(value)


def _hint(spec: VariableSpec) -> str:
    parts = [spec.kind.value if spec.kind else "string"]
    if spec.required:
        parts.append("required")
    if spec.enum:
        parts.append("one of: " + "|".join(_plain(v) for v in spec.enum))
    return "# " + ", ".join(parts)


def build_artifact(operation: Operation, base_url: str, *, hints: bool = False) -> GeneratedArtifact:
    """Classify, extract and render one operation."""
    classified = classify(operation.path, operation)
    body = extract_body(operation)
    content = render(
        operation.method,
        operation.path,
        operation,
        classified,
        body,
        base_url,
        hints=hints,
    )
    return GeneratedArtifact(filename=script_filename(operation.method, operation.path), content=content)
