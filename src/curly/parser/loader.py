"""Read an API document from a local path or an http(s) URI."""

from pathlib import Path

import requests
import yaml

from curly.errors import DocumentLoadError

REQUEST_TIMEOUT = 30


def is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def load_document(source: str | Path) -> dict:
    """Load a YAML or JSON document and return its top-level mapping.

    Any failure (missing file, network error, malformed content) is
    raised as a single DocumentLoadError.
    """
    source = str(source)
    try:
        text = _fetch(source) if is_remote(source) else _read(source)
        doc = yaml.safe_load(text)
    except (OSError, ValueError, requests.RequestException, yaml.YAMLError) as e:
        raise DocumentLoadError(f"failed to load OpenAPI file: {e}") from e

    if not isinstance(doc, dict):
        raise DocumentLoadError(f"failed to load OpenAPI file: {source} is not an object document")
    return doc


def _read(source: str) -> str:
    return Path(source).read_text(encoding="utf-8")


def _fetch(source: str) -> str:
    response = requests.get(source, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    return response.text
