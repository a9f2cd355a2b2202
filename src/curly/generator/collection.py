"""Collection writer: renders every operation of a document into a directory."""

from pathlib import Path

import click

from curly.parser.base import ApiDocument
from curly.parser.swagger import parse_file

from .render import build_artifact

DEFAULT_OUTPUT_DIR = "collection"
ENVS_FILE = "envs.yml"

ENVS_EXAMPLE = """# Example environment configurations
# Usage: curly run -e dev
environments:
  dev:
    BASE_URL: "http://localhost:8081"
    AUTHORIZATION: "dev-token"
    QUERYVAR: "dev-value"
  staging:
    BASE_URL: "http://localhost:8081"
    AUTHORIZATION: "staging-token"
    QUERYVAR: "staging-value"
"""


def generate_collection(source: str | Path, out_dir: str | Path, *, hints: bool = False) -> list[Path]:
    """Load ``source`` and write one .curl script per operation into ``out_dir``.

    Loading the document and creating the directory are fatal; a failure
    on a single operation is reported and skipped.
    Returns the paths of the scripts that were written.
    """
    doc = parse_file(source)
    out_dir = Path(out_dir)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise click.ClickException(f"failed to create output dir: {e}") from e

    written = write_collection(doc, out_dir, hints=hints)

    try:
        (out_dir / ENVS_FILE).write_text(ENVS_EXAMPLE, encoding="utf-8")
    except OSError as e:
        click.echo(f"Warning: failed to create {ENVS_FILE}: {e}", err=True)

    click.echo(f"Generated collection in {out_dir}/")
    return written


def write_collection(doc: ApiDocument, out_dir: Path, *, hints: bool = False) -> list[Path]:
    written: list[Path] = []
    owners: dict[str, str] = {}

    for operation in doc.operations:
        label = f"{operation.method} {operation.path}"
        try:
            artifact = build_artifact(operation, doc.base_url, hints=hints)
        except (TypeError, ValueError) as e:
            click.echo(f"Warning: skipping {label}: {e}", err=True)
            continue

        if artifact.filename in owners:
            click.echo(
                f"Warning: skipping {label}: {artifact.filename} already written for {owners[artifact.filename]}",
                err=True,
            )
            continue
        owners[artifact.filename] = label

        file_path = out_dir / artifact.filename
        try:
            file_path.write_text(artifact.content, encoding="utf-8")
        except OSError as e:
            click.echo(f"Warning: failed to write {file_path}: {e}", err=True)
            continue
        written.append(file_path)

    return written
