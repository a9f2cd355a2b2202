"""Interactive script selection and editing."""

import os
import shutil
import subprocess
from pathlib import Path

import click

from curly.errors import ScriptError

FZF_PROMPT = "Select endpoint: "
DEFAULT_EDITOR = "vim"


def select_script(paths: list[Path]) -> Path | None:
    """Let the user pick one script, through fzf when it is installed.

    Returns None when the fzf selection is aborted.
    """
    fzf = shutil.which("fzf")
    if fzf is None:
        return _prompt_select(paths)

    result = subprocess.run(
        [fzf, "--prompt", FZF_PROMPT],
        input="\n".join(str(p) for p in paths),
        stdout=subprocess.PIPE,
        text=True,
    )
    if result.returncode == 130:  # Esc / Ctrl-C
        return None
    if result.returncode != 0:
        raise ScriptError(f"fzf failed with exit code {result.returncode}")
    selected = result.stdout.strip()
    return Path(selected) if selected else None


def _prompt_select(paths: list[Path]) -> Path:
    if len(paths) == 1:
        return paths[0]
    click.echo("fzf not found. Please choose an item by number:")
    for i, path in enumerate(paths, start=1):
        click.echo(f"[{i}] {path}")
    index = click.prompt("Select number", type=click.IntRange(1, len(paths)))
    return paths[index - 1]


def edit_script(path: Path) -> str:
    """Open ``path`` in $EDITOR and return the saved content."""
    editor = os.environ.get("EDITOR") or DEFAULT_EDITOR
    try:
        click.edit(filename=str(path), editor=editor)
    except click.ClickException as e:
        raise ScriptError(f"editor failed: {e.message}") from e
    return path.read_text(encoding="utf-8")
