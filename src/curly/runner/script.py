"""Locating and preparing .curl scripts for execution."""

from pathlib import Path

from curly.errors import ScriptError
from curly.generator.render import SCRIPT_EXT

from .env import apply_environment


def find_scripts(directory: Path) -> list[Path]:
    """All .curl files below ``directory``, sorted by path."""
    scripts = sorted(p for p in Path(directory).rglob(f"*.{SCRIPT_EXT}") if p.is_file())
    if not scripts:
        raise ScriptError(f"no .{SCRIPT_EXT} files found in directory")
    return scripts


def make_insecure(content: str) -> str:
    """Add ``-k`` to every curl invocation in the script."""
    return content.replace("curl ", "curl -k ")


def prepare_script(content: str, env: dict[str, str] | None = None, insecure: bool = False) -> str:
    if env:
        content = apply_environment(content, env)
    if insecure:
        content = make_insecure(content)
    return content


def extract_shell_command(content: str) -> str:
    """Drop the leading comment header; everything after it is the command.

    Raises ScriptError if nothing but comments and blank lines remain.
    """
    lines = content.split("\n")
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            return "\n".join(lines[i:])
    raise ScriptError("no curl command found in file")
