"""CLI entry point for curly."""

from pathlib import Path

import click
from click.shell_completion import get_completion_class

from curly.errors import CurlyError
from curly.generator.collection import DEFAULT_OUTPUT_DIR, generate_collection
from curly.runner.env import load_environment
from curly.runner.executor import execute
from curly.runner.picker import edit_script, select_script
from curly.runner.script import extract_shell_command, find_scripts, prepare_script


def _prepare_file(path: Path, env: dict[str, str] | None, insecure: bool) -> str:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CurlyError(f"failed to read file: {e}") from e
    return prepare_script(content, env, insecure)


def _edit_and_extract(selected: Path, env: dict[str, str] | None, insecure: bool) -> str:
    """Copy the script to a temp file, open it in the editor and return the command."""
    tmp_file = selected.with_name(selected.name + ".tmp")
    tmp_file.write_text(_prepare_file(selected, env, insecure), encoding="utf-8")
    try:
        return extract_shell_command(edit_script(tmp_file))
    finally:
        tmp_file.unlink(missing_ok=True)


@click.group()
def main():
    """curly: turn OpenAPI documents into editable curl scripts and run them."""
    pass


@main.command()
@click.argument("openapi")
@click.option("-o", "--output", default=DEFAULT_OUTPUT_DIR, show_default=True, type=click.Path(file_okay=False, path_type=Path), help="Output directory for .curl files.")
@click.option("--hints", is_flag=True, help="Add type/required/enum comments and example values to variables.")
def generate(openapi: str, output: Path, hints: bool):
    """Generate a directory full of .curl files from an OpenAPI YAML/JSON file or URL."""
    try:
        written = generate_collection(openapi, output, hints=hints)
    except CurlyError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Wrote {len(written)} scripts.")


@main.command()
@click.argument("directory", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("-e", "--env", "env_name", default=None, envvar="CURLY_ENV", help="Environment name to use from envs.yml.")
@click.option("-f", "--file", "file_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Run a specific .curl file without opening the editor.")
@click.option("-n", "--times", default=1, type=click.IntRange(min=1), help="Number of times to execute the request.")
@click.option("-p", "--parallel", default=1, type=click.IntRange(min=1), help="Number of concurrent executions per batch.")
@click.option("--delay", default=0, type=click.IntRange(min=0), help="Delay between batches in seconds.")
@click.option("-v", "--verbose", is_flag=True, help="Show progress and detailed output.")
@click.option("-k", "--insecure", is_flag=True, help="Skip SSL certificate verification (adds -k to ALL curls in the file).")
def run(directory: Path, env_name: str | None, file_path: Path | None, times: int, parallel: int, delay: int, verbose: bool, insecure: bool):
    """Fuzzy-find a .curl script, open it in $EDITOR, then run it on save/exit."""
    try:
        env = load_environment(env_name, directory) if env_name else None

        if file_path is not None:
            command = extract_shell_command(_prepare_file(file_path, env, insecure))
        else:
            selected = select_script(find_scripts(directory))
            if selected is None:
                return
            command = _edit_and_extract(selected, env, insecure)

        execute(command, times=times, parallel=parallel, delay=delay, verbose=verbose)
    except CurlyError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.argument("shell", type=click.Choice(["bash", "zsh", "fish"]))
def completion(shell: str):
    """Print the shell completion script."""
    cls = get_completion_class(shell)
    comp = cls(main, {}, "curly", "_CURLY_COMPLETE")
    click.echo(comp.source())
