"""Environment profiles from envs.yml and their substitution into scripts."""

import datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from curly.errors import EnvFileError, EnvironmentNotFound
from curly.generator.collection import ENVS_FILE

VARIABLES_MARKER = "# Variables"
COMMAND_PREFIX = "curl"


class EnvConfig(BaseModel):
    environments: dict[str, dict[str, str]] = {}

    @field_validator("environments", mode="before")
    @classmethod
    def stringify_scalars(cls, value: Any) -> Any:
        # unquoted YAML scalars keep the text they were written as
        if not isinstance(value, dict):
            return value
        return {
            name: {str(k): _scalar_text(v) for k, v in env.items()} if isinstance(env, dict) else env
            for name, env in value.items()
        }


def _scalar_text(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        return str(value)
    return value


def load_env_config(path: Path) -> EnvConfig:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return EnvConfig.model_validate(data)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        raise EnvFileError(f"failed to load {ENVS_FILE}: {e}") from e


def load_environment(name: str, directory: Path) -> dict[str, str]:
    """Return the variables of environment ``name`` from ``directory/envs.yml``."""
    config = load_env_config(Path(directory) / ENVS_FILE)
    if name not in config.environments:
        raise EnvironmentNotFound(f"environment '{name}' not found in {ENVS_FILE}")
    return config.environments[name]


def apply_environment(content: str, env: dict[str, str]) -> str:
    """Overwrite ``NAME=...`` assignments of the variable block with ``env`` values.

    The variable block runs from the ``# Variables`` marker to the first
    line starting with ``curl``. Comments and blank lines inside it are
    kept as they are, as are variables the environment does not define.
    """
    result = []
    in_vars = False
    for line in content.split("\n"):
        stripped = line.strip()
        if stripped == VARIABLES_MARKER:
            in_vars = True
        elif in_vars and stripped.startswith(COMMAND_PREFIX):
            in_vars = False
        elif in_vars and "=" in line and not stripped.startswith("#"):
            name = line.split("=", 1)[0].strip()
            if name in env:
                line = f"{name}={_quote(env[name])}"
        result.append(line)
    return "\n".join(result)


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$").replace("`", "\\`")
    return f'"{escaped}"'
