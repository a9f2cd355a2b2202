"""Exceptions raised by curly.

The CLI converts any CurlyError into a click error message.
"""


class CurlyError(Exception):
    """Base class for all curly errors."""


class DocumentLoadError(CurlyError):
    """The API document could not be read or parsed."""


class EnvFileError(CurlyError):
    """envs.yml is missing or malformed."""


class EnvironmentNotFound(CurlyError):
    """The requested environment is not defined in envs.yml."""


class ScriptError(CurlyError):
    """A request script is missing or contains no command."""


class CommandFailed(CurlyError):
    """A request command exited with a non-zero status."""


class ExecutionCancelled(CurlyError):
    """Execution was interrupted by a signal."""
