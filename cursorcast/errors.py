"""
Errors Module
Exception types raised by the render pipeline
"""

from typing import List, Optional


class CursorcastError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(CursorcastError):
    """A configuration value is missing or out of range."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class InputError(CursorcastError):
    """The source video or telemetry input is missing or unreadable."""


class CursorAssetError(CursorcastError):
    """No cursor glyph is available for a configured shape."""


class CodecError(CursorcastError):
    """The external codec process failed or timed out."""

    def __init__(self, message: str, command: Optional[List[str]] = None,
                 returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr

    def __str__(self):
        text = super().__str__()
        if self.stderr:
            tail = self.stderr.strip().splitlines()[-10:]
            text += "\n" + "\n".join(tail)
        return text


class CancelledError(CursorcastError):
    """The run was stopped by a cancellation signal."""
