"""Error types raised by jappend."""

from __future__ import annotations


class JappendError(Exception):
    """Base class for all jappend errors."""


class ConfigError(JappendError, ValueError):
    """Raised when writer options fail validation."""


class MalformedArrayError(JappendError):
    """Raised when the target file does not end with a JSON array."""

    def __init__(self, path: str | None = None) -> None:
        location = f" {path}" if path else ""
        super().__init__(
            f"The file{location} does not contain a valid JSON array. "
            "Please ensure the file contains a valid JSON array before appending data."
        )
        self.path = path


class ArrayFileNotFoundError(JappendError, FileNotFoundError):
    """Raised when the target file is missing and array initialization is disabled."""
