from __future__ import annotations


class InterbandError(Exception):
    """Base class for every error raised by interband."""


class ArgumentError(InterbandError, ValueError):
    """Raised when a required argument is blank or missing."""


class ValidationError(InterbandError, ValueError):
    """Raised when an envelope or payload does not satisfy its contract."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class VersionError(ValidationError):
    """Raised when an envelope carries an unsupported major version."""

    def __init__(self, version: str) -> None:
        super().__init__(f"unsupported version {version!r}", field="version")
        self.version = version


class DecodeError(InterbandError, ValueError):
    """Raised when file content is not a JSON object."""
