"""Exception types for taskbase."""

from __future__ import annotations


class ConfigError(Exception):
    """Base exception for selection definition and settings errors."""

    pass


class MalformedJSONError(ConfigError):
    """The definition is not valid JSON (or not a JSON object)."""

    pass


class InvalidVersionError(ConfigError):
    """The version field is missing or not a positive integer."""

    pass


class InvalidSourceError(ConfigError):
    """The source block (folder or filters) failed validation."""

    pass


class InvalidViewError(ConfigError):
    """The view block failed validation."""

    pass


class SettingsError(ConfigError):
    """Application settings contain an invalid value."""

    pass


class QueryError(Exception):
    """The engine rejected or failed to evaluate a query."""

    def __init__(self, message: str, query: str | None = None):
        super().__init__(message)
        self.query = query


class ToggleError(Exception):
    """Base exception for checkbox write-back failures."""

    def __init__(self, message: str, path: str, line: int | None = None):
        super().__init__(message)
        self.path = path
        self.line = line


class NotFoundError(ToggleError):
    """No document exists at the given path."""

    pass


class NotAFileError(ToggleError):
    """The path resolves to a directory, not a document."""

    pass


class DocumentIOError(ToggleError):
    """The document could not be read (or decoded) or written."""

    pass


class InvalidLineError(ToggleError):
    """The line number is outside the document."""

    pass


class NotACheckboxError(ToggleError):
    """The target line is not a checkbox list item."""

    pass
