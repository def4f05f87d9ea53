"""
Exceptions raised by the blgo build pipeline.

Library code raises these; only the command-line entry point decides whether
an error ends the process or is logged and survived (watch mode).
"""


class BlgoError(Exception):
    """Base class for every error blgo reports to the operator."""

    code = 1

    def __init__(self, message, path=None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self):
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class ConfigError(BlgoError):
    """Invalid output/assets directory or configuration file."""


class ParseError(BlgoError):
    """Malformed frontmatter, invalid YAML or a bad field value."""


class MissingFieldError(ParseError):
    """A required frontmatter field is absent."""

    def __init__(self, field, path=None):
        super().__init__(f"missing required field {field!r}", path)
        self.field = field


class FieldTypeError(ParseError):
    """A frontmatter field holds a value of the wrong type."""

    def __init__(self, field, expected, value, path=None):
        super().__init__(
            f"field {field!r} must be {expected}, got {type(value).__name__}", path
        )
        self.field = field
        self.expected = expected


class RenderError(BlgoError):
    """A template could not be loaded or executed."""


class BuildIOError(BlgoError):
    """A source file could not be read or an output file written."""


class WatchError(BlgoError):
    """The filesystem watcher failed; always logged, never fatal."""
