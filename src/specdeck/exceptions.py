"""Exception hierarchy for specdeck.

All exceptions inherit from :class:`SpecdeckError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specdeck.exit_codes`.
The top-level error handler in :func:`specdeck.app.main` catches
``SpecdeckError`` and exits with the appropriate code.

Import failures additionally carry a :class:`ImportErrorKind` so that
library callers can decide recoverability without matching on the class::

    try:
        importer = OpenAPIImporter.from_file(path)
    except ImportFailure as exc:
        if exc.kind is ImportErrorKind.FILE_NOT_FOUND:
            ...

Subclass hierarchy::

    SpecdeckError (exit 1)
    +-- InvalidUsageError            (exit 2)
    +-- ConfigError                  (exit 1)
    +-- CollectionError              (exit 1)
    +-- ImportFailure                (exit 1)
        +-- SpecFileNotFoundError    (exit 4)
        +-- SpecParseError           (exit 7)
        +-- UnsupportedVersionError  (exit 8)
        +-- InvalidStructureError    (exit 9)
"""

from __future__ import annotations

import enum

from specdeck.exit_codes import (
    EXIT_FILE_NOT_FOUND,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_STRUCTURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_UNSUPPORTED_VERSION,
)


class SpecdeckError(Exception):
    """Base exception for all specdeck errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specdeck.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecdeckError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SpecdeckError):
    """Raised for configuration problems (invalid JSON, unreadable config files)."""

    exit_code = EXIT_GENERIC_FAILURE


class CollectionError(SpecdeckError):
    """Raised when a collection cannot be read, written, or modified."""

    exit_code = EXIT_GENERIC_FAILURE


class ImportErrorKind(str, enum.Enum):
    """Category of an import failure."""

    FILE_NOT_FOUND = "file_not_found"
    PARSE_FAILURE = "parse_failure"
    UNSUPPORTED_VERSION = "unsupported_version"
    INVALID_STRUCTURE = "invalid_structure"


class ImportFailure(SpecdeckError):
    """Base class for every error raised while importing a specification.

    None of these conditions is transient, so the engine never retries.

    Args:
        message: Human-readable error description.
        details: Optional technical details (e.g. the underlying parser
            error) kept separate from the user-facing message.
    """

    kind: ImportErrorKind

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.details = details


class SpecFileNotFoundError(ImportFailure):
    """Raised when the specification path is missing or unreadable."""

    kind = ImportErrorKind.FILE_NOT_FOUND
    exit_code = EXIT_FILE_NOT_FOUND


class SpecParseError(ImportFailure):
    """Raised when the input is neither valid JSON nor valid YAML."""

    kind = ImportErrorKind.PARSE_FAILURE
    exit_code = EXIT_SPEC_PARSE_ERROR


class UnsupportedVersionError(ImportFailure):
    """Raised when the declared dialect is not OpenAPI 3.0.x or 3.1.x."""

    kind = ImportErrorKind.UNSUPPORTED_VERSION
    exit_code = EXIT_UNSUPPORTED_VERSION


class InvalidStructureError(ImportFailure):
    """Raised when a well-formed document lacks a required top-level section."""

    kind = ImportErrorKind.INVALID_STRUCTURE
    exit_code = EXIT_INVALID_STRUCTURE
