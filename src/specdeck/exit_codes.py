"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specdeck.exceptions.SpecdeckError` subclass.
Shell wrappers can inspect the exit code of ``specdeck import`` to tell a
missing file (fixable by the user) apart from an unsupported document
(not retryable without a different input).

Example::

    $ specdeck import swagger.json
    $ echo $?
    8   # EXIT_UNSUPPORTED_VERSION -- Swagger 2.0 was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_FILE_NOT_FOUND = 4
"""The specification file does not exist or cannot be read."""

EXIT_SPEC_PARSE_ERROR = 7
"""The specification is neither valid JSON nor valid YAML."""

EXIT_UNSUPPORTED_VERSION = 8
"""The specification declares a dialect outside OpenAPI 3.0.x / 3.1.x."""

EXIT_INVALID_STRUCTURE = 9
"""The specification is well-formed but lacks a required top-level section."""
