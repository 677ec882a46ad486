"""specdeck -- Import OpenAPI 3.0/3.1 specs as collections of HTTP requests.

This package loads an OpenAPI document (JSON or YAML), resolves its internal
``$ref`` pointers without looping on recursive schemas, and turns every
operation into a request template grouped into folders by tag. Example
payloads are synthesized from the schemas when asked for.

Typical workflow::

    specdeck import openapi.yaml --dry-run   # preview folders and counts
    specdeck import openapi.yaml             # write the collection JSON

Library use goes through :class:`~specdeck.importer.OpenAPIImporter`.

Modules:
    app: Typer application and CLI entry point.
    importer: Preview and build facade over the parser and converter.
    converter: Endpoint to request conversion.
    collection: Collection tree helpers and JSON persistence.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and import settings resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
