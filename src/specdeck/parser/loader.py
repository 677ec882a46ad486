"""Load OpenAPI documents from raw bytes, local files, URLs or stdin.

This module turns the raw input into a generic document tree (dicts, lists
and scalars, in source key order) and checks the declared dialect.  JSON is
tried first and YAML is the fallback, so either serialization is accepted
without a format hint.

The public functions are:

* :func:`load_source` -- Load from a file path, an HTTP(S) URL, or ``-`` for
  stdin.
* :func:`parse_document` -- Parse bytes or text into a document mapping.
* :func:`load_document` -- Read a local file, then :func:`parse_document`.
* :func:`fetch_document` -- GET a URL with httpx, then :func:`parse_document`.
* :func:`get_version` -- The literal declared version string.
* :func:`validate_openapi_version` -- Accept OpenAPI 3.0.x and 3.1.x only.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Union

import httpx
import yaml

from specdeck.exceptions import (
    InvalidStructureError,
    SpecFileNotFoundError,
    SpecParseError,
    UnsupportedVersionError,
)

logger = logging.getLogger(__name__)

SUPPORTED_VERSION_PREFIXES = ("3.0.", "3.1.")

FETCH_TIMEOUT = 30.0


def load_source(source: Union[str, Path]) -> dict[str, Any]:
    """Load an OpenAPI document from a file path, URL, or stdin ('-').

    Args:
        source: A local path, an ``http://`` or ``https://`` URL, or ``-``.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecFileNotFoundError: If the source cannot be read or fetched.
        SpecParseError: If the content cannot be parsed.
    """
    text = str(source)
    if text == "-":
        return _load_from_stdin()
    if text.startswith(("http://", "https://")):
        return fetch_document(text)
    return load_document(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecFileNotFoundError(
            "Cannot read from stdin", details=str(exc)
        ) from exc
    return parse_document(content)


def fetch_document(url: str) -> dict[str, Any]:
    """Fetch an OpenAPI document over HTTP(S).

    Redirects are followed.  Only the document itself is fetched; external
    ``$ref`` targets are never requested.

    Raises:
        SpecFileNotFoundError: On a non-2xx status or a transport error.
        SpecParseError: If the body cannot be parsed.
    """
    try:
        response = httpx.get(url, timeout=FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecFileNotFoundError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecFileNotFoundError(
            f"Cannot fetch spec from {url}", details=str(exc)
        ) from exc

    logger.debug("Fetched %d bytes from %s", len(response.content), url)
    return parse_document(response.content)


def load_document(path: Union[str, Path]) -> dict[str, Any]:
    """Load an OpenAPI document from a local file.

    Args:
        path: Path to a JSON or YAML file.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecFileNotFoundError: If the file does not exist or cannot be read.
        SpecParseError: If the content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecFileNotFoundError(f"File not found: {path}")

    try:
        data = file_path.read_bytes()
    except OSError as exc:
        raise SpecFileNotFoundError(
            f"Cannot read file: {path}", details=str(exc)
        ) from exc

    logger.debug("Read %d bytes from %s", len(data), file_path)
    return parse_document(data)


def parse_document(data: Union[bytes, str]) -> dict[str, Any]:
    """Parse raw document content as JSON or YAML.

    Tries JSON first, then falls back to YAML.  Valid JSON is also valid
    YAML, but JSON parsing is stricter and faster.

    Args:
        data: The raw bytes or decoded text of the document.

    Returns:
        The parsed dictionary.

    Raises:
        SpecParseError: If the input is empty, not UTF-8, not parseable as
            either format, or does not have a mapping at its root.
    """
    if isinstance(data, bytes):
        try:
            content = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise SpecParseError(
                "Invalid OpenAPI specification: input is not UTF-8 text",
                details=str(exc),
            ) from exc
    else:
        content = data

    if not content.strip():
        raise SpecParseError("Invalid OpenAPI specification: document is empty")

    try:
        result = json.loads(content)
    except json.JSONDecodeError as exc:
        json_error = exc
    else:
        return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise SpecParseError(
            "Invalid OpenAPI specification: not valid JSON or YAML",
            details=f"JSON error: {json_error}\nYAML error: {exc}",
        ) from exc

    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    """Reject documents whose root is not an object."""
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(
            f"Invalid OpenAPI specification: root must be an object (got {kind})"
        )
    return result


def get_version(spec: dict[str, Any]) -> str:
    """Return the declared specification version exactly as written.

    Reads ``openapi``, falling back to the legacy ``swagger`` field.

    Args:
        spec: The parsed document.

    Returns:
        The version string, or ``""`` when no version is declared.
    """
    for field in ("openapi", "swagger"):
        value = spec.get(field)
        if value is not None:
            return str(value)
    return ""


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Supports OpenAPI 3.0.x and 3.1.x.

    Args:
        spec: The parsed document.

    Returns:
        The OpenAPI version string (e.g., '3.0.3', '3.1.0').

    Raises:
        UnsupportedVersionError: For Swagger 2.x or any version outside
            3.0.x / 3.1.x.
        InvalidStructureError: If the ``openapi`` field is missing.
    """
    if "swagger" in spec:
        raise UnsupportedVersionError(
            "OpenAPI 2.0 (Swagger) is not supported. Please convert to OpenAPI 3.x.",
            details=f"Detected version: {spec['swagger']}",
        )

    if spec.get("openapi") is None:
        raise InvalidStructureError(
            "Missing 'openapi' field. Is this an OpenAPI 3.x document?"
        )

    version = get_version(spec)
    if not version.startswith(SUPPORTED_VERSION_PREFIXES):
        raise UnsupportedVersionError(
            f"Unsupported OpenAPI version: {version}",
            details="Supported versions: 3.0.x, 3.1.x",
        )
    return version
