"""OpenAPI document parser -- load, resolve ``$ref`` pointers, and extract operations.

This sub-package is the first half of the specdeck pipeline: turning a raw
OpenAPI 3.x document (JSON or YAML) into :class:`~specdeck.models.Endpoint`
objects grouped by tag, which :mod:`specdeck.converter` turns into requests.

Typical usage::

    from specdeck.parser import load_document, validate_openapi_version, extract_endpoints
    from specdeck.parser.resolver import ResolutionContext

    raw = load_document("openapi.yaml")
    version = validate_openapi_version(raw)
    endpoints = extract_endpoints(raw, ResolutionContext())

Sub-modules:

* :mod:`~specdeck.parser.loader` -- File and bytes input, JSON/YAML
  detection and OpenAPI version validation.
* :mod:`~specdeck.parser.resolver` -- Recursive ``$ref`` resolution with
  cycle leaves for circular references.
* :mod:`~specdeck.parser.examples` -- Example and skeleton payloads from
  schemas.
* :mod:`~specdeck.parser.extractor` -- Walks ``paths`` and produces
  :class:`~specdeck.models.Endpoint` and :class:`~specdeck.models.Group`
  objects.
"""

from specdeck.parser.extractor import extract_endpoints, group_endpoints
from specdeck.parser.loader import load_document, parse_document, validate_openapi_version

__all__ = [
    "load_document",
    "parse_document",
    "validate_openapi_version",
    "extract_endpoints",
    "group_endpoints",
]
