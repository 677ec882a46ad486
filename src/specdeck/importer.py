"""High-level import API: preview or build a collection from one document.

:class:`OpenAPIImporter` holds a parsed, unresolved document and exposes
the two operations callers need:

* :meth:`OpenAPIImporter.preview` -- a cheap summary that resolves no
  references, suitable for a dry run.
* :meth:`OpenAPIImporter.to_collection` -- the full build, with every
  reference resolved and example payloads synthesized on request.

Typical usage::

    importer = OpenAPIImporter.from_file("openapi.yaml")
    preview = importer.preview()
    collection = importer.to_collection(ImportOptions(include_examples=True))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

from specdeck.collection import IdGenerator, generate_id
from specdeck.converter import DEFAULT_COLLECTION_NAME, build_collection
from specdeck.models import (
    DEFAULT_GROUP_NAME,
    Collection,
    FolderPreview,
    ImportOptions,
    ImportPreview,
)
from specdeck.parser.extractor import (
    extract_endpoints,
    extract_info,
    extract_servers,
    extract_tag_descriptions,
    group_endpoints,
)
from specdeck.parser.loader import (
    get_version,
    load_document,
    load_source,
    parse_document,
    validate_openapi_version,
)
from specdeck.parser.resolver import ResolutionContext

logger = logging.getLogger(__name__)

WARN_MISSING_TITLE = (
    f"Missing info.title, will use '{DEFAULT_COLLECTION_NAME}' as collection name"
)
WARN_NO_SERVERS = "No servers defined, requests will use relative URLs"
WARN_UNTAGGED = (
    f"Some operations have no tags and will be placed in '{DEFAULT_GROUP_NAME}' folder"
)


class OpenAPIImporter:
    """Importer for a single OpenAPI 3.0/3.1 document.

    Args:
        data: Raw document content, JSON or YAML.

    Raises:
        SpecParseError: If *data* is neither valid JSON nor valid YAML.
    """

    def __init__(self, data: Union[bytes, str]) -> None:
        self._spec = parse_document(data)
        self._warnings: list[str] = []

    @classmethod
    def from_document(cls, spec: dict[str, Any]) -> OpenAPIImporter:
        """Wrap an already parsed document without re-parsing it."""
        importer = cls.__new__(cls)
        importer._spec = spec
        importer._warnings = []
        return importer

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> OpenAPIImporter:
        """Load the document at *path*.

        Raises:
            SpecFileNotFoundError: If the file is missing or unreadable.
            SpecParseError: If the content cannot be parsed.
        """
        return cls.from_document(load_document(path))

    @classmethod
    def from_source(cls, source: Union[str, Path]) -> OpenAPIImporter:
        """Load from a file path, an HTTP(S) URL, or ``-`` for stdin."""
        return cls.from_document(load_source(source))

    @property
    def spec(self) -> dict[str, Any]:
        """The parsed, unresolved document."""
        return self._spec

    @property
    def warnings(self) -> list[str]:
        """Non-fatal diagnostics from the most recent :meth:`to_collection` call."""
        return list(self._warnings)

    def get_version(self) -> str:
        """Return the declared version string (``openapi`` or ``swagger``)."""
        return get_version(self._spec)

    def validate_version(self) -> str:
        """Return the version if it is OpenAPI 3.0.x or 3.1.x, else raise."""
        return validate_openapi_version(self._spec)

    def preview(self) -> ImportPreview:
        """Summarize what an import would produce without resolving references.

        Folder previews come in the same order, with the same counts, as the
        folders :meth:`to_collection` emits.

        Raises:
            UnsupportedVersionError: If the dialect is not supported.
            InvalidStructureError: If the ``openapi`` field is missing.
        """
        version = validate_openapi_version(self._spec)
        info = extract_info(self._spec)
        servers = extract_servers(self._spec)
        endpoints = extract_endpoints(self._spec)
        groups = group_endpoints(endpoints, extract_tag_descriptions(self._spec))

        warnings: list[str] = []
        if not info.title:
            warnings.append(WARN_MISSING_TITLE)
        if not servers:
            warnings.append(WARN_NO_SERVERS)
        if any(not endpoint.tags or not endpoint.tags[0] for endpoint in endpoints):
            warnings.append(WARN_UNTAGGED)

        return ImportPreview(
            spec_version=version,
            title=info.title,
            description=info.description,
            endpoint_count=len(endpoints),
            folder_count=len(groups),
            servers=[server.url for server in servers],
            folders=[
                FolderPreview(
                    name=group.name,
                    description=group.description,
                    request_count=len(group.endpoints),
                )
                for group in groups
            ],
            warnings=warnings,
        )

    def to_collection(
        self,
        options: Optional[ImportOptions] = None,
        id_generator: Optional[IdGenerator] = None,
    ) -> Collection:
        """Build the request collection.

        Each call resolves references with its own context, so repeated or
        concurrent calls never share state.

        Args:
            options: Name and base URL overrides and the examples switch.
            id_generator: Source of request IDs; random IDs by default.

        Raises:
            UnsupportedVersionError: If the dialect is not supported.
            InvalidStructureError: If the ``openapi`` field is missing.
        """
        context = ResolutionContext()
        collection = build_collection(
            self._spec,
            options,
            id_generator=id_generator or generate_id,
            context=context,
        )
        self._warnings = list(context.warnings)
        if self._warnings:
            logger.debug("Import finished with %d warnings", len(self._warnings))
        return collection


def new_importer(data: Union[bytes, str]) -> OpenAPIImporter:
    """Create an :class:`OpenAPIImporter` from raw document content."""
    return OpenAPIImporter(data)
