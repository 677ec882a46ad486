"""Canonical Pydantic models shared across all specdeck modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into four groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig` and :class:`GlobalConfig`.

**Extraction models** -- produced by the parser from the OpenAPI document:
    :class:`HTTPMethod`, :class:`ParameterLocation`,
    :class:`EndpointParameter`, :class:`ResponseInfo`, :class:`Endpoint`,
    :class:`Group`, :class:`APIInfo`, :class:`ServerInfo`, and
    :class:`SecurityScheme`.

**Collection models** -- the output artifact handed to persistence, UI and
execution collaborators:
    :class:`KeyValueEntry`, :class:`BodyConfig`, :class:`AuthConfig`,
    :class:`CollectionRequest`, :class:`Folder`, and :class:`Collection`.

**Import call models** -- options in, preview out:
    :class:`ImportOptions`, :class:`FolderPreview`, and :class:`ImportPreview`.

All models use Pydantic v2. Collection models hold plain values only, so a
built :class:`Collection` never references the source document.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Node = Union[dict[str, Any], list[Any], str, int, float, bool, None]
"""A parsed document value: mapping, sequence, or scalar."""

DEFAULT_GROUP_NAME = "Untagged"
"""Folder name used for operations that declare no tags."""


# --- Config ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specdeck/config.json``.

    Loaded by :func:`~specdeck.config.load_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See
    :func:`~specdeck.config.resolve_import_settings` for the full chain.
    """

    include_examples: bool = Field(
        default=True, description="Synthesize example bodies on import"
    )
    collections_dir: Optional[str] = Field(
        default=None, description="Directory imported collections are saved to"
    )
    output: OutputConfig = Field(default_factory=OutputConfig)


class ImportSettings(BaseModel):
    """Effective settings for one ``specdeck import`` run after precedence resolution."""

    include_examples: bool = True
    base_url: Optional[str] = None
    collections_dir: str


# --- Extraction models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class EndpointParameter(BaseModel):
    """A single parameter of an :class:`Endpoint`.

    ``schema_`` holds the parameter schema, fully resolved when the endpoint
    was extracted in build mode and left as declared in preview mode.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    example: Any = None


class ResponseInfo(BaseModel):
    """Parsed response metadata for a single HTTP status code."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status_code: str
    description: Optional[str] = None
    content_types: list[str] = Field(default_factory=list)
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")


class Endpoint(BaseModel):
    """One operation: a (path, method) pair extracted from the document.

    Immutable once built. ``request_body`` is the OpenAPI *Request Body
    Object* (resolved in build mode) or ``None``.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    parameters: list[EndpointParameter] = Field(default_factory=list)
    request_body: Optional[dict[str, Any]] = None
    responses: list[ResponseInfo] = Field(default_factory=list)
    security: Optional[list[dict[str, Any]]] = Field(
        default=None,
        description="Operation-level security requirements; None inherits the global ones",
    )
    deprecated: bool = False

    @property
    def group_name(self) -> str:
        """Folder this endpoint belongs to: its first tag, or the default group."""
        for tag in self.tags[:1]:
            if tag:
                return tag
        return DEFAULT_GROUP_NAME


class Group(BaseModel):
    """A named bucket of endpoints; becomes one :class:`Folder`."""

    name: str
    description: Optional[str] = None
    endpoints: list[Endpoint] = Field(default_factory=list)


class APIInfo(BaseModel):
    """API metadata extracted from the OpenAPI spec's *Info Object*."""

    title: str = ""
    version: str = ""
    description: Optional[str] = None


class ServerInfo(BaseModel):
    """A server entry from the OpenAPI spec's ``servers`` array.

    The first server's ``url`` is the default base URL of every built
    request unless :attr:`ImportOptions.base_url` overrides it.
    """

    url: str
    description: Optional[str] = None


class SecurityScheme(BaseModel):
    """An OpenAPI *Security Scheme Object* extracted from ``components``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: str  # apiKey, http, oauth2, openIdConnect
    scheme: Optional[str] = None  # bearer, basic
    param_name: Optional[str] = Field(default=None, alias="in_name")
    location: Optional[str] = Field(default=None, alias="in_location")


# --- Collection models ---


class KeyValueEntry(BaseModel):
    """One header or query parameter row of a request."""

    key: str
    value: str = ""
    enabled: bool = True


class BodyConfig(BaseModel):
    """Request body: ``type`` is ``json``, ``form-data`` or ``raw``."""

    type: str
    content: Any = None


class AuthConfig(BaseModel):
    """Authentication attached to a request, derived from a security scheme."""

    type: str = Field(description="Auth type: bearer, basic, api_key")
    token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    api_key_name: Optional[str] = None
    api_key_location: Optional[str] = None


class CollectionRequest(BaseModel):
    """A saved, executable request template."""

    id: str = ""
    name: str
    description: Optional[str] = None
    method: str
    url: str
    params: list[KeyValueEntry] = Field(default_factory=list)
    headers: list[KeyValueEntry] = Field(default_factory=list)
    body: Optional[BodyConfig] = None
    auth: Optional[AuthConfig] = None


class Folder(BaseModel):
    """A folder of requests; folders nest arbitrarily."""

    name: str
    description: Optional[str] = None
    requests: list[CollectionRequest] = Field(default_factory=list)
    folders: list[Folder] = Field(default_factory=list)


class Collection(BaseModel):
    """The import artifact: a tree of folders and requests."""

    name: str
    description: Optional[str] = None
    requests: list[CollectionRequest] = Field(default_factory=list)
    folders: list[Folder] = Field(default_factory=list)


# --- Import call models ---


class ImportOptions(BaseModel):
    """Caller-supplied options for a single build.

    Empty strings for ``name`` and ``base_url`` are treated as absent.
    """

    name: Optional[str] = None
    base_url: Optional[str] = None
    include_examples: bool = False


class FolderPreview(BaseModel):
    """A folder that an import would create."""

    name: str
    description: Optional[str] = None
    request_count: int = 0


class ImportPreview(BaseModel):
    """Summary of what an import would create, computed without building it."""

    spec_version: str
    title: str = ""
    description: Optional[str] = None
    endpoint_count: int = 0
    folder_count: int = 0
    servers: list[str] = Field(default_factory=list)
    folders: list[FolderPreview] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
