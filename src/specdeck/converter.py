"""Convert an OpenAPI document into a request :class:`~specdeck.models.Collection`.

:func:`build_collection` is the single public entry point.  It validates
the dialect, extracts endpoints with references resolved, groups them by
first tag, and turns every endpoint into a
:class:`~specdeck.models.CollectionRequest`:

* the URL joins the chosen base URL and the path template, keeping
  ``{param}`` placeholders for the caller to fill at execution time;
* query and header parameters become key/value rows;
* the request body is taken from the preferred media type, with example
  content synthesized when ``include_examples`` is set and a structural
  skeleton otherwise;
* a ``Content-Type`` header is derived from that media type;
* authentication comes from the first usable security requirement.

Every call owns its own :class:`~specdeck.parser.resolver.ResolutionContext`,
so concurrent builds of different documents need no locking.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from specdeck.collection import IdGenerator, generate_id, set_header
from specdeck.models import (
    AuthConfig,
    BodyConfig,
    Collection,
    CollectionRequest,
    Endpoint,
    EndpointParameter,
    Folder,
    ImportOptions,
    KeyValueEntry,
    ParameterLocation,
    SecurityScheme,
)
from specdeck.parser.examples import (
    format_example,
    schema_type,
    skeleton,
    string_example,
    synthesize,
)
from specdeck.parser.extractor import (
    extract_endpoints,
    extract_info,
    extract_security_schemes,
    extract_servers,
    extract_tag_descriptions,
    group_endpoints,
)
from specdeck.parser.loader import validate_openapi_version
from specdeck.parser.resolver import ResolutionContext

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME = "Imported API"

# Preferred request body media types, most preferred first
MEDIA_TYPE_PRIORITY = (
    "application/json",
    "application/x-www-form-urlencoded",
    "multipart/form-data",
    "text/plain",
    "application/xml",
    "text/xml",
)


def build_collection(
    spec: dict[str, Any],
    options: Optional[ImportOptions] = None,
    id_generator: IdGenerator = generate_id,
    context: Optional[ResolutionContext] = None,
) -> Collection:
    """Build a :class:`Collection` from a parsed OpenAPI document.

    Args:
        spec: The parsed, unresolved document.
        options: Name/base URL overrides and the examples switch.
        id_generator: Source of request IDs.
        context: Resolution context to use.  Pass one to inspect the
            collected warnings afterwards; a fresh one is created otherwise.

    Returns:
        The collection, one folder per tag group in first-seen order.  A
        document without paths yields a collection with no folders.

    Raises:
        UnsupportedVersionError: If the dialect is not OpenAPI 3.0/3.1.
        InvalidStructureError: If the ``openapi`` field is missing.
    """
    validate_openapi_version(spec)
    options = options or ImportOptions()
    context = context or ResolutionContext()

    info = extract_info(spec)
    name = options.name or info.title or DEFAULT_COLLECTION_NAME

    base_url = options.base_url or ""
    if not base_url:
        servers = extract_servers(spec)
        if servers:
            base_url = servers[0].url

    global_security = spec.get("security")
    schemes = extract_security_schemes(spec, context)

    endpoints = extract_endpoints(spec, context)
    groups = group_endpoints(endpoints, extract_tag_descriptions(spec))

    security = global_security if isinstance(global_security, list) else None
    folders: list[Folder] = []
    for group in groups:
        requests = [
            endpoint_to_request(
                endpoint, base_url, options.include_examples, security, schemes, id_generator
            )
            for endpoint in group.endpoints
        ]
        folders.append(
            Folder(name=group.name, description=group.description, requests=requests)
        )

    logger.debug(
        "Built collection %r: %d folders, %d requests, %d warnings",
        name,
        len(folders),
        len(endpoints),
        len(context.warnings),
    )
    return Collection(name=name, description=info.description, folders=folders)


def endpoint_to_request(
    endpoint: Endpoint,
    base_url: str,
    include_examples: bool,
    global_security: Optional[list[dict[str, Any]]],
    schemes: dict[str, SecurityScheme],
    id_generator: IdGenerator = generate_id,
) -> CollectionRequest:
    """Convert a single resolved :class:`Endpoint` into a request."""
    name = endpoint.summary or endpoint.operation_id or (
        f"{endpoint.method.value.upper()} {endpoint.path}"
    )

    params: list[KeyValueEntry] = []
    headers: list[KeyValueEntry] = []
    for param in endpoint.parameters:
        entry = KeyValueEntry(
            key=param.name,
            value=parameter_example(param),
            enabled=param.required,
        )
        if param.location == ParameterLocation.QUERY:
            params.append(entry)
        elif param.location == ParameterLocation.HEADER:
            set_header(headers, entry.key, entry.value, enabled=entry.enabled)

    body: Optional[BodyConfig] = None
    if endpoint.request_body is not None:
        media_type, media = select_media_type(endpoint.request_body)
        if media_type is not None:
            set_header(headers, "Content-Type", media_type)
            body = _build_body(media_type, media, include_examples)

    return CollectionRequest(
        id=id_generator(),
        name=name,
        description=endpoint.description,
        method=endpoint.method.value.upper(),
        url=build_url(base_url, endpoint.path),
        params=params,
        headers=headers,
        body=body,
        auth=operation_auth(endpoint.security, global_security, schemes),
    )


def build_url(base_url: str, path: str) -> str:
    """Join *base_url* and *path* with exactly one ``/``.

    Path placeholders such as ``{id}`` are left intact.  An empty base URL
    yields the path alone.
    """
    if not base_url:
        return path
    if not path.startswith("/"):
        path = "/" + path
    return base_url.rstrip("/") + path


def parameter_example(param: EndpointParameter) -> str:
    """Pick a display value for a parameter row.

    Preference order: the parameter's ``example``, the schema's
    ``example``, the schema's ``default``, then a literal for the schema
    type.
    """
    if param.example is not None:
        return format_example(param.example)

    schema = param.schema_
    if not schema:
        return ""
    if schema.get("example") is not None:
        return format_example(schema["example"])
    if schema.get("default") is not None:
        return format_example(schema["default"])

    kind = schema_type(schema)
    if kind == "string":
        return string_example(schema.get("format"))
    if kind == "integer":
        return "0"
    if kind == "number":
        return "0.0"
    if kind == "boolean":
        return "false"
    return ""


def select_media_type(request_body: dict[str, Any]) -> tuple[Optional[str], Any]:
    """Choose the request body media type to build from.

    Types in :data:`MEDIA_TYPE_PRIORITY` win in that order; otherwise the
    first declared type is used.

    Returns:
        ``(media_type, media_type_object)``, or ``(None, None)`` when the
        body declares no content.
    """
    content = request_body.get("content")
    if not isinstance(content, dict) or not content:
        return None, None

    for media_type in MEDIA_TYPE_PRIORITY:
        if media_type in content:
            return media_type, content[media_type]

    media_type = next(iter(content))
    return str(media_type), content[media_type]


def _build_body(media_type: str, media: Any, include_examples: bool) -> BodyConfig:
    """Build the body for the selected media type."""
    schema = media.get("schema") if isinstance(media, dict) else None
    render = synthesize if include_examples else skeleton

    if include_examples and isinstance(media, dict) and "example" in media:
        value = media["example"]
    else:
        value = render(schema)

    if "json" in media_type:
        return BodyConfig(type="json", content=value)
    if "form" in media_type:
        return BodyConfig(type="form-data", content=value if isinstance(value, dict) else None)

    if value is None:
        text = ""
    elif isinstance(value, str):
        text = value
    else:
        text = json.dumps(value, indent=2, default=str)
    return BodyConfig(type="raw", content=text)


def operation_auth(
    operation_security: Optional[list[dict[str, Any]]],
    global_security: Optional[list[dict[str, Any]]],
    schemes: dict[str, SecurityScheme],
) -> Optional[AuthConfig]:
    """Derive request auth from the effective security requirements.

    Operation-level ``security`` replaces the global one; an explicit empty
    list means the operation is public.  Only the first scheme of the first
    requirement is considered, and only bearer, basic and API-key schemes
    are mapped.
    """
    security = operation_security if operation_security is not None else global_security
    if not security:
        return None

    first = security[0]
    if not isinstance(first, dict) or not first:
        return None

    scheme = schemes.get(next(iter(first)))
    if scheme is None:
        return None

    scheme_type = scheme.type.lower()
    if scheme_type == "http":
        http_scheme = (scheme.scheme or "").lower()
        if http_scheme == "bearer":
            return AuthConfig(type="bearer", token="")
        if http_scheme == "basic":
            return AuthConfig(type="basic")
    elif scheme_type == "apikey":
        return AuthConfig(
            type="api_key",
            api_key_name=scheme.param_name,
            api_key_location=scheme.location,
        )
    return None
