"""Extract endpoints, servers, tags and security schemes from OpenAPI documents.

This module walks the ``paths`` object of a parsed document and builds one
:class:`~specdeck.models.Endpoint` per path + HTTP method combination, then
partitions the endpoints into :class:`~specdeck.models.Group` buckets by
their first tag.

Extraction runs in two modes:

* **Build mode** (a :class:`~specdeck.parser.resolver.ResolutionContext` is
  passed): parameters, request bodies and response schemas are fully
  resolved.
* **Preview mode** (no context): nothing is resolved; only the identity of
  each endpoint (path, method, tags) is meaningful.

Both modes visit paths and methods in document order, so grouping, and
therefore folder order, is identical in both.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they
share the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specdeck.models import (
    APIInfo,
    Endpoint,
    EndpointParameter,
    Group,
    HTTPMethod,
    ParameterLocation,
    ResponseInfo,
    SecurityScheme,
    ServerInfo,
)
from specdeck.parser.resolver import (
    ReferenceNotFound,
    ResolutionContext,
    is_reference,
    lookup_pointer,
    resolve,
)

logger = logging.getLogger(__name__)

# HTTP methods recognized by OpenAPI
_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)


def _optional_str(value: Any) -> Optional[str]:
    # YAML loads unquoted scalars such as 12345 or 2024-01-15 as int or date
    return str(value) if value is not None else None


def extract_endpoints(
    spec: dict[str, Any],
    context: Optional[ResolutionContext] = None,
) -> list[Endpoint]:
    """Extract every operation from the document's ``paths`` object.

    Args:
        spec: The parsed (unresolved) document.
        context: Resolution context for build mode.  When ``None`` the
            endpoints are extracted in preview mode and no reference is
            resolved.

    Returns:
        Endpoints in document order: paths first, then methods within each
        path.  A path item without operations contributes nothing.
    """
    paths = spec.get("paths")
    if not isinstance(paths, dict):
        return []

    endpoints: list[Endpoint] = []
    for path, path_item in paths.items():
        path_item = _deref_path_item(spec, path_item, context)
        if not isinstance(path_item, dict):
            continue

        path_params = path_item.get("parameters") or []

        for method_str, operation in path_item.items():
            if method_str not in _HTTP_METHODS or not isinstance(operation, dict):
                continue
            endpoints.append(
                _build_endpoint(spec, str(path), method_str, operation, path_params, context)
            )

    logger.debug("Extracted %d endpoints from %d paths", len(endpoints), len(paths))
    return endpoints


def _deref_path_item(
    spec: dict[str, Any], path_item: Any, context: Optional[ResolutionContext]
) -> Any:
    """Follow a path-item level ``$ref`` with a plain lookup.

    Done in both modes so that preview and build see the same operations.
    """
    if not is_reference(path_item):
        return path_item
    try:
        target = lookup_pointer(spec, path_item["$ref"])
    except ReferenceNotFound as exc:
        if context is not None:
            context.warn(str(exc))
        return None
    return target


def _build_endpoint(
    spec: dict[str, Any],
    path: str,
    method_str: str,
    operation: dict[str, Any],
    path_params: list[Any],
    context: Optional[ResolutionContext],
) -> Endpoint:
    """Assemble one :class:`Endpoint`, resolving its parts in build mode."""
    tags = [str(tag) for tag in operation.get("tags") or [] if tag is not None]

    parameters: list[EndpointParameter] = []
    request_body: Optional[dict[str, Any]] = None
    responses: list[ResponseInfo] = []

    if context is not None:
        resolved_path_params = _resolve_list(spec, path_params, context)
        resolved_op_params = _resolve_list(spec, operation.get("parameters") or [], context)
        parameters = _extract_parameters(
            _merge_parameters(resolved_path_params, resolved_op_params)
        )
        body = operation.get("requestBody")
        if body is not None:
            resolved_body = resolve(body, spec, context)
            if isinstance(resolved_body, dict):
                request_body = resolved_body
        responses = _extract_responses(resolve(operation.get("responses") or {}, spec, context))
    elif isinstance(operation.get("requestBody"), dict):
        request_body = operation["requestBody"]

    security = operation.get("security")
    return Endpoint(
        path=path,
        method=HTTPMethod(method_str),
        operation_id=_optional_str(operation.get("operationId")),
        summary=_optional_str(operation.get("summary")),
        description=_optional_str(operation.get("description")),
        tags=tags,
        parameters=parameters,
        request_body=request_body,
        responses=responses,
        security=security if isinstance(security, list) else None,
        deprecated=bool(operation.get("deprecated", False)),
    )


def _resolve_list(
    spec: dict[str, Any], items: Any, context: ResolutionContext
) -> list[dict[str, Any]]:
    """Resolve a list of (possibly referenced) mappings, dropping dangling ones."""
    if not isinstance(items, list):
        return []
    resolved = [resolve(item, spec, context) for item in items]
    return [item for item in resolved if isinstance(item, dict)]


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.

    Args:
        path_params: Parameters defined at the path level.
        op_params: Parameters defined at the operation level.

    Returns:
        A merged list of parameter dicts.
    """
    op_keys = {(param.get("name", ""), param.get("in", "")) for param in op_params}

    merged = [
        param
        for param in path_params
        if (param.get("name", ""), param.get("in", "")) not in op_keys
    ]
    merged.extend(op_params)
    return merged


def _extract_parameters(params_list: list[dict[str, Any]]) -> list[EndpointParameter]:
    """Convert resolved parameter dicts into :class:`EndpointParameter` models.

    Path parameters are always required regardless of the ``required``
    field in the source.  Parameters with unrecognised ``in`` locations are
    skipped.
    """
    parameters: list[EndpointParameter] = []

    for param in params_list:
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            continue

        schema = param.get("schema")
        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        parameters.append(
            EndpointParameter(
                name=str(param.get("name", "")),
                location=location,
                required=required,
                description=_optional_str(param.get("description")),
                schema=schema if isinstance(schema, dict) else None,
                example=param.get("example"),
            )
        )

    return parameters


def _extract_responses(responses: Any) -> list[ResponseInfo]:
    """Extract response metadata for all declared status codes."""
    if not isinstance(responses, dict):
        return []

    result: list[ResponseInfo] = []
    for status_code, response in responses.items():
        if not isinstance(response, dict):
            continue

        content = response.get("content")
        if not isinstance(content, dict):
            content = {}

        schema: Optional[dict[str, Any]] = None
        for media in content.values():
            if isinstance(media, dict) and isinstance(media.get("schema"), dict):
                schema = media["schema"]
                break

        result.append(
            ResponseInfo(
                status_code=str(status_code),
                description=_optional_str(response.get("description")),
                content_types=[str(ct) for ct in content],
                schema=schema,
            )
        )

    return result


def group_endpoints(
    endpoints: list[Endpoint],
    tag_descriptions: Optional[dict[str, str]] = None,
) -> list[Group]:
    """Partition endpoints into groups named by their first tag.

    Endpoints without tags go to the ``Untagged`` group.  Groups are ordered
    by the first occurrence of their name in *endpoints*, not
    alphabetically.

    Args:
        endpoints: Endpoints in document order.
        tag_descriptions: Optional descriptions from the top-level ``tags``
            declaration, keyed by tag name.

    Returns:
        The groups, each holding its endpoints in document order.
    """
    descriptions = tag_descriptions or {}
    groups: dict[str, Group] = {}

    for endpoint in endpoints:
        name = endpoint.group_name
        group = groups.get(name)
        if group is None:
            group = Group(name=name, description=descriptions.get(name))
            groups[name] = group
        group.endpoints.append(endpoint)

    return list(groups.values())


def extract_info(spec: dict[str, Any]) -> APIInfo:
    """Extract title, version and description from the ``info`` object."""
    info = spec.get("info")
    if not isinstance(info, dict):
        return APIInfo()
    title = info.get("title")
    version = info.get("version")
    return APIInfo(
        title=str(title) if title is not None else "",
        version=str(version) if version is not None else "",
        description=_optional_str(info.get("description")),
    )


def extract_servers(spec: dict[str, Any]) -> list[ServerInfo]:
    """Extract server entries with a non-empty ``url`` from ``servers``."""
    servers = spec.get("servers")
    if not isinstance(servers, list):
        return []

    return [
        ServerInfo(
            url=str(server["url"]),
            description=_optional_str(server.get("description")),
        )
        for server in servers
        if isinstance(server, dict) and server.get("url")
    ]


def extract_tag_descriptions(spec: dict[str, Any]) -> dict[str, str]:
    """Map tag names to the descriptions in the top-level ``tags`` array."""
    tags = spec.get("tags")
    if not isinstance(tags, list):
        return {}
    return {
        str(tag["name"]): str(tag["description"])
        for tag in tags
        if isinstance(tag, dict) and tag.get("name") and tag.get("description")
    }


def extract_security_schemes(
    spec: dict[str, Any],
    context: Optional[ResolutionContext] = None,
) -> dict[str, SecurityScheme]:
    """Extract security scheme definitions from ``components/securitySchemes``.

    Returns:
        A dict mapping scheme name to :class:`SecurityScheme`, in document
        order.  Empty when no schemes are declared.
    """
    components = spec.get("components")
    if not isinstance(components, dict):
        return {}
    schemes_raw = components.get("securitySchemes")
    if not isinstance(schemes_raw, dict):
        return {}

    schemes: dict[str, SecurityScheme] = {}
    for name, scheme_data in schemes_raw.items():
        scheme_data = resolve(scheme_data, spec, context)
        if not isinstance(scheme_data, dict):
            continue

        schemes[name] = SecurityScheme(
            name=name,
            type=str(scheme_data.get("type", "")),
            scheme=_optional_str(scheme_data.get("scheme")),
            in_name=_optional_str(scheme_data.get("name")),
            in_location=_optional_str(scheme_data.get("in")),
        )

    return schemes
