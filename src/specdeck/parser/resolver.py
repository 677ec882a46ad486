"""Resolve ``$ref`` JSON Reference pointers in OpenAPI documents.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition.  This module
expands them into self-contained subtrees.

Only **internal** references (those starting with ``#/``) are followed.
Resolution is best-effort: a pointer to a missing location, or to another
document, resolves to ``None`` and is recorded in
:attr:`ResolutionContext.warnings` instead of aborting the import.

Circular references are detected with the in-progress stack carried by a
:class:`ResolutionContext`.  A pointer met again while it is still being
expanded becomes a *cycle leaf*, ``{"x-cycle-ref": "<pointer>"}``, which
has no further children.  Termination therefore depends only on that
membership check, never on a depth limit.

An expansion that never reached a pointer on the stack is the same on
every path, so the context keeps it and later occurrences are copied
instead of re-expanded.  Densely linked schemas can still unfold into a
tree whose size grows factorially with the number of schemas, so each
top-level reference may expand at most :data:`MAX_EXPANSIONS` pointers.
Past that, remaining pointers become leaves and a warning is recorded.

The main entry point is :func:`resolve`.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional
from urllib.parse import unquote

logger = logging.getLogger(__name__)

CYCLE_REF_KEY = "x-cycle-ref"

MAX_EXPANSIONS = 10_000


class ReferenceNotFound(LookupError):
    """Raised by :func:`lookup_pointer` when a pointer has no target."""


class ResolutionContext:
    """Per-call resolution state.

    Holds the stack of pointers currently being expanded and the non-fatal
    warnings collected along the way.  Create one per build or preview
    call; a context must never be shared between calls.
    """

    def __init__(self) -> None:
        self.in_progress: list[str] = []
        self.warnings: list[str] = []
        # Expansions that reached no pointer on the stack, with their cost
        self.expanded: dict[str, tuple[Any, int]] = {}
        self.expansions = 0
        self.low_link = 0

    def warn(self, message: str) -> None:
        """Record a non-fatal diagnostic, ignoring exact duplicates."""
        if message not in self.warnings:
            self.warnings.append(message)
            logger.debug(message)


def is_cycle_leaf(node: Any) -> bool:
    """Return True if *node* is a cycle-leaf placeholder."""
    return isinstance(node, dict) and CYCLE_REF_KEY in node and len(node) == 1


def is_reference(node: Any) -> bool:
    """Return True if *node* is a mapping holding a string ``$ref``."""
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)


def lookup_pointer(root: Any, ref: str) -> Any:
    """Return the raw value a ``#/...`` pointer designates in *root*.

    Handles RFC 6901 JSON Pointer escaping (``~1`` for ``/``, ``~0`` for
    ``~``) and percent-encoded segments.  The target is returned as-is,
    without resolving any references it contains.

    Args:
        root: The document root.
        ref: The pointer (e.g., ``"#/components/schemas/Pet"``).

    Returns:
        The value at the pointer.  ``"#"`` and ``"#/"`` designate the root.

    Raises:
        ReferenceNotFound: If the pointer is external or any segment does
            not exist.
    """
    if ref in ("#", "#/"):
        return root
    if not ref.startswith("#/"):
        raise ReferenceNotFound(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for raw_segment in ref[2:].split("/"):
        segment = unquote(raw_segment).replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment in current:
                current = current[segment]
                continue
            # YAML may load keys such as response codes as integers
            if segment.isdigit() and int(segment) in current:
                current = current[int(segment)]
                continue
            raise ReferenceNotFound(
                f"Cannot resolve $ref '{ref}': key '{segment}' not found"
            )
        if isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise ReferenceNotFound(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
            continue
        raise ReferenceNotFound(
            f"Cannot resolve $ref '{ref}': "
            f"cannot navigate into {type(current).__name__}"
        )

    return current


def resolve(
    node: Any,
    root: dict[str, Any],
    context: Optional[ResolutionContext] = None,
) -> Any:
    """Recursively expand every ``$ref`` within *node*.

    Walks dicts and lists depth-first.  A dict containing a string
    ``$ref`` is replaced by its target, itself resolved in turn.  Sibling
    keys next to ``$ref`` (allowed by OpenAPI 3.1) are laid over a mapping
    target.  Neither *node* nor *root* is modified: dicts and lists in the
    result are new objects, scalars are returned as-is.

    Args:
        node: The value to resolve -- a mapping (possibly a reference), a
            list, or a scalar.
        root: The document root every pointer is looked up in.
        context: Resolution state for this call.  A fresh context is
            created when omitted.

    Returns:
        The resolved value.  Cyclic pointers become cycle leaves; dangling
        pointers become ``None``.

    Example::

        context = ResolutionContext()
        schema = resolve({"$ref": "#/components/schemas/Category"}, doc, context)
        # schema["properties"]["parent"] == {"x-cycle-ref": "#/components/schemas/Category"}
    """
    if context is None:
        context = ResolutionContext()

    if isinstance(node, dict):
        if is_reference(node):
            return _resolve_reference(node, root, context)
        return {key: resolve(value, root, context) for key, value in node.items()}

    if isinstance(node, list):
        return [resolve(item, root, context) for item in node]

    return node


def _resolve_reference(
    node: dict[str, Any], root: dict[str, Any], context: ResolutionContext
) -> Any:
    """Expand one reference mapping under the cycle guard."""
    ref = node["$ref"]
    if ref in context.in_progress:
        logger.debug("Circular $ref %s replaced by a cycle leaf", ref)
        context.low_link = min(context.low_link, context.in_progress.index(ref))
        return {CYCLE_REF_KEY: ref}

    depth = len(context.in_progress)
    if depth == 0:
        context.expansions = 0

    cached = context.expanded.get(ref)
    cost = cached[1] if cached is not None else 1
    if context.expansions + cost > MAX_EXPANSIONS:
        context.warn(
            f"Reference expansion limit of {MAX_EXPANSIONS} reached; "
            "deeper $ref pointers were left unexpanded"
        )
        context.low_link = -1
        return {CYCLE_REF_KEY: ref}

    if cached is not None:
        context.expansions += cost
        resolved = copy.deepcopy(cached[0])
    else:
        try:
            target = lookup_pointer(root, ref)
        except ReferenceNotFound as exc:
            context.warn(str(exc))
            return None

        context.expansions += 1
        start = context.expansions
        outer_low = context.low_link
        context.low_link = depth + 1
        context.in_progress.append(ref)
        try:
            resolved = resolve(target, root, context)
        finally:
            context.in_progress.pop()
            inner_low = context.low_link
            context.low_link = min(outer_low, inner_low)

        # Nothing inside reached this pointer or an enclosing one
        if inner_low > depth:
            cost = context.expansions - start + 1
            context.expanded[ref] = (copy.deepcopy(resolved), cost)

    siblings = {key: value for key, value in node.items() if key != "$ref"}
    if siblings and isinstance(resolved, dict) and not is_cycle_leaf(resolved):
        resolved.update(resolve(siblings, root, context))
    return resolved
