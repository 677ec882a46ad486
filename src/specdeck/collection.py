"""Collection tree helpers and the JSON persistence boundary.

A :class:`~specdeck.models.Collection` is a plain value tree.  The helpers
here navigate and edit it (counting, lookup by ID or folder path,
insertion, header upserts) and move it to and from disk as indented JSON.
Request IDs are produced by an injectable generator so that tests can
supply deterministic ones.
"""

from __future__ import annotations

import json
import re
import uuid
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Callable, Optional, Union

from pydantic import ValidationError

from specdeck.config import atomic_write
from specdeck.exceptions import CollectionError
from specdeck.models import Collection, CollectionRequest, Folder, KeyValueEntry

IdGenerator = Callable[[], str]
"""Zero-argument callable returning a fresh, unique request ID."""

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def generate_id() -> str:
    """Return a new random request ID such as ``req_3f2a9c0d1e4b``."""
    return f"req_{uuid.uuid4().hex[:12]}"


def set_header(
    headers: list[KeyValueEntry],
    key: str,
    value: str,
    enabled: bool = True,
) -> list[KeyValueEntry]:
    """Add or overwrite a header, matching keys case-insensitively.

    An existing entry keeps its position and spelling and takes the new
    value and enabled flag (last write wins); otherwise a new entry is
    appended.

    Args:
        headers: Header rows, modified in place.
        key: Header name.
        value: Header value.
        enabled: Whether the header is sent.

    Returns:
        The same *headers* list, for chaining.
    """
    lowered = key.lower()
    for entry in headers:
        if entry.key.lower() == lowered:
            entry.value = value
            entry.enabled = enabled
            return headers
    headers.append(KeyValueEntry(key=key, value=value, enabled=enabled))
    return headers


def iter_requests(collection: Collection) -> Iterator[CollectionRequest]:
    """Yield every request in the collection, depth-first through folders."""
    yield from collection.requests
    for folder in collection.folders:
        yield from _iter_folder(folder)


def _iter_folder(folder: Folder) -> Iterator[CollectionRequest]:
    yield from folder.requests
    for sub in folder.folders:
        yield from _iter_folder(sub)


def count_requests(collection: Collection) -> int:
    """Count requests at the top level and in all nested folders."""
    return sum(1 for _ in iter_requests(collection))


def find_request(collection: Collection, request_id: str) -> Optional[CollectionRequest]:
    """Return the request with *request_id*, or ``None``."""
    for request in iter_requests(collection):
        if request.id == request_id:
            return request
    return None


def find_folder(collection: Collection, folder_path: Sequence[str]) -> Optional[Folder]:
    """Return the folder at *folder_path* (a list of names from the top), or ``None``."""
    folders = collection.folders
    found: Optional[Folder] = None
    for name in folder_path:
        found = next((f for f in folders if f.name == name), None)
        if found is None:
            return None
        folders = found.folders
    return found


def add_request(
    collection: Collection,
    request: CollectionRequest,
    folder_path: Sequence[str] = (),
    id_generator: IdGenerator = generate_id,
) -> CollectionRequest:
    """Append *request* to the collection root or to the folder at *folder_path*.

    A request without an ID is given one from *id_generator*.

    Raises:
        CollectionError: If *folder_path* does not name an existing folder.
    """
    if not request.id:
        request.id = id_generator()

    if not folder_path:
        collection.requests.append(request)
        return request

    folder = find_folder(collection, folder_path)
    if folder is None:
        raise CollectionError(f"Folder not found: {'/'.join(folder_path)}")
    folder.requests.append(request)
    return request


def sanitize_filename(name: str) -> str:
    """Turn a collection name into a safe file stem.

    Spaces become ``-``; anything outside ``[A-Za-z0-9_-]`` is dropped.
    Falls back to ``imported-api`` when nothing is left.
    """
    stem = _UNSAFE_FILENAME_CHARS.sub("", name.replace(" ", "-"))
    return stem or "imported-api"


def save_collection(collection: Collection, path: Union[str, Path]) -> Path:
    """Write *collection* to *path* as indented JSON, atomically.

    Returns:
        The path written.

    Raises:
        CollectionError: If the file cannot be written.
    """
    target = Path(path)
    data = collection.model_dump(mode="json", exclude_none=True)
    try:
        atomic_write(target, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
    except OSError as exc:
        raise CollectionError(f"Failed to write collection file {target}: {exc}") from exc
    return target


def load_collection(path: Union[str, Path]) -> Collection:
    """Read a collection JSON file.

    Raises:
        CollectionError: If the file is missing, is not JSON, or does not
            match the collection schema.
    """
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise CollectionError(f"Failed to read collection file {source}: {exc}") from exc
    try:
        return Collection.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise CollectionError(f"Invalid collection file {source}: {exc}") from exc
