"""Import command -- turn an OpenAPI document into a saved collection.

``specdeck import SOURCE`` loads a JSON or YAML OpenAPI 3.0/3.1 document
(from a file, an HTTP(S) URL, or stdin),
previews it, and (unless ``--dry-run`` is given) builds the request
collection and writes it as JSON. Output honours the global ``--json`` and
``--plain`` flags; diagnostics go to stderr.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from specdeck.exceptions import InvalidUsageError, SpecdeckError
from specdeck.models import Collection, ImportPreview
from specdeck.output import OutputFormat, debug, error, get_output, suggest, success, warning


def import_command(
    source: str = typer.Argument(
        ..., help="OpenAPI document (JSON or YAML): file path, URL, or - for stdin."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Collection name (defaults to info.title)."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Base URL for requests (defaults to the first server)."
    ),
    output_path: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the collection to this file."
    ),
    collections_dir: Optional[str] = typer.Option(
        None, "--collections-dir", help="Directory for collections when --output is not set."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Show what would be imported without writing."
    ),
    no_examples: bool = typer.Option(
        False, "--no-examples", help="Emit body skeletons instead of example values."
    ),
) -> None:
    """Import an OpenAPI spec as a request collection.

    Example::

        specdeck import openapi.yaml --dry-run
        specdeck import openapi.json --name "Pet Store" -o pets.json
        specdeck import https://petstore3.swagger.io/api/v3/openapi.json
    """
    try:
        _run_import(
            source,
            name=name,
            base_url=base_url,
            output_path=output_path,
            collections_dir=collections_dir,
            dry_run=dry_run,
            no_examples=no_examples,
        )
    except SpecdeckError as exc:
        error(exc.message)
        details = getattr(exc, "details", None)
        if details:
            debug(details)
        raise typer.Exit(code=exc.exit_code) from None


def _run_import(
    source: str,
    *,
    name: Optional[str],
    base_url: Optional[str],
    output_path: Optional[Path],
    collections_dir: Optional[str],
    dry_run: bool,
    no_examples: bool,
) -> None:
    from specdeck.collection import count_requests, sanitize_filename, save_collection
    from specdeck.config import resolve_import_settings
    from specdeck.importer import OpenAPIImporter
    from specdeck.models import ImportOptions

    if output_path is not None and output_path.is_dir():
        raise InvalidUsageError(f"--output must be a file path, got directory: {output_path}")

    settings = resolve_import_settings(
        cli_base_url=base_url,
        cli_output_dir=collections_dir,
        cli_no_examples=no_examples,
    )
    debug(f"Import settings: {settings.model_dump()}")

    importer = OpenAPIImporter.from_source(source)
    preview = importer.preview()

    if dry_run:
        _show_preview(preview)
        return

    collection = importer.to_collection(
        ImportOptions(
            name=name,
            base_url=settings.base_url,
            include_examples=settings.include_examples,
        )
    )

    target = output_path or (
        Path(settings.collections_dir) / f"{sanitize_filename(collection.name)}.json"
    )
    save_collection(collection, target)

    _show_result(
        collection,
        target,
        count_requests(collection),
        preview.warnings + importer.warnings,
    )


def _show_preview(preview: ImportPreview) -> None:
    """Print the dry-run preview: header fields, folder table, servers, warnings."""
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json(preview.model_dump(mode="json"))
        return

    description = preview.description or ""
    if len(description) > 60:
        description = description[:57] + "..."

    output.print_fields([
        ("Title", preview.title or "-"),
        ("Version", f"OpenAPI {preview.spec_version}"),
        ("Description", description),
        ("Endpoints", str(preview.endpoint_count)),
        ("Folders", str(preview.folder_count)),
        ("Servers", ", ".join(preview.servers)),
    ])

    if preview.folders:
        output.print_table(
            ["Folder", "Requests", "Description"],
            [
                [folder.name, str(folder.request_count), folder.description or ""]
                for folder in preview.folders
            ],
            title="Folders",
        )

    for message in preview.warnings:
        warning(message)
    suggest("Dry run: no files were written. Re-run without --dry-run to save.")


def _show_result(
    collection: Collection,
    target: Path,
    request_count: int,
    warnings: list[str],
) -> None:
    """Print the summary of a saved import."""
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json({
            "success": True,
            "name": collection.name,
            "file": str(target),
            "folders": len(collection.folders),
            "requests": request_count,
            "warnings": warnings,
        })
        return

    success(f"Imported collection '{collection.name}'")
    output.print_fields([
        ("Name", collection.name),
        ("File", str(target)),
        ("Folders", str(len(collection.folders))),
        ("Requests", str(request_count)),
    ])
    for message in warnings:
        warning(message)
