"""
restadmin CLI.

Browse a REST backend through an admin configuration file:

    restadmin entities --config admin.json
    restadmin list cats --config admin.json --page 2
    restadmin show cats 3 --config admin.json --with-lists
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from restadmin import __version__
from restadmin.errors import RestAdminError
from restadmin.runtime.client import HttpEntityClient
from restadmin.runtime.crud_manager import CrudManager
from restadmin.runtime.logging import setup_logging
from restadmin.runtime.results import EntityView, ReferencedListValues, ResolvedPage
from restadmin.settings import RestAdminSettings
from restadmin.specs.application import ApplicationSpec
from restadmin.specs.entity import (
    EntitySpec,
    ReferencedListSpec,
    ReferenceManySpec,
    ReferenceSpec,
)

app = typer.Typer(
    help="Admin-panel data layer for generic REST APIs",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        envvar="RESTADMIN_CONFIG",
        help="Application config (JSON)",
        exists=True,
        dir_okay=False,
    ),
]
ApiUrlOption = Annotated[
    str | None,
    typer.Option("--api-url", help="REST backend URL (overrides RESTADMIN_API_URL)"),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"restadmin {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log transport requests")
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", callback=_version_callback, is_eager=True, help="Show version"
        ),
    ] = None,
) -> None:
    """Admin-panel data layer for generic REST APIs."""
    try:
        settings = RestAdminSettings.from_env()
    except RestAdminError as e:
        _fail(e)
    level = logging.DEBUG if verbose else settings.log_level_number
    setup_logging(level=level, log_dir=settings.log_dir)


def _load(config: Path, api_url: str | None) -> tuple[ApplicationSpec, RestAdminSettings]:
    try:
        app_spec = ApplicationSpec.from_json_file(config)
        settings = RestAdminSettings.from_env()
    except RestAdminError as e:
        _fail(e)
    url = api_url or settings.api_url or app_spec.base_api_url
    if url:
        settings = settings.model_copy(update={"api_url": url})
    return app_spec, settings


def _fail(error: Exception) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {escape(str(error))}")
    raise typer.Exit(code=1)


def _run(app_spec: ApplicationSpec, settings: RestAdminSettings, operation: Any) -> Any:
    """Run ``operation(crud)`` against a fresh HTTP client."""

    async def runner() -> Any:
        async with HttpEntityClient.from_settings(settings) as client:
            return await operation(CrudManager(app_spec, client, settings))

    try:
        return asyncio.run(runner())
    except RestAdminError as e:
        _fail(e)


def _kind_label(field: Any) -> str:
    if isinstance(field, ReferenceManySpec):
        return f"many -> {field.target_entity}.{field.target_label}"
    if isinstance(field, ReferenceSpec):
        return f"ref -> {field.target_entity}.{field.target_label}"
    if isinstance(field, ReferencedListSpec):
        return f"list <- {field.target_entity}.{field.target_field}"
    return ""


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list | tuple):
        return ", ".join(_cell(v) for v in value)
    return str(value)


def _list_columns(entity: EntitySpec) -> list[str]:
    return [f.name for f in entity.fields if not isinstance(f, ReferencedListSpec)]


@app.command("entities")
def entities(config: ConfigOption) -> None:
    """List configured entities and their relations."""
    app_spec, _ = _load(config, None)

    table = Table(title=f"Entities of {app_spec.name}")
    table.add_column("Entity")
    table.add_column("Label")
    table.add_column("Per page", justify="right")
    table.add_column("Relations")

    for entity in app_spec.entities:
        relations = [
            f"{f.name} ({_kind_label(f)})"
            for f in entity.fields
            if isinstance(f, ReferenceSpec | ReferencedListSpec)
        ]
        table.add_row(
            entity.name,
            entity.display_label,
            str(entity.per_page),
            "\n".join(relations),
        )

    console.print(table)


@app.command("list")
def list_entities(
    entity_name: Annotated[str, typer.Argument(help="Entity to list")],
    config: ConfigOption,
    api_url: ApiUrlOption = None,
    page: Annotated[int, typer.Option("--page", "-p", min=1, help="Page number")] = 1,
    per_page: Annotated[
        int | None, typer.Option("--per-page", "-n", min=1, help="Page size")
    ] = None,
    query: Annotated[str | None, typer.Option("--query", "-q", help="Search")] = None,
    raw_references: Annotated[
        bool,
        typer.Option("--raw-references", help="Keep single reference identifiers"),
    ] = False,
    output_json: JsonOption = False,
) -> None:
    """List one page of an entity with references resolved."""
    app_spec, settings = _load(config, api_url)

    result: ResolvedPage = _run(
        app_spec,
        settings,
        lambda crud: crud.get_all(
            entity_name,
            page=page,
            limit=per_page,
            fill_simple_reference=not raw_references,
            query=query,
        ),
    )

    if output_json:
        console.print_json(
            json.dumps(
                {
                    "entityName": result.entity_name,
                    "currentPage": result.current_page,
                    "perPage": result.per_page,
                    "totalItems": result.total_items,
                    "rawItems": result.raw_items,
                },
                default=str,
            )
        )
        return

    columns = _list_columns(result.entity_config)
    table = Table(title=result.entity_config.display_label)
    for column in columns:
        table.add_column(column)
    for record in result.raw_items:
        table.add_row(*[_cell(record.get(column)) for column in columns])

    console.print(table)
    console.print(
        f"\n[dim]Page {result.current_page}, {len(result.raw_items)} of "
        f"{result.total_items} item(s)[/dim]"
    )


@app.command("show")
def show(
    entity_name: Annotated[str, typer.Argument(help="Entity of the record")],
    entity_id: Annotated[str, typer.Argument(help="Record identifier")],
    config: ConfigOption,
    api_url: ApiUrlOption = None,
    with_lists: Annotated[
        bool, typer.Option("--with-lists", help="Include referenced lists")
    ] = False,
    output_json: JsonOption = False,
) -> None:
    """Show one record."""
    app_spec, settings = _load(config, api_url)

    async def operation(crud: CrudManager) -> tuple[EntityView, ReferencedListValues | None]:
        view = await crud.get_one(entity_name, entity_id)
        lists = await crud.get_referenced_list_values(entity_name, view) if with_lists else None
        return view, lists

    view, lists = _run(app_spec, settings, operation)

    if output_json:
        payload: dict[str, Any] = {
            "entityName": view.entity_name,
            "entityLabel": view.entity_label,
            "entityId": view.entity_id,
            "values": view.values,
        }
        if lists is not None:
            payload["referencedLists"] = lists.items
        console.print_json(json.dumps(payload, default=str))
        return

    table = Table(title=f"{view.entity_label} #{view.entity_id}")
    table.add_column("Field")
    table.add_column("Value")
    for field_value in view.fields:
        if isinstance(field_value.field, ReferencedListSpec):
            continue
        table.add_row(field_value.field.label or field_value.field.name, _cell(field_value.value))
    console.print(table)

    if lists is None:
        return

    for field in app_spec.get_entity(entity_name).get_referenced_lists():
        items = lists.items.get(field.name, [])
        columns = field.target_fields or sorted({k for item in items for k in item})
        sub = Table(title=field.label or field.name)
        for column in columns:
            sub.add_column(column)
        for item in items:
            sub.add_row(*[_cell(item.get(column)) for column in columns])
        console.print(sub)


if __name__ == "__main__":
    app()
