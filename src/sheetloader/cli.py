"""Command-line interface for the sheet loader."""

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from sheetloader.config.settings import ProjectConfig, SheetLoaderConfig
    from sheetloader.ingestion.base import MemoryStore
    from sheetloader.ingestion.rows import LoadResult

app = typer.Typer(
    name="sheetloader",
    help="Load Google Sheets into typed records with an inferred schema.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to project configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]
CollectionOption = Annotated[
    str | None,
    typer.Option(
        "--collection",
        "-n",
        help="Single collection to process. Processes all if not specified.",
    ),
]


def _load_project(config: Path) -> "ProjectConfig":
    from sheetloader.config.loader import load_config
    from sheetloader.utils.logging import configure_logging

    try:
        project = load_config(config)
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from e

    configure_logging(project.logging.level, json_output=project.logging.json_output)
    return project


def _selected(
    project: "ProjectConfig", collection: str | None
) -> dict[str, "SheetLoaderConfig"]:
    if collection is None:
        return dict(project.collections)
    try:
        return {collection: project.get(collection)}
    except KeyError as e:
        console.print(f"[red]Error: {e.args[0]}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def url(
    config: ConfigOption,
    collection: CollectionOption = None,
) -> None:
    """Print the gviz URLs of each collection."""
    from sheetloader.ingestion.sheet import build_sheet_url

    project = _load_project(config)

    table = Table(title="Sheet URLs")
    table.add_column("Collection", style="cyan")
    table.add_column("JSON", style="green", overflow="fold")
    table.add_column("HTML", style="dim", overflow="fold")
    for name, loader_config in _selected(project, collection).items():
        table.add_row(
            name,
            build_sheet_url(loader_config),
            build_sheet_url(loader_config, output="html"),
        )
    console.print(table)


@app.command()
def schema(
    config: ConfigOption,
    collection: CollectionOption = None,
) -> None:
    """Fetch each sheet and show the inferred schema."""
    from sheetloader.errors import SheetLoaderError
    from sheetloader.ingestion.sheet import SheetLoader
    from sheetloader.schemas.inference import schema_fields, type_label
    from sheetloader.utils.logging import log_context

    project = _load_project(config)

    for name, loader_config in _selected(project, collection).items():
        loader = SheetLoader(loader_config)
        try:
            with log_context(collection=name):
                model = asyncio.run(loader.schema())
        except SheetLoaderError as e:
            console.print(f"[red]{name}: {e}[/red]")
            raise typer.Exit(code=1) from e

        table = Table(title=f"Schema of '{name}'")
        table.add_column("Field", style="cyan")
        table.add_column("Type", style="green")
        table.add_column("Required")
        for field_name, info in schema_fields(model).items():
            required = "yes" if info.is_required() else "no"
            table.add_row(repr(field_name), type_label(info.annotation), required)
        console.print(table)


@app.command()
def load(
    config: ConfigOption,
    collection: CollectionOption = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Directory for one CSV per collection.",
            file_okay=False,
        ),
    ] = None,
) -> None:
    """Run one load cycle per collection: infer schema, then store every row."""
    from sheetloader.errors import SheetLoaderError
    from sheetloader.utils.logging import log_context

    project = _load_project(config)

    summary = Table(title="Load Results")
    summary.add_column("Collection", style="cyan")
    summary.add_column("Entries", style="green")
    summary.add_column("Fields", style="green")

    for name, loader_config in _selected(project, collection).items():
        try:
            with log_context(collection=name):
                store, result = asyncio.run(
                    _load_collection(name, loader_config, output)
                )
        except SheetLoaderError as e:
            console.print(f"[red]{name}: {e}[/red]")
            raise typer.Exit(code=1) from e
        except Exception as e:
            console.print(f"[red]{name}: export failed: {e}[/red]")
            raise typer.Exit(code=1) from e

        summary.add_row(name, str(len(store)), " | ".join(result.columns))

    console.print(summary)
    if output is not None:
        console.print(f"\n[green]Saved to: {output}[/green]")


async def _load_collection(
    name: str,
    loader_config: "SheetLoaderConfig",
    output: Path | None,
) -> tuple["MemoryStore", "LoadResult"]:
    from sheetloader.ingestion.base import LoaderContext, MemoryStore
    from sheetloader.ingestion.sheet import SheetLoader
    from sheetloader.schemas.frame import entries_to_frame, sheet_frame_schema
    from sheetloader.schemas.inference import schema_parser

    loader = SheetLoader(loader_config)
    model = await loader.schema()
    store = MemoryStore()
    context = LoaderContext(
        collection=name,
        store=store,
        parse_data=schema_parser(model),
    )
    result = await loader.load(context)

    if output is not None:
        table = await loader.table()
        frame_schema = sheet_frame_schema(
            table.cols,
            transform_header=loader_config.transform_header,
            allow_blanks=loader_config.allow_blanks,
        )
        frame = frame_schema.validate(entries_to_frame(store, result.columns))
        output.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output / f"{name}.csv")

    return store, result


if __name__ == "__main__":
    app()
