"""CLI interface for the InkPact dashboard."""

import json
import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from inkpact.config import DashboardConfig, load_config, merge_cli_overrides
from inkpact.content.editor import CollectionEditor
from inkpact.content.images import ImageGateway
from inkpact.content.markdown import MarkdownGateway
from inkpact.content.models import CollectionKind, Record
from inkpact.content.normalizer import is_pdf_book
from inkpact.content.store import CollectionStore
from inkpact.errors import InkpactError

app = typer.Typer(
    name="inkpact",
    help="Manage the blog, book and profile collections behind the InkPact dashboard.",
)
markdown_app = typer.Typer(help="Read and write blog markdown files.")
images_app = typer.Typer(help="List and delete uploaded images.")
app.add_typer(markdown_app, name="markdown")
app.add_typer(images_app, name="images")

console = Console()
_stderr_console = Console(stderr=True)

# Columns shown by `inkpact list`, per collection.
_COLUMNS: dict[CollectionKind, list[str]] = {
    CollectionKind.BLOG: ["id", "blogName", "writers", "date", "categories", "readTime"],
    CollectionKind.BOOK: ["title", "author", "genre", "pages", "date"],
    CollectionKind.PROFILE: ["name", "role", "term"],
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from inkpact import __version__

        console.print(f"inkpact {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .inkpact.toml file."),
    ] = None,
    data_dir: Annotated[
        Optional[Path],
        typer.Option("--data-dir", "-d", help="Directory holding the collection files."),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)."),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """InkPact dashboard - file-backed content collections."""
    config = merge_cli_overrides(load_config(config_path), data_dir=data_dir, log_level=log_level)
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


def _config(ctx: typer.Context) -> DashboardConfig:
    return ctx.obj if isinstance(ctx.obj, DashboardConfig) else load_config()


def _store(config: DashboardConfig) -> CollectionStore:
    return CollectionStore(config.storage.path, atomic_writes=config.storage.atomic_writes)


def _kind(value: str) -> CollectionKind:
    try:
        return CollectionKind.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _parse_fields(pairs: list[str] | None) -> Record:
    """Turn repeated ``key=value`` options into a form submission."""
    fields: Record = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got {pair!r}")
        fields[key.strip()] = value
    return fields


def _fail(exc: InkpactError) -> NoReturn:
    console.print(f"[red]Error:[/red] {exc.message}")
    raise typer.Exit(1)


def _cell(value: object) -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return "" if value is None else str(value)


@app.command()
def init(ctx: typer.Context) -> None:
    """Create the data directory layout."""
    config = _config(ctx)
    data_dir = config.storage.path
    (data_dir / "blogs").mkdir(parents=True, exist_ok=True)
    ImageGateway(data_dir).ensure_directories()
    console.print(f"[green]Initialized data directory:[/green] {data_dir}")


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[Optional[str], typer.Option("--host", help="Interface to bind.")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port to listen on.")] = None,
    atomic_writes: Annotated[
        Optional[bool],
        typer.Option(
            "--atomic-writes/--in-place-writes",
            help="Write collections via temp file + rename instead of overwriting in place.",
        ),
    ] = None,
) -> None:
    """Run the dashboard HTTP server."""
    import uvicorn

    from inkpact.server import create_app

    config = merge_cli_overrides(_config(ctx), host=host, port=port, atomic_writes=atomic_writes)
    console.print(
        f"[bold green]InkPact Dashboard Server[/bold green] running at "
        f"http://{config.server.host}:{config.server.port}"
    )
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
    )


@app.command(name="list")
def list_cmd(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="blogs, books or profiles.")],
    as_json: Annotated[bool, typer.Option("--json", help="Print canonical records as JSON.")] = False,
) -> None:
    """Show a collection with the index used by edit and delete."""
    kind = _kind(collection)
    loaded = _store(_config(ctx)).load(kind)
    if as_json:
        print(json.dumps(loaded.records, indent=2, ensure_ascii=False))
        return
    if loaded.warning:
        _stderr_console.print(f"[yellow]Warning:[/yellow] {loaded.warning}")
    if not loaded.records:
        console.print(f"[yellow]No {kind.plural} found.[/yellow]")
        return

    table = Table(title=kind.plural.capitalize())
    table.add_column("#", justify="right")
    for column in _COLUMNS[kind]:
        table.add_column(column)
    if kind is CollectionKind.BOOK:
        table.add_column("format")
    for index, record in enumerate(loaded.records):
        row = [str(index)] + [_cell(record.get(c)) for c in _COLUMNS[kind]]
        if kind is CollectionKind.BOOK:
            row.append("PDF" if is_pdf_book(record) else "Book")
        table.add_row(*row)
    console.print(table)


@app.command()
def add(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="blogs, books or profiles.")],
    field: Annotated[
        Optional[list[str]],
        typer.Option("--field", "-f", help="Field value as key=value (repeatable)."),
    ] = None,
) -> None:
    """Create a record from the collection's template and save the collection."""
    config = _config(ctx)
    kind = _kind(collection)
    editor = CollectionEditor(_store(config), kind, MarkdownGateway(config.storage.path))
    try:
        result = editor.create(_parse_fields(field))
    except InkpactError as exc:
        _fail(exc)
    console.print(f"[green]{result.message}[/green] ({result.count} {kind.plural})")


@app.command()
def edit(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="blogs, books or profiles.")],
    index: Annotated[int, typer.Argument(help="Position shown by `inkpact list`.")],
    field: Annotated[
        Optional[list[str]],
        typer.Option("--field", "-f", help="Field value as key=value (repeatable)."),
    ] = None,
) -> None:
    """Merge submitted fields into one record and save the collection."""
    kind = _kind(collection)
    editor = CollectionEditor(_store(_config(ctx)), kind)
    try:
        result = editor.edit(index, _parse_fields(field))
    except InkpactError as exc:
        _fail(exc)
    console.print(f"[green]{result.message}[/green] ({result.count} {kind.plural})")


@app.command()
def delete(
    ctx: typer.Context,
    collection: Annotated[str, typer.Argument(help="blogs, books or profiles.")],
    index: Annotated[int, typer.Argument(help="Position shown by `inkpact list`.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation.")] = False,
) -> None:
    """Remove one record and save the collection."""
    kind = _kind(collection)
    editor = CollectionEditor(_store(_config(ctx)), kind)
    if not yes:
        typer.confirm(f"Are you sure you want to delete this {kind.value}?", abort=True)
    try:
        result = editor.delete(index)
    except InkpactError as exc:
        _fail(exc)
    console.print(f"[green]Deleted.[/green] {result.count} {kind.plural} remaining")


@markdown_app.command(name="show")
def markdown_show(
    ctx: typer.Context,
    filename: Annotated[str, typer.Argument(help="Markdown file name, e.g. my-post.md.")],
) -> None:
    """Print a markdown file."""
    gateway = MarkdownGateway(_config(ctx).storage.path)
    try:
        doc = gateway.read(filename)
    except InkpactError as exc:
        _fail(exc)
    print(doc.content)


@markdown_app.command(name="save")
def markdown_save(
    ctx: typer.Context,
    filename: Annotated[str, typer.Argument(help="Target name; a blogs/ segment selects data/blogs/.")],
    source: Annotated[
        Path,
        typer.Option("--from", help="Local file whose content is saved.", exists=True, dir_okay=False),
    ],
) -> None:
    """Save a markdown file into the data directory."""
    gateway = MarkdownGateway(_config(ctx).storage.path)
    try:
        doc = gateway.write(filename, source.read_text(encoding="utf-8"))
    except InkpactError as exc:
        _fail(exc)
    console.print(f"[green]Saved[/green] {doc.path}")


@images_app.command(name="list")
def images_list(
    ctx: typer.Context,
    category: Annotated[str, typer.Argument(help="blogs, books or profiles.")],
) -> None:
    """List images in a category."""
    names = ImageGateway(_config(ctx).storage.path).list_images(category)
    if not names:
        console.print("[yellow]No images found.[/yellow]")
        return
    for name in names:
        console.print(name)


@images_app.command(name="delete")
def images_delete(
    ctx: typer.Context,
    category: Annotated[str, typer.Argument(help="blogs, books or profiles.")],
    filename: Annotated[str, typer.Argument(help="Image file name.")],
) -> None:
    """Delete one image."""
    try:
        ImageGateway(_config(ctx).storage.path).delete(category, filename)
    except InkpactError as exc:
        _fail(exc)
    console.print(f"[green]Deleted[/green] {filename}")


if __name__ == "__main__":
    app()
