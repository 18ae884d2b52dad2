from __future__ import annotations

import locale
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from result import Err

from fastfm.config.defaults import default_config
from fastfm.config.loader import get_config, load_config, sample_config_json
from fastfm.models.entries import DirectoryEntry, SearchResultEntry
from fastfm.scan import list_directory, search_files
from fastfm.services.api import LocalFileManagerApi
from fastfm.services.formatting import format_bytes, format_timestamp
from fastfm.services.fs import DEFAULT_FS
from fastfm.ui.app import FileManagerApp

console = Console()

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool, log_file: str | None, interactive: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    elif interactive:
        # The terminal belongs to the TUI.
        handler = logging.NullHandler()
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, handlers=[handler], force=True)


def _listing_table(title: str, entries: list[DirectoryEntry]) -> Table:
    table = Table(title=title, title_style="bold #81a2be", border_style="#373b41", header_style="bold #c5c8c6")
    table.add_column("Name", style="#c5c8c6", overflow="fold")
    table.add_column("Size", justify="right", style="#b5bd68")
    table.add_column("Modified", style="#969896")
    for entry in entries:
        name = f"[#81a2be]{escape(entry.name)}/[/]" if entry.is_dir else escape(entry.name)
        table.add_row(name, format_bytes(entry.size_bytes), format_timestamp(entry.modified_ts))
    return table


def _search_table(keyword: str, results: list[SearchResultEntry]) -> Table:
    table = Table(
        title=f"Files matching '{escape(keyword)}'",
        title_style="bold #81a2be",
        border_style="#373b41",
        header_style="bold #c5c8c6",
    )
    table.add_column("Path", style="#c5c8c6", overflow="fold")
    table.add_column("Size", justify="right", style="#b5bd68")
    table.add_column("Modified", style="#969896")
    for item in results:
        table.add_row(escape(item.path), format_bytes(item.size_bytes), format_timestamp(item.modified_ts))
    return table


def run(
    path: Annotated[str | None, typer.Argument(help="Directory to open on start.")] = None,
    search: Annotated[
        str | None, typer.Option("--search", "-s", help="Search the home directory and print matches.")
    ] = None,
    list_path: Annotated[str | None, typer.Option("--list", "-l", help="Print a directory listing and exit.")] = None,
    sample_config: Annotated[bool, typer.Option("--sample-config", help="Print sample config JSON.")] = False,
    config_file: Annotated[str | None, typer.Option("--config", "-c", help="Path to key-config.json.")] = None,
    log_file: Annotated[str | None, typer.Option("--log-file", help="Write logs to this file.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    if sample_config:
        console.print(sample_config_json(), markup=False, highlight=False)
        raise typer.Exit(0)

    interactive = search is None and list_path is None
    _configure_logging(verbose, log_file, interactive)
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        LOGGER.debug("Falling back to the C collation order")

    if not interactive:
        config_result = load_config(config_file)
        if isinstance(config_result, Err):
            console.print(f"[yellow]{escape(config_result.unwrap_err())} Using defaults.[/]")
            config = default_config()
        else:
            config = config_result.unwrap()
        ui = config.ui

        if list_path is not None:
            listing = list_directory(
                list_path,
                DEFAULT_FS,
                show_hidden=ui.show_hidden_files,
                sort_by=ui.sort_by,
                order=ui.sort_order,
            )
            if isinstance(listing, Err):
                error = listing.unwrap_err()
                console.print(f"[red]Cannot list {escape(error.path)}: {escape(error.message)}[/]")
                raise typer.Exit(1)
            console.print(_listing_table(escape(list_path), listing.unwrap()))

        if search is not None:
            keyword = search.strip()
            if not keyword:
                console.print("[red]Search keyword must not be empty.[/]")
                raise typer.Exit(1)
            with console.status(f"[bold #8abeb7]Searching for '{escape(keyword)}'...[/]") as status:

                def on_progress(current_dir: str, files: int, directories: int) -> None:
                    status.update(
                        f"[bold #8abeb7]Searching for '{escape(keyword)}'...[/]"
                        + f"  [#b5bd68]{directories:,} dirs, {files:,} files[/]"
                    )

                found = search_files(DEFAULT_FS.home(), keyword, DEFAULT_FS, progress_callback=on_progress)
            if isinstance(found, Err):
                error = found.unwrap_err()
                console.print(f"[red]Search failed for {escape(error.path)}: {escape(error.message)}[/]")
                raise typer.Exit(1)
            results = found.unwrap()
            console.print(_search_table(keyword, results))
            console.print(f"[#969896]{len(results):,} match(es)[/]")
        raise typer.Exit(0)

    config = get_config(config_file)
    api = LocalFileManagerApi(config_path=config_file)
    FileManagerApp(config=config, api=api, initial_path=path).run()


def cli() -> None:
    typer.run(run)


if __name__ == "__main__":
    cli()
