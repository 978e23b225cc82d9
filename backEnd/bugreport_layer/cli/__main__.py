"""
CLI for the bugreport layer.

Commands:
    ingest           - Ingest a bugreport bundle into a project directory
    info             - Show a project's artifacts and segments
    search           - Search a project's bugreports for a literal or pattern
    search-keywords  - Search using one or more keyword categories
    keywords ...     - Manage keyword categories
    projects ...     - List, rename or delete recent projects
    prefs ...        - Show or change preferences
"""

import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table as RichTable

from ..config import AppContext, get_settings
from ..src.errors import BugreportLayerError
from ..src.schemas.search import SearchQuery, SearchResult

app = typer.Typer(
    name="bugreport-layer",
    help="Bugreport bundle ingestion and search",
)
keywords_app = typer.Typer(help="Manage keyword categories")
projects_app = typer.Typer(help="Manage recent projects")
prefs_app = typer.Typer(help="Show or change preferences")
app.add_typer(keywords_app, name="keywords")
app.add_typer(projects_app, name="projects")
app.add_typer(prefs_app, name="prefs")

console = Console()


def _setup_logging(verbose: bool) -> None:
    """Setup logging based on verbosity."""
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _context() -> AppContext:
    return AppContext.from_settings(get_settings())


def _fail(message: str) -> NoReturn:
    rprint(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Bugreport bundle ingestion and search."""
    _setup_logging(verbose)


@app.command()
def ingest(
    archive: Path = typer.Argument(..., help="Path to the bugreport .zip bundle"),
):
    """
    Ingest a bugreport bundle.

    Extracts bugreports and videos (nested archives included) into a
    directory named after the archive, splits bugreports of 10 MiB or more,
    and writes the project manifest.

    Examples:
        bugreport-layer ingest ~/Downloads/bugreport-2024-01-01.zip
    """
    from ..src.ingest import ingest_archive

    ctx = _context()
    try:
        result = ingest_archive(archive, context=ctx)
    except BugreportLayerError as e:
        _fail(f"Ingestion failed: {e}")

    rprint(f"\n[green]✓ Ingested:[/green] {escape(result.manifest.project_name)}")
    rprint(f"  Artifacts: {result.num_artifacts}")
    rprint(f"  Bugreports: {result.num_bugreports}")
    rprint(f"  Videos: {result.num_videos}")
    rprint(f"  Segments: {result.num_segments}")
    rprint(f"  Project dir: {escape(str(result.project_dir))}")
    rprint(f"  Manifest: {escape(str(result.manifest_path))}")


@app.command()
def info(
    manifest_path: Path = typer.Argument(..., help="Project manifest (.json)"),
):
    """
    Show project info and its artifacts.
    """
    from ..src.manifest import open_project

    try:
        manifest, project_dir = open_project(manifest_path)
    except BugreportLayerError as e:
        _fail(str(e))

    rprint(f"\n[bold]Project: {escape(manifest.label)}[/bold]")
    rprint(f"  Name: {escape(manifest.project_name)}")
    rprint(f"  Archive: {escape(manifest.archive_path)}")
    rprint(f"  Created: {manifest.created_at_ms}")
    rprint(f"  Directory: {escape(str(project_dir))}")

    table = RichTable(title="Artifacts")
    table.add_column("File", style="cyan")
    table.add_column("Kind")
    table.add_column("Size", justify="right")
    table.add_column("Segments", justify="right")
    table.add_column("Archive path")

    for record in manifest.artifacts:
        present = (project_dir / record.file_name).exists()
        table.add_row(
            escape(record.file_name) + ("" if present else " [dim](missing)[/dim]"),
            record.kind.value,
            f"{record.file_size:,}",
            str(len(record.segments)) if record.segments else "-",
            escape(record.original_path),
        )

    console.print(table)


def _print_results(results: List[SearchResult], query_text: str) -> None:
    if not results:
        rprint("[yellow]No results found[/yellow]")
        return

    rprint(f"\n[green]Found {len(results)} matches for:[/green] [cyan]{escape(query_text)}[/cyan]\n")
    current = None
    for result in results:
        source = (result.file_name, result.segment_index)
        if source != current:
            current = source
            label = result.file_name
            if result.segment_index is not None:
                label += f" (segment {result.segment_index})"
            rprint(f"[bold]{escape(label)}[/bold]")
        rprint(f"  {escape(result.format())}")


def _search_project(manifest_path: Path, query: SearchQuery, file_name: Optional[str]) -> None:
    from ..src.manifest import open_project
    from ..src.schemas.artifact import ArtifactKind
    from ..src.search import search_artifact

    try:
        manifest, project_dir = open_project(manifest_path)
    except BugreportLayerError as e:
        _fail(str(e))

    if file_name:
        record = manifest.find_artifact(file_name)
        if record is None:
            _fail(f"Artifact not found: {file_name}")
        records = [record]
    else:
        records = manifest.artifacts_of_kind(ArtifactKind.BUGREPORT)
        if not records:
            _fail("Project has no bugreports to search")

    results: List[SearchResult] = []
    try:
        for record in records:
            results.extend(search_artifact(record, project_dir, query))
    except BugreportLayerError as e:
        _fail(str(e))

    _print_results(results, query.text)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search text or pattern"),
    manifest_path: Path = typer.Option(..., "--manifest", "-m", help="Project manifest (.json)"),
    file_name: Optional[str] = typer.Option(None, "--file", "-f", help="Artifact to search (default: all bugreports)"),
    regex: bool = typer.Option(False, "--regex", "-r", help="Treat query as a regular expression"),
    case_sensitive: bool = typer.Option(False, "--case-sensitive", "-s", help="Match case"),
):
    """
    Search a project's bugreports line by line.

    Line numbers are local to each segment for split bugreports.

    Examples:
        bugreport-layer search "FATAL EXCEPTION" -m bugreport/bugreport.json
        bugreport-layer search "am_(crash|anr)" -m bugreport/bugreport.json --regex
    """
    search_query = SearchQuery(text=query, is_regex=regex, ignore_case=not case_sensitive)
    _search_project(manifest_path, search_query, file_name)


@app.command("search-keywords")
def search_keywords(
    manifest_path: Path = typer.Option(..., "--manifest", "-m", help="Project manifest (.json)"),
    categories: List[str] = typer.Option(..., "--category", "-c", help="Keyword category (repeatable)"),
    file_name: Optional[str] = typer.Option(None, "--file", "-f", help="Artifact to search (default: all bugreports)"),
):
    """
    Search for any keyword of the selected categories.

    Keywords are combined into one pattern without escaping.
    """
    from ..src.search import build_keyword_query

    ctx = _context()
    unknown = [c for c in categories if c not in ctx.keywords.category_names]
    if unknown:
        _fail(f"Unknown categories: {', '.join(unknown)}")

    query = build_keyword_query(ctx.keywords.categories, categories)
    if query is None:
        _fail("Selected categories contain no keywords")

    _search_project(manifest_path, query, file_name)


@keywords_app.command("list")
def keywords_list():
    """List keyword categories."""
    ctx = _context()
    categories = ctx.keywords.categories
    if not categories:
        rprint("[yellow]No keyword categories[/yellow]")
        return

    table = RichTable(title="Keyword categories")
    table.add_column("Category", style="cyan")
    table.add_column("Keywords")
    for name, words in categories.items():
        table.add_row(escape(name), escape(", ".join(words)))
    console.print(table)


@keywords_app.command("add")
def keywords_add(
    category: str = typer.Argument(..., help="Category name"),
    words: Optional[List[str]] = typer.Argument(None, help="Keywords to append"),
):
    """Create a category, or append keywords to an existing one."""
    ctx = _context()
    existing = ctx.keywords.get(category) or []
    ctx.keywords.update_category(category, existing + [w for w in (words or []) if w not in existing])
    rprint(f"[green]✓[/green] {escape(category)}: {len(ctx.keywords.get(category))} keywords")


@keywords_app.command("set")
def keywords_set(
    category: str = typer.Argument(..., help="Category name"),
    words: List[str] = typer.Argument(..., help="Keywords, replacing the current list"),
):
    """Replace a category's keywords."""
    ctx = _context()
    ctx.keywords.update_category(category, words)
    rprint(f"[green]✓[/green] {escape(category)}: {len(words)} keywords")


@keywords_app.command("remove")
def keywords_remove(category: str = typer.Argument(..., help="Category name")):
    """Delete a category."""
    ctx = _context()
    if ctx.keywords.get(category) is None:
        _fail(f"Unknown category: {category}")
    ctx.keywords.remove_category(category)
    rprint(f"[green]✓ Removed[/green] {escape(category)}")


@keywords_app.command("rename")
def keywords_rename(
    old_name: str = typer.Argument(..., help="Current name"),
    new_name: str = typer.Argument(..., help="New name"),
):
    """Rename a category, keeping its position."""
    ctx = _context()
    try:
        ctx.keywords.rename_category(old_name, new_name)
    except KeyError:
        _fail(f"Unknown category: {old_name}")
    except ValueError as e:
        _fail(str(e))
    rprint(f"[green]✓ Renamed[/green] {escape(old_name)} → {escape(new_name)}")


@projects_app.command("list")
def projects_list(
    prune: bool = typer.Option(False, "--prune", help="Drop entries whose manifest is gone"),
):
    """List recent projects, newest first."""
    ctx = _context()
    if prune:
        for dropped in ctx.recent_projects.prune_missing():
            rprint(f"[dim]Dropped missing project {escape(dropped.path)}[/dim]")

    projects = ctx.recent_projects.projects
    if not projects:
        rprint("[yellow]No recent projects[/yellow]")
        return

    table = RichTable(title="Recent projects")
    table.add_column("Name", style="cyan")
    table.add_column("Manifest")
    table.add_column("Opened", justify="right")
    for project in projects:
        table.add_row(escape(project.name), escape(project.path), str(project.timestamp))
    console.print(table)


@projects_app.command("rename")
def projects_rename(
    manifest_path: Path = typer.Argument(..., help="Project manifest (.json)"),
    display_name: str = typer.Argument(..., help="New display name"),
):
    """Set a project's display name."""
    from ..src.manifest import rename_project

    ctx = _context()
    try:
        manifest = rename_project(manifest_path, display_name)
    except (BugreportLayerError, ValueError) as e:
        _fail(f"Could not rename project: {e}")

    ctx.recent_projects.rename(str(Path(manifest_path).resolve()), manifest.label)
    rprint(f"[green]✓ Renamed[/green] {escape(manifest.project_name)} → {escape(manifest.label)}")


@projects_app.command("delete")
def projects_delete(
    manifest_path: Path = typer.Argument(..., help="Project manifest (.json)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Permanently delete a project directory and its manifest."""
    from ..src.manifest import delete_project

    if not yes:
        typer.confirm(f"Permanently delete the project at {manifest_path}?", abort=True)

    ctx = _context()
    try:
        project_dir = delete_project(manifest_path)
    except (BugreportLayerError, OSError) as e:
        _fail(f"Could not delete project: {e}")

    ctx.recent_projects.remove(str(Path(manifest_path).resolve()))
    rprint(f"[green]✓ Deleted[/green] {escape(str(project_dir))}")


@prefs_app.command("show")
def prefs_show():
    """Show preferences."""
    ctx = _context()
    rprint(f"  Config dir: {escape(str(ctx.config_dir))}")
    rprint(f"  Default open directory: {escape(str(ctx.preferences.default_open_directory))}")


@prefs_app.command("set-open-dir")
def prefs_set_open_dir(path: Path = typer.Argument(..., help="Directory")):
    """Set the default directory for opening bundles."""
    ctx = _context()
    ctx.preferences.default_open_directory = str(path.expanduser().resolve())
    rprint(f"[green]✓[/green] Default open directory: {escape(ctx.preferences.default_open_directory)}")


if __name__ == "__main__":
    app()
