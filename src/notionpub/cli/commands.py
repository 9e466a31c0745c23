"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from notionpub.config import Settings, load_config
from notionpub.core.export import build_body, build_mdx
from notionpub.core.pipeline import Publisher, run_export
from notionpub.errors import UpstreamFetchError
from notionpub.sources.notion_source import NotionSource
from notionpub.sources.source import ContentSource


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    return settings


def make_source(settings: Settings) -> ContentSource:
    """Build the content source for a command; tests replace this."""
    return NotionSource.from_settings(settings)


def _publisher(settings: Settings) -> Publisher:
    try:
        source = make_source(settings)
        return Publisher(source, settings=settings)
    except ValueError as e:
        _fail(str(e))


def list_cmd():
    """List published posts (newest first as returned by the source)."""
    settings = _settings()
    publisher = _publisher(settings)
    try:
        summaries = publisher.list_published()
    except UpstreamFetchError as e:
        _fail("Listing failed", e)
    if not summaries:
        typer.echo("No published posts found.")
        raise typer.Exit(1)
    for s in summaries:
        date = s.published_at.date().isoformat() if s.published_at else "----------"
        typer.echo(f"{date}  {s.slug}  {s.title}")


def show_cmd(
    slug: Annotated[str, typer.Argument(help="Slug of the post to render")],
    ):
    """Render one post (macros expanded) as markdown to stdout."""
    settings = _settings()
    publisher = _publisher(settings)
    try:
        post = publisher.get_by_slug(slug)
    except UpstreamFetchError as e:
        _fail(f"Fetching '{slug}' failed", e)
    if post is None:
        _fail(f"No published post with slug '{slug}'")
    typer.echo(build_mdx(post, build_body(post)))


def export_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    fmt: Annotated[Optional[str], typer.Option("--format", help="md, mdx or html")] = None,
    slugs: Annotated[Optional[list[str]], typer.Option("--slug", help="Export only this slug (repeatable)")] = None,
    ):
    """Write rendered posts + sidecar JSON to output dir."""
    settings = _settings(overrides={"output_dir": out, "output_format": fmt})
    publisher = _publisher(settings)
    output_dir = Path(settings.output_dir)

    try:
        results, missing = run_export(publisher, output_dir, settings.output_format, slugs or None)
    except UpstreamFetchError as e:
        _fail("Export failed", e)

    for slug in missing:
        typer.echo(f"  not found: {slug}", err=True)
    for slug, path in results:
        typer.echo(f"  {slug} -> {path}")
    typer.echo(f"Exported {len(results)} post(s) to {output_dir}/")
    if missing:
        raise typer.Exit(1)


def plugins_cmd():
    """List the macro plugins available to post content."""
    settings = _settings()
    try:
        publisher = Publisher(source=None, settings=settings)
    except ValueError as e:
        _fail(str(e))
    for name in sorted(publisher.list_available_plugins()):
        typer.echo(f"{{{{{name}}}}}")
