"""CLI entrypoint: Typer app and command implementations"""

import logging
from datetime import date
from pathlib import Path
from typing import Annotated, List, Optional

import typer

from frontpost.checks import check_collection
from frontpost.config import Settings, load_config
from frontpost.exceptions import FrontpostError
from frontpost.frontmatter import TOML_MARKER, YAML_MARKER
from frontpost.posts import PostCollection, new_post

app = typer.Typer(name="frontpost", no_args_is_help=True, help="Check and manage blog post files")

FORMAT_MARKERS = {"toml": TOML_MARKER, "markdown": YAML_MARKER}


def _fail(msg: str, cause: Exception | None = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(verbose: bool = False, overrides: dict | None = None) -> Settings:
    """Load config and configure logging, with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    return settings


VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")]


@app.command(name="check")
def check_cmd(
    path: Annotated[Optional[Path], typer.Argument(help="Post file or content directory")] = None,
    verbose: VerboseOpt = False,
    ):
    """Check front matter and bodies; exit 1 if any issue is found."""
    settings = _settings(verbose)
    target = path or Path(settings.content_dir)
    if not target.exists():
        _fail(f"{target} does not exist")
    try:
        issues = check_collection(target, date_format=settings.filename_date_format)
    except (OSError, FrontpostError, ValueError) as e:
        _fail(f"Could not read {target}", e)
    for issue in issues:
        typer.echo(str(issue))
    if issues:
        typer.echo(f"{len(issues)} issue(s) found")
        raise typer.Exit(1)
    typer.echo("All posts OK")


@app.command(name="list")
def list_cmd(
    path: Annotated[Optional[Path], typer.Argument(help="Content directory")] = None,
    reverse: Annotated[bool, typer.Option("--reverse", "-r", help="Newest first")] = False,
    verbose: VerboseOpt = False,
    ):
    """List posts ordered by date."""
    settings = _settings(verbose)
    root = path or Path(settings.content_dir)
    if not root.is_dir():
        _fail(f"{root} is not a directory")
    try:
        posts = PostCollection(root, format=settings.format, date_format=settings.filename_date_format)
        ordered = posts.order_by("-date" if reverse else "date").to_list()
    except (FrontpostError, ValueError) as e:
        _fail("Could not load posts", e)
    if not ordered:
        typer.echo("No posts found.")
        raise typer.Exit(1)
    for post in ordered:
        typer.echo(f"{post.date.isoformat()}  {post.title}  {posts.path_for(post).name}")


@app.command(name="new")
def new_cmd(
    title: Annotated[List[str], typer.Argument(help="Post title")],
    on: Annotated[Optional[str], typer.Option("--date", help="Post date, YYYY-MM-DD (default today)")] = None,
    root: Annotated[Optional[Path], typer.Option("--content-dir", help="Content directory")] = None,
    verbose: VerboseOpt = False,
    ):
    """Create a new post stub and print its path."""
    settings = _settings(verbose, overrides={"content_dir": str(root) if root else None})
    try:
        post_date = date.fromisoformat(on) if on else None
    except ValueError as e:
        _fail(f"Invalid --date '{on}'", e)
    try:
        created = new_post(
            settings.content_dir,
            " ".join(title),
            post_date,
            date_format=settings.filename_date_format,
            marker=FORMAT_MARKERS[settings.format],
        )
    except (FrontpostError, ValueError) as e:
        _fail("Could not create post", e)
    typer.echo(str(created))
