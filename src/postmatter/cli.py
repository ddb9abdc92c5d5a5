"""CLI interface for postmatter."""

import logging
from datetime import date
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from postmatter.checks import check_file, has_errors
from postmatter.config import PostmatterConfig, load_config, merge_cli_overrides
from postmatter.errors import PostError
from postmatter.exporters import create_exporter
from postmatter.models import CodeBlock, PostIssue, Severity
from postmatter.parser import read_post
from postmatter.reader import PostReader
from postmatter.writer import new_post, update_field, write_post

app = typer.Typer(
    name="postmatter",
    help="Parse, check, author and export blog posts with front matter.",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from postmatter import __version__

        console.print(f"postmatter {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .postmatter.toml file."),
    ] = None,
) -> None:
    """postmatter - structured blog post documents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = load_config(config_path)


def _config(ctx: typer.Context) -> PostmatterConfig:
    return ctx.obj if isinstance(ctx.obj, PostmatterConfig) else load_config()


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def _collect_files(paths: list[Path], config: PostmatterConfig) -> list[Path]:
    reader = PostReader(config)
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(reader.discover(path))
        elif path.exists():
            files.append(path)
        else:
            console.print(f"[yellow]Not found:[/yellow] {escape(str(path))}")
    return files


@app.command()
def show(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Post file to display.")],
) -> None:
    """Show a post's metadata and body structure."""
    config = _config(ctx)
    try:
        post = read_post(path, required_fields=config.front_matter.required)
    except PostError as exc:
        _fail(str(exc))
    except (OSError, UnicodeDecodeError) as exc:
        _fail(f"could not read {path}: {exc}")

    table = Table(title=str(path), show_header=True)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in post.front_matter.as_dict().items():
        table.add_row(key, escape(", ".join(value) if isinstance(value, list) else value))
    console.print(table)

    blocks = post.code_blocks
    console.print(
        f"[green]{len(post.segments)} segment(s)[/green], "
        f"{len(blocks)} code block(s)"
        + (f" ({', '.join(post.languages)})" if post.languages else "")
    )
    for block in blocks:
        language = block.language or "[yellow]no language[/yellow]"
        lines = len(block.code.splitlines())
        console.print(f"  - line {block.line}: {language}, {lines} line(s), {block.style}")


def _print_issue(issue: PostIssue) -> None:
    colour = "red" if issue.severity == Severity.ERROR else "yellow"
    label = f"[{colour}]{issue.severity}[/{colour}]"
    console.print(f"{label} {escape(issue.render())}", highlight=False)


@app.command()
def check(
    ctx: typer.Context,
    paths: Annotated[
        Optional[list[Path]],
        typer.Argument(help="Post files or directories (default: posts directory)."),
    ] = None,
    no_language: Annotated[
        bool,
        typer.Option("--allow-untagged", help="Don't require code blocks to declare a language."),
    ] = False,
) -> None:
    """Check posts for malformed metadata and untagged or unclosed code blocks."""
    config = _config(ctx)
    if no_language:
        config = merge_cli_overrides(config, require_language=False)

    files = _collect_files(paths or [config.posts_dir], config)
    if not files:
        console.print("[yellow]No post files found.[/yellow]")
        raise typer.Exit(0)

    all_issues: list[PostIssue] = []
    for file in files:
        issues = check_file(file, config)
        for issue in issues:
            _print_issue(issue)
        all_issues.extend(issues)

    errors = sum(1 for i in all_issues if i.severity == Severity.ERROR)
    warnings = len(all_issues) - errors
    summary = f"Checked {len(files)} file(s): {errors} error(s), {warnings} warning(s)"
    if has_errors(all_issues):
        console.print(f"[red]{summary}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]{summary}[/green]")


@app.command()
def export(
    ctx: typer.Context,
    paths: Annotated[
        Optional[list[Path]],
        typer.Argument(help="Post files or directories (default: posts directory)."),
    ] = None,
    output_format: Annotated[
        Optional[str],
        typer.Option("--format", "-f", help="Export format: markdown or json."),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output directory."),
    ] = None,
) -> None:
    """Export posts for an external renderer, with an index."""
    config = merge_cli_overrides(
        _config(ctx),
        output_format=output_format,
        output_directory=str(output) if output is not None else None,
    )
    try:
        exporter = create_exporter(config.output.format)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from None

    posts = []
    for file in _collect_files(paths or [config.posts_dir], config):
        try:
            posts.append(read_post(file, required_fields=config.front_matter.required))
        except PostError as exc:
            console.print(f"[yellow]Skipping:[/yellow] {escape(str(exc))}")
        except (OSError, UnicodeDecodeError) as exc:
            message = f"could not read {file}: {exc}"
            console.print(f"[yellow]Skipping:[/yellow] {escape(message)}")

    if not posts:
        console.print("[yellow]No posts to export.[/yellow]")
        raise typer.Exit(0)

    output_dir = config.output_dir
    for post in posts:
        target = exporter.output_path(output_dir, post)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(exporter.format_post(post), encoding="utf-8")

    index = exporter.index_path(output_dir)
    index.parent.mkdir(parents=True, exist_ok=True)
    index.write_text(exporter.format_index(posts), encoding="utf-8")

    console.print(f"[green]Exported {len(posts)} post(s)[/green] to {output_dir}")


@app.command()
def new(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Post title.")],
    category: Annotated[str, typer.Option("--category", help="Post category.")] = "",
    keyword: Annotated[
        Optional[list[str]],
        typer.Option("--keyword", "-k", help="Keyword (repeatable)."),
    ] = None,
    comments: Annotated[
        Optional[bool],
        typer.Option("--comments/--no-comments", help="Enable comments."),
    ] = None,
    layout: Annotated[Optional[str], typer.Option("--layout", help="Layout name.")] = None,
    post_date: Annotated[
        Optional[str],
        typer.Option("--date", help="Post date (YYYY-MM-DD, default: today)."),
    ] = None,
    directory: Annotated[
        Optional[Path],
        typer.Option("--dir", "-d", help="Posts directory."),
    ] = None,
) -> None:
    """Create a new post with standard front matter."""
    config = merge_cli_overrides(
        _config(ctx),
        posts_directory=str(directory) if directory is not None else None,
        default_layout=layout,
    )

    when = date.today()
    if post_date:
        try:
            when = date.fromisoformat(post_date)
        except ValueError:
            console.print(f"[red]Error:[/red] Invalid date format: {post_date}")
            console.print("Use YYYY-MM-DD format (e.g., 2015-06-20)")
            raise typer.Exit(1) from None

    try:
        post = new_post(
            title,
            category=category,
            keywords=keyword or [],
            comments=config.front_matter.default_comments if comments is None else comments,
            layout=config.front_matter.default_layout,
            date=when,
        )
        path = write_post(post, config.posts_dir)
    except PostError as exc:
        _fail(str(exc))

    console.print(f"[green]Created[/green] {path}")


@app.command(name="set")
def set_field(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Post file to edit.")],
    key: Annotated[str, typer.Argument(help="Front-matter key.")],
    value: Annotated[str, typer.Argument(help="New value (empty removes the key).")],
) -> None:
    """Set one front-matter field of a post in place."""
    config = _config(ctx)
    try:
        post = read_post(path, required_fields=config.front_matter.required)
        updated = update_field(post, key, value)
        write_post(updated, path.parent, overwrite=True)
    except PostError as exc:
        _fail(str(exc))
    except (OSError, UnicodeDecodeError) as exc:
        _fail(f"could not update {path}: {exc}")

    console.print(f"[green]Updated[/green] {key} in {path}")


@app.command(name="list")
def list_posts(
    ctx: typer.Context,
    directory: Annotated[
        Optional[Path],
        typer.Argument(help="Posts directory (default: configured posts directory)."),
    ] = None,
    category: Annotated[
        Optional[str],
        typer.Option("--category", help="Only posts in this category."),
    ] = None,
) -> None:
    """List posts with their date, category and code languages."""
    config = _config(ctx)
    reader = PostReader(config)
    posts_dir = directory or config.posts_dir
    posts = reader.read_category(posts_dir, category) if category else reader.read_all(posts_dir)

    if not posts:
        console.print("[yellow]No posts found.[/yellow]")
        console.print(f"Searched in: {posts_dir}")
        raise typer.Exit(0)

    table = Table(show_header=True)
    table.add_column("Date")
    table.add_column("Title", style="bold")
    table.add_column("Category")
    table.add_column("Code")
    for post in posts:
        languages = ", ".join(post.languages)
        untagged = sum(1 for b in post.segments if isinstance(b, CodeBlock) and not b.language)
        if untagged:
            languages = f"{languages} (+{untagged} untagged)".strip()
        table.add_row(
            post.date.isoformat() if post.date else "-",
            escape(post.title),
            escape(post.category) or "-",
            languages or "-",
        )
    console.print(table)
