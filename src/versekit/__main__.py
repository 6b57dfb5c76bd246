"""CLI entry point for versekit."""

from __future__ import annotations

import json
import sys
from dataclasses import replace
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from versekit import __version__
from versekit.config import Settings, configure_logging
from versekit.engine.ranges import BookGroup
from versekit.errors import VerseKitError
from versekit.library import VerseKit
from versekit.refs import Ref, ref_end, ref_start, to_dicts
from versekit.text.printer import FORMAT_PRESETS

console = Console()


def _kit(ctx: click.Context) -> VerseKit:
    return ctx.obj["kit"]


def _as_json(ctx: click.Context) -> bool:
    return ctx.obj["json"]


def _parse(kit: VerseKit, text: str, url: bool = False) -> list[Ref]:
    """Parse text, exiting with a readable message on failure."""
    try:
        return kit.parse_url_encoded(text) if url else kit.parse(text)
    except VerseKitError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


def _emit_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _emit_refs(ctx: click.Context, refs: list[Ref], title: str | None = None) -> None:
    """Print refs as JSON or as formatted text."""
    kit = _kit(ctx)
    if _as_json(ctx):
        _emit_json(to_dicts(refs))
        return
    if not refs:
        console.print("[yellow]No verses[/yellow]")
        return
    text = kit.format(refs)
    if title:
        console.print(Panel(text, title=title))
    else:
        console.print(text)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--versification",
    "versification_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML versification file (default: built-in canon, or $VERSEKIT_VERSIFICATION)",
)
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity (default: $VERSEKIT_LOG_LEVEL or WARNING)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    versification_path: str | None,
    as_json: bool,
    log_level: str | None,
):
    """versekit - Bible reference parsing, formatting and set algebra."""
    settings = Settings.from_env()
    configure_logging((log_level or settings.log_level).upper())

    path = versification_path or settings.versification_path
    try:
        kit = (
            VerseKit.from_file(path, format_options=settings.format_options())
            if path
            else VerseKit(format_options=settings.format_options())
        )
    except (VerseKitError, FileNotFoundError) as e:
        console.print(f"[red]Error loading versification: {escape(str(e))}[/red]")
        sys.exit(1)

    ctx.obj = {"kit": kit, "json": as_json, "settings": settings}


# ============================================================================
# Text
# ============================================================================


@cli.command()
@click.argument("reference")
@click.option("--url", is_flag=True, help="Input is a compact token like gen1v2-3")
@click.pass_context
def parse(ctx: click.Context, reference: str, url: bool):
    """Parse a reference and show what it covers.

    Example: versekit parse "Gen 1:1-4; Exo 2"
    """
    kit = _kit(ctx)
    refs = _parse(kit, reference, url=url)

    if _as_json(ctx):
        _emit_json(
            {
                "input": reference,
                "refs": to_dicts(refs),
                "verse_count": kit.count_verses(refs),
            }
        )
        return

    table = Table(title=f"Parsed: {escape(reference)}")
    table.add_column("Start", style="cyan")
    table.add_column("End", style="cyan")
    table.add_column("Verses", justify="right", style="green")
    table.add_column("Formatted")

    for ref in refs:
        table.add_row(
            str(ref_start(ref)),
            str(ref_end(ref)),
            str(kit.count_verses(ref)),
            kit.format(ref),
        )

    console.print(table)


@cli.command(name="format")
@click.argument("reference")
@click.option(
    "--preset",
    type=click.Choice(sorted(FORMAT_PRESETS)),
    default=None,
    help="Named option set",
)
@click.option("--book-id", is_flag=True, help="Use book ids (GEN) instead of names")
@click.option("--separator", default=None, help="Chapter/verse separator (: v .)")
@click.option("--strip", is_flag=True, help="Remove whitespace")
@click.option("--combine", is_flag=True, help="Merge overlapping refs first")
@click.option("--url", is_flag=True, help="Input is a compact token like gen1v2-3")
@click.pass_context
def format_cmd(
    ctx: click.Context,
    reference: str,
    preset: str | None,
    book_id: bool,
    separator: str | None,
    strip: bool,
    combine: bool,
    url: bool,
):
    """Re-format a reference.

    Example: versekit format --preset url "Genesis 1:1-3, 5"
    """
    kit = _kit(ctx)
    refs = _parse(kit, reference, url=url)

    opts = FORMAT_PRESETS[preset] if preset else kit.format_options
    changes: dict[str, Any] = {}
    if book_id:
        changes["use_book_id"] = True
    if separator is not None:
        changes["verse_separator"] = separator
    if strip:
        changes["strip_whitespace"] = True
    if combine:
        changes["combine_ranges"] = True
    opts = replace(opts, **changes)

    try:
        text = kit.format(refs, opts)
    except VerseKitError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    if _as_json(ctx):
        _emit_json({"input": reference, "formatted": text})
    else:
        click.echo(text)


# ============================================================================
# Algebra
# ============================================================================


@cli.command()
@click.argument("reference")
@click.pass_context
def combine(ctx: click.Context, reference: str):
    """Merge overlapping and adjacent references.

    Example: versekit combine "Gen 1:1-5; Gen 1:3-10; Gen 1:11"
    """
    kit = _kit(ctx)
    _emit_refs(ctx, kit.combine(_parse(kit, reference)))


@cli.command()
@click.argument("reference")
@click.option(
    "--by",
    type=click.Choice(["book", "chapter", "verse"]),
    default="chapter",
    help="Split boundary",
)
@click.option("--group", is_flag=True, help="Group the pieces instead of listing them")
@click.pass_context
def split(ctx: click.Context, reference: str, by: str, group: bool):
    """Split references at book, chapter or verse boundaries.

    Example: versekit split --by book "Gen 49 - Lev 2"
    """
    kit = _kit(ctx)
    refs = _parse(kit, reference)

    if group:
        groups = kit.group_by_level(refs, by)  # type: ignore[arg-type]
        if _as_json(ctx):
            _emit_json(
                [
                    {
                        "book": g.book,
                        "chapter": None if isinstance(g, BookGroup) else g.chapter,
                        "references": to_dicts(g.references),
                    }
                    for g in groups
                ]
            )
            return
        table = Table(title=f"Grouped by {by}: {escape(reference)}")
        table.add_column("Group", style="cyan")
        table.add_column("References")
        for g in groups:
            label = g.book if isinstance(g, BookGroup) else f"{g.book} {g.chapter}"
            table.add_row(label, kit.format(g.references))
        console.print(table)
        return

    if by == "book":
        pieces = kit.split_by_book(refs)
    elif by == "chapter":
        pieces = kit.split_by_chapter(refs)
    else:
        pieces = list(kit.split_by_verse(refs))

    if _as_json(ctx):
        _emit_json(to_dicts(pieces))
        return
    for piece in pieces:
        console.print(kit.format(piece))


@cli.command()
@click.argument("reference")
@click.pass_context
def count(ctx: click.Context, reference: str):
    """Count the verses a reference covers."""
    kit = _kit(ctx)
    refs = _parse(kit, reference)
    n = kit.count_verses(kit.combine(refs))
    if _as_json(ctx):
        _emit_json({"input": reference, "verse_count": n})
    else:
        console.print(f"[bold]{n}[/bold] verses")


@cli.command()
@click.argument("a")
@click.argument("b")
@click.pass_context
def intersect(ctx: click.Context, a: str, b: str):
    """Verses present in both A and B."""
    kit = _kit(ctx)
    _emit_refs(ctx, kit.intersection(_parse(kit, a), _parse(kit, b)))


@cli.command()
@click.argument("a")
@click.argument("b")
@click.pass_context
def union(ctx: click.Context, a: str, b: str):
    """Verses present in A or B."""
    kit = _kit(ctx)
    _emit_refs(ctx, kit.union(_parse(kit, a), _parse(kit, b)))


@cli.command()
@click.argument("a")
@click.argument("b")
@click.pass_context
def difference(ctx: click.Context, a: str, b: str):
    """Verses of A that are not in B."""
    kit = _kit(ctx)
    _emit_refs(ctx, kit.difference(_parse(kit, a), _parse(kit, b)))


@cli.command()
@click.argument("outer")
@click.argument("inner")
@click.pass_context
def contains(ctx: click.Context, outer: str, inner: str):
    """Check whether OUTER covers every verse of INNER.

    Exits with status 1 when it does not.
    """
    kit = _kit(ctx)
    result = kit.contains(_parse(kit, outer), _parse(kit, inner))
    if _as_json(ctx):
        _emit_json({"outer": outer, "inner": inner, "contains": result})
    elif result:
        console.print(f"[green]✓ {escape(outer)} contains {escape(inner)}[/green]")
    else:
        console.print(f"[yellow]✗ {escape(outer)} does not contain {escape(inner)}[/yellow]")
    if not result:
        sys.exit(1)


# ============================================================================
# Validation
# ============================================================================


@cli.command()
@click.argument("reference")
@click.option("--no-warnings", is_flag=True, help="Only report errors")
@click.option("--url", is_flag=True, help="Input is a compact token like gen51v1")
@click.pass_context
def validate(ctx: click.Context, reference: str, no_warnings: bool, url: bool):
    """Check a reference against the versification.

    Text references are bounds checked while parsing; compact tokens are
    not, so "gen51v1" parses with --url and is reported here. Exits with
    status 1 if any error is found.
    """
    kit = _kit(ctx)
    refs = _parse(kit, reference, url=url)
    findings = kit.validate(refs, include_warnings=not no_warnings)
    errors = [f for f in findings if not f.is_warning]

    if _as_json(ctx):
        _emit_json(
            {
                "input": reference,
                "valid": not errors,
                "findings": [f.to_dict() for f in findings],
            }
        )
    elif not findings:
        console.print(f"[green]✓ {escape(reference)} is valid[/green]")
    else:
        table = Table(title=f"Validation: {escape(reference)}")
        table.add_column("Severity")
        table.add_column("Kind", style="cyan")
        table.add_column("Reference")
        table.add_column("Message")
        for f in findings:
            severity = (
                "[yellow]warning[/yellow]" if f.is_warning else "[red]error[/red]"
            )
            table.add_row(severity, f.kind.value, str(f.ref), f.message)
        console.print(table)

    if errors:
        sys.exit(1)


@cli.command()
@click.argument("reference")
@click.option("--url", is_flag=True, help="Input is a compact token like gen51v1")
@click.pass_context
def repair(ctx: click.Context, reference: str, url: bool):
    """Repair out of range numbers and backwards ranges.

    Example: versekit repair --url gen51v1_gen3v5-2
    """
    kit = _kit(ctx)
    refs = _parse(kit, reference, url=url)

    repaired: list[Ref] = []
    for i in range(len(refs)):
        try:
            kit.repair_in_place(refs, i)
        except VerseKitError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            sys.exit(1)
        repaired.append(refs[i])

    _emit_refs(ctx, repaired)


# ============================================================================
# Versification
# ============================================================================


@cli.command()
@click.option("--sequence", "-s", default=None, help="Only books of a sequence")
@click.pass_context
def books(ctx: click.Context, sequence: str | None):
    """List the books of the versification.

    Example: versekit books -s torah
    """
    kit = _kit(ctx)

    metas = list(kit.books)
    if sequence:
        sequences = kit.sequences()
        if sequence not in sequences:
            console.print(
                f"[red]Unknown sequence: {sequence}. "
                f"Available: {', '.join(sorted(sequences))}[/red]"
            )
            sys.exit(1)
        metas = [m for m in metas if m.id in sequences[sequence]]

    if _as_json(ctx):
        _emit_json(
            [
                {
                    "id": m.id,
                    "osis_id": m.osis_id,
                    "name": m.name,
                    "aliases": list(m.aliases),
                    "chapters": m.chapter_count,
                    "verses": m.verse_count,
                }
                for m in metas
            ]
        )
        return

    table = Table(title=f"Books ({kit.versification.name or 'custom'})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Chapters", justify="right")
    table.add_column("Verses", justify="right", style="green")
    for m in metas:
        table.add_row(m.id, m.name, str(m.chapter_count), str(m.verse_count))
    console.print(table)


@cli.command()
@click.argument("reference")
@click.option(
    "--to",
    "direction",
    type=click.Choice(["next-chapter", "previous-chapter", "next-book", "previous-book"]),
    default="next-chapter",
    help="Where to go",
)
@click.option("--constrain-book", is_flag=True, help="Do not leave the book")
@click.pass_context
def navigate(ctx: click.Context, reference: str, direction: str, constrain_book: bool):
    """Find the chapter or book next to a reference.

    Example: versekit navigate --to previous-book "Micah 1:1"
    """
    kit = _kit(ctx)
    refs = _parse(kit, reference)
    ref = refs[-1] if direction.startswith("next") else refs[0]

    try:
        if direction == "next-chapter":
            found = kit.next_chapter(ref, constrain_book)
        elif direction == "previous-chapter":
            found = kit.previous_chapter(ref, constrain_book)
        elif direction == "next-book":
            found = kit.next_book(ref)
        else:
            found = kit.previous_book(ref)
    except VerseKitError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    if found is None:
        if _as_json(ctx):
            _emit_json(None)
        else:
            console.print(f"[yellow]Nothing at {direction} of {escape(reference)}[/yellow]")
        sys.exit(1)

    _emit_refs(ctx, [found], title=direction)


if __name__ == "__main__":
    cli()
