"""Command-line interface for webnote.

Works on saved HTML pages: highlight a passage, restore stored highlights
into a page, and list or delete the highlights stored for a URL.

Usage:
    webnote highlight PAGE --url URL --text TEXT [--occurrence N] [--color C]
    webnote restore PAGE --url URL [--output OUT]
    webnote list --url URL
    webnote delete --url URL ID
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from webnote.anchoring.text_index import build_text_index, find_occurrence
from webnote.config import get_settings
from webnote.controller import CreateFailure, HighlightController
from webnote.dom.html import parse_html, serialize
from webnote.store.factory import get_store
from webnote.store.keys import document_key
from webnote.store.models import StoreError

if TYPE_CHECKING:
    from webnote.dom.tree import Document
    from webnote.store.protocol import AnnotationStoreProtocol

console = Console()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webnote",
        description="Persistent highlights for saved HTML pages.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # highlight
    hl_p = sub.add_parser("highlight", help="Highlight a passage and store it")
    hl_p.add_argument("page", type=Path, help="Saved HTML page")
    hl_p.add_argument("--url", required=True, help="URL the page was saved from")
    hl_p.add_argument("--text", required=True, help="Exact text to highlight")
    hl_p.add_argument(
        "--occurrence",
        type=int,
        default=1,
        help="Which occurrence of the text to use (default: 1)",
    )
    hl_p.add_argument("--color", default=None, help="Highlight colour")
    hl_p.add_argument("--note", default="", help="Note to attach")
    hl_p.add_argument(
        "--output", type=Path, default=None, help="Write the marked-up page here"
    )

    # restore
    restore_p = sub.add_parser("restore", help="Re-apply stored highlights")
    restore_p.add_argument("page", type=Path, help="Saved HTML page")
    restore_p.add_argument("--url", required=True, help="URL the page was saved from")
    restore_p.add_argument(
        "--output", type=Path, default=None, help="Write the marked-up page here"
    )

    # list
    list_p = sub.add_parser("list", help="List stored highlights for a URL")
    list_p.add_argument("--url", required=True, help="Page URL")

    # delete
    delete_p = sub.add_parser("delete", help="Delete a stored highlight")
    delete_p.add_argument("--url", required=True, help="Page URL")
    delete_p.add_argument("highlight_id", help="Highlight id (hl_...)")

    return parser


def _require_key(url: str, con: Console) -> str:
    """Derive the document key for *url* or exit with error."""
    try:
        return document_key(url)
    except ValueError as exc:
        con.print(f"[red]Error:[/] {escape(str(exc))}")
        sys.exit(1)


def _load_page(path: Path, con: Console) -> Document:
    """Parse a saved page or exit with error."""
    try:
        markup = path.read_text(encoding="utf-8")
    except OSError as exc:
        con.print(f"[red]Error:[/] cannot read {path}: {exc.strerror}")
        sys.exit(1)
    return parse_html(markup)


def _page_title(document: Document) -> str:
    for element in document.iter_elements():
        if element.tag == "title":
            return element.text_content.strip()
    return ""


def _write_output(document: Document, output: Path | None, con: Console) -> None:
    if output is None:
        return
    output.write_text(serialize(document), encoding="utf-8")
    con.print(f"Wrote [cyan]{output}[/]")


async def _cmd_highlight(
    args: argparse.Namespace,
    store: AnnotationStoreProtocol,
    *,
    console: Console | None = None,
) -> None:
    """Highlight one occurrence of ``--text`` and store it."""
    con = console or globals()["console"]
    key = _require_key(args.url, con)
    document = _load_page(args.page, con)
    controller = HighlightController(
        document, store, key, url=args.url, title=_page_title(document)
    )
    await controller.restore_all()

    index = build_text_index(document.body or document)
    selection = find_occurrence(index, args.text, args.occurrence)
    if selection is None:
        con.print(
            f"[red]Error:[/] occurrence {args.occurrence} of "
            f"{escape(repr(args.text))} not found"
        )
        sys.exit(1)

    result = await controller.create_at(selection, args.color, note=args.note)
    if isinstance(result, CreateFailure):
        con.print(f"[red]Error:[/] highlight not created ({result.reason})")
        sys.exit(1)
    con.print(
        f"[green]Created[/] {result.id} ({result.color}): "
        f"{escape(repr(result.text))}"
    )
    _write_output(document, args.output, con)


async def _cmd_restore(
    args: argparse.Namespace,
    store: AnnotationStoreProtocol,
    *,
    console: Console | None = None,
) -> None:
    """Re-attach stored highlights to a page and report the counts."""
    con = console or globals()["console"]
    key = _require_key(args.url, con)
    document = _load_page(args.page, con)
    controller = HighlightController(document, store, key, url=args.url)
    summary = await controller.restore_all()

    style = "yellow" if summary.failed_count else "green"
    con.print(
        f"[{style}]Restored {summary.restored_count}, "
        f"failed {summary.failed_count}[/]"
    )
    _write_output(document, args.output, con)


async def _cmd_list(
    args: argparse.Namespace,
    store: AnnotationStoreProtocol,
    *,
    console: Console | None = None,
) -> None:
    """List stored highlights as a Rich table."""
    from rich.table import Table

    con = console or globals()["console"]
    key = _require_key(args.url, con)
    records = await store.load_records(key)

    if not records:
        con.print("[yellow]No highlights stored for this page.[/]")
        return

    table = Table(title=args.url)
    table.add_column("Id", style="cyan")
    table.add_column("Colour")
    table.add_column("Text")
    table.add_column("Note")
    table.add_column("Updated")

    for record in sorted(records, key=lambda r: r.created_at):
        updated = datetime.fromtimestamp(record.updated_at / 1000, tz=UTC)
        table.add_row(
            record.id,
            record.color,
            escape(record.text),
            escape(record.note) if record.note else "[dim]-[/]",
            updated.strftime("%Y-%m-%d %H:%M"),
        )

    con.print(table)


async def _cmd_delete(
    args: argparse.Namespace,
    store: AnnotationStoreProtocol,
    *,
    console: Console | None = None,
) -> None:
    """Delete one stored highlight."""
    con = console or globals()["console"]
    key = _require_key(args.url, con)
    result = await store.delete_record(key, args.highlight_id)
    if not result.success:
        con.print(
            f"[red]Error:[/] could not delete {args.highlight_id} ({result.error})"
        )
        sys.exit(1)
    con.print(f"[green]Deleted[/] {args.highlight_id}")


_COMMANDS = {
    "highlight": _cmd_highlight,
    "restore": _cmd_restore,
    "list": _cmd_list,
    "delete": _cmd_delete,
}


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``webnote`` console script."""
    from webnote import setup_logging

    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    settings = get_settings()
    setup_logging(settings.app.log_dir, verbose=args.verbose)
    store = get_store()

    try:
        asyncio.run(_COMMANDS[args.command](args, store))
    except StoreError as exc:
        console.print(f"[red]Error:[/] {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
