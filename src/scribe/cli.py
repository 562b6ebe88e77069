"""Command-line interface for scribe.

Open a local file, keep a reference to it across runs, and write text back
to it through the bounded-wait writer.

CONCEPTS:
---------
- ENTRY:    A handle to one file. Commands never write through raw paths.

- RETAINED: The last opened entry is remembered in ~/.scribe/storage.json so
            later commands can use it without naming the file again.

- WRITE:    Truncate, wait for the file to become writable, then write.
            A write that stays stuck longer than --max-wait-ms is aborted.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import NoReturn

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from scribe import __version__
from scribe.config import settings
from scribe.core.session import EditSession, LaunchData
from scribe.core.watchdog import WatchdogConfig, WriteOutcome, WriteWatchdog
from scribe.entries import ConsolePicker, EntryPicker, EntryStore, LocalStorage, PathPicker
from scribe.errors import ScribeError

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    fmt = "%(name)s: %(message)s" if verbose else "%(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        handlers=[RichHandler(rich_tracebacks=True, console=console, show_path=verbose)],
    )


def _make_session(args: argparse.Namespace, picker: EntryPicker | None = None) -> EditSession:
    store = EntryStore(LocalStorage(settings.get_storage_path()), picker)
    poll_interval_ms = getattr(args, "poll_interval_ms", None)
    max_wait_ms = getattr(args, "max_wait_ms", None)
    config = WatchdogConfig(
        poll_interval_ms=settings.poll_interval_ms if poll_interval_ms is None else poll_interval_ms,
        max_wait_ms=settings.max_wait_ms if max_wait_ms is None else max_wait_ms,
    )
    return EditSession(store, WriteWatchdog(config))


def _read_payload(args: argparse.Namespace) -> str | None:
    """Get new content from --text, --input, or --stdin. None keeps the file as is."""
    if args.text is not None:
        return args.text
    if args.input:
        return Path(args.input).read_text(encoding="utf-8")
    if args.stdin:
        return sys.stdin.read()
    return None


def _print_outcome(session: EditSession, outcome: WriteOutcome) -> None:
    if outcome.ok:
        console.print(f"[green]{session.status}[/green] ({outcome.bytes_written} bytes)")
    else:
        console.print(f"[red]{session.status}[/red]")


def cmd_open(args: argparse.Namespace) -> None:
    """Open a file (or the retained one) and print its content."""
    if args.path:
        session = _make_session(args, PathPicker(args.path))
        handle = asyncio.run(session.choose_file())
    else:
        session = _make_session(args, ConsolePicker(console))
        handle = asyncio.run(session.load_initial())
        if handle is None:
            handle = asyncio.run(session.choose_file())

    if handle is None:
        console.print(f"[yellow]{session.status or 'No file selected.'}[/yellow]")
        sys.exit(1)

    console.print(Panel(session.text, title=session.display_path, border_style="cyan"))


def cmd_write(args: argparse.Namespace) -> None:
    """Write text to a file, or to the retained entry when no path is given."""
    session = _make_session(args)
    launch = LaunchData.from_paths([args.path]) if args.path else None
    asyncio.run(session.load_initial(launch))

    payload = _read_payload(args)
    outcome = asyncio.run(session.write_back(payload))
    _print_outcome(session, outcome)
    if not outcome.ok:
        sys.exit(1)


def cmd_save_as(args: argparse.Namespace) -> None:
    """Save text to a new target file."""
    session = _make_session(args, PathPicker(args.target))
    payload = _read_payload(args)
    outcome = asyncio.run(session.save_as(payload or ""))
    _print_outcome(session, outcome)
    if not outcome.ok:
        sys.exit(1)


def cmd_status(args: argparse.Namespace) -> None:
    """Show the retained entry."""
    store = EntryStore(LocalStorage(settings.get_storage_path()))
    reference = store.retained()
    if reference is None:
        console.print("[dim]No retained entry.[/dim]")
        return

    handle = store.restore()
    table = Table(show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Token", reference.token)
    table.add_row("Retained", reference.retained_at.isoformat())
    table.add_row("Writable", "yes" if reference.writable else "no")
    if handle is not None:
        table.add_row("Path", handle.display_path())
        table.add_row("Size", f"{handle.size()} bytes")
    else:
        table.add_row("Path", "[red]unavailable[/red]")
    console.print(table)


def cmd_forget(args: argparse.Namespace) -> None:
    """Forget the retained entry."""
    store = EntryStore(LocalStorage(settings.get_storage_path()))
    if store.forget():
        console.print("[green]Retained entry forgotten.[/green]")
    else:
        console.print("[dim]No retained entry.[/dim]")


def cmd_version(args: argparse.Namespace) -> None:
    """Show version information."""
    console.print(f"scribe v{__version__}")


def _add_write_options(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--text", default=None, help="Text to write")
    source.add_argument("--input", default=None, help="Read the text to write from this file")
    source.add_argument("--stdin", action="store_true", help="Read the text to write from stdin")
    parser.add_argument(
        "--poll-interval-ms", type=int, default=None,
        help=f"Readiness poll interval (default: {settings.poll_interval_ms})"
    )
    parser.add_argument(
        "--max-wait-ms", type=int, default=None,
        help=f"Abort writes stuck longer than this (default: {settings.max_wait_ms})"
    )


def main() -> NoReturn:
    """Main entry point for the scribe CLI."""
    parser = argparse.ArgumentParser(
        prog="scribe",
        description="Edit local files through retained entry handles",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show detailed output")

    subparsers = parser.add_subparsers(dest="command")

    open_parser = subparsers.add_parser(
        "open",
        help="Open a file and remember it",
        description="Open PATH (or the retained entry, or prompt for one) and print it.",
    )
    open_parser.add_argument("path", nargs="?", default=None, help="File to open")
    open_parser.set_defaults(func=cmd_open)

    write_parser = subparsers.add_parser(
        "write",
        help="Write text to a file",
        description="Write new text to PATH or the retained entry. Without any "
                    "text the current content is written back unchanged.",
        epilog="""Examples:
  scribe write notes.json --text '{}'      Replace a file's content
  cat new.json | scribe write --stdin      Write stdin to the retained entry
  scribe write                             Rewrite the retained entry as is"""
    )
    write_parser.add_argument("path", nargs="?", default=None, help="File to write")
    _add_write_options(write_parser)
    write_parser.set_defaults(func=cmd_write)

    save_parser = subparsers.add_parser(
        "save-as",
        help="Save text to a new file",
        description=f"Save text to TARGET. If TARGET is a directory, "
                    f"{settings.suggested_name} is created inside it.",
    )
    save_parser.add_argument("target", help="File or directory to save to")
    _add_write_options(save_parser)
    save_parser.set_defaults(func=cmd_save_as)

    status_parser = subparsers.add_parser("status", help="Show the retained entry")
    status_parser.set_defaults(func=cmd_status)

    forget_parser = subparsers.add_parser("forget", help="Forget the retained entry")
    forget_parser.set_defaults(func=cmd_forget)

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.set_defaults(func=cmd_version)

    args = parser.parse_args()
    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        args.func(args)
    except ScribeError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except ValidationError as e:
        console.print(f"[red]Invalid option:[/red] {e}")
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
