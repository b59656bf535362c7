"""EzShare command-line client.

Changes:
  - 2026-10-17: `paste` drops the trailing newline from piped stdin.
  - 2026-10-08: Added `copy --local` to put the fetched text on this machine's clipboard.
  - 2026-10-07: Rich progress bars for put/get.
  - 2026-10-06: Initial ls/get/put/paste/copy/url commands.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from importlib.metadata import version as get_version

from rich.console import Console
from rich.progress import BarColumn, DownloadColumn, Progress, TextColumn, TransferSpeedColumn
from rich.table import Table

from ezshare.config import Settings, get_settings
from ezshare.errors import ValidationFailure
from ezshare.logging_setup import setup_logging
from ezshare.models import LoadState, Notification, NotificationLevel
from ezshare.session import EzShareSession

logger = logging.getLogger(__name__)

console = Console()

_LEVEL_STYLES = {
    NotificationLevel.SUCCESS: "green",
    NotificationLevel.INFO: "dim",
    NotificationLevel.ERROR: "bold red",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ezshare",
        description="🤝 EzShare client - browse, transfer files and share clipboard text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ezshare ls                         List the share root
  ezshare ls /docs                   List a sub-directory
  ezshare get /docs -o ~/Downloads   Download a directory as zip
  ezshare put notes.txt photo.jpg    Upload files into the share root
  echo hello | ezshare paste         Send text to the other side's clipboard
  ezshare copy --local               Fetch their clipboard into yours
""",
    )
    parser.add_argument(
        "--server", "-s", type=str, default=None, help="Server URL (default: EZSHARE_SERVER_URL)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Debug logging and info messages"
    )
    parser.add_argument("--version", "-V", action="store_true", help="Show version and exit")

    sub = parser.add_subparsers(dest="command")

    ls = sub.add_parser("ls", help="List a remote directory")
    ls.add_argument("path", nargs="?", default="/", help="Remote directory (default: /)")

    get = sub.add_parser("get", help="Download a file, or a directory as zip")
    get.add_argument("path", help="Remote path")
    get.add_argument("--output", "-o", default=None, help="Destination directory")

    put = sub.add_parser("put", help="Upload files into the share root")
    put.add_argument("files", nargs="+", help="Local files")

    paste = sub.add_parser("paste", help="Send text to the other side")
    paste.add_argument("text", nargs="?", default=None, help="Text to send (default: stdin)")
    paste.add_argument(
        "--save-as-file", action="store_true", help="Save as a file on the other side"
    )

    copy = sub.add_parser("copy", help="Fetch the other side's clipboard")
    copy.add_argument("--local", action="store_true", help="Copy into this machine's clipboard")

    url = sub.add_parser("url", help="Print the download link for a path")
    url.add_argument("path", help="Remote path")

    return parser


def _print_notification(notification: Notification, verbose: bool) -> None:
    if notification.level is NotificationLevel.INFO and not verbose:
        return
    style = _LEVEL_STYLES[notification.level]
    console.print(notification.message, style=style, markup=False, highlight=False)


def _render_listing(session: EzShareSession) -> None:
    snap = session.snapshot()
    table = Table(
        title=snap.listing.requested_or_current_path,
        caption=snap.listing.shared_root_label or None,
        show_header=True,
    )
    table.add_column("", width=2)
    table.add_column("Name")
    table.add_column("Path", style="dim")

    for entry in snap.directories:
        table.add_row("📁", entry.file_name, entry.path)
    for entry in snap.files:
        table.add_row("📄", entry.file_name, entry.path)
    console.print(table)


def _transfer_progress() -> Progress:
    return Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        console=console,
        transient=True,
    )


async def _cmd_ls(session: EzShareSession, args: argparse.Namespace) -> int:
    task = session.navigate({"p": args.path})
    if task is not None:
        await task
    if session.browser.state is not LoadState.LOADED:
        return 1
    _render_listing(session)
    return 0


async def _cmd_get(session: EzShareSession, args: argparse.Namespace) -> int:
    with _transfer_progress() as progress:
        bar = progress.add_task(f"get {args.path}", total=None)

        def on_progress(received: int, total: int) -> None:
            progress.update(bar, completed=received, total=total)

        result = await session.download(args.path, args.output, on_progress=on_progress)
    return 0 if result.ok else 1


async def _cmd_put(session: EzShareSession, args: argparse.Namespace) -> int:
    with Progress(console=console, transient=True) as progress:
        bar = progress.add_task(f"put {len(args.files)} file(s)", total=1.0)
        session.uploader.on_change(
            lambda uploader: progress.update(bar, completed=uploader.progress or 0.0)
        )
        result = await session.upload(args.files)
    return 0 if result.ok else 1


async def _cmd_paste(session: EzShareSession, args: argparse.Namespace) -> int:
    if args.text is not None:
        text = args.text
    else:
        # Trailing newline from echo or a here-string
        text = sys.stdin.read().removesuffix("\n")
    result = await session.push_clipboard(text, save_as_file=args.save_as_file)
    return 0 if result.ok else 1


async def _cmd_copy(session: EzShareSession, args: argparse.Namespace) -> int:
    result = await session.pull_clipboard()
    if not result.ok:
        return 1
    text = session.clipboard.text
    if text is None:
        return 0
    if args.local:
        copied = await session.copy_clipboard()
        return 0 if copied.ok else 1

    console.print(text, markup=False, highlight=False, soft_wrap=True)
    session.dismiss_clipboard()
    return 0


async def _cmd_url(session: EzShareSession, args: argparse.Namespace) -> int:
    console.print(session.download_url(args.path), markup=False, highlight=False)
    return 0


_COMMANDS = {
    "ls": _cmd_ls,
    "get": _cmd_get,
    "put": _cmd_put,
    "paste": _cmd_paste,
    "copy": _cmd_copy,
    "url": _cmd_url,
}


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Run one command against the server. Returns the exit code."""
    async with EzShareSession(settings) as session:
        session.on_notification(lambda n: _print_notification(n, args.verbose))
        try:
            return await _COMMANDS[args.command](session, args)
        except ValidationFailure as e:
            console.print(f"❌ {e}", style="bold red", markup=False, highlight=False)
            return 2


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"ezshare-client {get_version('ezshare-client')}")
        return 0
    if args.command is None:
        parser.print_help()
        return 2

    settings = get_settings()
    if args.server:
        settings = settings.model_copy(update={"server_url": args.server.rstrip("/")})

    setup_logging(level="DEBUG" if args.verbose else settings.log_level)
    logger.debug("Using server %s", settings.server_url)

    try:
        return asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
