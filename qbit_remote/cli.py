"""
Command Line Interface for qbit-remote.
A thin caller over QBittorrentClient for scripting and quick checks.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from .client import QBittorrentClient
from .config import ClientSettings
from .exceptions import QbitRemoteError
from .logging_config import LogContext, setup_logging
from .params import GetTorrentListParams, TorrentListFilter
from .upload import TorrentUpload

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qbit-remote",
        description="qbit-remote - control a qBittorrent instance through its Web API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List seeding torrents in the "tv" category
  qbit-remote --url http://localhost:8080 list --filter seeding --category tv

  # Add a magnet link, paused
  qbit-remote add --url-source "magnet:?xt=urn:btih:..." --paused

  # Remove two torrents and their data
  qbit-remote remove HASH1 HASH2 --delete-files

Environment Variables:
  QBIT_URL         - qBittorrent Web UI URL
  QBIT_USERNAME    - Web UI username (default: admin)
  QBIT_PASSWORD    - Web UI password
  QBIT_TIMEOUT     - Request timeout in seconds (default: 30)
  QBIT_VERIFY_SSL  - Verify TLS certificates (default: true)
  QBIT_LOG_LEVEL   - Logging level (default: INFO)
  QBIT_LOG_FORMAT  - Log format: text or json (default: text)
  QBIT_LOG_FILE    - Log file path (enables rotation)
        """,
    )
    parser.add_argument("--url", help="qBittorrent URL (or use QBIT_URL env var)")
    parser.add_argument("--username", "-u", help="Username (or use QBIT_USERNAME env var)")
    parser.add_argument("--password", "-p", help="Password (or use QBIT_PASSWORD env var)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument("--log-format", choices=["text", "json"], help="Log format")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List torrents")
    list_parser.add_argument(
        "--filter", "-f",
        choices=[f.value for f in TorrentListFilter],
        help="Filter by state",
    )
    list_parser.add_argument("--category", "-c", help="Only torrents in this category")
    list_parser.add_argument("--tag", "-t", help="Only torrents with this tag")
    list_parser.add_argument("--limit", type=int, help="Maximum number of results")
    list_parser.add_argument("--offset", type=int, help="Skip this many results")
    list_parser.add_argument("--reverse", action="store_true", help="Reverse sort order")
    list_parser.add_argument("--hash", action="append", dest="hashes", help="Only this hash (repeatable)")

    trackers_parser = subparsers.add_parser("trackers", help="List trackers of a torrent")
    trackers_parser.add_argument("hash", help="Torrent hash")

    add_parser = subparsers.add_parser("add", help="Add torrents by URL or file")
    add_parser.add_argument("--url-source", action="append", default=[], dest="sources",
                            help="Magnet or HTTP URL (repeatable)")
    add_parser.add_argument("--file", action="append", default=[], dest="files",
                            help=".torrent file path (repeatable)")
    add_parser.add_argument("--save-path", help="Download folder")
    add_parser.add_argument("--category", "-c", help="Category")
    add_parser.add_argument("--tag", action="append", default=[], dest="tags", help="Tag (repeatable)")
    add_parser.add_argument("--paused", action="store_true", help="Add in paused state")
    add_parser.add_argument("--skip-checking", action="store_true", help="Skip hash check")
    add_parser.add_argument("--sequential", action="store_true", help="Sequential download")

    remove_parser = subparsers.add_parser("remove", help="Remove torrents")
    remove_parser.add_argument("hashes", nargs="+", help="Torrent hashes")
    remove_parser.add_argument("--delete-files", action="store_true", help="Also delete downloaded data")

    subparsers.add_parser("tags", help="List tags")

    create_tag_parser = subparsers.add_parser("create-tag", help="Create a tag")
    create_tag_parser.add_argument("tag")

    delete_tag_parser = subparsers.add_parser("delete-tag", help="Delete a tag")
    delete_tag_parser.add_argument("tag")

    subparsers.add_parser("version", help="Show the qBittorrent version")

    return parser


def main(argv: Optional[list[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    settings = ClientSettings()
    setup_logging(
        log_level=args.log_level or settings.log_level,
        log_file=settings.log_file,
        log_format=args.log_format or settings.log_format,
    )

    try:
        asyncio.run(run_command(args, settings))
    except QbitRemoteError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


async def run_command(args, settings: ClientSettings):
    """Log in, run one subcommand and close the client."""
    url = args.url or settings.require_url()
    username = args.username or settings.username
    password = args.password if args.password is not None else settings.password

    async with QBittorrentClient.from_settings(settings) as client:
        with LogContext(operation=args.command):
            await client.login(url, username, password)
            await COMMANDS[args.command](client, args)


async def run_list(client: QBittorrentClient, args):
    builder = GetTorrentListParams.builder()
    if args.filter:
        builder.filter(TorrentListFilter(args.filter))
    if args.category is not None:
        builder.category(args.category)
    if args.tag is not None:
        builder.tag(args.tag)
    if args.limit is not None:
        builder.limit(args.limit)
    if args.offset is not None:
        builder.offset(args.offset)
    if args.reverse:
        builder.reverse()
    for torrent_hash in args.hashes or []:
        builder.hash(torrent_hash)

    torrents = await client.list_torrents(builder.build())
    if not torrents:
        print("No torrents found.")
        return

    print(f"{'Hash':<12} {'Name':<40} {'Size':>10} {'Progress':>8} {'State':<18}")
    print("-" * 92)
    for t in torrents:
        size_str = f"{t.size / 1e6:.1f}MB" if t.size < 1e9 else f"{t.size / 1e9:.2f}GB"
        name = t.name[:37] + "..." if len(t.name) > 40 else t.name
        print(f"{t.hash[:12]:<12} {name:<40} {size_str:>10} {t.progress * 100:>7.1f}% {t.state.value:<18}")


async def run_trackers(client: QBittorrentClient, args):
    trackers = await client.get_trackers(args.hash)
    for tracker in trackers:
        tier = tracker.tier if tracker.has_tier else "-"
        print(f"[{tier}] {tracker.status.name.lower():<13} {tracker.url} {tracker.message}".rstrip())


async def run_add(client: QBittorrentClient, args):
    builder = TorrentUpload.builder().urls(args.sources)
    for path in args.files:
        builder.torrent_file(path)
    if args.save_path:
        builder.save_path(args.save_path)
    if args.category:
        builder.category(args.category)
    if args.tags:
        builder.tags(args.tags)
    if args.paused:
        builder.paused(True)
    if args.skip_checking:
        builder.skip_hash_check(True)
    if args.sequential:
        builder.sequential_download(True)

    await client.add_torrent(builder.build())
    print("Ok.")


async def run_remove(client: QBittorrentClient, args):
    await client.remove_torrents(args.hashes, delete_files=args.delete_files)
    print(f"Removed {len(args.hashes)} torrent(s)")


async def run_tags(client: QBittorrentClient, args):
    for tag in await client.get_tags():
        print(tag)


async def run_create_tag(client: QBittorrentClient, args):
    await client.create_tag(args.tag)


async def run_delete_tag(client: QBittorrentClient, args):
    await client.delete_tag(args.tag)


async def run_version(client: QBittorrentClient, args):
    print(await client.app_version())


COMMANDS = {
    "list": run_list,
    "trackers": run_trackers,
    "add": run_add,
    "remove": run_remove,
    "tags": run_tags,
    "create-tag": run_create_tag,
    "delete-tag": run_delete_tag,
    "version": run_version,
}


if __name__ == "__main__":
    main()
