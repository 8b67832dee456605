"""
Storage Shell - Command line front-end for the storage service

@.architecture
Incoming: Command line, scripts/storage_cli.py --- {CLI args: command, file id, extension, input path or text}
Processing: main(), build_parser(), run_command(), _render_content() --- {4 jobs: argument_parsing, rpc_dispatch, content_rendering, error_reporting}
Outgoing: client/file_storage.py, stdout/stderr --- {FileStorageClient calls, printed ids/content/listing, exit code}

Any server error is reported as a generic "file not found" line, the way
the desktop client did; ``--verbose`` prints the actual error instead.
Problems with local files (input path, ``--output``) are always printed as
the OS reports them. Every failure exits with status 1.
"""

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from data.storage import FileStoreError

from .file_storage import FileStorageClient, FileStorageClientConfig, FileStorageClientError

IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.gif', '.bmp', '.webp'}

GENERIC_ERROR = "file not found"


def _read_input(args: argparse.Namespace) -> bytes:
    if args.text is not None:
        return args.text.encode("utf-8")
    if args.path == "-":
        return sys.stdin.buffer.read()
    return Path(args.path).read_bytes()


def _render_content(content: bytes, extension: Optional[str]) -> str:
    """Text for printable files, a size summary for images and binary data."""
    ext = (extension or "").lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    if ext in IMAGE_EXTENSIONS:
        return f"<image {ext}, {len(content)} bytes>"
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return f"<binary, {len(content)} bytes>"


async def run_command(args: argparse.Namespace, client: FileStorageClient) -> int:
    """Execute one parsed command against the service."""
    if args.command == "create":
        created = await client.create_file(_read_input(args), args.extension)
        print(f"{created.id} {created.extension}")

    elif args.command == "read":
        content = await client.read_file(args.id, args.extension)
        if args.output:
            Path(args.output).write_bytes(content)
            print(f"Wrote {len(content)} bytes to {args.output}")
        else:
            print(_render_content(content, args.extension))

    elif args.command == "update":
        await client.update_file(args.id, _read_input(args), args.extension)
        print("updated")

    elif args.command == "delete":
        await client.delete_file(args.id, args.extension)
        print("deleted")

    elif args.command == "list":
        files = await client.list_files()
        for info in files:
            modified = datetime.fromtimestamp(info.modified_at).strftime("%Y-%m-%d %H:%M:%S")
            print(f"{info.id}{info.extension}\t{info.size_bytes}\t{modified}")
        print(f"{len(files)} file(s)")

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="File storage service shell",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Store a file (prints "<id> <extension>")
  storage_cli.py create notes.txt

  # Store inline text with an explicit extension
  storage_cli.py create --text "hello" --extension md

  # Read it back
  storage_cli.py read aZ3kP0qLmN8xT2bY --extension .md

  # Overwrite, then delete
  storage_cli.py update aZ3kP0qLmN8xT2bY --text "world" --extension .md
  storage_cli.py delete aZ3kP0qLmN8xT2bY --extension .md

  # List stored files
  storage_cli.py list
        """
    )
    parser.add_argument('--url', help='Service base URL (default: from settings)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Print the actual error on failure')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    create_parser = subparsers.add_parser('create', help='Store a new file')
    create_parser.add_argument('path', nargs='?', default='-', help='Input file, "-" for stdin')
    create_parser.add_argument('--text', help='Inline content instead of a file')
    create_parser.add_argument('--extension', help='Extension (default .txt)')

    read_parser = subparsers.add_parser('read', help='Print a stored file')
    read_parser.add_argument('id', help='File ID')
    read_parser.add_argument('--extension', help='Extension used at create time')
    read_parser.add_argument('--output', '-o', help='Write content to this path')

    update_parser = subparsers.add_parser('update', help='Overwrite a stored file')
    update_parser.add_argument('id', help='File ID')
    update_parser.add_argument('path', nargs='?', default='-', help='Input file, "-" for stdin')
    update_parser.add_argument('--text', help='Inline content instead of a file')
    update_parser.add_argument('--extension', help='Extension used at create time')

    delete_parser = subparsers.add_parser('delete', help='Delete a stored file')
    delete_parser.add_argument('id', help='File ID')
    delete_parser.add_argument('--extension', help='Extension used at create time')

    subparsers.add_parser('list', help='List stored files')

    return parser


async def _run(args: argparse.Namespace, client: Optional[FileStorageClient]) -> int:
    if client is None:
        config = FileStorageClientConfig(base_url=args.url) if args.url else FileStorageClientConfig.from_settings()
        client = FileStorageClient(config)

    async with client:
        try:
            return await run_command(args, client)
        except (FileStoreError, FileStorageClientError) as e:
            print(e.message if args.verbose else GENERIC_ERROR, file=sys.stderr)
            return 1
        except OSError as e:
            # local input or --output file
            print(e, file=sys.stderr)
            return 1


def main(argv: Optional[List[str]] = None, client: Optional[FileStorageClient] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 2

    return asyncio.run(_run(args, client))
