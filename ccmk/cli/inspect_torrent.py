"""CLI command for inspecting torrent files."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from ccmk.core.bencode import decode, encode
from ccmk.piece.hasher import DIGEST_SIZE
from ccmk.utils.exceptions import BencodeError, TorrentError

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def summarize(torrent: dict[bytes, Any]) -> dict[str, Any]:
    """Extract the display fields of a decoded torrent."""
    info = torrent.get(b"info")
    if not isinstance(info, dict):
        msg = "Torrent has no info dictionary"
        raise TorrentError(msg)
    pieces = info.get(b"pieces", b"")
    if len(pieces) % DIGEST_SIZE:
        msg = f"pieces length {len(pieces)} is not a multiple of {DIGEST_SIZE}"
        raise TorrentError(msg)

    if b"files" in info:
        files = [
            ("/".join(_text(p) for p in f[b"path"]), f[b"length"])
            for f in info[b"files"]
        ]
    else:
        files = [(_text(info.get(b"name", b"")), info.get(b"length", 0))]

    return {
        "name": _text(info.get(b"name", b"")),
        "announce": _text(torrent.get(b"announce", b"")),
        "created_by": _text(torrent.get(b"created by", b"")),
        "creation_date": torrent.get(b"creation date"),
        "piece_length": info.get(b"piece length"),
        "piece_count": len(pieces) // DIGEST_SIZE,
        "private": info.get(b"private", 0) == 1,
        "source": _text(info.get(b"source", b"")),
        "info_hash": hashlib.sha1(encode(info)).hexdigest(),  # nosec B324 - BitTorrent v1 info hash
        "files": files,
        "total_size": sum(length for _, length in files),
    }


@click.command("inspect")
@click.argument("torrent_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inspect_torrent(torrent_file: Path) -> None:
    """Show the contents of a torrent file."""
    console = Console()
    try:
        summary = summarize(decode(torrent_file.read_bytes()))
    except (BencodeError, TorrentError, KeyError, TypeError) as e:
        logger.debug("Failed to parse %s", torrent_file, exc_info=True)
        console.print(f"[red]Error: invalid torrent file: {e}[/red]")
        raise click.Abort from e

    console.print(f"[bold]{summary['name']}[/bold]")
    console.print(f"Announce: {summary['announce']}")
    console.print(f"Created by: {summary['created_by']}")
    console.print(f"Creation date: {summary['creation_date']}")
    console.print(f"Source: {summary['source']}")
    console.print(f"Private: {'yes' if summary['private'] else 'no'}")
    console.print(
        f"Pieces: {summary['piece_count']} x {summary['piece_length']} bytes"
    )
    console.print(f"Info hash: {summary['info_hash']}")

    table = Table(title="Files")
    table.add_column("Path")
    table.add_column("Size", justify="right")
    for path, length in summary["files"]:
        table.add_row(path, str(length))
    console.print(table)
