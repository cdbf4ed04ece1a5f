"""CLI command for creating torrent files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from ccmk.config.config import get_config
from ccmk.core.builder import TorrentBuilder
from ccmk.storage.byte_source import FilesystemByteSource
from ccmk.utils.exceptions import BuildError, CCMKError

logger = logging.getLogger(__name__)


@click.command("create")
@click.argument("source", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output torrent file path (default: <name>.torrent next to the source)",
)
@click.option(
    "--tracker",
    "-t",
    "announce",
    type=str,
    help="Tracker announce URL",
)
@click.option(
    "--source",
    "source_tag",
    type=str,
    help="Source tag stored in the info dictionary",
)
@click.option(
    "--created-by",
    type=str,
    help="Created by field",
)
@click.option(
    "--piece-length",
    type=int,
    help="Piece length in bytes (default: derived from total size)",
)
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(1, 64),
    help="Number of hashing threads",
)
def create_torrent(
    source: Path,
    output: Path | None,
    announce: str | None,
    source_tag: str | None,
    created_by: str | None,
    piece_length: int | None,
    workers: int | None,
) -> None:
    """Create a private v1 torrent from a file or directory.

    Examples:
        ccmk create /path/to/content -t http://tracker.example.com/announce

        ccmk create movie.mkv --piece-length 262144 --source MYTRACKER

    """
    console = Console()
    source = source.resolve()

    overrides: dict[str, Any] = {
        "announce": announce,
        "source": source_tag,
        "created_by": created_by,
        "hash_workers": workers,
    }
    builder_config = get_config().builder.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )
    if not builder_config.announce:
        console.print("[yellow]Warning: no announce URL set[/yellow]")

    console.print(f"[cyan]Creating torrent from {source}...[/cyan]")

    try:
        builder = TorrentBuilder(builder_config)

        with FilesystemByteSource(source) as byte_source, Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Hashing pieces", total=None)

            def _on_progress(done: int, total: int) -> None:
                progress.update(task, completed=done, total=total)

            metainfo = builder.build(
                byte_source,
                piece_length=piece_length,
                progress=_on_progress,
            )

        if output is None:
            output = source.parent / metainfo.suggested_filename
        elif output.is_dir():
            output = output / metainfo.suggested_filename
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "wb") as f:
            f.write(metainfo.data)

    except BuildError as e:
        logger.debug("Build failed", exc_info=True)
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort from e
    except (CCMKError, OSError) as e:
        logger.exception("Error creating torrent")
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort from e

    console.print(f"[green]✓ Torrent created successfully: {output}[/green]")
    console.print(
        f"[dim]{metainfo.piece_count} pieces, {metainfo.total_size} bytes[/dim]"
    )
    console.print(f"[dim]Info hash (SHA-1): {metainfo.info_hash.hex()}[/dim]")
