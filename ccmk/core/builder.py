"""Torrent build pipeline.

ByteSource → PieceAggregator → PieceHasher → MetainfoAssembler, one build
per call with no state carried between builds.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable

from ccmk.core.metainfo import Metainfo, MetainfoAssembler, derive_layout
from ccmk.models import BuilderConfig
from ccmk.piece.aggregator import PieceAggregator, expected_piece_count, validate_piece_length
from ccmk.piece.hasher import PieceHasher
from ccmk.storage.byte_source import ByteSource
from ccmk.utils.exceptions import EmptyInputError, InvalidPieceLengthError
from ccmk.utils.logging_config import set_correlation_id

logger = logging.getLogger(__name__)

# Called with (pieces_hashed, total_pieces)
ProgressCallback = Callable[[int, int], None]


def suggest_piece_length(total_size: int) -> int:
    """Piece length targeting roughly a thousand pieces.

    Returns ``2 ** floor(log2(total_size / 1000))``. Inputs too small for that
    to be at least one byte are rejected instead of clamped to a minimum.
    """
    if total_size <= 0:
        msg = f"Cannot derive a piece length from a total size of {total_size}"
        raise InvalidPieceLengthError(msg, {"total_size": total_size})
    exponent = math.floor(math.log2(total_size / 1000))
    if exponent < 0:
        msg = (
            f"Total size {total_size} is too small to derive a piece length; "
            "pass one explicitly"
        )
        raise InvalidPieceLengthError(msg, {"total_size": total_size})
    return 2**exponent


class TorrentBuilder:
    """Builds a metainfo file from a byte source."""

    def __init__(
        self,
        config: BuilderConfig | None = None,
        assembler: MetainfoAssembler | None = None,
    ):
        self.config = config or BuilderConfig()
        self.assembler = assembler or MetainfoAssembler(
            announce=self.config.announce,
            source=self.config.source,
            created_by=self.config.created_by,
        )

    def resolve_piece_length(self, total_size: int, piece_length: int | None = None) -> int:
        """Explicit value, then configured value, then the size-derived one."""
        if piece_length is not None:
            return validate_piece_length(piece_length)
        if self.config.piece_length is not None:
            return validate_piece_length(self.config.piece_length)
        return suggest_piece_length(total_size)

    def build(
        self,
        source: ByteSource,
        piece_length: int | None = None,
        cancel_event: threading.Event | None = None,
        progress: ProgressCallback | None = None,
    ) -> Metainfo:
        """Run one build and return the serialized torrent.

        Raises:
            EmptyInputError: No files, or no bytes in them
            InvalidPieceLengthError: Piece length is unusable
            PieceReadError: A file range could not be read
            HashComputationError: The digest backend failed
            BuildCancelledError: ``cancel_event`` was set

        """
        set_correlation_id()
        started = time.monotonic()

        entries = list(source.entries())
        if not entries:
            msg = "No input files"
            raise EmptyInputError(msg)

        name, records = derive_layout(entries)
        total_size = sum(record.length for record in records)
        if total_size == 0:
            msg = "Input files contain no data"
            raise EmptyInputError(msg, {"files": len(records)})

        piece_length = self.resolve_piece_length(total_size, piece_length)
        total_pieces = expected_piece_count(total_size, piece_length)
        logger.info(
            "Building torrent %s: %d files, %d bytes, %d pieces of %d bytes",
            name,
            len(records),
            total_size,
            total_pieces,
            piece_length,
        )

        hashed = 0

        def _on_piece(_index: int, _digest: bytes) -> None:
            nonlocal hashed
            hashed += 1
            if progress is not None:
                progress(hashed, total_pieces)

        aggregator = PieceAggregator(piece_length)
        hasher = PieceHasher(workers=self.config.hash_workers)
        digests = hasher.hash_pieces(
            aggregator.iter_pieces(source),
            cancel_event=cancel_event,
            on_piece=_on_piece,
        )

        metainfo = self.assembler.assemble(name, records, piece_length, digests)
        logger.info(
            "Built torrent %s in %.2fs (info_hash=%s)",
            name,
            time.monotonic() - started,
            metainfo.info_hash.hex(),
        )
        return metainfo
