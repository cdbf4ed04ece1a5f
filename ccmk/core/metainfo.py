"""Metainfo (.torrent) assembly.

Builds the torrent dictionary from file records and piece digests and
serializes it with the bencode encoder. The ``pieces`` value is kept as raw
bytes throughout.
"""

from __future__ import annotations

import hashlib
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from ccmk.core.bencode import encode
from ccmk.models import FileRecord
from ccmk.piece.aggregator import expected_piece_count, validate_piece_length
from ccmk.piece.hasher import DIGEST_SIZE
from ccmk.storage.byte_source import SourceEntry
from ccmk.utils.exceptions import EmptyInputError, TorrentError

logger = logging.getLogger(__name__)

PRIVATE_FLAG = 1
ENTROPY_MIN = -2_000_000_000
ENTROPY_MAX = 2_000_000_000  # exclusive

_INVALID_NAMES = frozenset({"", ".", ".."})


@dataclass(frozen=True)
class Metainfo:
    """A serialized torrent and the values derived while building it."""

    name: str
    torrent: dict[str, Any]
    data: bytes
    info_hash: bytes
    total_size: int
    piece_count: int

    @property
    def suggested_filename(self) -> str:
        """File name to save ``data`` under."""
        return f"{self.name}.torrent"


def derive_layout(entries: Sequence[SourceEntry]) -> tuple[str, list[FileRecord]]:
    """Torrent name and file records for a list of source entries.

    A single entry is named after its last path segment. Several entries must
    share a root folder (their first segment), which becomes the name and is
    stripped from every record path.
    """
    if not entries:
        msg = "No input files"
        raise EmptyInputError(msg)

    if len(entries) == 1:
        entry = entries[0]
        if not entry.segments:
            msg = "Input file has no name"
            raise TorrentError(msg)
        name = _checked_name(entry.segments[-1])
        return name, [FileRecord(path=(name,), length=entry.size)]

    roots = {entry.segments[0] for entry in entries if entry.segments}
    if len(roots) != 1 or any(len(entry.segments) < 2 for entry in entries):
        msg = "Multi-file input must share a single root folder"
        raise TorrentError(msg, {"roots": sorted(roots)})

    name = _checked_name(roots.pop())
    records = [
        FileRecord(path=tuple(entry.segments[1:]), length=entry.size)
        for entry in entries
    ]
    return name, records


def _checked_name(name: str) -> str:
    if name in _INVALID_NAMES:
        msg = f"Invalid torrent name: {name!r}"
        raise TorrentError(msg, {"name": name})
    return name


class MetainfoAssembler:
    """Assembles and serializes the torrent dictionary."""

    def __init__(
        self,
        announce: str,
        source: str = "",
        created_by: str = "ccmk",
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
    ):
        self.announce = announce
        self.source = source
        self.created_by = created_by
        self.clock = clock
        self.rng = rng or random.Random()

    def build_info(
        self,
        name: str,
        records: Sequence[FileRecord],
        piece_length: int,
        digests: Sequence[bytes],
    ) -> dict[str, Any]:
        """Build the ``info`` dictionary after validating its inputs."""
        if not records:
            msg = "No file records to describe"
            raise EmptyInputError(msg)
        validate_piece_length(piece_length)

        total_size = sum(record.length for record in records)
        if total_size == 0:
            msg = "Input files contain no data"
            raise EmptyInputError(msg, {"files": len(records)})
        expected = expected_piece_count(total_size, piece_length)
        if len(digests) != expected:
            msg = f"Expected {expected} piece digests, got {len(digests)}"
            raise TorrentError(msg, {"total_size": total_size, "piece_length": piece_length})
        for index, digest in enumerate(digests):
            if len(digest) != DIGEST_SIZE:
                msg = f"Digest {index} is {len(digest)} bytes, expected {DIGEST_SIZE}"
                raise TorrentError(msg)

        info: dict[str, Any] = {
            "entropy": self.rng.randrange(ENTROPY_MIN, ENTROPY_MAX),
            "name": name,
            "piece length": piece_length,
            "pieces": b"".join(digests),
            "private": PRIVATE_FLAG,
            "source": self.source,
        }
        if len(records) == 1:
            info["length"] = records[0].length
        else:
            info["files"] = [
                {"length": record.length, "path": list(record.path)}
                for record in records
            ]
        return info

    def assemble(
        self,
        name: str,
        records: Sequence[FileRecord],
        piece_length: int,
        digests: Sequence[bytes],
    ) -> Metainfo:
        """Build and serialize the complete torrent."""
        info = self.build_info(name, records, piece_length, digests)
        torrent: dict[str, Any] = {
            "announce": self.announce,
            "created by": self.created_by,
            "creation date": int(self.clock()),
            "info": info,
        }

        data = encode(torrent)
        info_hash = hashlib.sha1(encode(info)).digest()  # nosec B324 - BitTorrent v1 info hash

        logger.debug(
            "Assembled torrent %s: %d bytes, info_hash=%s",
            name,
            len(data),
            info_hash.hex(),
        )
        return Metainfo(
            name=name,
            torrent=torrent,
            data=data,
            info_hash=info_hash,
            total_size=sum(record.length for record in records),
            piece_count=len(digests),
        )
