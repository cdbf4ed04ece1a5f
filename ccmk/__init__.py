"""ccmk - BitTorrent metainfo builder."""

from __future__ import annotations

__version__ = "0.1.0"

from ccmk.core.bencode import BencodeDecoder, BencodeEncoder, decode, encode
from ccmk.core.builder import TorrentBuilder, suggest_piece_length
from ccmk.core.metainfo import Metainfo, MetainfoAssembler
from ccmk.models import BuilderConfig, FileRecord
from ccmk.storage.byte_source import FilesystemByteSource, InMemoryByteSource

__all__ = [
    "BencodeDecoder",
    "BencodeEncoder",
    "BuilderConfig",
    "FileRecord",
    "FilesystemByteSource",
    "InMemoryByteSource",
    "Metainfo",
    "MetainfoAssembler",
    "TorrentBuilder",
    "__version__",
    "decode",
    "encode",
    "suggest_piece_length",
]
