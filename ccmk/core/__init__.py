"""Core torrent building: bencode, metainfo assembly and the build pipeline."""

from __future__ import annotations

from ccmk.core.bencode import BencodeDecoder, BencodeEncoder, decode, encode
from ccmk.core.builder import TorrentBuilder, suggest_piece_length
from ccmk.core.metainfo import Metainfo, MetainfoAssembler, derive_layout

__all__ = [
    "BencodeDecoder",
    "BencodeEncoder",
    "Metainfo",
    "MetainfoAssembler",
    "TorrentBuilder",
    "decode",
    "derive_layout",
    "encode",
    "suggest_piece_length",
]
