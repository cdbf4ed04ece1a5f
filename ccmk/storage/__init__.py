"""Input byte sources."""

from __future__ import annotations

from ccmk.storage.byte_source import (
    ByteSource,
    FilesystemByteSource,
    InMemoryByteSource,
    SourceEntry,
)

__all__ = [
    "ByteSource",
    "FilesystemByteSource",
    "InMemoryByteSource",
    "SourceEntry",
]
