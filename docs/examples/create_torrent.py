#!/usr/bin/env python3
"""Example: building a private torrent with the ccmk API.

Builds a multi-file torrent from a temporary directory, then decodes the
result and prints its info dictionary.
"""

import tempfile
from pathlib import Path

from ccmk import BuilderConfig, FilesystemByteSource, TorrentBuilder, decode


def create_torrent_from_directory():
    """Create a torrent from a directory with nested files."""
    with tempfile.TemporaryDirectory() as tmp:
        content = Path(tmp) / "example_dir"
        (content / "subdir").mkdir(parents=True)
        (content / "file1.txt").write_bytes(b"File 1 content " * 500)
        (content / "file2.txt").write_bytes(b"File 2 content " * 500)
        (content / "subdir" / "file3.txt").write_bytes(b"File 3 content " * 500)

        builder = TorrentBuilder(
            BuilderConfig(
                announce="http://tracker.example.com/announce",
                source="EXAMPLE",
                hash_workers=4,
            )
        )
        with FilesystemByteSource(content) as source:
            metainfo = builder.build(source, piece_length=16384)

        output = Path(tmp) / metainfo.suggested_filename
        output.write_bytes(metainfo.data)

        info = decode(output.read_bytes())[b"info"]
        print(f"Torrent written: {output.name} ({len(metainfo.data)} bytes)")
        print(f"  Name: {info[b'name'].decode()}")
        print(f"  Info hash: {metainfo.info_hash.hex()}")
        print(f"  Total size: {metainfo.total_size:,} bytes")
        print(f"  Pieces: {metainfo.piece_count} x {info[b'piece length']:,} bytes")
        for entry in info[b"files"]:
            path = "/".join(part.decode() for part in entry[b"path"])
            print(f"  {path}: {entry[b'length']:,} bytes")


if __name__ == "__main__":
    create_torrent_from_directory()
