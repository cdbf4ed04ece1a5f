"""Tests for the filesystem and in-memory byte sources."""

from __future__ import annotations

import pytest

from ccmk.storage.byte_source import (
    ByteSource,
    FilesystemByteSource,
    InMemoryByteSource,
    SourceEntry,
)
from ccmk.utils.exceptions import EmptyInputError

pytestmark = [pytest.mark.unit, pytest.mark.storage]


class TestInMemoryByteSource:
    """InMemoryByteSource."""

    def test_entries_and_reads(self):
        source = InMemoryByteSource([(["r", "a"], b"hello"), (("r", "b"), b"")])
        assert source.entries() == [SourceEntry(("r", "a"), 5), SourceEntry(("r", "b"), 0)]
        assert source.read(0, 1, 3) == b"ell"
        assert isinstance(source, ByteSource)

    def test_out_of_range_read(self):
        source = InMemoryByteSource([(("a",), b"abc")])
        with pytest.raises(OSError):
            source.read(0, 2, 5)


class TestFilesystemByteSource:
    """FilesystemByteSource."""

    def test_single_file(self, tmp_path):
        path = tmp_path / "movie.mkv"
        path.write_bytes(b"0123456789")
        source = FilesystemByteSource(path)
        assert source.entries() == [SourceEntry(("movie.mkv",), 10)]
        assert source.read(0, 2, 3) == b"234"

    def test_directory_is_sorted_and_rooted(self, content_dir):
        source = FilesystemByteSource(content_dir)
        assert source.entries() == [
            SourceEntry(("content", "a.txt"), 10000),
            SourceEntry(("content", "empty.txt"), 0),
            SourceEntry(("content", "sub", "b.txt"), 5000),
        ]
        assert source.read(2, 4990, 10) == b"b" * 10

    def test_read_of_deleted_file_raises_oserror(self, tmp_path):
        path = tmp_path / "gone.bin"
        path.write_bytes(b"abc")
        source = FilesystemByteSource(path)
        path.unlink()
        with pytest.raises(OSError):
            source.read(0, 0, 3)

    def test_missing_path(self, tmp_path):
        with pytest.raises(EmptyInputError):
            FilesystemByteSource(tmp_path / "nope")

    def test_current_directory_root_is_named(self, content_dir, monkeypatch):
        monkeypatch.chdir(content_dir)
        source = FilesystemByteSource(".")
        assert source.root == content_dir.resolve()
        assert {entry.segments[0] for entry in source.entries()} == {"content"}

    def test_reads_reuse_one_handle_per_file(self, content_dir, monkeypatch):
        opened = []
        real_open = open

        def tracking_open(path, *args, **kwargs):
            opened.append(path)
            return real_open(path, *args, **kwargs)

        monkeypatch.setattr("builtins.open", tracking_open)
        with FilesystemByteSource(content_dir) as source:
            assert source.read(0, 0, 4) == b"aaaa"
            assert source.read(0, 4, 4) == b"aaaa"
            assert source.read(2, 0, 2) == b"bb"
            assert source.read(2, 2, 2) == b"bb"
        assert len(opened) == 2
        assert source._handle is None

    def test_close_then_read_reopens(self, tmp_path):
        path = tmp_path / "f.bin"
        path.write_bytes(b"abcdef")
        source = FilesystemByteSource(path)
        assert source.read(0, 0, 3) == b"abc"
        source.close()
        assert source.read(0, 3, 3) == b"def"
        source.close()
