"""Tests for metainfo assembly."""

from __future__ import annotations

import hashlib
import random

import pytest

from ccmk.core.bencode import decode, encode
from ccmk.core.metainfo import (
    ENTROPY_MAX,
    ENTROPY_MIN,
    PRIVATE_FLAG,
    MetainfoAssembler,
    derive_layout,
)
from ccmk.models import FileRecord
from ccmk.storage.byte_source import SourceEntry
from ccmk.utils.exceptions import EmptyInputError, InvalidPieceLengthError, TorrentError

pytestmark = [pytest.mark.unit, pytest.mark.core]

PIECE0 = hashlib.sha1(b"\x01\x02\x03\x04").digest()
PIECE1 = hashlib.sha1(b"\x05").digest()


@pytest.fixture
def assembler():
    return MetainfoAssembler(
        announce="http://tracker.example.com/announce",
        source="TEST",
        created_by="ccmk-test",
        clock=lambda: 1700000000.75,
        rng=random.Random(42),
    )


class TestDeriveLayout:
    """Name and record derivation from source entries."""

    def test_single_file(self):
        name, records = derive_layout([SourceEntry(("movie.mkv",), 10)])
        assert name == "movie.mkv"
        assert records == [FileRecord(path=("movie.mkv",), length=10)]

    def test_single_file_inside_folder_uses_file_name(self):
        name, records = derive_layout([SourceEntry(("folder", "movie.mkv"), 10)])
        assert name == "movie.mkv"
        assert records[0].path == ("movie.mkv",)

    def test_multi_file_strips_root(self):
        name, records = derive_layout(
            [
                SourceEntry(("root", "a.bin"), 3),
                SourceEntry(("root", "sub", "b.bin"), 2),
            ]
        )
        assert name == "root"
        assert [r.path for r in records] == [("a.bin",), ("sub", "b.bin")]
        assert [r.length for r in records] == [3, 2]

    def test_multi_file_without_common_root(self):
        with pytest.raises(TorrentError):
            derive_layout([SourceEntry(("a", "x"), 1), SourceEntry(("b", "y"), 1)])

    def test_multi_file_bare_names(self):
        with pytest.raises(TorrentError):
            derive_layout([SourceEntry(("x",), 1), SourceEntry(("y",), 1)])

    def test_empty(self):
        with pytest.raises(EmptyInputError):
            derive_layout([])

    @pytest.mark.parametrize("root", ["", ".", ".."])
    def test_multi_file_unnamed_root(self, root):
        with pytest.raises(TorrentError):
            derive_layout([SourceEntry((root, "a"), 1), SourceEntry((root, "b"), 1)])

    @pytest.mark.parametrize("name", ["", ".", ".."])
    def test_single_file_unnamed(self, name):
        with pytest.raises(TorrentError):
            derive_layout([SourceEntry(("folder", name), 1)])


class TestMetainfoAssembler:
    """Torrent dictionary contents and serialization."""

    def test_multi_file_scenario(self, assembler):
        records = [
            FileRecord(path=("a.bin",), length=3),
            FileRecord(path=("b.bin",), length=2),
        ]
        metainfo = assembler.assemble("root", records, 4, [PIECE0, PIECE1])
        torrent = decode(metainfo.data)
        info = torrent[b"info"]

        assert torrent[b"announce"] == b"http://tracker.example.com/announce"
        assert torrent[b"created by"] == b"ccmk-test"
        assert torrent[b"creation date"] == 1700000000
        assert info[b"files"] == [
            {b"length": 3, b"path": [b"a.bin"]},
            {b"length": 2, b"path": [b"b.bin"]},
        ]
        assert b"length" not in info
        assert info[b"name"] == b"root"
        assert info[b"piece length"] == 4
        assert info[b"pieces"] == PIECE0 + PIECE1
        assert len(info[b"pieces"]) == 40
        assert info[b"private"] == PRIVATE_FLAG == 1
        assert info[b"source"] == b"TEST"
        assert ENTROPY_MIN <= info[b"entropy"] < ENTROPY_MAX

        assert metainfo.name == "root"
        assert metainfo.suggested_filename == "root.torrent"
        assert metainfo.total_size == 5
        assert metainfo.piece_count == 2
        assert metainfo.info_hash == hashlib.sha1(encode(info)).digest()

    def test_single_file_mode(self, assembler):
        records = [FileRecord(path=("a.bin",), length=5)]
        metainfo = assembler.assemble("a.bin", records, 4, [PIECE0, PIECE1])
        info = decode(metainfo.data)[b"info"]
        assert info[b"length"] == 5
        assert b"files" not in info

    def test_key_order_in_output(self, assembler):
        records = [FileRecord(path=("a.bin",), length=5)]
        data = assembler.assemble("a.bin", records, 4, [PIECE0, PIECE1]).data
        top_keys = [b"8:announce", b"10:created by", b"13:creation date", b"4:info"]
        positions = [data.index(k) for k in top_keys]
        assert positions == sorted(positions)

        info_keys = [b"7:entropy", b"6:length", b"4:name", b"12:piece length", b"6:pieces", b"7:private", b"6:source"]
        positions = [data.index(k) for k in info_keys]
        assert positions == sorted(positions)

    def test_empty_source_string_is_kept(self):
        assembler = MetainfoAssembler(announce="", clock=lambda: 0)
        data = assembler.assemble("x", [FileRecord(path=("x",), length=1)], 4, [PIECE1]).data
        assert decode(data)[b"info"][b"source"] == b""

    def test_entropy_varies_between_builds(self):
        assembler = MetainfoAssembler(announce="a", rng=random.Random(7))
        records = [FileRecord(path=("x",), length=1)]
        values = {
            decode(assembler.assemble("x", records, 4, [PIECE1]).data)[b"info"][b"entropy"]
            for _ in range(5)
        }
        assert len(values) > 1

    def test_no_records(self, assembler):
        with pytest.raises(EmptyInputError):
            assembler.assemble("x", [], 4, [])

    def test_only_empty_files(self, assembler):
        with pytest.raises(EmptyInputError):
            assembler.assemble("x", [FileRecord(path=("x",), length=0)], 4, [])

    @pytest.mark.parametrize("piece_length", [0, -4])
    def test_invalid_piece_length(self, assembler, piece_length):
        with pytest.raises(InvalidPieceLengthError):
            assembler.assemble("x", [FileRecord(path=("x",), length=5)], piece_length, [PIECE0])

    def test_digest_count_mismatch(self, assembler):
        with pytest.raises(TorrentError):
            assembler.assemble("x", [FileRecord(path=("x",), length=5)], 4, [PIECE0])

    def test_bad_digest_size(self, assembler):
        with pytest.raises(TorrentError):
            assembler.assemble("x", [FileRecord(path=("x",), length=5)], 4, [PIECE0, b"short"])


class TestFileRecord:
    """FileRecord validation."""

    def test_immutable(self):
        record = FileRecord(path=("a",), length=1)
        with pytest.raises(Exception):
            record.length = 2

    @pytest.mark.parametrize("path", [(), ("",), ("a", ".."), (".",)])
    def test_invalid_path(self, path):
        with pytest.raises(ValueError):
            FileRecord(path=path, length=1)

    def test_negative_length(self):
        with pytest.raises(ValueError):
            FileRecord(path=("a",), length=-1)
