"""Property-based tests for piece aggregation and hashing."""

import hashlib

from hypothesis import given, settings
from hypothesis import strategies as st

from ccmk.core.bencode import decode
from ccmk.core.builder import TorrentBuilder
from ccmk.models import BuilderConfig
from ccmk.piece.aggregator import PieceAggregator, expected_piece_count
from ccmk.piece.hasher import PieceHasher
from ccmk.storage.byte_source import InMemoryByteSource

file_sets = st.lists(st.binary(max_size=64), min_size=1, max_size=6)
piece_lengths = st.integers(min_value=1, max_value=40)


def _source(blobs):
    return InMemoryByteSource(
        [(("root", f"f{i}.bin"), blob) for i, blob in enumerate(blobs)]
    )


class TestPieceProperties:
    """Piece count, sizes and byte conservation."""

    @given(file_sets, piece_lengths)
    def test_pieces_cover_concatenation(self, blobs, piece_length):
        pieces = list(PieceAggregator(piece_length).iter_pieces(_source(blobs)))
        total = sum(len(b) for b in blobs)

        assert b"".join(pieces) == b"".join(blobs)
        assert len(pieces) == expected_piece_count(total, piece_length)
        assert all(len(p) == piece_length for p in pieces[:-1])
        if pieces:
            assert len(pieces[-1]) == (total % piece_length or piece_length)

    @settings(max_examples=30)
    @given(st.lists(st.binary(max_size=32), max_size=30), st.integers(min_value=2, max_value=6))
    def test_parallel_equals_serial(self, pieces, workers):
        assert PieceHasher(workers=workers).hash_pieces(pieces) == PieceHasher().hash_pieces(pieces)

    @given(file_sets.filter(lambda blobs: sum(map(len, blobs)) > 0), piece_lengths)
    def test_built_torrent_digests(self, blobs, piece_length):
        metainfo = TorrentBuilder(BuilderConfig()).build(_source(blobs), piece_length=piece_length)
        info = decode(metainfo.data)[b"info"]
        data = b"".join(blobs)
        expected = b"".join(
            hashlib.sha1(data[i : i + piece_length]).digest()
            for i in range(0, len(data), piece_length)
        )
        assert info[b"pieces"] == expected
        if len(blobs) == 1:
            assert info[b"length"] == len(data) and b"files" not in info
        else:
            assert b"length" not in info
            assert [f[b"length"] for f in info[b"files"]] == [len(b) for b in blobs]
