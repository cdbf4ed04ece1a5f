"""Piece aggregation and hashing."""

from __future__ import annotations

from ccmk.piece.aggregator import (
    AggregatorState,
    PieceAggregator,
    expected_piece_count,
)
from ccmk.piece.hasher import DIGEST_SIZE, PieceHasher

__all__ = [
    "DIGEST_SIZE",
    "AggregatorState",
    "PieceAggregator",
    "PieceHasher",
    "expected_piece_count",
]
