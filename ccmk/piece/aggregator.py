"""Piece aggregation across file boundaries.

The concatenated bytes of all input files are cut into fixed-size pieces.
A piece that is still being filled when a file ends keeps filling from the
next file; only the very last piece may be shorter than ``piece_length``.

The cursor lives in an immutable ``AggregatorState`` advanced by the pure
functions ``pending_read``, ``step`` and ``finish``. ``PieceAggregator`` is
the thin driver that performs the reads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, NamedTuple, Sequence

from ccmk.storage.byte_source import ByteSource
from ccmk.utils.exceptions import InvalidPieceLengthError, PieceReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregatorState:
    """Cursor over the concatenated input plus the piece being filled."""

    file_index: int = 0
    offset_in_file: int = 0
    accumulator: bytes = b""


class ReadRequest(NamedTuple):
    """Byte range the aggregator needs next."""

    file_index: int
    offset: int
    length: int


class StepResult(NamedTuple):
    """New state plus the piece completed by the step, if any."""

    state: AggregatorState
    piece: bytes | None


def validate_piece_length(piece_length: object) -> int:
    """Return ``piece_length`` if it is a positive int, else raise."""
    if isinstance(piece_length, bool) or not isinstance(piece_length, int):
        msg = f"Piece length must be an integer, got {piece_length!r}"
        raise InvalidPieceLengthError(msg)
    if piece_length <= 0:
        msg = f"Piece length must be positive, got {piece_length}"
        raise InvalidPieceLengthError(msg, {"piece_length": piece_length})
    return piece_length


def expected_piece_count(total_size: int, piece_length: int) -> int:
    """Number of pieces covering ``total_size`` bytes."""
    validate_piece_length(piece_length)
    return -(-total_size // piece_length)


def _skip_exhausted(file_index: int, offset: int, sizes: Sequence[int]) -> tuple[int, int]:
    while file_index < len(sizes) and offset >= sizes[file_index]:
        file_index += 1
        offset = 0
    return file_index, offset


def initial_state(sizes: Sequence[int]) -> AggregatorState:
    """State positioned at the first byte of the first non-empty file."""
    file_index, offset = _skip_exhausted(0, 0, sizes)
    return AggregatorState(file_index, offset, b"")


def pending_read(
    state: AggregatorState, sizes: Sequence[int], piece_length: int
) -> ReadRequest | None:
    """Range to read next, or ``None`` once every file is consumed."""
    if state.file_index >= len(sizes):
        return None
    remaining_in_file = sizes[state.file_index] - state.offset_in_file
    wanted = piece_length - len(state.accumulator)
    return ReadRequest(state.file_index, state.offset_in_file, min(wanted, remaining_in_file))


def step(
    state: AggregatorState,
    sizes: Sequence[int],
    piece_length: int,
    data: bytes,
) -> StepResult:
    """Consume ``data`` for the current pending read."""
    request = pending_read(state, sizes, piece_length)
    if request is None:
        msg = "No read pending: all files are exhausted"
        raise PieceReadError(msg)
    if len(data) != request.length:
        msg = (
            f"Short read from file {request.file_index} at offset {request.offset}: "
            f"expected {request.length} bytes, got {len(data)}"
        )
        raise PieceReadError(
            msg,
            {"file_index": request.file_index, "offset": request.offset},
        )

    accumulator = state.accumulator + data
    piece = None
    if len(accumulator) == piece_length:
        piece = accumulator
        accumulator = b""

    file_index, offset = _skip_exhausted(
        state.file_index, state.offset_in_file + len(data), sizes
    )
    return StepResult(AggregatorState(file_index, offset, accumulator), piece)


def finish(state: AggregatorState) -> bytes | None:
    """The trailing short piece, if any bytes are left over."""
    return state.accumulator or None


class PieceAggregator:
    """Streams pieces from a byte source."""

    def __init__(self, piece_length: int):
        self.piece_length = validate_piece_length(piece_length)

    def iter_pieces(self, source: ByteSource) -> Iterator[bytes]:
        """Yield pieces in index order.

        Only the piece in progress is buffered. ``OSError`` from the source
        becomes ``PieceReadError``.
        """
        sizes = [entry.size for entry in source.entries()]
        state = initial_state(sizes)
        count = 0

        while (request := pending_read(state, sizes, self.piece_length)) is not None:
            try:
                data = source.read(*request)
            except OSError as e:
                msg = f"Failed to read file {request.file_index} at offset {request.offset}: {e}"
                raise PieceReadError(
                    msg,
                    {"file_index": request.file_index, "offset": request.offset},
                ) from e
            state, piece = step(state, sizes, self.piece_length, data)
            if piece is not None:
                count += 1
                yield piece

        tail = finish(state)
        if tail is not None:
            count += 1
            yield tail

        logger.debug("Aggregated %d pieces of %d bytes", count, self.piece_length)
