"""SHA-1 piece hashing.

Digests are independent per piece and may be computed on a thread pool
(``hashlib`` releases the GIL on large buffers). Results go into a slot per
piece index so output order never depends on completion order.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Iterable

from ccmk.utils.exceptions import BuildCancelledError, HashComputationError

logger = logging.getLogger(__name__)

DIGEST_SIZE = 20

PieceCallback = Callable[[int, bytes], None]


def sha1_digest(piece: bytes) -> bytes:
    """Digest one piece, wrapping backend failures."""
    try:
        digest = hashlib.sha1(piece).digest()  # nosec B324 - SHA-1 required by BitTorrent v1
    except (ValueError, TypeError, MemoryError) as e:
        msg = f"SHA-1 computation failed: {e}"
        raise HashComputationError(msg) from e
    if len(digest) != DIGEST_SIZE:
        msg = f"SHA-1 backend returned {len(digest)} bytes"
        raise HashComputationError(msg)
    return digest


class PieceHasher:
    """Computes one 20-byte digest per piece, in piece order."""

    def __init__(
        self,
        workers: int = 1,
        digest_func: Callable[[bytes], bytes] = sha1_digest,
    ):
        if workers < 1:
            msg = f"workers must be at least 1, got {workers}"
            raise ValueError(msg)
        self.workers = workers
        self.digest_func = digest_func

    def hash_pieces(
        self,
        pieces: Iterable[bytes],
        cancel_event: threading.Event | None = None,
        on_piece: PieceCallback | None = None,
    ) -> list[bytes]:
        """Hash ``pieces`` and return their digests in index order.

        Args:
            pieces: Pieces in index order; consumed lazily
            cancel_event: Checked between pieces; when set the build aborts
            on_piece: Called with ``(index, digest)`` as each digest lands

        Raises:
            BuildCancelledError: ``cancel_event`` was set
            HashComputationError: The digest backend failed

        """
        if self.workers == 1:
            return self._hash_serial(pieces, cancel_event, on_piece)
        return self._hash_parallel(pieces, cancel_event, on_piece)

    def _digest(self, piece: bytes) -> bytes:
        try:
            digest = self.digest_func(piece)
        except HashComputationError:
            raise
        except Exception as e:
            msg = f"Digest computation failed: {e}"
            raise HashComputationError(msg) from e
        if len(digest) != DIGEST_SIZE:
            msg = f"Digest must be {DIGEST_SIZE} bytes, got {len(digest)}"
            raise HashComputationError(msg)
        return digest

    def _hash_serial(
        self,
        pieces: Iterable[bytes],
        cancel_event: threading.Event | None,
        on_piece: PieceCallback | None,
    ) -> list[bytes]:
        digests: list[bytes] = []
        for index, piece in enumerate(pieces):
            _check_cancelled(cancel_event, index)
            digest = self._digest(piece)
            digests.append(digest)
            if on_piece is not None:
                on_piece(index, digest)
        return digests

    def _hash_parallel(
        self,
        pieces: Iterable[bytes],
        cancel_event: threading.Event | None,
        on_piece: PieceCallback | None,
    ) -> list[bytes]:
        slots: list[bytes | None] = []
        in_flight: dict[Future[bytes], int] = {}
        max_in_flight = self.workers * 2

        def _collect(done: Iterable[Future[bytes]]) -> None:
            for future in done:
                index = in_flight.pop(future)
                digest = future.result()
                slots[index] = digest
                if on_piece is not None:
                    on_piece(index, digest)

        executor = ThreadPoolExecutor(
            max_workers=self.workers,
            thread_name_prefix="piece-hash",
        )
        try:
            for index, piece in enumerate(pieces):
                _check_cancelled(cancel_event, index)
                slots.append(None)
                in_flight[executor.submit(self._digest, piece)] = index
                if len(in_flight) >= max_in_flight:
                    done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                    _collect(done)

            while in_flight:
                _check_cancelled(cancel_event, len(slots))
                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                _collect(done)
        finally:
            # Pending digests of a failed or cancelled build are dropped
            executor.shutdown(wait=True, cancel_futures=True)

        missing = [i for i, digest in enumerate(slots) if digest is None]
        if missing:
            msg = f"{len(missing)} pieces have no digest"
            raise HashComputationError(msg, {"first_missing": missing[0]})
        return [digest for digest in slots if digest is not None]


def _check_cancelled(cancel_event: threading.Event | None, index: int) -> None:
    if cancel_event is not None and cancel_event.is_set():
        msg = f"Build cancelled before piece {index}"
        raise BuildCancelledError(msg, {"piece_index": index})
