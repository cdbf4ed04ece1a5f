"""Byte sources feeding the torrent builder.

A byte source lists the input files in order and reads arbitrary byte ranges
from them. The builder only depends on the ``ByteSource`` protocol; the two
adapters here cover local paths and in-memory data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Protocol, Sequence, runtime_checkable

from ccmk.utils.exceptions import EmptyInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceEntry:
    """One input file: relative path segments and size in bytes.

    For multi-file sets the first segment names the common root folder.
    """

    segments: tuple[str, ...]
    size: int


@runtime_checkable
class ByteSource(Protocol):
    """Ordered input files with range reads."""

    def entries(self) -> Sequence[SourceEntry]:
        """Return input files in build order."""
        ...

    def read(self, index: int, offset: int, length: int) -> bytes:
        """Read ``length`` bytes of file ``index`` starting at ``offset``.

        Raises ``OSError`` when the range cannot be read.
        """
        ...


class InMemoryByteSource:
    """Byte source over in-memory buffers."""

    def __init__(self, files: Sequence[tuple[Sequence[str], bytes]]):
        self._entries = [
            SourceEntry(tuple(segments), len(data)) for segments, data in files
        ]
        self._data = [bytes(data) for _, data in files]

    def entries(self) -> Sequence[SourceEntry]:
        return list(self._entries)

    def read(self, index: int, offset: int, length: int) -> bytes:
        data = self._data[index]
        if offset < 0 or length < 0 or offset + length > len(data):
            msg = f"Range [{offset}, {offset + length}) outside file {index} of size {len(data)}"
            raise OSError(msg)
        return data[offset : offset + length]


class FilesystemByteSource:
    """Byte source over a local file or directory tree.

    A directory contributes every regular file below it, sorted by relative
    path, each prefixed with the directory name as root segment. Sizes are
    captured once at construction. The root is resolved first so that
    relative paths such as ``.`` still yield a named root folder.

    Reads run front to back, so one file handle is kept open at a time and
    released by ``close()`` or on leaving a ``with`` block.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()
        self._paths: list[Path] = []
        self._entries: list[SourceEntry] = []
        self._handle: BinaryIO | None = None
        self._handle_index = -1
        self._collect()

    def _collect(self) -> None:
        if self.root.is_file():
            self._paths.append(self.root)
            self._entries.append(SourceEntry((self.root.name,), self.root.stat().st_size))
        elif self.root.is_dir():
            files = sorted(
                (p for p in self.root.rglob("*") if p.is_file()),
                key=lambda p: p.relative_to(self.root).parts,
            )
            for path in files:
                rel = path.relative_to(self.root)
                self._paths.append(path)
                self._entries.append(
                    SourceEntry((self.root.name, *rel.parts), path.stat().st_size)
                )
        else:
            msg = f"Source path is neither file nor directory: {self.root}"
            raise EmptyInputError(msg, {"path": str(self.root)})

        logger.debug("Collected %d files under %s", len(self._entries), self.root)

    def entries(self) -> Sequence[SourceEntry]:
        return list(self._entries)

    def read(self, index: int, offset: int, length: int) -> bytes:
        handle = self._handle
        if handle is None or index != self._handle_index:
            self.close()
            handle = open(self._paths[index], "rb")  # noqa: SIM115
            self._handle = handle
            self._handle_index = index
        handle.seek(offset)
        return handle.read(length)

    def close(self) -> None:
        """Close the cached file handle, if any."""
        if self._handle is not None:
            self._handle.close()
        self._handle = None
        self._handle_index = -1

    def __enter__(self) -> FilesystemByteSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
