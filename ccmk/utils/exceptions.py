"""Exception hierarchy for ccmk.

Every failure a build can hit surfaces as a subclass of ``BuildError`` so
callers can treat them as a single "no torrent produced" outcome.
"""

from __future__ import annotations

from typing import Any


class CCMKError(Exception):
    """Base exception for all ccmk errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize ccmk error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class BuildError(CCMKError):
    """A torrent build failed and produced no output."""


class PieceReadError(BuildError):
    """A file could not be read at the requested range."""


class EmptyInputError(BuildError):
    """No input files were supplied."""


class InvalidPieceLengthError(BuildError):
    """Piece length is missing, non-positive or not an integer."""


class HashComputationError(BuildError):
    """The digest backend failed."""


class BuildCancelledError(BuildError):
    """The build was cancelled between pieces."""


class ValidationError(CCMKError):
    """Data validation errors."""


class ConfigurationError(ValidationError):
    """Configuration validation errors."""


class TorrentError(ValidationError):
    """Torrent metainfo validation errors."""


class BencodeError(ValidationError):
    """Bencode encoding/decoding errors."""


class BencodeEncodeError(BencodeError):
    """Value cannot be bencoded."""


class BencodeDecodeError(BencodeError):
    """Input is not canonical bencode."""
