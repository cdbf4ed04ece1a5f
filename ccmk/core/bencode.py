"""Bencode encoding and decoding.

The value model is byte-native: every string value is written as its raw
bytes, so binary values such as concatenated piece digests are emitted
verbatim at their sorted key position.
"""

from __future__ import annotations

from typing import Any

from ccmk.utils.exceptions import BencodeDecodeError, BencodeEncodeError

_DIGITS = b"0123456789"

# Deepest list/dict nesting the decoder accepts
MAX_DEPTH = 256


class BencodeEncoder:
    """Canonical bencode encoder."""

    def encode(self, value: Any) -> bytes:
        """Encode a value tree to bencoded bytes."""
        out = bytearray()
        self._encode(value, out)
        return bytes(out)

    def _encode(self, value: Any, out: bytearray) -> None:
        # bool is an int subclass but has no bencode form
        if isinstance(value, bool):
            msg = f"Cannot encode bool value: {value!r}"
            raise BencodeEncodeError(msg)
        if isinstance(value, int):
            out += b"i%de" % value
        elif isinstance(value, (bytes, bytearray, memoryview)):
            raw = bytes(value)
            out += b"%d:" % len(raw)
            out += raw
        elif isinstance(value, str):
            raw = value.encode("utf-8")
            out += b"%d:" % len(raw)
            out += raw
        elif isinstance(value, (list, tuple)):
            out += b"l"
            for item in value:
                self._encode(item, out)
            out += b"e"
        elif isinstance(value, dict):
            self._encode_dict(value, out)
        else:
            msg = f"Cannot encode type: {type(value).__name__}"
            raise BencodeEncodeError(msg)

    def _encode_dict(self, value: dict[Any, Any], out: bytearray) -> None:
        items: dict[bytes, Any] = {}
        for key, item in value.items():
            if isinstance(key, str):
                raw_key = key.encode("utf-8")
            elif isinstance(key, (bytes, bytearray)):
                raw_key = bytes(key)
            else:
                msg = f"Dictionary keys must be str or bytes, got {type(key).__name__}"
                raise BencodeEncodeError(msg)
            if raw_key in items:
                msg = f"Duplicate dictionary key: {raw_key!r}"
                raise BencodeEncodeError(msg)
            items[raw_key] = item

        out += b"d"
        for raw_key in sorted(items):
            out += b"%d:" % len(raw_key)
            out += raw_key
            self._encode(items[raw_key], out)
        out += b"e"


class BencodeDecoder:
    """Strict bencode decoder.

    Rejects anything a canonical encoder would not produce: leading zeros,
    negative zero, unsorted or duplicate dictionary keys and trailing data.
    """

    def __init__(self, data: bytes):
        """Initialize decoder over ``data``."""
        self.data = bytes(data)
        self.pos = 0
        self.depth = 0

    def decode(self) -> Any:
        """Decode the whole buffer as a single value."""
        if not self.data:
            msg = "Empty input"
            raise BencodeDecodeError(msg)
        value = self._decode_value()
        if self.pos != len(self.data):
            msg = f"Trailing data at offset {self.pos}"
            raise BencodeDecodeError(msg)
        return value

    def _peek(self) -> int:
        if self.pos >= len(self.data):
            msg = "Unexpected end of data"
            raise BencodeDecodeError(msg)
        return self.data[self.pos]

    def _decode_value(self) -> Any:
        token = self._peek()
        if token == ord("i"):
            return self._decode_int()
        if token == ord("l"):
            return self._decode_list()
        if token == ord("d"):
            return self._decode_dict()
        if token in _DIGITS:
            return self._decode_bytes()
        msg = f"Invalid token {bytes([token])!r} at offset {self.pos}"
        raise BencodeDecodeError(msg)

    def _decode_int(self) -> int:
        end = self.data.find(b"e", self.pos)
        if end == -1:
            msg = f"Unterminated integer at offset {self.pos}"
            raise BencodeDecodeError(msg)
        body = self.data[self.pos + 1 : end]
        digits = body[1:] if body.startswith(b"-") else body
        if not digits or any(c not in _DIGITS for c in digits):
            msg = f"Invalid integer {body!r} at offset {self.pos}"
            raise BencodeDecodeError(msg)
        if (len(digits) > 1 and digits[0] == ord("0")) or body == b"-0":
            msg = f"Non-canonical integer {body!r} at offset {self.pos}"
            raise BencodeDecodeError(msg)
        self.pos = end + 1
        return int(body)

    def _decode_bytes(self) -> bytes:
        colon = self.data.find(b":", self.pos)
        if colon == -1:
            msg = f"Missing ':' in string at offset {self.pos}"
            raise BencodeDecodeError(msg)
        prefix = self.data[self.pos : colon]
        if any(c not in _DIGITS for c in prefix):
            msg = f"Invalid string length {prefix!r} at offset {self.pos}"
            raise BencodeDecodeError(msg)
        if len(prefix) > 1 and prefix[0] == ord("0"):
            msg = f"Non-canonical string length {prefix!r} at offset {self.pos}"
            raise BencodeDecodeError(msg)
        length = int(prefix)
        start = colon + 1
        end = start + length
        if end > len(self.data):
            msg = f"String of length {length} at offset {self.pos} runs past end of data"
            raise BencodeDecodeError(msg)
        self.pos = end
        return self.data[start:end]

    def _enter(self) -> None:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            msg = f"Nesting deeper than {MAX_DEPTH} levels at offset {self.pos}"
            raise BencodeDecodeError(msg)
        self.pos += 1

    def _decode_list(self) -> list[Any]:
        self._enter()
        result = []
        while self._peek() != ord("e"):
            result.append(self._decode_value())
        self.pos += 1
        self.depth -= 1
        return result

    def _decode_dict(self) -> dict[bytes, Any]:
        self._enter()
        result: dict[bytes, Any] = {}
        previous: bytes | None = None
        while self._peek() != ord("e"):
            if self._peek() not in _DIGITS:
                msg = f"Dictionary key must be a string at offset {self.pos}"
                raise BencodeDecodeError(msg)
            key = self._decode_bytes()
            if previous is not None and key <= previous:
                msg = f"Dictionary key {key!r} is duplicated or out of order"
                raise BencodeDecodeError(msg)
            previous = key
            result[key] = self._decode_value()
        self.pos += 1
        self.depth -= 1
        return result


def encode(value: Any) -> bytes:
    """Encode a value to bencoded bytes."""
    return BencodeEncoder().encode(value)


def decode(data: bytes) -> Any:
    """Decode bencoded bytes to a value."""
    return BencodeDecoder(data).decode()


__all__ = [
    "BencodeDecodeError",
    "BencodeDecoder",
    "BencodeEncodeError",
    "BencodeEncoder",
    "decode",
    "encode",
]
