"""String and blob storage section of a PRI file."""

from __future__ import annotations

import struct
from typing import BinaryIO, ClassVar, NamedTuple


class _Span(NamedTuple):
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


def _unpack(stream: BinaryIO, fmt: str) -> tuple:
    size = struct.calcsize(fmt)
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return struct.unpack(fmt, data)


class DataItem:
    """A table of NUL-terminated UTF-8 strings followed by raw blobs."""

    IDENTIFIER: ClassVar[bytes] = b"[mrm_dataitem] \0"

    def __init__(self) -> None:
        self._string_spans: list[_Span] = []
        self._string_data = bytearray()
        self._blob_spans: list[_Span] = []
        self._blob_data = bytearray()

    @classmethod
    def read(cls, stream: BinaryIO) -> DataItem:
        """Parse a data item section body from a binary stream."""
        (reserved,) = _unpack(stream, "<I")
        if reserved != 0:
            raise ValueError("data item section must start with a zero word")
        num_strings, num_blobs, total_length = _unpack(stream, "<HHI")
        string_spans = [_Span(*_unpack(stream, "<HH")) for _ in range(num_strings)]
        string_length = string_spans[-1].end if string_spans else 0
        blob_spans = []
        for _ in range(num_blobs):
            offset, length = _unpack(stream, "<II")
            if offset < string_length:
                raise ValueError("blob offset points into string data")
            blob_spans.append(_Span(offset - string_length, length))
        if total_length < string_length:
            raise ValueError("total data length is smaller than string data")
        item = cls()
        item._string_spans = string_spans
        item._blob_spans = blob_spans
        item._string_data = bytearray(stream.read(string_length))
        item._blob_data = bytearray(stream.read(total_length - string_length))
        return item

    def write(self, stream: BinaryIO) -> None:
        """Serialize the section body to a binary stream."""
        total = len(self._string_data) + len(self._blob_data)
        stream.write(
            struct.pack(
                "<IHHI",
                0,
                len(self._string_spans) & 0xFFFF,
                len(self._blob_spans) & 0xFFFF,
                total & 0xFFFFFFFF,
            )
        )
        for span in self._string_spans:
            stream.write(struct.pack("<HH", span.offset & 0xFFFF, span.length & 0xFFFF))
        base = len(self._string_data)
        for span in self._blob_spans:
            stream.write(
                struct.pack("<II", (span.offset + base) & 0xFFFFFFFF, span.length & 0xFFFFFFFF)
            )
        stream.write(bytes(self._string_data))
        stream.write(bytes(self._blob_data))

    def num_strings(self) -> int:
        return len(self._string_spans)

    def string(self, index: int) -> str | None:
        """Return the string at ``index``, or None if absent or not valid UTF-8."""
        if not 0 <= index < len(self._string_spans):
            return None
        span = self._string_spans[index]
        if span.length == 0 or span.end > len(self._string_data):
            return None
        try:
            return bytes(self._string_data[span.offset : span.end - 1]).decode("utf-8")
        except UnicodeDecodeError:
            return None

    def num_blobs(self) -> int:
        return len(self._blob_spans)

    def blob(self, index: int) -> bytes | None:
        """Return the blob at ``index``, or None if absent."""
        if not 0 <= index < len(self._blob_spans):
            return None
        span = self._blob_spans[index]
        if span.end > len(self._blob_data):
            return None
        return bytes(self._blob_data[span.offset : span.end])

    def add_string(self, text: str) -> int:
        """Append a string and return its index."""
        encoded = text.encode("utf-8")
        index = len(self._string_spans)
        self._string_spans.append(_Span(len(self._string_data), len(encoded) + 1))
        self._string_data += encoded
        self._string_data.append(0)
        return index

    def add_blob(self, blob: bytes) -> int:
        """Append a blob and return its index."""
        index = len(self._blob_spans)
        self._blob_spans.append(_Span(len(self._blob_data), len(blob)))
        self._blob_data += blob
        return index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataItem):
            return NotImplemented
        return (
            self._string_spans == other._string_spans
            and self._string_data == other._string_data
            and self._blob_spans == other._blob_spans
            and self._blob_data == other._blob_data
        )

    def __repr__(self) -> str:
        strings = [s for s in map(self.string, range(self.num_strings())) if s is not None]
        blobs = [b for b in map(self.blob, range(self.num_blobs())) if b is not None]
        return f"DataItem(strings={strings!r}, blobs={blobs!r})"