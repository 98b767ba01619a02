"""
Tagged, length-prefixed binary records: the unit every IFF-family format is
built from. A chunk is sized up front; its payload is appended in order.
"""
import struct

from samplerkit.core.errors import ChunkOverflowError

HEADER_SIZE = 8  # 4-byte tag + 4-byte length


class Chunk:
    """
    Fixed-size chunk writer. Writes the tag and declared payload length on
    construction; every set_* call appends at the cursor.
    Big-endian by default (IFF/AIFF); pass little_endian=True for RIFF.
    """

    def __init__(self, tag: str, length: int, little_endian: bool = False):
        if len(tag) != 4 or not tag.isascii():
            raise ValueError(f"chunk tag must be 4 ASCII characters, got {tag!r}")
        if length < 0:
            raise ValueError(f"chunk length must be non-negative, got {length}")
        self.tag = tag
        self.length = length
        self.little_endian = little_endian
        self._order = "<" if little_endian else ">"
        self._data = bytearray(HEADER_SIZE + length)
        self._offset = 0

        self._write_string(tag)
        self._pack("I", length)

    @property
    def offset(self) -> int:
        """Cursor position, counted from the start of the header."""
        return self._offset

    @property
    def byte_length(self) -> int:
        """Header plus payload."""
        return len(self._data)

    @property
    def is_complete(self) -> bool:
        return self._offset == len(self._data)

    @property
    def data(self) -> bytes:
        return bytes(self._data)

    @property
    def pad_size(self) -> int:
        """RIFF word alignment: one zero byte follows an odd-length payload."""
        return self.length & 1

    @property
    def padded_data(self) -> bytes:
        """Header and payload plus the alignment byte; the declared length excludes it."""
        return bytes(self._data) + b"\x00" * self.pad_size

    def _reserve(self, size: int) -> int:
        start = self._offset
        if start + size > len(self._data):
            raise ChunkOverflowError(
                f"'{self.tag}' chunk overflow: writing {size} bytes at offset {start - HEADER_SIZE} "
                f"of a {self.length}-byte payload"
            )
        self._offset += size
        return start

    def _pack(self, fmt: str, value: int) -> None:
        size = struct.calcsize(fmt)
        struct.pack_into(self._order + fmt, self._data, self._reserve(size), value)

    def _write_string(self, value: str) -> None:
        # one byte per character, truncated like a Uint8 store
        encoded = bytes(ord(c) & 0xFF for c in value)
        start = self._reserve(len(encoded))
        self._data[start:start + len(encoded)] = encoded

    def set_string(self, value: str) -> None:
        self._write_string(value)

    def set_uint8(self, value: int) -> None:
        self._pack("B", value)

    def set_uint16(self, value: int) -> None:
        self._pack("H", value)

    def set_uint32(self, value: int) -> None:
        self._pack("I", value)

    def set_int16(self, value: int) -> None:
        self._pack("h", value)

    def set_bytes(self, value: bytes) -> None:
        """Append raw bytes (already in the chunk's byte order)."""
        start = self._reserve(len(value))
        self._data[start:start + len(value)] = value

    def __repr__(self) -> str:
        return f"Chunk({self.tag!r}, length={self.length}, written={self._offset - HEADER_SIZE})"


def total_size(chunks, padded: bool = False) -> int:
    """Sum of header+payload sizes of the given chunks, with alignment bytes if padded."""
    return sum(chunk.byte_length + (chunk.pad_size if padded else 0) for chunk in chunks)


def wrapper_header(tag: str, declared_length: int, form_type: str, little_endian: bool = False) -> bytes:
    """
    Outer container header (RIFF/FORM): tag, declared length, form type.
    The declared length is computed by the caller from the finished inner chunks.
    """
    order = "<" if little_endian else ">"
    return tag.encode("ascii") + struct.pack(order + "I", declared_length) + form_type.encode("ascii")
