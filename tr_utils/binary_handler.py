"""
Read-only binary cursor shared by the level decoders.

Every read is little-endian and bounds-checked; running past the end of the
buffer raises UnexpectedEof rather than returning short data.
"""

import struct
from typing import Any, Union, Tuple

from tr_utils.errors import UnexpectedEof


class BinaryHandler:

    def __init__(self, data: Union[bytes, bytearray, memoryview], offset: int = 0, file_path: str = ""):
        self.data = bytes(data) if not isinstance(data, bytes) else data
        self.position = 0
        self.offset = offset
        self.file_path = file_path

    @property
    def tell(self) -> int:
        """Get current position in file."""
        return self.offset + self.position

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    def seek(self, pos: int):
        """Seek to absolute position."""
        if pos < 0:
            raise ValueError(f"Cannot seek to negative position: {pos}")
        self.position = pos - self.offset

    def _require(self, count: int):
        available = self.remaining
        if available < count:
            raise UnexpectedEof(
                f"Attempted to read {count} bytes but only {available} bytes available",
                offset=self.tell,
                needed=count,
                available=available,
            )

    def skip(self, count: int):
        self._require(count)
        self.position += count

    def align(self, alignment: int):
        padding = (alignment - (self.position % alignment)) % alignment
        if padding > 0:
            self.skip(min(padding, self.remaining))

    def read(self, fmt: str) -> Any:
        result = self._unpack_many(fmt)
        return result[0] if len(result) == 1 else result

    def read_array(self, fmt: str, count: int) -> Tuple:
        """Unpack `count` consecutive values of one scalar format in a single call."""
        if count == 0:
            return ()
        return tuple(self._unpack_many(f"<{count}{fmt.lstrip('<')}"))

    def _unpack_many(self, fmt: str) -> Tuple:
        size = struct.calcsize(fmt)
        self._require(size)
        result = struct.unpack_from(fmt, self.data, self.position)
        self.position += size
        return result

    def read_bytes(self, count: int) -> bytes:
        self._require(count)
        result = self.data[self.position:self.position + count]
        self.position += count
        return result

    def sub_handler(self, count: int) -> "BinaryHandler":
        """Carve the next `count` bytes into an independent cursor and step past them."""
        start = self.tell
        return BinaryHandler(self.read_bytes(count), offset=start, file_path=self.file_path)

    def read_uint8(self) -> int:
        return self.read('<B')

    def read_int8(self) -> int:
        return self.read('<b')

    def read_uint16(self) -> int:
        return self.read('<H')

    def read_int16(self) -> int:
        return self.read('<h')

    def read_int32(self) -> int:
        return self.read('<i')

    def read_uint32(self) -> int:
        return self.read('<I')

    def read_float(self) -> float:
        return self.read('<f')
