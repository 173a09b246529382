from struct import calcsize, unpack_from
from typing import Tuple

from loguru import logger

from .errors import InvalidChunkError, TruncatedInputError


class ChunkView:
    """
    Read-only window over the bytes of a single chunk.

    Offsets passed to the read methods are relative to the start of the
    chunk, every read names its own position. Reading past the declared
    extent of the chunk, or past the end of the input, raises a
    [TruncatedInputError][axmltext.errors.TruncatedInputError].
    """

    def __init__(self, data: memoryview, start: int, end: int) -> None:
        self._data = data
        self.start = start
        self.end = end

    def __len__(self) -> int:
        return self.end - self.start

    def __repr__(self):
        return "<ChunkView start='0x{:08x}' end='0x{:08x}'>".format(self.start, self.end)

    def unpack(self, fmt: str, offset: int) -> Tuple:
        """
        Unpack a little-endian record at `offset` inside the chunk.

        :param fmt: struct format without byte order character
        :param offset: position relative to the chunk start
        :raises TruncatedInputError: if the record does not fit
        """
        fmt = "<" + fmt
        needed = calcsize(fmt)
        position = self.start + offset
        limit = min(self.end, len(self._data))
        if offset < 0 or position + needed > limit:
            raise TruncatedInputError(position, needed, max(limit - position, 0))
        return unpack_from(fmt, self._data, position)

    def u16(self, offset: int) -> int:
        return self.unpack("H", offset)[0]

    def u32(self, offset: int) -> int:
        return self.unpack("L", offset)[0]

    def read(self, offset: int, length: int) -> bytes:
        """
        Return `length` raw bytes starting at `offset` inside the chunk.
        """
        position = self.start + offset
        limit = min(self.end, len(self._data))
        if offset < 0 or length < 0 or position + length > limit:
            raise TruncatedInputError(position, length, max(limit - position, 0))
        return bytes(self._data[position : position + length])


class ChunkHeader:
    """
    Object which contains a Resource Chunk header.
    This is an implementation of the `ResChunk_header`.

    It will throw an [InvalidChunkError][axmltext.errors.InvalidChunkError] if
    the declared sizes can not describe a chunk, and a
    [TruncatedInputError][axmltext.errors.TruncatedInputError] if the header
    itself is cut off.

    See http://androidxref.com/9.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#196
    """

    # This is the minimal size such a header must have. There might be other header data too!
    SIZE = 2 + 2 + 4

    def __init__(self, data: memoryview, offset: int) -> None:
        """
        :param data: the whole input
        :param offset: absolute position where the header starts
        """
        self.start = offset
        available = len(data) - offset
        if available < self.SIZE:
            raise TruncatedInputError(offset, self.SIZE, max(available, 0))

        self._type, self._header_size, self._size = unpack_from('<HHL', data, offset)
        logger.debug(f"ChunkHeader: {self._type:#06x}, {self._header_size} {self._size}")

        # Assert that the read data will fit into the chunk.
        # The total size must be equal or larger than the header size
        if self._header_size < self.SIZE:
            raise InvalidChunkError(
                "declared header size is smaller than required size of {}".format(self.SIZE),
                self._header_size,
                self._size,
                offset,
            )
        if self._size < self._header_size:
            raise InvalidChunkError(
                "declared chunk size is smaller than header size",
                self._header_size,
                self._size,
                offset,
            )

        self._data = data

    def get_type(self) -> int:
        """
        Type identifier for this chunk
        """
        return self._type

    def get_header_size(self) -> int:
        """
        Size of the chunk header (in bytes).  Adding this value to
        the address of the chunk allows you to find its associated data
        (if any).
        """
        return self._header_size

    def get_size(self) -> int:
        """
        Total size of this chunk (in bytes).  Adding this value
        to the chunk allows you to completely skip its contents (including
        any child chunks).
        """
        return self._size

    def get_end(self) -> int:
        """
        Get the absolute offset inside the file, where the chunk ends.
        This is equal to `ChunkHeader.start + ChunkHeader.get_size()`.
        """
        return self.start + self._size

    def view(self) -> ChunkView:
        """
        A [ChunkView][axmltext.chunk.ChunkView] over the declared extent of this chunk.
        """
        return ChunkView(self._data, self.start, self.get_end())

    def __repr__(self):
        return "<ChunkHeader idx='0x{:08x}' type='0x{:04x}' header_size='{}' size='{}'>".format(
            self.start, self.get_type(), self.get_header_size(), self.get_size()
        )
