from struct import unpack
from typing import Dict, Iterator, List, Tuple

from loguru import logger

from .chunk import ChunkView
from .errors import InvalidReferenceError, StringPoolError
from .internal_types import UTF8_FLAG


class StringPool:
    """
    StringPool is a CHUNK inside an AXML File: `ResStringPool_header`
    It contains all strings, which are used by referencing to ID's

    See http://androidxref.com/9.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#436
    """

    def __init__(self, view: ChunkView, header_size: int) -> None:
        """
        :param view: the chunk holding the string pool, header included
        :param header_size: declared header size of the chunk
        """
        self._cache: Dict[int, str] = {}
        self.view = view

        self.stringCount, self.styleCount, self.flags, self.stringsOffset, self.stylesOffset = view.unpack(
            "5L", 8
        )
        self.m_isUTF8 = (self.flags & UTF8_FLAG) != 0

        logger.debug(f"stringCount: {self.stringCount}")
        logger.debug(f"styleCount: {self.styleCount}")
        logger.debug(f"flags: {self.flags}")
        logger.debug(f"m_isUTF8: {self.m_isUTF8}")
        logger.debug(f"stringsOffset: {self.stringsOffset}")
        logger.debug(f"stylesOffset: {self.stylesOffset}")

        # check if the stringCount is correct
        if self.stringsOffset != 0:
            counted = (self.stringsOffset - (self.styleCount * 4 + header_size)) // 4
            if counted != self.stringCount and 0 <= counted:
                logger.warning(
                    "Declared string count {} does not match the offset table, using {}".format(
                        self.stringCount, counted
                    )
                )
                self.stringCount = counted

        # Check if they supplied a stylesOffset even if the count is 0:
        if self.styleCount == 0 and self.stylesOffset > 0:
            logger.info(
                "Styles Offset given, but styleCount is zero. "
                "This is not a problem but could indicate packers."
            )

        # Next, there is a list of string following.
        # This is only a list of offsets (4 byte each)
        self.m_stringOffsets: List[int] = list(
            view.unpack("{}L".format(self.stringCount), header_size)
        )
        # And a list of styles
        # again, a list of offsets
        self.m_styleOffsets: List[int] = list(
            view.unpack("{}L".format(self.styleCount), header_size + self.stringCount * 4)
        )

        self.m_charbuff = b""
        if self.stringCount > 0:
            size = len(view) - self.stringsOffset

            # if there are styles as well, we do not want to read them too.
            if self.stylesOffset != 0 and self.styleCount != 0:
                size = self.stylesOffset - self.stringsOffset

            if (size % 4) != 0:
                logger.warning("Size of strings is not aligned by four bytes.")

            self.m_charbuff = view.read(self.stringsOffset, size)

        for i in range(self.stringCount):
            self.get_string(i)

    @classmethod
    def parse(cls, view: ChunkView) -> "StringPool":
        """
        Parse the string pool chunk covered by `view`.
        """
        return cls(view, view.u16(2))

    def __repr__(self):
        return "<StringPool #strings={}, #styles={}, UTF8={}>".format(
            self.stringCount, self.styleCount, self.m_isUTF8
        )

    def __getitem__(self, idx: int) -> str:
        return self.get_string(idx)

    def __len__(self) -> int:
        """
        Get the number of strings stored in this table
        """
        return self.stringCount

    def __iter__(self) -> Iterator[str]:
        for i in range(self.stringCount):
            yield self.get_string(i)

    def has_string(self, idx: int) -> bool:
        """
        Tell if `idx` is a valid index into this pool.
        """
        return 0 <= idx < self.stringCount

    def get_string(self, idx: int) -> str:
        """
        Return the string at the index in the string table

        :param idx: index in the string table
        :raises InvalidReferenceError: if the pool has no string at `idx`
        :return: the string
        """
        if idx in self._cache:
            return self._cache[idx]

        if not self.has_string(idx):
            raise InvalidReferenceError(idx)

        offset = self.m_stringOffsets[idx]

        if self.m_isUTF8:
            self._cache[idx] = self._decode8(offset)
        else:
            self._cache[idx] = self._decode16(offset)
        logger.debug(f"get_string: {idx}: {self._cache[idx]!r}")

        return self._cache[idx]

    def _decode8(self, offset: int) -> str:
        """
        Decode an UTF-8 String at the given offset

        :param offset: offset of the string inside the data
        :return: the decoded string
        """
        # UTF-8 Strings contain two lengths, as they might differ:
        # 1) the UTF-16 length
        str_len, skip = self._decode_length(offset, 1)
        offset += skip

        # 2) the utf-8 string length
        encoded_bytes, skip = self._decode_length(offset, 1)
        offset += skip

        # platform/frameworks/base/libs/androidfw/ResourceTypes.cpp#789
        if len(self.m_charbuff) <= (offset + encoded_bytes):
            raise StringPoolError(
                "String size: {} is exceeding string pool size.".format(offset + encoded_bytes)
            )
        data = self.m_charbuff[offset : offset + encoded_bytes]

        if self.m_charbuff[offset + encoded_bytes] != 0:
            logger.warning(
                "UTF-8 String is not null terminated! At offset={}".format(offset)
            )
            return ""

        return self._decode_bytes(data, 'utf-8', str_len)

    def _decode16(self, offset: int) -> str:
        """
        Decode an UTF-16 String at the given offset

        :param offset: offset of the string inside the data
        :raises StringPoolError: if string is not null terminated
        :return: the decoded string
        """
        str_len, skip = self._decode_length(offset, 2)
        offset += skip

        # The len is the string len in utf-16 units
        encoded_bytes = str_len * 2

        if len(self.m_charbuff) < (offset + encoded_bytes + 2):
            raise StringPoolError(
                "String size: {} is exceeding string pool size.".format(offset + encoded_bytes)
            )

        data = self.m_charbuff[offset : offset + encoded_bytes]

        if self.m_charbuff[offset + encoded_bytes : offset + encoded_bytes + 2] != b"\x00\x00":
            raise StringPoolError(
                "UTF-16 String is not null terminated! At offset={}".format(offset)
            )

        return self._decode_bytes(data, 'utf-16-le', str_len)

    @staticmethod
    def _decode_bytes(data: bytes, encoding: str, str_len: int) -> str:
        """
        The string is decoded from bytes with the given encoding using the
        "replace" method, then the length of the string is checked.
        """
        string = data.decode(encoding, 'replace')
        if len(string) != str_len:
            logger.warning("invalid decoded string length")
        return string

    def _decode_length(self, offset: int, sizeof_char: int) -> Tuple[int, int]:
        """
        Generic Length Decoding at offset of string

        The method works for both 8 and 16 bit Strings.
        Length checks are enforced:
        * 8 bit strings: maximum of 0x7FFF bytes (See
        http://androidxref.com/9.0.0_r3/xref/frameworks/base/libs/androidfw/ResourceTypes.cpp#692)
        * 16 bit strings: maximum of 0x7FFFFFF bytes (See
        http://androidxref.com/9.0.0_r3/xref/frameworks/base/libs/androidfw/ResourceTypes.cpp#670)

        :param offset: offset into the string data section of the beginning of
        the string
        :param sizeof_char: number of bytes per char (1 = 8bit, 2 = 16bit)
        :returns: tuple of (length, read bytes)
        """
        sizeof_2chars = sizeof_char << 1
        fmt = "<2{}".format('B' if sizeof_char == 1 else 'H')
        highbit = 0x80 << (8 * (sizeof_char - 1))

        if offset < 0 or len(self.m_charbuff) < offset + sizeof_2chars:
            raise StringPoolError(
                "String length at offset={} is outside of the string pool".format(offset)
            )
        length1, length2 = unpack(fmt, self.m_charbuff[offset : (offset + sizeof_2chars)])

        if (length1 & highbit) != 0:
            length = ((length1 & ~highbit) << (8 * sizeof_char)) | length2
            size = sizeof_2chars
        else:
            length = length1
            size = sizeof_char

        if sizeof_char == 1 and length > 0x7FFF:
            raise StringPoolError(
                "length of UTF-8 string is too large! At offset={}".format(offset)
            )
        if sizeof_char == 2 and length > 0x7FFFFFFF:
            raise StringPoolError(
                "length of UTF-16 string is too large!  At offset={}".format(offset)
            )

        return length, size
