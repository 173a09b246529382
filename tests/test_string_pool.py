"""Unit tests for StringPool."""

from struct import pack
import unittest

from axmltext.chunk import ChunkHeader
from axmltext.errors import InvalidReferenceError, StringPoolError
from axmltext.string_pool import StringPool

from tests.axml_builder import string_pool


def parse(raw: bytes) -> StringPool:
    return StringPool.parse(ChunkHeader(memoryview(raw), 0).view())


class StringPoolTest(unittest.TestCase):
    """Tests for StringPool."""

    def test_utf16_strings(self) -> None:
        pool = parse(string_pool(["ns", "uri1", "", "résumé"]))

        self.assertFalse(pool.m_isUTF8)
        self.assertEqual(len(pool), 4)
        self.assertEqual(list(pool), ["ns", "uri1", "", "résumé"])

    def test_utf8_strings(self) -> None:
        long_value = "x" * 300
        pool = parse(string_pool(["manifest", "café", long_value], utf8=True))

        self.assertTrue(pool.m_isUTF8)
        self.assertEqual(pool.get_string(0), "manifest")
        self.assertEqual(pool.get_string(1), "café")
        self.assertEqual(pool[2], long_value)

    def test_has_string_checks_bounds(self) -> None:
        pool = parse(string_pool(["a", "b"]))

        self.assertTrue(pool.has_string(0))
        self.assertTrue(pool.has_string(1))
        self.assertFalse(pool.has_string(2))
        self.assertFalse(pool.has_string(0xFFFFFFFF))

    def test_invalid_index_raises_with_reference(self) -> None:
        pool = parse(string_pool(["a"]))

        with self.assertRaises(InvalidReferenceError) as ctx:
            pool.get_string(7)

        self.assertEqual(ctx.exception.ref, 7)
        self.assertIn("0x00000007", str(ctx.exception))

    def test_empty_pool(self) -> None:
        pool = parse(string_pool([]))

        self.assertEqual(len(pool), 0)
        self.assertFalse(pool.has_string(0))

    def test_utf16_without_terminator_is_rejected(self) -> None:
        raw = bytearray(string_pool(["ab"]))
        # string data starts after the 28 byte header and one offset
        raw[32 + 2 + 4 : 32 + 2 + 6] = b"zz"

        with self.assertRaises(StringPoolError):
            parse(bytes(raw))

    def test_string_count_follows_offset_table(self) -> None:
        raw = bytearray(string_pool(["a", "b"]))
        raw[8:12] = pack("<L", 5)

        pool = parse(bytes(raw))

        self.assertEqual(len(pool), 2)


if __name__ == "__main__":
    unittest.main()
