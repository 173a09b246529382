"""Unit tests for the command line interface."""

import os
import tempfile
import unittest

from loguru import logger

from axmltext.__main__ import main

from tests.axml_builder import attribute, document, end_element, start_element, string_pool


class MainTest(unittest.TestCase):
    """Tests for main."""

    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        # main enables the package loggers for the rest of the process
        self.addCleanup(logger.disable, "axmltext")

    def write(self, name: str, data: bytes) -> str:
        path = os.path.join(self.tmp.name, name)
        with open(path, "wb") as fp:
            fp.write(data)
        return path

    def read(self, path: str) -> str:
        with open(path, encoding="utf-8") as fp:
            return fp.read()

    def test_writes_decoded_xml(self) -> None:
        source = self.write(
            "in.axml",
            document(string_pool(["root", "child", "a", "b"]), start_element(0, [attribute(2, raw=3)]),
                     start_element(1), end_element(1), end_element(0)),
        )
        out = os.path.join(self.tmp.name, "out.xml")

        self.assertEqual(main([source, "-o", out]), 0)
        self.assertEqual(
            self.read(out),
            '<?xml version="1.0" encoding="UTF-8"?>\n<root a="b"><child></child></root>',
        )

    def test_pretty_output_is_indented(self) -> None:
        source = self.write(
            "in.axml",
            document(string_pool(["root", "child"]), start_element(0), start_element(1),
                     end_element(1), end_element(0)),
        )
        out = os.path.join(self.tmp.name, "out.xml")

        self.assertEqual(main([source, "--pretty", "-o", out]), 0)
        self.assertEqual(
            self.read(out),
            '<?xml version="1.0" encoding="UTF-8"?>\n<root>\n  <child/>\n</root>\n',
        )

    def test_invalid_file_fails(self) -> None:
        source = self.write("broken.axml", b"\x03\x00\x02\x00\x10\x00\x00\x00")

        self.assertEqual(main([source]), 2)

    def test_missing_file_fails(self) -> None:
        self.assertEqual(main([os.path.join(self.tmp.name, "missing.axml")]), 1)


if __name__ == "__main__":
    unittest.main()
