"""Unit tests for binding decoded documents to schemas."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import unittest

from axmltext.binding import Reference, attr, bind, child, children, parse_tree, resolve_references, text
from axmltext.decoder import XMLFile
from axmltext.errors import BindingError, ReferenceResolutionError
from axmltext.internal_types import TYPE_INT_BOOLEAN, TYPE_INT_DEC, TYPE_REFERENCE

from tests.axml_builder import (
    attribute,
    document,
    end_element,
    end_namespace,
    start_element,
    start_namespace,
    string_pool,
)

ANDROID_URI = "http://schemas.android.com/apk/res/android"

STRINGS = [
    "android",      # 0
    ANDROID_URI,    # 1
    "manifest",     # 2
    "package",      # 3
    "com.example",  # 4
    "application",  # 5
    "label",        # 6
    "activity",     # 7
    "name",         # 8
    ".Main",        # 9
    "exported",     # 10
    "versionCode",  # 11
    ".Settings",    # 12
]


def manifest_axml() -> bytes:
    return document(
        string_pool(STRINGS),
        start_namespace(0, 1),
        start_element(2, [attribute(3, raw=4), attribute(11, ns=1, data_type=TYPE_INT_DEC, data=7)]),
        start_element(5, [attribute(6, ns=1, data_type=TYPE_REFERENCE, data=0x7F020000)]),
        start_element(7, [attribute(8, ns=1, raw=9), attribute(10, ns=1, data_type=TYPE_INT_BOOLEAN, data=1)]),
        end_element(7),
        start_element(7, [attribute(8, ns=1, raw=12), attribute(10, ns=1, data_type=TYPE_INT_BOOLEAN, data=0)]),
        end_element(7),
        end_element(5),
        end_element(2),
        end_namespace(0, 1),
    )


@dataclass
class Activity:
    name: str = attr("android:name")
    exported: Optional[bool] = attr("android:exported")


@dataclass
class Application:
    label: str = attr("android:label")
    activities: List[Activity] = children("activity")


@dataclass
class Manifest:
    package: str = attr("package")
    version_code: int = attr("android:versionCode")
    application: Optional[Application] = child("application")


@dataclass
class Meta:
    value: int = attr("value")
    body: str = text()


class DictTable:
    """Resource table backed by a dict, remembering the configs it was asked for."""

    def __init__(self, values: Dict[int, Any]) -> None:
        self.values = values
        self.configs: List[Any] = []

    def get_resource(self, res_id: int, config: Any) -> Any:
        self.configs.append(config)
        return self.values[res_id]


class ParseTreeTest(unittest.TestCase):
    """Tests for parse_tree."""

    def test_builds_element_attribute_and_text_nodes(self) -> None:
        root = parse_tree(
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<m xmlns:android="{}" package="p"><a android:name="n">hello</a>tail</m>'.format(ANDROID_URI)
        )

        self.assertEqual(root.name, "m")
        self.assertEqual(root.attribute("package").value, "p")
        (a,) = root.elements("a")
        self.assertEqual(a.attribute("android:name").namespace, ANDROID_URI)
        self.assertEqual(a.attribute("name").value, "n")
        self.assertEqual(a.text(), "hello")
        self.assertEqual(root.text(), "tail")

    def test_malformed_text_is_a_binding_error(self) -> None:
        with self.assertRaises(BindingError):
            parse_tree("<a><b></a>")


class BindTest(unittest.TestCase):
    """Tests for bind."""

    def test_binds_decoded_manifest(self) -> None:
        manifest = XMLFile(manifest_axml()).decode(Manifest)

        self.assertEqual(manifest.package, "com.example")
        self.assertEqual(manifest.version_code, 7)
        self.assertEqual(manifest.application.label, Reference(0x7F020000, str))
        self.assertEqual(
            manifest.application.activities,
            [Activity(".Main", True), Activity(".Settings", False)],
        )

    def test_missing_values_keep_defaults(self) -> None:
        manifest = bind(parse_tree("<manifest/>"), Manifest)

        self.assertIsNone(manifest.package)
        self.assertIsNone(manifest.application)

    def test_hex_integers_and_text(self) -> None:
        meta = bind(parse_tree('<meta value="0x0000002A">body</meta>'), Meta)

        self.assertEqual(meta, Meta(42, "body"))

    def test_value_not_matching_type_is_a_binding_error(self) -> None:
        with self.assertRaises(BindingError):
            bind(parse_tree('<meta value="many"/>'), Meta)

    def test_schema_must_be_a_dataclass(self) -> None:
        with self.assertRaises(BindingError):
            bind(parse_tree("<meta/>"), dict)


class ResolveReferencesTest(unittest.TestCase):
    """Tests for resolve_references."""

    def test_references_are_replaced_in_a_new_structure(self) -> None:
        table = DictTable({0x7F020000: "Example"})
        xml = XMLFile(manifest_axml())

        resolved = xml.decode(Manifest, table, config="en-rUS")

        self.assertEqual(resolved.application.label, "Example")
        self.assertEqual(resolved.application.activities[0].name, ".Main")
        self.assertEqual(table.configs, ["en-rUS"])

    def test_bound_input_is_not_modified(self) -> None:
        bound = XMLFile(manifest_axml()).decode(Manifest)

        resolve_references(bound, DictTable({0x7F020000: "Example"}))

        self.assertEqual(bound.application.label, Reference(0x7F020000, str))

    def test_reference_chains_are_followed_and_converted(self) -> None:
        bound = bind(parse_tree('<meta value="@0x7F030001"/>'), Meta)
        table = DictTable({0x7F030001: "@0x7F030002", 0x7F030002: "12"})

        self.assertEqual(resolve_references(bound, table).value, 12)

    def test_unknown_reference_is_a_resolution_error(self) -> None:
        bound = XMLFile(manifest_axml()).decode(Manifest)

        with self.assertRaises(ReferenceResolutionError) as ctx:
            resolve_references(bound, DictTable({}))

        self.assertEqual(ctx.exception.res_id, 0x7F020000)

    def test_endless_reference_chain_is_a_resolution_error(self) -> None:
        bound = bind(parse_tree('<meta value="@0x7F030001"/>'), Meta)

        with self.assertRaises(ReferenceResolutionError):
            resolve_references(bound, DictTable({0x7F030001: "@0x7F030001"}))


if __name__ == "__main__":
    unittest.main()
