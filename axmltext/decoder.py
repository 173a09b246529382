import io
import re
from typing import Any, BinaryIO, Dict, List, Optional, Type, TypeVar, Union

from loguru import logger

from .binding import bind, parse_tree, resolve_references
from .chunk import ChunkHeader, ChunkView
from .errors import InvalidReferenceError, TruncatedInputError
from .internal_types import (
    CHUNK_TYPE_NAMES,
    NIL_REF,
    RES_STRING_POOL_TYPE,
    RES_XML_END_ELEMENT_TYPE,
    RES_XML_END_NAMESPACE_TYPE,
    RES_XML_RESOURCE_MAP_TYPE,
    RES_XML_START_ELEMENT_TYPE,
    RES_XML_START_NAMESPACE_TYPE,
    RES_XML_TYPE,
)
from .namespaces import NamespaceScope
from .public import system_attribute_name
from .string_pool import StringPool
from .values import format_value

T = TypeVar("T")

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Attributes found through the resource map belong to the framework package
ANDROID_PREFIX = "android"

# Layouts of the records following the header of an XML tree node
NAMESPACE_EXT = "LL"  # prefix, uri
ATTR_EXT = "LLHHHHHH"  # ns, name, attributeStart, attributeSize, attributeCount, id, class, style
ATTRIBUTE = "LLLHBBL"  # ns, name, rawValue, size, res0, dataType, data
END_ELEMENT_EXT = "LL"  # ns, name

_ESCAPES = str.maketrans({
    '"': "&#34;",
    "'": "&#39;",
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\t": "&#x9;",
    "\n": "&#xA;",
    "\r": "&#xD;",
})
_INVALID_CHARS = re.compile(
    "[^\t\n\r%s-%s%s-%s%s-%s]" % (chr(0x20), chr(0xD7FF), chr(0xE000), chr(0xFFFD), chr(0x10000), chr(0x10FFFF))
)


def escape(value: str) -> str:
    """
    Escape text for use inside a double quoted attribute.
    Characters which are not allowed in XML at all are replaced by U+FFFD.

    See <https://www.w3.org/TR/xml/#charsets>
    """
    return _INVALID_CHARS.sub(chr(0xFFFD), value).translate(_ESCAPES)


def _as_buffer(source: Union[bytes, bytearray, memoryview, BinaryIO]) -> memoryview:
    if isinstance(source, (bytes, bytearray)):
        return memoryview(source)
    if isinstance(source, memoryview):
        return source.cast("B")
    return memoryview(source.read())


class XMLFile:
    """
    An AXML file decoded into XML text.

    The whole file is decoded in the constructor: every chunk of the outer
    `RES_XML_TYPE` chunk is read in order and rendered into the text buffer.
    Any structural problem raises a
    [ResParserError][axmltext.errors.ResParserError] and no document is
    produced.

    The decoded text keeps references to resources as `@0x########`
    markers; use [decode][axmltext.decoder.XMLFile.decode] to bind the
    document to a schema and resolve them against a resource table.
    """

    def __init__(self, source: Union[bytes, bytearray, memoryview, BinaryIO]) -> None:
        """
        :param source: the raw AXML data, or a binary file object positioned at it
        :raises ResParserError: if the data is not a valid AXML document
        """
        data = _as_buffer(source)

        self.string_pool: Optional[StringPool] = None
        self.resource_ids: List[int] = []
        self.namespaces = NamespaceScope()
        # declared namespaces not yet written as xmlns attributes, uri -> prefix
        self._pending_ns: Dict[int, int] = {}
        self._buffer = io.StringIO()
        self._buffer.write(XML_HEADER)

        header = ChunkHeader(data, 0)
        logger.debug("FIRST HEADER {}".format(header))

        if header.get_size() > len(data):
            raise TruncatedInputError(0, header.get_size(), len(data))

        if header.get_type() != RES_XML_TYPE:
            logger.warning(
                "AXML file has an unusual resource type! "
                "Trying to parse it anyways. Resource Type: 0x{:04x}".format(header.get_type())
            )
        if header.get_size() < len(data):
            logger.warning(
                "Declared filesize ({}) is smaller than total file size ({}). "
                "Was something appended to the file?".format(header.get_size(), len(data))
            )

        offset = header.get_header_size()
        while offset < header.get_size():
            chunk = self._read_chunk(data, offset)
            offset += chunk.get_size()

        if len(self.namespaces) > 0:
            logger.warning("Not all namespace mappings were closed! Malformed AXML?")

        self._text = self._buffer.getvalue()
        self._buffer.close()

    @classmethod
    def from_path(cls, path) -> "XMLFile":
        """
        Decode the AXML file stored at `path`.
        """
        with open(path, "rb") as fp:
            return cls(fp.read())

    @property
    def text(self) -> str:
        """
        The decoded document, XML declaration included.
        """
        return self._text

    def reader(self) -> io.BytesIO:
        """
        A fresh reader over the decoded document, encoded as UTF-8.
        """
        return io.BytesIO(self._text.encode("utf-8"))

    def decode(self, schema: Type[T], table: Any = None, config: Any = None) -> T:
        """
        Bind the decoded document to `schema` and resolve its resource references.

        :param schema: a dataclass declaring the expected structure
        :param table: a [ResourceTable][axmltext.binding.ResourceTable]; without one
            references stay unresolved
        :param config: configuration context handed to the table unchanged
        :raises BindingError: if the document does not fit the schema
        :raises ReferenceResolutionError: if the table can not resolve a reference
        """
        bound = bind(parse_tree(self.reader().read()), schema)
        if table is None:
            return bound
        return resolve_references(bound, table, config)

    def get_string(self, ref: int) -> str:
        """
        Return the string referenced by `ref`.

        :raises InvalidReferenceError: if the string pool has no such string
        """
        if self.string_pool is None:
            raise InvalidReferenceError(ref)
        return self.string_pool.get_string(ref)

    def has_string(self, ref: int) -> bool:
        return self.string_pool is not None and self.string_pool.has_string(ref)

    def _read_chunk(self, data: memoryview, offset: int) -> ChunkHeader:
        h = ChunkHeader(data, offset)
        if h.get_end() > len(data):
            raise TruncatedInputError(offset, h.get_size(), len(data) - offset)
        _type = h.get_type()
        logger.debug("NEXT HEADER {} {}".format(CHUNK_TYPE_NAMES.get(_type, "UNKNOWN"), h))

        view = h.view()
        if _type == RES_STRING_POOL_TYPE:
            self.string_pool = StringPool.parse(view)
            logger.debug("STRING_POOL {}".format(self.string_pool))
        elif _type == RES_XML_RESOURCE_MAP_TYPE:
            self._read_resource_ids(view, h.get_header_size())
        elif _type == RES_XML_START_NAMESPACE_TYPE:
            self._read_start_namespace(view, h.get_header_size())
        elif _type == RES_XML_END_NAMESPACE_TYPE:
            self._read_end_namespace(view, h.get_header_size())
        elif _type == RES_XML_START_ELEMENT_TYPE:
            self._read_start_element(view, h.get_header_size())
        elif _type == RES_XML_END_ELEMENT_TYPE:
            self._read_end_element(view, h.get_header_size())
        else:
            logger.debug(
                "Unknown chunk type: 0x{:04x}, skipping {} bytes.".format(_type, h.get_size())
            )
        return h

    def _read_resource_ids(self, view: ChunkView, header_size: int) -> None:
        count = (len(view) - header_size) // 4
        self.resource_ids.extend(view.unpack("{}L".format(count), header_size))
        logger.debug(f"resource_ids: {[hex(i) for i in self.resource_ids]}")

    def _read_start_namespace(self, view: ChunkView, header_size: int) -> None:
        prefix, uri = view.unpack(NAMESPACE_EXT, header_size)
        logger.debug(f"Start of Namespace mapping: prefix {prefix} --> uri {uri}")

        self._pending_ns[uri] = prefix
        self.namespaces.push(uri, prefix)

    def _read_end_namespace(self, view: ChunkView, header_size: int) -> None:
        prefix, uri = view.unpack(NAMESPACE_EXT, header_size)
        logger.debug(f"End of Namespace mapping: prefix {prefix} --> uri {uri}")

        if not self.namespaces.pop(uri):
            logger.warning(
                "Reached a NAMESPACE_END without having the namespace stored before? "
                "Prefix ID: {}, URI ID: {}".format(prefix, uri)
            )

    def _display_name(self, ns: int, name: int) -> str:
        """
        Render a tag or attribute name with its namespace prefix.

        Names whose index is covered by the resource map and maps to a
        framework attribute use that attribute's name, and fall back to the
        `android` prefix when their namespace has no usable binding.
        """
        attr_name = ""
        prefix = ""
        if name < len(self.resource_ids):
            attr_name = system_attribute_name(self.resource_ids[name])
            if attr_name:
                prefix = ANDROID_PREFIX
        if not attr_name:
            attr_name = self.get_string(name)

        if ns == NIL_REF:
            return attr_name

        prefix_ref = self.namespaces.resolve(ns)
        if prefix_ref is not None:
            bound_prefix = self.get_string(prefix_ref)
            if bound_prefix:
                prefix = bound_prefix
        if prefix:
            return "{}:{}".format(prefix, attr_name)
        return attr_name

    def _read_start_element(self, view: ChunkView, header_size: int) -> None:
        (
            ns,
            name,
            attribute_start,
            attribute_size,
            attribute_count,
            id_index,
            class_index,
            style_index,
        ) = view.unpack(ATTR_EXT, header_size)
        logger.debug(
            f"START_TAG: ns={ns} name={name} at_start={attribute_start} "
            f"at_size={attribute_size} count={attribute_count}"
        )

        tag = self._display_name(ns, name)
        out = ["<", tag]

        # output XML namespaces
        for uri, prefix in self._pending_ns.items():
            if not self.has_string(uri):
                raise InvalidReferenceError(uri)
            if not self.has_string(prefix):
                raise InvalidReferenceError(prefix)
            s_prefix = self.get_string(prefix)
            if s_prefix:
                out.append(' xmlns:{}="{}"'.format(s_prefix, escape(self.get_string(uri))))
            else:
                out.append(' xmlns="{}"'.format(escape(self.get_string(uri))))
        self._pending_ns = {}

        offset = header_size + attribute_start
        for i in range(attribute_count):
            a_ns, a_name, raw_value, _, _, data_type, data = view.unpack(ATTRIBUTE, offset)

            if raw_value != NIL_REF:
                if not self.has_string(raw_value):
                    raise InvalidReferenceError(raw_value)
                value = self.get_string(raw_value)
            else:
                value = format_value(data_type, data)

            attr = self._display_name(a_ns, a_name)
            logger.debug(f"found an attribute: {attr}={value!r}")
            out.append(' {}="{}"'.format(attr, escape(value)))
            offset += attribute_size

        out.append(">")
        self._buffer.write("".join(out))

    def _read_end_element(self, view: ChunkView, header_size: int) -> None:
        ns, name = view.unpack(END_ELEMENT_EXT, header_size)
        tag = self._display_name(ns, name)
        logger.debug(f"END_TAG: {tag}")
        self._buffer.write("</{}>".format(tag))
