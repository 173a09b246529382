"""
Binding of decoded XML text to typed structures.

The work is split into three passes which never modify their input:

1. [parse_tree][axmltext.binding.parse_tree] turns XML text into a tree of
   `Element`, `Attribute` and `Text` nodes.
2. [bind][axmltext.binding.bind] maps that tree onto a dataclass schema.
   Values written as `@0x########` become [Reference][axmltext.binding.Reference]
   objects instead of being converted.
3. [resolve_references][axmltext.binding.resolve_references] builds a new
   instance in which every `Reference` is replaced by what a resource table
   returns for it.

A schema is a dataclass whose fields are declared with `attr()`, `child()`,
`children()` or `text()`. Fields declared without one of those keep their
default value.

    @dataclass
    class Activity:
        name: str = attr("android:name")
        exported: Optional[bool] = attr("android:exported")

    @dataclass
    class Application:
        label: str = attr("android:label")
        activities: List[Activity] = children("activity")
"""
import dataclasses
import re
from typing import Any, Dict, List, Optional, Protocol, Tuple, Type, TypeVar, Union, get_type_hints

from loguru import logger
from lxml import etree

from .errors import BindingError, ReferenceResolutionError
from .values import format_reference

T = TypeVar("T")

XML_KEY = "axmltext"

# Resources may point at other resources, follow at most this many links
MAX_REFERENCE_DEPTH = 16

_REFERENCE = re.compile(r"^@0x([0-9A-Fa-f]{8})$")
_NONE_TYPE = type(None)


@dataclasses.dataclass(frozen=True)
class Attribute:
    name: str
    local_name: str
    namespace: str
    value: str


@dataclasses.dataclass(frozen=True)
class Text:
    value: str


@dataclasses.dataclass(frozen=True)
class Element:
    """
    A parsed element. `name` is the tag as written (`prefix:local`),
    `namespace` the uri the prefix is bound to, or an empty string.
    """

    name: str
    local_name: str
    namespace: str
    attributes: Tuple[Attribute, ...] = ()
    children: Tuple[Union["Element", Text], ...] = ()

    def attribute(self, name: str) -> Optional[Attribute]:
        """
        Find an attribute by its qualified name, or by local name when
        `name` has no prefix and no unprefixed attribute matches.
        """
        for a in self.attributes:
            if a.name == name:
                return a
        if ":" not in name:
            for a in self.attributes:
                if a.local_name == name:
                    return a
        return None

    def elements(self, name: str) -> List["Element"]:
        if ":" in name:
            return [c for c in self.children if isinstance(c, Element) and c.name == name]
        return [c for c in self.children if isinstance(c, Element) and c.local_name == name]

    def text(self) -> str:
        return "".join(c.value for c in self.children if isinstance(c, Text))


@dataclasses.dataclass(frozen=True)
class Reference:
    """
    An unresolved resource reference found while binding a field of type `target`.
    """

    res_id: int
    target: Any = str

    def __str__(self):
        return format_reference(self.res_id)


class ResourceTable(Protocol):
    """
    Looks up resources by id. Choosing the best matching configuration is
    entirely up to the table, `config` is passed through untouched.
    """

    def get_resource(self, res_id: int, config: Any) -> Any:
        ...


def attr(name: str, default: Any = None) -> Any:
    """Declare a field bound to the attribute `name`."""
    return dataclasses.field(default=default, metadata={XML_KEY: ("attr", name)})


def child(name: str) -> Any:
    """Declare a field bound to the first child element called `name`."""
    return dataclasses.field(default=None, metadata={XML_KEY: ("child", name)})


def children(name: str) -> Any:
    """Declare a list field bound to every child element called `name`."""
    return dataclasses.field(default_factory=list, metadata={XML_KEY: ("children", name)})


def text(default: str = "") -> Any:
    """Declare a field bound to the character data of the element."""
    return dataclasses.field(default=default, metadata={XML_KEY: ("text", None)})


def parse_tree(data: Union[str, bytes]) -> Element:
    """
    Parse XML text into an [Element][axmltext.binding.Element] tree.
    Comments and processing instructions are dropped.

    :raises BindingError: if the text is not well-formed XML
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as e:
        raise BindingError("decoded text is not well-formed XML: {}".format(e)) from e
    return _convert_element(root)


def _qualified(prefix: Optional[str], local_name: str) -> str:
    if prefix:
        return "{}:{}".format(prefix, local_name)
    return local_name


def _convert_element(elem) -> Element:
    qname = etree.QName(elem)
    prefixes = {uri: prefix for prefix, uri in elem.nsmap.items() if prefix}

    attributes = []
    for key, value in elem.attrib.items():
        a_qname = etree.QName(key)
        namespace = a_qname.namespace or ""
        attributes.append(
            Attribute(
                name=_qualified(prefixes.get(namespace), a_qname.localname),
                local_name=a_qname.localname,
                namespace=namespace,
                value=value,
            )
        )

    nodes: List[Union[Element, Text]] = []
    if elem.text:
        nodes.append(Text(elem.text))
    for sub in elem:
        if isinstance(sub.tag, str):
            nodes.append(_convert_element(sub))
        if sub.tail:
            nodes.append(Text(sub.tail))

    return Element(
        name=_qualified(elem.prefix, qname.localname),
        local_name=qname.localname,
        namespace=qname.namespace or "",
        attributes=tuple(attributes),
        children=tuple(nodes),
    )


def _unwrap_optional(tp: Any) -> Any:
    if getattr(tp, "__origin__", None) is Union:
        args = [a for a in tp.__args__ if a is not _NONE_TYPE]
        if len(args) == 1:
            return args[0]
    return tp


def _list_item_type(tp: Any) -> Any:
    if getattr(tp, "__origin__", None) in (list, List):
        args = getattr(tp, "__args__", ())
        if args:
            return args[0]
    raise BindingError("children() fields must be typed List[...], got {!r}".format(tp))


def convert_scalar(value: str, tp: Any) -> Any:
    """
    Convert attribute or text content to the python type `tp`.

    :raises BindingError: if `value` can not be represented as `tp`
    """
    tp = _unwrap_optional(tp)
    try:
        if tp is bool:
            if value == "true":
                return True
            if value == "false":
                return False
            raise ValueError("not a boolean")
        if tp is int:
            if value.lower().startswith(("0x", "-0x")):
                return int(value, 16)
            return int(value, 10)
        if tp is float:
            return float(value)
    except ValueError as e:
        raise BindingError("can not convert {!r} to {}: {}".format(value, tp.__name__, e)) from e
    return value


def _bind_value(value: str, tp: Any) -> Any:
    m = _REFERENCE.match(value)
    if m:
        return Reference(int(m.group(1), 16), _unwrap_optional(tp))
    return convert_scalar(value, tp)


def bind(node: Element, schema: Type[T]) -> T:
    """
    Create an instance of the dataclass `schema` from `node`.

    :raises BindingError: if a value does not fit its declared type
    """
    if not dataclasses.is_dataclass(schema):
        raise BindingError("{!r} is not a dataclass".format(schema))

    try:
        hints = get_type_hints(schema)
    except NameError as e:
        raise BindingError("can not evaluate annotations of {}: {}".format(schema.__name__, e)) from e

    kwargs: Dict[str, Any] = {}
    for f in dataclasses.fields(schema):
        spec = f.metadata.get(XML_KEY)
        if spec is None or not f.init:
            continue
        kind, name = spec
        tp = hints.get(f.name, str)

        if kind == "attr":
            a = node.attribute(name)
            if a is not None:
                kwargs[f.name] = _bind_value(a.value, tp)
        elif kind == "text":
            content = node.text()
            if content:
                kwargs[f.name] = _bind_value(content, tp)
        elif kind == "child":
            found = node.elements(name)
            if found:
                kwargs[f.name] = bind(found[0], _unwrap_optional(tp))
        elif kind == "children":
            item_type = _list_item_type(_unwrap_optional(tp))
            kwargs[f.name] = [bind(e, item_type) for e in node.elements(name)]

    logger.debug(f"bound <{node.name}> to {schema.__name__}: {sorted(kwargs)}")
    return schema(**kwargs)


def _lookup(table: ResourceTable, ref: Reference, config: Any) -> Any:
    res_id = ref.res_id
    for _ in range(MAX_REFERENCE_DEPTH):
        try:
            value = table.get_resource(res_id, config)
        except LookupError as e:
            raise ReferenceResolutionError(res_id, str(e)) from e
        if value is None:
            raise ReferenceResolutionError(res_id, "no value in resource table")

        if isinstance(value, Reference):
            res_id = value.res_id
            continue
        if isinstance(value, str):
            m = _REFERENCE.match(value)
            if m:
                res_id = int(m.group(1), 16)
                continue
            try:
                return convert_scalar(value, ref.target)
            except BindingError as e:
                raise ReferenceResolutionError(res_id, str(e)) from e
        return value
    raise ReferenceResolutionError(ref.res_id, "reference chain is too long")


def _resolve(value: Any, table: ResourceTable, config: Any) -> Any:
    if isinstance(value, Reference):
        resolved = _lookup(table, value, config)
        logger.debug(f"resolved {value} to {resolved!r}")
        return resolved
    if isinstance(value, list):
        return [_resolve(v, table, config) for v in value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return resolve_references(value, table, config)
    return value


def resolve_references(bound: T, table: ResourceTable, config: Any = None) -> T:
    """
    Return a copy of `bound` with every [Reference][axmltext.binding.Reference]
    replaced by its value from `table`. `bound` itself is left untouched.

    :raises ReferenceResolutionError: if the table can not resolve a reference
    """
    changes = {}
    for f in dataclasses.fields(bound):
        if not f.init:
            continue
        value = getattr(bound, f.name)
        resolved = _resolve(value, table, config)
        if resolved is not value:
            changes[f.name] = resolved
    return dataclasses.replace(bound, **changes)
