# Constants for AXML files
# see http://aospxref.com/android-13.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#233

RES_STRING_POOL_TYPE = 0x0001
RES_XML_TYPE = 0x0003

RES_XML_START_NAMESPACE_TYPE = 0x0100
RES_XML_END_NAMESPACE_TYPE = 0x0101
RES_XML_START_ELEMENT_TYPE = 0x0102
RES_XML_END_ELEMENT_TYPE = 0x0103
RES_XML_CDATA_TYPE = 0x0104

RES_XML_RESOURCE_MAP_TYPE = 0x0180

CHUNK_TYPE_NAMES = {
    RES_STRING_POOL_TYPE: "RES_STRING_POOL_TYPE",
    RES_XML_TYPE: "RES_XML_TYPE",
    RES_XML_START_NAMESPACE_TYPE: "RES_XML_START_NAMESPACE_TYPE",
    RES_XML_END_NAMESPACE_TYPE: "RES_XML_END_NAMESPACE_TYPE",
    RES_XML_START_ELEMENT_TYPE: "RES_XML_START_ELEMENT_TYPE",
    RES_XML_END_ELEMENT_TYPE: "RES_XML_END_ELEMENT_TYPE",
    RES_XML_CDATA_TYPE: "RES_XML_CDATA_TYPE",
    RES_XML_RESOURCE_MAP_TYPE: "RES_XML_RESOURCE_MAP_TYPE",
}

# ResStringPool_ref with this index means "no string"
NIL_REF = 0xFFFFFFFF

# Flags in the STRING Section
UTF8_FLAG = 1 << 8

# Res_value data types
TYPE_NULL = 0x00
TYPE_REFERENCE = 0x01
TYPE_ATTRIBUTE = 0x02
TYPE_STRING = 0x03
TYPE_FLOAT = 0x04
TYPE_DIMENSION = 0x05
TYPE_FRACTION = 0x06
TYPE_DYNAMIC_REFERENCE = 0x07
TYPE_DYNAMIC_ATTRIBUTE = 0x08

TYPE_INT_DEC = 0x10
TYPE_INT_HEX = 0x11
TYPE_INT_BOOLEAN = 0x12

TYPE_INT_COLOR_ARGB8 = 0x1C
TYPE_INT_COLOR_RGB8 = 0x1D
TYPE_INT_COLOR_ARGB4 = 0x1E
TYPE_INT_COLOR_RGB4 = 0x1F

TYPE_NAMES = {
    TYPE_NULL: "TYPE_NULL",
    TYPE_REFERENCE: "TYPE_REFERENCE",
    TYPE_ATTRIBUTE: "TYPE_ATTRIBUTE",
    TYPE_STRING: "TYPE_STRING",
    TYPE_FLOAT: "TYPE_FLOAT",
    TYPE_DIMENSION: "TYPE_DIMENSION",
    TYPE_FRACTION: "TYPE_FRACTION",
    TYPE_DYNAMIC_REFERENCE: "TYPE_DYNAMIC_REFERENCE",
    TYPE_DYNAMIC_ATTRIBUTE: "TYPE_DYNAMIC_ATTRIBUTE",
    TYPE_INT_DEC: "TYPE_INT_DEC",
    TYPE_INT_HEX: "TYPE_INT_HEX",
    TYPE_INT_BOOLEAN: "TYPE_INT_BOOLEAN",
    TYPE_INT_COLOR_ARGB8: "TYPE_INT_COLOR_ARGB8",
    TYPE_INT_COLOR_RGB8: "TYPE_INT_COLOR_RGB8",
    TYPE_INT_COLOR_ARGB4: "TYPE_INT_COLOR_ARGB4",
    TYPE_INT_COLOR_RGB4: "TYPE_INT_COLOR_RGB4",
}
