"""
Decoder for Android binary XML (AXML) documents.

    from axmltext import XMLFile

    xml = XMLFile.from_path("AndroidManifest.xml")
    print(xml.text)
"""
from loguru import logger

from .binding import Reference, ResourceTable, attr, child, children, text
from .decoder import XMLFile
from .errors import (
    BindingError,
    InvalidChunkError,
    InvalidReferenceError,
    ReferenceResolutionError,
    ResParserError,
    StringPoolError,
    TruncatedInputError,
)

__version__ = "0.1.0"

__all__ = [
    "BindingError",
    "InvalidChunkError",
    "InvalidReferenceError",
    "Reference",
    "ReferenceResolutionError",
    "ResParserError",
    "ResourceTable",
    "StringPoolError",
    "TruncatedInputError",
    "XMLFile",
    "attr",
    "child",
    "children",
    "text",
]

# Library code stays silent until an application opts in with logger.enable("axmltext")
logger.disable(__name__)
