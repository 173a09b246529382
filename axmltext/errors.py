class ResParserError(Exception):
    """Exception for the parsers"""

    pass


class InvalidChunkError(ResParserError):
    """
    A chunk header declares sizes that cannot describe a valid chunk.
    """

    def __init__(self, message: str, header_size: int, size: int, offset: int) -> None:
        super().__init__(
            "{} (header_size={}, size={}, offset=0x{:08x})".format(
                message, header_size, size, offset
            )
        )
        self.header_size = header_size
        self.size = size
        self.offset = offset


class TruncatedInputError(ResParserError, EOFError):
    """
    The input ended while a fixed-size record was expected.
    """

    def __init__(self, offset: int, needed: int, available: int) -> None:
        super().__init__(
            "unexpected end of input at offset 0x{:08x}: needed {} bytes, {} available".format(
                offset, needed, available
            )
        )
        self.offset = offset
        self.needed = needed
        self.available = available


class InvalidReferenceError(ResParserError):
    """
    A string pool reference points outside the pool.
    """

    def __init__(self, ref: int) -> None:
        super().__init__("invalid reference: 0x{:08X}".format(ref))
        self.ref = ref


class StringPoolError(ResParserError):
    """The string data of a pool is malformed"""

    pass


class BindingError(Exception):
    """Decoded XML text could not be bound to the requested schema"""

    pass


class ReferenceResolutionError(Exception):
    """
    A resource reference could not be resolved by the resource table.
    Kept apart from `ResParserError` so callers can tell a corrupt
    binary file from an incomplete resource table.
    """

    def __init__(self, res_id: int, reason: str = "") -> None:
        message = "can not resolve resource reference @0x{:08X}".format(res_id)
        if reason:
            message = "{}: {}".format(message, reason)
        super().__init__(message)
        self.res_id = res_id
