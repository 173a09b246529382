from loguru import logger

from .internal_types import (
    TYPE_INT_BOOLEAN,
    TYPE_INT_DEC,
    TYPE_INT_HEX,
    TYPE_NAMES,
    TYPE_NULL,
    TYPE_REFERENCE,
)


def format_reference(res_id: int) -> str:
    """
    Render a resource id as the `@0x########` marker resolved later
    against a resource table.
    """
    return "@0x{:08X}".format(res_id)


def format_value(_type: int, _data: int) -> str:
    """
    Format a typed attribute value (`Res_value`) based on type and data.

    Only null, decimal, hex and boolean values get a literal rendering.
    References, and every type without a literal rendering, are written as
    `@0x########` so a later pass can resolve them.

    :param _type: The numeric type of the value
    :param _data: The numeric data of the value
    :returns: the formatted string
    """
    logger.debug(f"_type: {_type}: {TYPE_NAMES.get(_type, 'UNKNOWN')} data: {_data:#010x}")

    if _type == TYPE_NULL:
        return ""

    elif _type == TYPE_REFERENCE:
        return format_reference(_data)

    elif _type == TYPE_INT_DEC:
        return "%d" % _data

    elif _type == TYPE_INT_HEX:
        return "0x%08X" % _data

    elif _type == TYPE_INT_BOOLEAN:
        if _data == 0:
            return "false"
        return "true"

    return format_reference(_data)
