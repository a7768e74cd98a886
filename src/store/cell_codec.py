"""Typed cell value codec for vertex properties.

Each property value is stored as one type tag byte followed by the
UTF-8 text form of the value, so a reader can restore the exact type.
"""

from __future__ import annotations

import math

from core.errors import GraphloadEncodingError
from core.types import PropertyValue

_STRING_TAG = b"s"
_INT_TAG = b"i"
_FLOAT_TAG = b"f"
_BOOL_TAG = b"b"


def encode_property_value(name: str, value: object) -> bytes:
    """Serialize one property value into tagged cell bytes.

    Args:
        name: Property name, used for error context.
        value: Property value.

    Returns:
        Tagged cell bytes.

    Raises:
        GraphloadEncodingError: If the value type is unsupported or the
            value cannot be represented as UTF-8.
    """
    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        return _BOOL_TAG + (b"true" if value else b"false")
    if isinstance(value, int):
        return _INT_TAG + str(value).encode("utf-8")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise GraphloadEncodingError(
                f"Cannot encode property '{name}': non-finite float {value!r}."
            )
        return _FLOAT_TAG + repr(value).encode("utf-8")
    if isinstance(value, str):
        return _STRING_TAG + encode_text(value, f"property '{name}'")
    raise GraphloadEncodingError(
        f"Cannot encode property '{name}': unsupported type {type(value).__name__}. "
        "Use str, int, float, or bool values."
    )


def decode_property_value(name: str, cell: bytes) -> PropertyValue:
    """Deserialize tagged cell bytes into a property value.

    Raises:
        GraphloadEncodingError: If the cell is empty or carries an unknown tag.
    """
    tag, body = cell[:1], cell[1:]
    try:
        text = body.decode("utf-8")
        if tag == _STRING_TAG:
            return text
        if tag == _INT_TAG:
            return int(text)
        if tag == _FLOAT_TAG:
            return float(text)
        if tag == _BOOL_TAG:
            if text not in ("true", "false"):
                raise ValueError(f"invalid boolean text {text!r}")
            return text == "true"
    except (UnicodeDecodeError, ValueError) as error:
        raise GraphloadEncodingError(
            f"Corrupt cell for property '{name}': {error}."
        ) from error
    raise GraphloadEncodingError(
        f"Corrupt cell for property '{name}': unknown type tag {tag!r}."
    )


def encode_text(text: object, what: str) -> bytes:
    """Encode a text field of a vertex as UTF-8 cell bytes.

    Args:
        text: Field value; must be a string.
        what: Field description used for error context.

    Returns:
        UTF-8 bytes.

    Raises:
        GraphloadEncodingError: If the value is not a string or holds
            characters UTF-8 cannot represent, such as lone surrogates.
    """
    if not isinstance(text, str):
        raise GraphloadEncodingError(
            f"Cannot encode {what}: expected a string, got {type(text).__name__}."
        )
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as error:
        raise GraphloadEncodingError(
            f"Cannot encode {what} {text!r} as UTF-8: {error.reason}."
        ) from error


def decode_text(cell: bytes, what: str) -> str:
    """Decode UTF-8 cell bytes back into text.

    Raises:
        GraphloadEncodingError: If the bytes are not valid UTF-8.
    """
    try:
        return cell.decode("utf-8")
    except UnicodeDecodeError as error:
        raise GraphloadEncodingError(
            f"Corrupt {what} cell {cell!r}: not valid UTF-8."
        ) from error
