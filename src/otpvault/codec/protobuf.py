# src/otpvault/codec/protobuf.py
"""
Schema-less protobuf field reader.

Only what the authenticator export format needs: varints, length-delimited
fields and skipping of fixed-width fields. The buffer is never copied or
modified; every function takes an offset and returns the next one.
"""

from typing import Iterator, Optional, Tuple, Union

from otpvault.common.errors import InvalidPayload, Truncated

WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LENGTH_DELIMITED = 2
WIRE_FIXED32 = 5

# A 64-bit value needs at most ten 7-bit groups
MAX_VARINT_GROUPS = 10
_U64_MASK = (1 << 64) - 1


def read_varint(buf: bytes, offset: int) -> Optional[Tuple[int, int]]:
    """
    Read an unsigned LEB128 varint starting at `offset`.

    Returns `(value, next_offset)`, or None if the buffer ends before the
    final group or the varint runs longer than ten groups.
    """
    value = 0
    shift = 0
    pos = offset
    for _ in range(MAX_VARINT_GROUPS):
        if pos >= len(buf):
            return None
        b = buf[pos]
        pos += 1
        value |= (b & 0x7F) << shift
        if not b & 0x80:
            return value & _U64_MASK, pos
        shift += 7
    return None


def _require_varint(buf: bytes, offset: int, what: str) -> Tuple[int, int]:
    result = read_varint(buf, offset)
    if result is None:
        raise Truncated(f"{what} at offset {offset} is truncated or overlong")
    return result


def read_tag(buf: bytes, offset: int) -> Tuple[int, int, int]:
    """Read a field header; returns `(field_number, wire_type, next_offset)`."""
    key, pos = _require_varint(buf, offset, "field tag")
    return key >> 3, key & 0x07, pos


def read_length_delimited(buf: bytes, offset: int) -> Tuple[bytes, int]:
    length, pos = _require_varint(buf, offset, "length prefix")
    end = pos + length
    if end > len(buf):
        raise Truncated(
            f"length-delimited field at offset {offset} needs {length} bytes, "
            f"only {len(buf) - pos} left"
        )
    return bytes(buf[pos:end]), end


def _skip_fixed(buf: bytes, offset: int, width: int) -> int:
    end = offset + width
    if end > len(buf):
        raise Truncated(f"fixed{width * 8} field at offset {offset} is truncated")
    return end


def skip_field(buf: bytes, offset: int, wire_type: int) -> int:
    """Skip over the value of a field whose tag has already been read."""
    if wire_type == WIRE_VARINT:
        return _require_varint(buf, offset, "varint")[1]
    if wire_type == WIRE_LENGTH_DELIMITED:
        return read_length_delimited(buf, offset)[1]
    if wire_type == WIRE_FIXED64:
        return _skip_fixed(buf, offset, 8)
    if wire_type == WIRE_FIXED32:
        return _skip_fixed(buf, offset, 4)
    raise InvalidPayload(f"unsupported wire type {wire_type} at offset {offset}")


def read_field(buf: bytes, offset: int, wire_type: int) -> Tuple[Union[int, bytes], int]:
    """Read a field value: int for varints, raw bytes for everything else."""
    if wire_type == WIRE_VARINT:
        return _require_varint(buf, offset, "varint")
    if wire_type == WIRE_LENGTH_DELIMITED:
        return read_length_delimited(buf, offset)
    end = skip_field(buf, offset, wire_type)
    return bytes(buf[offset:end]), end


def iter_fields(buf: bytes) -> Iterator[Tuple[int, int, Union[int, bytes]]]:
    """
    Yield `(field_number, wire_type, value)` for every field of a message.

    Stops at the end of the buffer, and also if a read fails to move the
    cursor forward.
    """
    pos = 0
    while pos < len(buf):
        field_number, wire_type, value_pos = read_tag(buf, pos)
        value, next_pos = read_field(buf, value_pos, wire_type)
        yield field_number, wire_type, value
        if next_pos <= pos:
            break
        pos = next_pos
