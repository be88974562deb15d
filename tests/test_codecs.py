# tests/test_codecs.py

import os

import pytest

from otpvault.codec import base32, protobuf
from otpvault.common.errors import InvalidEncoding, InvalidPayload, Truncated


@pytest.mark.parametrize(
    "raw, text",
    [
        (b"", ""),
        (b"f", "MY"),
        (b"fo", "MZXQ"),
        (b"foo", "MZXW6"),
        (b"foob", "MZXW6YQ"),
        (b"fooba", "MZXW6YTB"),
        (b"foobar", "MZXW6YTBOI"),
        (b"Hello!\xde\xad\xbe\xef", "JBSWY3DPEHPK3PXP"),
    ],
)
def test_base32_rfc4648_vectors(raw, text):
    assert base32.encode(raw) == text
    assert base32.decode(text) == raw


def test_base32_decode_tolerates_padding_and_case():
    assert base32.decode("mzxw6ytboi======") == b"foobar"
    assert base32.decode("MZXQ====") == b"fo"


def test_base32_decode_random_bytes():
    """Decoding what was encoded gives back the original bytes."""
    for size in range(0, 41):
        data = os.urandom(size)
        assert base32.decode(base32.encode(data)) == data


@pytest.mark.parametrize("bad", ["MZXW1", "MZ XW", "MZ=XW", "MZXW6!"])
def test_base32_decode_rejects_foreign_characters(bad):
    with pytest.raises(InvalidEncoding):
        base32.decode(bad)


def test_validate_secret_text():
    assert base32.validate_secret_text("JBSWY3DPEHPK3PXP")
    assert base32.validate_secret_text("jbsw y3dp ehpk 3pxp")
    assert base32.validate_secret_text("MZXQ====")
    assert not base32.validate_secret_text("")
    assert not base32.validate_secret_text("   ")
    assert not base32.validate_secret_text("JBSWY3DPEHPK3PX1")
    assert not base32.validate_secret_text("MZ==XQ")


def test_read_varint():
    assert protobuf.read_varint(b"\x01", 0) == (1, 1)
    assert protobuf.read_varint(b"\xac\x02", 0) == (300, 2)
    assert protobuf.read_varint(b"\x00\xac\x02\x05", 1) == (300, 3)
    max_u64 = b"\xff" * 9 + b"\x01"
    assert protobuf.read_varint(max_u64, 0) == (2 ** 64 - 1, 10)


def test_read_varint_truncated_or_overlong():
    assert protobuf.read_varint(b"", 0) is None
    assert protobuf.read_varint(b"\xac", 0) is None
    assert protobuf.read_varint(b"\x80" * 11, 0) is None


def test_read_tag():
    # field 1, wire type 2
    assert protobuf.read_tag(b"\x0a", 0) == (1, 2, 1)
    # field 16, wire type 0 needs a two byte tag
    assert protobuf.read_tag(b"\x80\x01", 0) == (16, 0, 2)
    with pytest.raises(Truncated):
        protobuf.read_tag(b"\x80", 0)


def test_skip_field():
    assert protobuf.skip_field(b"\xac\x02", 0, protobuf.WIRE_VARINT) == 2
    assert protobuf.skip_field(b"\x03abc", 0, protobuf.WIRE_LENGTH_DELIMITED) == 4
    assert protobuf.skip_field(b"\x00" * 8, 0, protobuf.WIRE_FIXED64) == 8
    assert protobuf.skip_field(b"\x00" * 4, 0, protobuf.WIRE_FIXED32) == 4


@pytest.mark.parametrize(
    "buf, wire_type",
    [
        (b"\xac", protobuf.WIRE_VARINT),
        (b"\x05ab", protobuf.WIRE_LENGTH_DELIMITED),
        (b"\x00" * 7, protobuf.WIRE_FIXED64),
        (b"\x00" * 3, protobuf.WIRE_FIXED32),
    ],
)
def test_skip_field_never_reads_past_the_end(buf, wire_type):
    with pytest.raises(Truncated):
        protobuf.skip_field(buf, 0, wire_type)


@pytest.mark.parametrize("wire_type", [3, 4, 6, 7])
def test_skip_field_rejects_reserved_wire_types(wire_type):
    with pytest.raises(InvalidPayload):
        protobuf.skip_field(b"\x00" * 16, 0, wire_type)


def test_iter_fields():
    buf = b"\x08\x96\x01" + b"\x12\x03abc" + b"\x1d\x01\x02\x03\x04"
    assert list(protobuf.iter_fields(buf)) == [
        (1, 0, 150),
        (2, 2, b"abc"),
        (3, 5, b"\x01\x02\x03\x04"),
    ]
