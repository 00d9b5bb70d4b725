import ctypes

import pytest

import tdsdecimal
from tdsdecimal import Decimal

def test_wire_view_layout():
    assert ctypes.sizeof(tdsdecimal.DecimalWireView) == tdsdecimal.WIRE_SIZE == 17

def test_encode():
    d = Decimal.from_text("-1234.56")
    buf = d.encode()
    assert len(buf) == 17
    assert buf[0] == 0
    # 123456 == 0x0001E240, little-endian in word 0
    assert buf[1:5] == b"\x40\xe2\x01\x00"
    assert buf[5:] == b"\x00" * 12

    assert Decimal.from_int64(1).encode()[0] == 1

def test_encode_high_words():
    d = Decimal((1, 2, 3, 0xFFFFFFFF), True, 38, 0)
    buf = d.encode()
    assert buf == (
        b"\x01"
        + b"\x01\x00\x00\x00"
        + b"\x02\x00\x00\x00"
        + b"\x03\x00\x00\x00"
        + b"\xff\xff\xff\xff"
    )

def test_decode_full_body():
    d = Decimal.from_text("66666666666666666666.6666666666")
    got = tdsdecimal.decode(d.prec, d.scale, d.encode())
    assert got == d
    assert got.to_text() == "66666666666666666666.6666666666"

@pytest.mark.parametrize("prec,body", [
    (9, b"\x01\x39\x30\x00\x00"),
    (19, b"\x01\x39\x30\x00\x00\x00\x00\x00\x00"),
    (28, b"\x01\x39\x30\x00\x00" + b"\x00" * 8),
])
def test_decode_short_bodies(prec, body):
    d = tdsdecimal.decode(prec, 2, body)
    assert d.prec == prec
    assert d.scale == 2
    assert d.words == (12345, 0, 0, 0)
    assert d.to_text() == "123.45"

def test_decode_negative():
    d = Decimal.decode(20, 4, b"\x00\x21\x4b\xbc\x00" + b"\x00" * 8)
    assert d.positive is False
    assert d.to_bigint() == -12340001
    assert d.to_text() == "-1234.0001"

@pytest.mark.parametrize("body", [b"", b"\x01", b"\x01\x00\x00\x00", b"\x01" + b"\x00" * 17])
def test_decode_bad_length(body):
    with pytest.raises(tdsdecimal.DecimalParseError):
        tdsdecimal.decode(20, 0, body)

@pytest.mark.parametrize("sign", [0x02, 0x80, 0xFF])
def test_decode_bad_sign_byte(sign):
    with pytest.raises(tdsdecimal.DecimalParseError):
        tdsdecimal.decode(20, 2, bytes([sign]) + b"\x39\x30\x00\x00")

def test_decode_sign_bytes():
    assert tdsdecimal.decode(9, 0, b"\x01\x05\x00\x00\x00").to_bigint() == 5
    assert tdsdecimal.decode(9, 0, b"\x00\x05\x00\x00\x00").to_bigint() == -5

def test_decode_bad_fields():
    with pytest.raises(tdsdecimal.DecimalRangeError):
        tdsdecimal.decode(39, 0, b"\x01" + b"\x00" * 16)
    with pytest.raises(tdsdecimal.DecimalRangeError):
        tdsdecimal.decode(20, 300, b"\x01" + b"\x00" * 16)

def test_encoder_accessors_roundtrip():
    # What a bulk-row writer reads off a value.
    d = Decimal.from_text("1234.0001")
    assert d.to_bigint() == 12340001
    assert d.unscaled_bytes() == b"\xbc\x4b\x21"
    assert int.from_bytes(d.unscaled_bytes(), "big") == 12340001
