from ctypes import c_uint8, c_uint32, LittleEndianStructure

# Protocol limits (must match the TDS DECIMALN/NUMERICN type).
#
# Every constructor in this package tags values with precision 20. The tag is
# carried because the wire type info needs one, it is not a digit count.
PRECISION = 20
MIN_PRECISION = 1
MAX_PRECISION = 38
MAX_SCALE = 255

# Sentinel scale for Decimal.from_float: search for the smallest exact scale.
AUTO_SCALE = 100

# Largest magnitude accepted from a float (FLT_MAX, as the server defines it).
MAX_FLOAT_MAGNITUDE = 3.402823669209385e+38

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

WORD_BITS = 32
WORD_BASE = 1 << WORD_BITS
WORD_MASK = WORD_BASE - 1
WORD_COUNT = 4
MAGNITUDE_BYTES = WORD_COUNT * 4
MAGNITUDE_LIMIT = 1 << (WORD_BITS * WORD_COUNT)

# Sign byte followed by the full 16-byte magnitude.
WIRE_SIZE = 1 + MAGNITUDE_BYTES
# Body lengths a decoder may see (precision 1-9, 10-19, 20-28, 29-38).
WIRE_SIZES = (5, 9, 13, 17)


def _build_scale_table():
    acc = 1.0
    table = []
    for _ in range(MAX_PRECISION + 1):
        table.append(acc)
        acc *= 10
    return tuple(table)

# 10**i as floats for i in 0..38. Built once at import, read-only afterwards.
SCALE_TABLE = _build_scale_table()
MAX_TABLE_SCALE = len(SCALE_TABLE) - 1


class DecimalWireView(LittleEndianStructure):
    """On-the-wire DECIMALN body: sign byte (1 = positive) and the magnitude
    as four little-endian 32-bit words, least significant first."""

    _pack_ = 1
    _fields_ = [
        ("sign", c_uint8),
        ("words", c_uint32 * WORD_COUNT),
    ]


def int_to_words(val):
    """Split an unsigned integer below 2**128 into four little-endian words.

    Returns None when *val* does not fit so callers can raise with their own
    context; the magnitude is never truncated.
    """
    if val < 0 or val >= MAGNITUDE_LIMIT:
        return None
    words = []
    for _ in range(WORD_COUNT):
        words.append(val % WORD_BASE)
        val //= WORD_BASE
    return tuple(words)


def bytes_to_words(buf):
    """Distribute big-endian magnitude bytes (at most 16) into four words."""
    out = [0] * WORD_COUNT
    n = len(buf)
    for i, b in enumerate(buf):
        pos = n - i - 1
        out[pos // 4] += b << (pos % 4 * 8)
    return tuple(out)


def pack_wire(positive, words):
    view = DecimalWireView()
    view.sign = 1 if positive else 0
    for i, w in enumerate(words):
        view.words[i] = w
    return bytes(view)


def unpack_wire(buf):
    """Read (sign byte, words) from a DECIMALN body of 5, 9, 13 or 17 bytes.

    Returns None for any other length. The sign byte is returned as read;
    only 0 and 1 are valid.
    """
    buf = bytes(buf)
    if len(buf) not in WIRE_SIZES:
        return None
    padded = buf + b"\x00" * (WIRE_SIZE - len(buf))
    view = DecimalWireView.from_buffer_copy(padded)
    return int(view.sign), tuple(int(w) for w in view.words)
