"""Fixed-point DECIMAL/NUMERIC values in the TDS wire layout.

A value is a sign, a scale, a precision tag and an unsigned 128-bit magnitude
kept as four 32-bit words, least significant first. Instances are immutable;
every conversion builds a new one.
"""

import dataclasses
import decimal
import logging
import math
import re

from . import _error, DecimalValueError, DecimalRangeError, DecimalParseError
from .native import (
    PRECISION, MIN_PRECISION, MAX_PRECISION, MAX_SCALE, AUTO_SCALE,
    MAX_FLOAT_MAGNITUDE, INT64_MIN, INT64_MAX, SCALE_TABLE, MAX_TABLE_SCALE,
    WORD_BASE, WORD_MASK, WORD_COUNT, MAGNITUDE_BYTES, MAGNITUDE_LIMIT,
    int_to_words, bytes_to_words, pack_wire, unpack_wire,
)

log = logging.getLogger(__name__)

# Signed base-10 integer literal, nothing else (no spaces, underscores, exponents).
_UNSCALED_RE = re.compile(r"[+-]?[0-9]+")


@dataclasses.dataclass(frozen=True)
class Decimal:
    words: tuple
    positive: bool = True
    prec: int = PRECISION
    scale: int = 0

    def __post_init__(self):
        words = tuple(self.words)
        if len(words) != WORD_COUNT:
            raise _error(DecimalRangeError, "Decimal magnitude must be exactly four 32-bit words", words=words)
        for w in words:
            if isinstance(w, bool) or not isinstance(w, int):
                raise TypeError(f"Decimal magnitude words must be int, got {type(w).__name__}")
            if w < 0 or w > WORD_MASK:
                raise _error(DecimalRangeError, "Decimal magnitude word out of 32-bit range", words=words)
        _check_int("prec", self.prec)
        _check_int("scale", self.scale)
        if not MIN_PRECISION <= self.prec <= MAX_PRECISION:
            raise _error(DecimalRangeError, "Decimal precision out of range", prec=self.prec)
        if not 0 <= self.scale <= MAX_SCALE:
            raise _error(DecimalRangeError, "Decimal scale out of range", scale=self.scale)
        object.__setattr__(self, "words", words)
        object.__setattr__(self, "positive", bool(self.positive))

    # Constructors

    @classmethod
    def from_float(cls, f, scale=AUTO_SCALE):
        """Convert a float, at *scale* or at the smallest exact scale.

        With ``AUTO_SCALE`` the scales 0..38 are tried in order and the first
        one that makes ``f * 10**scale`` a whole number wins. If none does,
        the largest scale whose magnitude still fits in 128 bits is used.
        An explicit scale is always kept; the scaled value is truncated.
        """
        if isinstance(f, bool) or not isinstance(f, (int, float)):
            raise TypeError(f"from_float() expects a float, got {type(f).__name__}")
        try:
            f = float(f)
        except OverflowError:
            raise _error(DecimalRangeError, "Float value is out of range", value=f) from None
        if math.isnan(f):
            raise _error(DecimalValueError, "NaN can't be converted to decimal", value=f)
        if math.isinf(f):
            raise _error(DecimalValueError, "Infinity can't be converted to decimal", value=f)
        positive = f >= 0
        f = abs(f)
        if f > MAX_FLOAT_MAGNITUDE:
            raise _error(DecimalRangeError, "Float value is out of range", value=f)

        if scale == AUTO_SCALE:
            scale, candidate = _search_scale(f)
        else:
            _check_int("scale", scale)
            if not 0 <= scale <= MAX_TABLE_SCALE:
                raise _error(DecimalRangeError, "Float scale out of range", value=f, scale=scale)
            candidate = f * SCALE_TABLE[scale]

        words = int_to_words(int(candidate))
        if words is None:
            raise _error(DecimalRangeError, "Float value is out of range", value=f, scale=scale)
        return cls(words, positive, PRECISION, scale)

    @classmethod
    def from_int64(cls, v, scale=0):
        """Convert a signed 64-bit integer, keeping *scale* as given.

        The minimum int64 has no positive counterpart, so it is stored as the
        magnitude 2**63 with a negative sign and its scale is forced to 0
        whatever the caller asked for.
        """
        if isinstance(v, bool) or not isinstance(v, int):
            raise TypeError(f"from_int64() expects an int, got {type(v).__name__}")
        if not INT64_MIN <= v <= INT64_MAX:
            raise _error(DecimalRangeError, "Integer value is out of int64 range", value=v)
        _check_int("scale", scale)
        if not 0 <= scale <= MAX_SCALE:
            raise _error(DecimalRangeError, "Decimal scale out of range", scale=scale)
        positive = v >= 0
        if v == INT64_MIN:
            return cls((0, 0x80000000, 0, 0), False, PRECISION, 0)
        v = abs(v)
        return cls((v & WORD_MASK, v >> 32, 0, 0), positive, PRECISION, scale)

    @classmethod
    def from_text(cls, s):
        """Parse decimal text such as ``"-1234.56"``.

        The scale is the number of characters after the last point.
        """
        if not isinstance(s, str):
            raise TypeError(f"from_text() expects a str, got {type(s).__name__}")
        point = s.rfind(".")
        if point == -1:
            scale = 0
            unscaled = s
        else:
            scale = len(s) - point - 1
            unscaled = s[:point] + s[point + 1:]
        if scale > MAX_SCALE:
            raise _error(DecimalRangeError, "Can't parse decimal number: scale too large", text=s)

        if _UNSCALED_RE.fullmatch(unscaled) is None:
            raise _error(DecimalParseError, "Can't parse decimal number", text=s)
        r = int(unscaled)

        magnitude = abs(r)
        nbytes = (magnitude.bit_length() + 7) // 8
        if nbytes > MAGNITUDE_BYTES:
            raise _error(DecimalRangeError, "Can't parse decimal number: precision too large", text=s)
        words = bytes_to_words(magnitude.to_bytes(nbytes, "big"))
        return cls(words, r >= 0, PRECISION, scale)

    @classmethod
    def from_decimal(cls, d):
        """Convert a :class:`decimal.Decimal`, keeping its exponent as the scale."""
        if not isinstance(d, decimal.Decimal):
            raise TypeError(f"from_decimal() expects decimal.Decimal, got {type(d).__name__}")
        if not d.is_finite():
            raise _error(DecimalValueError, "Decimal NaN/Inf not supported", value=d)
        return cls.from_text(format(d, "f"))

    @classmethod
    def from_wire(cls, prec, scale, positive, words):
        """Build a value from fields already read off the wire."""
        return cls(tuple(words), positive, prec, scale)

    # Accessors

    def to_float(self):
        val = 0.0
        for w in reversed(self.words):
            val = val * WORD_BASE + w
        if not self.positive:
            val = -val
        if self.scale != 0:
            if self.scale <= MAX_TABLE_SCALE:
                val /= SCALE_TABLE[self.scale]
            else:
                val /= 10.0 ** self.scale
        return val

    def to_bigint(self):
        """Signed unscaled value as a Python int."""
        x = int.from_bytes(
            b"".join(w.to_bytes(4, "big") for w in reversed(self.words)), "big"
        )
        if not self.positive:
            x = -x
        return x

    def unscaled_bytes(self):
        """Minimal big-endian bytes of the unscaled magnitude, sign dropped."""
        x = abs(self.to_bigint())
        return x.to_bytes((x.bit_length() + 7) // 8, "big")

    def to_text(self):
        s = str(self.to_bigint())
        out = []
        if s[0] in "+-":
            out.append(s[0])
            s = s[1:]
        pos = len(s) - self.scale
        if pos <= 0:
            out.append("0")
        else:
            out.append(s[:pos])
        if self.scale > 0:
            out.append(".")
            if pos < 0:
                out.append("0" * -pos)
                pos = 0
            out.append(s[pos:])
        return "".join(out)

    def to_text_bytes(self):
        return self.to_text().encode("ascii")

    def to_decimal(self):
        return decimal.Decimal(self.to_text())

    def encode(self):
        """17-byte DECIMALN body: sign byte then the four words, little-endian."""
        return pack_wire(self.positive, self.words)

    @classmethod
    def decode(cls, prec, scale, buf):
        unpacked = unpack_wire(buf)
        if unpacked is None:
            raise _error(DecimalParseError, "Malformed DECIMALN value: unexpected length", prec=prec, scale=scale, buf=buf)
        sign, words = unpacked
        if sign not in (0, 1):
            raise _error(DecimalParseError, "Malformed DECIMALN value: unexpected sign byte", prec=prec, scale=scale, buf=buf)
        return cls.from_wire(prec, scale, sign == 1, words)

    def __float__(self):
        return self.to_float()

    def __str__(self):
        return self.to_text()

    def __bytes__(self):
        return self.to_text_bytes()


def decode(prec, scale, buf):
    """Decode a DECIMALN value body read with precision *prec* and *scale*."""
    return Decimal.decode(prec, scale, buf)


def _check_int(name, v):
    if isinstance(v, bool) or not isinstance(v, int):
        raise TypeError(f"{name} must be int, got {type(v).__name__}")


def _search_scale(f):
    # f is non-negative and finite here.
    for s, factor in enumerate(SCALE_TABLE):
        candidate = f * factor
        if candidate.is_integer():
            return s, candidate
    s = MAX_TABLE_SCALE
    while s > 0 and f * SCALE_TABLE[s] >= MAGNITUDE_LIMIT:
        s -= 1
    log.debug("no exact scale for %r within %d digits, using scale %d", f, MAX_TABLE_SCALE, s)
    return s, f * SCALE_TABLE[s]
