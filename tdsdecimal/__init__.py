from .native import (
    PRECISION, MIN_PRECISION, MAX_PRECISION, MAX_SCALE, AUTO_SCALE,
    MAX_FLOAT_MAGNITUDE, INT64_MIN, INT64_MAX, WIRE_SIZE, SCALE_TABLE,
    MAX_TABLE_SCALE, DecimalWireView,
)
import json
import math

# Exceptions (DB-API 2.0 layout, shared with the driver).
class Error(Exception):
    pass

class InterfaceError(Error):
    pass

class DatabaseError(Error):
    pass

class DataError(DatabaseError):
    pass

class DecimalValueError(DataError, ValueError):
    """Input is not a number that can become a decimal (NaN, infinity)."""

class DecimalRangeError(DataError, OverflowError):
    """Magnitude, scale or precision outside what the wire type can hold."""

class DecimalParseError(DataError, ValueError):
    """Decimal text or wire bytes are malformed."""

def _format_value_for_error(v, *, max_str=200, max_bytes=64):
    if v is None:
        return None
    if isinstance(v, (bool, int, float)):
        # NaN/inf are not valid JSON
        if isinstance(v, float) and not math.isfinite(v):
            return repr(v)
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        b = bytes(v)
        if len(b) <= max_bytes:
            return {"_type": "bytes", "hex": b.hex(), "len": len(b)}
        head = b[:max_bytes]
        return {"_type": "bytes", "hex_prefix": head.hex(), "len": len(b)}
    if isinstance(v, str):
        if len(v) <= max_str:
            return v
        return v[:max_str] + "…"
    if isinstance(v, (tuple, list)):
        return [_format_value_for_error(x) for x in v]
    # Fall back to capped repr
    s = repr(v)
    if len(s) <= max_str:
        return s
    return s[:max_str] + "…"

def _error(exc_class, msg, **context):
    """Build *exc_class* with the offending inputs appended as JSON context."""
    if context:
        ctx = {k: _format_value_for_error(v) for k, v in context.items()}
        msg = msg + "\nContext: " + json.dumps(ctx, ensure_ascii=False)
    return exc_class(msg)

from .value import Decimal, decode  # noqa: E402

__all__ = [
    "Decimal", "decode",
    "Error", "InterfaceError", "DatabaseError", "DataError",
    "DecimalValueError", "DecimalRangeError", "DecimalParseError",
    "PRECISION", "MIN_PRECISION", "MAX_PRECISION", "MAX_SCALE", "AUTO_SCALE",
    "MAX_FLOAT_MAGNITUDE", "INT64_MIN", "INT64_MAX", "WIRE_SIZE",
    "SCALE_TABLE", "MAX_TABLE_SCALE", "DecimalWireView",
]
