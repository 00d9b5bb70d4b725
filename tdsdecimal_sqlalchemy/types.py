import decimal

from sqlalchemy import types as sqltypes

import tdsdecimal

# Wide enough for any 128-bit magnitude at any column scale; the wire limits
# are enforced by tdsdecimal.Decimal afterwards.
_QUANTIZE_CONTEXT = decimal.Context(
    prec=tdsdecimal.MAX_PRECISION + tdsdecimal.MAX_SCALE + 2,
    rounding=decimal.ROUND_HALF_EVEN,
)

class TdsDecimal(sqltypes.TypeDecorator):
    """NUMERIC column whose values must fit the TDS DECIMAL wire type.

    Bind values go through :class:`tdsdecimal.Decimal`, so anything the wire
    cannot carry (NaN, more than 128 bits of magnitude, scale past 255) fails
    before it reaches the driver. Results come back as ``decimal.Decimal``.
    """

    impl = sqltypes.Numeric
    cache_ok = True

    def __init__(self, precision=tdsdecimal.MAX_PRECISION, scale=None, **kw):
        super().__init__(precision=precision, scale=scale, asdecimal=True, **kw)
        # Kept on the decorator too so the statement cache key sees them.
        self.precision = precision
        self.scale = scale

    def _to_wire(self, value):
        if isinstance(value, tdsdecimal.Decimal):
            return value
        if isinstance(value, bool):
            raise TypeError("bool is not a valid DECIMAL bind value")
        if isinstance(value, decimal.Decimal):
            return tdsdecimal.Decimal.from_decimal(value)
        if isinstance(value, int):
            if tdsdecimal.INT64_MIN <= value <= tdsdecimal.INT64_MAX:
                return tdsdecimal.Decimal.from_int64(value)
            return tdsdecimal.Decimal.from_text(str(value))
        if isinstance(value, float):
            # Shortest exact scale first; truncating at the column scale would
            # turn 0.29 (0.28999...) into 0.28.
            wire = tdsdecimal.Decimal.from_float(value)
            if self.scale is None or wire.scale == self.scale:
                return wire
            quantized = wire.to_decimal().quantize(
                decimal.Decimal(1).scaleb(-self.scale), context=_QUANTIZE_CONTEXT
            )
            return tdsdecimal.Decimal.from_decimal(quantized)
        if isinstance(value, str):
            return tdsdecimal.Decimal.from_text(value)
        raise TypeError(f"Unsupported DECIMAL bind value type: {type(value).__name__}")

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return self._to_wire(value).to_decimal()

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, tdsdecimal.Decimal):
            return value.to_decimal()
        if isinstance(value, decimal.Decimal):
            return value
        # Floats from drivers without native DECIMAL: keep the shortest repr.
        return decimal.Decimal(str(value))
