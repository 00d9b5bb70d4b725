import pytest
import sqlalchemy

import tdsdecimal

@pytest.fixture
def engine():
    eng = sqlalchemy.create_engine("sqlite://")
    yield eng
    eng.dispose()

@pytest.fixture
def make_decimal():
    # Wire-decoder style construction: fields straight from the stream.
    def make(magnitude, scale=0, positive=True, prec=tdsdecimal.PRECISION):
        words = tuple((magnitude >> (32 * i)) & 0xFFFFFFFF for i in range(4))
        return tdsdecimal.Decimal.from_wire(prec, scale, positive, words)
    return make
