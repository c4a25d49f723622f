import pytest
from dbshim.types import BIGINT_TYPE, FLOAT_TYPE, INT_TYPE, NUMERIC_DATA_TYPES
from dbshim.types import NumericClass, ParamType, coerce_numeric, coerce_param
from dbshim.types import infer_param_type, numeric_class


@pytest.mark.parametrize(('token', 'expected'), [
    ('INT', NumericClass.INT),
    ('INTEGER', NumericClass.INT),
    ('MEDIUMINT', NumericClass.INT),
    ('SMALLINT', NumericClass.INT),
    ('TINYINT', NumericClass.INT),
    ('BIGINT', NumericClass.BIGINT),
    ('SERIAL', NumericClass.BIGINT),
    ('DEC', NumericClass.FLOAT),
    ('DECIMAL', NumericClass.FLOAT),
    ('DOUBLE', NumericClass.FLOAT),
    ('DOUBLE PRECISION', NumericClass.FLOAT),
    ('FIXED', NumericClass.FLOAT),
    ('FLOAT', NumericClass.FLOAT),
])
def test_numeric_class_names(token, expected):
    assert numeric_class(token) == expected


def test_numeric_class_codes():
    assert numeric_class(INT_TYPE) == NumericClass.INT
    assert numeric_class(BIGINT_TYPE) == NumericClass.BIGINT
    assert numeric_class(FLOAT_TYPE) == NumericClass.FLOAT
    assert numeric_class(0) == NumericClass.INT
    assert numeric_class(2) == NumericClass.FLOAT


def test_numeric_class_unknown_token():
    """Unknown tokens classify as None without raising"""
    assert numeric_class('VARCHAR') is None
    assert numeric_class('bigint') == NumericClass.BIGINT
    assert numeric_class(42) is None


def test_numeric_table_is_read_only():
    with pytest.raises(TypeError):
        NUMERIC_DATA_TYPES['TEXT'] = FLOAT_TYPE


def test_coerce_numeric():
    assert coerce_numeric('42abc', NumericClass.INT) == '42'
    assert coerce_numeric('abc', NumericClass.INT) == '0'
    assert coerce_numeric(7.9, NumericClass.INT) == '7'
    assert coerce_numeric('-9223372036854775807', NumericClass.BIGINT) == '-9223372036854775807'
    assert coerce_numeric('0x1F', NumericClass.BIGINT) == '0x1F'
    assert coerce_numeric('x', NumericClass.BIGINT) == '0'
    assert coerce_numeric('1.5', NumericClass.FLOAT) == '1.500000'
    assert coerce_numeric('nope', NumericClass.FLOAT) == '0.000000'


def test_infer_param_type():
    assert infer_param_type(True) == ParamType.BOOL
    assert infer_param_type(None) == ParamType.NULL
    assert infer_param_type(12) == ParamType.INT
    assert infer_param_type('12') == ParamType.STR
    assert infer_param_type(1.5) == ParamType.STR


def test_coerce_param():
    assert coerce_param('12', ParamType.INT) == 12
    assert coerce_param(12, ParamType.STR) == '12'
    assert coerce_param(1, ParamType.BOOL) is True
    assert coerce_param('x', ParamType.NULL) is None
    assert coerce_param('x', ParamType.LOB) == b'x'
    assert coerce_param(None, ParamType.INT) is None
    assert coerce_param(3.5, None) == 3.5


if __name__ == '__main__':
    __import__('pytest').main([__file__])
