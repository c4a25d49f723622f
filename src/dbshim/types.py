"""
Fetch modes, parameter types and numeric type classification.

Rows come out of the modern layer as SQLAlchemy ``Row`` objects; the legacy
contract lets callers pick the shape a row is returned in. ``shape_row``
resolves that choice once per fetch.
"""
import re
from enum import IntEnum
from types import MappingProxyType, SimpleNamespace
from typing import Any

__all__ = [
    'FetchMode',
    'FetchOrientation',
    'ParamType',
    'NumericClass',
    'INT_TYPE',
    'BIGINT_TYPE',
    'FLOAT_TYPE',
    'NUMERIC_DATA_TYPES',
    'numeric_class',
    'coerce_numeric',
    'infer_param_type',
    'coerce_param',
    'shape_row',
]


class FetchMode(IntEnum):
    """Shape of a fetched row.
    """
    LAZY = 1
    ASSOC = 2
    NUM = 3
    BOTH = 4
    OBJ = 5


class FetchOrientation(IntEnum):
    """Cursor navigation requested by a fetch call.
    """
    NEXT = 0
    PRIOR = 1
    FIRST = 2
    LAST = 3
    ABS = 4
    REL = 5


class ParamType(IntEnum):
    """Declared type of a bound parameter.
    """
    NULL = 0
    INT = 1
    STR = 2
    LOB = 3
    BOOL = 5


class NumericClass(IntEnum):
    """Numeric class of an SQL type: 32-bit, 64-bit or float/decimal.
    """
    INT = 0
    BIGINT = 1
    FLOAT = 2


INT_TYPE = NumericClass.INT
BIGINT_TYPE = NumericClass.BIGINT
FLOAT_TYPE = NumericClass.FLOAT

# keys are upper case SQL type names or the three class codes
NUMERIC_DATA_TYPES = MappingProxyType({
    INT_TYPE: INT_TYPE,
    BIGINT_TYPE: BIGINT_TYPE,
    FLOAT_TYPE: FLOAT_TYPE,
    'INT': INT_TYPE,
    'INTEGER': INT_TYPE,
    'MEDIUMINT': INT_TYPE,
    'SMALLINT': INT_TYPE,
    'TINYINT': INT_TYPE,
    'BIGINT': BIGINT_TYPE,
    'SERIAL': BIGINT_TYPE,
    'DEC': FLOAT_TYPE,
    'DECIMAL': FLOAT_TYPE,
    'DOUBLE': FLOAT_TYPE,
    'DOUBLE PRECISION': FLOAT_TYPE,
    'FIXED': FLOAT_TYPE,
    'FLOAT': FLOAT_TYPE,
    })

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')
_BIGINT_TOKEN = re.compile(r'^([+-]?(?:0x[0-9a-f]+|\d+(?:e[+-]?\d+)?))', re.IGNORECASE)


def numeric_class(token: Any) -> NumericClass | None:
    """Classify a type token, or return None when it is not numeric.
    """
    if isinstance(token, str):
        token = token.upper()
    return NUMERIC_DATA_TYPES.get(token)


def coerce_numeric(value: Any, kind: NumericClass) -> str:
    """Render a value as an unquoted numeric literal of the given class.
    """
    if kind == NumericClass.INT:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        match = _LEADING_INT.match(str(value))
        return str(int(match.group(1))) if match else '0'
    if kind == NumericClass.BIGINT:
        match = _BIGINT_TOKEN.match(str(value))
        return match.group(1) if match else '0'
    try:
        return f'{float(value):F}'
    except (TypeError, ValueError):
        return f'{0.0:F}'


def infer_param_type(value: Any) -> ParamType:
    """Implicit parameter type for a value bound without an explicit type.
    """
    if isinstance(value, bool):
        return ParamType.BOOL
    if value is None:
        return ParamType.NULL
    if isinstance(value, int):
        return ParamType.INT
    return ParamType.STR


def coerce_param(value: Any, param_type: ParamType | int | None) -> Any:
    """Apply a declared parameter type to a value before it is sent.
    """
    if param_type is None or value is None:
        return value
    param_type = ParamType(param_type)
    if param_type == ParamType.NULL:
        return None
    if param_type == ParamType.BOOL:
        return bool(value)
    if param_type == ParamType.INT:
        return int(value)
    if param_type == ParamType.LOB:
        return value if isinstance(value, bytes) else str(value).encode()
    return value if isinstance(value, str) else str(value)


def shape_row(row: Any, mode: FetchMode) -> Any:
    """Return a SQLAlchemy row in the requested fetch shape.
    """
    if mode == FetchMode.LAZY:
        return row
    if mode == FetchMode.NUM:
        return tuple(row)
    mapping = dict(row._mapping)
    if mode == FetchMode.ASSOC:
        return mapping
    if mode == FetchMode.BOTH:
        both: dict[int | str, Any] = dict(enumerate(row))
        both.update(mapping)
        return both
    return SimpleNamespace(**mapping)
