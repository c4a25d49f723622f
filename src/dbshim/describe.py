"""
Column descriptor parsing for "describe table" results.

A describe row is six positional text fields::

    (field, type, null, key, default, extra)

The type text embeds length, precision, scale and signedness, e.g.
``varchar(255)``, ``decimal(10,2)`` or ``int(11) unsigned``. The rules that
pull these apart live in ``TYPE_RULES``, an ordered table where the first
matching pattern wins.
"""
import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple

logger = logging.getLogger(__name__)

__all__ = [
    'CaseFolding',
    'ColumnDescriptor',
    'TypeInfo',
    'TypeRule',
    'TYPE_RULES',
    'fold_case',
    'parse_type',
    'parse_column',
    'describe_rows',
]

FIELD, TYPE, NULL, KEY, DEFAULT, EXTRA = range(6)


class CaseFolding(str, Enum):
    """Identifier case folding applied to describe output keys.
    """
    NATURAL = 'natural'
    UPPER = 'upper'
    LOWER = 'lower'


def fold_case(value: str | None, mode: CaseFolding | str = CaseFolding.NATURAL) -> str | None:
    """Fold an identifier according to the configured policy.
    """
    if value is None:
        return None
    mode = CaseFolding(mode)
    if mode == CaseFolding.UPPER:
        return value.upper()
    if mode == CaseFolding.LOWER:
        return value.lower()
    return value


class TypeInfo(NamedTuple):
    data_type: str
    length: int | None = None
    precision: int | None = None
    scale: int | None = None


@dataclass(frozen=True, slots=True)
class TypeRule:
    """Pattern plus the extraction applied to its match.
    """
    name: str
    pattern: re.Pattern
    extract: Callable[[re.Match], TypeInfo]


def _char(match: re.Match) -> TypeInfo:
    return TypeInfo(match.group(1), length=int(match.group(2)))


def _decimal(match: re.Match) -> TypeInfo:
    return TypeInfo('decimal', precision=int(match.group(1)), scale=int(match.group(2)))


def _float(match: re.Match) -> TypeInfo:
    return TypeInfo('float', precision=int(match.group(1)), scale=int(match.group(2)))


def _int(match: re.Match) -> TypeInfo:
    # integer width is a display hint, not a length or precision
    return TypeInfo(match.group(1))


TYPE_RULES: tuple[TypeRule, ...] = (
    TypeRule('char', re.compile(r'^((?:var)?char)\((\d+)\)', re.IGNORECASE), _char),
    TypeRule('decimal', re.compile(r'^decimal\((\d+),(\d+)\)', re.IGNORECASE), _decimal),
    TypeRule('float', re.compile(r'^float\((\d+),(\d+)\)', re.IGNORECASE), _float),
    TypeRule('int', re.compile(r'^((?:big|medium|small|tiny)?int)\((\d+)\)', re.IGNORECASE), _int),
    )

_UNSIGNED = re.compile(r'unsigned', re.IGNORECASE)


def parse_type(type_text: str) -> tuple[TypeInfo, bool]:
    """Split describe type text into normalized type info and the unsigned flag.
    """
    unsigned = bool(_UNSIGNED.search(type_text))
    for rule in TYPE_RULES:
        match = rule.pattern.match(type_text)
        if match:
            return rule.extract(match), unsigned
    return TypeInfo(type_text), unsigned


@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    """Normalized metadata for one table column.
    """
    schema_name: str | None
    table_name: str
    column_name: str
    column_position: int
    data_type: str
    default: Any
    nullable: bool
    length: int | None = None
    scale: int | None = None
    precision: int | None = None
    unsigned: bool | None = None
    primary: bool = False
    primary_position: int | None = None
    identity: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Legacy upper-case key form.
        """
        return {
            'SCHEMA_NAME': self.schema_name,
            'TABLE_NAME': self.table_name,
            'COLUMN_NAME': self.column_name,
            'COLUMN_POSITION': self.column_position,
            'DATA_TYPE': self.data_type,
            'DEFAULT': self.default,
            'NULLABLE': self.nullable,
            'LENGTH': self.length,
            'SCALE': self.scale,
            'PRECISION': self.precision,
            'UNSIGNED': self.unsigned,
            'PRIMARY': self.primary,
            'PRIMARY_POSITION': self.primary_position,
            'IDENTITY': self.identity,
            }

    def __getitem__(self, key: str) -> Any:
        return self.to_dict()[key]


def parse_column(row: Sequence[Any], table_name: str, position: int,
                 primary_position: int = 1, schema_name: str | None = None,
                 case_folding: CaseFolding | str = CaseFolding.NATURAL,
                 ) -> tuple[ColumnDescriptor, int]:
    """Build a descriptor from one describe row.

    Args:
        row: The six describe fields, in order
        table_name: Table the row belongs to
        position: 1-based ordinal of the row in the table
        primary_position: Next primary key ordinal to hand out
        schema_name: Optional schema the table lives in
        case_folding: Identifier case folding policy

    Returns
        The descriptor and the next primary key ordinal
    """
    if len(row) < 6:
        raise ValueError(f'Describe row needs 6 fields, got {len(row)}: {row!r}')

    type_info, unsigned = parse_type(str(row[TYPE]))

    primary, pk_position, identity = False, None, False
    if str(row[KEY] or '').upper() == 'PRI':
        primary = True
        pk_position = primary_position
        identity = row[EXTRA] == 'auto_increment'
        primary_position += 1

    descriptor = ColumnDescriptor(
        schema_name=fold_case(schema_name, case_folding),
        table_name=fold_case(table_name, case_folding),
        column_name=fold_case(row[FIELD], case_folding),
        column_position=position,
        data_type=type_info.data_type,
        default=row[DEFAULT],
        nullable=row[NULL] == 'YES',
        length=type_info.length,
        scale=type_info.scale,
        precision=type_info.precision,
        unsigned=True if unsigned else None,
        primary=primary,
        primary_position=pk_position,
        identity=identity,
        )
    return descriptor, primary_position


def describe_rows(rows: Iterable[Sequence[Any]], table_name: str,
                  schema_name: str | None = None,
                  case_folding: CaseFolding | str = CaseFolding.NATURAL,
                  ) -> dict[str, ColumnDescriptor]:
    """Parse all describe rows of a table, keyed by column name in source order.
    """
    desc: dict[str, ColumnDescriptor] = {}
    primary_position = 1
    for position, row in enumerate(rows, start=1):
        column, primary_position = parse_column(
            row, table_name, position, primary_position,
            schema_name=schema_name, case_folding=case_folding)
        desc[column.column_name] = column
    logger.debug(f'Described {table_name}: {len(desc)} columns, {primary_position - 1} in primary key')
    return desc
