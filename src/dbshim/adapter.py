"""
Legacy adapter shim over a modern connection.

The adapter holds a non-owning reference to a ``dbshim.driver.Connection``.
Several adapters may share one connection; the adapter only closes it when
``close_connection()`` is called explicitly.

Provides:
- prepare/query and the fetch_* conveniences of the legacy contract
- quoting of values and identifiers, LIMIT/OFFSET injection
- schema introspection: list_tables() and describe_table()
- transaction control, last insert id and server version
"""
import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, Self

from dbshim.contract import LegacyAdapter, QueryBuilder
from dbshim.describe import CaseFolding, ColumnDescriptor, describe_rows
from dbshim.describe import fold_case
from dbshim.driver import Connection
from dbshim.exceptions import DELEGATED_ERRORS, AdapterError, ValidationError
from dbshim.exceptions import error_code, error_message
from dbshim.options import AdapterOptions
from dbshim.statement import Statement, validate_fetch_mode
from dbshim.types import NUMERIC_DATA_TYPES, FetchMode, coerce_numeric
from dbshim.types import numeric_class

logger = logging.getLogger(__name__)

__all__ = ['Adapter']

_VERSION = re.compile(r'((?:\d{1,2}\.){1,3}\d{1,2})')


class Adapter(LegacyAdapter):
    """Legacy database adapter backed by a modern connection.

    Args:
        connection: Modern connection handle, shared by reference
        fetch_mode: Default fetch mode of prepared statements
        case_folding: Case folding applied to describe output
        auto_quote_identifiers: Whether quote_identifier quotes by default
    """

    numeric_data_types = NUMERIC_DATA_TYPES

    def __init__(self, connection: Connection,
                 fetch_mode: FetchMode | int = FetchMode.ASSOC,
                 case_folding: CaseFolding | str = CaseFolding.NATURAL,
                 auto_quote_identifiers: bool = True) -> None:
        self.connection = connection
        self.case_folding = CaseFolding(case_folding)
        self.auto_quote_identifiers = auto_quote_identifiers
        self._fetch_mode = FetchMode.ASSOC
        self.set_fetch_mode(fetch_mode)
        self.calls = 0
        self.time = 0.0

    @classmethod
    def from_options(cls, connection: Connection, options: AdapterOptions) -> Self:
        return cls(connection,
                   fetch_mode=options.fetch_mode,
                   case_folding=options.case_folding,
                   auto_quote_identifiers=options.auto_quote_identifiers)

    def __repr__(self) -> str:
        return f'Adapter(connection={self.connection!r}, fetch_mode={self._fetch_mode.name})'

    def get_connection(self) -> Connection:
        return self.connection

    def get_config(self) -> dict[str, Any]:
        return {
            'dbname': self.connection.get_database(),
            'fetch_mode': self._fetch_mode,
            'case_folding': self.case_folding.value,
            'auto_quote_identifiers': self.auto_quote_identifiers,
            }

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    # connection lifecycle

    def connect(self) -> None:
        try:
            self.connection.connect()
        except DELEGATED_ERRORS as err:
            raise AdapterError(error_message(err), error_code(err)) from err

    def is_connected(self) -> bool:
        return self.connection.is_connected()

    def close_connection(self) -> None:
        self.connection.close()
        logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s')

    # transactions

    def _delegate(self, operation: str) -> Self:
        self.connect()
        try:
            getattr(self.connection, operation)()
        except DELEGATED_ERRORS as err:
            raise AdapterError(error_message(err), error_code(err)) from err
        return self

    def begin_transaction(self) -> Self:
        return self._delegate('begin_transaction')

    def commit(self) -> Self:
        return self._delegate('commit')

    def rollback(self) -> Self:
        return self._delegate('roll_back')

    @contextmanager
    def transaction(self) -> Iterator[Self]:
        """Run a block in a transaction, rolling back if it raises.

        Examples
            with adapter.transaction() as db:
                db.insert('orders', {...})
                db.update('stock', {...}, 'id = 1')
        """
        self.begin_transaction()
        try:
            yield self
        except Exception:
            logger.warning('Rolling back the current transaction')
            self.rollback()
            raise
        self.commit()

    # statements

    def prepare(self, sql: str | QueryBuilder) -> Statement:
        """Prepare a statement using the adapter's default fetch mode.
        """
        self.connect()
        stmt = Statement(self, sql)
        stmt.set_fetch_mode(self._fetch_mode)
        return stmt

    def query(self, sql: str | QueryBuilder, bind: Any = None) -> Statement:
        """Prepare and execute a statement with bind values.
        """
        sql, bind = self._prepare_sql(sql, bind)
        stmt = self.prepare(sql)
        stmt.execute(bind or None)
        return stmt

    def _prepare_sql(self, sql: str | QueryBuilder, bind: Any = None) -> tuple[str, Any]:
        """Resolve a query builder to text and normalize bind values.
        """
        if isinstance(sql, QueryBuilder):
            if not bind:
                bind = sql.get_bind()
            sql = sql.assemble()
        if bind is None:
            bind = []
        elif not isinstance(bind, (Mapping, list, tuple)):
            bind = [bind]
        return sql, bind

    def fetch_all(self, sql: str | QueryBuilder, bind: Any = None,
                  fetch_mode: FetchMode | int | None = None) -> list[Any]:
        stmt = self.query(sql, bind)
        return stmt.fetch_all(fetch_mode)

    def fetch_row(self, sql: str | QueryBuilder, bind: Any = None,
                  fetch_mode: FetchMode | int | None = None) -> Any:
        stmt = self.query(sql, bind)
        return stmt.fetch(fetch_mode)

    def fetch_col(self, sql: str | QueryBuilder, bind: Any = None) -> list[Any]:
        """First column of every row.
        """
        stmt = self.query(sql, bind)
        return stmt.fetch_all(column=0)

    def fetch_one(self, sql: str | QueryBuilder, bind: Any = None) -> Any:
        """First column of the first row.
        """
        stmt = self.query(sql, bind)
        return stmt.fetch_column(0)

    def fetch_pairs(self, sql: str | QueryBuilder, bind: Any = None) -> dict[Any, Any]:
        """First column as keys, second column as values.
        """
        stmt = self.query(sql, bind)
        return {row[0]: row[1] for row in stmt.fetch_all(FetchMode.NUM)}

    def fetch_assoc(self, sql: str | QueryBuilder, bind: Any = None) -> dict[Any, dict[str, Any]]:
        """Rows keyed by the value of their first column.
        """
        stmt = self.query(sql, bind)
        result = {}
        for row in stmt.fetch_all(FetchMode.ASSOC):
            result[next(iter(row.values()))] = row
        return result

    def insert(self, table: str, data: Mapping[str, Any]) -> int:
        """Insert one row and return the affected row count.
        """
        cols = ', '.join(self.quote_identifier(col, True) for col in data)
        placeholders = ', '.join('?' for _ in data)
        sql = f'INSERT INTO {self.quote_identifier(table, True)} ({cols}) VALUES ({placeholders})'
        return self.query(sql, list(data.values())).row_count()

    def update(self, table: str, data: Mapping[str, Any], where: str = '') -> int:
        """Update rows matching a where clause and return the affected row count.
        """
        sets = ', '.join(f'{self.quote_identifier(col, True)} = ?' for col in data)
        sql = f'UPDATE {self.quote_identifier(table, True)} SET {sets}'
        if where:
            sql += f' WHERE {where}'
        return self.query(sql, list(data.values())).row_count()

    def delete(self, table: str, where: str = '') -> int:
        sql = f'DELETE FROM {self.quote_identifier(table, True)}'
        if where:
            sql += f' WHERE {where}'
        return self.query(sql).row_count()

    # quoting

    def quote(self, value: Any, type: str | int | None = None) -> Any:
        """Quote a value for safe inclusion in SQL text.

        Integers and floats are returned unchanged. With a numeric ``type``
        the value is coerced to an unquoted literal of that class instead.
        ``None`` becomes the SQL keyword ``NULL`` rather than the empty string
        literal ``''`` the connection would produce for it.
        """
        if isinstance(value, QueryBuilder):
            return f'({value.assemble()})'
        if isinstance(value, (list, tuple)):
            return ', '.join(str(self.quote(item, type)) for item in value)
        if type is not None:
            kind = numeric_class(type)
            if kind is not None:
                return coerce_numeric(value, kind)
        if value is None:
            return 'NULL'
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        if isinstance(value, bool):
            value = int(value)
        self.connect()
        return self.connection.quote(value)

    def quote_into(self, text: str, value: Any, type: str | int | None = None,
                   count: int | None = None) -> str:
        """Replace ``?`` placeholders in text with the quoted value.
        """
        quoted = str(self.quote(value, type))
        if count is None:
            return text.replace('?', quoted)
        return text.replace('?', quoted, count)

    def get_quote_identifier_symbol(self) -> str:
        return self.connection.identifier_quote_character

    def quote_identifier(self, ident: str | Sequence[str], auto: bool = False) -> str:
        """Quote a (possibly dotted) identifier.

        Nothing is quoted when ``auto`` is set and auto quoting is disabled.
        """
        segments = ident.split('.') if isinstance(ident, str) else list(ident)
        if auto and not self.auto_quote_identifiers:
            return '.'.join(segments)
        q = self.get_quote_identifier_symbol()
        return '.'.join(f'{q}{seg.replace(q, q + q)}{q}' for seg in segments)

    def quote_column_as(self, ident: str, alias: str | None = None, auto: bool = False) -> str:
        quoted = self.quote_identifier(ident, auto)
        if alias is not None and alias != ident.split('.')[-1]:
            quoted += f' AS {self.quote_identifier(alias, auto)}'
        return quoted

    def quote_table_as(self, ident: str, alias: str | None = None, auto: bool = False) -> str:
        quoted = self.quote_identifier(ident, auto)
        if alias is not None:
            quoted += f' AS {self.quote_identifier(alias, auto)}'
        return quoted

    def fold_case(self, key: str) -> str:
        return fold_case(key, self.case_folding)

    def limit(self, sql: str, count: int, offset: int = 0) -> str:
        """Append a LIMIT clause, and an OFFSET clause when offset is positive.
        """
        count = int(count)
        if count <= 0:
            raise ValidationError(f'LIMIT argument count={count} is not valid')
        offset = int(offset)
        if offset < 0:
            raise ValidationError(f'LIMIT argument offset={offset} is not valid')
        sql += f' LIMIT {count}'
        if offset > 0:
            sql += f' OFFSET {offset}'
        return sql

    # introspection

    def list_tables(self) -> list[str]:
        return self.fetch_col(self.connection.strategy.list_tables_sql())

    def describe_table(self, table_name: str,
                       schema_name: str | None = None) -> dict[str, ColumnDescriptor]:
        """Column descriptors of a table keyed by column name, in column order.

        Rows are fetched positionally so the result does not depend on the
        driver's column name casing.
        """
        strategy = self.connection.strategy
        sql = strategy.describe_table_sql(table_name, schema_name, self.quote_identifier)
        stmt = self.query(sql)
        rows = strategy.normalize_describe_rows(stmt.fetch_all(FetchMode.NUM))
        return describe_rows(rows, table_name, schema_name=schema_name,
                             case_folding=self.case_folding)

    def last_insert_id(self, table_name: str | None = None,
                       primary_key: str | None = None) -> Any:
        """Last value generated for an auto-increment column on this connection.

        The table and primary key arguments are accepted for compatibility
        and ignored: the identity comes from the connection's last insert,
        which is wrong for engines with per-sequence identities.
        """
        self.connect()
        try:
            return self.connection.last_insert_id()
        except DELEGATED_ERRORS as err:
            raise AdapterError(error_message(err), error_code(err)) from err

    def get_server_version(self) -> str | None:
        """Server version as dotted numbers, or None when unavailable.
        """
        try:
            self.connect()
            native = self.connection.get_native_connection()
            version = self.connection.strategy.server_version_attribute(native)
        except Exception as err:
            logger.debug(f'Could not read server version: {err}')
            return None
        match = _VERSION.search(str(version or ''))
        if match:
            return match.group(1)
        return None

    # fetch mode

    @property
    def fetch_mode(self) -> FetchMode:
        return self._fetch_mode

    @fetch_mode.setter
    def fetch_mode(self, mode: FetchMode | int) -> None:
        self.set_fetch_mode(mode)

    def get_fetch_mode(self) -> FetchMode:
        return self._fetch_mode

    def set_fetch_mode(self, mode: FetchMode | int) -> None:
        fetch_mode = validate_fetch_mode(mode)
        if fetch_mode is None:
            raise ValidationError(f"Invalid fetch mode '{mode}' specified")
        self._fetch_mode = fetch_mode

    def supports_parameters(self, kind: str) -> bool:
        return True
