"""
Modern connection handle built on a SQLAlchemy engine.

Provides the capability set the adapter shim consumes: connect/close,
literal quoting, prepared statements, nestable transactions, last insert id
and access to the native DB-API connection.

Outside of an explicit transaction every statement is committed as soon as
it has run, so callers see autocommit behaviour.
"""
import logging
from collections.abc import Mapping
from typing import Any, NamedTuple

import sqlalchemy as sa
from dbshim.driver.statement import PreparedStatement
from dbshim.exceptions import DriverError, NoActiveTransaction
from dbshim.strategy import DialectStrategy, get_strategy
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

__all__ = ['Connection', 'BufferedResult']


class BufferedResult(NamedTuple):
    keys: tuple[str, ...]
    rows: list[Any]
    rowcount: int


class Connection:
    """Wraps a SQLAlchemy engine and lazily opens one connection from it.
    """

    def __init__(self, engine: Engine, strategy: DialectStrategy | None = None) -> None:
        self.engine = engine
        self.strategy = strategy or get_strategy(engine.dialect.name)
        self.sa_connection: sa.engine.Connection | None = None
        self._nesting = 0
        self._rollback_only = False

    def __repr__(self) -> str:
        return f'Connection(url={self.engine.url!r}, connected={self.is_connected()})'

    @property
    def dialect_name(self) -> str:
        return str(self.engine.dialect.name).lower()

    @property
    def identifier_quote_character(self) -> str:
        return self.engine.dialect.identifier_preparer.initial_quote

    @property
    def transaction_nesting_level(self) -> int:
        return self._nesting

    def get_database(self) -> str | None:
        return self.engine.url.database

    def connect(self) -> bool:
        """Open the connection; returns False when it was already open.
        """
        if self.is_connected():
            return False
        self.sa_connection = self.engine.connect()
        self._nesting = 0
        self._rollback_only = False
        logger.debug(f'Connected to {self.dialect_name} database {self.get_database()!r}')
        return True

    def is_connected(self) -> bool:
        return self.sa_connection is not None and not self.sa_connection.closed

    def close(self) -> None:
        if self.is_connected():
            self.sa_connection.close()
            logger.debug(f'Closed {self.dialect_name} connection')
        self.sa_connection = None
        self._nesting = 0
        self._rollback_only = False

    def get_native_connection(self) -> Any:
        """The raw DB-API connection underneath SQLAlchemy's pool proxy.
        """
        self.connect()
        return self.sa_connection.connection.driver_connection

    def quote(self, value: Any) -> str:
        """Quote a value as a string literal with the connection's escaping rules.
        """
        if isinstance(value, bytes):
            value = value.decode()
        native = self.get_native_connection()
        return self.strategy.quote_literal(str(value), native, self.engine.dialect)

    def prepare(self, sql: str) -> PreparedStatement:
        self.connect()
        return PreparedStatement(self, sql)

    def run(self, clause: sa.TextClause, params: Mapping[str, Any]) -> BufferedResult:
        """Execute a compiled clause and buffer its result.
        """
        self.connect()
        try:
            result = self.sa_connection.execute(clause, dict(params))
            if result.returns_rows:
                keys = tuple(result.keys())
                rows = list(result.all())
                buffered = BufferedResult(keys, rows, len(rows))
            else:
                buffered = BufferedResult((), [], result.rowcount)
        except Exception:
            if not self._nesting and self.sa_connection.in_transaction():
                self.sa_connection.rollback()
            raise
        if not self._nesting:
            self.sa_connection.commit()
        return buffered

    def begin_transaction(self) -> None:
        self.connect()
        if self._nesting == 0 and self.sa_connection.in_transaction():
            self.sa_connection.commit()
        self._nesting += 1
        logger.debug(f'Begin transaction, nesting level {self._nesting}')

    def commit(self) -> None:
        if self._nesting == 0:
            raise NoActiveTransaction('There is no active transaction.')
        if self._rollback_only:
            raise DriverError('Transaction commit failed because the transaction '
                              'has been marked for rollback only.')
        self._nesting -= 1
        if self._nesting == 0:
            self.sa_connection.commit()
        logger.debug(f'Commit, nesting level {self._nesting}')

    def roll_back(self) -> None:
        if self._nesting == 0:
            raise NoActiveTransaction('There is no active transaction.')
        if self._nesting == 1:
            self._nesting = 0
            self._rollback_only = False
            self.sa_connection.rollback()
        else:
            self._nesting -= 1
            self._rollback_only = True
        logger.debug(f'Rollback, nesting level {self._nesting}')

    def is_transaction_active(self) -> bool:
        return self._nesting > 0

    def last_insert_id(self) -> Any:
        """Identity value generated by the last insert on this session.
        """
        result = self.run(sa.text(self.strategy.last_insert_id_sql()), {})
        return result.rows[0][0] if result.rows else None
