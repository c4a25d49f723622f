"""
Mock modern connections for adapter and statement tests.

Provides a MySQL-flavoured connection double so MySQL-only behaviour
(DESCRIBE output, server version strings, backtick quoting) can be tested
without a server.

Usage:
    def test_describe(create_mysql_connection):
        conn = create_mysql_connection(rows=[('id', 'int(11)', 'NO', 'PRI', None, 'auto_increment')])
"""
from unittest.mock import MagicMock

import pymysql
import pytest
from dbshim.driver import Connection, PreparedStatement
from dbshim.strategy import MySQLStrategy
from pymysql.constants import SERVER_STATUS


def _create_pymysql_native(no_backslash_escapes=False):
    """
    Unconnected pymysql connection whose escaping follows the given sql_mode flag.
    """
    native = pymysql.connections.Connection(defer_connect=True)
    native.server_status = SERVER_STATUS.SERVER_STATUS_NO_BACKSLASH_ESCAPES if no_backslash_escapes else 0
    return native


def _create_mysql_connection(rows=None, version='8.0.36-0ubuntu0.22.04.1'):
    """
    Create a mock modern connection speaking MySQL.

    Args:
        rows: Rows every prepared statement hands out, in order
        version: Raw server version reported by the native connection

    Returns
        MagicMock standing in for dbshim.driver.Connection
    """
    conn = MagicMock(spec=Connection)
    conn.strategy = MySQLStrategy()
    conn.identifier_quote_character = '`'
    conn.dialect_name = 'mysql'
    conn.get_database.return_value = 'shop'

    pending = list(rows or [])
    stmt = MagicMock(spec=PreparedStatement)
    stmt.execute.return_value = True
    stmt.fetch.side_effect = lambda *args, **kwargs: pending.pop(0) if pending else None
    conn.prepare.return_value = stmt

    native = MagicMock()
    native.get_server_info.return_value = version
    native.escape.side_effect = _create_pymysql_native().escape
    conn.get_native_connection.return_value = native
    conn.quote.side_effect = lambda value: conn.strategy.quote_literal(str(value), native, None)

    return conn


@pytest.fixture
def create_mysql_connection():
    """
    Fixture that provides a factory function to create mock MySQL connections.

    Example usage:
        def test_version(create_mysql_connection):
            conn = create_mysql_connection(version='5.7.44-log')
    """
    def factory(rows=None, version='8.0.36-0ubuntu0.22.04.1'):
        return _create_mysql_connection(rows, version)

    return factory


@pytest.fixture
def create_pymysql_native():
    """
    Fixture that provides a factory for unconnected pymysql connections.

    Example usage:
        def test_escaping(create_pymysql_native):
            native = create_pymysql_native(no_backslash_escapes=True)
    """
    def factory(no_backslash_escapes=False):
        return _create_pymysql_native(no_backslash_escapes)

    return factory
